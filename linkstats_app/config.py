from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Loading priority (highest to lowest):
    1. Environment variables
    2. .env file
    3. Default values below

    The upstream API key is only ever read from here, never from source code.
    """

    # Environment
    environment: str = "development"
    debug: bool = True
    log_level: str = "INFO"

    # Application
    app_name: str = "Link Stats Dashboard"
    app_version: str = "1.0.0"

    # Stats source
    stats_source: str = "mock"  # Options: "linkly", "mock"
    linkly_base_url: str = "https://app.linklyhq.com/api/v1"
    linkly_api_key: str = ""
    linkly_workspace_id: str = ""
    linkly_timeout: float = 10.0  # Seconds per upstream request
    linkly_page_size: int = 100
    timezone: str = "UTC"  # Timezone for daily click buckets

    # Sparkline
    sparkline_days: int = 7
    sparkline_width: int = 100
    sparkline_height: int = 30
    sparkline_color: str = "#0EA5E9"

    # Cache settings
    cache_backend: str = "memory"  # Options: "redis", "memory", "null"
    redis_url: str = "redis://localhost:6379/0"
    cache_ttl: int = 60  # Upstream payloads are cached for one minute

    # Report refresh
    refresh_interval: int = 300  # Every 5 minutes
    refresh_on_startup: bool = True
    notification_ttl: int = 10  # Seconds a notification stays visible

    # Pydantic v2 configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


# Create settings instance
settings = Settings()
