import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import RedirectResponse

from linkstats_app.config import settings
from linkstats_app.api.v1 import dashboard, links, notifications, reports
from linkstats_app.dependencies import get_report_view
from linkstats_app.report.refresher import RefreshWorker

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("linkstats")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Run the periodic report refresher for the lifetime of the app"""
    worker = RefreshWorker(get_report_view())
    worker.start()
    logger.info("%s %s started (%s source)", settings.app_name, settings.app_version, settings.stats_source)
    try:
        yield
    finally:
        await worker.shutdown()


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Click statistics for shortened links",
    debug=settings.debug,
    lifespan=lifespan,
)


@app.get("/")
def read_root():
    """Send browsers to the report page"""
    return RedirectResponse(url="/reports")


@app.get("/health")
def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "environment": settings.environment,
        "stats_source": settings.stats_source,
    }


######## Include routers
app.include_router(links.router, prefix="/api/v1")
app.include_router(reports.router, prefix="/api/v1")
app.include_router(notifications.router, prefix="/api/v1")
app.include_router(dashboard.router)
