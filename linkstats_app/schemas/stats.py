from datetime import date
from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class SortKey(str, Enum):
    """Columns the report can be sorted by"""
    NAME = "name"
    TODAY = "today"
    THIRTY_DAY = "thirty_day"
    TOTAL = "total"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class ExportFormat(str, Enum):
    CSV = "csv"
    JSON = "json"


class DateRange(BaseModel):
    """Inclusive range of calendar days"""
    start: date
    end: date

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def check_order(self) -> "DateRange":
        if self.start > self.end:
            raise ValueError("start must not be after end")
        return self


class LinkStat(BaseModel):
    """
    One report row per tracked link.

    Built fresh on every fetch and never mutated afterwards (frozen).
    JSON output uses camelCase aliases so exports match the dashboard columns.
    """
    id: str
    name: str
    sparkline_data: List[int] = Field(default_factory=list, alias="sparklineData")
    today: int = 0
    thirty_day: int = Field(0, alias="thirtyDay")
    total: int = 0
    is_robot: bool = Field(False, alias="isRobot")
    country: str = ""

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class StatsFilter(BaseModel):
    """
    Immutable filter value passed into StatsService.fetch.

    Two filters with equal fields are the same filter; the report view
    only refetches when this identity changes.
    """
    filter_robots: bool = True
    countries: Optional[Tuple[str, ...]] = None
    search: Optional[str] = None
    date_range: Optional[DateRange] = None
    sort_by: Optional[SortKey] = None
    sort_dir: SortDirection = SortDirection.DESC

    model_config = ConfigDict(frozen=True)

    @field_validator("countries", mode="before")
    @classmethod
    def normalize_countries(cls, value):
        if value is None:
            return None
        if isinstance(value, str):
            value = value.split(",")
        countries = tuple(c.strip() for c in value if c and c.strip())
        return countries or None

    @field_validator("search")
    @classmethod
    def blank_search_is_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        return value.strip()


class ReportSnapshot(BaseModel):
    """Current state of the report view as returned by the API"""
    state: str
    filter: StatsFilter
    search_term: str = ""
    rows: List[LinkStat]
    last_refreshed: Optional[str] = None


class SearchSubmit(BaseModel):
    term: str = Field("", description="Case-insensitive substring matched against link names")
