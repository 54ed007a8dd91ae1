from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import ValidationError

from linkstats_app.dependencies import get_stats_service
from linkstats_app.schemas.stats import DateRange, LinkStat, SortDirection, SortKey, StatsFilter
from linkstats_app.services.stats_service import StatsService

router = APIRouter(prefix="/links", tags=["links"])


def stats_filter_params(
    filter_robots: bool = Query(True, description="Exclude robot traffic"),
    countries: Optional[List[str]] = Query(None, description="Country allow-list; repeat or comma-separate"),
    search: Optional[str] = Query(None, description="Case-insensitive name search"),
    start: Optional[date] = Query(None, description="First day of the report window"),
    end: Optional[date] = Query(None, description="Last day of the report window"),
    sort_by: Optional[SortKey] = Query(None),
    sort_dir: SortDirection = Query(SortDirection.DESC),
) -> StatsFilter:
    """Build an immutable StatsFilter from query parameters"""
    if countries:
        countries = [c for value in countries for c in value.split(",")]

    try:
        date_range = None
        if start is not None or end is not None:
            end = end or start
            date_range = DateRange(start=start or end, end=end)
        return StatsFilter(
            filter_robots=filter_robots,
            countries=countries,
            search=search,
            date_range=date_range,
            sort_by=sort_by,
            sort_dir=sort_dir,
        )
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))


@router.get("/stats", response_model=List[LinkStat])
async def get_link_stats(
    stats_filter: StatsFilter = Depends(stats_filter_params),
    stats_service: StatsService = Depends(get_stats_service),
):
    """Fetch report rows for a filter (stateless; never fails on upstream errors)"""
    return await stats_service.fetch(stats_filter)
