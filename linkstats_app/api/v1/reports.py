from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import StreamingResponse

from linkstats_app.dependencies import get_report_view
from linkstats_app.report.view import ReportView
from linkstats_app.schemas.stats import ExportFormat, ReportSnapshot, SearchSubmit, StatsFilter

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("", response_model=ReportSnapshot)
async def get_report(view: ReportView = Depends(get_report_view)):
    """Current report state and visible rows"""
    return view.snapshot()


@router.put("/filter", response_model=ReportSnapshot)
async def replace_filter(
    stats_filter: StatsFilter,
    view: ReportView = Depends(get_report_view),
):
    """Replace the report filter; refetches only when the filter changed"""
    await view.set_filter(stats_filter)
    return view.snapshot()


@router.post("/search", response_model=ReportSnapshot)
async def submit_search(
    search: SearchSubmit,
    view: ReportView = Depends(get_report_view),
):
    """Set the client-side name search and refetch"""
    await view.submit_search(search.term)
    return view.snapshot()


@router.post("/refresh", response_model=ReportSnapshot, status_code=status.HTTP_200_OK)
async def refresh_report(view: ReportView = Depends(get_report_view)):
    """Refetch now, regardless of the filter"""
    await view.refresh("manual")
    return view.snapshot()


@router.get("/export")
async def export_report(
    format: ExportFormat = Query(ExportFormat.CSV),
    include_country: bool = Query(False, description="Append a Country column to CSV"),
    view: ReportView = Depends(get_report_view),
):
    """Download the visible rows as reports.csv or reports.json"""
    payload = view.export(format, include_country=include_country)
    return StreamingResponse(
        iter([payload.content]),
        media_type=payload.media_type,
        headers={"Content-Disposition": f"attachment; filename={payload.filename}"},
    )
