"""
Dashboard page.

Server-rendered table of the report view with an inline sparkline per row.
Form posts mutate the view and redirect back to the page.
"""

from pathlib import Path

from fastapi import APIRouter, Depends, Form, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from linkstats_app.config import settings
from linkstats_app.dependencies import get_notifier, get_report_view
from linkstats_app.notifications import NotificationCenter
from linkstats_app.report.view import ReportView
from linkstats_app.sparkline import sparkline_svg

TEMPLATES_DIR = Path(__file__).resolve().parents[2] / "templates"
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

router = APIRouter(prefix="/reports", tags=["dashboard"])


@router.get("", response_class=HTMLResponse)
async def reports_page(
    request: Request,
    view: ReportView = Depends(get_report_view),
    notifier: NotificationCenter = Depends(get_notifier),
):
    """Render the link report table"""
    rows = [
        {
            "link": row,
            "sparkline": sparkline_svg(
                row.sparkline_data,
                width=settings.sparkline_width,
                height=settings.sparkline_height,
                color=settings.sparkline_color,
            ),
        }
        for row in view.visible_rows()
    ]
    return templates.TemplateResponse(
        request,
        "reports.html",
        {
            "title": settings.app_name,
            "view": view,
            "rows": rows,
            "notifications": notifier.active(),
        },
    )


@router.post("/toggle-robots")
async def toggle_robots(view: ReportView = Depends(get_report_view)):
    """Switch between human-only and all traffic"""
    await view.set_filter(view.filter.model_copy(update={"filter_robots": not view.filter.filter_robots}))
    return RedirectResponse(url="/reports", status_code=status.HTTP_303_SEE_OTHER)


@router.post("/search")
async def search(
    term: str = Form(""),
    view: ReportView = Depends(get_report_view),
):
    await view.submit_search(term)
    return RedirectResponse(url="/reports", status_code=status.HTTP_303_SEE_OTHER)
