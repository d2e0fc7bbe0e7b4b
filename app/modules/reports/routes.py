from fastapi import APIRouter, Depends, Query, Response
from app.modules.expenses.routes import get_expense_service
from app.modules.expenses.service import ExpenseService
from app.modules.reports.csv_export import EXPORT_FILENAME
from app.modules.reports.schemas import MonthlyReport
from app.modules.reports.service import ReportService

router = APIRouter(prefix="/reports", tags=["reports"])

CSV_MEDIA_TYPE = "text/csv; charset=utf-8"


def get_report_service(expense_service: ExpenseService = Depends(get_expense_service)) -> ReportService:
    return ReportService(expense_service)


def _csv_response(content: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type=CSV_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/export.csv")
async def export_expenses_csv(service: ReportService = Depends(get_report_service)):
    """Download every non-deleted expense as CSV"""
    return _csv_response(service.export_csv(), EXPORT_FILENAME)


@router.get("/monthly", response_model=MonthlyReport)
async def get_monthly_report(
    year: int = Query(..., ge=2000, le=2100),
    month: int = Query(..., ge=1, le=12),
    service: ReportService = Depends(get_report_service),
):
    """Monthly total, category breakdown, map points and shareable summary"""
    return service.monthly_report(year, month)


@router.get("/monthly/export.csv")
async def export_monthly_csv(
    year: int = Query(..., ge=2000, le=2100),
    month: int = Query(..., ge=1, le=12),
    service: ReportService = Depends(get_report_service),
):
    """Download one month of expenses as CSV"""
    filename, content = service.monthly_csv(year, month)
    return _csv_response(content, filename)
