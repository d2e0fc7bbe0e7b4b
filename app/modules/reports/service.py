from collections import defaultdict
from typing import List, Tuple

from app.core.locale import format_amount, format_month_year
from app.modules.expenses.schemas import ExpenseResponse
from app.modules.expenses.service import ExpenseService
from app.modules.reports.csv_export import build_export_csv, build_monthly_csv, monthly_filename
from app.modules.reports.schemas import CategoryTotal, MapPoint, MonthlyReport

UNCATEGORIZED = "Altro"


def category_breakdown(expenses: List[ExpenseResponse]) -> List[CategoryTotal]:
    totals = defaultdict(float)
    for e in expenses:
        totals[e.category or UNCATEGORIZED] += e.total or 0
    return sorted(
        (CategoryTotal(name=name, value=round(value, 2)) for name, value in totals.items()),
        key=lambda c: c.value,
        reverse=True,
    )


def map_points(expenses: List[ExpenseResponse]) -> List[MapPoint]:
    return [
        MapPoint(
            id=e.id,
            merchant=e.merchant,
            expense_date=e.expense_date,
            total=e.total or 0,
            latitude=e.latitude,
            longitude=e.longitude,
        )
        for e in expenses
        if e.latitude is not None and e.longitude is not None
    ]


def summary_text(label: str, total: float, categories: List[CategoryTotal]) -> str:
    lines = [f"Report Spese - {label}", "", f"Totale: €{format_amount(total)}", "", "Dettaglio Categorie:"]
    lines.extend(f"- {c.name}: €{format_amount(c.value)}" for c in categories)
    return "\n".join(lines)


def previous_month(year: int, month: int) -> Tuple[int, int]:
    return (year - 1, 12) if month == 1 else (year, month - 1)


def summarize_month(
    expenses: List[ExpenseResponse], year: int, month: int, previous_total: float = 0.0
) -> MonthlyReport:
    total = round(sum(e.total or 0 for e in expenses), 2)
    categories = category_breakdown(expenses)
    label = format_month_year(year, month)
    change_pct = None
    if previous_total:
        change_pct = round((total - previous_total) / previous_total * 100, 1)
    return MonthlyReport(
        year=year,
        month=month,
        label=label,
        count=len(expenses),
        total=total,
        previous_total=round(previous_total, 2),
        change_pct=change_pct,
        categories=categories,
        top_category=categories[0] if categories else CategoryTotal(name="Nessuna", value=0),
        locations=map_points(expenses),
        summary_text=summary_text(label, total, categories),
    )


class ReportService:
    def __init__(self, expense_service: ExpenseService):
        self.expenses = expense_service

    def export_csv(self) -> str:
        return build_export_csv(self.expenses.list_active())

    def monthly_report(self, year: int, month: int) -> MonthlyReport:
        current = self.expenses.list_month(year, month)
        prev_year, prev_month = previous_month(year, month)
        previous_total = sum(e.total or 0 for e in self.expenses.list_month(prev_year, prev_month))
        return summarize_month(current, year, month, previous_total)

    def monthly_csv(self, year: int, month: int) -> Tuple[str, str]:
        return monthly_filename(year, month), build_monthly_csv(self.expenses.list_month(year, month))
