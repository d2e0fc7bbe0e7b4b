from typing import Iterable, List

from app.core.locale import amount_to_str, format_short_date
from app.modules.expenses.schemas import ExpenseResponse

EXPORT_HEADER = ["Data", "Esercente", "Importo", "Valuta", "Categoria"]
MONTHLY_HEADER = ["Data", "Esercente", "Categoria", "Importo"]
EXPORT_FILENAME = "nota-spese-export.csv"


def _quote(cell: str) -> str:
    return '"' + str(cell).replace('"', '""') + '"'


def _render(header: List[str], rows: Iterable[List[str]]) -> str:
    """Bare header line followed by fully quoted data rows, newline separated."""
    lines = [",".join(header)]
    lines.extend(",".join(_quote(cell) for cell in row) for row in rows)
    return "\n".join(lines)


def build_export_csv(expenses: Iterable[ExpenseResponse]) -> str:
    """Archive export, one row per non-deleted expense."""
    rows = (
        [
            e.expense_date.isoformat() if e.expense_date else "",
            e.merchant or "",
            amount_to_str(e.total),
            e.currency or "EUR",
            e.category or "",
        ]
        for e in expenses
        if e.deleted_at is None
    )
    return _render(EXPORT_HEADER, rows)


def build_monthly_csv(expenses: Iterable[ExpenseResponse]) -> str:
    rows = (
        [
            format_short_date(e.expense_date),
            e.merchant or "",
            e.category or "",
            amount_to_str(e.total or 0),
        ]
        for e in expenses
        if e.deleted_at is None
    )
    return _render(MONTHLY_HEADER, rows)


def monthly_filename(year: int, month: int) -> str:
    return f"report_{year:04d}_{month:02d}.csv"
