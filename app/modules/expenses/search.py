"""Free-text matching of expenses, applied in Python over a capped fetch."""
from typing import Iterable, List

from app.core.locale import amount_to_str, format_long_date, format_weekday
from app.modules.expenses.schemas import ExpenseResponse


def searchable_fields(expense: ExpenseResponse) -> List[str]:
    """Lower-cased strings a query may match: merchant, category, amount and Italian date forms."""
    amount = amount_to_str(expense.total)
    return [
        (expense.merchant or "").lower(),
        (expense.category or "").lower(),
        amount,
        amount.replace(".", ","),
        format_long_date(expense.expense_date).lower(),
        format_weekday(expense.expense_date).lower(),
    ]


def matches_query(expense: ExpenseResponse, query: str) -> bool:
    needle = (query or "").strip().lower()
    if not needle:
        return True
    return any(needle in field for field in searchable_fields(expense) if field)


def filter_expenses(expenses: Iterable[ExpenseResponse], query: str) -> List[ExpenseResponse]:
    return [e for e in expenses if matches_query(e, query)]
