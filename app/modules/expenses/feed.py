"""
In-memory mirror of the caller's expense list.

ExpenseListState is immutable; the reducers below return new states. ExpenseFeed
applies a reducer only after the matching remote call has succeeded, and keeps
the previous state when a call fails.
"""
from datetime import date
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from app.modules.expenses.schemas import ExpenseCreate, ExpensePage, ExpenseResponse, ExpenseUpdate
from app.modules.expenses.service import ExpenseService
import logging

logger = logging.getLogger(__name__)


class ExpenseListState(BaseModel):
    model_config = ConfigDict(frozen=True)

    items: Tuple[ExpenseResponse, ...] = ()
    has_more: bool = True
    query: str = ""

    def ids(self) -> List[str]:
        return [e.id for e in self.items]


def _sort_key(expense: ExpenseResponse):
    return (expense.expense_date or date.min, expense.created_at)


def apply_page(state: ExpenseListState, page: ExpensePage, initial: bool, query: str = "") -> ExpenseListState:
    if initial:
        return ExpenseListState(
            items=tuple(page.items), has_more=page.has_more, query=query
        )
    known = set(state.ids())
    fresh = tuple(e for e in page.items if e.id not in known)
    return state.model_copy(update={
        "items": state.items + fresh,
        "has_more": page.has_more,
    })


def prepend(state: ExpenseListState, expense: ExpenseResponse) -> ExpenseListState:
    rest = tuple(e for e in state.items if e.id != expense.id)
    return state.model_copy(update={"items": (expense,) + rest})


def remove(state: ExpenseListState, expense_id: str) -> ExpenseListState:
    return state.model_copy(update={"items": tuple(e for e in state.items if e.id != expense_id)})


def replace(state: ExpenseListState, expense: ExpenseResponse) -> ExpenseListState:
    return state.model_copy(update={
        "items": tuple(expense if e.id == expense.id else e for e in state.items)
    })


def insert_sorted(state: ExpenseListState, expense: ExpenseResponse) -> ExpenseListState:
    """Place a restored expense at its date position (newest first)."""
    items = [e for e in state.items if e.id != expense.id] + [expense]
    items.sort(key=_sort_key, reverse=True)
    return state.model_copy(update={"items": tuple(items)})


class ExpenseFeed:
    def __init__(self, service: ExpenseService, user_id: str, limit: Optional[int] = None):
        self.service = service
        self.user_id = user_id
        self.limit = limit
        self.state = ExpenseListState()
        self.last_added_id: Optional[str] = None

    @property
    def expenses(self) -> Tuple[ExpenseResponse, ...]:
        return self.state.items

    def refresh(self, query: str = "") -> ExpenseListState:
        try:
            page = self.service.fetch_page(offset=0, query=query, limit=self.limit)
        except Exception as e:
            logger.error("Error fetching expenses: %s", e)
            return self.state
        self.state = apply_page(self.state, page, initial=True, query=query)
        return self.state

    def load_more(self) -> ExpenseListState:
        if not self.state.has_more:
            return self.state
        try:
            # local deletes and adds mirror the remote list, so its length is the next offset
            page = self.service.fetch_page(offset=len(self.state.items), query=self.state.query, limit=self.limit)
        except Exception as e:
            logger.error("Error loading more expenses: %s", e)
            return self.state
        self.state = apply_page(self.state, page, initial=False)
        return self.state

    def add(self, expense_data: ExpenseCreate) -> Optional[ExpenseResponse]:
        try:
            created = self.service.create_expense(expense_data, self.user_id)
        except Exception as e:
            logger.error("Error adding expense: %s", e)
            return None
        self.state = prepend(self.state, created)
        self.last_added_id = created.id
        return created

    def update(self, expense_id: str, expense_data: ExpenseUpdate) -> Optional[ExpenseResponse]:
        try:
            updated = self.service.update_expense(expense_id, expense_data)
        except Exception as e:
            logger.error("Error updating expense %s: %s", expense_id, e)
            return None
        self.state = replace(self.state, updated)
        return updated

    def soft_delete(self, expense_id: str) -> bool:
        try:
            self.service.soft_delete_expense(expense_id)
        except Exception as e:
            logger.error("Error deleting expense %s: %s", expense_id, e)
            return False
        self.state = remove(self.state, expense_id)
        return True

    def restore(self, expense_id: str) -> bool:
        try:
            restored = self.service.restore_expense(expense_id)
        except Exception as e:
            logger.error("Error restoring expense %s: %s", expense_id, e)
            return False
        self.state = insert_sorted(self.state, restored)
        return True

    def hard_delete(self, expense_id: str) -> bool:
        try:
            deleted = self.service.delete_expense(expense_id)
        except Exception as e:
            logger.error("Error permanently deleting expense %s: %s", expense_id, e)
            return False
        if deleted:
            self.state = remove(self.state, expense_id)
        return deleted

    def trash(self) -> List[ExpenseResponse]:
        try:
            return self.service.list_trash()
        except Exception as e:
            logger.error("Error fetching deleted expenses: %s", e)
            return []
