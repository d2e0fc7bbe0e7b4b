from supabase import Client
from app.config import settings
from app.modules.expenses.schemas import ExpenseCreate, ExpenseUpdate, ExpenseResponse, ExpensePage
from app.modules.expenses.search import filter_expenses
from app.modules.receipts.storage import ReceiptStorage
from typing import List, Optional
from fastapi import HTTPException
from datetime import date, datetime, timezone
import logging

logger = logging.getLogger(__name__)

TABLE = "expenses"
# PostgREST caps a single response at 1000 rows by default
EXPORT_BATCH_SIZE = 1000


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class ExpenseService:
    def __init__(self, supabase: Client, storage: Optional[ReceiptStorage] = None):
        self.supabase = supabase
        self.storage = storage or ReceiptStorage(supabase)
        self.page_size = settings.page_size
        self.search_limit = settings.search_limit

    def _active_query(self):
        return self.supabase.table(TABLE)\
            .select("*")\
            .is_("deleted_at", "null")\
            .order("expense_date", desc=True)\
            .order("created_at", desc=True)

    def fetch_page(self, offset: int = 0, query: str = "", limit: Optional[int] = None) -> ExpensePage:
        """One page of non-deleted expenses, newest first.

        A non-blank query fetches up to search_limit rows and filters them here;
        such a result and an explicitly limited one never have more pages.
        """
        try:
            searching = bool((query or "").strip())
            q = self._active_query()
            if limit:
                q = q.limit(limit)
            elif searching:
                q = q.limit(self.search_limit)
            else:
                q = q.range(offset, offset + self.page_size - 1)

            result = q.execute()
            rows = result.data or []
            items = [ExpenseResponse(**row) for row in rows]
            if searching:
                items = filter_expenses(items, query)

            has_more = not limit and not searching and len(rows) == self.page_size
            return ExpensePage(items=items, has_more=has_more, next_offset=offset + len(rows))
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error fetching expenses: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def list_active(self) -> List[ExpenseResponse]:
        """Every non-deleted expense, newest first (used by exports)."""
        try:
            expenses: List[ExpenseResponse] = []
            start = 0
            while True:
                result = self._active_query()\
                    .range(start, start + EXPORT_BATCH_SIZE - 1)\
                    .execute()
                rows = result.data or []
                expenses.extend(ExpenseResponse(**row) for row in rows)
                if len(rows) < EXPORT_BATCH_SIZE:
                    return expenses
                start += EXPORT_BATCH_SIZE
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_month(self, year: int, month: int) -> List[ExpenseResponse]:
        """Non-deleted expenses dated within the given calendar month."""
        first = date(year, month, 1)
        following = date(year + 1, 1, 1) if month == 12 else date(year, month + 1, 1)
        try:
            result = self.supabase.table(TABLE)\
                .select("*")\
                .is_("deleted_at", "null")\
                .gte("expense_date", first.isoformat())\
                .lt("expense_date", following.isoformat())\
                .order("expense_date", desc=True)\
                .execute()
            return [ExpenseResponse(**row) for row in (result.data or [])]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_trash(self) -> List[ExpenseResponse]:
        """Soft-deleted expenses, most recently deleted first"""
        try:
            result = self.supabase.table(TABLE)\
                .select("*")\
                .not_.is_("deleted_at", "null")\
                .order("deleted_at", desc=True)\
                .execute()
            return [ExpenseResponse(**row) for row in (result.data or [])]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_expense(self, expense_id: str) -> ExpenseResponse:
        """Get expense by ID"""
        try:
            result = self.supabase.table(TABLE)\
                .select("*")\
                .eq("id", expense_id)\
                .maybe_single()\
                .execute()

            if not result or not result.data:
                raise HTTPException(status_code=404, detail="Expense not found")

            return ExpenseResponse(**result.data)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_expense(self, expense_data: ExpenseCreate, user_id: str) -> ExpenseResponse:
        """Create a new expense owned by user_id"""
        try:
            insert_data = expense_data.model_dump(mode="json", exclude_none=True)
            insert_data["user_id"] = user_id

            result = self.supabase.table(TABLE).insert(insert_data).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create expense")

            logger.info("Created expense %s for user %s", result.data[0].get("id"), user_id)
            return ExpenseResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_expense(self, expense_id: str, expense_data: ExpenseUpdate) -> ExpenseResponse:
        """Replace the fields present in expense_data"""
        update_data = expense_data.model_dump(mode="json", exclude_unset=True)
        if not update_data:
            return self.get_expense(expense_id)
        update_data["updated_at"] = _now()
        return self._update(expense_id, update_data)

    def soft_delete_expense(self, expense_id: str) -> ExpenseResponse:
        return self._update(expense_id, {"deleted_at": _now()})

    def restore_expense(self, expense_id: str) -> ExpenseResponse:
        return self._update(expense_id, {"deleted_at": None})

    def mark_sent(self, expense_id: str, recipients: List[str]) -> ExpenseResponse:
        """Record who the expense was last emailed to"""
        return self._update(expense_id, {
            "sent_to_email": ", ".join(recipients),
            "sent_at": _now(),
        })

    def _update(self, expense_id: str, update_data: dict) -> ExpenseResponse:
        try:
            result = self.supabase.table(TABLE)\
                .update(update_data)\
                .eq("id", expense_id)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="Expense not found")

            return ExpenseResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_expense(self, expense_id: str) -> bool:
        """Permanently delete expense and, when stored in our bucket, its receipt image"""
        try:
            result = self.supabase.table(TABLE)\
                .delete()\
                .eq("id", expense_id)\
                .execute()

            if not result.data:
                return False

            key = self.storage.path_from_public_url(result.data[0].get("image_url"))
            if key:
                self.storage.delete_file(key)
            return True
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
