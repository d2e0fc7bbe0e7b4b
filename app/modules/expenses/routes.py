from fastapi import APIRouter, Depends, HTTPException, Query, UploadFile, File
from app.core.dependencies import get_current_user_id, get_user_supabase
from app.modules.expenses.schemas import (
    ExpenseCreate, ExpenseUpdate, ExpenseResponse, ExpensePage,
    MarkSentRequest, ReceiptImageResponse
)
from app.modules.expenses.service import ExpenseService
from app.modules.receipts.imaging import compress_image
from app.modules.receipts.storage import ReceiptStorage
from supabase import Client
from typing import List, Optional, Dict

router = APIRouter(prefix="/expenses", tags=["expenses"])


def get_expense_service(supabase: Client = Depends(get_user_supabase)) -> ExpenseService:
    return ExpenseService(supabase)


def get_receipt_storage(supabase: Client = Depends(get_user_supabase)) -> ReceiptStorage:
    return ReceiptStorage(supabase)


@router.get("", response_model=ExpensePage)
async def list_expenses(
    offset: int = Query(0, ge=0),
    q: str = "",
    limit: Optional[int] = Query(None, ge=1),
    service: ExpenseService = Depends(get_expense_service),
):
    """List non-deleted expenses newest first; q narrows by merchant, category, amount or date."""
    return service.fetch_page(offset=offset, query=q, limit=limit)


@router.get("/trash", response_model=List[ExpenseResponse])
async def list_deleted_expenses(service: ExpenseService = Depends(get_expense_service)):
    """List soft-deleted expenses that can still be restored"""
    return service.list_trash()


@router.post("", response_model=ExpenseResponse, status_code=201)
async def create_expense(
    expense_data: ExpenseCreate,
    user_data: Dict = Depends(get_current_user_id),
    service: ExpenseService = Depends(get_expense_service)
):
    """Create an expense from reviewed receipt data"""
    return service.create_expense(expense_data, user_data["id"])


@router.post("/receipt-image", response_model=ReceiptImageResponse, status_code=201)
async def upload_receipt_image(
    file: UploadFile = File(...),
    user_data: Dict = Depends(get_current_user_id),
    storage: ReceiptStorage = Depends(get_receipt_storage)
):
    """
    Upload a receipt photo. The image is downscaled and re-encoded as JPEG
    before it is stored in the receipts bucket under the caller's folder.
    """
    if file.content_type and not file.content_type.startswith("image/"):
        raise HTTPException(status_code=400, detail="Only image files are accepted")
    content = await file.read()
    if not content:
        raise HTTPException(status_code=400, detail="Empty file")
    jpeg = compress_image(content)
    try:
        path, url = storage.upload_receipt(user_data["id"], jpeg)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Receipt upload failed: {str(e)}")
    return ReceiptImageResponse(path=path, image_url=url, size_bytes=len(jpeg))


@router.get("/{expense_id}", response_model=ExpenseResponse)
async def get_expense(
    expense_id: str,
    service: ExpenseService = Depends(get_expense_service)
):
    """Get expense by ID"""
    return service.get_expense(expense_id)


@router.put("/{expense_id}", response_model=ExpenseResponse)
async def update_expense(
    expense_id: str,
    expense_data: ExpenseUpdate,
    service: ExpenseService = Depends(get_expense_service)
):
    """Update expense fields"""
    return service.update_expense(expense_id, expense_data)


@router.post("/{expense_id}/sent", response_model=ExpenseResponse)
async def mark_expense_sent(
    expense_id: str,
    body: MarkSentRequest,
    service: ExpenseService = Depends(get_expense_service)
):
    """Record the recipients the expense email went to"""
    return service.mark_sent(expense_id, body.recipients)


@router.delete("/{expense_id}", response_model=ExpenseResponse)
async def delete_expense(
    expense_id: str,
    service: ExpenseService = Depends(get_expense_service)
):
    """Move expense to the trash (soft delete)"""
    return service.soft_delete_expense(expense_id)


@router.post("/{expense_id}/restore", response_model=ExpenseResponse)
async def restore_expense(
    expense_id: str,
    service: ExpenseService = Depends(get_expense_service)
):
    """Restore a soft-deleted expense"""
    return service.restore_expense(expense_id)


@router.delete("/{expense_id}/permanent", status_code=204)
async def permanently_delete_expense(
    expense_id: str,
    service: ExpenseService = Depends(get_expense_service)
):
    """Delete expense permanently"""
    if not service.delete_expense(expense_id):
        raise HTTPException(status_code=404, detail="Expense not found")
    return None
