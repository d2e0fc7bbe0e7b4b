from pydantic import BaseModel, ConfigDict, field_validator
from typing import Optional, Dict, Any, List
from datetime import date, datetime


class LineItem(BaseModel):
    name: str = ""
    quantity: float = 1
    price: float = 0


class ExpenseCreate(BaseModel):
    merchant: Optional[str] = None
    expense_date: Optional[date] = None
    total: float = 0
    currency: str = "EUR"
    category: Optional[str] = None
    items: List[LineItem] = []
    image_url: Optional[str] = None
    vat_number: Optional[str] = None
    address: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    sent_to_email: Optional[str] = None
    sent_at: Optional[datetime] = None

    @field_validator("currency", mode="before")
    @classmethod
    def upper_currency(cls, v: Any) -> str:
        return str(v or "EUR").strip().upper()


class ExpenseUpdate(BaseModel):
    merchant: Optional[str] = None
    expense_date: Optional[date] = None
    total: Optional[float] = None
    currency: Optional[str] = None
    category: Optional[str] = None
    items: Optional[List[LineItem]] = None
    image_url: Optional[str] = None
    vat_number: Optional[str] = None
    address: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    @field_validator("currency", mode="before")
    @classmethod
    def normalize_currency(cls, v: Any) -> str:
        return str(v or "EUR").strip().upper()


class ExpenseResponse(BaseModel):
    id: str
    user_id: str
    merchant: Optional[str] = None
    expense_date: Optional[date] = None
    total: Optional[float] = None
    currency: str = "EUR"
    category: Optional[str] = None
    items: Optional[List[Dict[str, Any]]] = None
    image_url: Optional[str] = None
    vat_number: Optional[str] = None
    address: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    sent_to_email: Optional[str] = None
    sent_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @field_validator("currency", mode="before")
    @classmethod
    def default_currency(cls, v: Any) -> str:
        return str(v or "EUR").strip().upper()


class ExpensePage(BaseModel):
    items: List[ExpenseResponse]
    has_more: bool
    next_offset: int


class MarkSentRequest(BaseModel):
    recipients: List[str]


class ReceiptImageResponse(BaseModel):
    path: str
    image_url: str
    size_bytes: int
