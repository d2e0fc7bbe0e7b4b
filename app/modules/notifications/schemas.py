from pydantic import BaseModel, ConfigDict, Field, AliasChoices, field_validator
from typing import Optional, List, Union, Any
from app.modules.receipts.extraction import parse_amount


class ExpenseEmailItem(BaseModel):
    name: str = ""
    quantity: float = 1
    price: float = 0

    @field_validator("quantity", "price", mode="before")
    @classmethod
    def coerce_number(cls, v: Any) -> float:
        return parse_amount(v)


class ExpenseEmailData(BaseModel):
    merchant: Optional[str] = None
    date: Optional[str] = Field(None, validation_alias=AliasChoices("date", "expense_date"))
    total: float = 0
    currency: str = "EUR"
    category: Optional[str] = None
    items: List[ExpenseEmailItem] = []

    @field_validator("total", mode="before")
    @classmethod
    def coerce_total(cls, v: Any) -> float:
        return parse_amount(v)

    @field_validator("currency", mode="before")
    @classmethod
    def default_currency(cls, v: Any) -> str:
        return str(v or "EUR").strip().upper()

    @field_validator("items", mode="before")
    @classmethod
    def default_items(cls, v: Any) -> list:
        return v or []


class SendEmailRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    to: Union[str, List[str]] = []
    expense: Optional[ExpenseEmailData] = None
    image_base64: str = Field("", alias="imageBase64")

    def recipients(self) -> List[str]:
        raw = [self.to] if isinstance(self.to, str) else list(self.to)
        return [addr.strip() for addr in raw if addr and addr.strip()]


class SendEmailResponse(BaseModel):
    success: bool = True
    id: Optional[str] = None
