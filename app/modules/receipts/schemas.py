from pydantic import BaseModel
from typing import Optional, List


class AnalyzeRequest(BaseModel):
    image: str = ""  # base64 or data URL ("data:image/jpeg;base64,...")


class ReceiptItem(BaseModel):
    name: str
    quantity: float = 1
    price: float = 0


class ReceiptData(BaseModel):
    merchant: str
    date: str
    total: float
    currency: str = "EUR"
    category: str
    items: List[ReceiptItem] = []
    vat_number: Optional[str] = None
    address: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class AnalyzeResponse(BaseModel):
    success: bool = True
    data: ReceiptData
