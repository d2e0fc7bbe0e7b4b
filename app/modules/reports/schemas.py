from pydantic import BaseModel
from typing import Optional, List
from datetime import date


class CategoryTotal(BaseModel):
    name: str
    value: float


class MapPoint(BaseModel):
    id: str
    merchant: Optional[str] = None
    expense_date: Optional[date] = None
    total: float = 0
    latitude: float
    longitude: float


class MonthlyReport(BaseModel):
    year: int
    month: int
    label: str
    count: int
    total: float
    previous_total: float
    change_pct: Optional[float] = None
    categories: List[CategoryTotal]
    top_category: CategoryTotal
    locations: List[MapPoint]
    summary_text: str
