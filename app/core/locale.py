"""Italian date and amount formatting shared by search, emails and reports."""
from datetime import date, datetime
from typing import Optional, Union

MONTHS_IT = [
    "gennaio", "febbraio", "marzo", "aprile", "maggio", "giugno",
    "luglio", "agosto", "settembre", "ottobre", "novembre", "dicembre",
]
WEEKDAYS_IT = [
    "lunedì", "martedì", "mercoledì", "giovedì", "venerdì", "sabato", "domenica",
]

DateLike = Union[date, datetime, str, None]


def to_date(value: DateLike) -> Optional[date]:
    """Accept a date, datetime or ISO string (date or timestamp); None when unparseable."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def format_long_date(value: DateLike) -> str:
    """1 marzo 2024"""
    d = to_date(value)
    if d is None:
        return ""
    return f"{d.day} {MONTHS_IT[d.month - 1]} {d.year}"


def format_weekday(value: DateLike) -> str:
    d = to_date(value)
    if d is None:
        return ""
    return WEEKDAYS_IT[d.weekday()]


def format_month_year(year: int, month: int) -> str:
    return f"{MONTHS_IT[month - 1]} {year}"


def format_short_date(value: DateLike) -> str:
    """dd/MM/yyyy"""
    d = to_date(value)
    if d is None:
        return ""
    return d.strftime("%d/%m/%Y")


def format_amount(value: Optional[float]) -> str:
    """1234.5 -> '1.234,50'"""
    text = f"{float(value or 0):,.2f}"
    return text.replace(",", "_").replace(".", ",").replace("_", ".")


def amount_to_str(value: Optional[float]) -> str:
    """Shortest plain form of an amount, as a user would type it: 12.5, 12, 0.99."""
    if value is None:
        return ""
    number = float(value)
    if number.is_integer():
        return str(int(number))
    return repr(number)
