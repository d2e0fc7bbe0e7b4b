"""
Decoding of the model's free-text answer into a receipt record.

The model is asked for bare JSON but may wrap it in prose or code fences, so
decode_receipt_json() scans for the first balanced ``{...}`` object and
returns a DecodeResult instead of raising. sanitize_receipt() then coerces
every field, falling back to defaults for anything missing or malformed.
"""
import json
import re
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

EXTRACTION_PROMPT = """Sei un estrattore dati per note spese. Analizza l'immagine dello scontrino.

LOGICA GEOGRAFICA (Cruciale):
- Cerca indirizzi o riferimenti a città nello scontrino.
- SE trovi "Milano" o indirizzi di Milano -> Usa categorie che finiscono con "...Comune" (es. "Vitto Comune", "Alloggio Comune").
- SE trovi città DIVERSE da Milano -> Usa categorie che finiscono con "...Oltre Comune" (es. "Vitto Oltre Comune", "Alloggio Oltre Comune").
- SE trovi valuta non Euro o riferimenti esteri -> Usa "...Estero".
- Altre categorie ammesse: "Taxi", "Spese trasporti", "Spese Rappresentanza", "Altri Costi".

FORMATO OUTPUT:
Restituisci ESCLUSIVAMENTE un oggetto JSON valido, senza testo prima o dopo:
{"merchant": "Nome Esercente", "date": "YYYY-MM-DD", "total": 12.50, "currency": "EUR", "category": "Vitto Comune", "vat_number": "P.IVA se presente", "address": "Via, numero, città", "items": [{"name": "Descrizione", "quantity": 1, "price": 12.50}]}

Se un campo non è leggibile usa null."""

DEFAULT_MERCHANT = "Sconosciuto"
DEFAULT_CURRENCY = "EUR"
DEFAULT_CATEGORY = "Altro"

_DATE_FORMATS = ("%Y-%m-%d", "%d/%m/%Y", "%d-%m-%Y", "%d.%m.%Y", "%d/%m/%y", "%Y/%m/%d")
_CURRENCY_SYMBOLS = {"€": "EUR", "$": "USD", "£": "GBP", "CHF": "CHF"}


class DecodeResult(BaseModel):
    ok: bool
    data: Dict[str, Any] = {}
    error: Optional[str] = None


def find_json_object(text: str) -> Optional[str]:
    """Return the first balanced {...} region of text, honouring JSON string escapes."""
    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for i in range(start, len(text)):
            ch = text[i]
            if in_string:
                if escaped:
                    escaped = False
                elif ch == "\\":
                    escaped = True
                elif ch == '"':
                    in_string = False
                continue
            if ch == '"':
                in_string = True
            elif ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    return text[start:i + 1]
        # unbalanced from this brace; try the next one
        start = text.find("{", start + 1)
    return None


def decode_receipt_json(raw_text: str) -> DecodeResult:
    if not raw_text or "{" not in raw_text:
        return DecodeResult(ok=False, error="Formato risposta non riconosciuto: nessun oggetto JSON")
    candidate = find_json_object(raw_text)
    if candidate is None:
        return DecodeResult(ok=False, error="Formato risposta non riconosciuto: JSON incompleto")
    try:
        data = json.loads(candidate)
    except ValueError as e:
        return DecodeResult(ok=False, error=f"JSON non valido nella risposta AI: {e}")
    if not isinstance(data, dict):
        return DecodeResult(ok=False, error="Formato risposta non riconosciuto")
    return DecodeResult(ok=True, data=data)


def parse_amount(value: Any) -> float:
    """Numbers pass through; strings accept Italian and English separators: '12,50', '1.234,56', '€ 8.90'."""
    if isinstance(value, bool) or value is None:
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    text = re.sub(r"[^0-9.,\-]", "", str(value))
    if not text:
        return 0.0
    if "," in text and "." in text:
        if text.rfind(",") > text.rfind("."):
            text = text.replace(".", "").replace(",", ".")
        else:
            text = text.replace(",", "")
    elif "," in text:
        text = text.replace(",", ".")
    try:
        return float(text)
    except ValueError:
        return 0.0


def parse_date(value: Any, today: Optional[date] = None) -> str:
    today = today or date.today()
    if isinstance(value, (date, datetime)):
        return (value.date() if isinstance(value, datetime) else value).isoformat()
    text = str(value or "").strip()
    if text:
        for fmt in _DATE_FORMATS:
            try:
                return datetime.strptime(text[:10], fmt).date().isoformat()
            except ValueError:
                continue
    return today.isoformat()


def parse_currency(value: Any) -> str:
    text = str(value or "").strip().upper()
    if text in _CURRENCY_SYMBOLS:
        return _CURRENCY_SYMBOLS[text]
    if len(text) == 3 and text.isalpha():
        return text
    return DEFAULT_CURRENCY


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def parse_items(value: Any) -> List[Dict[str, Any]]:
    if not isinstance(value, list):
        return []
    items = []
    for raw in value:
        if not isinstance(raw, dict):
            continue
        name = _text(raw.get("name") or raw.get("description"))
        if not name:
            continue
        quantity = parse_amount(raw.get("quantity")) or 1.0
        items.append({"name": name, "quantity": quantity, "price": parse_amount(raw.get("price"))})
    return items


def sanitize_receipt(data: Dict[str, Any], today: Optional[date] = None) -> Dict[str, Any]:
    """Coerce a decoded model answer into the expense shape.

    Older prompts answered with amount/description; both are read as total/merchant.
    """
    total = data.get("total", data.get("amount"))
    return {
        "merchant": _text(data.get("merchant") or data.get("description")) or DEFAULT_MERCHANT,
        "date": parse_date(data.get("date"), today=today),
        "total": parse_amount(total),
        "currency": parse_currency(data.get("currency")),
        "category": _text(data.get("category")) or DEFAULT_CATEGORY,
        "items": parse_items(data.get("items")),
        "vat_number": _text(data.get("vat_number")),
        "address": _text(data.get("address")),
    }
