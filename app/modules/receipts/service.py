import logging
from typing import Any, Dict, Optional

import requests

from app.config import settings
from app.core.errors import (
    ConfigurationError, ReceiptParseError, RequestValidationFailed, UpstreamServiceError
)
from app.modules.receipts.extraction import EXTRACTION_PROMPT, decode_receipt_json, sanitize_receipt
from app.modules.receipts.geocoding import Geocoder
from app.modules.receipts.imaging import split_data_url
from app.modules.receipts.schemas import ReceiptData

logger = logging.getLogger(__name__)


class ReceiptAnalyzer:
    """Sends a receipt photo to Gemini and turns the answer into a ReceiptData."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        session: Optional[requests.Session] = None,
        geocoder: Optional[Geocoder] = None,
        timeout: Optional[float] = None,
    ):
        self.api_key = api_key
        self.model = model or settings.gemini_model
        self.timeout = timeout or settings.http_timeout
        self.s = session or requests.Session()
        self.geocoder = geocoder

    def _endpoint(self) -> str:
        return f"{settings.gemini_api_base.rstrip('/')}/models/{self.model}:generateContent"

    def _request_body(self, mime_type: str, data: str) -> Dict[str, Any]:
        return {
            "contents": [{
                "parts": [
                    {"text": EXTRACTION_PROMPT},
                    {"inline_data": {"mime_type": mime_type, "data": data}},
                ]
            }],
            "generationConfig": {
                "temperature": 0.1,
                "maxOutputTokens": 800,
                "responseMimeType": "application/json",
            },
        }

    def _call_model(self, mime_type: str, data: str) -> str:
        logger.info("Calling %s for receipt analysis", self.model)
        r = self.s.post(
            self._endpoint(),
            params={"key": self.api_key},
            json=self._request_body(mime_type, data),
            timeout=self.timeout,
        )
        if not r.ok:
            body = r.text or ""
            logger.error("Gemini API error (%s): %s", r.status_code, body)
            raise UpstreamServiceError(
                f"Errore AI Provider: {r.status_code} - {body[:100]}",
                upstream_status=r.status_code,
            )
        try:
            payload = r.json()
        except ValueError:
            raise ReceiptParseError("Risposta AI non in formato JSON")
        try:
            return payload["candidates"][0]["content"]["parts"][0].get("text") or ""
        except (KeyError, IndexError, TypeError, AttributeError):
            return ""

    def analyze(self, image: str) -> ReceiptData:
        if not self.api_key:
            logger.error("GEMINI_API_KEY is not configured")
            raise ConfigurationError("Configurazione Server incompleta (API Key mancante).")
        if not image or not image.strip():
            raise RequestValidationFailed("Payload immagine vuoto.")

        mime_type, data = split_data_url(image)
        if not data:
            raise RequestValidationFailed("Payload immagine vuoto.")
        if "heic" in mime_type.lower():
            logger.warning("HEIC receipt received; the model may reject it")

        raw_text = self._call_model(mime_type, data)
        logger.debug("Raw model answer: %s", raw_text)

        decoded = decode_receipt_json(raw_text)
        if not decoded.ok:
            logger.error("Could not decode model answer: %s", decoded.error)
            raise ReceiptParseError(decoded.error)

        receipt = ReceiptData(**sanitize_receipt(decoded.data))
        if receipt.address and self.geocoder is not None:
            coords = self.geocoder.lookup(receipt.address)
            if coords:
                receipt.latitude, receipt.longitude = coords
        return receipt
