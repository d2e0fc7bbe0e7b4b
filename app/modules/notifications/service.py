import logging
from typing import List, Optional

import requests
from email_validator import validate_email, EmailNotValidError

from app.config import settings
from app.core.errors import ConfigurationError, RequestValidationFailed, UpstreamServiceError
from app.modules.notifications.schemas import ExpenseEmailData
from app.modules.notifications.templates import build_subject, render_expense_email
from app.modules.receipts.imaging import split_data_url

logger = logging.getLogger(__name__)

ATTACHMENT_FILENAME = "scontrino.jpg"


class EmailDispatcher:
    """Sends the expense summary with the receipt attached through the Resend API."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        session: Optional[requests.Session] = None,
        sender: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.api_key = api_key
        self.url = settings.resend_api_url
        self.sender = sender or settings.email_from
        self.timeout = timeout or settings.http_timeout
        self.s = session or requests.Session()

    def validate_recipients(self, recipients: List[str]) -> List[str]:
        if not recipients:
            raise RequestValidationFailed("Missing required fields: to")
        normalized = []
        for addr in recipients:
            try:
                normalized.append(validate_email(addr, check_deliverability=False).normalized)
            except EmailNotValidError as e:
                raise RequestValidationFailed(f"Indirizzo email non valido: {addr} ({e})")
        return normalized

    def build_payload(self, recipients: List[str], expense: ExpenseEmailData, image_base64: str = "") -> dict:
        payload = {
            "from": self.sender,
            "to": recipients,
            "subject": build_subject(expense),
            "html": render_expense_email(expense),
        }
        _, data = split_data_url(image_base64)
        if data:
            payload["attachments"] = [{"filename": ATTACHMENT_FILENAME, "content": data}]
        return payload

    def send(self, recipients: List[str], expense: Optional[ExpenseEmailData], image_base64: str = "") -> str:
        """Submit the email and return the provider message id."""
        if not self.api_key:
            logger.error("RESEND_API_KEY is not configured")
            raise ConfigurationError("RESEND_API_KEY is not configured")
        if expense is None:
            raise RequestValidationFailed("Missing required fields: expense")
        recipients = self.validate_recipients(recipients)

        r = self.s.post(
            self.url,
            headers={"Authorization": f"Bearer {self.api_key}", "Content-Type": "application/json"},
            json=self.build_payload(recipients, expense, image_base64),
            timeout=self.timeout,
        )
        if not r.ok:
            logger.error("Resend API error: %s %s", r.status_code, r.text)
            raise UpstreamServiceError(f"Email send failed: {r.status_code}", upstream_status=r.status_code)

        try:
            message_id = (r.json() or {}).get("id")
        except ValueError:
            message_id = None
        logger.info("Expense email sent to %d recipient(s): %s", len(recipients), message_id)
        return message_id
