from fastapi import APIRouter, Depends
from app.config import settings
from app.core.dependencies import get_current_user_id
from app.core.functions import function_success, preflight_response
from app.modules.notifications.schemas import SendEmailRequest, SendEmailResponse
from app.modules.notifications.service import EmailDispatcher
from typing import Dict
import logging

logger = logging.getLogger(__name__)

router = APIRouter(tags=["functions"])


def get_email_dispatcher() -> EmailDispatcher:
    return EmailDispatcher(api_key=settings.resend_api_key)


@router.options("/send-expense-email")
async def send_expense_email_preflight():
    return preflight_response()


@router.post("/send-expense-email", response_model=SendEmailResponse)
def send_expense_email(
    body: SendEmailRequest,
    user_data: Dict = Depends(get_current_user_id),
    dispatcher: EmailDispatcher = Depends(get_email_dispatcher),
):
    """Email an expense summary with the receipt photo attached."""
    logger.info("Expense email requested by user %s", user_data["id"])
    message_id = dispatcher.send(body.recipients(), body.expense, body.image_base64)
    return function_success(SendEmailResponse(id=message_id))
