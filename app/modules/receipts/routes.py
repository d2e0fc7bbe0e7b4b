from fastapi import APIRouter, Depends, Request
from app.config import settings
from app.core.dependencies import get_current_user_id
from app.core.functions import function_success, preflight_response
from app.core.limiter import limiter
from app.modules.receipts.geocoding import Geocoder
from app.modules.receipts.schemas import AnalyzeRequest, AnalyzeResponse
from app.modules.receipts.service import ReceiptAnalyzer
from typing import Dict
import logging

logger = logging.getLogger(__name__)

router = APIRouter(tags=["functions"])


def get_receipt_analyzer() -> ReceiptAnalyzer:
    geocoder = Geocoder() if settings.geocoding_enabled else None
    return ReceiptAnalyzer(api_key=settings.gemini_api_key, geocoder=geocoder)


@router.options("/analyze-receipt")
async def analyze_receipt_preflight():
    return preflight_response()


@router.post("/analyze-receipt", response_model=AnalyzeResponse)
@limiter.limit(settings.analyze_rate_limit)
def analyze_receipt(
    request: Request,
    body: AnalyzeRequest,
    user_data: Dict = Depends(get_current_user_id),
    analyzer: ReceiptAnalyzer = Depends(get_receipt_analyzer),
):
    """Extract merchant, date, total, category and items from a receipt photo."""
    logger.info("Receipt analysis requested by user %s", user_data["id"])
    receipt = analyzer.analyze(body.image)
    return function_success(AnalyzeResponse(data=receipt))
