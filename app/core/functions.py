"""
Response helpers for the /functions/v1 endpoints.

These endpoints are called straight from the browser with the Supabase
headers, so every answer (errors included) carries permissive CORS headers.
"""
from fastapi import Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from app.core.errors import error_envelope

FUNCTION_CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
}

FUNCTIONS_PREFIX = "/functions/v1"


def preflight_response() -> Response:
    return Response(status_code=200, headers=FUNCTION_CORS_HEADERS)


def function_success(body: BaseModel) -> JSONResponse:
    return JSONResponse(status_code=200, content=body.model_dump(mode="json"), headers=FUNCTION_CORS_HEADERS)


def function_error(status_code: int, message: str, path: str = "") -> JSONResponse:
    headers = FUNCTION_CORS_HEADERS if path.startswith(FUNCTIONS_PREFIX) else None
    return JSONResponse(status_code=status_code, content=error_envelope(message), headers=headers)
