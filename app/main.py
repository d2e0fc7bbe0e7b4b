import logging
from fastapi import FastAPI, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from app.config import settings
from app.core.errors import ServiceError
from app.core.functions import FUNCTIONS_PREFIX, function_error
from app.core.limiter import limiter
from app.modules.auth import routes as auth_routes
from app.modules.expenses import routes as expenses_routes
from app.modules.profiles import routes as profiles_routes
from app.modules.reports import routes as reports_routes
from app.modules.receipts import routes as receipts_routes
from app.modules.notifications import routes as notifications_routes

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.app_name,
    debug=settings.debug,
    redirect_slashes=False,
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    logger.warning("%s %s failed (%s): %s", request.method, request.url.path, exc.status_code, exc.message)
    return function_error(exc.status_code, exc.message, request.url.path)


def _describe_validation_error(err: dict) -> str:
    field = ".".join(str(p) for p in err.get("loc", ()) if p != "body") or "body"
    return f"{field}: {err.get('msg')}"


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    if not request.url.path.startswith(FUNCTIONS_PREFIX):
        return await request_validation_exception_handler(request, exc)
    details = "; ".join(_describe_validation_error(err) for err in exc.errors())
    logger.warning("%s %s rejected: %s", request.method, request.url.path, details)
    return function_error(400, f"Richiesta non valida: {details}", request.url.path)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception: %s", exc)
    message = "Internal server error" if settings.is_production else str(exc)
    return function_error(500, message, request.url.path)


class SecurityHeadersMiddleware:
    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def send_with_headers(message):
            if message["type"] == "http.response.start":
                message.setdefault("headers", [])
                message["headers"].extend([
                    (b"X-Content-Type-Options", b"nosniff"),
                    (b"X-Frame-Options", b"DENY"),
                ])
            await send(message)

        await self.app(scope, receive, send_with_headers)


app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include module routes
app.include_router(auth_routes.router, prefix="/api/v1")
app.include_router(expenses_routes.router, prefix="/api/v1")
app.include_router(profiles_routes.router, prefix="/api/v1")
app.include_router(reports_routes.router, prefix="/api/v1")
app.include_router(receipts_routes.router, prefix=FUNCTIONS_PREFIX)
app.include_router(notifications_routes.router, prefix=FUNCTIONS_PREFIX)


@app.on_event("startup")
async def startup_event():
    logger.info("Application startup")
    if not settings.gemini_api_key:
        logger.warning("GEMINI_API_KEY not set: receipt analysis will answer 500")
    if not settings.resend_api_key:
        logger.warning("RESEND_API_KEY not set: expense emails will answer 500")


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Application shutdown")


@app.get("/")
async def root():
    return {"message": "Welcome to nota-spese", "status": "healthy"}


@app.get("/health")
@limiter.exempt
async def health():
    return {"status": "healthy"}


@app.get("/ready")
@limiter.exempt
async def ready():
    """Readiness probe: extend here with Supabase checks if needed."""
    return {"status": "ready"}
