import logging
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

from discount_lock.auth import create_auth_router
from discount_lock.auth.dependencies import get_current_shop
from discount_lock.auth.service import ShopifyOAuthService
from discount_lock.billing.router import router as billing_router
from discount_lock.core.config import Settings, settings
from discount_lock.core.exceptions import APIException
from discount_lock.database import async_engine, init_models
from discount_lock.limiter import create_limiter
from discount_lock.logging_config import setup_logging
from discount_lock.pages.router import router as pages_router
from discount_lock.schemas.common import (
    AppSettingsResponse,
    ErrorResponse,
    HealthStatus,
    SettingsDocumentation,
)
from discount_lock.services.shopify_client import ShopifyAdminAPIClientError
from discount_lock.telemetry import setup_opentelemetry
from discount_lock.webhooks.router import router as webhooks_router

# Call setup_logging early, before creating app or loggers
setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_models()
    logger.info(
        "Sale Discount Lock started",
        extra={"props": {"environment": settings.ENVIRONMENT, "host": settings.host_name}},
    )
    yield
    await async_engine.dispose()
    logger.info("Application shutdown.")


# --- Exception handlers ---


def _error_response(
    status_code: int, error: str, message: str | None = None, headers: dict | None = None
) -> JSONResponse:
    body = ErrorResponse(error=error, message=message)
    return JSONResponse(
        status_code=status_code, content=body.model_dump(exclude_none=True), headers=headers
    )


async def api_exception_handler(request: Request, exc: APIException):
    return _error_response(exc.status_code, exc.code, exc.message)


async def shopify_error_handler(request: Request, exc: ShopifyAdminAPIClientError):
    logger.error(f"Shopify Admin API failure on {request.url.path}: {exc}")
    return _error_response(502, "UpstreamError", "Shopify request failed")


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        error = "Not found"
    elif exc.status_code == 405:
        error = "Method not allowed"
    else:
        error = str(exc.detail)
    return _error_response(exc.status_code, error, headers=exc.headers)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return _error_response(422, "ValidationError", "Invalid request body")


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Handler error on {request.url.path}: {exc}")
    return _error_response(500, "Internal server error", "An unexpected error occurred.")


def create_app(app_settings: Settings = settings) -> FastAPI:
    app = FastAPI(title="Sale Discount Lock", lifespan=lifespan)

    # Explicitly constructed platform SDK, reached through get_oauth_service
    app.state.oauth_service = ShopifyOAuthService.from_settings(app_settings)

    # --- Middleware ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    limiter = create_limiter()
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    # Holds the OAuth state nonce and the installed shop
    app.add_middleware(
        SessionMiddleware,
        secret_key=app_settings.SESSION_SECRET_KEY,
        https_only=app_settings.is_production,
        same_site="lax",
    )

    app.add_exception_handler(APIException, api_exception_handler)
    app.add_exception_handler(ShopifyAdminAPIClientError, shopify_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    setup_opentelemetry(app, app_settings)

    # --- Routes ---
    @app.get("/health", response_model=HealthStatus)
    @app.get("/api/health", response_model=HealthStatus)
    @limiter.limit(app_settings.HEALTH_RATE_LIMIT)
    async def health_check(request: Request):
        logger.debug("Health check endpoint called")
        timestamp = datetime.now(UTC).isoformat(timespec="milliseconds")
        return HealthStatus(timestamp=timestamp.replace("+00:00", "Z"))

    @app.get("/api/settings", response_model=AppSettingsResponse)
    async def app_settings_summary(shop: str = Depends(get_current_shop)):
        return AppSettingsResponse(
            shop=shop,
            message="Sale Discount Lock is active! Configure settings in the Checkout Editor.",
            documentation=SettingsDocumentation(
                setup="Go to Settings > Checkout > Customize to add the extension",
                toggle="Enable 'Sale Mode' in the extension settings panel",
                message="Customize the banner message shown to customers",
            ),
        )

    app.include_router(create_auth_router(app_settings, limiter))
    app.include_router(billing_router)
    app.include_router(webhooks_router)
    app.include_router(pages_router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    logger.info(f"Starting Uvicorn on port {settings.PORT}")
    uvicorn.run(app, host="0.0.0.0", port=settings.PORT)
