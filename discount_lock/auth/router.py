import logging

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import RedirectResponse
from slowapi import Limiter
from sqlalchemy.ext.asyncio import AsyncSession

from discount_lock import crud
from discount_lock.auth.dependencies import get_oauth_service
from discount_lock.auth.service import ShopifyOAuthService
from discount_lock.core.config import Settings
from discount_lock.core.exceptions import (
    InvalidParameterError,
    MissingParameterError,
    UpstreamAuthError,
)
from discount_lock.core.security import is_valid_shop_domain, verify_shopify_hmac
from discount_lock.database import get_async_db

logger = logging.getLogger(__name__)

OAUTH_STATE_SESSION_KEY = "shopify_oauth_state"


async def start_shopify_oauth(
    request: Request,
    shop: str | None = Query(
        None,
        description="The shop's myshopify.com domain (e.g., your-store.myshopify.com)",
    ),
    oauth_service: ShopifyOAuthService = Depends(get_oauth_service),
):
    """Initiates the Shopify OAuth flow by redirecting the merchant to Shopify."""
    if not shop:
        raise MissingParameterError("shop")
    if not is_valid_shop_domain(shop):
        raise InvalidParameterError(
            "shop", "Invalid shop domain. Must end with .myshopify.com"
        )

    auth_url, state = oauth_service.generate_auth_url(shop_domain=shop)
    request.session[OAUTH_STATE_SESSION_KEY] = state
    logger.info(f"Redirecting shop {shop} to Shopify for OAuth")
    return RedirectResponse(url=auth_url)


async def handle_shopify_callback(
    request: Request,
    db: AsyncSession = Depends(get_async_db),
    oauth_service: ShopifyOAuthService = Depends(get_oauth_service),
):
    """Handles the redirect from Shopify after the merchant approves the install.

    Verifies state and HMAC, stores the offline token and sends the merchant to
    the app inside their admin. Every failure is reported as a generic 500.
    """
    query_params = dict(request.query_params)
    shop = query_params.get("shop")
    expected_state = request.session.pop(OAUTH_STATE_SESSION_KEY, None)
    logger.info(f"Received Shopify callback for shop {shop}")

    try:
        if not shop or not is_valid_shop_domain(shop):
            raise ValueError(f"Invalid shop in callback: {shop!r}")
        if not expected_state or expected_state != query_params.get("state"):
            raise ValueError("OAuth state mismatch")
        if not oauth_service.api_secret or not verify_shopify_hmac(
            query_params, oauth_service.api_secret
        ):
            raise ValueError("Invalid HMAC signature")
        code = query_params.get("code")
        if not code:
            raise ValueError("Missing authorization code")

        token_data = await oauth_service.exchange_code_for_token(
            shop_domain=shop, code=code
        )
        await crud.asave_shop_session(
            db,
            shop=shop,
            access_token=token_data["access_token"],
            scope=token_data.get("scope"),
        )
        await db.commit()
    except Exception as e:
        logger.error(f"OAuth callback error for shop {shop}: {e}", exc_info=True)
        raise UpstreamAuthError() from e

    request.session["shop"] = shop
    logger.info(f"App installed on shop {shop}")
    return RedirectResponse(url=oauth_service.admin_app_url(shop))


def create_auth_router(app_settings: Settings, app_limiter: Limiter) -> APIRouter:
    """OAuth routes; install starts are rate limited by ``AUTH_RATE_LIMIT``."""
    router = APIRouter(prefix="/api/auth", tags=["Authentication"])
    router.add_api_route(
        "",
        app_limiter.limit(app_settings.AUTH_RATE_LIMIT)(start_shopify_oauth),
        methods=["GET"],
    )
    router.add_api_route("/callback", handle_shopify_callback, methods=["GET"])
    return router
