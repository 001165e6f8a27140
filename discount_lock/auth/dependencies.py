import logging
from collections.abc import AsyncGenerator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from discount_lock import crud
from discount_lock.auth.service import ShopifyOAuthService
from discount_lock.core.exceptions import AuthenticationError
from discount_lock.core.security import decode_session_token
from discount_lock.database import get_async_db
from discount_lock.models.shop_session import ShopSession
from discount_lock.services.shopify_client import ShopifyAdminAPIClient

logger = logging.getLogger(__name__)


def get_oauth_service(request: Request) -> ShopifyOAuthService:
    """The OAuth service constructed in ``create_app``."""
    return request.app.state.oauth_service


def get_current_shop(
    request: Request,
    oauth_service: ShopifyOAuthService = Depends(get_oauth_service),
) -> str:
    """Resolves the shop from a session token, falling back to the session cookie."""
    authorization = request.headers.get("Authorization", "")
    if authorization.startswith("Bearer "):
        token = authorization.removeprefix("Bearer ").strip()
        if oauth_service.api_key and oauth_service.api_secret:
            shop = decode_session_token(
                token, oauth_service.api_key, oauth_service.api_secret
            )
            if shop:
                return shop
        logger.warning("Rejected invalid session token")
        raise AuthenticationError("Invalid session token")

    shop = request.session.get("shop")
    if not shop:
        raise AuthenticationError("No authenticated shop session")
    return shop


async def get_shop_session(
    shop: str = Depends(get_current_shop),
    db: AsyncSession = Depends(get_async_db),
) -> ShopSession:
    shop_session = await crud.aget_shop_session(db, shop)
    if shop_session is None:
        logger.info(f"No offline session stored for shop {shop}")
        raise AuthenticationError("App is not installed on this shop")
    return shop_session


async def get_shopify_client(
    shop_session: ShopSession = Depends(get_shop_session),
) -> AsyncGenerator[ShopifyAdminAPIClient, None]:
    client = ShopifyAdminAPIClient(
        shop_domain=shop_session.shop, access_token=shop_session.access_token
    )
    try:
        yield client
    finally:
        await client.aclose()
