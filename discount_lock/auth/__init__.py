from .dependencies import (
    get_current_shop,
    get_oauth_service,
    get_shop_session,
    get_shopify_client,
)
from .router import create_auth_router
from .service import ShopifyOAuthService

__all__ = [
    "ShopifyOAuthService",
    "get_current_shop",
    "get_oauth_service",
    "get_shop_session",
    "get_shopify_client",
    "create_auth_router",
]
