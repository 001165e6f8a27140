import logging
import uuid
from urllib.parse import urlencode

import httpx

from discount_lock.core.config import Settings

logger = logging.getLogger(__name__)


class ShopifyOAuthService:
    """Shopify OAuth for offline (shop-scoped) access tokens.

    Built once from settings when the app is created and handed to routes
    through ``get_oauth_service``.
    """

    def __init__(
        self,
        api_key: str | None,
        api_secret: str | None,
        scopes: list[str],
        app_url: str,
        callback_path: str = "/api/auth/callback",
        timeout: float = 30.0,
    ):
        self.api_key = api_key
        self.api_secret = api_secret
        self.scopes = scopes
        self.app_url = app_url.rstrip("/")
        self.callback_path = callback_path
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "ShopifyOAuthService":
        return cls(
            api_key=settings.SHOPIFY_API_KEY,
            api_secret=settings.SHOPIFY_API_SECRET,
            scopes=settings.scopes,
            app_url=settings.app_url,
        )

    @property
    def redirect_uri(self) -> str:
        return f"{self.app_url}{self.callback_path}"

    def generate_auth_url(self, shop_domain: str) -> tuple[str, str]:
        """Generates the Shopify authorization URL and a state parameter for CSRF protection.

        Args:
        ----
            shop_domain: The myshopify.com domain of the shop.

        Returns:
        -------
            A tuple containing (authorization_url, state_parameter).
            The caller stores the state (session cookie) and checks it on callback.

        """
        if not self.api_key:
            raise ValueError("Shopify API Key must be configured.")

        state = uuid.uuid4().hex
        query_params = {
            "client_id": self.api_key,
            "scope": ",".join(self.scopes),
            "redirect_uri": self.redirect_uri,
            "state": state,
        }
        auth_url = f"https://{shop_domain}/admin/oauth/authorize?{urlencode(query_params)}"
        return auth_url, state

    def admin_app_url(self, shop_domain: str) -> str:
        """Where the merchant lands after install or billing approval."""
        return f"https://{shop_domain}/admin/apps/{self.api_key}"

    async def exchange_code_for_token(self, shop_domain: str, code: str) -> dict:
        """Exchanges the authorization code for an offline access token.

        Returns:
        -------
            The token payload, e.g. ``{'access_token': '...', 'scope': '...'}``.
        """
        if not self.api_key or not self.api_secret:
            raise ValueError("Shopify API Key and Secret must be configured.")

        token_url = f"https://{shop_domain}/admin/oauth/access_token"
        payload = {
            "client_id": self.api_key,
            "client_secret": self.api_secret,
            "code": code,
        }

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(token_url, json=payload)
            response.raise_for_status()
            token_data = response.json()

        if "access_token" not in token_data:
            error_detail = token_data.get("error", "Unknown error")
            logger.error(
                f"Failed to retrieve access token from Shopify for {shop_domain}: {error_detail}"
            )
            raise ValueError(f"Failed to retrieve access token from Shopify: {error_detail}")

        logger.info(
            f"Received offline token for shop {shop_domain}",
            extra={"props": {"shop": shop_domain, "scope": token_data.get("scope")}},
        )
        return token_data
