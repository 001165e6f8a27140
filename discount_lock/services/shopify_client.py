import logging
from typing import Any

import httpx

from discount_lock.billing.plans import BillingPlan
from discount_lock.core.config import settings

logger = logging.getLogger(__name__)


ACTIVE_SUBSCRIPTIONS_QUERY = """
    query {
        currentAppInstallation {
            activeSubscriptions {
                id
                name
                status
                currentPeriodEnd
                trialDays
            }
        }
    }
"""

APP_SUBSCRIPTION_CREATE_MUTATION = """
    mutation appSubscriptionCreate(
        $name: String!
        $returnUrl: URL!
        $trialDays: Int
        $test: Boolean
        $lineItems: [AppSubscriptionLineItemInput!]!
    ) {
        appSubscriptionCreate(
            name: $name
            returnUrl: $returnUrl
            trialDays: $trialDays
            test: $test
            lineItems: $lineItems
        ) {
            appSubscription {
                id
                status
            }
            confirmationUrl
            userErrors {
                field
                message
            }
        }
    }
"""

APP_SUBSCRIPTION_CANCEL_MUTATION = """
    mutation appSubscriptionCancel($id: ID!) {
        appSubscriptionCancel(id: $id) {
            appSubscription {
                id
                status
            }
            userErrors {
                field
                message
            }
        }
    }
"""


class ShopifyAdminAPIClientError(Exception):
    """Custom exception for Shopify API client errors."""

    def __init__(self, message, status_code=None, shopify_errors=None):
        super().__init__(message)
        self.status_code = status_code
        self.shopify_errors = shopify_errors  # List of errors from Shopify response


class ShopifyAdminAPIClient:
    """Client for the Shopify Admin GraphQL API (Async), bound to one shop's offline token."""

    def __init__(
        self,
        shop_domain: str,
        access_token: str,
        api_version: str | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.shop_domain = shop_domain
        self._access_token = access_token
        self.api_version = api_version or settings.SHOPIFY_API_VERSION
        self._api_url = (
            f"https://{self.shop_domain}/admin/api/{self.api_version}/graphql.json"
        )
        self._client = http_client or httpx.AsyncClient(timeout=30.0)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _amake_request(
        self, query: str, variables: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        """Makes an async GraphQL request to the Shopify Admin API."""
        headers = {
            "Content-Type": "application/json",
            "X-Shopify-Access-Token": self._access_token,
        }
        payload = {"query": query}
        if variables:
            payload["variables"] = variables

        logger.debug(f"Making async Shopify GraphQL request to {self._api_url}")
        try:
            response = await self._client.post(
                self._api_url, headers=headers, json=payload
            )
            response.raise_for_status()
            response_data = response.json()
        except httpx.HTTPStatusError as e:
            logger.exception(
                f"HTTP error occurred during Shopify request: {e.request.url!r} - {e.response.status_code} {e.response.reason_phrase}"
            )
            raise ShopifyAdminAPIClientError(
                f"Shopify API request failed: {e.response.status_code} {e.response.reason_phrase}",
                status_code=e.response.status_code,
            ) from e
        except httpx.RequestError as e:
            logger.exception(f"HTTP request to Shopify failed: {e}")
            raise ShopifyAdminAPIClientError(
                f"Failed to communicate with Shopify: {e}"
            ) from e
        except ValueError as e:
            logger.error(f"Shopify API returned a non-JSON body for {self.shop_domain}")
            raise ShopifyAdminAPIClientError(
                "Invalid response from Shopify API (not JSON).",
                status_code=response.status_code,
            ) from e

        if "errors" in response_data:
            logger.error(
                f"Shopify GraphQL API returned errors: {response_data['errors']}"
            )
            raise ShopifyAdminAPIClientError(
                "Shopify API returned errors.",
                status_code=response.status_code,
                shopify_errors=response_data["errors"],
            )

        if "data" not in response_data:
            logger.error(f"Shopify API response missing 'data' field: {response_data}")
            raise ShopifyAdminAPIClientError(
                "Invalid response from Shopify API (missing data).",
                status_code=response.status_code,
            )

        logger.debug("Async Shopify GraphQL request successful.")
        return response_data["data"]

    @staticmethod
    def _raise_for_user_errors(operation: str, result: dict[str, Any]) -> None:
        user_errors = result.get("userErrors") or []
        if user_errors:
            logger.error(f"{operation} returned user errors: {user_errors}")
            raise ShopifyAdminAPIClientError(
                f"{operation} failed.", shopify_errors=user_errors
            )

    # --- Billing ---

    async def aget_active_subscriptions(self) -> list[dict[str, Any]]:
        """Lists the app's active subscriptions on this shop (possibly empty)."""
        logger.info(f"Fetching active subscriptions for shop {self.shop_domain}")
        data = await self._amake_request(ACTIVE_SUBSCRIPTIONS_QUERY)
        installation = data.get("currentAppInstallation") or {}
        return installation.get("activeSubscriptions") or []

    async def acreate_subscription(
        self, plan: BillingPlan, return_url: str, test: bool
    ) -> str:
        """Requests a recurring charge for ``plan`` and returns the merchant confirmation URL."""
        logger.info(
            f"Creating '{plan.name}' subscription for shop {self.shop_domain} (test: {test})"
        )
        variables = {
            "name": plan.name,
            "returnUrl": return_url,
            "trialDays": plan.trial_days,
            "test": test,
            "lineItems": [plan.to_line_item()],
        }
        data = await self._amake_request(APP_SUBSCRIPTION_CREATE_MUTATION, variables)
        result = data.get("appSubscriptionCreate") or {}
        self._raise_for_user_errors("appSubscriptionCreate", result)

        confirmation_url = result.get("confirmationUrl")
        if not confirmation_url:
            raise ShopifyAdminAPIClientError(
                "appSubscriptionCreate returned no confirmationUrl."
            )
        return confirmation_url

    async def acancel_subscription(self, subscription_id: str) -> dict[str, Any]:
        """Cancels a subscription by GID and returns the raw mutation data."""
        logger.info(
            f"Cancelling subscription {subscription_id} for shop {self.shop_domain}"
        )
        data = await self._amake_request(
            APP_SUBSCRIPTION_CANCEL_MUTATION, {"id": subscription_id}
        )
        self._raise_for_user_errors(
            "appSubscriptionCancel", data.get("appSubscriptionCancel") or {}
        )
        return data
