import json
import logging
from typing import Any

from fastapi import APIRouter, Depends, Request

from discount_lock.auth.dependencies import get_oauth_service
from discount_lock.auth.service import ShopifyOAuthService
from discount_lock.core.security import verify_webhook_hmac
from discount_lock.schemas.common import WebhookAck

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/webhooks", tags=["Webhooks"])

CUSTOMERS_DATA_REQUEST = "CUSTOMERS_DATA_REQUEST"
CUSTOMERS_REDACT = "CUSTOMERS_REDACT"
SHOP_REDACT = "SHOP_REDACT"
APP_UNINSTALLED = "APP_UNINSTALLED"


async def _read_webhook(
    request: Request, topic: str, oauth_service: ShopifyOAuthService
) -> tuple[str | None, dict[str, Any]]:
    """Returns (shop, payload). Never rejects: this app keeps no customer data."""
    body = await request.body()
    shop = request.headers.get("X-Shopify-Shop-Domain")

    hmac_valid = bool(oauth_service.api_secret) and verify_webhook_hmac(
        body, request.headers.get("X-Shopify-Hmac-Sha256"), oauth_service.api_secret
    )
    if not hmac_valid:
        logger.warning(f"Webhook {topic} received without a valid HMAC (shop: {shop})")

    payload: dict[str, Any] = {}
    if body:
        try:
            parsed = json.loads(body)
        except ValueError:
            logger.warning(f"Webhook {topic} body is not JSON (shop: {shop})")
        else:
            if isinstance(parsed, dict):
                payload = parsed
    return shop, payload


def _customer_id(payload: dict[str, Any]) -> Any:
    customer = payload.get("customer")
    return customer.get("id") if isinstance(customer, dict) else None


@router.post("/customers/data_request", response_model=WebhookAck)
async def customers_data_request(
    request: Request,
    oauth_service: ShopifyOAuthService = Depends(get_oauth_service),
):
    shop, payload = await _read_webhook(request, CUSTOMERS_DATA_REQUEST, oauth_service)
    customer_id = _customer_id(payload)
    logger.info(
        f"[GDPR] Customer data request received for shop {shop}",
        extra={"props": {"topic": CUSTOMERS_DATA_REQUEST, "shop": shop, "customer_id": customer_id}},
    )
    return WebhookAck()


@router.post("/customers/redact", response_model=WebhookAck)
async def customers_redact(
    request: Request,
    oauth_service: ShopifyOAuthService = Depends(get_oauth_service),
):
    shop, payload = await _read_webhook(request, CUSTOMERS_REDACT, oauth_service)
    customer_id = _customer_id(payload)
    logger.info(
        f"[GDPR] Customer redact request received for shop {shop}",
        extra={"props": {"topic": CUSTOMERS_REDACT, "shop": shop, "customer_id": customer_id}},
    )
    return WebhookAck()


@router.post("/shop/redact", response_model=WebhookAck)
async def shop_redact(
    request: Request,
    oauth_service: ShopifyOAuthService = Depends(get_oauth_service),
):
    shop, payload = await _read_webhook(request, SHOP_REDACT, oauth_service)
    logger.info(
        f"[GDPR] Shop redact request received for shop {shop}",
        extra={"props": {"topic": SHOP_REDACT, "shop": shop, "shop_id": payload.get("shop_id")}},
    )
    return WebhookAck()


@router.post("/app/uninstalled", response_model=WebhookAck)
async def app_uninstalled(
    request: Request,
    oauth_service: ShopifyOAuthService = Depends(get_oauth_service),
):
    shop, _ = await _read_webhook(request, APP_UNINSTALLED, oauth_service)
    logger.info(
        f"App uninstalled from shop {shop}",
        extra={"props": {"topic": APP_UNINSTALLED, "shop": shop}},
    )
    return WebhookAck()
