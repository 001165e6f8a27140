import logging

from fastapi import APIRouter, Depends

from discount_lock.auth.dependencies import get_oauth_service, get_shopify_client
from discount_lock.auth.service import ShopifyOAuthService
from discount_lock.billing.plans import BillingPlan, get_plan
from discount_lock.core.config import settings
from discount_lock.core.exceptions import InvalidPlanError, NoActiveSubscriptionError
from discount_lock.schemas.billing import (
    BillingStatusResponse,
    CancelResponse,
    SubscribeRequest,
    SubscribeResponse,
)
from discount_lock.services.shopify_client import ShopifyAdminAPIClient

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/billing", tags=["Billing"])


def resolve_plan(payload: SubscribeRequest | None = None) -> BillingPlan:
    """Validates the requested plan before the shop session is looked up.

    A missing body counts as an unknown plan.
    """
    requested = payload.plan if payload is not None else None
    plan = get_plan(requested)
    if plan is None:
        logger.info(f"Rejected subscription request for unknown plan {requested!r}")
        raise InvalidPlanError(requested)
    return plan


@router.get("/status", response_model=BillingStatusResponse)
async def billing_status(
    client: ShopifyAdminAPIClient = Depends(get_shopify_client),
):
    subscriptions = await client.aget_active_subscriptions()
    return BillingStatusResponse.from_subscriptions(subscriptions)


@router.post("/subscribe", response_model=SubscribeResponse)
async def subscribe(
    plan: BillingPlan = Depends(resolve_plan),
    client: ShopifyAdminAPIClient = Depends(get_shopify_client),
    oauth_service: ShopifyOAuthService = Depends(get_oauth_service),
):
    confirmation_url = await client.acreate_subscription(
        plan,
        return_url=oauth_service.admin_app_url(client.shop_domain),
        test=settings.billing_test_mode,
    )
    logger.info(f"Subscription to '{plan.name}' requested for shop {client.shop_domain}")
    return SubscribeResponse(confirmation_url=confirmation_url)


@router.post("/cancel", response_model=CancelResponse)
async def cancel(
    client: ShopifyAdminAPIClient = Depends(get_shopify_client),
):
    subscriptions = await client.aget_active_subscriptions()
    if not subscriptions:
        raise NoActiveSubscriptionError()

    result = await client.acancel_subscription(subscriptions[0]["id"])
    logger.info(f"Subscription {subscriptions[0]['id']} cancelled for shop {client.shop_domain}")
    return CancelResponse(result=result)
