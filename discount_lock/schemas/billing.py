from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class AppSubscription(BaseModel):
    """One entry of ``currentAppInstallation.activeSubscriptions``."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str | None = None
    status: str | None = None
    current_period_end: str | None = Field(None, alias="currentPeriodEnd")
    trial_days: int | None = Field(None, alias="trialDays")


class BillingStatusResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    subscriptions: list[AppSubscription] = Field(default_factory=list)
    has_active_subscription: bool = Field(False, alias="hasActiveSubscription")

    @classmethod
    def from_subscriptions(cls, raw: list[dict[str, Any]]) -> "BillingStatusResponse":
        subscriptions = [AppSubscription.model_validate(item) for item in raw]
        has_active = bool(subscriptions) and subscriptions[0].status == "ACTIVE"
        return cls(subscriptions=subscriptions, has_active_subscription=has_active)


class SubscribeRequest(BaseModel):
    # Optional so an absent plan is reported as InvalidPlan rather than a 422
    plan: str | None = None


class SubscribeResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    confirmation_url: str = Field(..., alias="confirmationUrl")


class CancelResponse(BaseModel):
    success: bool = True
    result: dict[str, Any]
