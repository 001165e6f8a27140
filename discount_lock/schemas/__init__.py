"""Export Pydantic schemas for request validation and response serialization."""

from discount_lock.schemas.billing import (
    AppSubscription,
    BillingStatusResponse,
    CancelResponse,
    SubscribeRequest,
    SubscribeResponse,
)
from discount_lock.schemas.common import (
    AppSettingsResponse,
    ErrorResponse,
    HealthStatus,
    SettingsDocumentation,
    WebhookAck,
)

__all__ = [
    "AppSettingsResponse",
    "AppSubscription",
    "BillingStatusResponse",
    "CancelResponse",
    "ErrorResponse",
    "HealthStatus",
    "SettingsDocumentation",
    "SubscribeRequest",
    "SubscribeResponse",
    "WebhookAck",
]
