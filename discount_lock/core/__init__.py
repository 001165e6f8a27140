"""
Core application components including configuration, request signing helpers
and custom exceptions.
"""

from .config import settings
from .exceptions import (
    APIException,
    AuthenticationError,
    InvalidParameterError,
    InvalidPlanError,
    MissingParameterError,
    NoActiveSubscriptionError,
    UpstreamAuthError,
)
from .security import (
    decode_session_token,
    is_valid_shop_domain,
    verify_shopify_hmac,
    verify_webhook_hmac,
)

__all__ = [
    # config
    "settings",
    # exceptions
    "APIException",
    "AuthenticationError",
    "InvalidParameterError",
    "InvalidPlanError",
    "MissingParameterError",
    "NoActiveSubscriptionError",
    "UpstreamAuthError",
    # security
    "decode_session_token",
    "is_valid_shop_domain",
    "verify_shopify_hmac",
    "verify_webhook_hmac",
]
