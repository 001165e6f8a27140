"""
Core exceptions for the application.

Each exception carries the HTTP status and the short error code rendered by the
exception handlers in ``discount_lock.main`` as ``{"error": code, "message": message}``.
"""


class APIException(Exception):
    """Base class for API exceptions."""

    status_code: int = 400
    code: str = "APIError"

    def __init__(self, message: str = "An error occurred"):
        self.message = message
        super().__init__(self.message)


class MissingParameterError(APIException):
    """Raised when a required request parameter is absent."""

    code = "MissingParameter"

    def __init__(self, parameter: str):
        self.parameter = parameter
        super().__init__(f"Missing {parameter} parameter")


class InvalidParameterError(APIException):
    """Raised when a request parameter is present but malformed."""

    code = "InvalidParameter"

    def __init__(self, parameter: str, message: str | None = None):
        self.parameter = parameter
        super().__init__(message or f"Invalid {parameter} parameter")


class InvalidPlanError(APIException):
    """Raised when a subscription is requested for an unknown billing plan."""

    code = "InvalidPlan"

    def __init__(self, plan: str | None):
        self.plan = plan
        super().__init__("Invalid plan")


class NoActiveSubscriptionError(APIException):
    """Raised when cancelling while the shop has no active subscription."""

    code = "NoActiveSubscription"

    def __init__(self, message: str = "No active subscription"):
        super().__init__(message)


class AuthenticationError(APIException):
    """Raised when the request carries no usable shop session."""

    status_code = 401
    code = "AuthenticationError"

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message)


class UpstreamAuthError(APIException):
    """Raised when the OAuth exchange with Shopify fails. Detail stays in the logs."""

    status_code = 500
    code = "UpstreamAuthFailure"

    def __init__(self, message: str = "OAuth failed"):
        super().__init__(message)
