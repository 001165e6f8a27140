from pydantic import BaseModel


class HealthStatus(BaseModel):
    status: str = "ok"
    timestamp: str  # ISO-8601, UTC


class WebhookAck(BaseModel):
    success: bool = True


class ErrorResponse(BaseModel):
    error: str
    message: str | None = None


class SettingsDocumentation(BaseModel):
    setup: str
    toggle: str
    message: str


class AppSettingsResponse(BaseModel):
    success: bool = True
    shop: str
    message: str
    documentation: SettingsDocumentation
