from collections.abc import Iterable, Mapping
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict

DEFAULT_SALE_MESSAGE = (
    "Sitewide sale is active. Discount codes are disabled. Gift cards still apply."
)


class SaleModeConfig(BaseModel):
    """Merchant settings as the extension sees them. Read-only."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = False
    message: str = DEFAULT_SALE_MESSAGE

    @classmethod
    def from_settings(cls, raw: Mapping[str, Any] | None) -> "SaleModeConfig":
        """Builds the config from ``{"sale_mode_enabled": ..., "sale_message": ...}``."""
        raw = raw or {}
        message = raw.get("sale_message")
        return cls(
            enabled=bool(raw.get("sale_mode_enabled")),
            message=str(message) if message else DEFAULT_SALE_MESSAGE,
        )


class DiscountEntry(BaseModel):
    """One applied discount code. Gift cards never appear here."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    code: str

    @classmethod
    def list_from_host(cls, raw: Iterable[Mapping[str, Any]] | None) -> list["DiscountEntry"]:
        return [cls.model_validate(item) for item in raw or []]


class PermissionState(BaseModel):
    model_config = ConfigDict(frozen=True)

    can_update_discount_codes: bool = False

    @classmethod
    def from_instructions(cls, raw: Mapping[str, Any] | None) -> "PermissionState":
        """Reads ``{"discounts": {"canUpdateDiscountCodes": bool}}``; missing means False."""
        discounts = (raw or {}).get("discounts") or {}
        return cls(can_update_discount_codes=bool(discounts.get("canUpdateDiscountCodes")))


class DiscountCodeChange(BaseModel):
    type: Literal["removeDiscountCode"] = "removeDiscountCode"
    code: str

    def to_payload(self) -> dict[str, str]:
        return self.model_dump()
