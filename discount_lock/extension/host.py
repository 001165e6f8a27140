import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any

from discount_lock.services.channels import Channel

logger = logging.getLogger(__name__)

SETTINGS_CHANNEL = "settings"
DISCOUNT_CODES_CHANNEL = "discount_codes"
INSTRUCTIONS_CHANNEL = "instructions"


class DiscountCodeChangeError(Exception):
    """Raised by a host when a discount code change request fails outright."""


class CheckoutHost(ABC):
    """The checkout runtime the extension is rendered into.

    The host owns settings, applied discount codes and instructions, and pushes
    every change through the matching channel. Removal is requested, never
    guaranteed: the host answers ``{"type": "success"}`` or
    ``{"type": "error", "message": ...}``, or raises.
    """

    settings: Channel[dict[str, Any]]
    discount_codes: Channel[list[dict[str, Any]]]
    instructions: Channel[dict[str, Any]]

    @abstractmethod
    async def apply_discount_code_change(self, change: dict[str, str]) -> dict[str, Any]:
        ...


class InMemoryCheckoutHost(CheckoutHost):
    """Host for local simulation and tests.

    Records every change request. Codes in ``failing_codes`` raise
    ``DiscountCodeChangeError``; codes in ``rejected_codes`` get an error result.
    With ``publish_removals`` the new code list is pushed after each removal,
    the way a live checkout re-delivers its discount codes.
    """

    def __init__(
        self,
        settings: dict[str, Any] | None = None,
        discount_codes: list[str] | None = None,
        can_update_discount_codes: bool = True,
        failing_codes: set[str] | None = None,
        rejected_codes: set[str] | None = None,
        publish_removals: bool = False,
    ):
        self.settings = Channel(SETTINGS_CHANNEL, dict(settings or {}))
        self.discount_codes = Channel(
            DISCOUNT_CODES_CHANNEL, [{"code": code} for code in discount_codes or []]
        )
        self.instructions = Channel(
            INSTRUCTIONS_CHANNEL,
            {"discounts": {"canUpdateDiscountCodes": can_update_discount_codes}},
        )
        self.failing_codes = set(failing_codes or ())
        self.rejected_codes = set(rejected_codes or ())
        self.publish_removals = publish_removals
        self.change_requests: list[dict[str, str]] = []

    # Merchant / shopper actions

    def update_settings(self, **values: Any) -> None:
        self.settings.publish({**self.settings.current, **values})

    def set_discount_codes(self, codes: list[str]) -> None:
        self.discount_codes.publish([{"code": code} for code in codes])

    def set_can_update_discount_codes(self, allowed: bool) -> None:
        self.instructions.publish({"discounts": {"canUpdateDiscountCodes": allowed}})

    @property
    def applied_codes(self) -> list[str]:
        return [entry["code"] for entry in self.discount_codes.current]

    async def apply_discount_code_change(self, change: dict[str, str]) -> dict[str, Any]:
        self.change_requests.append(dict(change))
        await asyncio.sleep(0)

        code = change.get("code")
        if change.get("type") != "removeDiscountCode":
            return {"type": "error", "message": f"Unsupported change type {change.get('type')!r}"}
        if code in self.failing_codes:
            raise DiscountCodeChangeError(f"Checkout rejected removal of {code}")
        if code in self.rejected_codes:
            return {"type": "error", "message": f"Discount code {code} could not be removed"}

        remaining = [entry for entry in self.discount_codes.current if entry["code"] != code]
        if len(remaining) != len(self.discount_codes.current):
            self.discount_codes.publish(remaining, notify=self.publish_removals)
        return {"type": "success"}
