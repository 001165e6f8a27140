import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from discount_lock.extension.host import CheckoutHost
from discount_lock.extension.models import (
    DiscountCodeChange,
    DiscountEntry,
    PermissionState,
)

logger = logging.getLogger(__name__)

PERMISSION_DENIED = "permission_denied"


@dataclass
class ReconciliationResult:
    attempted: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    skipped: bool = False
    reason: str | None = None


class DiscountReconciler:
    """Requests removal of every applied discount code, one request per code.

    The host's instructions are read before each batch; without
    ``canUpdateDiscountCodes`` the batch is skipped. A failure on one code is
    logged and the loop moves on. There are no retries: the next change event
    from the host is the retry.
    """

    def __init__(self, host: CheckoutHost):
        self.host = host

    async def reconcile(self, entries: Sequence[DiscountEntry]) -> ReconciliationResult:
        permissions = PermissionState.from_instructions(self.host.instructions.current)
        if not permissions.can_update_discount_codes:
            logger.info(
                "Cannot update discount codes - instructions do not allow it",
                extra={"props": {"pending_codes": len(entries)}},
            )
            return ReconciliationResult(skipped=True, reason=PERMISSION_DENIED)

        result = ReconciliationResult()
        for entry in entries:
            result.attempted.append(entry.code)
            change = DiscountCodeChange(code=entry.code)
            try:
                outcome = await self.host.apply_discount_code_change(change.to_payload())
            except Exception as e:
                logger.warning(f"Failed to remove discount code {entry.code}: {e}")
                result.failed.append(entry.code)
                continue

            if not isinstance(outcome, dict) or outcome.get("type") == "error":
                message = outcome.get("message") if isinstance(outcome, dict) else outcome
                logger.warning(
                    f"Checkout refused removal of discount code {entry.code}: {message!r}"
                )
                result.failed.append(entry.code)
                continue

            logger.info(f"Removed discount code {entry.code}")
            result.removed.append(entry.code)

        return result
