import asyncio
import contextlib
import logging
from typing import Any

from discount_lock.extension.banner import (
    BannerAdapter,
    BannerPresenter,
    ComponentTreeBannerAdapter,
)
from discount_lock.extension.host import (
    DISCOUNT_CODES_CHANNEL,
    SETTINGS_CHANNEL,
    CheckoutHost,
)
from discount_lock.extension.models import DiscountEntry, SaleModeConfig
from discount_lock.extension.reconciler import DiscountReconciler, ReconciliationResult
from discount_lock.services.channels import ChannelEvent

logger = logging.getLogger(__name__)


class SaleDiscountLock:
    """The checkout extension: keeps discount codes off the checkout while Sale Mode is on.

    Settings and discount-code updates from the host land in one inbox and are
    handled strictly one at a time; each handler, removal batch included, runs to
    completion before the next event is read. A batch for an older code list is
    never cancelled when a newer list arrives: the newer list simply gets its own
    batch afterwards.
    """

    def __init__(
        self,
        host: CheckoutHost,
        adapter: BannerAdapter | None = None,
        reconciler: DiscountReconciler | None = None,
    ):
        self.host = host
        self.presenter = BannerPresenter(adapter or ComponentTreeBannerAdapter())
        self.reconciler = reconciler or DiscountReconciler(host)
        self.config = SaleModeConfig()
        self.history: list[ReconciliationResult] = []
        self._inbox: asyncio.Queue[ChannelEvent] = asyncio.Queue()
        self._consumer: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._consumer is not None and not self._consumer.done()

    async def start(self) -> None:
        """Initial load, then start consuming host events."""
        if self._consumer is not None:
            raise RuntimeError("SaleDiscountLock is already started")

        # Attach before reading current values so no update is missed
        self.host.settings.attach(self._inbox)
        self.host.discount_codes.attach(self._inbox)

        try:
            self.config = SaleModeConfig.from_settings(self.host.settings.current)
            self.presenter.update(self.config)
            logger.info(f"Extension rendered, sale_enabled: {self.config.enabled}")

            if self.config.enabled:
                await self._reconcile_current("initial_load")
        except Exception:
            logger.exception("Initial load failed, detaching from host")
            self.host.settings.detach(self._inbox)
            self.host.discount_codes.detach(self._inbox)
            # Drop events queued during the failed load
            self._inbox = asyncio.Queue()
            raise

        self._consumer = asyncio.create_task(self.run(), name="sale-discount-lock")

    async def stop(self) -> None:
        self.host.settings.detach(self._inbox)
        self.host.discount_codes.detach(self._inbox)
        if self._consumer is not None:
            self._consumer.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._consumer
            self._consumer = None

    async def wait_idle(self) -> None:
        """Returns once every event received so far has been handled."""
        await self._inbox.join()

    async def __aenter__(self) -> "SaleDiscountLock":
        await self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.stop()

    async def run(self) -> None:
        """Consumes host events until cancelled."""
        while True:
            event = await self._inbox.get()
            try:
                await self.handle_event(event)
            except Exception:
                logger.exception(f"Failed to handle '{event.channel}' event")
            finally:
                self._inbox.task_done()

    async def handle_event(self, event: ChannelEvent) -> None:
        if event.channel == SETTINGS_CHANNEL:
            await self.handle_settings(event.value)
        elif event.channel == DISCOUNT_CODES_CHANNEL:
            await self.handle_discount_codes(event.value)
        else:
            logger.warning(f"Ignoring event from unknown channel '{event.channel}'")

    async def handle_settings(self, raw: dict[str, Any] | None) -> ReconciliationResult | None:
        previous = self.config
        self.config = SaleModeConfig.from_settings(raw)
        self.presenter.update(self.config)
        logger.info(
            "Settings updated",
            extra={"props": {"sale_mode_enabled": self.config.enabled}},
        )

        if self.config.enabled and not previous.enabled:
            return await self._reconcile_current("sale_mode_enabled")
        return None

    async def handle_discount_codes(
        self, raw: list[dict[str, Any]] | None
    ) -> ReconciliationResult | None:
        if not self.config.enabled:
            return None
        entries = DiscountEntry.list_from_host(raw)
        if not entries:
            return None
        return await self._reconcile(entries, "discount_codes_changed")

    async def _reconcile_current(self, trigger: str) -> ReconciliationResult | None:
        entries = DiscountEntry.list_from_host(self.host.discount_codes.current)
        if not entries:
            return None
        return await self._reconcile(entries, trigger)

    async def _reconcile(
        self, entries: list[DiscountEntry], trigger: str
    ) -> ReconciliationResult:
        logger.debug(f"Reconciling {len(entries)} discount code(s) on {trigger}")
        result = await self.reconciler.reconcile(entries)
        self.history.append(result)
        return result
