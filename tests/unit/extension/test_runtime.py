import pytest
import pytest_asyncio
from pydantic import ValidationError

from discount_lock.extension.banner import (
    BannerState,
    ComponentTreeBannerAdapter,
    DomTreeBannerAdapter,
)
from discount_lock.extension.host import InMemoryCheckoutHost
from discount_lock.extension.runtime import SaleDiscountLock

ON = {"sale_mode_enabled": True, "sale_message": "Sale on"}
OFF = {"sale_mode_enabled": False, "sale_message": "Sale on"}


def requested_codes(host: InMemoryCheckoutHost) -> list[str]:
    return [change["code"] for change in host.change_requests]


# --- Fixtures ---


@pytest_asyncio.fixture
async def started():
    """Starts an extension on a host and always stops it afterwards."""
    extensions: list[SaleDiscountLock] = []

    async def _start(host: InMemoryCheckoutHost, **kwargs) -> SaleDiscountLock:
        extension = SaleDiscountLock(host, **kwargs)
        await extension.start()
        extensions.append(extension)
        return extension

    yield _start
    for extension in extensions:
        await extension.stop()


# --- Test Cases ---


@pytest.mark.asyncio
async def test_disabled_issues_no_requests_and_renders_nothing(started):
    host = InMemoryCheckoutHost(settings=OFF, discount_codes=["A", "B"])
    adapter = ComponentTreeBannerAdapter()
    extension = await started(host, adapter=adapter)

    host.set_discount_codes(["A", "B", "C"])
    await extension.wait_idle()

    assert host.change_requests == []
    assert adapter.tree is None
    assert extension.presenter.state == BannerState.HIDDEN


@pytest.mark.asyncio
async def test_initial_load_removes_existing_codes(started):
    host = InMemoryCheckoutHost(settings=ON, discount_codes=["A", "B"])
    adapter = DomTreeBannerAdapter()
    await started(host, adapter=adapter)

    assert requested_codes(host) == ["A", "B"]
    assert host.applied_codes == []
    assert adapter.root.find("s-text").text == "Sale on"


@pytest.mark.asyncio
async def test_codes_added_while_enabled_are_removed(started):
    host = InMemoryCheckoutHost(settings=ON)
    extension = await started(host)
    assert host.change_requests == []

    host.set_discount_codes(["SAVE10", "WELCOME"])
    await extension.wait_idle()

    assert requested_codes(host) == ["SAVE10", "WELCOME"]
    assert extension.history[-1].removed == ["SAVE10", "WELCOME"]


@pytest.mark.asyncio
async def test_enabling_sale_mode_rechecks_current_codes(started):
    host = InMemoryCheckoutHost(settings=OFF, discount_codes=["A"])
    extension = await started(host)
    assert host.change_requests == []

    host.update_settings(sale_mode_enabled=True)
    await extension.wait_idle()

    assert requested_codes(host) == ["A"]
    assert extension.presenter.state == BannerState.SHOWN


@pytest.mark.asyncio
async def test_settings_change_while_enabled_does_not_rerun(started):
    host = InMemoryCheckoutHost(settings=ON, discount_codes=["A"], rejected_codes={"A"})
    extension = await started(host)
    assert requested_codes(host) == ["A"]

    host.update_settings(sale_message="Still on sale")
    await extension.wait_idle()

    assert requested_codes(host) == ["A"]
    assert extension.presenter.message == "Still on sale"


@pytest.mark.asyncio
async def test_disabling_stops_removals(started):
    host = InMemoryCheckoutHost(settings=ON)
    extension = await started(host)

    host.update_settings(sale_mode_enabled=False)
    host.set_discount_codes(["A"])
    await extension.wait_idle()

    assert host.change_requests == []
    assert host.applied_codes == ["A"]
    assert extension.presenter.state == BannerState.HIDDEN


@pytest.mark.asyncio
async def test_no_requests_without_permission(started):
    host = InMemoryCheckoutHost(
        settings=ON, discount_codes=["A"], can_update_discount_codes=False
    )
    extension = await started(host)

    host.set_discount_codes(["A", "B"])
    await extension.wait_idle()

    assert host.change_requests == []
    assert all(result.skipped for result in extension.history)
    assert len(extension.history) == 2


@pytest.mark.asyncio
async def test_failing_code_does_not_block_the_rest(started):
    host = InMemoryCheckoutHost(settings=ON, failing_codes={"B"})
    extension = await started(host)

    host.set_discount_codes(["A", "B", "C"])
    await extension.wait_idle()

    assert requested_codes(host) == ["A", "B", "C"]
    assert extension.history[-1].failed == ["B"]
    assert host.applied_codes == ["B"]


@pytest.mark.asyncio
async def test_batches_for_newer_lists_run_after_the_current_one(started):
    host = InMemoryCheckoutHost(
        settings=ON, discount_codes=["A", "B"], publish_removals=True
    )
    extension = await started(host)
    await extension.wait_idle()

    # Initial batch removes A and B; the re-delivered list [B] gets its own batch
    assert requested_codes(host) == ["A", "B", "B"]
    assert host.applied_codes == []


@pytest.mark.asyncio
async def test_malformed_event_does_not_stop_the_loop(started):
    host = InMemoryCheckoutHost(settings=ON)
    extension = await started(host)

    host.discount_codes.publish([{"not_a_code": True}])
    host.set_discount_codes(["A"])
    await extension.wait_idle()

    assert extension.running
    assert requested_codes(host) == ["A"]


@pytest.mark.asyncio
async def test_stop_detaches_from_host():
    host = InMemoryCheckoutHost(settings=ON)
    async with SaleDiscountLock(host) as extension:
        assert extension.running
        assert host.settings.subscriber_count == 1

    assert not extension.running
    assert host.settings.subscriber_count == 0
    assert host.discount_codes.subscriber_count == 0

    host.set_discount_codes(["A"])
    assert host.change_requests == []


@pytest.mark.asyncio
async def test_start_twice_is_rejected(started):
    extension = await started(InMemoryCheckoutHost())
    with pytest.raises(RuntimeError):
        await extension.start()


@pytest.mark.asyncio
async def test_failed_initial_load_detaches_and_can_be_retried():
    host = InMemoryCheckoutHost(settings=ON)
    host.discount_codes.publish([{"not_a_code": True}], notify=False)
    extension = SaleDiscountLock(host)

    with pytest.raises(ValidationError):
        await extension.start()

    assert not extension.running
    assert host.settings.subscriber_count == 0
    assert host.discount_codes.subscriber_count == 0
    assert host.change_requests == []

    host.discount_codes.publish([{"code": "A"}], notify=False)
    await extension.start()
    try:
        assert requested_codes(host) == ["A"]
        assert extension.running
    finally:
        await extension.stop()
