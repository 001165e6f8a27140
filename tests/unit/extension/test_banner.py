from unittest.mock import MagicMock

from discount_lock.extension.banner import (
    BannerPresenter,
    BannerState,
    Component,
    ComponentTreeBannerAdapter,
    DomTreeBannerAdapter,
    Node,
)
from discount_lock.extension.models import DEFAULT_SALE_MESSAGE, SaleModeConfig

ENABLED = SaleModeConfig(enabled=True, message="Sale on, codes off")
DISABLED = SaleModeConfig(enabled=False)


# --- Imperative element tree ---


def test_dom_tree_renders_nothing_while_disabled():
    adapter = DomTreeBannerAdapter()
    presenter = BannerPresenter(adapter)

    assert presenter.update(DISABLED) == BannerState.HIDDEN
    assert adapter.root.children == []


def test_dom_tree_mounts_info_banner_with_message():
    root = Node("body", children=[Node("div")])
    adapter = DomTreeBannerAdapter(root)
    presenter = BannerPresenter(adapter)

    assert presenter.update(ENABLED) == BannerState.SHOWN
    banner = root.find("s-banner")
    assert banner is not None
    assert banner.attributes == {"status": "info"}
    assert banner.find("s-text").text == "Sale on, codes off"
    assert len(root.children) == 2


def test_dom_tree_updates_in_place_and_unmounts():
    adapter = DomTreeBannerAdapter()
    presenter = BannerPresenter(adapter)

    presenter.update(ENABLED)
    banner = adapter.root.find("s-banner")
    presenter.update(SaleModeConfig(enabled=True, message="New copy"))

    assert adapter.root.find("s-banner") is banner
    assert banner.find("s-text").text == "New copy"
    assert len(adapter.root.children) == 1

    presenter.update(DISABLED)
    assert adapter.root.find("s-banner") is None
    assert presenter.message is None


# --- Declarative component tree ---


def test_component_tree_renders_banner_or_nothing():
    adapter = ComponentTreeBannerAdapter()
    presenter = BannerPresenter(adapter)

    presenter.update(DISABLED)
    assert adapter.tree is None

    presenter.update(SaleModeConfig.from_settings({"sale_mode_enabled": True}))
    assert adapter.tree == Component(
        "Banner",
        {"status": "info"},
        (Component("Text", {}, (DEFAULT_SALE_MESSAGE,)),),
    )
    assert presenter.state == BannerState.SHOWN


def test_component_tree_only_reports_changes():
    on_render = MagicMock()
    presenter = BannerPresenter(ComponentTreeBannerAdapter(on_render=on_render))

    presenter.update(DISABLED)  # already hidden
    presenter.update(ENABLED)
    presenter.update(ENABLED)
    presenter.update(DISABLED)

    assert on_render.call_count == 2
    assert on_render.call_args_list[0].args[0].type == "Banner"
    assert on_render.call_args_list[1].args[0] is None
