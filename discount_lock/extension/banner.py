"""Sale banner state machine and its two rendering adapters.

The presenter decides HIDDEN or SHOWN from the config alone. Adapters only
translate that decision for a UI API shape: an imperative element tree that is
mutated in place, or a declarative tree that is re-rendered as a whole.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from discount_lock.extension.models import SaleModeConfig

logger = logging.getLogger(__name__)


class BannerState(str, Enum):
    HIDDEN = "hidden"
    SHOWN = "shown"


class BannerAdapter(ABC):
    @abstractmethod
    def show(self, message: str) -> None:
        ...

    @abstractmethod
    def hide(self) -> None:
        ...


# --- Imperative element tree ---


@dataclass
class Node:
    tag: str
    attributes: dict[str, str] = field(default_factory=dict)
    children: list["Node"] = field(default_factory=list)
    text: str | None = None

    def find(self, tag: str) -> "Node | None":
        """Depth-first search for the first descendant with ``tag``."""
        for child in self.children:
            if child.tag == tag:
                return child
            found = child.find(tag)
            if found is not None:
                return found
        return None


class DomTreeBannerAdapter(BannerAdapter):
    """Mounts ``<s-banner status="info"><s-text>`` under ``root`` and edits it in place."""

    def __init__(self, root: Node | None = None):
        self.root = root or Node("body")
        self._banner: Node | None = None

    def show(self, message: str) -> None:
        if self._banner is None:
            self._banner = Node(
                "s-banner",
                attributes={"status": "info"},
                children=[Node("s-text", text=message)],
            )
            self.root.children.append(self._banner)
            return
        self._banner.children[0].text = message

    def hide(self) -> None:
        if self._banner is None:
            return
        self.root.children.remove(self._banner)
        self._banner = None


# --- Declarative component tree ---


@dataclass(frozen=True)
class Component:
    type: str
    props: dict[str, Any] = field(default_factory=dict)
    children: tuple[Any, ...] = ()


def render_banner(message: str | None) -> Component | None:
    if message is None:
        return None
    return Component("Banner", {"status": "info"}, (Component("Text", {}, (message,)),))


class ComponentTreeBannerAdapter(BannerAdapter):
    """Keeps the last rendered tree; ``on_render`` is called only when it changes."""

    def __init__(self, on_render: Callable[[Component | None], None] | None = None):
        self.tree: Component | None = None
        self._on_render = on_render

    def show(self, message: str) -> None:
        self._commit(render_banner(message))

    def hide(self) -> None:
        self._commit(None)

    def _commit(self, tree: Component | None) -> None:
        if tree == self.tree:
            return
        self.tree = tree
        if self._on_render is not None:
            self._on_render(tree)


class BannerPresenter:
    def __init__(self, adapter: BannerAdapter):
        self.adapter = adapter
        self.state = BannerState.HIDDEN
        self.message: str | None = None

    def update(self, config: SaleModeConfig) -> BannerState:
        previous = self.state
        if config.enabled:
            self.adapter.show(config.message)
            self.state = BannerState.SHOWN
            self.message = config.message
        else:
            self.adapter.hide()
            self.state = BannerState.HIDDEN
            self.message = None

        if previous != self.state:
            logger.debug(f"Banner {previous.value} -> {self.state.value}")
        return self.state
