"""Checkout extension core: Sale Mode banner plus discount-code removal."""

from .banner import (
    BannerAdapter,
    BannerPresenter,
    BannerState,
    Component,
    ComponentTreeBannerAdapter,
    DomTreeBannerAdapter,
    Node,
)
from .host import CheckoutHost, DiscountCodeChangeError, InMemoryCheckoutHost
from .models import (
    DEFAULT_SALE_MESSAGE,
    DiscountCodeChange,
    DiscountEntry,
    PermissionState,
    SaleModeConfig,
)
from .reconciler import DiscountReconciler, ReconciliationResult
from .runtime import SaleDiscountLock

__all__ = [
    "DEFAULT_SALE_MESSAGE",
    "BannerAdapter",
    "BannerPresenter",
    "BannerState",
    "CheckoutHost",
    "Component",
    "ComponentTreeBannerAdapter",
    "DiscountCodeChange",
    "DiscountCodeChangeError",
    "DiscountEntry",
    "DiscountReconciler",
    "DomTreeBannerAdapter",
    "InMemoryCheckoutHost",
    "Node",
    "PermissionState",
    "ReconciliationResult",
    "SaleDiscountLock",
    "SaleModeConfig",
]
