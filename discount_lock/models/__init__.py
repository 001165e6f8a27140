from .shop_session import ShopSession

__all__ = ["ShopSession"]
