from .shop_session import aget_shop_session, asave_shop_session

__all__ = ["aget_shop_session", "asave_shop_session"]
