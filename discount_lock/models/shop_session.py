from sqlalchemy import Column, DateTime, String, Text, func

from discount_lock.database import Base


class ShopSession(Base):
    """Offline (shop-scoped) Shopify session obtained by the OAuth callback."""

    __tablename__ = "shop_sessions"

    shop = Column(String(255), primary_key=True)  # e.g. my-store.myshopify.com
    access_token = Column(Text, nullable=False)
    scope = Column(Text)  # comma-separated, as granted by Shopify
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self):
        return f"<ShopSession(shop='{self.shop}', scope='{self.scope}')>"
