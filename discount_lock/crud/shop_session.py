import logging

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from discount_lock.models.shop_session import ShopSession

logger = logging.getLogger(__name__)


async def aget_shop_session(db: AsyncSession, shop: str) -> ShopSession | None:
    """Gets the stored offline session for a shop."""
    stmt = select(ShopSession).filter(ShopSession.shop == shop)
    result = await db.execute(stmt)
    return result.scalars().first()


async def asave_shop_session(
    db: AsyncSession, *, shop: str, access_token: str, scope: str | None
) -> ShopSession:
    """Creates or updates the offline session for a shop without committing.

    Flushes and refreshes the object before returning.
    """
    db_obj = await aget_shop_session(db, shop)
    if db_obj:
        db_obj.access_token = access_token
        db_obj.scope = scope
    else:
        db_obj = ShopSession(shop=shop, access_token=access_token, scope=scope)
        db.add(db_obj)

    await db.flush()
    await db.refresh(db_obj)
    logger.debug(f"Saved offline session for shop {shop}")
    return db_obj
