"""
Shop Repository.

Stores installed shops, their offline access token and their billing
subscription state. Also owns the shop-redaction cascade.
"""

import logging
from typing import Any, Dict, Optional

from sqlalchemy import delete

from order_limits.db.models import PrepShipment, Rule, Settings, Shop
from order_limits.db.repositories.base import BaseRepository, log_operation

logger = logging.getLogger(__name__)


class ShopRepository(BaseRepository):
    """Repository for the shops table."""

    @log_operation()
    async def get(self, shop_id: str) -> Optional[Shop]:
        async with self.session() as session:
            return await session.get(Shop, shop_id)

    @log_operation()
    async def upsert(self, shop_id: str, **fields: Any) -> Shop:
        """
        Create the shop if missing, then apply the given fields.

        Args:
            shop_id: myshopify domain
            **fields: Column values to set (name, email, access_token, scope...)

        Returns:
            Shop: The stored shop
        """
        async with self.session() as session:
            shop = await session.get(Shop, shop_id)
            if shop is None:
                shop = Shop(id=shop_id, name=shop_id)
                session.add(shop)
                logger.info(f"🆕 Registered new shop: {shop_id}")

            for key, value in fields.items():
                if value is not None:
                    setattr(shop, key, value)

            await session.flush()
            await session.refresh(shop)
            return shop

    @log_operation()
    async def update_subscription(self, shop_id: str, subscription_id: Optional[str], status: Optional[str]) -> Shop:
        """Persist the subscription id/status, creating the shop if needed."""
        async with self.session() as session:
            shop = await session.get(Shop, shop_id)
            if shop is None:
                shop = Shop(id=shop_id, name=shop_id)
                session.add(shop)

            if subscription_id is not None:
                shop.subscription_id = subscription_id
            shop.subscription_status = status

            await session.flush()
            await session.refresh(shop)
            logger.info(f"💳 Subscription for {shop_id} -> {status}")
            return shop

    @log_operation()
    async def mark_uninstalled(self, shop_id: str) -> bool:
        """
        Drop the stored access token and mark the subscription cancelled.

        Returns:
            bool: False if the shop is unknown
        """
        async with self.session() as session:
            shop = await session.get(Shop, shop_id)
            if shop is None:
                return False
            shop.access_token = None
            shop.subscription_status = "CANCELLED"
            return True

    @log_operation()
    async def delete_cascade(self, shop_id: str) -> Dict[str, int]:
        """
        Remove a shop and every row that belongs to it in one transaction.

        Returns:
            Dict: Number of deleted rows per table
        """
        async with self.session() as session:
            rules = await session.execute(delete(Rule).where(Rule.shop_id == shop_id))
            settings = await session.execute(delete(Settings).where(Settings.shop_id == shop_id))
            shipments = await session.execute(delete(PrepShipment).where(PrepShipment.shop_origin == shop_id))
            shops = await session.execute(delete(Shop).where(Shop.id == shop_id))

            counts = {
                "rules": rules.rowcount,
                "settings": settings.rowcount,
                "prep_shipments": shipments.rowcount,
                "shops": shops.rowcount,
            }

        logger.info(f"🗑️ Shop data redacted for {shop_id}: {counts}")
        return counts
