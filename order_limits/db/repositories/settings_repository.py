"""
Settings Repository.

One settings row per shop, created lazily on first read.
"""

import logging
from typing import Any, Dict, Optional

from sqlalchemy import select

from order_limits.db.models import Settings
from order_limits.db.repositories.base import BaseRepository, log_operation
from order_limits.utils.error_handler import ValidationException

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = (
    "global_min_cart",
    "global_max_cart",
    "show_cart_warning",
    "block_checkout",
    "custom_message_enabled",
)


class SettingsRepository(BaseRepository):
    """Repository for the settings table."""

    async def _find(self, session, shop_id: str) -> Optional[Settings]:
        result = await session.execute(select(Settings).where(Settings.shop_id == shop_id))
        return result.scalar_one_or_none()

    @log_operation()
    async def get(self, shop_id: str) -> Optional[Settings]:
        """Stored settings or None; never creates a row."""
        async with self.session() as session:
            return await self._find(session, shop_id)

    @log_operation()
    async def get_or_create(self, shop_id: str) -> Settings:
        async with self.session() as session:
            settings = await self._find(session, shop_id)
            if settings is None:
                settings = Settings(shop_id=shop_id)
                session.add(settings)
                await session.flush()
                await session.refresh(settings)
                logger.info(f"⚙️ Default settings created for {shop_id}")
            return settings

    @log_operation()
    async def upsert(self, shop_id: str, changes: Dict[str, Any]) -> Settings:
        """
        Create or update the shop's settings with the given fields.

        Raises:
            ValidationException: If globalMinCart > globalMaxCart after the update
        """
        async with self.session() as session:
            settings = await self._find(session, shop_id)
            if settings is None:
                settings = Settings(shop_id=shop_id)
                session.add(settings)

            for key, value in changes.items():
                if key in UPDATABLE_FIELDS:
                    setattr(settings, key, value)

            if (
                settings.global_min_cart is not None
                and settings.global_max_cart is not None
                and settings.global_min_cart > settings.global_max_cart
            ):
                raise ValidationException(
                    message="Global minimum cart quantity cannot be greater than the maximum",
                    field="globalMinCart",
                    invalid_value=settings.global_min_cart,
                    expected_format=f"<= {settings.global_max_cart}",
                )

            await session.flush()
            await session.refresh(settings)

        logger.info(f"⚙️ Settings saved for {shop_id}")
        return settings
