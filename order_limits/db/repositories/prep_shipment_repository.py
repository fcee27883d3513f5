"""
Prep Shipment Repository.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from order_limits.db.models import PrepShipment, PrepShipmentStatus
from order_limits.db.repositories.base import BaseRepository, log_operation
from order_limits.utils.error_handler import ConflictException, NotFoundException

logger = logging.getLogger(__name__)


class PrepShipmentRepository(BaseRepository):
    """Repository for the prep_shipments table."""

    @log_operation()
    async def list_for_shop(self, shop_id: str) -> List[PrepShipment]:
        async with self.session() as session:
            result = await session.execute(
                select(PrepShipment)
                .where(PrepShipment.shop_origin == shop_id)
                .order_by(PrepShipment.created_at.desc())
            )
            return list(result.scalars().all())

    async def get(self, record_id: str) -> Optional[PrepShipment]:
        async with self.session() as session:
            return await session.get(PrepShipment, record_id)

    @log_operation()
    async def create(
        self,
        shop_id: str,
        shipment_id: str,
        units: int,
        status: Optional[PrepShipmentStatus] = None,
    ) -> PrepShipment:
        """
        Raises:
            ConflictException: If the shipment id already exists for the shop
        """
        async with self.session() as session:
            existing = await session.execute(
                select(PrepShipment.id).where(
                    PrepShipment.shipment_id == shipment_id, PrepShipment.shop_origin == shop_id
                )
            )
            if existing.first() is not None:
                raise ConflictException(
                    message=f"Shipment {shipment_id} already exists",
                    details={"shipment_id": shipment_id, "shop": shop_id},
                )

            shipment = PrepShipment(
                shop_origin=shop_id,
                shipment_id=shipment_id,
                units=units,
                status=status or PrepShipmentStatus.PENDING,
            )
            session.add(shipment)
            try:
                await session.flush()
            except IntegrityError as e:
                raise ConflictException(
                    message=f"Shipment {shipment_id} already exists",
                    details={"shipment_id": shipment_id, "shop": shop_id},
                ) from e
            await session.refresh(shipment)

        logger.info(f"📦 Prep shipment {shipment_id} created for {shop_id}")
        return shipment

    @log_operation()
    async def update(self, record_id: str, changes: Dict[str, Any]) -> PrepShipment:
        """
        Update status and/or units.

        Raises:
            NotFoundException: If the record does not exist
        """
        async with self.session() as session:
            shipment = await session.get(PrepShipment, record_id)
            if shipment is None:
                raise NotFoundException(
                    message="Prep shipment not found", resource="prep_shipment", resource_id=record_id
                )

            if changes.get("status") is not None:
                shipment.status = changes["status"]
            if changes.get("units") is not None:
                shipment.units = changes["units"]

            await session.flush()
            await session.refresh(shipment)

        return shipment
