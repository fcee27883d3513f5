"""
Endpoints para prep shipments.
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Request

from order_limits.api.dependencies import authorize_shop, require_shop
from order_limits.api.schemas.shipment_schemas import PrepShipmentCreate, PrepShipmentUpdate
from order_limits.db.repositories import PrepShipmentRepository, ShopRepository
from order_limits.utils.error_handler import AppException, NotFoundException

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/prep-shipments")


@router.get("")
async def list_prep_shipments(shop_id: str = Depends(require_shop)) -> Dict[str, Any]:
    try:
        shipments = await PrepShipmentRepository().list_for_shop(shop_id)
        return {"success": True, "prepShipments": [s.to_dict() for s in shipments]}
    except AppException:
        raise
    except Exception as e:
        logger.error(f"❌ Error fetching prep shipments for {shop_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch prep shipments")


@router.post("")
async def create_prep_shipment(body: PrepShipmentCreate, shop_id: str = Depends(require_shop)) -> Dict[str, Any]:
    try:
        await ShopRepository().upsert(shop_id)
        shipment = await PrepShipmentRepository().create(shop_id, body.shipmentId, body.units, body.status)
        return {"success": True, "prepShipment": shipment.to_dict()}
    except AppException:
        raise
    except Exception as e:
        logger.error(f"❌ Error creating prep shipment for {shop_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to create prep shipment")


@router.put("/{record_id}")
async def update_prep_shipment(record_id: str, body: PrepShipmentUpdate, request: Request) -> Dict[str, Any]:
    existing = await PrepShipmentRepository().get(record_id)
    if existing is None:
        raise NotFoundException(message="Prep shipment not found", resource="prep_shipment", resource_id=record_id)
    await authorize_shop(request, existing.shop_origin)

    try:
        shipment = await PrepShipmentRepository().update(record_id, body.model_dump(exclude_none=True))
        return {"success": True, "prepShipment": shipment.to_dict()}
    except AppException:
        raise
    except Exception as e:
        logger.error(f"❌ Error updating prep shipment {record_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to update prep shipment")
