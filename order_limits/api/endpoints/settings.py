"""
Endpoints para settings de la tienda (límites globales del carrito y toggles).
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException

from order_limits.api.dependencies import require_shop
from order_limits.api.schemas.limits_schemas import SettingsUpdate
from order_limits.db.repositories import SettingsRepository, ShopRepository
from order_limits.utils.error_handler import AppException

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/settings")
async def get_settings_endpoint(shop_id: str = Depends(require_shop)) -> Dict[str, Any]:
    """
    Obtiene los settings de la tienda, creándolos con valores por defecto si no existen.
    """
    try:
        await ShopRepository().upsert(shop_id)
        settings_row = await SettingsRepository().get_or_create(shop_id)
        return {"success": True, "settings": settings_row.to_dict()}
    except AppException:
        raise
    except Exception as e:
        logger.error(f"❌ Error fetching settings for {shop_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch settings")


@router.put("/settings")
async def update_settings(body: SettingsUpdate, shop_id: str = Depends(require_shop)) -> Dict[str, Any]:
    try:
        await ShopRepository().upsert(shop_id)
        settings_row = await SettingsRepository().upsert(shop_id, body.to_changes())
        return {"success": True, "settings": settings_row.to_dict()}
    except AppException:
        raise
    except Exception as e:
        logger.error(f"❌ Error updating settings for {shop_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to update settings")
