"""
Endpoints para reglas de cantidad.

CRUD de reglas por producto, variante o carrito completo.
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Request

from order_limits.api.dependencies import authorize_shop, require_shop
from order_limits.api.schemas.limits_schemas import RuleCreate, RuleUpdate
from order_limits.db.repositories import RuleRepository, ShopRepository
from order_limits.utils.error_handler import AppException, NotFoundException

logger = logging.getLogger(__name__)

router = APIRouter()


async def _authorize_rule(request: Request, rule_id: str) -> None:
    """Aplica sesión y gate de suscripción sobre la tienda dueña de la regla."""
    rule = await RuleRepository().get(rule_id)
    if rule is None:
        raise NotFoundException(message="Rule not found", resource="rule", resource_id=rule_id)
    await authorize_shop(request, rule.shop_id)


@router.get("/rules")
async def list_rules(shop_id: str = Depends(require_shop)) -> Dict[str, Any]:
    """
    Lista las reglas de una tienda, más recientes primero.
    """
    try:
        rules = await RuleRepository().list_for_shop(shop_id)
        return {"success": True, "rules": [rule.to_dict() for rule in rules]}
    except AppException:
        raise
    except Exception as e:
        logger.error(f"❌ Error fetching rules for {shop_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch rules")


@router.post("/rules")
async def create_rule(body: RuleCreate, shop_id: str = Depends(require_shop)) -> Dict[str, Any]:
    """
    Crea una regla habilitada. Registra la tienda si aún no existe.
    """
    try:
        await ShopRepository().upsert(shop_id)
        rule = await RuleRepository().create(
            shop_id=shop_id,
            rule_type=body.ruleType.value,
            target_id=body.targetId,
            target_title=body.targetTitle,
            min_quantity=body.minQuantity,
            max_quantity=body.maxQuantity,
            message=body.message,
        )
        return {"success": True, "rule": rule.to_dict()}
    except AppException:
        raise
    except Exception as e:
        logger.error(f"❌ Error creating rule for {shop_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to create rule")


@router.put("/rules/{rule_id}")
async def update_rule(rule_id: str, body: RuleUpdate, request: Request) -> Dict[str, Any]:
    """
    Actualización parcial: solo se modifican los campos enviados.
    """
    await _authorize_rule(request, rule_id)
    try:
        rule = await RuleRepository().update(rule_id, body.to_changes())
        return {"success": True, "rule": rule.to_dict()}
    except AppException:
        raise
    except Exception as e:
        logger.error(f"❌ Error updating rule {rule_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to update rule")


@router.delete("/rules/{rule_id}")
async def delete_rule(rule_id: str, request: Request) -> Dict[str, Any]:
    await _authorize_rule(request, rule_id)
    try:
        await RuleRepository().delete(rule_id)
        return {"success": True}
    except AppException:
        raise
    except Exception as e:
        logger.error(f"❌ Error deleting rule {rule_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to delete rule")
