"""
Endpoint de validación de carrito llamado desde el storefront.

No pasa por el gate de suscripción: el storefront no tiene session token.
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, HTTPException

from order_limits.api.schemas.limits_schemas import ValidateCartRequest
from order_limits.db.repositories import RuleRepository, SettingsRepository
from order_limits.domain.models.cart import CartItem
from order_limits.services.cart import CartValidator
from order_limits.utils.error_handler import AppException, BadRequestException
from order_limits.utils.shopify_utils import normalize_shop_domain

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/validate-cart")
async def validate_cart(body: ValidateCartRequest) -> Dict[str, Any]:
    """
    Valida un carrito contra las reglas habilitadas y los settings de la tienda.

    Returns:
        Dict: ``{success, valid, violations, blockCheckout, showWarning, totalQuantity}``
    """
    shop = normalize_shop_domain(body.shop, lenient=True)
    if not shop or body.items is None:
        raise BadRequestException("Missing shop or items", missing_fields=["shop", "items"])

    try:
        rules = await RuleRepository().list_enabled(shop)
        settings_row = await SettingsRepository().get(shop)

        items = [CartItem.from_dict(item.model_dump()) for item in body.items]
        result = CartValidator().validate(items, rules, settings_row)

        return {"success": True, **result.to_dict()}
    except AppException:
        raise
    except Exception as e:
        logger.error(f"❌ Error validating cart for {shop}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Validation failed")
