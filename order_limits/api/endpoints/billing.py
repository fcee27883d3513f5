"""
Endpoints de billing: suscripción recurrente de la app.

Autenticados con el session token del admin embebido; las llamadas a
Shopify usan el token offline guardado de la tienda.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import RedirectResponse

from order_limits.api.dependencies import get_session_shop
from order_limits.core.config import get_settings
from order_limits.services.billing_service import BillingService
from order_limits.utils.error_handler import AppException, BadRequestException
from order_limits.utils.shopify_utils import embedded_app_url, normalize_shop_domain

settings = get_settings()
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/billing")


@router.get("/subscribe")
async def subscribe(shop: str = Depends(get_session_shop)) -> Dict[str, Any]:
    """
    Crea la suscripción y devuelve la URL de confirmación de Shopify.
    """
    try:
        confirmation_url = await BillingService().create_recurring_charge(shop)
        logger.info(f"💳 Subscription requested by {shop}")
        return {"confirmationUrl": confirmation_url}
    except AppException:
        raise
    except Exception as e:
        logger.error(f"❌ Subscription error for {shop}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to create subscription")


@router.get("/status")
async def subscription_status(shop: str = Depends(get_session_shop)) -> Dict[str, Any]:
    try:
        return await BillingService().check_subscription_status(shop)
    except AppException:
        raise
    except Exception as e:
        logger.error(f"❌ Status check error for {shop}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to check subscription status")


@router.post("/cancel")
async def cancel_subscription(shop: str = Depends(get_session_shop)) -> Dict[str, Any]:
    try:
        subscription = await BillingService().cancel_subscription(shop)
        return {"success": True, "subscription": subscription}
    except AppException:
        raise
    except Exception as e:
        logger.error(f"❌ Cancel subscription error for {shop}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to cancel subscription")


@router.get("/callback")
async def billing_callback(
    shop: Optional[str] = Query(None),
    charge_id: Optional[str] = Query(None),
) -> RedirectResponse:
    """
    Retorno desde la pantalla de aprobación de Shopify: refresca el estado
    guardado y redirige a la app embebida.
    """
    shop_domain = normalize_shop_domain(shop)
    if not shop_domain:
        raise BadRequestException("Missing or invalid shop", missing_fields=["shop"])

    try:
        status = await BillingService().check_subscription_status(shop_domain)
        logger.info(
            f"💳 Billing callback for {shop_domain} (charge {charge_id}): "
            f"active={status['hasActiveSubscription']}"
        )
    except AppException as e:
        logger.warning(f"⚠️ Could not refresh subscription for {shop_domain} after approval: {e}")

    return RedirectResponse(url=embedded_app_url(shop_domain, settings.SHOPIFY_API_KEY), status_code=302)
