"""
Endpoints para webhooks de Shopify.

Topics obligatorios de privacidad (GDPR) y desinstalación de la app.
Todas las rutas verifican la firma HMAC antes de procesar.
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, HTTPException, Request, status

from order_limits.services.webhook_handler import (
    TOPIC_APP_UNINSTALLED,
    TOPIC_CUSTOMERS_DATA_REQUEST,
    TOPIC_CUSTOMERS_REDACT,
    TOPIC_SHOP_REDACT,
    WebhookProcessor,
    validate_webhook_request,
)
from order_limits.utils.error_handler import AppException, log_error

logger = logging.getLogger(__name__)

router = APIRouter()


async def _handle(request: Request, topic: str) -> Dict[str, Any]:
    shop, payload = await validate_webhook_request(request, topic)
    try:
        return await WebhookProcessor().process_webhook(
            topic, shop, payload, webhook_id=request.headers.get("X-Shopify-Webhook-Id")
        )
    except AppException:
        raise
    except Exception as e:
        # 500 para que Shopify reintente la entrega
        log_error(e, {"topic": topic, "shop": shop})
        raise HTTPException(status_code=500, detail="Webhook processing failed")


@router.post("/customers/data_request", status_code=status.HTTP_200_OK)
async def customers_data_request(request: Request) -> Dict[str, Any]:
    """La app no guarda datos de clientes: solo se confirma la recepción."""
    return await _handle(request, TOPIC_CUSTOMERS_DATA_REQUEST)


@router.post("/customers/redact", status_code=status.HTTP_200_OK)
async def customers_redact(request: Request) -> Dict[str, Any]:
    return await _handle(request, TOPIC_CUSTOMERS_REDACT)


@router.post("/shop/redact", status_code=status.HTTP_200_OK)
async def shop_redact(request: Request) -> Dict[str, Any]:
    """Elimina reglas, settings, prep shipments y el registro de la tienda."""
    return await _handle(request, TOPIC_SHOP_REDACT)


@router.post("/app/uninstalled", status_code=status.HTTP_200_OK)
async def app_uninstalled(request: Request) -> Dict[str, Any]:
    return await _handle(request, TOPIC_APP_UNINSTALLED)
