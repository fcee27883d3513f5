"""
Manejador de webhooks de Shopify.

Este módulo verifica la firma HMAC de los webhooks y procesa los topics
obligatorios de privacidad (GDPR) y la desinstalación de la app.
"""

import base64
import binascii
import hashlib
import hmac
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

from fastapi import Request

from order_limits.core.config import get_settings
from order_limits.core.logging_config import log_webhook_received
from order_limits.db.repositories import ShopRepository
from order_limits.utils.error_handler import BadRequestException, WebhookVerificationException

settings = get_settings()
logger = logging.getLogger(__name__)

TOPIC_CUSTOMERS_DATA_REQUEST = "customers/data_request"
TOPIC_CUSTOMERS_REDACT = "customers/redact"
TOPIC_SHOP_REDACT = "shop/redact"
TOPIC_APP_UNINSTALLED = "app/uninstalled"


class WebhookProcessor:
    """
    Procesador principal de webhooks de Shopify.
    """

    def __init__(self, shop_repository: Optional[ShopRepository] = None):
        """Inicializa el procesador de webhooks."""
        self.shop_repository = shop_repository or ShopRepository()

    def verify_webhook_signature(self, payload: bytes, signature: Optional[str]) -> bool:
        """
        Verifica la firma HMAC del webhook.

        Args:
            payload: Body crudo del webhook en bytes
            signature: Valor del header X-Shopify-Hmac-Sha256 (base64)

        Returns:
            bool: True si la firma es válida
        """
        secret = settings.SHOPIFY_API_SECRET
        if not secret:
            logger.error("❌ SHOPIFY_API_SECRET not configured, rejecting webhook")
            return False

        if not signature:
            return False

        expected_signature = hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).digest()

        try:
            received_signature = base64.b64decode(signature.strip(), validate=True)
        except (binascii.Error, ValueError):
            return False

        # Comparación segura contra timing attacks
        return hmac.compare_digest(expected_signature, received_signature)

    async def process_webhook(
        self,
        topic: str,
        shop: Optional[str],
        payload: Dict[str, Any],
        webhook_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Procesa un webhook ya verificado según su topic.

        Args:
            topic: Topic del webhook (ej: shop/redact)
            shop: Dominio de la tienda (header X-Shopify-Shop-Domain o payload)
            payload: Datos del webhook
            webhook_id: ID único del webhook

        Returns:
            Dict: Resultado del procesamiento
        """
        start_time = datetime.now(timezone.utc)
        log_webhook_received(topic, shop, webhook_id=webhook_id)

        result = await self._route_webhook(topic, shop, payload)

        duration = (datetime.now(timezone.utc) - start_time).total_seconds()
        logger.info(f"✅ Webhook processed in {duration:.2f}s: {topic} ({shop})")

        return {"status": "success", "topic": topic, "webhook_id": webhook_id, "result": result}

    async def _route_webhook(self, topic: str, shop: Optional[str], payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Enruta webhooks a sus manejadores específicos.
        """
        handlers = {
            TOPIC_CUSTOMERS_DATA_REQUEST: self._handle_customers_data_request,
            TOPIC_CUSTOMERS_REDACT: self._handle_customers_redact,
            TOPIC_SHOP_REDACT: self._handle_shop_redact,
            TOPIC_APP_UNINSTALLED: self._handle_app_uninstalled,
        }

        handler = handlers.get(topic.lower())
        if not handler:
            logger.warning(f"⚠️ No handler found for webhook topic: {topic}")
            return {"status": "ignored", "reason": f"unsupported topic: {topic}"}

        return await handler(shop, payload)

    async def _handle_customers_data_request(self, shop: Optional[str], payload: Dict[str, Any]) -> Dict[str, Any]:
        # No se almacenan datos de clientes: nada que exportar
        customer_id = (payload.get("customer") or {}).get("id")
        logger.info(f"📨 Customer data request for {shop} (customer {customer_id}): no customer data stored")
        return {"status": "acknowledged", "customer_data": None}

    async def _handle_customers_redact(self, shop: Optional[str], payload: Dict[str, Any]) -> Dict[str, Any]:
        customer_id = (payload.get("customer") or {}).get("id")
        logger.info(f"📨 Customer redact for {shop} (customer {customer_id}): no customer data stored")
        return {"status": "acknowledged"}

    async def _handle_shop_redact(self, shop: Optional[str], payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Elimina todos los datos de la tienda: reglas, settings, prep shipments y la tienda.
        """
        shop = shop or payload.get("shop_domain")
        if not shop:
            raise BadRequestException("Missing shop domain", missing_fields=["shop_domain"])

        deleted = await self.shop_repository.delete_cascade(shop)
        return {"status": "redacted", "shop": shop, "deleted": deleted}

    async def _handle_app_uninstalled(self, shop: Optional[str], payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Invalida el token guardado y marca la suscripción como cancelada.
        """
        shop = shop or payload.get("myshopify_domain") or payload.get("domain")
        if not shop:
            raise BadRequestException("Missing shop domain", missing_fields=["myshopify_domain"])

        found = await self.shop_repository.mark_uninstalled(shop)
        if not found:
            logger.warning(f"⚠️ Uninstall webhook for unknown shop: {shop}")
        else:
            logger.info(f"🛑 App uninstalled from {shop}")
        return {"status": "uninstalled", "shop": shop, "known_shop": found}


async def validate_webhook_request(request: Request, topic: str) -> Tuple[Optional[str], Dict[str, Any]]:
    """
    Valida una request de webhook de Shopify.

    Args:
        request: Request de FastAPI
        topic: Topic esperado por la ruta (se usa si falta el header)

    Returns:
        Tuple: (shop_domain, payload)

    Raises:
        WebhookVerificationException: Si la firma falta o no coincide
        BadRequestException: Si el body no es JSON válido
    """
    signature = request.headers.get("X-Shopify-Hmac-Sha256")
    shop_domain = request.headers.get("X-Shopify-Shop-Domain")
    header_topic = request.headers.get("X-Shopify-Topic") or topic

    payload_bytes = await request.body()

    processor = WebhookProcessor()
    if not processor.verify_webhook_signature(payload_bytes, signature):
        logger.warning(f"❌ Invalid webhook signature: {header_topic} from {shop_domain}")
        raise WebhookVerificationException(topic=header_topic)

    try:
        payload = json.loads(payload_bytes.decode("utf-8")) if payload_bytes else {}
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise BadRequestException(f"Invalid JSON payload: {str(e)}") from e

    if not isinstance(payload, dict):
        raise BadRequestException("Invalid JSON payload: expected an object")

    logger.debug(f"Validated webhook: {header_topic} from {shop_domain}")
    return shop_domain, payload
