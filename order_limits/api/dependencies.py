"""
Dependencias compartidas de FastAPI.

- Resolución del shop de la request (session token, parámetro, body o DEFAULT_SHOP)
- Autenticación por session token del admin embebido
- Gate de suscripción para las rutas del merchant

Las rutas del merchant reciben el shop ya autorizado desde ``require_shop``
(o desde ``authorize_shop`` cuando el shop sale del registro que se modifica),
de modo que el gate y la ruta siempre operan sobre la misma tienda.
"""

import json
import logging
from typing import Optional

from fastapi import Query, Request

from order_limits.core.config import get_settings
from order_limits.services.auth_service import ShopifyAuthService
from order_limits.services.billing_service import BillingService
from order_limits.utils.error_handler import AuthenticationException, BadRequestException, ErrorCode
from order_limits.utils.shopify_utils import normalize_shop_domain

settings = get_settings()
logger = logging.getLogger(__name__)


def resolve_shop(shop: Optional[str]) -> Optional[str]:
    """
    Normaliza el shop recibido; sin valor usa DEFAULT_SHOP.

    Un handle suelto (``demo-store``) se completa a ``demo-store.myshopify.com``.
    """
    return normalize_shop_domain(shop, lenient=True) or normalize_shop_domain(settings.DEFAULT_SHOP, lenient=True)


def get_bearer_token(request: Request) -> Optional[str]:
    authorization = request.headers.get("Authorization") or ""
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def get_session_shop(request: Request) -> str:
    """
    Shop autenticado por el session token (``Authorization: Bearer <jwt>``).

    Raises:
        AuthenticationException: Si falta el token o es inválido
    """
    token = get_bearer_token(request)
    if not token:
        raise AuthenticationException("Missing session token", error_code=ErrorCode.INVALID_SESSION_TOKEN)
    return ShopifyAuthService().shop_from_session_token(token)


async def _requested_shop(request: Request, shop: Optional[str]) -> Optional[str]:
    """Shop enviado en el query string o, si falta, en el body JSON."""
    if not shop and "application/json" in (request.headers.get("content-type") or ""):
        body = await request.body()
        try:
            data = json.loads(body) if body else {}
        except ValueError:
            # El body inválido lo rechaza la validación de la ruta
            data = {}
        if isinstance(data, dict) and isinstance(data.get("shop"), str):
            shop = data["shop"]

    return normalize_shop_domain(shop, lenient=True)


async def authorize_shop(request: Request, shop: Optional[str]) -> str:
    """
    Autoriza la request sobre ``shop`` y aplica el gate de suscripción.

    Con session token el shop del token manda: si la request nombra otra
    tienda se rechaza. Sin token se usa ``shop`` o DEFAULT_SHOP.

    Args:
        request: Request actual
        shop: Shop pedido por la request o dueño del registro afectado

    Returns:
        str: Shop sobre el que opera la ruta

    Raises:
        AuthenticationException: Token inválido o de otra tienda
        BadRequestException: No se pudo determinar el shop
        SubscriptionRequiredException: Prueba vencida sin suscripción activa
    """
    token = get_bearer_token(request)
    if token:
        session_shop = ShopifyAuthService().shop_from_session_token(token)
        if shop and shop != session_shop:
            logger.warning(f"🚫 Session token de {session_shop} usado para {shop}")
            raise AuthenticationException(
                "Session token does not match shop",
                error_code=ErrorCode.SHOP_MISMATCH,
                details={"shop": shop},
            )
        shop = session_shop
    else:
        shop = resolve_shop(shop)

    if not shop:
        raise BadRequestException("Missing shop", missing_fields=["shop"])

    if settings.BILLING_ENFORCED:
        await BillingService().ensure_active_subscription(shop)

    return shop


async def require_shop(
    request: Request,
    shop: Optional[str] = Query(None, description="Dominio myshopify"),
) -> str:
    """
    Dependencia de las rutas del merchant con el shop en la request.

    Returns:
        str: Shop autorizado y con suscripción (o prueba) vigente
    """
    return await authorize_shop(request, await _requested_shop(request, shop))
