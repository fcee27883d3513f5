"""
Endpoints del flujo OAuth de instalación.
"""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, Request
from fastapi.responses import RedirectResponse

from order_limits.core.config import get_settings
from order_limits.services.auth_service import ShopifyAuthService
from order_limits.utils.error_handler import AppException, AuthenticationException, BadRequestException
from order_limits.utils.shopify_utils import embedded_app_url, normalize_shop_domain

settings = get_settings()
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth")


@router.get("")
async def begin_install(shop: Optional[str] = Query(None, description="Dominio myshopify")) -> RedirectResponse:
    """
    Redirige a la pantalla de autorización de Shopify.
    """
    shop_domain = normalize_shop_domain(shop)
    if not shop_domain:
        raise BadRequestException("Missing or invalid shop domain", missing_fields=["shop"])

    url = ShopifyAuthService().build_authorize_url(shop_domain)
    logger.info(f"🔐 Starting OAuth for {shop_domain}")
    return RedirectResponse(url=url, status_code=302)


@router.get("/callback")
async def oauth_callback(request: Request) -> RedirectResponse:
    """
    Callback de OAuth: verifica HMAC y state, obtiene el token offline,
    guarda la tienda y redirige a la app embebida.
    """
    params = dict(request.query_params)
    shop_domain = normalize_shop_domain(params.get("shop"))
    code = params.get("code")
    if not shop_domain or not code:
        raise BadRequestException("Missing shop or code", missing_fields=["shop", "code"])

    service = ShopifyAuthService()
    if not service.verify_oauth_hmac(params):
        logger.warning(f"❌ Invalid OAuth HMAC for {shop_domain}")
        raise AuthenticationException("Invalid OAuth callback signature")
    if not service.verify_state(params.get("state") or "", shop_domain):
        raise AuthenticationException("Invalid OAuth state")

    try:
        await service.complete_install(shop_domain, code)
    except AppException:
        raise
    except Exception as e:
        logger.error(f"❌ OAuth install failed for {shop_domain}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to complete installation")

    return RedirectResponse(url=embedded_app_url(shop_domain, settings.SHOPIFY_API_KEY), status_code=302)
