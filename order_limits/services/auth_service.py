"""
Shopify authentication service.

Handles the two ways a merchant reaches the app:
- OAuth install flow (authorize redirect, callback HMAC, code exchange)
- Session tokens sent by the embedded admin (HS256 JWT)
"""

import hashlib
import hmac
import logging
import secrets
import time
from typing import Any, Dict, Mapping, Optional
from urllib.parse import urlencode

import aiohttp
import jwt
from aiohttp import ClientTimeout

from order_limits.core.config import get_settings
from order_limits.db.repositories import ShopRepository
from order_limits.db.shopify_clients import BaseShopifyGraphQLClient
from order_limits.utils.error_handler import (
    AuthenticationException,
    ConfigurationException,
    ErrorCode,
    ShopifyAPIException,
)
from order_limits.utils.shopify_utils import normalize_shop_domain

logger = logging.getLogger(__name__)

STATE_TTL_SECONDS = 600


class ShopifyAuthService:
    """
    Servicio de autenticación con Shopify.
    """

    def __init__(self, shop_repository: Optional[ShopRepository] = None):
        self.settings = get_settings()
        self.shop_repository = shop_repository or ShopRepository()

    def _require_credentials(self) -> None:
        if not (self.settings.SHOPIFY_API_KEY and self.settings.SHOPIFY_API_SECRET):
            raise ConfigurationException(
                "SHOPIFY_API_KEY and SHOPIFY_API_SECRET must be configured",
                config_key="SHOPIFY_API_SECRET",
            )

    # === SESSION TOKENS ===

    def decode_session_token(self, token: str) -> Dict[str, Any]:
        """
        Decodifica y verifica un session token del admin embebido.

        Args:
            token: JWT recibido en ``Authorization: Bearer``

        Returns:
            Dict: Claims del token

        Raises:
            AuthenticationException: Si el token es inválido o expiró
        """
        self._require_credentials()

        try:
            return jwt.decode(
                token,
                self.settings.SHOPIFY_API_SECRET,
                algorithms=["HS256"],
                audience=self.settings.SHOPIFY_API_KEY,
                options={"verify_exp": True},
            )
        except jwt.ExpiredSignatureError as e:
            raise AuthenticationException(
                "Session token expired", error_code=ErrorCode.INVALID_SESSION_TOKEN
            ) from e
        except jwt.InvalidTokenError as e:
            raise AuthenticationException(
                f"Invalid session token: {str(e)}", error_code=ErrorCode.INVALID_SESSION_TOKEN
            ) from e

    def shop_from_session_token(self, token: str) -> str:
        """
        Extrae el dominio de la tienda del claim ``dest``.

        Raises:
            AuthenticationException: Si el token no identifica una tienda válida
        """
        claims = self.decode_session_token(token)
        shop = normalize_shop_domain(claims.get("dest"))
        if not shop:
            raise AuthenticationException(
                "Session token does not identify a shop", error_code=ErrorCode.INVALID_SESSION_TOKEN
            )
        return shop

    # === OAUTH ===

    def issue_state(self, shop: str) -> str:
        """Token de state firmado (anti CSRF) sin sesión del lado del servidor."""
        now = int(time.time())
        return jwt.encode(
            {"shop": shop, "nonce": secrets.token_urlsafe(16), "iat": now, "exp": now + STATE_TTL_SECONDS},
            self.settings.SHOPIFY_API_SECRET,
            algorithm="HS256",
        )

    def verify_state(self, state: str, shop: str) -> bool:
        try:
            claims = jwt.decode(state, self.settings.SHOPIFY_API_SECRET, algorithms=["HS256"])
        except jwt.InvalidTokenError as e:
            logger.warning(f"⚠️ Invalid OAuth state for {shop}: {e}")
            return False
        return claims.get("shop") == shop

    def build_authorize_url(self, shop: str) -> str:
        """
        Construye la URL de autorización OAuth para instalar la app.

        Args:
            shop: Dominio myshopify ya normalizado

        Returns:
            str: URL de ``/admin/oauth/authorize`` con client_id, scope, redirect_uri y state
        """
        self._require_credentials()

        params = {
            "client_id": self.settings.SHOPIFY_API_KEY,
            "scope": ",".join(self.settings.shopify_scopes_list),
            "redirect_uri": f"{self.settings.SHOPIFY_APP_URL}/auth/callback",
            "state": self.issue_state(shop),
        }
        return f"https://{shop}/admin/oauth/authorize?{urlencode(params)}"

    def verify_oauth_hmac(self, query_params: Mapping[str, str]) -> bool:
        """
        Verifica el HMAC del query string del callback OAuth.

        Shopify firma todos los parámetros excepto ``hmac`` y ``signature``,
        ordenados por clave, con HMAC-SHA256 en hexadecimal.

        Args:
            query_params: Parámetros del query string decodificados

        Returns:
            bool: True si la firma coincide
        """
        provided = (query_params.get("hmac") or "").strip()
        secret = self.settings.SHOPIFY_API_SECRET
        if not (provided and secret):
            return False

        message = "&".join(
            f"{key}={value}"
            for key, value in sorted(query_params.items())
            if key not in ("hmac", "signature")
        )
        digest = hmac.new(secret.encode("utf-8"), message.encode("utf-8"), hashlib.sha256).hexdigest()
        return hmac.compare_digest(digest, provided)

    async def exchange_code(self, shop: str, code: str) -> Dict[str, Any]:
        """
        Intercambia el código de autorización por un access token offline.

        Returns:
            Dict: ``{"access_token": ..., "scope": ...}``

        Raises:
            ShopifyAPIException: Si Shopify rechaza el intercambio
        """
        token_url = f"https://{shop}/admin/oauth/access_token"
        body = {
            "client_id": self.settings.SHOPIFY_API_KEY,
            "client_secret": self.settings.SHOPIFY_API_SECRET,
            "code": code,
        }

        try:
            async with aiohttp.ClientSession(timeout=ClientTimeout(total=30)) as session:
                async with session.post(token_url, json=body) as response:
                    if response.status != 200:
                        text = await response.text()
                        raise ShopifyAPIException(
                            f"Token exchange failed: HTTP {response.status}: {text[:200]}",
                            api_response_code=response.status,
                            endpoint=token_url,
                        )
                    data = await response.json()
        except aiohttp.ClientError as e:
            raise ShopifyAPIException(f"Token exchange failed: {str(e)}", endpoint=token_url) from e

        if not data.get("access_token"):
            raise ShopifyAPIException("Token exchange returned no access token", endpoint=token_url)

        return data

    async def complete_install(self, shop: str, code: str):
        """
        Completa la instalación: obtiene el token y guarda la tienda.

        Args:
            shop: Dominio myshopify
            code: Código de autorización del callback

        Returns:
            Shop: Registro de la tienda actualizado
        """
        token_data = await self.exchange_code(shop, code)
        access_token = token_data["access_token"]

        shop_info: Dict[str, Any] = {}
        try:
            async with BaseShopifyGraphQLClient(shop, access_token) as client:
                shop_info = await client.get_shop_info()
        except ShopifyAPIException as e:
            logger.warning(f"⚠️ Could not fetch shop info for {shop}: {e}")

        record = await self.shop_repository.upsert(
            shop,
            access_token=access_token,
            scope=token_data.get("scope"),
            name=shop_info.get("name"),
            email=shop_info.get("email"),
        )
        logger.info(f"🎉 App installed on {shop} (scope: {token_data.get('scope')})")
        return record
