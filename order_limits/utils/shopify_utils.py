"""
Utilidades compartidas para Shopify.

Este módulo contiene funciones utilitarias usadas por múltiples
servicios para normalizar y validar dominios de tiendas y construir
URLs del admin de Shopify.
"""

import re
from typing import Optional

SHOP_DOMAIN_RE = re.compile(r"^[a-z0-9][a-z0-9-]*\.myshopify\.com$")
SHOP_HANDLE_RE = re.compile(r"^[a-z0-9][a-z0-9-]*$")


def normalize_shop_domain(raw: Optional[str], lenient: bool = False) -> Optional[str]:
    """
    Normaliza el dominio de una tienda a la forma ``tienda.myshopify.com``.

    Acepta el dominio con protocolo, barra final o ruta pegada. En modo
    ``lenient`` (parámetros ``shop`` de la API del admin) un handle suelto
    se completa con ``.myshopify.com`` y cualquier otro valor se conserva
    normalizado, para que reglas y settings queden bajo la misma clave que
    usan OAuth, billing y webhooks.

    Args:
        raw: Dominio tal como llega en la request
        lenient: Completar handles y aceptar dominios no myshopify

    Returns:
        str: Dominio normalizado, o None si no es válido

    Examples:
        >>> normalize_shop_domain("https://Demo-Store.myshopify.com/admin")
        'demo-store.myshopify.com'
        >>> normalize_shop_domain("demo-store") is None
        True
        >>> normalize_shop_domain("demo-store", lenient=True)
        'demo-store.myshopify.com'
    """
    value = (raw or "").strip().lower()
    if not value:
        return None

    for prefix in ("https://", "http://"):
        if value.startswith(prefix):
            value = value[len(prefix):]
            break

    value = value.split("/", 1)[0].split("?", 1)[0].split("#", 1)[0].strip()

    if SHOP_DOMAIN_RE.match(value):
        return value
    if not lenient:
        return None

    if SHOP_HANDLE_RE.match(value):
        return f"{value}.myshopify.com"
    return value or None


def embedded_app_url(shop: str, api_key: str) -> str:
    """
    URL de la app embebida dentro del admin de la tienda.

    Args:
        shop: Dominio myshopify
        api_key: Client id de la app

    Returns:
        str: URL del admin que abre la app
    """
    return f"https://{shop}/admin/apps/{api_key}"
