"""
Endpoint de búsqueda de productos para construir reglas en el admin.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from order_limits.api.dependencies import require_shop
from order_limits.db.repositories import ShopRepository
from order_limits.db.shopify_clients import ShopifyProductClient
from order_limits.utils.error_handler import AppException, AuthenticationException

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/products/search")
async def search_products(
    q: Optional[str] = Query(None, description="Búsqueda con sintaxis de Shopify"),
    shop_id: str = Depends(require_shop),
) -> Dict[str, Any]:
    """
    Busca productos y sus variantes con el token offline de la tienda.
    """
    record = await ShopRepository().get(shop_id)
    if record is None or not record.access_token:
        raise AuthenticationException(f"Shop {shop_id} is not installed or has no access token")

    try:
        async with ShopifyProductClient(shop_id, record.access_token) as client:
            products = await client.search_products(q, limit=20)
        return {"success": True, "products": products}
    except AppException:
        raise
    except Exception as e:
        logger.error(f"❌ Error searching products for {shop_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to search products")
