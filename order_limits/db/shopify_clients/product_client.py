"""
Shopify GraphQL client for product operations.

Only product search is needed: the admin UI uses it to pick the product
or variant a rule targets.
"""

import logging
from typing import Any, Dict, List, Optional

from order_limits.db.queries import PRODUCTS_SEARCH_QUERY

from .base_client import BaseShopifyGraphQLClient

logger = logging.getLogger(__name__)


class ShopifyProductClient(BaseShopifyGraphQLClient):
    """
    Specialized client for Shopify product lookups.
    """

    async def search_products(self, query: Optional[str] = None, limit: int = 20) -> List[Dict[str, Any]]:
        """
        Search products with Shopify search syntax.

        Args:
            query: Search string (e.g. ``title:shirt*``); None lists the first products
            limit: Number of products to fetch (max 250)

        Returns:
            List of ``{id, title, handle, variants: [{id, title, sku}]}``
        """
        variables: Dict[str, Any] = {"first": min(limit, 250)}
        if query:
            variables["query"] = query

        result = await self._execute_query(PRODUCTS_SEARCH_QUERY, variables)
        edges = (result.get("products") or {}).get("edges", [])

        products = []
        for edge in edges:
            node = edge["node"]
            variant_edges = (node.get("variants") or {}).get("edges", [])
            products.append(
                {
                    "id": node.get("id"),
                    "title": node.get("title"),
                    "handle": node.get("handle"),
                    "variants": [
                        {
                            "id": v["node"].get("id"),
                            "title": v["node"].get("title"),
                            "sku": v["node"].get("sku"),
                        }
                        for v in variant_edges
                    ],
                }
            )

        logger.info(f"Found {len(products)} products for query '{query or ''}' in {self.shop_domain}")
        return products
