"""
Shopify GraphQL clients organized by responsibility.

This module contains specialized GraphQL clients for different Shopify resources,
following the single responsibility principle.
"""

from .base_client import BaseShopifyGraphQLClient
from .billing_client import ShopifyBillingClient
from .product_client import ShopifyProductClient

__all__ = [
    "BaseShopifyGraphQLClient",
    "ShopifyBillingClient",
    "ShopifyProductClient",
]
