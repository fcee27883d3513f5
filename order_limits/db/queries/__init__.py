"""
GraphQL queries for the Shopify Admin API, organized by domain.

Structure:
- core: shop information
- billing: app subscription create / lookup / cancel
- products: product and variant search
"""

from .billing import (
    ACTIVE_SUBSCRIPTIONS_QUERY,
    APP_SUBSCRIPTION_CANCEL_MUTATION,
    APP_SUBSCRIPTION_CREATE_MUTATION,
)
from .core import SHOP_INFO_QUERY
from .products import PRODUCTS_SEARCH_QUERY

__all__ = [
    # Core queries
    "SHOP_INFO_QUERY",
    # Billing
    "APP_SUBSCRIPTION_CREATE_MUTATION",
    "APP_SUBSCRIPTION_CANCEL_MUTATION",
    "ACTIVE_SUBSCRIPTIONS_QUERY",
    # Products
    "PRODUCTS_SEARCH_QUERY",
]
