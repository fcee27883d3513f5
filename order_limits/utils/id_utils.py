"""
ID format conversion utilities for Shopify GraphQL and REST API compatibility.

This module handles conversion between different ID formats used by Shopify:
- REST API IDs: numeric strings like "7982301118542"
- GraphQL IDs: global IDs like "gid://shopify/Product/7982301118542"

Storefront carts report numeric ids while the admin UI stores global ids,
so rule targets are compared with ``ids_match``.
"""

import logging
import re
from typing import Any

logger = logging.getLogger(__name__)

_GID_PATTERN = re.compile(r"^gid://shopify/\w+/(\d+)")


def graphql_to_rest_id(graphql_id: str) -> str:
    """
    Extract the numeric ID from a GraphQL global ID.

    Args:
        graphql_id: GraphQL global ID (e.g., "gid://shopify/Product/7982301118542")

    Returns:
        Numeric REST ID, or the input unchanged if it is not a global ID
    """
    if not graphql_id:
        return ""

    if graphql_id.isdigit():
        return graphql_id

    match = _GID_PATTERN.match(graphql_id)
    if match:
        return match.group(1)

    logger.debug(f"Could not extract REST ID from: {graphql_id}")
    return graphql_id


def ids_match(left: Any, right: Any) -> bool:
    """
    Compare two Shopify ids by string form, treating a global id and its
    numeric tail as equal.

    Args:
        left: Id in any format (int, numeric string or gid)
        right: Id in any format

    Returns:
        bool: True if both refer to the same resource id
    """
    if left is None or right is None:
        return False

    left_str, right_str = str(left).strip(), str(right).strip()
    if not left_str or not right_str:
        return False
    if left_str == right_str:
        return True

    return graphql_to_rest_id(left_str) == graphql_to_rest_id(right_str)
