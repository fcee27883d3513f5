"""
Base Shopify GraphQL client with common functionality.

This module provides the foundation for all Shopify GraphQL clients,
including per-shop session management, request spacing, throttling
retries and GraphQL error handling.
"""

import asyncio
import logging
import time
from typing import Any, Dict, Optional

import aiohttp
from aiohttp import ClientTimeout

from order_limits.core.config import get_settings
from order_limits.db.queries import SHOP_INFO_QUERY
from order_limits.utils.error_handler import ShopifyAPIException

logger = logging.getLogger(__name__)


class BaseShopifyGraphQLClient:
    """
    Base client for Shopify Admin GraphQL API operations on one shop.

    Use as an async context manager so the HTTP session is always closed:

        async with ShopifyBillingClient(shop, token) as client:
            await client.get_active_subscriptions()
    """

    def __init__(self, shop_domain: str, access_token: str):
        """
        Initialize the client for a shop.

        Args:
            shop_domain: myshopify domain of the shop
            access_token: Offline Admin API access token
        """
        self.settings = get_settings()
        self.shop_domain = shop_domain
        self.access_token = access_token
        self.api_version = self.settings.SHOPIFY_API_VERSION
        self.graphql_url = self.settings.get_shopify_graphql_url(shop_domain)

        # Session and request spacing
        self.session: Optional[aiohttp.ClientSession] = None
        self._last_request_time = 0.0
        self._min_request_interval = 0.5  # 500ms between requests

    async def __aenter__(self) -> "BaseShopifyGraphQLClient":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def initialize(self):
        """Open the HTTP session."""
        if self.session:
            return

        timeout = ClientTimeout(total=30, connect=10)
        self.session = aiohttp.ClientSession(
            timeout=timeout,
            headers={
                "Content-Type": "application/json",
                "X-Shopify-Access-Token": self.access_token,
                "User-Agent": f"Order-Limits-Manager/{self.api_version}",
            },
        )
        logger.debug(f"Shopify GraphQL session opened for {self.shop_domain}")

    async def close(self):
        """Close the HTTP session and clean up resources."""
        if self.session:
            await self.session.close()
            self.session = None
            logger.debug(f"Shopify GraphQL session closed for {self.shop_domain}")

    async def _execute_query(
        self, query: str, variables: Optional[Dict[str, Any]] = None, max_retries: Optional[int] = None
    ) -> Dict[str, Any]:
        """
        Execute a GraphQL query, retrying only when Shopify throttles (HTTP 429).

        Args:
            query: GraphQL query string
            variables: Query variables
            max_retries: Maximum number of attempts (defaults to SHOPIFY_MAX_RETRIES)

        Returns:
            Dict: The ``data`` member of the response

        Raises:
            ShopifyAPIException: On HTTP, network or GraphQL errors
        """
        if not self.session:
            raise ShopifyAPIException("Client not initialized. Call initialize() first.")

        max_retries = max_retries or self.settings.SHOPIFY_MAX_RETRIES

        payload: Dict[str, Any] = {"query": query}
        if variables:
            payload["variables"] = variables

        retry_after = None
        for attempt in range(max_retries):
            await self._check_rate_limit()

            try:
                async with self.session.post(self.graphql_url, json=payload) as response:
                    self._last_request_time = time.time()

                    if response.status == 429:
                        retry_after = int(float(response.headers.get("Retry-After", 2)))
                        if attempt < max_retries - 1:
                            logger.warning(
                                f"⚠️ Shopify throttled {self.shop_domain}, waiting {retry_after}s "
                                f"(attempt {attempt + 1})"
                            )
                            await asyncio.sleep(retry_after)
                        continue

                    if response.status != 200:
                        body = await response.text()
                        raise ShopifyAPIException(
                            f"HTTP {response.status}: {body[:200] or 'Unknown error'}",
                            api_response_code=response.status,
                            endpoint=self.graphql_url,
                        )

                    response_data = await response.json()

            except aiohttp.ClientError as e:
                raise ShopifyAPIException(
                    f"Network error: {str(e)}", endpoint=self.graphql_url
                ) from e

            if response_data.get("errors"):
                error_messages = [err.get("message", str(err)) for err in response_data["errors"]]
                raise ShopifyAPIException(
                    f"GraphQL errors: {', '.join(error_messages)}",
                    api_response_code=200,
                    endpoint=self.graphql_url,
                )

            return response_data.get("data") or {}

        raise ShopifyAPIException(
            f"Rate limit exceeded for {self.shop_domain} after {max_retries} attempts",
            api_response_code=429,
            endpoint=self.graphql_url,
            rate_limited=True,
            retry_after=retry_after,
        )

    async def _execute_mutation(
        self, mutation: str, variables: Dict[str, Any], operation: str
    ) -> Dict[str, Any]:
        """
        Execute a mutation once and return its payload.

        Args:
            mutation: GraphQL mutation string
            variables: Mutation variables
            operation: Root field of the mutation (e.g. ``appSubscriptionCreate``)

        Returns:
            Dict: The mutation payload

        Raises:
            ShopifyAPIException: If the request fails or userErrors are returned
        """
        result = await self._execute_query(mutation, variables, max_retries=1)
        payload = result.get(operation) or {}
        self._handle_user_errors(payload, operation)
        return payload

    def _handle_user_errors(self, payload: Dict[str, Any], operation: str = "operation"):
        """
        Raise on userErrors returned by a mutation.

        Raises:
            ShopifyAPIException: Carrying the first error as message and all errors in user_errors
        """
        user_errors = payload.get("userErrors") or []
        if not user_errors:
            return

        error_messages = []
        for error in user_errors:
            field = error.get("field") or []
            field_str = ".".join(field) if field else "general"
            error_messages.append(f"{field_str}: {error.get('message', 'Unknown error')}")

        logger.warning(f"⚠️ {operation} returned user errors: {', '.join(error_messages)}")
        raise ShopifyAPIException(
            user_errors[0].get("message", f"{operation} failed"),
            endpoint=operation,
            user_errors=user_errors,
        )

    async def _check_rate_limit(self):
        """
        Keep a minimum spacing between requests on this client.
        """
        time_since_last_request = time.time() - self._last_request_time

        if time_since_last_request < self._min_request_interval:
            await asyncio.sleep(self._min_request_interval - time_since_last_request)

    async def get_shop_info(self) -> Dict[str, Any]:
        """
        Fetch the shop's name and contact email.

        Returns:
            Dict: shop node
        """
        result = await self._execute_query(SHOP_INFO_QUERY)
        return result.get("shop") or {}

    def __repr__(self):
        return (
            f"{self.__class__.__name__}("
            f"shop='{self.shop_domain}', "
            f"api_version='{self.api_version}', "
            f"initialized={self.session is not None})"
        )
