"""Tests unitarios para los clientes GraphQL de Shopify."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from order_limits.db.shopify_clients import BaseShopifyGraphQLClient, ShopifyBillingClient, ShopifyProductClient
from order_limits.utils.error_handler import ShopifyAPIException

SHOP = "demo-store.myshopify.com"


def fake_response(status=200, data=None, headers=None, text=""):
    response = MagicMock()
    response.status = status
    response.headers = headers or {}
    response.json = AsyncMock(return_value=data or {})
    response.text = AsyncMock(return_value=text)

    context = MagicMock()
    context.__aenter__ = AsyncMock(return_value=response)
    context.__aexit__ = AsyncMock(return_value=False)
    return context


def client_with_responses(client_class, *responses):
    client = client_class(SHOP, "shpat_123")
    client.session = MagicMock()
    client.session.post = MagicMock(side_effect=list(responses))
    client._min_request_interval = 0
    return client


class TestExecuteQuery:
    """Tests para la ejecución de queries con reintentos."""

    @pytest.mark.asyncio
    async def test_returns_data(self):
        client = client_with_responses(BaseShopifyGraphQLClient, fake_response(data={"data": {"shop": {"name": "Demo"}}}))

        assert await client.get_shop_info() == {"name": "Demo"}

    @pytest.mark.asyncio
    async def test_retries_on_throttling(self):
        """Un 429 se reintenta respetando Retry-After."""
        client = client_with_responses(
            BaseShopifyGraphQLClient,
            fake_response(status=429, headers={"Retry-After": "1"}),
            fake_response(data={"data": {"shop": {"name": "Demo"}}}),
        )

        with patch("order_limits.db.shopify_clients.base_client.asyncio.sleep", AsyncMock()) as sleep:
            result = await client.get_shop_info()

        assert result == {"name": "Demo"}
        assert client.session.post.call_count == 2
        sleep.assert_any_await(1)

    @pytest.mark.asyncio
    async def test_throttled_until_retries_exhausted(self):
        client = client_with_responses(
            BaseShopifyGraphQLClient,
            *[fake_response(status=429, headers={"Retry-After": "2"}) for _ in range(3)],
        )

        with patch("order_limits.db.shopify_clients.base_client.asyncio.sleep", AsyncMock()):
            with pytest.raises(ShopifyAPIException) as exc_info:
                await client._execute_query("{ shop { name } }", max_retries=3)

        assert exc_info.value.rate_limited is True
        assert exc_info.value.retry_after == 2

    @pytest.mark.asyncio
    async def test_http_errors_are_not_retried(self):
        client = client_with_responses(BaseShopifyGraphQLClient, fake_response(status=401, text="Invalid token"))

        with pytest.raises(ShopifyAPIException) as exc_info:
            await client.get_shop_info()

        assert exc_info.value.api_response_code == 401
        assert client.session.post.call_count == 1

    @pytest.mark.asyncio
    async def test_graphql_errors_raise(self):
        client = client_with_responses(
            BaseShopifyGraphQLClient, fake_response(data={"errors": [{"message": "Field 'x' doesn't exist"}]})
        )

        with pytest.raises(ShopifyAPIException, match="Field 'x' doesn't exist"):
            await client.get_shop_info()

    @pytest.mark.asyncio
    async def test_requires_initialized_session(self):
        with pytest.raises(ShopifyAPIException):
            await BaseShopifyGraphQLClient(SHOP, "shpat_123").get_shop_info()


class TestBillingClient:
    """Tests para ShopifyBillingClient."""

    @pytest.mark.asyncio
    async def test_create_subscription_variables(self):
        """Envía el plan recurrente con precio, intervalo, prueba y modo test."""
        client = ShopifyBillingClient(SHOP, "shpat_123")
        payload = {
            "appSubscription": {"id": "gid://shopify/AppSubscription/1", "status": "PENDING"},
            "confirmationUrl": "https://demo-store.myshopify.com/admin/charges/confirm",
            "userErrors": [],
        }

        with patch.object(client, "_execute_query", AsyncMock(return_value={"appSubscriptionCreate": payload})) as query:
            result = await client.create_subscription(
                name="Order Limits Pro",
                amount=9.99,
                currency_code="USD",
                interval="EVERY_30_DAYS",
                return_url="https://limits.example.com/api/billing/callback?shop=demo-store.myshopify.com",
                trial_days=7,
                test=True,
            )

        assert result["confirmationUrl"] == payload["confirmationUrl"]
        variables = query.call_args.args[1]
        assert variables["trialDays"] == 7
        assert variables["test"] is True
        pricing = variables["lineItems"][0]["plan"]["appRecurringPricingDetails"]
        assert pricing == {"price": {"amount": 9.99, "currencyCode": "USD"}, "interval": "EVERY_30_DAYS"}

    @pytest.mark.asyncio
    async def test_user_errors_raise(self):
        """Los userErrors de la mutación se convierten en excepción."""
        client = ShopifyBillingClient(SHOP, "shpat_123")
        payload = {"userErrors": [{"field": ["returnUrl"], "message": "Return url is invalid"}]}

        with patch.object(client, "_execute_query", AsyncMock(return_value={"appSubscriptionCreate": payload})):
            with pytest.raises(ShopifyAPIException) as exc_info:
                await client.create_subscription("Plan", 1.0, "USD", "EVERY_30_DAYS", "bad", 0, True)

        assert exc_info.value.message == "Return url is invalid"
        assert exc_info.value.user_errors == payload["userErrors"]

    @pytest.mark.asyncio
    async def test_active_subscriptions(self):
        client = ShopifyBillingClient(SHOP, "shpat_123")
        subscriptions = [{"id": "gid://shopify/AppSubscription/1", "status": "ACTIVE"}]
        data = {"currentAppInstallation": {"activeSubscriptions": subscriptions}}

        with patch.object(client, "_execute_query", AsyncMock(return_value=data)):
            assert await client.get_active_subscriptions() == subscriptions


class TestProductClient:
    """Tests para ShopifyProductClient."""

    @pytest.mark.asyncio
    async def test_search_flattens_edges(self):
        """Aplana productos y variantes."""
        client = ShopifyProductClient(SHOP, "shpat_123")
        data = {
            "products": {
                "edges": [
                    {
                        "node": {
                            "id": "gid://shopify/Product/1",
                            "title": "Coffee",
                            "handle": "coffee",
                            "variants": {
                                "edges": [
                                    {"node": {"id": "gid://shopify/ProductVariant/10", "title": "1kg", "sku": "C-1"}}
                                ]
                            },
                        }
                    }
                ]
            }
        }

        with patch.object(client, "_execute_query", AsyncMock(return_value=data)) as query:
            products = await client.search_products("title:coffee*", limit=500)

        assert products == [
            {
                "id": "gid://shopify/Product/1",
                "title": "Coffee",
                "handle": "coffee",
                "variants": [{"id": "gid://shopify/ProductVariant/10", "title": "1kg", "sku": "C-1"}],
            }
        ]
        assert query.call_args.args[1] == {"first": 250, "query": "title:coffee*"}
