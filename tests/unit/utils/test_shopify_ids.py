"""Tests unitarios para utilidades de ids y dominios de Shopify."""

import pytest

from order_limits.utils.id_utils import graphql_to_rest_id, ids_match
from order_limits.utils.shopify_utils import embedded_app_url, normalize_shop_domain


class TestIdConversion:
    """Tests para conversión entre ids REST y GraphQL."""

    def test_graphql_to_rest(self):
        assert graphql_to_rest_id("gid://shopify/Product/7982301118542") == "7982301118542"
        assert graphql_to_rest_id("7982301118542") == "7982301118542"

    @pytest.mark.parametrize(
        "left,right,expected",
        [
            ("123", 123, True),
            ("gid://shopify/Product/123", "123", True),
            ("gid://shopify/ProductVariant/123", 123, True),
            ("123", "124", False),
            (None, "123", False),
            ("", "", False),
        ],
    )
    def test_ids_match(self, left, right, expected):
        """Un gid y su id numérico se consideran iguales."""
        assert ids_match(left, right) is expected


class TestShopDomain:
    """Tests para normalización de dominios de tienda."""

    @pytest.mark.parametrize(
        "raw",
        [
            "demo-store.myshopify.com",
            "Demo-Store.myshopify.com",
            "https://demo-store.myshopify.com/",
            "https://demo-store.myshopify.com/admin/apps",
        ],
    )
    def test_valid_domains_are_normalized(self, raw):
        assert normalize_shop_domain(raw) == "demo-store.myshopify.com"

    @pytest.mark.parametrize("raw", [None, "", "demo-store", "evil.com", "demo.myshopify.com.evil.com"])
    def test_invalid_domains(self, raw):
        """Dominios que no son myshopify se rechazan."""
        assert normalize_shop_domain(raw) is None

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("demo-store", "demo-store.myshopify.com"),
            (" Demo-Store ", "demo-store.myshopify.com"),
            ("https://demo-store.myshopify.com/admin", "demo-store.myshopify.com"),
            ("shop.example.com", "shop.example.com"),
            ("", None),
        ],
    )
    def test_lenient_mode_completes_handles(self, raw, expected):
        """En modo lenient un handle suelto se completa con .myshopify.com."""
        assert normalize_shop_domain(raw, lenient=True) == expected

    def test_embedded_app_url(self):
        assert embedded_app_url("demo-store.myshopify.com", "key") == "https://demo-store.myshopify.com/admin/apps/key"
