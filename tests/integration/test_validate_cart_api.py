"""Tests de integración para POST /api/validate-cart."""

SHOP = "demo-store.myshopify.com"


def add_rule(client, **body):
    response = client.post("/api/rules", json={"shop": SHOP, **body})
    assert response.status_code == 200
    return response.json()["rule"]


class TestValidateCart:
    """Tests para la validación del carrito desde el storefront."""

    def test_cart_without_rules_is_valid(self, client):
        """Sin reglas ni settings el carrito es válido y bloquea por defecto."""
        response = client.post(
            "/api/validate-cart",
            json={"shop": SHOP, "items": [{"product_id": 111, "variant_id": 999, "quantity": 1, "title": "Beans"}]},
        )

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "valid": True,
            "violations": [],
            "blockCheckout": True,
            "showWarning": True,
            "totalQuantity": 1,
        }

    def test_item_below_minimum(self, client):
        """Un item bajo el mínimo genera una violación min."""
        add_rule(client, ruleType="product", targetId="gid://shopify/Product/111", minQuantity=3)

        response = client.post(
            "/api/validate-cart",
            json={"shop": SHOP, "items": [{"product_id": 111, "variant_id": 999, "quantity": 1, "title": "Beans"}]},
        )

        data = response.json()
        assert data["valid"] is False
        assert data["violations"] == [
            {"type": "min", "item": "Beans", "limit": 3, "current": 1, "message": "Minimum quantity for Beans is 3"}
        ]

    def test_disabled_rule_is_ignored(self, client):
        """Reglas deshabilitadas no aplican."""
        rule = add_rule(client, ruleType="variant", targetId="999", maxQuantity=1)
        client.put(f"/api/rules/{rule['id']}", json={"enabled": False})

        response = client.post(
            "/api/validate-cart",
            json={"shop": SHOP, "items": [{"product_id": 111, "variant_id": 999, "quantity": 5, "title": "Beans"}]},
        )

        assert response.json()["valid"] is True

    def test_settings_bounds_and_flags(self, client):
        """Los límites globales y los flags vienen de los settings."""
        client.put("/api/settings", json={"shop": SHOP, "globalMinCart": 6, "blockCheckout": False})

        response = client.post(
            "/api/validate-cart",
            json={
                "shop": SHOP,
                "items": [
                    {"product_id": 1, "variant_id": 10, "quantity": 2, "title": "Mug"},
                    {"product_id": 2, "variant_id": 20, "quantity": 2, "title": "Cup"},
                ],
            },
        )

        data = response.json()
        assert data["blockCheckout"] is False
        assert data["totalQuantity"] == 4
        assert data["violations"] == [
            {"type": "cart_min", "limit": 6, "current": 4, "message": "Minimum cart quantity is 6 items"}
        ]

    def test_empty_items_list_is_accepted(self, client):
        response = client.post("/api/validate-cart", json={"shop": SHOP, "items": []})

        assert response.status_code == 200
        assert response.json()["totalQuantity"] == 0

    def test_missing_items(self, client):
        """Sin items la request es inválida."""
        response = client.post("/api/validate-cart", json={"shop": SHOP})

        assert response.status_code == 400
        assert response.json()["message"] == "Missing shop or items"

    def test_missing_shop(self, client):
        response = client.post("/api/validate-cart", json={"items": [{"quantity": 1}]})

        assert response.status_code == 400

    def test_not_gated_by_subscription(self, client, app_settings, monkeypatch):
        """El storefront valida aunque la prueba haya terminado."""
        add_rule(client, ruleType="cart", minQuantity=1)
        monkeypatch.setattr(app_settings, "BILLING_ENFORCED", True)
        monkeypatch.setattr(app_settings, "FREE_TRIAL_DAYS", 0)

        response = client.post("/api/validate-cart", json={"shop": SHOP, "items": [{"quantity": 1}]})

        assert response.status_code == 200

    def test_camel_case_items_and_bare_handle(self, client):
        """El storefront puede enviar productId y el handle de la tienda."""
        add_rule(client, ruleType="product", targetId="gid://shopify/Product/111", maxQuantity=2)

        response = client.post(
            "/api/validate-cart",
            json={"shop": "demo-store", "items": [{"productId": 111, "variantId": 999, "quantity": 5, "title": "Beans"}]},
        )

        data = response.json()
        assert data["valid"] is False
        assert [violation["type"] for violation in data["violations"]] == ["max"]
