"""Tests de integración para /api/rules contra una base SQLite temporal."""

SHOP = "demo-store.myshopify.com"


def create_rule(client, **overrides):
    body = {
        "shop": SHOP,
        "ruleType": "product",
        "targetId": "gid://shopify/Product/111",
        "targetTitle": "Coffee Beans",
        "minQuantity": 2,
        "maxQuantity": 10,
    }
    body.update(overrides)
    return client.post("/api/rules", json=body)


class TestRulesCrud:
    """Tests para el CRUD de reglas."""

    def test_create_rule(self, client):
        """Crea una regla habilitada y la devuelve."""
        response = create_rule(client)

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        rule = data["rule"]
        assert rule["id"]
        assert rule["shopId"] == SHOP
        assert rule["ruleType"] == "product"
        assert rule["minQuantity"] == 2
        assert rule["maxQuantity"] == 10
        assert rule["enabled"] is True

    def test_list_rules_newest_first(self, client):
        """Las reglas se listan de la más reciente a la más antigua."""
        first = create_rule(client, targetId="1").json()["rule"]
        second = create_rule(client, targetId="2").json()["rule"]

        response = client.get("/api/rules", params={"shop": SHOP})

        assert response.status_code == 200
        ids = [rule["id"] for rule in response.json()["rules"]]
        assert ids == [second["id"], first["id"]]

    def test_rules_are_scoped_by_shop(self, client):
        """Cada tienda ve solo sus reglas."""
        create_rule(client)

        response = client.get("/api/rules", params={"shop": "other-store.myshopify.com"})

        assert response.json()["rules"] == []

    def test_partial_update(self, client):
        """PUT modifica solo los campos enviados."""
        rule = create_rule(client).json()["rule"]

        response = client.put(f"/api/rules/{rule['id']}", json={"maxQuantity": 20, "enabled": False})

        assert response.status_code == 200
        updated = response.json()["rule"]
        assert updated["maxQuantity"] == 20
        assert updated["enabled"] is False
        assert updated["minQuantity"] == 2
        assert updated["targetTitle"] == "Coffee Beans"

    def test_update_rejects_min_above_stored_max(self, client):
        """El mínimo no puede superar al máximo guardado."""
        rule = create_rule(client).json()["rule"]

        response = client.put(f"/api/rules/{rule['id']}", json={"minQuantity": 50})

        assert response.status_code == 422

    def test_update_unknown_rule(self, client):
        response = client.put("/api/rules/does-not-exist", json={"maxQuantity": 3})

        assert response.status_code == 404
        assert response.json()["error_code"] == "NOT_FOUND"

    def test_delete_rule(self, client):
        """DELETE elimina la regla."""
        rule = create_rule(client).json()["rule"]

        response = client.delete(f"/api/rules/{rule['id']}")

        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert client.get("/api/rules", params={"shop": SHOP}).json()["rules"] == []

    def test_delete_unknown_rule(self, client):
        assert client.delete("/api/rules/does-not-exist").status_code == 404


class TestRulesValidation:
    """Tests para errores de entrada."""

    def test_missing_shop(self, client):
        """Sin shop ni DEFAULT_SHOP la request es inválida."""
        response = client.get("/api/rules")

        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_default_shop_is_used(self, client, app_settings, monkeypatch):
        """DEFAULT_SHOP reemplaza al shop ausente."""
        monkeypatch.setattr(app_settings, "DEFAULT_SHOP", SHOP)
        create_rule(client)

        response = client.get("/api/rules")

        assert response.status_code == 200
        assert len(response.json()["rules"]) == 1

    def test_min_greater_than_max(self, client):
        response = create_rule(client, minQuantity=10, maxQuantity=2)

        assert response.status_code == 422
        assert response.json()["error_type"] == "validation_error"

    def test_product_rule_without_target(self, client):
        response = create_rule(client, targetId=None)

        assert response.status_code == 422

    def test_negative_bound(self, client):
        assert create_rule(client, minQuantity=-1).status_code == 422

    def test_bare_handle_is_stored_under_myshopify_domain(self, client):
        """El handle de la tienda se guarda con su dominio myshopify."""
        rule = create_rule(client, shop="demo-store").json()["rule"]

        assert rule["shopId"] == SHOP
        listed = client.get("/api/rules", params={"shop": SHOP}).json()["rules"]
        assert [item["id"] for item in listed] == [rule["id"]]

    def test_timestamps_are_utc(self, client):
        """Las fechas se serializan con zona UTC también sobre SQLite."""
        rule = create_rule(client).json()["rule"]

        assert rule["createdAt"].endswith("+00:00")
        assert rule["updatedAt"].endswith("+00:00")
