"""Tests de integración para /api/settings."""

SHOP = "demo-store.myshopify.com"


class TestSettingsApi:
    """Tests para lectura y actualización de settings."""

    def test_get_creates_defaults(self, client):
        """El primer GET crea settings con valores por defecto."""
        response = client.get("/api/settings", params={"shop": SHOP})

        assert response.status_code == 200
        settings = response.json()["settings"]
        assert settings["shopId"] == SHOP
        assert settings["globalMinCart"] is None
        assert settings["globalMaxCart"] is None
        assert settings["showCartWarning"] is True
        assert settings["blockCheckout"] is True
        assert settings["customMessageEnabled"] is False

    def test_put_saves_bounds_and_toggles(self, client):
        """PUT guarda límites y toggles."""
        response = client.put(
            "/api/settings",
            json={"shop": SHOP, "globalMinCart": "3", "globalMaxCart": 30, "blockCheckout": False},
        )

        assert response.status_code == 200
        settings = response.json()["settings"]
        assert settings["globalMinCart"] == 3
        assert settings["globalMaxCart"] == 30
        assert settings["blockCheckout"] is False

        stored = client.get("/api/settings", params={"shop": SHOP}).json()["settings"]
        assert stored["globalMaxCart"] == 30
        assert stored["blockCheckout"] is False

    def test_put_without_bounds_clears_them(self, client):
        """Límites ausentes significan sin límite; los toggles no enviados se conservan."""
        client.put("/api/settings", json={"shop": SHOP, "globalMinCart": 3, "showCartWarning": False})

        settings = client.put("/api/settings", json={"shop": SHOP}).json()["settings"]

        assert settings["globalMinCart"] is None
        assert settings["showCartWarning"] is False

    def test_put_rejects_min_above_max(self, client):
        response = client.put("/api/settings", json={"shop": SHOP, "globalMinCart": 10, "globalMaxCart": 1})

        assert response.status_code == 422

    def test_missing_shop(self, client):
        assert client.get("/api/settings").status_code == 400
