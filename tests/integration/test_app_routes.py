"""Tests de integración para endpoints base, OAuth y billing."""

from unittest.mock import AsyncMock, patch
from urllib.parse import parse_qs, urlparse

SHOP = "demo-store.myshopify.com"


class TestBaseEndpoints:
    """Tests para /, /health y /version."""

    def test_landing_page(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert "text/html" in response.headers["content-type"]
        assert "Order Limits" in response.text

    def test_health(self, client):
        """El health check verifica la base de datos."""
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["services"]["database"]["test_passed"] is True
        assert "timestamp" in data

    def test_version(self, client):
        assert client.get("/version").json()["version"] == "1.0.0"

    def test_request_id_header(self, client):
        """Cada respuesta lleva X-Request-ID y X-Process-Time."""
        response = client.get("/version", headers={"X-Request-ID": "abc123"})

        assert response.headers["X-Request-ID"] == "abc123"
        assert "X-Process-Time" in response.headers

    def test_frame_ancestors_allow_shop_admin(self, client):
        response = client.get("/", params={"shop": SHOP})

        policy = response.headers["Content-Security-Policy"]
        assert f"https://{SHOP}" in policy
        assert "https://admin.shopify.com" in policy


class TestOAuthRoutes:
    """Tests para /auth."""

    def test_begin_install_redirects_to_shopify(self, client):
        response = client.get("/auth", params={"shop": SHOP}, follow_redirects=False)

        assert response.status_code == 302
        location = urlparse(response.headers["location"])
        assert location.netloc == SHOP
        assert location.path == "/admin/oauth/authorize"
        assert parse_qs(location.query)["client_id"] == ["test-api-key"]

    def test_begin_install_rejects_invalid_shop(self, client):
        assert client.get("/auth", params={"shop": "evil.com"}, follow_redirects=False).status_code == 400

    def test_callback_with_bad_hmac(self, client):
        response = client.get(
            "/auth/callback",
            params={"shop": SHOP, "code": "abc", "state": "x", "hmac": "00"},
            follow_redirects=False,
        )

        assert response.status_code == 401


class TestBillingRoutes:
    """Tests para /api/billing."""

    def test_subscribe_requires_session_token(self, client):
        assert client.get("/api/billing/subscribe").status_code == 401

    def test_subscribe_returns_confirmation_url(self, client, make_session_token):
        """Con un session token válido devuelve la URL de confirmación."""
        create = AsyncMock(return_value="https://demo-store.myshopify.com/admin/charges/1/confirm")

        with patch("order_limits.api.endpoints.billing.BillingService.create_recurring_charge", create):
            response = client.get(
                "/api/billing/subscribe", headers={"Authorization": f"Bearer {make_session_token()}"}
            )

        assert response.status_code == 200
        assert response.json() == {"confirmationUrl": "https://demo-store.myshopify.com/admin/charges/1/confirm"}
        create.assert_awaited_once_with(SHOP)

    def test_status_for_uninstalled_shop(self, client, make_session_token):
        """Una tienda sin token offline no puede consultar su suscripción."""
        response = client.get("/api/billing/status", headers={"Authorization": f"Bearer {make_session_token()}"})

        assert response.status_code == 401

    def test_callback_redirects_to_embedded_app(self, client):
        refresh = AsyncMock(return_value={"hasActiveSubscription": True, "subscription": None})

        with patch("order_limits.api.endpoints.billing.BillingService.check_subscription_status", refresh):
            response = client.get(
                "/api/billing/callback", params={"shop": SHOP, "charge_id": "1"}, follow_redirects=False
            )

        assert response.status_code == 302
        assert response.headers["location"] == f"https://{SHOP}/admin/apps/test-api-key"
