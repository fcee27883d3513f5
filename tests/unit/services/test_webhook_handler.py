"""Tests unitarios para WebhookProcessor."""

import base64
import hashlib
import hmac
from unittest.mock import AsyncMock, MagicMock

import pytest

from order_limits.services.webhook_handler import WebhookProcessor
from order_limits.utils.error_handler import BadRequestException

SECRET = "webhook-secret"
SHOP = "demo-store.myshopify.com"


def sign(body: bytes, secret: str = SECRET) -> str:
    return base64.b64encode(hmac.new(secret.encode(), body, hashlib.sha256).digest()).decode()


@pytest.fixture
def processor(monkeypatch):
    from order_limits.services import webhook_handler

    monkeypatch.setattr(webhook_handler.settings, "SHOPIFY_API_SECRET", SECRET)

    repository = MagicMock()
    repository.delete_cascade = AsyncMock(return_value={"rules": 2, "settings": 1, "prep_shipments": 0, "shops": 1})
    repository.mark_uninstalled = AsyncMock(return_value=True)
    return WebhookProcessor(shop_repository=repository)


class TestVerifyWebhookSignature:
    """Tests para la verificación HMAC."""

    def test_valid_signature(self, processor):
        """Una firma calculada con el secreto de la app es válida."""
        body = b'{"shop_domain": "demo-store.myshopify.com"}'

        assert processor.verify_webhook_signature(body, sign(body)) is True

    def test_wrong_secret_is_rejected(self, processor):
        """Una firma con otro secreto es inválida."""
        body = b'{"shop_domain": "demo-store.myshopify.com"}'

        assert processor.verify_webhook_signature(body, sign(body, "other-secret")) is False

    def test_tampered_body_is_rejected(self, processor):
        """Si el body cambia la firma deja de coincidir."""
        signature = sign(b'{"a": 1}')

        assert processor.verify_webhook_signature(b'{"a": 2}', signature) is False

    def test_missing_or_malformed_signature(self, processor):
        """Firma ausente o que no es base64: inválida."""
        body = b"{}"

        assert processor.verify_webhook_signature(body, None) is False
        assert processor.verify_webhook_signature(body, "not base64!!") is False

    def test_missing_secret_rejects_everything(self, processor, monkeypatch):
        """Sin SHOPIFY_API_SECRET no se acepta ningún webhook."""
        from order_limits.services import webhook_handler

        body = b"{}"
        signature = sign(body, "")
        monkeypatch.setattr(webhook_handler.settings, "SHOPIFY_API_SECRET", "")

        assert processor.verify_webhook_signature(body, signature) is False


class TestProcessWebhook:
    """Tests para el enrutado por topic."""

    @pytest.mark.asyncio
    async def test_shop_redact_deletes_shop_data(self, processor):
        """shop/redact elimina todos los datos de la tienda."""
        result = await processor.process_webhook("shop/redact", SHOP, {"shop_domain": SHOP})

        processor.shop_repository.delete_cascade.assert_awaited_once_with(SHOP)
        assert result["status"] == "success"
        assert result["result"]["status"] == "redacted"
        assert result["result"]["deleted"]["rules"] == 2

    @pytest.mark.asyncio
    async def test_shop_redact_uses_payload_domain(self, processor):
        """Sin header de shop se usa shop_domain del payload."""
        await processor.process_webhook("shop/redact", None, {"shop_domain": SHOP})

        processor.shop_repository.delete_cascade.assert_awaited_once_with(SHOP)

    @pytest.mark.asyncio
    async def test_shop_redact_without_domain_raises(self, processor):
        """Sin dominio no se puede redactar."""
        with pytest.raises(BadRequestException):
            await processor.process_webhook("shop/redact", None, {})

    @pytest.mark.asyncio
    async def test_customer_topics_are_acknowledged(self, processor):
        """La app no guarda datos de clientes: solo se confirma."""
        payload = {"shop_domain": SHOP, "customer": {"id": 7}}

        data_request = await processor.process_webhook("customers/data_request", SHOP, payload)
        redact = await processor.process_webhook("customers/redact", SHOP, payload)

        assert data_request["result"]["status"] == "acknowledged"
        assert redact["result"]["status"] == "acknowledged"
        processor.shop_repository.delete_cascade.assert_not_called()

    @pytest.mark.asyncio
    async def test_app_uninstalled_clears_token(self, processor):
        """app/uninstalled invalida el token guardado."""
        result = await processor.process_webhook("app/uninstalled", SHOP, {"myshopify_domain": SHOP})

        processor.shop_repository.mark_uninstalled.assert_awaited_once_with(SHOP)
        assert result["result"]["known_shop"] is True

    @pytest.mark.asyncio
    async def test_unknown_topic_is_ignored(self, processor):
        """Topics sin manejador se ignoran sin error."""
        result = await processor.process_webhook("orders/create", SHOP, {})

        assert result["result"]["status"] == "ignored"
