"""Fixtures compartidos: settings de prueba, base SQLite temporal y cliente HTTP."""

import base64
import hashlib
import hmac
import json
import time

import jwt
import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from order_limits.core.config import get_settings
from order_limits.db.connection import close_database, get_db_connection, initialize_database

API_KEY = "test-api-key"
API_SECRET = "test-api-secret"
APP_URL = "https://limits.example.com"
SHOP = "demo-store.myshopify.com"


@pytest.fixture
def app_settings(monkeypatch, tmp_path):
    """Settings compartidos apuntando a una base SQLite temporal."""
    settings = get_settings()
    monkeypatch.setattr(settings, "DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    monkeypatch.setattr(settings, "SHOPIFY_API_KEY", API_KEY)
    monkeypatch.setattr(settings, "SHOPIFY_API_SECRET", API_SECRET)
    monkeypatch.setattr(settings, "SHOPIFY_APP_URL", APP_URL)
    monkeypatch.setattr(settings, "BILLING_ENFORCED", False)
    monkeypatch.setattr(settings, "FREE_TRIAL_DAYS", 7)
    monkeypatch.setattr(settings, "DEFAULT_SHOP", None)
    monkeypatch.setattr(settings, "LOG_FILE_PATH", None)
    return settings


@pytest.fixture
def client(app_settings):
    """TestClient con lifespan: crea el esquema al iniciar y cierra el engine al salir."""
    from order_limits.main import create_application

    with TestClient(create_application()) as test_client:
        yield test_client


@pytest_asyncio.fixture
async def database(app_settings):
    """Conexión inicializada en el event loop del test, para tests de repositorios."""
    await initialize_database(app_settings.DATABASE_URL)
    yield get_db_connection()
    await close_database()


def _session_token(shop: str = SHOP, secret: str = API_SECRET, audience: str = API_KEY, expires_in: int = 60) -> str:
    """Session token como el que envía App Bridge."""
    now = int(time.time())
    claims = {
        "iss": f"https://{shop}/admin",
        "dest": f"https://{shop}",
        "aud": audience,
        "sub": "42",
        "iat": now,
        "nbf": now - 5,
        "exp": now + expires_in,
    }
    return jwt.encode(claims, secret, algorithm="HS256")


def _signed_webhook(payload: dict, secret: str = API_SECRET):
    """Body y firma base64 de un webhook de Shopify."""
    body = json.dumps(payload).encode("utf-8")
    signature = base64.b64encode(hmac.new(secret.encode("utf-8"), body, hashlib.sha256).digest()).decode()
    return body, signature


@pytest.fixture
def make_session_token():
    return _session_token


@pytest.fixture
def sign_webhook():
    return _signed_webhook
