"""
Configuración centralizada de routers para la aplicación FastAPI.

Este módulo se encarga de registrar todos los routers de la API,
configurar endpoints base y organizar las rutas de manera estructurada.
"""

import logging
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.responses import HTMLResponse, JSONResponse

from order_limits.api.endpoints.auth import router as auth_router
from order_limits.api.endpoints.billing import router as billing_router
from order_limits.api.endpoints.cart import router as cart_router
from order_limits.api.endpoints.prep_shipments import router as prep_shipments_router
from order_limits.api.endpoints.products import router as products_router
from order_limits.api.endpoints.rules import router as rules_router
from order_limits.api.endpoints.settings import router as settings_router
from order_limits.api.endpoints.webhooks import router as webhooks_router
from order_limits.core.config import get_settings
from order_limits.db.connection import get_db_connection

settings = get_settings()
logger = logging.getLogger(__name__)

LANDING_PAGE = """<!DOCTYPE html>
<html lang="en">
  <head>
    <meta charset="utf-8">
    <title>{name}</title>
    <style>
      body {{ font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", sans-serif; margin: 40px; color: #202223; }}
      .card {{ max-width: 640px; padding: 24px; border: 1px solid #e1e3e5; border-radius: 8px; }}
      code {{ background: #f6f6f7; padding: 2px 4px; border-radius: 4px; }}
    </style>
  </head>
  <body>
    <div class="card">
      <h1>{name}</h1>
      <p>Set minimum and maximum order quantities per product, per variant or for the whole cart.</p>
      <p>The app is running. Open it from your Shopify admin to manage rules and settings.</p>
      <p>Version <code>{version}</code></p>
    </div>
  </body>
</html>
"""


def create_root_endpoints(app: FastAPI) -> None:
    """
    Crea endpoints raíz de la aplicación.

    Args:
        app: Instancia de FastAPI
    """

    @app.get("/", tags=["Root"], summary="Landing Page", response_class=HTMLResponse)
    async def root():
        """
        Página de bienvenida de la app.
        """
        return HTMLResponse(LANDING_PAGE.format(name=settings.APP_NAME, version=settings.APP_VERSION))


def create_health_endpoints(app: FastAPI) -> None:
    """
    Crea endpoints de health check.

    Args:
        app: Instancia de FastAPI
    """

    @app.get("/health", tags=["Health"], summary="Health Check")
    async def health_check():
        """
        Health check con verificación de la base de datos.

        Returns:
            Dict con estado de salud (503 si la base de datos no responde)
        """
        try:
            database = await get_db_connection().health_check()
            healthy = database["test_passed"]

            return JSONResponse(
                status_code=200 if healthy else 503,
                content={
                    "status": "ok" if healthy else "unhealthy",
                    "version": settings.APP_VERSION,
                    "timestamp": datetime.now(timezone.utc).isoformat(),
                    "environment": settings.ENVIRONMENT,
                    "services": {"database": database},
                },
            )

        except Exception as e:
            logger.error(f"Error en health check: {e}")
            return JSONResponse(
                status_code=503,
                content={
                    "status": "unhealthy",
                    "error": str(e),
                    "timestamp": datetime.now(timezone.utc).isoformat(),
                    "version": settings.APP_VERSION,
                },
            )


def create_info_endpoints(app: FastAPI) -> None:
    """
    Crea endpoints informativos adicionales.

    Args:
        app: Instancia de FastAPI
    """

    @app.get("/version", tags=["Info"], summary="Version Info")
    async def version_info():
        """
        Endpoint que retorna información de versión.

        Returns:
            Dict con información de versión
        """
        return {
            "version": settings.APP_VERSION,
            "name": settings.APP_NAME,
            "environment": settings.ENVIRONMENT,
            "debug": settings.DEBUG,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }


def configure_api_routers(app: FastAPI) -> None:
    """
    Configura los routers de la API del merchant y del storefront.

    Args:
        app: Instancia de FastAPI
    """
    logger.info("🔧 Configurando routers de la API...")

    app.include_router(
        rules_router,
        prefix="/api",
        tags=["Rules"],
        responses={402: {"description": "Subscription required"}},
    )
    app.include_router(
        settings_router,
        prefix="/api",
        tags=["Settings"],
        responses={402: {"description": "Subscription required"}},
    )
    app.include_router(
        cart_router,
        prefix="/api",
        tags=["Cart Validation"],
        responses={400: {"description": "Missing shop or items"}},
    )
    app.include_router(
        products_router,
        prefix="/api",
        tags=["Products"],
        responses={401: {"description": "Shop not installed"}, 402: {"description": "Subscription required"}},
    )
    app.include_router(
        prep_shipments_router,
        prefix="/api",
        tags=["Prep Shipments"],
        responses={402: {"description": "Subscription required"}},
    )
    app.include_router(
        billing_router,
        prefix="/api",
        tags=["Billing"],
        responses={401: {"description": "Invalid session token"}},
    )
    logger.info("✅ Routers de la API configurados")

    app.include_router(
        webhooks_router,
        prefix="/webhooks",
        tags=["Webhooks"],
        responses={
            401: {"description": "Invalid webhook signature"},
            500: {"description": "Webhook processing error"},
        },
    )
    logger.info("✅ Router de webhooks configurado")

    app.include_router(auth_router, tags=["OAuth"])
    logger.info("✅ Router de OAuth configurado")


def configure_all_routers(app: FastAPI) -> None:
    """
    Configura todos los routers de la aplicación.

    Args:
        app: Instancia de FastAPI
    """
    logger.info("🔧 Configurando todos los routers...")

    # Endpoints base
    create_root_endpoints(app)
    create_health_endpoints(app)
    create_info_endpoints(app)

    configure_api_routers(app)

    logger.info("✅ Todos los routers configurados correctamente")

