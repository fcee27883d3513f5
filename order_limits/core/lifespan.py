"""
Gestión del ciclo de vida de la aplicación FastAPI.

Este módulo maneja los eventos de startup y shutdown de la aplicación,
incluyendo configuración de logging, verificación de configuración y
conexión a la base de datos.
"""

import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI

from order_limits.core.config import get_environment_info, get_settings
from order_limits.core.logging_config import setup_logging
from order_limits.db.connection import get_db_connection

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Gestión del ciclo de vida de la aplicación.
    Maneja eventos de startup y shutdown de manera ordenada.

    Args:
        app: Instancia de FastAPI
    """
    # === STARTUP ===
    logger.info(f"🚀 Iniciando {settings.APP_NAME}...")

    try:
        # 1. Configurar logging
        await startup_configure_logging()

        # 2. Verificar configuración
        await startup_verify_configuration()

        # 3. Base de datos (crea las tablas faltantes)
        await startup_initialize_database()

        logger.info("🎉 Aplicación iniciada correctamente")

    except Exception as e:
        logger.error(f"❌ Error durante el startup: {e}")
        await cleanup_on_startup_failure()
        sys.exit(1)

    # === YIELD (aplicación corriendo) ===
    yield

    # === SHUTDOWN ===
    logger.info(f"🛑 Cerrando {settings.APP_NAME}...")

    try:
        await shutdown_close_connections()
        logger.info("👋 Aplicación cerrada correctamente")

    except Exception as e:
        logger.error(f"❌ Error durante el shutdown: {e}")


# === FUNCIONES DE STARTUP ===


async def startup_configure_logging():
    """Configura el sistema de logging."""
    setup_logging()
    logger.info("✅ Sistema de logging configurado")


async def startup_verify_configuration():
    """
    Verifica la configuración.

    Sin credenciales de Shopify la app arranca igual (la validación de
    carrito y el CRUD siguen funcionando), pero OAuth, billing y webhooks
    fallarán.
    """
    missing_vars = [
        var for var in ("SHOPIFY_API_KEY", "SHOPIFY_API_SECRET", "SHOPIFY_APP_URL") if not getattr(settings, var, None)
    ]

    if missing_vars:
        logger.warning(f"⚠️ Variables de configuración faltantes: {missing_vars}")

    if settings.is_production and not settings.BILLING_ENFORCED:
        logger.warning("⚠️ BILLING_ENFORCED desactivado en producción")

    logger.info(f"🌍 Entorno: {get_environment_info()}")

    if settings.billing_test_mode:
        logger.info("🧪 Billing en modo test: los cargos no son reales")

    logger.info("✅ Configuración verificada")


async def startup_initialize_database():
    """Inicializa la conexión a la base de datos y verifica que responde."""
    conn_db = get_db_connection()
    if not conn_db.is_initialized():
        await conn_db.initialize()

    health_info = await conn_db.health_check()
    if not health_info["test_passed"]:
        raise ConnectionError("Base de datos no disponible")

    logger.info(f"✅ Base de datos verificada ({health_info['dialect']}): {health_info['response_time_ms']}ms")


async def cleanup_on_startup_failure():
    """Limpia recursos si falla el startup."""
    try:
        await get_db_connection().close()
    except Exception as e:
        logger.error(f"Error en cleanup de startup: {e}")


# === FUNCIONES DE SHUTDOWN ===


async def shutdown_close_connections():
    """Cierra conexiones a servicios externos."""
    await get_db_connection().close()
    logger.info("✅ Conexión a base de datos cerrada")
