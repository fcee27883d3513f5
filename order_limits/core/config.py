"""
Configuración centralizada de la aplicación.

Este módulo maneja todas las variables de entorno y configuraciones
de la aplicación usando Pydantic Settings para validación automática.
"""

from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

VALID_BILLING_INTERVALS = ["EVERY_30_DAYS", "ANNUAL"]


class Settings(BaseSettings):
    """
    Configuración de la aplicación usando Pydantic Settings.

    Todas las configuraciones se cargan desde variables de entorno
    con valores por defecto apropiados para desarrollo.
    """

    # === CONFIGURACIÓN BÁSICA DE LA APP ===
    APP_NAME: str = "Order Limits Manager"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = Field(default="development")
    DEBUG: bool = Field(default=False)

    # === CONFIGURACIÓN DEL SERVIDOR ===
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=3000)
    WORKERS: int = Field(default=1)
    LOG_LEVEL: str = Field(default="INFO")

    # === CONFIGURACIÓN DE SEGURIDAD ===
    ALLOWED_ORIGINS: Optional[List[str]] = Field(default=None)

    # === CONFIGURACIÓN DE BASE DE DATOS ===
    DATABASE_URL: str = Field(default="sqlite+aiosqlite:///./order_limits.db")
    DATABASE_ECHO: bool = Field(default=False)
    DATABASE_POOL_SIZE: int = Field(default=5)

    # === CONFIGURACIÓN DE SHOPIFY ===
    SHOPIFY_API_KEY: str = Field(default="")
    SHOPIFY_API_SECRET: str = Field(default="")
    SHOPIFY_APP_URL: str = Field(default="http://localhost:3000")
    SHOPIFY_SCOPES: str = Field(default="read_products,write_themes,read_orders")
    SHOPIFY_API_VERSION: str = Field(default="2025-07")
    SHOPIFY_MAX_RETRIES: int = Field(default=3)

    # === CONFIGURACIÓN DE BILLING ===
    BILLING_PLAN_NAME: str = Field(default="Order Limits Pro")
    BILLING_AMOUNT: float = Field(default=9.99)
    BILLING_CURRENCY: str = Field(default="USD")
    BILLING_INTERVAL: str = Field(default="EVERY_30_DAYS")
    FREE_TRIAL_DAYS: int = Field(default=7)
    # None = modo test fuera de producción
    BILLING_TEST_MODE: Optional[bool] = Field(default=None)
    BILLING_ENFORCED: bool = Field(default=True)

    # Shop usado cuando la request no indica ninguno (solo desarrollo)
    DEFAULT_SHOP: Optional[str] = Field(default=None)

    # === CONFIGURACIÓN DE LOGGING ===
    LOG_FILE_PATH: Optional[str] = Field(default=None)
    LOG_MAX_SIZE_MB: int = Field(default=10)
    LOG_BACKUP_COUNT: int = Field(default=5)

    # === CONFIGURACIÓN DE MONITOREO ===
    SLOW_REQUEST_THRESHOLD: float = Field(default=5.0)

    # === CONFIGURACIÓN DE DOCUMENTACIÓN ===
    ENABLE_DOCS: bool = Field(default=True)

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
        "extra": "ignore",
    }

    @field_validator("ALLOWED_ORIGINS", mode="before")
    @classmethod
    def parse_allowed_origins(cls, v):
        """Parsea ALLOWED_ORIGINS como lista separada por comas."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Valida que el nivel de log sea válido."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL debe ser uno de: {valid_levels}")
        return v.upper()

    @field_validator("ENVIRONMENT")
    @classmethod
    def validate_environment(cls, v):
        """Valida que el entorno sea válido."""
        valid_envs = ["development", "staging", "production", "testing"]
        if v.lower() not in valid_envs:
            raise ValueError(f"ENVIRONMENT debe ser uno de: {valid_envs}")
        return v.lower()

    @field_validator("PORT")
    @classmethod
    def validate_port(cls, v):
        """Valida que el puerto esté en rango válido."""
        if not 1 <= v <= 65535:
            raise ValueError("PORT debe estar entre 1 y 65535")
        return v

    @field_validator("BILLING_INTERVAL")
    @classmethod
    def validate_billing_interval(cls, v):
        """Valida que el intervalo de cobro sea uno aceptado por Shopify."""
        if v.upper() not in VALID_BILLING_INTERVALS:
            raise ValueError(f"BILLING_INTERVAL debe ser uno de: {VALID_BILLING_INTERVALS}")
        return v.upper()

    @field_validator("FREE_TRIAL_DAYS")
    @classmethod
    def validate_trial_days(cls, v):
        """Valida que los días de prueba no sean negativos."""
        if v < 0:
            raise ValueError("FREE_TRIAL_DAYS no puede ser negativo")
        return v

    @field_validator("SHOPIFY_APP_URL")
    @classmethod
    def strip_app_url(cls, v):
        """Remueve la barra final de la URL pública de la app."""
        return v.rstrip("/")

    @property
    def is_production(self) -> bool:
        """Verifica si está en entorno de producción."""
        return self.ENVIRONMENT == "production"

    @property
    def billing_test_mode(self) -> bool:
        """Cargos de prueba en todo entorno que no sea producción, salvo override."""
        if self.BILLING_TEST_MODE is not None:
            return self.BILLING_TEST_MODE
        return not self.is_production

    @property
    def shopify_scopes_list(self) -> List[str]:
        """Scopes de OAuth como lista."""
        return [scope.strip() for scope in self.SHOPIFY_SCOPES.split(",") if scope.strip()]

    def get_shopify_graphql_url(self, shop_domain: str) -> str:
        """
        Genera URL del endpoint GraphQL Admin para un shop.

        Args:
            shop_domain: Dominio myshopify del shop

        Returns:
            str: URL del endpoint GraphQL
        """
        return f"https://{shop_domain}/admin/api/{self.SHOPIFY_API_VERSION}/graphql.json"


@lru_cache()
def get_settings() -> Settings:
    """
    Obtiene instancia singleton de configuración.

    Usa LRU cache para evitar recrear la configuración
    múltiples veces durante la ejecución.

    Returns:
        Settings: Instancia de configuración
    """
    return Settings()


# Instancia global para uso directo
settings = get_settings()


def get_environment_info() -> dict:
    """
    Obtiene información del entorno actual.

    Returns:
        dict: Información del entorno
    """
    settings = get_settings()

    return {
        "app_name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "debug": settings.DEBUG,
        "is_production": settings.is_production,
        "host": settings.HOST,
        "port": settings.PORT,
        "log_level": settings.LOG_LEVEL,
        "features": {
            "billing_enforced": settings.BILLING_ENFORCED,
            "billing_test_mode": settings.billing_test_mode,
            "free_trial_days": settings.FREE_TRIAL_DAYS,
            "docs": settings.ENABLE_DOCS,
        },
    }
