# order_limits/db/connection.py
"""
Clase ConnDB para gestión exclusiva de conexiones a la base de datos.

Esta clase maneja únicamente la conexión, configuración del pool,
creación del esquema y ciclo de vida del engine asíncrono de SQLAlchemy.
"""

import logging
import time
from typing import Optional

from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from order_limits.core.config import get_settings
from order_limits.db.models import Base
from order_limits.utils.error_handler import DatabaseException

settings = get_settings()
logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignora ON DELETE CASCADE sin este pragma
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class ConnDB:
    """
    Clase para gestión exclusiva de conexiones a la base de datos.

    Esta clase implementa el patrón Singleton para garantizar un único
    engine por proceso y maneja todo el ciclo de vida de las conexiones.
    """

    _instance = None
    _initialized = False

    def __new__(cls):
        """Implementa patrón Singleton."""
        if cls._instance is None:
            cls._instance = super(ConnDB, cls).__new__(cls)
        return cls._instance

    def __init__(self):
        """Inicializa la clase ConnDB."""
        if not self._initialized:
            self.engine: Optional[AsyncEngine] = None
            self.session_factory: Optional[async_sessionmaker] = None
            self.database_url: Optional[str] = None
            ConnDB._initialized = True
            logger.info("ConnDB instance created")

    async def initialize(self, database_url: Optional[str] = None):
        """
        Inicializa el engine de base de datos y crea las tablas faltantes.

        Args:
            database_url: URL opcional; por defecto DATABASE_URL

        Raises:
            DatabaseException: Si falla la inicialización
        """
        if self.engine is not None:
            logger.info("Database connection already initialized")
            return

        self.database_url = database_url or settings.DATABASE_URL

        try:
            logger.info("Initializing database connection...")

            if self.database_url.startswith("sqlite"):
                # Una conexión por operación: evita compartir conexiones aiosqlite entre event loops
                self.engine = create_async_engine(
                    self.database_url,
                    poolclass=NullPool,
                    echo=settings.DATABASE_ECHO,
                )
                event.listen(self.engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
            else:
                self.engine = create_async_engine(
                    self.database_url,
                    pool_size=settings.DATABASE_POOL_SIZE,
                    max_overflow=10,
                    pool_pre_ping=True,
                    pool_recycle=3600,
                    echo=settings.DATABASE_ECHO,
                )

            self.session_factory = async_sessionmaker(
                self.engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
            )

            await self.create_schema()

            logger.info("Database connection initialized successfully")

        except Exception as e:
            logger.error(f"Failed to initialize database connection: {e}")
            await self._cleanup_failed_initialization()
            raise DatabaseException(
                message=f"Failed to initialize database connection: {str(e)}",
                connection_type="initialization",
            ) from e

    async def create_schema(self):
        """Crea las tablas definidas en los modelos ORM si no existen."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info(f"Database schema ready: {sorted(Base.metadata.tables)}")

    async def _cleanup_failed_initialization(self):
        """Limpia recursos en caso de fallo de inicialización."""
        if self.engine:
            await self.engine.dispose()
        self.engine = None
        self.session_factory = None

    def get_session(self) -> AsyncSession:
        """
        Obtiene una nueva sesión de base de datos.

        Returns:
            AsyncSession: Sesión asíncrona de SQLAlchemy

        Raises:
            DatabaseException: Si no hay conexión inicializada
        """
        if not self.is_initialized():
            raise DatabaseException(
                message="Database connection not initialized. Call initialize() first.",
                connection_type="session_creation",
            )

        return self.session_factory()

    def is_initialized(self) -> bool:
        """
        Verifica si la conexión está inicializada.

        Returns:
            bool: True si hay engine y factory de sesiones
        """
        return self.engine is not None and self.session_factory is not None

    async def test_connection(self) -> bool:
        """
        Prueba la conexión a la base de datos de forma no destructiva.

        Returns:
            bool: True si la conexión funciona correctamente
        """
        if not self.is_initialized():
            return False

        try:
            async with self.get_session() as session:
                result = await session.execute(text("SELECT 1"))
                return result.scalar() == 1
        except Exception as e:
            logger.error(f"Connection test failed: {e}")
            return False

    async def close(self):
        """
        Cierra la conexión y limpia todos los recursos.
        """
        if not self.engine:
            return

        logger.info("Closing database connection...")
        await self.engine.dispose()
        self.engine = None
        self.session_factory = None
        logger.info("Database connection closed successfully")

    async def health_check(self) -> dict:
        """
        Realiza un health check de la conexión.

        Returns:
            dict: Estado de salud de la conexión
        """
        start_time = time.time()
        test_passed = await self.test_connection()

        return {
            "connection_initialized": self.is_initialized(),
            "dialect": self.engine.dialect.name if self.engine else None,
            "test_passed": test_passed,
            "response_time_ms": round((time.time() - start_time) * 1000, 2),
        }

    def __repr__(self) -> str:
        return f"ConnDB(initialized={self.is_initialized()}, engine={self.engine is not None})"


# Instancia global singleton
_conn_db_instance = None


def get_db_connection() -> ConnDB:
    """
    Obtiene la instancia singleton de ConnDB.

    Returns:
        ConnDB: Instancia de conexión a base de datos
    """
    global _conn_db_instance

    if _conn_db_instance is None:
        _conn_db_instance = ConnDB()

    return _conn_db_instance


async def initialize_database(database_url: Optional[str] = None):
    """
    Función de conveniencia para inicializar la base de datos.
    """
    await get_db_connection().initialize(database_url)


async def close_database():
    """
    Función de conveniencia para cerrar la base de datos.
    """
    await get_db_connection().close()
