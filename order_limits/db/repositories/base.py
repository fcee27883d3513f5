"""
Base Repository for application database operations.

This module provides the base class for all repository classes,
implementing common functionality like session handling, error
translation and operation logging on top of the ConnDB singleton.
"""

import functools
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from order_limits.db.connection import ConnDB, get_db_connection
from order_limits.utils.error_handler import AppException, DatabaseException

logger = logging.getLogger(__name__)


def log_operation(operation_name: Optional[str] = None) -> Callable:
    """
    Decorator for logging repository operations.

    Args:
        operation_name: Optional custom name for the operation

    Returns:
        Decorated function with logging
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(self, *args, **kwargs):
            op_name = operation_name or f"{self.__class__.__name__}.{func.__name__}"
            logger.debug(f"Starting operation: {op_name}")

            try:
                result = await func(self, *args, **kwargs)
                logger.debug(f"Operation successful: {op_name}")
                return result
            except Exception as e:
                logger.error(f"Operation failed: {op_name} - {e}")
                raise

        return wrapper

    return decorator


class BaseRepository:
    """
    Base repository for application tables.

    Each public repository method opens its own session through
    ``session()`` and commits before returning. Derived repositories
    implement their domain operations on top of it.
    """

    def __init__(self, conn_db: Optional[ConnDB] = None):
        """
        Initialize the base repository.

        Args:
            conn_db: Optional database connection. If not provided, uses global connection.
        """
        self.conn_db: ConnDB = conn_db or get_db_connection()
        self._repository_name: str = self.__class__.__name__

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """
        Open a session, commit on success and roll back on error.

        SQLAlchemy errors are raised as DatabaseException; application
        exceptions raised inside the block propagate unchanged.
        """
        async with self.conn_db.get_session() as session:
            try:
                yield session
                await session.commit()
            except AppException:
                await session.rollback()
                raise
            except SQLAlchemyError as e:
                await session.rollback()
                raise DatabaseException(
                    message=f"{self._repository_name} query failed: {str(e)}",
                    connection_type="query",
                ) from e

    def __repr__(self) -> str:
        return f"{self._repository_name}(db_initialized={self.conn_db.is_initialized()})"
