"""
Base Repository for order database operations.

Provides session handling, a unit-of-work scope shared by consecutive
operations, and consistent logging and error translation.
"""

import contextlib
import functools
import logging
from typing import AsyncIterator, Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from order_import.db.connection import ConnDB, get_db_connection
from order_import.utils.error_handler import PersistenceException

logger = logging.getLogger(__name__)


def log_operation(operation_name: Optional[str] = None) -> Callable:
    """
    Decorator for logging database operations.

    SQLAlchemy errors are re-raised as ``PersistenceException``.

    Args:
        operation_name: Optional custom name for the operation
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(self, *args, **kwargs):
            op_name = operation_name or f"{self.__class__.__name__}.{func.__name__}"
            logger.debug(f"Starting operation: {op_name}")

            try:
                result = await func(self, *args, **kwargs)
            except SQLAlchemyError as e:
                logger.error(f"Operation failed: {op_name} - {e}")
                raise PersistenceException(message=f"{op_name} failed: {e}", operation=op_name) from e
            except Exception as e:
                logger.error(f"Operation failed: {op_name} - {e}")
                raise

            logger.debug(f"Operation successful: {op_name}")
            return result

        return wrapper

    return decorator


class BaseRepository:
    """
    Base repository for order database operations.

    Outside a unit of work every operation runs in its own session and
    commits. Inside ``transaction()`` all operations of every repository
    sharing the same ``ConnDB`` run in one session and only flush; the unit
    of work commits or rolls back at the end.
    """

    def __init__(self, conn_db: Optional[ConnDB] = None):
        """
        Args:
            conn_db: Database connection. Defaults to the global connection.
        """
        self.conn_db: ConnDB = conn_db or get_db_connection()
        self._repository_name: str = self.__class__.__name__

    @property
    def in_transaction(self) -> bool:
        return self.conn_db.current_session is not None

    @contextlib.asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        """
        Unit of work: commit on success, roll back and re-raise on error.

        Nested calls join the outer unit of work.
        """
        if self.in_transaction:
            yield
            return

        async with self.conn_db.get_session() as session:
            with self.conn_db.bind_session(session):
                try:
                    yield
                    await session.commit()
                    logger.debug(f"{self._repository_name} unit of work committed")
                except Exception:
                    await session.rollback()
                    logger.warning(f"{self._repository_name} unit of work rolled back")
                    raise

    @contextlib.asynccontextmanager
    async def session_scope(self) -> AsyncIterator[AsyncSession]:
        """Session for one operation: the unit-of-work session, or a fresh committing one."""
        current = self.conn_db.current_session
        if current is not None:
            yield current
            await current.flush()
            return

        async with self.conn_db.get_session() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    def __repr__(self) -> str:
        return f"<{self._repository_name}(in_transaction={self.in_transaction})>"
