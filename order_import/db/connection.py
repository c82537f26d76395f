"""
Clase ConnDB para gestión exclusiva de conexiones a base de datos.

Esta clase maneja únicamente el engine asíncrono, la fábrica de sesiones
y el ciclo de vida de las conexiones.
"""

import contextlib
import logging
from contextvars import ContextVar
from typing import Iterator, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from order_import.core.config import get_settings
from order_import.db.models import Base
from order_import.utils.error_handler import PersistenceException

logger = logging.getLogger(__name__)


class ConnDB:
    """
    Clase para gestión de conexiones a la base de datos de órdenes.
    """

    def __init__(self, database_url: Optional[str] = None, echo: Optional[bool] = None):
        """
        Inicializa la clase ConnDB.

        Args:
            database_url: URL asíncrona de SQLAlchemy (por defecto ``DATABASE_URL``)
            echo: Loggear SQL emitido (por defecto ``DB_ECHO``)
        """
        settings = get_settings()
        self.database_url = database_url or settings.DATABASE_URL
        self.echo = settings.DB_ECHO if echo is None else echo
        self.pool_size = settings.DB_POOL_SIZE
        self.engine: Optional[AsyncEngine] = None
        self.session_factory: Optional[async_sessionmaker[AsyncSession]] = None
        self._connection_tested = False
        self._current_session: ContextVar[Optional[AsyncSession]] = ContextVar(
            f"order_import_uow_{id(self)}", default=None
        )

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    async def initialize(self) -> None:
        """
        Inicializa el engine de base de datos y el pool de conexiones.

        Raises:
            PersistenceException: Si falla la inicialización
        """
        if self.engine is not None:
            logger.debug("Database connection already initialized")
            return

        try:
            logger.info("Initializing database connection...")
            self.engine = create_async_engine(self.database_url, echo=self.echo, **self._engine_options())

            self.session_factory = async_sessionmaker(self.engine, expire_on_commit=False, autoflush=True)

            await self._test_connection()
            logger.info("Database connection initialized successfully")

        except Exception as e:
            logger.error(f"Failed to initialize database connection: {e}")
            await self._cleanup_failed_initialization()
            raise PersistenceException(
                message=f"Failed to initialize database connection: {str(e)}",
                operation="initialization",
            ) from e

    def _engine_options(self) -> dict:
        if not self.is_sqlite:
            return {"pool_size": self.pool_size, "max_overflow": 10, "pool_pre_ping": True, "pool_recycle": 3600}

        options: dict = {"connect_args": {"check_same_thread": False}}
        # Una base en memoria solo existe mientras viva su única conexión
        if ":memory:" in self.database_url or self.database_url.rstrip("/").endswith("sqlite+aiosqlite:"):
            options["poolclass"] = StaticPool
        return options

    async def _test_connection(self) -> None:
        async with self.get_session() as session:
            result = await session.execute(text("SELECT 1"))
            if result.scalar() != 1:
                raise PersistenceException(message="Connection test returned unexpected value", operation="test")
        self._connection_tested = True

    async def _cleanup_failed_initialization(self) -> None:
        """Limpia recursos en caso de fallo de inicialización."""
        if self.engine is not None:
            await self.engine.dispose()
        self.engine = None
        self.session_factory = None
        self._connection_tested = False

    def get_session(self) -> AsyncSession:
        """
        Obtiene una nueva sesión de base de datos.

        Returns:
            AsyncSession: Sesión asíncrona de SQLAlchemy

        Raises:
            PersistenceException: Si no hay conexión inicializada
        """
        if self.session_factory is None:
            raise PersistenceException(
                message="Database connection not initialized. Call initialize() first.",
                operation="session_creation",
            )
        return self.session_factory()

    @property
    def current_session(self) -> Optional[AsyncSession]:
        """Sesión de la unidad de trabajo activa en la tarea actual (o None)."""
        return self._current_session.get()

    @contextlib.contextmanager
    def bind_session(self, session: AsyncSession) -> Iterator[AsyncSession]:
        """
        Publica ``session`` como unidad de trabajo de la tarea actual.

        Todos los repositorios que comparten esta conexión la reutilizan
        hasta salir del bloque.
        """
        token = self._current_session.set(session)
        try:
            yield session
        finally:
            self._current_session.reset(token)

    def is_initialized(self) -> bool:
        return self.engine is not None and self.session_factory is not None and self._connection_tested

    async def create_schema(self) -> None:
        """
        Crea todas las tablas que aún no existan.

        Raises:
            PersistenceException: Si falla la creación
        """
        if self.engine is None:
            raise PersistenceException(message="Database connection not initialized", operation="create_schema")

        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            logger.info("Database schema ready")
        except Exception as e:
            logger.error(f"Failed to create database schema: {e}")
            raise PersistenceException(message=f"Failed to create schema: {str(e)}", operation="create_schema") from e

    async def close(self) -> None:
        """
        Cierra la conexión y limpia todos los recursos.
        """
        try:
            if self.engine is not None:
                await self.engine.dispose()
                logger.info("Database engine disposed")
        except Exception as e:
            logger.error(f"Error closing database connection: {e}")
            raise PersistenceException(message=f"Error closing database connection: {str(e)}", operation="close") from e
        finally:
            self.engine = None
            self.session_factory = None
            self._connection_tested = False

    def __repr__(self) -> str:
        return f"ConnDB(initialized={self.is_initialized()}, sqlite={self.is_sqlite})"


# Instancia global
_conn_db_instance: Optional[ConnDB] = None


def get_db_connection() -> ConnDB:
    """
    Obtiene la instancia global de ConnDB.

    Returns:
        ConnDB: Instancia de conexión a base de datos
    """
    global _conn_db_instance

    if _conn_db_instance is None:
        _conn_db_instance = ConnDB()

    return _conn_db_instance


async def close_database() -> None:
    """
    Función de conveniencia para cerrar la base de datos global.
    """
    global _conn_db_instance

    if _conn_db_instance is not None:
        await _conn_db_instance.close()
        _conn_db_instance = None
