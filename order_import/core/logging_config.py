"""
Configuración avanzada del sistema de logging.

Este módulo configura el logging del importador con:
- Handlers de consola y archivo con rotación
- Formateo personalizado con colores
- Logging estructurado (JSON) para producción
- Filtros que marcan las operaciones de importación
"""

import json
import logging
import logging.config
import sys
from contextvars import ContextVar, Token
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from order_import.core.config import Settings, get_settings

# Atributos estándar de LogRecord que no son "extra"
RESERVED_RECORD_ATTRIBUTES = frozenset(
    {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "message",
        "taskName",
    }
)


class ColoredFormatter(logging.Formatter):
    """
    Formatter personalizado que agrega colores a los logs en consola.
    """

    # Códigos de color ANSI
    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Verde
        "WARNING": "\033[33m",  # Amarillo
        "ERROR": "\033[31m",  # Rojo
        "CRITICAL": "\033[35m",  # Magenta
        "RESET": "\033[0m",
    }

    def format(self, record):
        """
        Formatea el record con colores si es para consola.

        Args:
            record: LogRecord a formatear

        Returns:
            str: Mensaje formateado con colores
        """
        formatted = super().format(record)

        # Agregar color solo si es TTY (terminal)
        if hasattr(sys.stderr, "isatty") and sys.stderr.isatty():
            color = self.COLORS.get(record.levelname, self.COLORS["RESET"])
            reset = self.COLORS["RESET"]
            formatted = formatted.replace(record.levelname, f"{color}{record.levelname}{reset}", 1)

        return formatted


class StructuredFormatter(logging.Formatter):
    """
    Formatter para logging estructurado en JSON.
    Útil para sistemas de monitoreo como ELK Stack.
    """

    def __init__(self, *args, settings: Optional[Settings] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.settings = settings or get_settings()

    def format(self, record):
        """
        Formatea el record como JSON estructurado.

        Args:
            record: LogRecord a formatear

        Returns:
            str: Mensaje en formato JSON
        """
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "app_name": self.settings.APP_NAME,
            "app_version": self.settings.APP_VERSION,
            "environment": self.settings.ENVIRONMENT,
        }

        if record.exc_info:
            log_entry["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": self.formatException(record.exc_info),
            }

        extra_fields = {
            key: value for key, value in record.__dict__.items() if key not in RESERVED_RECORD_ATTRIBUTES
        }
        if extra_fields:
            log_entry["extra"] = extra_fields

        return json.dumps(log_entry, ensure_ascii=False, default=str)


class ImportOperationFilter(logging.Filter):
    """
    Filtro que marca los logs de las operaciones de importación.
    """

    IMPORT_MODULES = ("order_import.services", "order_import.db")

    def filter(self, record):
        """
        Agrega ``operation_type`` a los records de módulos de importación.

        Args:
            record: LogRecord a filtrar

        Returns:
            bool: True para permitir el log
        """
        if record.name.startswith(self.IMPORT_MODULES):
            record.operation_type = "order_import"
        return True


def setup_logging(settings: Optional[Settings] = None) -> None:
    """
    Configura el sistema de logging completo de la aplicación.

    Args:
        settings: Configuración a usar (por defecto ``get_settings()``)
    """
    settings = settings or get_settings()

    if settings.LOG_FILE_PATH:
        Path(settings.LOG_FILE_PATH).parent.mkdir(parents=True, exist_ok=True)

    logging.config.dictConfig(get_logging_configuration(settings))

    import_filter = ImportOperationFilter()
    for handler in logging.getLogger().handlers:
        handler.addFilter(import_filter)

    configure_specific_loggers(settings)

    logger = logging.getLogger(__name__)
    logger.debug(f"Sistema de logging configurado - Nivel: {settings.LOG_LEVEL}")
    if settings.LOG_FILE_PATH:
        logger.debug(f"Logs guardándose en: {settings.LOG_FILE_PATH}")


def get_logging_configuration(settings: Optional[Settings] = None) -> Dict[str, Any]:
    """
    Genera configuración completa de logging.

    Returns:
        Dict: Configuración para ``logging.config.dictConfig``
    """
    settings = settings or get_settings()

    config: Dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": settings.LOG_FORMAT,
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "detailed": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(module)s.%(funcName)s:%(lineno)d - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "colored": {
                "()": ColoredFormatter,
                "format": settings.LOG_FORMAT,
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "json": {"()": StructuredFormatter, "settings": settings},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": settings.LOG_LEVEL,
                "formatter": "colored" if settings.DEBUG else "standard",
                "stream": "ext://sys.stderr",
            }
        },
        "root": {"level": settings.LOG_LEVEL, "handlers": ["console"]},
    }

    if settings.LOG_FILE_PATH:
        max_bytes = settings.LOG_MAX_SIZE_MB * 1024 * 1024

        config["handlers"]["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": settings.LOG_LEVEL,
            "formatter": "detailed",
            "filename": settings.LOG_FILE_PATH,
            "maxBytes": max_bytes,
            "backupCount": settings.LOG_BACKUP_COUNT,
            "encoding": "utf-8",
        }

        # Handler de errores separado
        config["handlers"]["error_file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": "ERROR",
            "formatter": "detailed",
            "filename": _sibling_path(settings.LOG_FILE_PATH, "_errors.log"),
            "maxBytes": max_bytes,
            "backupCount": settings.LOG_BACKUP_COUNT,
            "encoding": "utf-8",
        }
        config["root"]["handlers"].extend(["file", "error_file"])

        # Handler JSON para monitoreo
        if settings.is_production:
            config["handlers"]["json_file"] = {
                "class": "logging.handlers.RotatingFileHandler",
                "level": "INFO",
                "formatter": "json",
                "filename": _sibling_path(settings.LOG_FILE_PATH, ".json"),
                "maxBytes": max_bytes,
                "backupCount": settings.LOG_BACKUP_COUNT,
                "encoding": "utf-8",
            }
            config["root"]["handlers"].append("json_file")

    return config


def _sibling_path(log_path: str, suffix: str) -> str:
    path = Path(log_path)
    return str(path.with_name(path.stem + suffix))


def configure_specific_loggers(settings: Optional[Settings] = None) -> None:
    """
    Configura loggers específicos para diferentes módulos.
    """
    settings = settings or get_settings()

    import_logger = logging.getLogger("order_import.services")
    import_logger.setLevel(logging.DEBUG if settings.DEBUG else logging.INFO)

    db_logger = logging.getLogger("order_import.db")
    db_logger.setLevel(logging.DEBUG if settings.DEBUG else logging.WARNING)

    # Mostrar queries solo en debug
    sqlalchemy_logger = logging.getLogger("sqlalchemy.engine")
    sqlalchemy_logger.setLevel(logging.INFO if settings.DB_ECHO else logging.WARNING)

    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


# Contexto de la tarea actual; cada tarea asyncio trabaja sobre su propia copia
_log_context: ContextVar[Dict[str, Any]] = ContextVar("order_import_log_context", default={})
_factory_installed = False


def _install_record_factory() -> None:
    """Instala (una sola vez) la factory que copia el contexto activo a cada record."""
    global _factory_installed
    if _factory_installed:
        return

    base_factory = logging.getLogRecordFactory()

    def record_factory(*args, **kwargs):
        record = base_factory(*args, **kwargs)
        for key, value in _log_context.get().items():
            setattr(record, key, value)
        return record

    logging.setLogRecordFactory(record_factory)
    _factory_installed = True


class LogContext:
    """
    Context manager para agregar contexto temporal a los logs.

    El contexto vive en un ``ContextVar``: importaciones concurrentes en
    tareas distintas no ven el contexto de las demás.

    Ejemplo:
        with LogContext(order_number="R123456789", user_id=7):
            logger.info("Importando orden")  # incluye order_number y user_id
    """

    def __init__(self, **context):
        """
        Inicializa el context manager.

        Args:
            **context: Datos de contexto a agregar
        """
        self.context = context
        self._token: Optional[Token] = None

    def __enter__(self):
        """Entra al contexto (se combina con el contexto exterior)."""
        _install_record_factory()
        self._token = _log_context.set({**_log_context.get(), **self.context})
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Sale del contexto."""
        _log_context.reset(self._token)
        self._token = None
