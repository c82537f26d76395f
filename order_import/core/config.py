"""
Configuración centralizada de la aplicación.

Este módulo maneja todas las variables de entorno y configuraciones
del importador de órdenes usando Pydantic Settings para validación automática.
"""

from decimal import Decimal
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Configuración de la aplicación usando Pydantic Settings.

    Todas las configuraciones se cargan desde variables de entorno
    con valores por defecto apropiados para desarrollo.
    """

    # === CONFIGURACIÓN BÁSICA DE LA APP ===
    APP_NAME: str = "Order Import Service"
    APP_VERSION: str = "0.1.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False

    # === CONFIGURACIÓN DE LOGGING ===
    LOG_LEVEL: str = "INFO"
    LOG_FILE_PATH: Optional[str] = None
    LOG_MAX_SIZE_MB: int = 10
    LOG_BACKUP_COUNT: int = 5
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # === CONFIGURACIÓN DE BASE DE DATOS ===
    DATABASE_URL: str = "sqlite+aiosqlite:///./order_import.db"
    DB_ECHO: bool = False
    DB_POOL_SIZE: int = Field(default=5, ge=1)

    # === CONFIGURACIÓN DE ÓRDENES ===
    CURRENCY: str = "USD"
    DEFAULT_ORDER_CHANNEL: str = "api"
    ORDER_NUMBER_PREFIX: str = "R"
    DEFAULT_PAYMENT_STATE: str = "completed"

    # === CONFIGURACIÓN DE IMPORTACIÓN ===
    ADMIN_ROLE: str = "admin"
    # Ejecutar los pasos de persistencia dentro de una transacción real
    ORDER_IMPORT_USE_TRANSACTION: bool = True
    # Rechazar (en lugar de ignorar) atributos protegidos enviados por no-admins
    REJECT_PROTECTED_ATTRIBUTES: bool = False

    # === IMPUESTOS AUTOMÁTICOS ===
    # 0 desactiva el cálculo automático de impuestos
    AUTOMATIC_TAX_RATE: Decimal = Field(default=Decimal("0"), ge=0)
    AUTOMATIC_TAX_LABEL: str = "Tax"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
        "extra": "ignore",
    }

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

    @field_validator("CURRENCY")
    @classmethod
    def validate_currency(cls, v):
        """Valida el código de moneda ISO 4217."""
        if not v or len(v) != 3 or not v.isalpha():
            raise ValueError("CURRENCY debe ser un código ISO de 3 letras")
        return v.upper()

    @field_validator("DEFAULT_PAYMENT_STATE")
    @classmethod
    def validate_payment_state(cls, v):
        """Valida que el estado de pago por defecto exista."""
        from order_import.domain.models.payment import PaymentState

        valid_states = [state.value for state in PaymentState]
        if v not in valid_states:
            raise ValueError(f"DEFAULT_PAYMENT_STATE debe ser uno de: {valid_states}")
        return v

    @property
    def is_production(self) -> bool:
        """Verifica si está en entorno de producción."""
        return self.ENVIRONMENT == "production"

    @property
    def is_development(self) -> bool:
        """Verifica si está en entorno de desarrollo."""
        return self.ENVIRONMENT == "development"

    @property
    def automatic_taxes_enabled(self) -> bool:
        """Indica si se deben generar ajustes de impuesto automáticos."""
        return self.AUTOMATIC_TAX_RATE > 0

    @property
    def is_sqlite(self) -> bool:
        """Indica si la base de datos configurada es SQLite."""
        return self.DATABASE_URL.startswith("sqlite")


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


def reload_settings() -> Settings:
    """
    Recarga la configuración (útil para testing).

    Returns:
        Settings: Nueva instancia de configuración
    """
    get_settings.cache_clear()
    return get_settings()


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
        "log_level": settings.LOG_LEVEL,
        "currency": settings.CURRENCY,
        "features": {
            "transactional_import": settings.ORDER_IMPORT_USE_TRANSACTION,
            "reject_protected_attributes": settings.REJECT_PROTECTED_ATTRIBUTES,
            "automatic_taxes": settings.automatic_taxes_enabled,
        },
    }
