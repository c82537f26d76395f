"""
Sistema de manejo de errores personalizado.

Este módulo define todas las excepciones de la importación de órdenes
y proporciona utilidades para manejo consistente de errores.

Cada importador envuelve la causa original con el payload que la provocó
y la relanza; los llamadores pueden ramificar por ``error_code``.
"""

import logging
import traceback
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Union

logger = logging.getLogger(__name__)


class ErrorCode(Enum):
    """
    Códigos de error estandardizados para la aplicación.
    """

    # Errores generales
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    PERSISTENCE_ERROR = "PERSISTENCE_ERROR"

    # Errores de datos de referencia
    REFERENCE_NOT_FOUND = "REFERENCE_NOT_FOUND"
    ADDRESS_RESOLUTION_FAILED = "ADDRESS_RESOLUTION_FAILED"
    VARIANT_NOT_FOUND = "VARIANT_NOT_FOUND"
    SHIPPING_METHOD_NOT_FOUND = "SHIPPING_METHOD_NOT_FOUND"
    PAYMENT_METHOD_NOT_FOUND = "PAYMENT_METHOD_NOT_FOUND"

    # Errores de importación
    LINE_ITEM_IMPORT_FAILED = "LINE_ITEM_IMPORT_FAILED"
    SHIPMENT_IMPORT_FAILED = "SHIPMENT_IMPORT_FAILED"
    PAYMENT_IMPORT_FAILED = "PAYMENT_IMPORT_FAILED"
    ADJUSTMENT_IMPORT_FAILED = "ADJUSTMENT_IMPORT_FAILED"
    ORDER_IMPORT_FAILED = "ORDER_IMPORT_FAILED"


class ErrorSeverity(Enum):
    """
    Niveles de severidad para errores.
    """

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class AppException(Exception):
    """
    Excepción base para todas las excepciones personalizadas de la aplicación.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.UNKNOWN_ERROR,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 500,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
    ):
        """
        Inicializa la excepción.

        Args:
            message: Mensaje de error
            error_code: Código de error estandardizado
            details: Información adicional del error
            status_code: Código HTTP asociado
            severity: Severidad del error
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.status_code = status_code
        self.severity = severity
        self.timestamp = datetime.now(timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convierte la excepción a diccionario.

        Returns:
            Dict: Representación de la excepción
        """
        data = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code.value,
            "details": self.details,
            "status_code": self.status_code,
            "severity": self.severity.value,
            "timestamp": self.timestamp.isoformat(),
        }
        cause = self.__cause__
        if isinstance(cause, AppException):
            data["cause"] = cause.to_dict()
        elif cause is not None:
            data["cause"] = {"error_type": type(cause).__name__, "message": str(cause)}
        return data

    def __str__(self) -> str:
        """String representation del error."""
        return f"{self.error_code.value}: {self.message}"


class ValidationException(AppException):
    """
    Excepción para errores de validación de datos.
    """

    def __init__(
        self,
        message: str,
        field: str,
        invalid_value: Any = None,
        expected_format: Optional[str] = None,
        **kwargs,
    ):
        """
        Inicializa la excepción de validación.

        Args:
            message: Mensaje de error
            field: Campo que falló la validación
            invalid_value: Valor que causó el error
            expected_format: Formato esperado
            **kwargs: Argumentos adicionales para AppException
        """
        super().__init__(
            message=message,
            error_code=ErrorCode.VALIDATION_ERROR,
            status_code=422,
            severity=ErrorSeverity.LOW,
            **kwargs,
        )
        self.field = field
        self.invalid_value = invalid_value
        self.expected_format = expected_format

        self.details.update(
            {
                "field": field,
                "invalid_value": str(invalid_value) if invalid_value is not None else None,
                "expected_format": expected_format,
            }
        )


class PersistenceException(AppException):
    """
    Excepción para errores de la capa de persistencia.
    """

    def __init__(self, message: str, operation: Optional[str] = None, **kwargs):
        super().__init__(
            message=message,
            error_code=ErrorCode.PERSISTENCE_ERROR,
            status_code=503,
            severity=ErrorSeverity.HIGH,
            **kwargs,
        )
        self.operation = operation
        self.details.update({"operation": operation})


# === DATOS DE REFERENCIA ===


class NotFoundException(AppException):
    """
    Base para búsquedas únicas que no encontraron registro.
    """

    entity: str = "record"
    code: ErrorCode = ErrorCode.REFERENCE_NOT_FOUND

    def __init__(self, criteria: Dict[str, Any], message: Optional[str] = None, **kwargs):
        """
        Args:
            criteria: Criterios de búsqueda utilizados
            message: Mensaje opcional (se genera a partir de los criterios)
        """
        super().__init__(
            message=message or f"Couldn't find {self.entity} with {criteria}",
            error_code=self.code,
            status_code=404,
            severity=ErrorSeverity.LOW,
            **kwargs,
        )
        self.criteria = dict(criteria)
        self.details.update({"entity": self.entity, "criteria": self.criteria})


class ReferenceNotFoundException(NotFoundException):
    """País o estado no encontrado en los datos de referencia."""

    def __init__(self, entity: str, criteria: Dict[str, Any], **kwargs):
        self.entity = entity
        super().__init__(criteria, **kwargs)


class VariantNotFoundException(NotFoundException):
    """Variante inexistente o inactiva."""

    entity = "variant"
    code = ErrorCode.VARIANT_NOT_FOUND


class ShippingMethodNotFoundException(NotFoundException):
    """Método de envío inexistente."""

    entity = "shipping method"
    code = ErrorCode.SHIPPING_METHOD_NOT_FOUND


class PaymentMethodNotFoundException(NotFoundException):
    """Método de pago inexistente."""

    entity = "payment method"
    code = ErrorCode.PAYMENT_METHOD_NOT_FOUND


class AddressResolutionException(AppException):
    """
    Falla al normalizar país o estado de una dirección.
    """

    def __init__(self, component: str, criteria: Dict[str, Any], cause: Exception, **kwargs):
        """
        Args:
            component: "country" o "state"
            criteria: Criterios de búsqueda originales
            cause: Excepción subyacente
        """
        super().__init__(
            message=f"Ensure order import address {component}: {cause} {criteria}",
            error_code=ErrorCode.ADDRESS_RESOLUTION_FAILED,
            status_code=422,
            severity=ErrorSeverity.LOW,
            **kwargs,
        )
        self.component = component
        self.criteria = dict(criteria)
        self.cause = cause
        self.details.update({"component": component, "criteria": self.criteria})


# === IMPORTACIÓN ===


class ImportStepException(AppException):
    """
    Base para fallas de un paso de importación.

    Conserva el payload original y la causa para que el llamador
    pueda inspeccionar qué entrada falló y por qué.
    """

    step: str = "order"
    code: ErrorCode = ErrorCode.ORDER_IMPORT_FAILED

    def __init__(self, payload: Any, cause: Exception, **kwargs):
        """
        Args:
            payload: Entrada del payload que provocó la falla
            cause: Excepción subyacente
        """
        super().__init__(
            message=f"Order import {self.step}: {cause} {payload}",
            error_code=self.code,
            status_code=422,
            severity=ErrorSeverity.MEDIUM,
            **kwargs,
        )
        self.payload = payload
        self.cause = cause
        self.details.update(
            {
                "step": self.step,
                "payload": payload,
                "cause_type": type(cause).__name__,
                "cause_code": cause.error_code.value if isinstance(cause, AppException) else None,
            }
        )


class LineItemImportException(ImportStepException):
    step = "line items"
    code = ErrorCode.LINE_ITEM_IMPORT_FAILED


class ShipmentImportException(ImportStepException):
    step = "shipments"
    code = ErrorCode.SHIPMENT_IMPORT_FAILED


class PaymentImportException(ImportStepException):
    step = "payments"
    code = ErrorCode.PAYMENT_IMPORT_FAILED


class AdjustmentImportException(ImportStepException):
    step = "adjustments"
    code = ErrorCode.ADJUSTMENT_IMPORT_FAILED


class OrderImportException(ImportStepException):
    """Falla inesperada durante la importación (no tipificada)."""

    def __init__(self, payload: Any, cause: Exception, **kwargs):
        super().__init__(payload, cause, **kwargs)
        self.status_code = 500
        self.severity = ErrorSeverity.HIGH
        self.message = f"Order import failed: {cause}"


# === FUNCIONES DE UTILIDAD ===


def root_cause(exception: BaseException) -> BaseException:
    """
    Recorre la cadena de causas hasta la excepción original.

    Args:
        exception: Excepción a inspeccionar

    Returns:
        BaseException: La causa más profunda
    """
    current = exception
    while current.__cause__ is not None:
        current = current.__cause__
    return current


def create_error_response(exception: Union[AppException, Exception]) -> Dict[str, Any]:
    """
    Crea respuesta de error estandardizada.

    Args:
        exception: Excepción a convertir

    Returns:
        Dict: Respuesta de error
    """
    if isinstance(exception, AppException):
        error_dict = exception.to_dict()
    else:
        error_dict = AppException(
            message=f"{type(exception).__name__}: {exception}",
            details={"original_exception": type(exception).__name__},
        ).to_dict()

    return {"error": True, **error_dict}


def log_error(
    exception: Exception,
    context: Optional[Dict[str, Any]] = None,
    level: int = logging.ERROR,
) -> None:
    """
    Loggea un error de manera consistente.

    Args:
        exception: Excepción a loggear
        context: Contexto adicional
        level: Nivel de logging
    """
    context = context or {}

    log_data = {
        "exception_type": type(exception).__name__,
        "exception_message": str(exception),
        "traceback": "".join(traceback.format_exception(type(exception), exception, exception.__traceback__)),
        **context,
    }

    if isinstance(exception, AppException):
        message = f"{exception.error_code.value}: {exception.message}"
        log_data.update(
            {
                "error_code": exception.error_code.value,
                "severity": exception.severity.value,
            }
        )
    else:
        message = f"Unhandled exception: {type(exception).__name__}: {str(exception)}"

    logger.log(level, message, extra=log_data)
