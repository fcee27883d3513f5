"""
Sistema de manejo de errores personalizado.

Este módulo define todas las excepciones personalizadas de la aplicación
y proporciona utilidades para manejo consistente de errores.
"""

import logging
import traceback
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class ErrorCode(Enum):
    """
    Códigos de error estandardizados para la aplicación.
    """

    # Errores generales
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    MISSING_REQUIRED_FIELD = "MISSING_REQUIRED_FIELD"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"

    # Errores de conexión
    DATABASE_ERROR = "DATABASE_ERROR"
    SHOPIFY_CONNECTION_FAILED = "SHOPIFY_CONNECTION_FAILED"
    SHOPIFY_API_ERROR = "SHOPIFY_API_ERROR"

    # Errores de autenticación y billing
    UNAUTHORIZED = "UNAUTHORIZED"
    INVALID_SESSION_TOKEN = "INVALID_SESSION_TOKEN"
    SHOP_MISMATCH = "SHOP_MISMATCH"
    INVALID_WEBHOOK_SIGNATURE = "INVALID_WEBHOOK_SIGNATURE"
    SUBSCRIPTION_REQUIRED = "SUBSCRIPTION_REQUIRED"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"


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
        is_retryable: bool = False,
    ):
        """
        Inicializa la excepción.

        Args:
            message: Mensaje de error
            error_code: Código de error estandardizado
            details: Información adicional del error
            status_code: Código HTTP asociado
            severity: Severidad del error
            is_retryable: Si la operación puede reintentarse
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.status_code = status_code
        self.severity = severity
        self.is_retryable = is_retryable
        self.timestamp = datetime.now(timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convierte la excepción a diccionario.

        Returns:
            Dict: Representación de la excepción
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code.value,
            "details": self.details,
            "status_code": self.status_code,
            "severity": self.severity.value,
            "is_retryable": self.is_retryable,
            "timestamp": self.timestamp.isoformat(),
        }

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


class BadRequestException(AppException):
    """
    Excepción para requests incompletas (campos requeridos ausentes).
    """

    def __init__(self, message: str, missing_fields: Optional[list] = None, **kwargs):
        super().__init__(
            message=message,
            error_code=ErrorCode.MISSING_REQUIRED_FIELD,
            status_code=400,
            severity=ErrorSeverity.LOW,
            **kwargs,
        )
        self.missing_fields = missing_fields or []
        self.details.update({"missing_fields": self.missing_fields})


class NotFoundException(AppException):
    """
    Excepción para recursos inexistentes.
    """

    def __init__(self, message: str, resource: str, resource_id: Optional[str] = None, **kwargs):
        super().__init__(
            message=message,
            error_code=ErrorCode.NOT_FOUND,
            status_code=404,
            severity=ErrorSeverity.LOW,
            **kwargs,
        )
        self.resource = resource
        self.resource_id = resource_id
        self.details.update({"resource": resource, "resource_id": resource_id})


class ConflictException(AppException):
    """
    Excepción para violaciones de unicidad.
    """

    def __init__(self, message: str, **kwargs):
        super().__init__(
            message=message,
            error_code=ErrorCode.CONFLICT,
            status_code=409,
            severity=ErrorSeverity.LOW,
            **kwargs,
        )


class ConfigurationException(AppException):
    """
    Excepción para configuración faltante o inválida.
    """

    def __init__(self, message: str, config_key: Optional[str] = None, **kwargs):
        super().__init__(
            message=message,
            error_code=ErrorCode.CONFIGURATION_ERROR,
            status_code=500,
            severity=ErrorSeverity.CRITICAL,
            **kwargs,
        )
        self.config_key = config_key
        self.details.update({"config_key": config_key})


class AuthenticationException(AppException):
    """
    Excepción para requests sin sesión válida de Shopify.
    """

    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.UNAUTHORIZED, **kwargs):
        super().__init__(
            message=message,
            error_code=error_code,
            status_code=401,
            severity=ErrorSeverity.LOW,
            **kwargs,
        )


class WebhookVerificationException(AuthenticationException):
    """
    Excepción para webhooks con firma HMAC ausente o inválida.
    """

    def __init__(self, message: str = "Invalid webhook signature", topic: Optional[str] = None, **kwargs):
        super().__init__(message=message, error_code=ErrorCode.INVALID_WEBHOOK_SIGNATURE, **kwargs)
        self.topic = topic
        self.details.update({"topic": topic})


class SubscriptionRequiredException(AppException):
    """
    Excepción para shops con periodo de prueba vencido y sin suscripción activa.
    """

    def __init__(
        self,
        message: str = "Please activate a subscription to continue using this app",
        shop: Optional[str] = None,
        trial_ends_at: Optional[datetime] = None,
        **kwargs,
    ):
        super().__init__(
            message=message,
            error_code=ErrorCode.SUBSCRIPTION_REQUIRED,
            status_code=402,
            severity=ErrorSeverity.LOW,
            **kwargs,
        )
        self.shop = shop
        self.trial_ends_at = trial_ends_at
        self.details.update(
            {
                "shop": shop,
                "trial_ends_at": trial_ends_at.isoformat() if trial_ends_at else None,
            }
        )


class DatabaseException(AppException):
    """
    Excepción para errores de conexión con la base de datos.
    """

    def __init__(
        self,
        message: str,
        connection_type: str = "database",
        **kwargs,
    ):
        """
        Inicializa la excepción de base de datos.

        Args:
            message: Mensaje de error
            connection_type: Tipo de operación que falló
            **kwargs: Argumentos adicionales para AppException
        """
        super().__init__(
            message=message,
            error_code=ErrorCode.DATABASE_ERROR,
            status_code=503,
            severity=ErrorSeverity.HIGH,
            is_retryable=True,
            **kwargs,
        )
        self.connection_type = connection_type
        self.details.update({"connection_type": connection_type})


class ShopifyAPIException(AppException):
    """
    Excepción para errores de la API de Shopify.
    """

    def __init__(
        self,
        message: str,
        api_response_code: Optional[int] = None,
        endpoint: Optional[str] = None,
        rate_limited: bool = False,
        retry_after: Optional[int] = None,
        user_errors: Optional[list] = None,
        **kwargs,
    ):
        """
        Inicializa la excepción de Shopify API.

        Args:
            message: Mensaje de error
            api_response_code: Código de respuesta de Shopify
            endpoint: Endpoint que falló
            rate_limited: Si es por rate limiting
            retry_after: Segundos para reintentar
            user_errors: userErrors devueltos por una mutación
            **kwargs: Argumentos adicionales para AppException
        """
        error_code = ErrorCode.SHOPIFY_API_ERROR
        severity = ErrorSeverity.MEDIUM

        if rate_limited:
            error_code = ErrorCode.RATE_LIMIT_EXCEEDED
            severity = ErrorSeverity.LOW
        elif api_response_code and api_response_code >= 500:
            severity = ErrorSeverity.HIGH

        super().__init__(
            message=message,
            error_code=error_code,
            status_code=502,
            severity=severity,
            is_retryable=rate_limited,
            **kwargs,
        )

        self.api_response_code = api_response_code
        self.endpoint = endpoint
        self.rate_limited = rate_limited
        self.retry_after = retry_after
        self.user_errors = user_errors or []

        self.details.update(
            {
                "api_response_code": api_response_code,
                "endpoint": endpoint,
                "rate_limited": rate_limited,
                "retry_after": retry_after,
                "user_errors": self.user_errors,
            }
        )


# === FUNCIONES DE UTILIDAD ===


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
        "traceback": traceback.format_exc(),
        **context,
    }

    if isinstance(exception, AppException):
        message = f"{exception.error_code.value}: {exception.message}"
        log_data.update(
            {
                "error_code": exception.error_code.value,
                "severity": exception.severity.value,
                "is_retryable": exception.is_retryable,
            }
        )
    else:
        message = f"Unhandled exception: {type(exception).__name__}: {str(exception)}"

    logger.log(level, message, extra={"error_context": log_data})
