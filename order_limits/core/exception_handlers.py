"""
Manejadores de excepciones centralizados para la aplicación FastAPI.

Este módulo define todos los manejadores de excepciones personalizados y globales,
proporcionando respuestas consistentes y logging apropiado para diferentes tipos de errores.
"""

import logging
import traceback
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from order_limits.core.config import get_settings
from order_limits.core.logging_config import request_id_ctx
from order_limits.utils.error_handler import (
    AppException,
    ShopifyAPIException,
    SubscriptionRequiredException,
    ValidationException,
)

settings = get_settings()
logger = logging.getLogger(__name__)


def _error_content(
    request: Request,
    error_type: str,
    message: Any,
    error_code: Optional[str] = None,
    **extra: Any,
) -> Dict[str, Any]:
    """Sobre de error común a todas las respuestas."""
    content = {
        "success": False,
        "error": True,
        "error_type": error_type,
        "error_code": error_code,
        "message": message,
        "path": str(request.url.path),
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "request_id": request_id_ctx.get() or request.headers.get("X-Request-ID"),
    }
    content.update(extra)
    return content


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """
    Manejador para excepciones personalizadas de la aplicación.

    Args:
        request: Request de FastAPI
        exc: Excepción personalizada de la app

    Returns:
        JSONResponse: Respuesta JSON con error formateado
    """
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        f"App Exception: {exc.message} - "
        f"Code: {exc.error_code.value} - "
        f"URL: {request.url.path} - "
        f"Details: {exc.details}"
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=_error_content(
            request,
            "application_error",
            exc.message,
            exc.error_code.value,
            details=jsonable_encoder(exc.details) if settings.DEBUG else None,
        ),
    )


async def subscription_required_exception_handler(
    request: Request, exc: SubscriptionRequiredException
) -> JSONResponse:
    """
    Manejador para el gate de suscripción (402).
    """
    logger.info(f"🔒 Subscription required: {exc.shop} - URL: {request.url.path}")

    return JSONResponse(
        status_code=402,
        content=_error_content(
            request,
            "subscription_required",
            exc.message,
            exc.error_code.value,
            title="Subscription required",
            shop=exc.shop,
            trial_ends_at=exc.trial_ends_at.isoformat() if exc.trial_ends_at else None,
        ),
    )


async def shopify_api_exception_handler(request: Request, exc: ShopifyAPIException) -> JSONResponse:
    """
    Manejador específico para errores de la API de Shopify.

    Args:
        request: Request de FastAPI
        exc: Excepción de Shopify API

    Returns:
        JSONResponse: Respuesta JSON con información del error de Shopify
    """
    logger.error(
        f"Shopify API Exception: {exc.message} - "
        f"API Code: {exc.api_response_code} - "
        f"Rate Limited: {exc.rate_limited} - "
        f"Retry After: {exc.retry_after} - "
        f"URL: {request.url.path}"
    )

    headers = {}
    if exc.rate_limited and exc.retry_after:
        headers["Retry-After"] = str(exc.retry_after)

    return JSONResponse(
        status_code=exc.status_code,
        content=_error_content(
            request,
            "shopify_api_error",
            exc.message,
            exc.error_code.value,
            shopify_response_code=exc.api_response_code,
            rate_limited=exc.rate_limited,
            user_errors=exc.user_errors,
        ),
        headers=headers,
    )


async def validation_exception_handler(request: Request, exc: ValidationException) -> JSONResponse:
    """
    Manejador para errores de validación de datos.

    Args:
        request: Request de FastAPI
        exc: Excepción de validación

    Returns:
        JSONResponse: Respuesta JSON con detalles de validación
    """
    logger.warning(
        f"Validation Exception: {exc.message} - "
        f"Field: {exc.field} - "
        f"Value: {exc.invalid_value} - "
        f"URL: {request.url.path}"
    )

    return JSONResponse(
        status_code=422,
        content=_error_content(
            request,
            "validation_error",
            exc.message,
            exc.error_code.value,
            field=exc.field,
            expected_format=exc.expected_format,
        ),
    )


async def request_validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Manejador para bodies o parámetros que no cumplen los schemas Pydantic.
    """
    errors = jsonable_encoder(exc.errors())
    logger.warning(f"Request Validation Error: {len(errors)} errors - URL: {request.url.path}")

    return JSONResponse(
        status_code=422,
        content=_error_content(
            request,
            "validation_error",
            "Invalid request data",
            "VALIDATION_ERROR",
            errors=errors,
        ),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """
    Manejador para HTTPException de FastAPI y Starlette.

    Args:
        request: Request de FastAPI
        exc: HTTPException

    Returns:
        JSONResponse: Respuesta JSON estandarizada
    """
    logger.warning(f"HTTP Exception: {exc.status_code} - {exc.detail} - URL: {request.url.path}")

    return JSONResponse(
        status_code=exc.status_code,
        content=_error_content(request, "http_error", exc.detail, status_code=exc.status_code),
        headers=getattr(exc, "headers", None),
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Manejador global para excepciones no capturadas.

    Args:
        request: Request de FastAPI
        exc: Excepción no manejada

    Returns:
        JSONResponse: Respuesta JSON de error interno
    """
    logger.error(
        f"Unhandled Exception: {str(exc)} - "
        f"Type: {type(exc).__name__} - "
        f"URL: {request.url.path} - "
        f"Traceback: {''.join(traceback.format_exception(type(exc), exc, exc.__traceback__))}"
    )

    # Respuesta genérica (sin exponer detalles internos)
    error_message = "Internal server error occurred"
    if settings.DEBUG:
        error_message = f"{type(exc).__name__}: {str(exc)}"

    return JSONResponse(
        status_code=500,
        content=_error_content(request, "internal_server_error", error_message),
    )


def configure_exception_handlers(app: FastAPI) -> None:
    """
    Configura todos los manejadores de excepciones de la aplicación.

    Args:
        app: Instancia de FastAPI
    """
    logger.info("🔧 Configurando manejadores de excepciones...")

    # Manejadores específicos (orden de especificidad)
    app.add_exception_handler(ValidationException, validation_exception_handler)
    app.add_exception_handler(SubscriptionRequiredException, subscription_required_exception_handler)
    app.add_exception_handler(ShopifyAPIException, shopify_api_exception_handler)
    app.add_exception_handler(AppException, app_exception_handler)

    # Manejadores HTTP estándar
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)

    # Manejador global (debe ser el último)
    app.add_exception_handler(Exception, global_exception_handler)

    logger.info("✅ Manejadores de excepciones configurados correctamente")
