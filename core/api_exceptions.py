"""
Django REST Framework Exception Handler

Renders every error, ours and DRF's, as:
{ "success": false, "code": ..., "message": ..., <camelCase detail> }
"""

import logging

from django.core.exceptions import PermissionDenied as DjangoPermissionDenied
from django.http import Http404
from rest_framework.exceptions import (
    APIException,
    NotAuthenticated,
    AuthenticationFailed,
    PermissionDenied,
    NotFound,
    ValidationError as DRFValidationError,
)
from rest_framework.response import Response
from rest_framework.views import exception_handler

from core.exceptions import GruAppError

logger = logging.getLogger(__name__)


def camelize(key: str) -> str:
    """servicios_activos -> serviciosActivos"""
    head, *rest = key.split('_')
    return head + ''.join(part[:1].upper() + part[1:] for part in rest)


def _envelope(code, message, **detail):
    body = {'success': False, 'code': code, 'message': message}
    body.update({camelize(k): v for k, v in detail.items() if v is not None})
    return body


def custom_exception_handler(exc, context):
    view = context.get('view')
    view_name = view.__class__.__name__ if view else '?'

    if isinstance(exc, GruAppError):
        logger.warning(f"[API] {view_name} refused: {exc.code} | {exc.message}")
        return Response(
            _envelope(exc.code, exc.message, **exc.detail),
            status=exc.status_code,
        )

    response = exception_handler(exc, context)

    if response is None:
        # Unhandled: let Django produce the 500 after logging it
        logger.exception(f"[API] Unexpected error in {view_name}: {exc}")
        return None

    return Response(_convert(exc, response), status=response.status_code)


def _convert(exc, response):
    if isinstance(exc, NotAuthenticated):
        return _envelope('AUTHENTICATION_REQUIRED', 'Autenticación requerida')

    if isinstance(exc, AuthenticationFailed):
        return _envelope('AUTHENTICATION_FAILED', str(exc.detail))

    if isinstance(exc, (PermissionDenied, DjangoPermissionDenied)):
        return _envelope('PERMISSION_DENIED', 'No tiene permisos para esta acción')

    if isinstance(exc, (NotFound, Http404)):
        return _envelope('RESOURCE_NOT_FOUND', 'Recurso no encontrado')

    if isinstance(exc, DRFValidationError):
        detail = exc.detail if isinstance(exc.detail, dict) else {'errores': exc.detail}
        return _envelope(
            'VALIDATION_ERROR',
            'Datos inválidos',
            campos={camelize(k): v for k, v in detail.items()},
        )

    if isinstance(exc, APIException):
        return _envelope(
            exc.default_code.upper() if isinstance(exc.default_code, str) else 'API_ERROR',
            str(exc.detail),
        )

    return _envelope('API_ERROR', str(response.data))
