"""
CORE App - Business Errors for GRUAPP

Every core operation signals refusal through one of these classes.
The API layer maps them to HTTP statuses (see core.api_exceptions).

HTTP Status Code Standards:
- 400: ValidationError (missing or malformed input)
- 404: NotFoundError (unknown id)
- 409: StateTransitionError, ConflictError, ImmutableRecordError
"""

from django.core.exceptions import ValidationError as DjangoValidationError


class GruAppError(Exception):
    """Base class for refused business operations."""

    code = 'GRUAPP_ERROR'
    status_code = 400
    default_message = 'Operación rechazada'

    def __init__(self, message=None, **detail):
        self.message = message or self.default_message
        self.detail = detail
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {'code': self.code, 'message': self.message, **self.detail}


class ValidationError(GruAppError):
    code = 'VALIDATION_ERROR'
    status_code = 400
    default_message = 'Datos inválidos'


class StateTransitionError(GruAppError):
    """The requested operation is not legal from the record's current state."""

    code = 'INVALID_STATE_TRANSITION'
    status_code = 409
    default_message = 'Transición de estado no permitida'

    def __init__(self, message=None, estado_actual=None, estado_destino=None, **detail):
        if message is None and estado_actual is not None:
            message = f"No se puede pasar de {estado_actual} a {estado_destino}"
        super().__init__(
            message,
            estado_actual=estado_actual,
            estado_destino=estado_destino,
            **detail
        )


class ConflictError(GruAppError):
    code = 'RESOURCE_CONFLICT'
    status_code = 409
    default_message = 'Conflicto con el estado actual'


class ImmutableRecordError(ConflictError):
    code = 'IMMUTABLE_RECORD'
    default_message = 'Los registros de pago no se pueden modificar ni eliminar'


class NotFoundError(GruAppError):
    code = 'RESOURCE_NOT_FOUND'
    status_code = 404
    default_message = 'Recurso no encontrado'


def get_or_not_found(klass, message=None, **lookup):
    """
    Like get_object_or_404, but raises NotFoundError so services can be
    called outside a request. Accepts a model or a queryset.
    """
    queryset = klass._default_manager.all() if hasattr(klass, '_default_manager') else klass
    try:
        return queryset.get(**lookup)
    except (queryset.model.DoesNotExist, ValueError, DjangoValidationError):
        # malformed UUIDs end up here too
        raise NotFoundError(message or f"{queryset.model._meta.verbose_name} no encontrado")
