"""
Service lifecycle for GRUAPP

SOLICITADO -> ACEPTADO -> EN_CAMINO -> EN_SITIO -> COMPLETADO
CANCELADO is reachable from every non-terminal state.

Every operation locks the row, checks the edge against TRANSICIONES_SERVICIO
and writes in the same transaction. On refusal the row is left untouched.
"""

import logging

from django.db import transaction
from django.utils import timezone

from core.exceptions import ValidationError
from core.state_machine import validar_tabla, verificar_transicion
from logistics.models import Servicio, ServicioStatus

logger = logging.getLogger(__name__)


TRANSICIONES_SERVICIO = validar_tabla({
    ServicioStatus.SOLICITADO: frozenset({ServicioStatus.ACEPTADO, ServicioStatus.CANCELADO}),
    ServicioStatus.ACEPTADO: frozenset({ServicioStatus.EN_CAMINO, ServicioStatus.CANCELADO}),
    ServicioStatus.EN_CAMINO: frozenset({ServicioStatus.EN_SITIO, ServicioStatus.CANCELADO}),
    ServicioStatus.EN_SITIO: frozenset({ServicioStatus.COMPLETADO, ServicioStatus.CANCELADO}),
    ServicioStatus.COMPLETADO: frozenset(),
    ServicioStatus.CANCELADO: frozenset(),
}, ServicioStatus)


def _bloquear(servicio) -> Servicio:
    return Servicio.objects.select_for_update().get(pk=servicio.pk)


def _transicionar(servicio, destino, campo_fecha, **cambios) -> Servicio:
    """Lock, check the edge, stamp the timestamp and save the given fields."""
    servicio = _bloquear(servicio)
    verificar_transicion(TRANSICIONES_SERVICIO, servicio.status, destino)

    anterior = servicio.status
    servicio.status = destino
    setattr(servicio, campo_fecha, timezone.now())
    for campo, valor in cambios.items():
        setattr(servicio, campo, valor)
    servicio.save(update_fields=['status', campo_fecha, 'updated_at', *cambios])

    logger.info(f"[SERVICIO] {str(servicio.id)[:8]} {anterior} -> {destino}")
    return servicio


def _validar_monto(nombre, valor):
    if valor is None:
        raise ValidationError(f"{nombre} es requerido", campo=nombre)
    if isinstance(valor, bool) or not isinstance(valor, int):
        raise ValidationError(f"{nombre} debe ser un número entero de pesos", campo=nombre)
    if valor < 0:
        raise ValidationError(f"{nombre} no puede ser negativo", campo=nombre)


def _bloquear_para(servicio, destino) -> Servicio:
    """Lock the row and check the edge before any input is validated."""
    actual = _bloquear(servicio)
    verificar_transicion(TRANSICIONES_SERVICIO, actual.status, destino)
    return actual


@transaction.atomic
def aceptar(servicio, gruero) -> Servicio:
    """Assign an approved, active driver to a requested service."""
    # State is checked before the driver argument
    actual = _bloquear_para(servicio, ServicioStatus.ACEPTADO)

    if gruero is None:
        raise ValidationError("Debe indicar el gruero que acepta el servicio")

    gruero = gruero.__class__.objects.select_for_update().get(pk=gruero.pk)
    if not gruero.puede_operar:
        raise ValidationError(
            "El gruero debe estar aprobado y sin suspensión para aceptar servicios",
            gruero_id=str(gruero.pk),
        )

    return _transicionar(actual, ServicioStatus.ACEPTADO, 'aceptado_at', gruero=gruero)


@transaction.atomic
def marcar_en_camino(servicio) -> Servicio:
    return _transicionar(servicio, ServicioStatus.EN_CAMINO, 'en_camino_at')


@transaction.atomic
def marcar_en_sitio(servicio) -> Servicio:
    return _transicionar(servicio, ServicioStatus.EN_SITIO, 'en_sitio_at')


@transaction.atomic
def completar(servicio, total_cliente, total_gruero) -> Servicio:
    """
    Close the service with its final amounts.

    comision_plataforma is derived here, never accepted from the caller.
    A driver share above the client total gives a negative commission;
    that is recorded as-is.
    """
    actual = _bloquear_para(servicio, ServicioStatus.COMPLETADO)

    _validar_monto('totalCliente', total_cliente)
    _validar_monto('totalGruero', total_gruero)

    servicio = _transicionar(
        actual,
        ServicioStatus.COMPLETADO,
        'completado_at',
        total_cliente=total_cliente,
        total_gruero=total_gruero,
        comision_plataforma=total_cliente - total_gruero,
        pagado=False,
    )
    if servicio.comision_plataforma < 0:
        logger.warning(
            f"[SERVICIO] {str(servicio.id)[:8]} completed with negative commission "
            f"({servicio.comision_plataforma} CLP)"
        )
    return servicio


@transaction.atomic
def cancelar(servicio, motivo) -> Servicio:
    actual = _bloquear_para(servicio, ServicioStatus.CANCELADO)

    motivo = (motivo or '').strip()
    if not motivo:
        raise ValidationError("El motivo de cancelación es requerido", campo='motivo')

    return _transicionar(
        actual,
        ServicioStatus.CANCELADO,
        'cancelado_at',
        motivo_cancelacion=motivo,
    )


def cambiar_estado(servicio, estado, **datos) -> Servicio:
    """
    Move a service to `estado`, dispatching to the matching operation.

    datos: gruero (ACEPTADO), total_cliente/total_gruero (COMPLETADO),
    motivo (CANCELADO).
    """
    if estado not in ServicioStatus.values:
        raise ValidationError(f"Estado desconocido: {estado}", campo='status')
    estado = ServicioStatus(estado)

    if estado == ServicioStatus.ACEPTADO:
        return aceptar(servicio, datos.get('gruero'))
    if estado == ServicioStatus.EN_CAMINO:
        return marcar_en_camino(servicio)
    if estado == ServicioStatus.EN_SITIO:
        return marcar_en_sitio(servicio)
    if estado == ServicioStatus.COMPLETADO:
        return completar(servicio, datos.get('total_cliente'), datos.get('total_gruero'))
    if estado == ServicioStatus.CANCELADO:
        return cancelar(servicio, datos.get('motivo'))

    # SOLICITADO is never a destination
    verificar_transicion(TRANSICIONES_SERVICIO, servicio.status, estado)
