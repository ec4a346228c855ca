import logging
from django.db import transaction
from django.db.models import Count
from django.utils import timezone

from core.exceptions import ValidationError
from core.state_machine import es_terminal, validar_tabla, verificar_transicion
from .models import Reclamo, ReclamoEstado

logger = logging.getLogger(__name__)


TRANSICIONES_RECLAMO = validar_tabla({
    ReclamoEstado.PENDIENTE: frozenset({
        ReclamoEstado.EN_REVISION,
        ReclamoEstado.RESUELTO,
        ReclamoEstado.RECHAZADO,
    }),
    ReclamoEstado.EN_REVISION: frozenset({ReclamoEstado.RESUELTO, ReclamoEstado.RECHAZADO}),
    ReclamoEstado.RESUELTO: frozenset(),
    ReclamoEstado.RECHAZADO: frozenset(),
}, ReclamoEstado)


def _bloquear(reclamo):
    return Reclamo.objects.select_for_update().get(pk=reclamo.pk)


def _requerir_texto(valor, campo, mensaje):
    valor = (valor or '').strip()
    if not valor:
        raise ValidationError(mensaje, campo=campo)
    return valor


class SupportService:
    """
    Service for the complaint resolution workflow.
    """

    @staticmethod
    @transaction.atomic
    def marcar_en_revision(reclamo, admin_user=None):
        reclamo = _bloquear(reclamo)
        verificar_transicion(TRANSICIONES_RECLAMO, reclamo.estado, ReclamoEstado.EN_REVISION)

        reclamo.estado = ReclamoEstado.EN_REVISION
        reclamo.save(update_fields=['estado', 'updated_at'])

        logger.info(f"[RECLAMO] {str(reclamo.id)[:8]} under review by {admin_user or 'system'}")
        return reclamo

    @staticmethod
    @transaction.atomic
    def resolver(reclamo, admin_user, resolucion):
        """
        Close a complaint as resolved.
        """
        resolucion = _requerir_texto(resolucion, 'resolucion', "La resolución es requerida")

        reclamo = _bloquear(reclamo)
        verificar_transicion(TRANSICIONES_RECLAMO, reclamo.estado, ReclamoEstado.RESUELTO)

        reclamo.estado = ReclamoEstado.RESUELTO
        reclamo.resolucion = resolucion
        reclamo.resuelto_por = admin_user
        reclamo.resuelto_at = timezone.now()
        reclamo.save(update_fields=['estado', 'resolucion', 'resuelto_por', 'resuelto_at', 'updated_at'])

        logger.info(f"[RECLAMO] {str(reclamo.id)[:8]} resolved by {admin_user or 'system'}")
        return reclamo

    @staticmethod
    @transaction.atomic
    def rechazar(reclamo, admin_user, motivo):
        """
        Close a complaint as rejected. The reason is kept in `resolucion`.
        """
        motivo = _requerir_texto(motivo, 'motivo', "El motivo de rechazo es requerido")

        reclamo = _bloquear(reclamo)
        verificar_transicion(TRANSICIONES_RECLAMO, reclamo.estado, ReclamoEstado.RECHAZADO)

        reclamo.estado = ReclamoEstado.RECHAZADO
        reclamo.resolucion = f"RECHAZADO: {motivo}"
        reclamo.resuelto_por = admin_user
        reclamo.resuelto_at = timezone.now()
        reclamo.save(update_fields=['estado', 'resolucion', 'resuelto_por', 'resuelto_at', 'updated_at'])

        logger.info(f"[RECLAMO] {str(reclamo.id)[:8]} rejected by {admin_user or 'system'}: {motivo}")
        return reclamo

    @staticmethod
    def cambiar_estado(reclamo, admin_user, estado, texto=None):
        """
        Dispatch to the operation reaching `estado`. `texto` is the
        resolution or the rejection reason.
        """
        if estado not in ReclamoEstado.values:
            raise ValidationError(f"Estado desconocido: {estado}", campo='estado')

        if estado == ReclamoEstado.EN_REVISION:
            return SupportService.marcar_en_revision(reclamo, admin_user)
        if estado == ReclamoEstado.RESUELTO:
            return SupportService.resolver(reclamo, admin_user, texto)
        if estado == ReclamoEstado.RECHAZADO:
            return SupportService.rechazar(reclamo, admin_user, texto)

        # PENDIENTE is never a destination
        verificar_transicion(TRANSICIONES_RECLAMO, reclamo.estado, ReclamoEstado.PENDIENTE)

    @staticmethod
    @transaction.atomic
    def agregar_notas(reclamo, notas):
        """Replace the internal notes. Allowed in every state."""
        reclamo = _bloquear(reclamo)
        reclamo.notas_internas = notas or ''
        reclamo.save(update_fields=['notas_internas', 'updated_at'])

        if es_terminal(TRANSICIONES_RECLAMO, reclamo.estado):
            logger.info(f"[RECLAMO] {str(reclamo.id)[:8]} notes updated after closure")
        return reclamo

    @staticmethod
    def estadisticas():
        filas = Reclamo.objects.order_by().values('estado').annotate(n=Count('id'))
        conteos = {fila['estado']: fila['n'] for fila in filas}
        stats = {estado: conteos.get(estado, 0) for estado in ReclamoEstado.values}
        stats['total'] = sum(stats.values())
        return stats
