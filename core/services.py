"""
CORE App - Account Lifecycle Services for GRUAPP

Handles: driver verification, suspension of drivers and clients,
account deletion and the daily expired-documents sweep.
"""

import logging

from django.db import transaction
from django.utils import timezone

from core.exceptions import ConflictError, StateTransitionError, ValidationError
from core.models import Cliente, EstadoVerificacion, Gruero

logger = logging.getLogger(__name__)


def _requerir_texto(valor, campo, mensaje):
    valor = (valor or '').strip()
    if not valor:
        raise ValidationError(mensaje, campo=campo)
    return valor


def _bloquear(cuenta):
    return cuenta.__class__.objects.select_for_update().get(pk=cuenta.pk)


def _tipo(cuenta) -> str:
    return 'gruero' if isinstance(cuenta, Gruero) else 'cliente'


class AccountService:
    """
    Account state changes. Each mutating method locks the profile row,
    checks the precondition and writes in the same transaction.
    """

    # ========================================
    # VERIFICATION (drivers only)
    # ========================================

    @staticmethod
    @transaction.atomic
    def aprobar(gruero, admin_user=None) -> Gruero:
        gruero = _bloquear(gruero)
        if gruero.estado_verificacion != EstadoVerificacion.PENDIENTE:
            raise StateTransitionError(
                estado_actual=gruero.estado_verificacion,
                estado_destino=EstadoVerificacion.APROBADO,
            )

        gruero.estado_verificacion = EstadoVerificacion.APROBADO
        gruero.verificado_at = timezone.now()
        gruero.motivo_rechazo = ''
        gruero.save(update_fields=['estado_verificacion', 'verificado_at', 'motivo_rechazo', 'updated_at'])

        logger.info(f"[CUENTAS] Gruero {str(gruero.pk)[:8]} approved by {admin_user or 'system'}")
        return gruero

    @staticmethod
    @transaction.atomic
    def rechazar(gruero, motivo, admin_user=None) -> Gruero:
        motivo = _requerir_texto(motivo, 'motivo', "El motivo de rechazo es requerido")

        gruero = _bloquear(gruero)
        if gruero.estado_verificacion != EstadoVerificacion.PENDIENTE:
            raise StateTransitionError(
                estado_actual=gruero.estado_verificacion,
                estado_destino=EstadoVerificacion.RECHAZADO,
            )

        gruero.estado_verificacion = EstadoVerificacion.RECHAZADO
        gruero.motivo_rechazo = motivo
        gruero.save(update_fields=['estado_verificacion', 'motivo_rechazo', 'updated_at'])

        logger.info(f"[CUENTAS] Gruero {str(gruero.pk)[:8]} rejected by {admin_user or 'system'}: {motivo}")
        return gruero

    # ========================================
    # SUSPENSION (drivers and clients)
    # ========================================

    @staticmethod
    @transaction.atomic
    def suspender(cuenta, motivo):
        """Suspend a Gruero or a Cliente. Drivers must be APROBADO."""
        motivo = _requerir_texto(motivo, 'motivo', "El motivo de suspensión es requerido")

        cuenta = _bloquear(cuenta)
        if isinstance(cuenta, Gruero) and cuenta.estado_verificacion != EstadoVerificacion.APROBADO:
            raise StateTransitionError(
                "Solo se pueden suspender grueros aprobados",
                estado_actual=cuenta.estado_verificacion,
                estado_destino='SUSPENDIDO',
            )
        if cuenta.cuenta_suspendida:
            raise StateTransitionError(
                "La cuenta ya está suspendida",
                estado_actual='SUSPENDIDO',
                estado_destino='SUSPENDIDO',
            )

        cuenta.cuenta_suspendida = True
        cuenta.motivo_suspension = motivo
        cuenta.suspendida_at = timezone.now()
        cuenta.save(update_fields=['cuenta_suspendida', 'motivo_suspension', 'suspendida_at', 'updated_at'])

        logger.info(f"[CUENTAS] {_tipo(cuenta).capitalize()} {str(cuenta.pk)[:8]} suspended: {motivo}")
        return cuenta

    @staticmethod
    @transaction.atomic
    def reactivar(cuenta):
        cuenta = _bloquear(cuenta)
        if not cuenta.cuenta_suspendida:
            raise StateTransitionError(
                "La cuenta no está suspendida",
                estado_actual='ACTIVO',
                estado_destino='ACTIVO',
            )

        cuenta.cuenta_suspendida = False
        cuenta.motivo_suspension = ''
        cuenta.suspendida_at = None
        cuenta.save(update_fields=['cuenta_suspendida', 'motivo_suspension', 'suspendida_at', 'updated_at'])

        logger.info(f"[CUENTAS] {_tipo(cuenta).capitalize()} {str(cuenta.pk)[:8]} reactivated")
        return cuenta

    # ========================================
    # DELETION
    # ========================================

    @staticmethod
    def servicios_activos(cuenta):
        from logistics.models import ESTADOS_TERMINALES

        return cuenta.servicios.exclude(status__in=ESTADOS_TERMINALES)

    @staticmethod
    @transaction.atomic
    def eliminar_cuenta(cuenta) -> dict:
        """
        Permanently delete an account and its dependent records.

        Refused while the account has services in progress. Payout rows
        survive with a null driver and their servicio_ids snapshot. The
        auth user is deleted only when it holds no other profile.
        """
        from logistics.models import Calificacion, Servicio
        from support.models import Reclamo

        cuenta = _bloquear(cuenta)
        tipo = _tipo(cuenta)

        activos = AccountService.servicios_activos(cuenta).count()
        if activos > 0:
            logger.warning(
                f"[CUENTAS] Deletion refused for {tipo} {str(cuenta.pk)[:8]}: "
                f"{activos} active services"
            )
            mensaje = (
                "No se puede eliminar un gruero con servicios activos. Debe cancelarlos primero."
                if tipo == 'gruero' else
                "No se puede eliminar un cliente con servicios activos. Debe cancelarlos primero."
            )
            raise ConflictError(mensaje, servicios_activos=activos)

        servicios = cuenta.servicios.all()
        calificaciones, _ = Calificacion.objects.filter(**{tipo: cuenta}).delete()
        reclamos, _ = Reclamo.objects.filter(servicio__in=servicios).delete()
        _, por_modelo = servicios.delete()
        servicios_eliminados = por_modelo.get(Servicio._meta.label, 0)

        user = cuenta.user
        cuenta_id = str(cuenta.pk)
        cuenta.delete()

        # The same auth user may also hold the other profile; it stays untouched
        otro_perfil = Cliente if tipo == 'gruero' else Gruero
        usuario_eliminado = not otro_perfil.objects.filter(user_id=user.pk).exists()
        if usuario_eliminado:
            user.delete()

        resumen = {
            'id': cuenta_id,
            'tipo': tipo,
            'calificaciones_eliminadas': calificaciones,
            'reclamos_eliminados': reclamos,
            'servicios_eliminados': servicios_eliminados,
            'usuario_eliminado': usuario_eliminado,
        }
        logger.info(f"[CUENTAS] Deleted {tipo} {cuenta_id[:8]} | {resumen}")
        return resumen

    # ========================================
    # DOCUMENT EXPIRY
    # ========================================

    @staticmethod
    def suspender_por_documentos_vencidos(hoy=None) -> list:
        """
        Suspend every approved, active driver holding an expired document.

        Each driver is handled in its own transaction so one failure does
        not undo the others. Returns the suspended drivers.
        """
        hoy = hoy or timezone.localdate()
        candidatos = Gruero.objects.filter(
            estado_verificacion=EstadoVerificacion.APROBADO,
            cuenta_suspendida=False,
        ).select_related('user')

        suspendidos = []
        for gruero in candidatos:
            vencidos = gruero.documentos_vencidos(hoy)
            if not vencidos:
                continue
            try:
                suspendidos.append(
                    AccountService.suspender(gruero, f"DOCUMENTOS_VENCIDOS: {', '.join(vencidos)}")
                )
            except StateTransitionError:
                # Suspended or unapproved since the candidate query ran
                logger.info(f"[CUENTAS] Gruero {str(gruero.pk)[:8]} skipped, state changed")

        logger.info(f"[CUENTAS] Expired documents sweep: {len(suspendidos)} drivers suspended")
        return suspendidos
