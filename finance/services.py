"""
FINANCE App - Payout Services for GRUAPP

Records weekly driver payouts against the settlement batcher's selection.
"""

import logging

from django.db import transaction
from django.db.models import Count, Sum

from core.exceptions import ConflictError, ValidationError, get_or_not_found
from core.models import Gruero
from finance.models import MetodoPago, Pago
from finance.settlement import servicios_pendientes
from logistics.models import Servicio, ServicioStatus

logger = logging.getLogger(__name__)


class PayoutService:
    """
    Service for driver payouts.

    A completed service is included in at most one Pago. The selection is
    always re-run under lock at payout time, never taken from a proposal
    the admin looked at earlier.
    """

    @classmethod
    @transaction.atomic
    def registrar_pago(
        cls,
        gruero,
        periodo,
        metodo_pago: str = MetodoPago.TRANSFERENCIA,
        numero_comprobante: str = '',
        notas_admin: str = '',
        admin_user=None,
    ) -> Pago:
        """
        Mark every pending service of `gruero` in `periodo` as paid.

        Args:
            gruero: Gruero instance or id
            periodo: PeriodoLiquidacion
            metodo_pago: MetodoPago value
            numero_comprobante: Transfer or receipt reference (required)
            notas_admin: Free text kept on the Pago
            admin_user: Staff user recording the payout

        Returns:
            The new Pago

        Raises:
            ValidationError: empty comprobante or unknown metodo
            NotFoundError: unknown driver
            ConflictError: nothing pending for the driver in the period
        """
        numero_comprobante = (numero_comprobante or '').strip()
        if not numero_comprobante:
            raise ValidationError("El número de comprobante es requerido", campo='numeroComprobante')

        if metodo_pago not in MetodoPago.values:
            raise ValidationError(
                f"Método de pago inválido: {metodo_pago}",
                campo='metodoPago',
                permitidos=list(MetodoPago.values),
            )

        # Lock the driver row first: concurrent payouts for one driver serialize here
        gruero_id = getattr(gruero, 'pk', gruero)
        gruero = get_or_not_found(
            Gruero.objects.select_for_update(),
            "Gruero no encontrado",
            pk=gruero_id,
        )

        servicios = list(
            servicios_pendientes(periodo, gruero=gruero)
            .select_for_update()
            .order_by('completado_at')
            .values_list('id', 'total_gruero')
        )
        if not servicios:
            logger.warning(
                f"[FINANCE] Payout refused for gruero {str(gruero.pk)[:8]} | "
                f"Period {periodo.etiqueta}: nothing pending"
            )
            raise ConflictError("No hay servicios pendientes para este gruero", periodo=periodo.etiqueta)

        ids = [servicio_id for servicio_id, _ in servicios]
        monto_total = sum(monto for _, monto in servicios)

        pago = Pago.objects.create(
            gruero=gruero,
            periodo=periodo.etiqueta,
            fecha_inicio=periodo.inicio,
            fecha_fin=periodo.fin,
            servicio_ids=[str(servicio_id) for servicio_id in ids],
            total_servicios=len(ids),
            monto_total=monto_total,
            metodo_pago=metodo_pago,
            numero_comprobante=numero_comprobante,
            notas_admin=notas_admin or '',
            pagado_por=admin_user,
            **gruero.datos_bancarios(),
        )

        actualizados = Servicio.objects.filter(
            pk__in=ids,
            pagado=False,
            pago__isnull=True,
        ).update(pagado=True, pago=pago)

        if actualizados != len(ids):
            raise ConflictError(
                "Los servicios cambiaron durante el pago, intente nuevamente",
                esperados=len(ids),
                actualizados=actualizados,
            )

        logger.info(
            f"[FINANCE] Payout {str(pago.id)[:8]} | Gruero {str(gruero.pk)[:8]} | "
            f"Period {pago.periodo} | {pago.total_servicios} services | "
            f"{pago.monto_total} CLP | Method: {metodo_pago}"
        )
        return pago

    @classmethod
    def historial(cls, gruero_id=None, desde=None, hasta=None) -> dict:
        """Payouts newest first, optionally filtered by driver and creation date."""
        pagos = Pago.objects.select_related('gruero__user', 'pagado_por')
        if gruero_id:
            pagos = pagos.filter(gruero_id=gruero_id)
        if desde:
            pagos = pagos.filter(created_at__gte=desde)
        if hasta:
            pagos = pagos.filter(created_at__lt=hasta)

        totales = pagos.aggregate(total=Sum('monto_total'))
        return {
            'pagos': list(pagos.order_by('-created_at')),
            'total_pagos': pagos.count(),
            'monto_total': totales['total'] or 0,
        }

    @classmethod
    def resumen_gruero(cls, gruero) -> dict:
        """Self-service summary shown to a driver."""
        completados = Servicio.objects.filter(gruero=gruero, status=ServicioStatus.COMPLETADO)
        pendientes = completados.filter(pagado=False)

        pendiente = pendientes.aggregate(total=Sum('total_gruero'), cantidad=Count('id'))
        recibido = Pago.objects.filter(gruero=gruero).aggregate(total=Sum('monto_total'))

        return {
            'total_pendiente': pendiente['total'] or 0,
            'servicios_pendientes': pendiente['cantidad'],
            'total_recibido': recibido['total'] or 0,
            'total_servicios_completados': completados.count(),
            'pagos_recibidos': list(Pago.objects.filter(gruero=gruero).order_by('-created_at')[:10]),
        }
