"""
Finance App Views - Payout API
"""

from datetime import datetime, time, timedelta

from django.utils import timezone
from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from core.exceptions import NotFoundError
from .serializers import (
    HistorialParamsSerializer,
    MarcarPagadoSerializer,
    PagoSerializer,
    PropuestaLiquidacionSerializer,
)
from .services import PayoutService
from .settlement import PeriodoLiquidacion, calcular_liquidacion


def _inicio_de(fecha):
    return timezone.make_aware(datetime.combine(fecha, time.min))


class PagoAdminViewSet(viewsets.ViewSet):
    """
    Weekly driver payouts (Admin only).
    """

    permission_classes = [permissions.IsAdminUser]

    @action(detail=False, methods=['get'])
    def pendientes(self, request):
        """Pending payouts grouped by driver. Query: periodo | inicio & fin."""
        periodo = PeriodoLiquidacion.desde_parametros(request.query_params)
        propuesta = calcular_liquidacion(periodo)
        return Response(PropuestaLiquidacionSerializer(propuesta).data)

    @action(detail=False, methods=['post'], url_path='marcar-pagado')
    def marcar_pagado(self, request):
        """Record a payout for every pending service of one driver in the period."""
        body = MarcarPagadoSerializer(data=request.data)
        body.is_valid(raise_exception=True)
        data = body.validated_data

        periodo = PeriodoLiquidacion.desde_parametros(data)
        pago = PayoutService.registrar_pago(
            gruero=data['grueroId'],
            periodo=periodo,
            metodo_pago=data['metodoPago'],
            numero_comprobante=data['numeroComprobante'],
            notas_admin=data['notasAdmin'],
            admin_user=request.user,
        )

        return Response({
            'success': True,
            'message': f"Pago registrado: {pago.total_servicios} servicios marcados como pagados",
            'pago': PagoSerializer(pago).data,
            'serviciosActualizados': pago.total_servicios,
        }, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=['get'])
    def historial(self, request):
        """Payout history. Query: grueroId, desde, hasta (dates, inclusive)."""
        params = HistorialParamsSerializer(data=request.query_params)
        params.is_valid(raise_exception=True)
        data = params.validated_data

        resultado = PayoutService.historial(
            gruero_id=data.get('grueroId'),
            desde=_inicio_de(data['desde']) if data.get('desde') else None,
            hasta=_inicio_de(data['hasta'] + timedelta(days=1)) if data.get('hasta') else None,
        )
        return Response({
            'pagos': PagoSerializer(resultado['pagos'], many=True).data,
            'totalPagos': resultado['total_pagos'],
            'montoTotal': resultado['monto_total'],
        })


class GrueroPagoViewSet(viewsets.ViewSet):
    """
    Driver self-service payout summary.
    """

    permission_classes = [permissions.IsAuthenticated]

    @action(detail=False, methods=['get'])
    def resumen(self, request):
        gruero = getattr(request.user, 'gruero', None)
        if gruero is None:
            raise NotFoundError("Perfil de gruero no encontrado")

        resumen = PayoutService.resumen_gruero(gruero)
        return Response({
            'totalPendiente': resumen['total_pendiente'],
            'serviciosPendientes': resumen['servicios_pendientes'],
            'totalRecibido': resumen['total_recibido'],
            'totalServiciosCompletados': resumen['total_servicios_completados'],
            'pagosRecibidos': PagoSerializer(resumen['pagos_recibidos'], many=True).data,
        })
