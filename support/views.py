import django_filters
from rest_framework import permissions, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from .models import Reclamo, ReclamoEstado, ReclamoPrioridad, ReclamoTipo
from .serializers import (
    CambioEstadoReclamoSerializer,
    MotivoRechazoSerializer,
    NotasSerializer,
    ReclamoSerializer,
    ResolucionSerializer,
)
from .services import SupportService


class ReclamoFilter(django_filters.FilterSet):
    estado = django_filters.ChoiceFilter(choices=ReclamoEstado.choices)
    tipo = django_filters.ChoiceFilter(choices=ReclamoTipo.choices)
    prioridad = django_filters.ChoiceFilter(choices=ReclamoPrioridad.choices)

    class Meta:
        model = Reclamo
        fields = []


class ReclamoAdminViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Complaint handling for the support team.
    Accessible at /api/admin/reclamos/
    """
    queryset = Reclamo.objects.select_related('servicio', 'reportador', 'resuelto_por')
    serializer_class = ReclamoSerializer
    permission_classes = [permissions.IsAdminUser]
    filterset_class = ReclamoFilter

    def _responder(self, mensaje, reclamo):
        return Response({
            'success': True,
            'message': mensaje,
            'data': self.get_serializer(reclamo).data,
        })

    @action(detail=False, methods=['get'])
    def estadisticas(self, request):
        stats = SupportService.estadisticas()
        return Response({
            'pendientes': stats[ReclamoEstado.PENDIENTE],
            'enRevision': stats[ReclamoEstado.EN_REVISION],
            'resueltos': stats[ReclamoEstado.RESUELTO],
            'rechazados': stats[ReclamoEstado.RECHAZADO],
            'total': stats['total'],
        })

    @action(detail=True, methods=['patch'])
    def estado(self, request, pk=None):
        """Body: {estado, resolucion?, motivo?}."""
        body = CambioEstadoReclamoSerializer(data=request.data)
        body.is_valid(raise_exception=True)
        data = body.validated_data

        texto = data['motivo'] if data['estado'] == ReclamoEstado.RECHAZADO else data['resolucion']
        reclamo = SupportService.cambiar_estado(self.get_object(), request.user, data['estado'], texto)
        return self._responder(f"Reclamo actualizado a {reclamo.estado}", reclamo)

    @action(detail=True, methods=['patch'])
    def resolver(self, request, pk=None):
        body = ResolucionSerializer(data=request.data)
        body.is_valid(raise_exception=True)
        reclamo = SupportService.resolver(self.get_object(), request.user, body.validated_data['resolucion'])
        return self._responder("Reclamo resuelto", reclamo)

    @action(detail=True, methods=['patch'])
    def rechazar(self, request, pk=None):
        body = MotivoRechazoSerializer(data=request.data)
        body.is_valid(raise_exception=True)
        reclamo = SupportService.rechazar(self.get_object(), request.user, body.validated_data['motivo'])
        return self._responder("Reclamo rechazado", reclamo)

    @action(detail=True, methods=['patch'])
    def notas(self, request, pk=None):
        body = NotasSerializer(data=request.data)
        body.is_valid(raise_exception=True)
        reclamo = SupportService.agregar_notas(self.get_object(), body.validated_data['notas'])
        return self._responder("Notas actualizadas", reclamo)
