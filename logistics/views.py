"""
Logistics App Views - Servicios Administration API
"""

import django_filters
from rest_framework import permissions, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from core.exceptions import get_or_not_found
from core.models import Gruero
from .models import Servicio, ServicioStatus
from .serializers import CambioEstadoSerializer, CancelacionSerializer, ServicioSerializer
from .services import lifecycle


class ServicioFilter(django_filters.FilterSet):
    status = django_filters.ChoiceFilter(choices=ServicioStatus.choices)
    pagado = django_filters.BooleanFilter()
    grueroId = django_filters.UUIDFilter(field_name='gruero_id')
    clienteId = django_filters.UUIDFilter(field_name='cliente_id')

    class Meta:
        model = Servicio
        fields = []


class ServicioAdminViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Service administration.

    - List/Retrieve: Admin only, filterable by status
    - PATCH estado: move along the lifecycle
    - PATCH cancelar: cancel with a reason
    """

    queryset = Servicio.objects.select_related('cliente__user', 'gruero__user')
    serializer_class = ServicioSerializer
    permission_classes = [permissions.IsAdminUser]
    filterset_class = ServicioFilter

    @action(detail=True, methods=['patch'])
    def estado(self, request, pk=None):
        """Body: {status, grueroId?, totalCliente?, totalGruero?, motivo?}."""
        body = CambioEstadoSerializer(data=request.data)
        body.is_valid(raise_exception=True)
        data = body.validated_data

        gruero = None
        if data.get('grueroId'):
            gruero = get_or_not_found(Gruero, "Gruero no encontrado", pk=data['grueroId'])

        servicio = lifecycle.cambiar_estado(
            self.get_object(),
            data['status'],
            gruero=gruero,
            total_cliente=data.get('totalCliente'),
            total_gruero=data.get('totalGruero'),
            motivo=data.get('motivo'),
        )
        return Response({
            'success': True,
            'message': f"Servicio actualizado a {servicio.status}",
            'data': self.get_serializer(servicio).data,
        })

    @action(detail=True, methods=['patch'])
    def cancelar(self, request, pk=None):
        """Body: {motivo}."""
        body = CancelacionSerializer(data=request.data)
        body.is_valid(raise_exception=True)

        servicio = lifecycle.cancelar(self.get_object(), body.validated_data['motivo'])
        return Response({
            'success': True,
            'message': "Servicio cancelado",
            'data': self.get_serializer(servicio).data,
        })
