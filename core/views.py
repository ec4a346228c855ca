"""
Core App Views - Account Administration API
"""

import django_filters
from rest_framework import mixins, permissions, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from .models import Cliente, EstadoVerificacion, Gruero
from .serializers import ClienteSerializer, GrueroSerializer, MotivoSerializer
from .services import AccountService


class GrueroFilter(django_filters.FilterSet):
    estadoVerificacion = django_filters.ChoiceFilter(
        field_name='estado_verificacion',
        choices=EstadoVerificacion.choices,
    )
    cuentaSuspendida = django_filters.BooleanFilter(field_name='cuenta_suspendida')

    class Meta:
        model = Gruero
        fields = []


class ClienteFilter(django_filters.FilterSet):
    cuentaSuspendida = django_filters.BooleanFilter(field_name='cuenta_suspendida')

    class Meta:
        model = Cliente
        fields = []


class CuentaAdminViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """
    Shared suspension and deletion endpoints for driver and client accounts.

    - List/Retrieve: Admin only
    - PATCH suspender/reactivar: Admin only
    - DELETE: permanent, refused while services are in progress
    """

    permission_classes = [permissions.IsAdminUser]
    etiqueta = 'Cuenta'

    def _responder(self, mensaje, cuenta):
        return Response({
            'success': True,
            'message': mensaje,
            'data': self.get_serializer(cuenta).data,
        })

    @action(detail=True, methods=['patch'])
    def suspender(self, request, pk=None):
        """Suspend the account. Body: {motivo}."""
        body = MotivoSerializer(data=request.data)
        body.is_valid(raise_exception=True)
        cuenta = AccountService.suspender(self.get_object(), body.validated_data['motivo'])
        return self._responder(f"{self.etiqueta} suspendido", cuenta)

    @action(detail=True, methods=['patch'])
    def reactivar(self, request, pk=None):
        cuenta = AccountService.reactivar(self.get_object())
        return self._responder(f"{self.etiqueta} reactivado", cuenta)

    def destroy(self, request, pk=None):
        resumen = AccountService.eliminar_cuenta(self.get_object())
        return Response({
            'success': True,
            'message': f"{self.etiqueta} eliminado permanentemente",
            'eliminados': {
                'calificaciones': resumen['calificaciones_eliminadas'],
                'reclamos': resumen['reclamos_eliminados'],
                'servicios': resumen['servicios_eliminados'],
            },
        })


class GrueroAdminViewSet(CuentaAdminViewSet):
    """Driver administration: verification, suspension, deletion."""

    queryset = Gruero.objects.select_related('user')
    serializer_class = GrueroSerializer
    filterset_class = GrueroFilter
    etiqueta = 'Gruero'

    @action(detail=True, methods=['patch'])
    def aprobar(self, request, pk=None):
        gruero = AccountService.aprobar(self.get_object(), admin_user=request.user)
        return self._responder("Gruero aprobado", gruero)

    @action(detail=True, methods=['patch'])
    def rechazar(self, request, pk=None):
        """Reject a pending driver. Body: {motivo}."""
        body = MotivoSerializer(data=request.data)
        body.is_valid(raise_exception=True)
        gruero = AccountService.rechazar(
            self.get_object(),
            body.validated_data['motivo'],
            admin_user=request.user,
        )
        return self._responder("Gruero rechazado", gruero)


class ClienteAdminViewSet(CuentaAdminViewSet):
    """Client administration: suspension, deletion."""

    queryset = Cliente.objects.select_related('user')
    serializer_class = ClienteSerializer
    filterset_class = ClienteFilter
    etiqueta = 'Cliente'
