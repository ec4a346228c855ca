"""
Logistics App Serializers - Servicios
"""

from rest_framework import serializers

from .models import Servicio


class ServicioSerializer(serializers.ModelSerializer):
    """Serializer for Servicio (admin read operations)."""

    clienteId = serializers.UUIDField(source='cliente_id', read_only=True)
    clienteNombre = serializers.CharField(source='cliente.nombre', read_only=True)
    grueroId = serializers.UUIDField(source='gruero_id', read_only=True, allow_null=True)
    grueroNombre = serializers.SerializerMethodField()
    tipoVehiculo = serializers.CharField(source='tipo_vehiculo', read_only=True)
    origenDireccion = serializers.CharField(source='origen_direccion', read_only=True)
    destinoDireccion = serializers.CharField(source='destino_direccion', read_only=True)
    distanciaKm = serializers.FloatField(source='distancia_km', read_only=True)
    totalCliente = serializers.IntegerField(source='total_cliente', read_only=True)
    totalGruero = serializers.IntegerField(source='total_gruero', read_only=True)
    comisionPlataforma = serializers.IntegerField(source='comision_plataforma', read_only=True)
    pagoId = serializers.UUIDField(source='pago_id', read_only=True, allow_null=True)
    solicitadoAt = serializers.DateTimeField(source='solicitado_at', read_only=True)
    aceptadoAt = serializers.DateTimeField(source='aceptado_at', read_only=True)
    enCaminoAt = serializers.DateTimeField(source='en_camino_at', read_only=True)
    enSitioAt = serializers.DateTimeField(source='en_sitio_at', read_only=True)
    completadoAt = serializers.DateTimeField(source='completado_at', read_only=True)
    canceladoAt = serializers.DateTimeField(source='cancelado_at', read_only=True)
    motivoCancelacion = serializers.CharField(source='motivo_cancelacion', read_only=True)

    class Meta:
        model = Servicio
        fields = [
            'id', 'status', 'clienteId', 'clienteNombre', 'grueroId', 'grueroNombre',
            'tipoVehiculo', 'origenDireccion', 'destinoDireccion', 'distanciaKm',
            'totalCliente', 'totalGruero', 'comisionPlataforma', 'pagado', 'pagoId',
            'solicitadoAt', 'aceptadoAt', 'enCaminoAt', 'enSitioAt',
            'completadoAt', 'canceladoAt', 'motivoCancelacion',
        ]
        read_only_fields = fields

    def get_grueroNombre(self, obj):
        return obj.gruero.nombre if obj.gruero else None


class CambioEstadoSerializer(serializers.Serializer):
    """Body of PATCH estado. Business rules are checked by the lifecycle."""

    status = serializers.CharField()
    grueroId = serializers.UUIDField(required=False, allow_null=True)
    totalCliente = serializers.IntegerField(required=False, allow_null=True)
    totalGruero = serializers.IntegerField(required=False, allow_null=True)
    motivo = serializers.CharField(required=False, allow_blank=True, default='')


class CancelacionSerializer(serializers.Serializer):
    motivo = serializers.CharField(required=False, allow_blank=True, default='')
