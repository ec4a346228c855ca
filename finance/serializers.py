"""
Finance App Serializers - Settlement proposals and payouts
"""

from rest_framework import serializers

from .models import MetodoPago, Pago


# ===========================================
# SETTLEMENT PROPOSAL (read-only, built from dataclasses)
# ===========================================

class ServicioPendienteSerializer(serializers.Serializer):
    id = serializers.CharField()
    fecha = serializers.DateTimeField()
    clienteNombre = serializers.CharField(source='cliente_nombre')
    origen = serializers.CharField()
    destino = serializers.CharField()
    monto = serializers.IntegerField()


class GrupoGrueroSerializer(serializers.Serializer):
    grueroId = serializers.UUIDField(source='gruero.pk')
    nombre = serializers.CharField(source='gruero.nombre')
    email = serializers.CharField(source='gruero.email')
    telefono = serializers.CharField(source='gruero.telefono')
    patente = serializers.CharField(source='gruero.patente')
    banco = serializers.CharField(source='gruero.banco')
    tipoCuenta = serializers.CharField(source='gruero.tipo_cuenta')
    numeroCuenta = serializers.CharField(source='gruero.numero_cuenta')
    nombreTitular = serializers.CharField(source='gruero.nombre_titular')
    rutTitular = serializers.CharField(source='gruero.rut_titular')
    montoTotal = serializers.IntegerField(source='monto_total')
    totalServicios = serializers.IntegerField(source='total_servicios')
    servicios = ServicioPendienteSerializer(many=True)


class PropuestaLiquidacionSerializer(serializers.Serializer):
    periodo = serializers.CharField(source='periodo.etiqueta')
    inicioSemana = serializers.DateTimeField(source='periodo.inicio')
    finSemana = serializers.DateTimeField(source='periodo.fin')
    grueros = GrupoGrueroSerializer(source='grupos', many=True)
    totalGrueros = serializers.IntegerField(source='total_grueros')
    montoTotalGeneral = serializers.IntegerField(source='monto_total_general')


# ===========================================
# PAYOUTS
# ===========================================

class PagoSerializer(serializers.ModelSerializer):
    """Serializer for the payout ledger."""

    grueroId = serializers.UUIDField(source='gruero_id', read_only=True, allow_null=True)
    grueroNombre = serializers.SerializerMethodField()
    fechaInicio = serializers.DateTimeField(source='fecha_inicio', read_only=True)
    fechaFin = serializers.DateTimeField(source='fecha_fin', read_only=True)
    servicioIds = serializers.JSONField(source='servicio_ids', read_only=True)
    totalServicios = serializers.IntegerField(source='total_servicios', read_only=True)
    montoTotal = serializers.IntegerField(source='monto_total', read_only=True)
    metodoPago = serializers.CharField(source='metodo_pago', read_only=True)
    numeroComprobante = serializers.CharField(source='numero_comprobante', read_only=True)
    notasAdmin = serializers.CharField(source='notas_admin', read_only=True)
    tipoCuenta = serializers.CharField(source='tipo_cuenta', read_only=True)
    numeroCuenta = serializers.CharField(source='numero_cuenta', read_only=True)
    nombreTitular = serializers.CharField(source='nombre_titular', read_only=True)
    rutTitular = serializers.CharField(source='rut_titular', read_only=True)
    pagadoPor = serializers.SerializerMethodField()
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = Pago
        fields = [
            'id', 'grueroId', 'grueroNombre', 'periodo', 'fechaInicio', 'fechaFin',
            'servicioIds', 'totalServicios', 'montoTotal', 'metodoPago',
            'numeroComprobante', 'notasAdmin', 'banco', 'tipoCuenta',
            'numeroCuenta', 'nombreTitular', 'rutTitular', 'pagadoPor', 'createdAt',
        ]
        read_only_fields = fields

    def get_grueroNombre(self, obj):
        return obj.gruero.nombre if obj.gruero else obj.nombre_titular

    def get_pagadoPor(self, obj):
        return obj.pagado_por.get_username() if obj.pagado_por else None


class MarcarPagadoSerializer(serializers.Serializer):
    """Body of marcar-pagado. Emptiness and method are checked by PayoutService."""

    grueroId = serializers.UUIDField()
    metodoPago = serializers.CharField(required=False, default=MetodoPago.TRANSFERENCIA)
    numeroComprobante = serializers.CharField(required=False, allow_blank=True, default='')
    notasAdmin = serializers.CharField(required=False, allow_blank=True, default='')
    periodo = serializers.CharField(required=False, allow_blank=True)
    inicio = serializers.CharField(required=False, allow_blank=True)
    fin = serializers.CharField(required=False, allow_blank=True)


class HistorialParamsSerializer(serializers.Serializer):
    grueroId = serializers.UUIDField(required=False)
    desde = serializers.DateField(required=False)
    hasta = serializers.DateField(required=False)
