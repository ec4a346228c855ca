"""
Core App Serializers - Account Administration

Output keys are camelCase to match the admin console.
"""

from rest_framework import serializers

from .models import Cliente, Gruero


class GrueroSerializer(serializers.ModelSerializer):
    """Serializer for Gruero profiles (read operations)."""

    nombre = serializers.ReadOnlyField()
    email = serializers.ReadOnlyField()
    estadoVerificacion = serializers.CharField(source='estado_verificacion', read_only=True)
    cuentaSuspendida = serializers.BooleanField(source='cuenta_suspendida', read_only=True)
    motivoSuspension = serializers.CharField(source='motivo_suspension', read_only=True)
    motivoRechazo = serializers.CharField(source='motivo_rechazo', read_only=True)
    verificadoAt = serializers.DateTimeField(source='verificado_at', read_only=True)
    suspendidaAt = serializers.DateTimeField(source='suspendida_at', read_only=True)
    tiposVehiculos = serializers.SerializerMethodField()
    tipoCuenta = serializers.CharField(source='tipo_cuenta', read_only=True)
    numeroCuenta = serializers.CharField(source='numero_cuenta', read_only=True)
    nombreTitular = serializers.CharField(source='nombre_titular', read_only=True)
    rutTitular = serializers.CharField(source='rut_titular', read_only=True)
    licenciaVencimiento = serializers.DateField(source='licencia_vencimiento', read_only=True)
    seguroVencimiento = serializers.DateField(source='seguro_vencimiento', read_only=True)
    revisionVencimiento = serializers.DateField(source='revision_vencimiento', read_only=True)
    permisoVencimiento = serializers.DateField(source='permiso_vencimiento', read_only=True)
    documentosVencidos = serializers.SerializerMethodField()
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = Gruero
        fields = [
            'id', 'nombre', 'email', 'telefono', 'patente',
            'estadoVerificacion', 'cuentaSuspendida', 'motivoSuspension',
            'motivoRechazo', 'verificadoAt', 'suspendidaAt', 'tiposVehiculos',
            'banco', 'tipoCuenta', 'numeroCuenta', 'nombreTitular', 'rutTitular',
            'licenciaVencimiento', 'seguroVencimiento', 'revisionVencimiento',
            'permisoVencimiento', 'documentosVencidos', 'createdAt',
        ]
        read_only_fields = fields

    def get_tiposVehiculos(self, obj):
        return sorted(obj.tipos_vehiculos)

    def get_documentosVencidos(self, obj):
        return obj.documentos_vencidos()


class ClienteSerializer(serializers.ModelSerializer):
    """Serializer for Cliente profiles (read operations)."""

    nombre = serializers.ReadOnlyField()
    email = serializers.ReadOnlyField()
    cuentaSuspendida = serializers.BooleanField(source='cuenta_suspendida', read_only=True)
    motivoSuspension = serializers.CharField(source='motivo_suspension', read_only=True)
    suspendidaAt = serializers.DateTimeField(source='suspendida_at', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = Cliente
        fields = [
            'id', 'nombre', 'email', 'telefono', 'cuentaSuspendida',
            'motivoSuspension', 'suspendidaAt', 'createdAt',
        ]
        read_only_fields = fields


class MotivoSerializer(serializers.Serializer):
    """Body of rechazar/suspender. Emptiness is checked by the service."""

    motivo = serializers.CharField(required=False, allow_blank=True, default='')
