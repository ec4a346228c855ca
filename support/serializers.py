from rest_framework import serializers

from .models import Reclamo


class ReclamoSerializer(serializers.ModelSerializer):
    servicioId = serializers.UUIDField(source='servicio_id', read_only=True)
    reportadoPor = serializers.CharField(source='reportado_por', read_only=True)
    reportador = serializers.SerializerMethodField()
    resueltoPor = serializers.SerializerMethodField()
    resueltoAt = serializers.DateTimeField(source='resuelto_at', read_only=True)
    notasInternas = serializers.CharField(source='notas_internas', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = Reclamo
        fields = [
            'id', 'servicioId', 'tipo', 'reportadoPor', 'reportador', 'descripcion',
            'prioridad', 'estado', 'resolucion', 'resueltoPor', 'resueltoAt',
            'notasInternas', 'createdAt', 'updatedAt',
        ]
        read_only_fields = fields

    def get_reportador(self, obj):
        return obj.reportador.get_username() if obj.reportador else None

    def get_resueltoPor(self, obj):
        return obj.resuelto_por.get_username() if obj.resuelto_por else None


class CambioEstadoReclamoSerializer(serializers.Serializer):
    estado = serializers.CharField()
    resolucion = serializers.CharField(required=False, allow_blank=True, default='')
    motivo = serializers.CharField(required=False, allow_blank=True, default='')


class ResolucionSerializer(serializers.Serializer):
    resolucion = serializers.CharField(required=False, allow_blank=True, default='')


class MotivoRechazoSerializer(serializers.Serializer):
    motivo = serializers.CharField(required=False, allow_blank=True, default='')


class NotasSerializer(serializers.Serializer):
    notas = serializers.CharField(allow_blank=True)
