"""
Django Admin configuration for LOGISTICS app.
"""

from django.contrib import admin
from .models import Calificacion, Servicio


class CalificacionInline(admin.StackedInline):
    model = Calificacion
    extra = 0
    can_delete = False
    readonly_fields = ('cliente', 'gruero', 'puntuacion', 'comentario', 'created_at')

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Servicio)
class ServicioAdmin(admin.ModelAdmin):
    """Servicios are read-only here; transitions go through the lifecycle API."""

    list_display = (
        'short_id',
        'status',
        'cliente',
        'gruero',
        'total_cliente',
        'total_gruero',
        'comision_plataforma',
        'pagado',
        'solicitado_at',
    )
    list_filter = ('status', 'pagado', 'tipo_vehiculo', 'solicitado_at')
    search_fields = ('id', 'origen_direccion', 'destino_direccion', 'gruero__patente')
    ordering = ('-solicitado_at',)
    date_hierarchy = 'solicitado_at'
    inlines = [CalificacionInline]

    fieldsets = (
        ('Servicio', {
            'fields': ('id', 'status', 'cliente', 'gruero', 'tipo_vehiculo')
        }),
        ('Trayecto', {
            'fields': ('origen_direccion', 'destino_direccion', 'distancia_km')
        }),
        ('Montos (CLP)', {
            'fields': ('total_cliente', 'total_gruero', 'comision_plataforma', 'pagado', 'pago')
        }),
        ('Historial', {
            'fields': (
                'solicitado_at', 'aceptado_at', 'en_camino_at', 'en_sitio_at',
                'completado_at', 'cancelado_at', 'motivo_cancelacion'
            )
        }),
    )

    def get_readonly_fields(self, request, obj=None):
        return [field.name for field in self.model._meta.fields]

    def short_id(self, obj):
        return str(obj.id)[:8]
    short_id.short_description = "ID"

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
