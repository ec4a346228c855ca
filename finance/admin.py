"""
Django Admin configuration for FINANCE app.
"""

from django.contrib import admin
from .models import Pago


@admin.register(Pago)
class PagoAdmin(admin.ModelAdmin):
    """Read-only payout ledger."""

    list_display = (
        'short_id',
        'gruero_nombre',
        'periodo',
        'total_servicios',
        'formatted_amount',
        'metodo_pago',
        'numero_comprobante',
        'created_at'
    )
    list_filter = ('metodo_pago', 'periodo', 'created_at')
    search_fields = (
        'id',
        'numero_comprobante',
        'nombre_titular',
        'rut_titular',
        'gruero__user__email',
    )
    ordering = ('-created_at',)
    date_hierarchy = 'created_at'

    fieldsets = (
        ('Pago', {
            'fields': ('id', 'gruero', 'periodo', 'fecha_inicio', 'fecha_fin')
        }),
        ('Montos', {
            'fields': ('total_servicios', 'monto_total', 'servicio_ids')
        }),
        ('Comprobante', {
            'fields': ('metodo_pago', 'numero_comprobante', 'notas_admin', 'pagado_por')
        }),
        ('Datos bancarios', {
            'fields': ('banco', 'tipo_cuenta', 'numero_cuenta', 'nombre_titular', 'rut_titular')
        }),
        ('Historial', {
            'fields': ('created_at',)
        }),
    )

    def get_readonly_fields(self, request, obj=None):
        return [field.name for field in self.model._meta.fields]

    def short_id(self, obj):
        return str(obj.id)[:8]
    short_id.short_description = "ID"

    def gruero_nombre(self, obj):
        return obj.gruero.nombre if obj.gruero else f"{obj.nombre_titular} (eliminado)"
    gruero_nombre.short_description = "Gruero"

    def formatted_amount(self, obj):
        return f"${obj.monto_total:,} CLP".replace(',', '.')
    formatted_amount.short_description = "Monto"

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
