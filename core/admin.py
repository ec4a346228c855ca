"""
Django Admin configuration for CORE app.

State changes go through AccountService (API), so lifecycle fields are
read-only here.
"""

from django.contrib import admin
from .models import Cliente, Gruero


@admin.register(Gruero)
class GrueroAdmin(admin.ModelAdmin):
    list_display = (
        'short_id',
        'nombre',
        'patente',
        'estado_verificacion',
        'cuenta_suspendida',
        'created_at'
    )
    list_filter = ('estado_verificacion', 'cuenta_suspendida', 'created_at')
    search_fields = ('user__email', 'user__first_name', 'user__last_name', 'patente', 'rut_titular')
    ordering = ('-created_at',)
    raw_id_fields = ('user',)

    readonly_fields = (
        'id',
        'estado_verificacion',
        'motivo_rechazo',
        'verificado_at',
        'cuenta_suspendida',
        'motivo_suspension',
        'suspendida_at',
        'created_at',
    )

    fieldsets = (
        ('Cuenta', {
            'fields': ('id', 'user', 'telefono', 'estado_verificacion', 'motivo_rechazo', 'verificado_at')
        }),
        ('Suspensión', {
            'fields': ('cuenta_suspendida', 'motivo_suspension', 'suspendida_at')
        }),
        ('Vehículo', {
            'fields': ('patente', 'tipos_vehiculos_atiende')
        }),
        ('Datos bancarios', {
            'fields': ('banco', 'tipo_cuenta', 'numero_cuenta', 'nombre_titular', 'rut_titular')
        }),
        ('Documentos', {
            'fields': (
                'licencia_vencimiento', 'seguro_vencimiento',
                'revision_vencimiento', 'permiso_vencimiento'
            )
        }),
    )

    def short_id(self, obj):
        return str(obj.id)[:8]
    short_id.short_description = "ID"

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(Cliente)
class ClienteAdmin(admin.ModelAdmin):
    list_display = ('short_id', 'nombre', 'telefono', 'cuenta_suspendida', 'created_at')
    list_filter = ('cuenta_suspendida',)
    search_fields = ('user__email', 'user__first_name', 'user__last_name', 'telefono')
    raw_id_fields = ('user',)
    readonly_fields = ('id', 'cuenta_suspendida', 'motivo_suspension', 'suspendida_at', 'created_at')

    def short_id(self, obj):
        return str(obj.id)[:8]
    short_id.short_description = "ID"

    def has_delete_permission(self, request, obj=None):
        return False
