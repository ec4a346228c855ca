from django.contrib import admin
from .models import Reclamo


@admin.register(Reclamo)
class ReclamoAdmin(admin.ModelAdmin):
    list_display = ('short_id', 'tipo', 'prioridad', 'estado', 'reportado_por', 'created_at')
    list_filter = ('estado', 'tipo', 'prioridad', 'reportado_por')
    search_fields = ('id', 'descripcion', 'resolucion')
    ordering = ('-created_at',)
    # Only internal notes are editable after creation
    readonly_fields = (
        'id', 'servicio', 'reportado_por', 'reportador', 'tipo', 'descripcion',
        'prioridad', 'estado', 'resolucion', 'resuelto_por', 'resuelto_at', 'created_at',
    )

    def short_id(self, obj):
        return str(obj.id)[:8]
    short_id.short_description = "ID"

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
