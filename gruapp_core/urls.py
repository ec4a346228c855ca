"""
GRUAPP Main URL Configuration
"""

from django.contrib import admin
from django.urls import path, include
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response


# ===========================================
# ADMIN SITE CUSTOMIZATION
# ===========================================
admin.site.site_header = "GRUAPP Administración"
admin.site.site_title = "GRUAPP Admin"
admin.site.index_title = "Supervisión de Operaciones"


@api_view(['GET'])
@permission_classes([AllowAny])
def api_root(request):
    """API Root endpoint with available routes."""
    return Response({
        'name': 'GRUAPP API',
        'version': '1.0.0',
        'endpoints': {
            'auth': {
                'token': '/api/auth/token/',
                'refresh': '/api/auth/token/refresh/',
            },
            'pagos': {
                'pendientes': '/api/admin/pagos/pendientes/',
                'marcarPagado': '/api/admin/pagos/marcar-pagado/',
                'historial': '/api/admin/pagos/historial/',
                'resumenGruero': '/api/gruero/pagos/resumen/',
            },
            'grueros': '/api/admin/grueros/',
            'clientes': '/api/admin/clientes/',
            'servicios': '/api/admin/servicios/',
            'reclamos': '/api/admin/reclamos/',
            'docs': '/api/docs/',
        }
    })


urlpatterns = [
    # Admin
    path('admin/', admin.site.urls),

    # API Root
    path('api/', api_root, name='api-root'),

    # App URLs
    path('api/', include('core.urls')),
    path('api/', include('logistics.urls')),
    path('api/', include('finance.urls')),
    path('api/', include('support.urls')),

    # OpenAPI schema
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/docs/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
]
