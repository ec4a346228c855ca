"""
Logistics App URLs
"""

from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import ServicioAdminViewSet

router = DefaultRouter()
router.register(r'admin/servicios', ServicioAdminViewSet, basename='admin-servicio')

urlpatterns = [
    path('', include(router.urls)),
]
