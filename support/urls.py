from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import ReclamoAdminViewSet

router = DefaultRouter()
router.register(r'admin/reclamos', ReclamoAdminViewSet, basename='admin-reclamo')

urlpatterns = [
    path('', include(router.urls)),
]
