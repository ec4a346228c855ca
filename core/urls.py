"""
Core App URLs
"""

from django.urls import path, include
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import (
    TokenObtainPairView,
    TokenRefreshView,
)

from .views import ClienteAdminViewSet, GrueroAdminViewSet

router = DefaultRouter()
router.register(r'admin/grueros', GrueroAdminViewSet, basename='admin-gruero')
router.register(r'admin/clientes', ClienteAdminViewSet, basename='admin-cliente')

urlpatterns = [
    # JWT Authentication
    path('auth/token/', TokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('auth/token/refresh/', TokenRefreshView.as_view(), name='token_refresh'),

    # Router URLs
    path('', include(router.urls)),
]
