"""
Finance App URLs
"""

from django.urls import path

from .views import GrueroPagoViewSet, PagoAdminViewSet

urlpatterns = [
    # Admin payouts
    path('admin/pagos/pendientes/', PagoAdminViewSet.as_view({'get': 'pendientes'}), name='admin-pagos-pendientes'),
    path('admin/pagos/marcar-pagado/', PagoAdminViewSet.as_view({'post': 'marcar_pagado'}), name='admin-pagos-marcar-pagado'),
    path('admin/pagos/historial/', PagoAdminViewSet.as_view({'get': 'historial'}), name='admin-pagos-historial'),

    # Driver self-service
    path('gruero/pagos/resumen/', GrueroPagoViewSet.as_view({'get': 'resumen'}), name='gruero-pagos-resumen'),
]
