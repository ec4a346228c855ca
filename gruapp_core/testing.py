"""
Test data builders shared by the app test suites.
"""

import itertools

from django.contrib.auth import get_user_model
from django.utils import timezone

_secuencia = itertools.count(1)


def crear_usuario(prefijo='usuario', **extra):
    n = next(_secuencia)
    User = get_user_model()
    return User.objects.create_user(
        username=f"{prefijo}{n}",
        email=f"{prefijo}{n}@gruapp.cl",
        password='testpass123',
        **extra
    )


def crear_admin():
    return crear_usuario('admin', is_staff=True, first_name='Admin', last_name='GruApp')


def crear_gruero(estado='APROBADO', **campos):
    from core.models import Gruero

    user = crear_usuario('gruero', first_name=campos.pop('nombre', 'Pedro'), last_name='Soto')
    campos.setdefault('patente', 'ABCD12')
    campos.setdefault('banco', 'Banco Estado')
    campos.setdefault('tipo_cuenta', 'VISTA')
    campos.setdefault('numero_cuenta', '12345678')
    campos.setdefault('nombre_titular', 'Pedro Soto')
    campos.setdefault('rut_titular', '12345678-9')
    return Gruero.objects.create(user=user, estado_verificacion=estado, **campos)


def crear_cliente(**campos):
    from core.models import Cliente

    user = crear_usuario('cliente', first_name=campos.pop('nombre', 'María'), last_name='Rojas')
    return Cliente.objects.create(user=user, **campos)


def crear_servicio(cliente, gruero=None, status='SOLICITADO', **campos):
    from logistics.models import Servicio

    campos.setdefault('origen_direccion', 'Av. Providencia 1234, Santiago')
    campos.setdefault('destino_direccion', 'Taller Los Leones, Ñuñoa')
    campos.setdefault('distancia_km', 8.5)
    return Servicio.objects.create(cliente=cliente, gruero=gruero, status=status, **campos)


def crear_servicio_completado(cliente, gruero, total_gruero, total_cliente=None, completado_at=None, **campos):
    """A COMPLETADO, unpaid service with consistent amounts."""
    if total_cliente is None:
        total_cliente = total_gruero + total_gruero // 4
    ahora = completado_at or timezone.now()
    return crear_servicio(
        cliente,
        gruero,
        status='COMPLETADO',
        total_cliente=total_cliente,
        total_gruero=total_gruero,
        comision_plataforma=total_cliente - total_gruero,
        aceptado_at=ahora,
        completado_at=ahora,
        **campos
    )


def crear_reclamo(servicio, estado='PENDIENTE', **campos):
    from support.models import Reclamo

    campos.setdefault('tipo', 'PROBLEMA_SERVICIO')
    campos.setdefault('reportado_por', 'CLIENTE')
    campos.setdefault('descripcion', 'La grúa llegó con dos horas de atraso')
    return Reclamo.objects.create(servicio=servicio, estado=estado, **campos)
