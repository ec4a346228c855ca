"""
CORE App - Account Profiles for GRUAPP

Handles: Grueros (tow-truck drivers) and Clientes, both attached to a
Django auth user. Admins are plain staff users.
"""

import json
import logging
import uuid

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone

logger = logging.getLogger(__name__)


class TipoVehiculo(models.TextChoices):
    """Vehicle categories a driver can tow."""
    AUTOMOVIL = 'AUTOMOVIL', 'Automóvil'
    SUV = 'SUV', 'SUV/Camioneta'
    MOTO = 'MOTO', 'Moto'
    FURGON = 'FURGON', 'Furgón'
    CAMION_LIVIANO = 'CAMION_LIVIANO', 'Camión Liviano'
    CAMION_MEDIANO = 'CAMION_MEDIANO', 'Camión Mediano'
    CAMION_PESADO = 'CAMION_PESADO', 'Camión Pesado'
    BUS = 'BUS', 'Bus'
    MAQUINARIA = 'MAQUINARIA', 'Maquinaria'


class EstadoVerificacion(models.TextChoices):
    PENDIENTE = 'PENDIENTE', 'Pendiente de Aprobación'
    APROBADO = 'APROBADO', 'Aprobado'
    RECHAZADO = 'RECHAZADO', 'Rechazado'


class TipoCuenta(models.TextChoices):
    CORRIENTE = 'CORRIENTE', 'Cuenta Corriente'
    VISTA = 'VISTA', 'Cuenta Vista / RUT'
    AHORRO = 'AHORRO', 'Cuenta de Ahorro'


def parse_tipos_vehiculo(raw) -> frozenset:
    """
    Parse the stored JSON list of vehicle types a driver serves.

    Malformed JSON or anything that is not a list yields an empty set.
    Unknown codes are dropped. Both cases are logged.
    """
    if not raw:
        return frozenset()

    try:
        data = json.loads(raw)
    except (TypeError, ValueError):
        logger.warning(f"[CUENTAS] tipos_vehiculos_atiende is not valid JSON: {raw!r}")
        return frozenset()

    if not isinstance(data, list):
        logger.warning(f"[CUENTAS] tipos_vehiculos_atiende is not a list: {raw!r}")
        return frozenset()

    tipos = set()
    for codigo in data:
        if codigo in TipoVehiculo.values:
            tipos.add(TipoVehiculo(codigo))
        else:
            logger.warning(f"[CUENTAS] Unknown vehicle type dropped: {codigo!r}")
    return frozenset(tipos)


class CuentaBase(models.Model):
    """Fields shared by every suspendable account profile."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    telefono = models.CharField(max_length=20, blank=True, verbose_name="Teléfono")

    cuenta_suspendida = models.BooleanField(default=False, verbose_name="Cuenta suspendida")
    motivo_suspension = models.TextField(blank=True, verbose_name="Motivo de suspensión")
    suspendida_at = models.DateTimeField(null=True, blank=True, verbose_name="Suspendida el")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True

    @property
    def nombre(self) -> str:
        return self.user.get_full_name() or self.user.get_username()

    @property
    def email(self) -> str:
        return self.user.email


class Gruero(CuentaBase):
    """
    Tow-truck driver profile.

    Verification and suspension are orthogonal flags, but only an
    APROBADO driver can be suspended (enforced by a check constraint).
    """

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='gruero',
        verbose_name="Usuario"
    )

    # Verification
    estado_verificacion = models.CharField(
        max_length=20,
        choices=EstadoVerificacion.choices,
        default=EstadoVerificacion.PENDIENTE,
        db_index=True,
        verbose_name="Estado de verificación"
    )
    motivo_rechazo = models.TextField(blank=True, verbose_name="Motivo de rechazo")
    verificado_at = models.DateTimeField(null=True, blank=True, verbose_name="Verificado el")

    # Vehicle
    patente = models.CharField(max_length=10, blank=True, verbose_name="Patente")
    tipos_vehiculos_atiende = models.TextField(
        blank=True,
        default='[]',
        verbose_name="Tipos de vehículo que atiende",
        help_text='Lista JSON, ej: ["AUTOMOVIL", "SUV"]'
    )

    # Banking snapshot source (copied into each Pago)
    banco = models.CharField(max_length=100, blank=True, verbose_name="Banco")
    tipo_cuenta = models.CharField(
        max_length=20,
        choices=TipoCuenta.choices,
        blank=True,
        verbose_name="Tipo de cuenta"
    )
    numero_cuenta = models.CharField(max_length=30, blank=True, verbose_name="Número de cuenta")
    nombre_titular = models.CharField(max_length=150, blank=True, verbose_name="Nombre del titular")
    rut_titular = models.CharField(max_length=12, blank=True, verbose_name="RUT del titular")

    # Document expiry
    licencia_vencimiento = models.DateField(null=True, blank=True, verbose_name="Vencimiento licencia")
    seguro_vencimiento = models.DateField(null=True, blank=True, verbose_name="Vencimiento seguro")
    revision_vencimiento = models.DateField(null=True, blank=True, verbose_name="Vencimiento revisión técnica")
    permiso_vencimiento = models.DateField(null=True, blank=True, verbose_name="Vencimiento permiso de circulación")

    DOCUMENTOS = (
        ('licencia_vencimiento', 'Licencia de Conducir'),
        ('seguro_vencimiento', 'Seguro'),
        ('revision_vencimiento', 'Revisión Técnica'),
        ('permiso_vencimiento', 'Permiso de Circulación'),
    )

    class Meta:
        verbose_name = "Gruero"
        verbose_name_plural = "Grueros"
        ordering = ['-created_at']
        constraints = [
            models.CheckConstraint(
                condition=Q(cuenta_suspendida=False) | Q(estado_verificacion='APROBADO'),
                name='gruero_suspension_requiere_aprobado',
            ),
        ]

    def __str__(self):
        return f"{self.nombre} ({self.estado_verificacion})"

    @property
    def tipos_vehiculos(self) -> frozenset:
        return parse_tipos_vehiculo(self.tipos_vehiculos_atiende)

    @property
    def puede_operar(self) -> bool:
        return self.estado_verificacion == EstadoVerificacion.APROBADO and not self.cuenta_suspendida

    def documentos_vencidos(self, hoy=None) -> list:
        """Labels of documents whose expiry date is strictly before `hoy`."""
        hoy = hoy or timezone.localdate()
        return [
            etiqueta
            for campo, etiqueta in self.DOCUMENTOS
            if getattr(self, campo) is not None and getattr(self, campo) < hoy
        ]

    def datos_bancarios(self) -> dict:
        return {
            'banco': self.banco,
            'tipo_cuenta': self.tipo_cuenta,
            'numero_cuenta': self.numero_cuenta,
            'nombre_titular': self.nombre_titular,
            'rut_titular': self.rut_titular,
        }


class Cliente(CuentaBase):
    """Client profile. Same suspension semantics as a driver, no verification."""

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='cliente',
        verbose_name="Usuario"
    )

    class Meta:
        verbose_name = "Cliente"
        verbose_name_plural = "Clientes"
        ordering = ['-created_at']

    def __str__(self):
        return self.nombre
