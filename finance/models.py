"""
FINANCE App - Driver Payout Ledger for GRUAPP

Handles: Pagos (weekly driver payouts, append-only)
"""

import uuid

from django.conf import settings
from django.db import models

from core.exceptions import ImmutableRecordError


class MetodoPago(models.TextChoices):
    """How the payout was sent to the driver."""
    TRANSFERENCIA = 'TRANSFERENCIA', 'Transferencia bancaria'
    EFECTIVO = 'EFECTIVO', 'Efectivo'


class Pago(models.Model):
    """
    Payout record for one driver and one settlement window.

    Rows are append-only: once inserted they can be neither updated nor
    deleted. The driver FK may become null when the account is deleted;
    servicio_ids and the banking snapshot keep the record self-contained.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    gruero = models.ForeignKey(
        'core.Gruero',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='pagos',
        verbose_name="Gruero"
    )

    # Settlement window [fecha_inicio, fecha_fin)
    periodo = models.CharField(max_length=30, verbose_name="Período")
    fecha_inicio = models.DateTimeField(verbose_name="Inicio del período")
    fecha_fin = models.DateTimeField(verbose_name="Fin del período")

    # Amounts (CLP)
    servicio_ids = models.JSONField(default=list, verbose_name="Servicios incluidos")
    total_servicios = models.PositiveIntegerField(verbose_name="Cantidad de servicios")
    monto_total = models.PositiveBigIntegerField(verbose_name="Monto total (CLP)")

    # Payment proof
    metodo_pago = models.CharField(
        max_length=20,
        choices=MetodoPago.choices,
        default=MetodoPago.TRANSFERENCIA,
        verbose_name="Método de pago"
    )
    numero_comprobante = models.CharField(max_length=100, verbose_name="Número de comprobante")
    notas_admin = models.TextField(blank=True, verbose_name="Notas del administrador")

    # Banking snapshot at payout time
    banco = models.CharField(max_length=100, blank=True, verbose_name="Banco")
    tipo_cuenta = models.CharField(max_length=20, blank=True, verbose_name="Tipo de cuenta")
    numero_cuenta = models.CharField(max_length=30, blank=True, verbose_name="Número de cuenta")
    nombre_titular = models.CharField(max_length=150, blank=True, verbose_name="Nombre del titular")
    rut_titular = models.CharField(max_length=12, blank=True, verbose_name="RUT del titular")

    pagado_por = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='pagos_registrados',
        verbose_name="Registrado por"
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Pago"
        verbose_name_plural = "Pagos"
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['gruero', 'created_at'], name='pago_gruero_created_idx'),
        ]

    def __str__(self):
        return f"Pago {self.periodo} | {self.monto_total} CLP | {self.total_servicios} servicios"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ImmutableRecordError(pago_id=str(self.pk))
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ImmutableRecordError(pago_id=str(self.pk))
