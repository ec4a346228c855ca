import uuid
from django.db import models
from django.conf import settings


class ReclamoEstado(models.TextChoices):
    PENDIENTE = 'PENDIENTE', 'Pendiente'
    EN_REVISION = 'EN_REVISION', 'En revisión'
    RESUELTO = 'RESUELTO', 'Resuelto'
    RECHAZADO = 'RECHAZADO', 'Rechazado'


class ReclamoTipo(models.TextChoices):
    PROBLEMA_SERVICIO = 'PROBLEMA_SERVICIO', 'Problema con el servicio'
    PROBLEMA_PAGO = 'PROBLEMA_PAGO', 'Problema con el pago'
    MALTRATO = 'MALTRATO', 'Maltrato'
    OTRO = 'OTRO', 'Otro'


class ReclamoPrioridad(models.TextChoices):
    BAJA = 'BAJA', 'Baja'
    MEDIA = 'MEDIA', 'Media'
    ALTA = 'ALTA', 'Alta'


class ReportadoPor(models.TextChoices):
    CLIENTE = 'CLIENTE', 'Cliente'
    GRUERO = 'GRUERO', 'Gruero'


class Reclamo(models.Model):
    """
    Complaint filed by a client or a driver about a service.

    RESUELTO and RECHAZADO are terminal; afterwards only notas_internas changes.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    servicio = models.ForeignKey(
        'logistics.Servicio',
        on_delete=models.CASCADE,
        related_name='reclamos',
        verbose_name="Servicio"
    )
    reportado_por = models.CharField(
        max_length=10,
        choices=ReportadoPor.choices,
        verbose_name="Reportado por"
    )
    reportador = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='reclamos_creados',
        verbose_name="Usuario que reporta"
    )

    tipo = models.CharField(
        max_length=20,
        choices=ReclamoTipo.choices,
        verbose_name="Tipo"
    )
    descripcion = models.TextField(verbose_name="Descripción")
    prioridad = models.CharField(
        max_length=10,
        choices=ReclamoPrioridad.choices,
        default=ReclamoPrioridad.MEDIA,
        verbose_name="Prioridad"
    )
    estado = models.CharField(
        max_length=20,
        choices=ReclamoEstado.choices,
        default=ReclamoEstado.PENDIENTE,
        db_index=True,
        verbose_name="Estado"
    )

    # Resolution
    resolucion = models.TextField(blank=True, verbose_name="Resolución")
    resuelto_por = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='reclamos_resueltos',
        verbose_name="Resuelto por"
    )
    resuelto_at = models.DateTimeField(null=True, blank=True)
    notas_internas = models.TextField(blank=True, verbose_name="Notas internas")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Reclamo"
        verbose_name_plural = "Reclamos"
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['estado', 'prioridad'], name='reclamo_estado_prioridad_idx'),
        ]

    def __str__(self):
        return f"Reclamo {str(self.id)[:8]} - {self.get_tipo_display()}"
