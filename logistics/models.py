"""
LOGISTICS App - Tow Services for GRUAPP

Handles: Servicios (tow requests and their lifecycle), Calificaciones
"""

import uuid

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.db.models import F, Q
from django.utils import timezone

from core.models import TipoVehiculo


class ServicioStatus(models.TextChoices):
    """Service status enumeration."""
    SOLICITADO = 'SOLICITADO', 'Solicitado'
    ACEPTADO = 'ACEPTADO', 'Aceptado'
    EN_CAMINO = 'EN_CAMINO', 'En camino'
    EN_SITIO = 'EN_SITIO', 'En sitio'
    COMPLETADO = 'COMPLETADO', 'Completado'
    CANCELADO = 'CANCELADO', 'Cancelado'


ESTADOS_TERMINALES = frozenset({ServicioStatus.COMPLETADO, ServicioStatus.CANCELADO})


class Servicio(models.Model):
    """
    A tow request, from solicitation to completion or cancellation.

    Amounts are whole CLP. They stay null until the service is completed;
    comision_plataforma is always total_cliente - total_gruero.
    A completed service is settled at most once (pagado + pago).
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    # Actors
    cliente = models.ForeignKey(
        'core.Cliente',
        on_delete=models.PROTECT,
        related_name='servicios',
        verbose_name="Cliente"
    )
    gruero = models.ForeignKey(
        'core.Gruero',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='servicios',
        verbose_name="Gruero"
    )

    # Status
    status = models.CharField(
        max_length=20,
        choices=ServicioStatus.choices,
        default=ServicioStatus.SOLICITADO,
        verbose_name="Estado"
    )

    # Trip
    tipo_vehiculo = models.CharField(
        max_length=20,
        choices=TipoVehiculo.choices,
        default=TipoVehiculo.AUTOMOVIL,
        verbose_name="Tipo de vehículo"
    )
    origen_direccion = models.CharField(max_length=255, verbose_name="Dirección de origen")
    destino_direccion = models.CharField(max_length=255, verbose_name="Dirección de destino")
    distancia_km = models.FloatField(
        default=0,
        validators=[MinValueValidator(0)],
        verbose_name="Distancia (km)"
    )

    # Money (CLP)
    total_cliente = models.PositiveIntegerField(null=True, blank=True, verbose_name="Total cliente (CLP)")
    total_gruero = models.PositiveIntegerField(null=True, blank=True, verbose_name="Total gruero (CLP)")
    comision_plataforma = models.IntegerField(null=True, blank=True, verbose_name="Comisión plataforma (CLP)")

    # Settlement
    pagado = models.BooleanField(default=False, verbose_name="Pagado al gruero")
    pago = models.ForeignKey(
        'finance.Pago',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='servicios',
        verbose_name="Pago"
    )

    # Timeline
    solicitado_at = models.DateTimeField(default=timezone.now, verbose_name="Solicitado el")
    aceptado_at = models.DateTimeField(null=True, blank=True)
    en_camino_at = models.DateTimeField(null=True, blank=True)
    en_sitio_at = models.DateTimeField(null=True, blank=True)
    completado_at = models.DateTimeField(null=True, blank=True, verbose_name="Completado el")
    cancelado_at = models.DateTimeField(null=True, blank=True)
    motivo_cancelacion = models.TextField(blank=True, verbose_name="Motivo de cancelación")

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Servicio"
        verbose_name_plural = "Servicios"
        ordering = ['-solicitado_at']
        indexes = [
            models.Index(fields=['status', 'completado_at'], name='servicio_status_completado_idx'),
            models.Index(fields=['gruero', 'status', 'pagado'], name='servicio_gruero_pendiente_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=(
                    ~Q(status='COMPLETADO')
                    | Q(
                        total_cliente__isnull=False,
                        total_gruero__isnull=False,
                        comision_plataforma__isnull=False,
                        comision_plataforma=F('total_cliente') - F('total_gruero'),
                    )
                ),
                name='servicio_comision_consistente',
            ),
            models.CheckConstraint(
                condition=Q(pagado=False) | Q(status='COMPLETADO'),
                name='servicio_pagado_requiere_completado',
            ),
        ]

    def __str__(self):
        return f"Servicio {str(self.id)[:8]} - {self.status}"

    @property
    def es_terminal(self) -> bool:
        return self.status in ESTADOS_TERMINALES


class Calificacion(models.Model):
    """
    Client rating of a completed service.

    Created by the client app; removed here only when an account is deleted.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    servicio = models.OneToOneField(
        Servicio,
        on_delete=models.CASCADE,
        related_name='calificacion',
        verbose_name="Servicio"
    )
    cliente = models.ForeignKey(
        'core.Cliente',
        on_delete=models.CASCADE,
        related_name='calificaciones',
        verbose_name="Cliente"
    )
    gruero = models.ForeignKey(
        'core.Gruero',
        on_delete=models.CASCADE,
        related_name='calificaciones',
        verbose_name="Gruero"
    )
    puntuacion = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(5)],
        verbose_name="Puntuación (1-5)"
    )
    comentario = models.TextField(blank=True, verbose_name="Comentario")

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Calificación"
        verbose_name_plural = "Calificaciones"
        ordering = ['-created_at']
        constraints = [
            models.CheckConstraint(
                condition=Q(puntuacion__gte=1, puntuacion__lte=5),
                name='calificacion_puntuacion_1_a_5',
            ),
        ]

    def __str__(self):
        return f"{self.puntuacion}★ - {self.gruero}"
