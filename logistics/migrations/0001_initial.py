import uuid

import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('core', '0001_initial'),
        ('finance', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Servicio',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('status', models.CharField(choices=[('SOLICITADO', 'Solicitado'), ('ACEPTADO', 'Aceptado'), ('EN_CAMINO', 'En camino'), ('EN_SITIO', 'En sitio'), ('COMPLETADO', 'Completado'), ('CANCELADO', 'Cancelado')], default='SOLICITADO', max_length=20, verbose_name='Estado')),
                ('tipo_vehiculo', models.CharField(choices=[('AUTOMOVIL', 'Automóvil'), ('SUV', 'SUV/Camioneta'), ('MOTO', 'Moto'), ('FURGON', 'Furgón'), ('CAMION_LIVIANO', 'Camión Liviano'), ('CAMION_MEDIANO', 'Camión Mediano'), ('CAMION_PESADO', 'Camión Pesado'), ('BUS', 'Bus'), ('MAQUINARIA', 'Maquinaria')], default='AUTOMOVIL', max_length=20, verbose_name='Tipo de vehículo')),
                ('origen_direccion', models.CharField(max_length=255, verbose_name='Dirección de origen')),
                ('destino_direccion', models.CharField(max_length=255, verbose_name='Dirección de destino')),
                ('distancia_km', models.FloatField(default=0, validators=[django.core.validators.MinValueValidator(0)], verbose_name='Distancia (km)')),
                ('total_cliente', models.PositiveIntegerField(blank=True, null=True, verbose_name='Total cliente (CLP)')),
                ('total_gruero', models.PositiveIntegerField(blank=True, null=True, verbose_name='Total gruero (CLP)')),
                ('comision_plataforma', models.IntegerField(blank=True, null=True, verbose_name='Comisión plataforma (CLP)')),
                ('pagado', models.BooleanField(default=False, verbose_name='Pagado al gruero')),
                ('solicitado_at', models.DateTimeField(default=django.utils.timezone.now, verbose_name='Solicitado el')),
                ('aceptado_at', models.DateTimeField(blank=True, null=True)),
                ('en_camino_at', models.DateTimeField(blank=True, null=True)),
                ('en_sitio_at', models.DateTimeField(blank=True, null=True)),
                ('completado_at', models.DateTimeField(blank=True, null=True, verbose_name='Completado el')),
                ('cancelado_at', models.DateTimeField(blank=True, null=True)),
                ('motivo_cancelacion', models.TextField(blank=True, verbose_name='Motivo de cancelación')),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('cliente', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='servicios', to='core.cliente', verbose_name='Cliente')),
                ('gruero', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='servicios', to='core.gruero', verbose_name='Gruero')),
                ('pago', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='servicios', to='finance.pago', verbose_name='Pago')),
            ],
            options={
                'verbose_name': 'Servicio',
                'verbose_name_plural': 'Servicios',
                'ordering': ['-solicitado_at'],
                'indexes': [
                    models.Index(fields=['status', 'completado_at'], name='servicio_status_completado_idx'),
                    models.Index(fields=['gruero', 'status', 'pagado'], name='servicio_gruero_pendiente_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(
                        condition=models.Q(
                            models.Q(('status', 'COMPLETADO'), _negated=True),
                            models.Q(
                                ('comision_plataforma', models.F('total_cliente') - models.F('total_gruero')),
                                ('comision_plataforma__isnull', False),
                                ('total_cliente__isnull', False),
                                ('total_gruero__isnull', False),
                            ),
                            _connector='OR',
                        ),
                        name='servicio_comision_consistente',
                    ),
                    models.CheckConstraint(
                        condition=models.Q(('pagado', False), ('status', 'COMPLETADO'), _connector='OR'),
                        name='servicio_pagado_requiere_completado',
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name='Calificacion',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('puntuacion', models.PositiveSmallIntegerField(validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(5)], verbose_name='Puntuación (1-5)')),
                ('comentario', models.TextField(blank=True, verbose_name='Comentario')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('servicio', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='calificacion', to='logistics.servicio', verbose_name='Servicio')),
                ('cliente', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='calificaciones', to='core.cliente', verbose_name='Cliente')),
                ('gruero', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='calificaciones', to='core.gruero', verbose_name='Gruero')),
            ],
            options={
                'verbose_name': 'Calificación',
                'verbose_name_plural': 'Calificaciones',
                'ordering': ['-created_at'],
                'constraints': [
                    models.CheckConstraint(
                        condition=models.Q(('puntuacion__gte', 1), ('puntuacion__lte', 5)),
                        name='calificacion_puntuacion_1_a_5',
                    ),
                ],
            },
        ),
    ]
