import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Gruero',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('telefono', models.CharField(blank=True, max_length=20, verbose_name='Teléfono')),
                ('cuenta_suspendida', models.BooleanField(default=False, verbose_name='Cuenta suspendida')),
                ('motivo_suspension', models.TextField(blank=True, verbose_name='Motivo de suspensión')),
                ('suspendida_at', models.DateTimeField(blank=True, null=True, verbose_name='Suspendida el')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('estado_verificacion', models.CharField(choices=[('PENDIENTE', 'Pendiente de Aprobación'), ('APROBADO', 'Aprobado'), ('RECHAZADO', 'Rechazado')], db_index=True, default='PENDIENTE', max_length=20, verbose_name='Estado de verificación')),
                ('motivo_rechazo', models.TextField(blank=True, verbose_name='Motivo de rechazo')),
                ('verificado_at', models.DateTimeField(blank=True, null=True, verbose_name='Verificado el')),
                ('patente', models.CharField(blank=True, max_length=10, verbose_name='Patente')),
                ('tipos_vehiculos_atiende', models.TextField(blank=True, default='[]', help_text='Lista JSON, ej: ["AUTOMOVIL", "SUV"]', verbose_name='Tipos de vehículo que atiende')),
                ('banco', models.CharField(blank=True, max_length=100, verbose_name='Banco')),
                ('tipo_cuenta', models.CharField(blank=True, choices=[('CORRIENTE', 'Cuenta Corriente'), ('VISTA', 'Cuenta Vista / RUT'), ('AHORRO', 'Cuenta de Ahorro')], max_length=20, verbose_name='Tipo de cuenta')),
                ('numero_cuenta', models.CharField(blank=True, max_length=30, verbose_name='Número de cuenta')),
                ('nombre_titular', models.CharField(blank=True, max_length=150, verbose_name='Nombre del titular')),
                ('rut_titular', models.CharField(blank=True, max_length=12, verbose_name='RUT del titular')),
                ('licencia_vencimiento', models.DateField(blank=True, null=True, verbose_name='Vencimiento licencia')),
                ('seguro_vencimiento', models.DateField(blank=True, null=True, verbose_name='Vencimiento seguro')),
                ('revision_vencimiento', models.DateField(blank=True, null=True, verbose_name='Vencimiento revisión técnica')),
                ('permiso_vencimiento', models.DateField(blank=True, null=True, verbose_name='Vencimiento permiso de circulación')),
                ('user', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='gruero', to=settings.AUTH_USER_MODEL, verbose_name='Usuario')),
            ],
            options={
                'verbose_name': 'Gruero',
                'verbose_name_plural': 'Grueros',
                'ordering': ['-created_at'],
                'constraints': [
                    models.CheckConstraint(
                        condition=models.Q(('cuenta_suspendida', False), ('estado_verificacion', 'APROBADO'), _connector='OR'),
                        name='gruero_suspension_requiere_aprobado',
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name='Cliente',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('telefono', models.CharField(blank=True, max_length=20, verbose_name='Teléfono')),
                ('cuenta_suspendida', models.BooleanField(default=False, verbose_name='Cuenta suspendida')),
                ('motivo_suspension', models.TextField(blank=True, verbose_name='Motivo de suspensión')),
                ('suspendida_at', models.DateTimeField(blank=True, null=True, verbose_name='Suspendida el')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='cliente', to=settings.AUTH_USER_MODEL, verbose_name='Usuario')),
            ],
            options={
                'verbose_name': 'Cliente',
                'verbose_name_plural': 'Clientes',
                'ordering': ['-created_at'],
            },
        ),
    ]
