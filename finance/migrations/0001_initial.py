import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('core', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Pago',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('periodo', models.CharField(max_length=30, verbose_name='Período')),
                ('fecha_inicio', models.DateTimeField(verbose_name='Inicio del período')),
                ('fecha_fin', models.DateTimeField(verbose_name='Fin del período')),
                ('servicio_ids', models.JSONField(default=list, verbose_name='Servicios incluidos')),
                ('total_servicios', models.PositiveIntegerField(verbose_name='Cantidad de servicios')),
                ('monto_total', models.PositiveBigIntegerField(verbose_name='Monto total (CLP)')),
                ('metodo_pago', models.CharField(choices=[('TRANSFERENCIA', 'Transferencia bancaria'), ('EFECTIVO', 'Efectivo')], default='TRANSFERENCIA', max_length=20, verbose_name='Método de pago')),
                ('numero_comprobante', models.CharField(max_length=100, verbose_name='Número de comprobante')),
                ('notas_admin', models.TextField(blank=True, verbose_name='Notas del administrador')),
                ('banco', models.CharField(blank=True, max_length=100, verbose_name='Banco')),
                ('tipo_cuenta', models.CharField(blank=True, max_length=20, verbose_name='Tipo de cuenta')),
                ('numero_cuenta', models.CharField(blank=True, max_length=30, verbose_name='Número de cuenta')),
                ('nombre_titular', models.CharField(blank=True, max_length=150, verbose_name='Nombre del titular')),
                ('rut_titular', models.CharField(blank=True, max_length=12, verbose_name='RUT del titular')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('gruero', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='pagos', to='core.gruero', verbose_name='Gruero')),
                ('pagado_por', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='pagos_registrados', to=settings.AUTH_USER_MODEL, verbose_name='Registrado por')),
            ],
            options={
                'verbose_name': 'Pago',
                'verbose_name_plural': 'Pagos',
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['gruero', 'created_at'], name='pago_gruero_created_idx')],
            },
        ),
    ]
