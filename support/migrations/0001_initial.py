import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('logistics', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Reclamo',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('reportado_por', models.CharField(choices=[('CLIENTE', 'Cliente'), ('GRUERO', 'Gruero')], max_length=10, verbose_name='Reportado por')),
                ('tipo', models.CharField(choices=[('PROBLEMA_SERVICIO', 'Problema con el servicio'), ('PROBLEMA_PAGO', 'Problema con el pago'), ('MALTRATO', 'Maltrato'), ('OTRO', 'Otro')], max_length=20, verbose_name='Tipo')),
                ('descripcion', models.TextField(verbose_name='Descripción')),
                ('prioridad', models.CharField(choices=[('BAJA', 'Baja'), ('MEDIA', 'Media'), ('ALTA', 'Alta')], default='MEDIA', max_length=10, verbose_name='Prioridad')),
                ('estado', models.CharField(choices=[('PENDIENTE', 'Pendiente'), ('EN_REVISION', 'En revisión'), ('RESUELTO', 'Resuelto'), ('RECHAZADO', 'Rechazado')], db_index=True, default='PENDIENTE', max_length=20, verbose_name='Estado')),
                ('resolucion', models.TextField(blank=True, verbose_name='Resolución')),
                ('resuelto_at', models.DateTimeField(blank=True, null=True)),
                ('notas_internas', models.TextField(blank=True, verbose_name='Notas internas')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('servicio', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='reclamos', to='logistics.servicio', verbose_name='Servicio')),
                ('reportador', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='reclamos_creados', to=settings.AUTH_USER_MODEL, verbose_name='Usuario que reporta')),
                ('resuelto_por', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='reclamos_resueltos', to=settings.AUTH_USER_MODEL, verbose_name='Resuelto por')),
            ],
            options={
                'verbose_name': 'Reclamo',
                'verbose_name_plural': 'Reclamos',
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['estado', 'prioridad'], name='reclamo_estado_prioridad_idx')],
            },
        ),
    ]
