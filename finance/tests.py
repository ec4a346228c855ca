"""
GRUAPP Finance Tests
====================

Tests for:
1. PeriodoLiquidacion (ISO weeks, explicit windows)
2. Settlement batcher (grouping, sorting, half-open bounds)
3. PayoutService.registrar_pago (exactly-once, atomicity, concurrent calls on PostgreSQL)
4. Pago immutability
5. Payout API
"""

import threading
from datetime import datetime, timedelta
from unittest import mock, skipUnless

from django.db import connection
from django.test import TestCase, TransactionTestCase
from django.utils import timezone
from rest_framework.test import APIClient

from core.exceptions import (
    ConflictError,
    ImmutableRecordError,
    NotFoundError,
    ValidationError,
)
from finance.models import MetodoPago, Pago
from finance.services import PayoutService
from finance.settlement import PeriodoLiquidacion, calcular_liquidacion, servicios_pendientes
from gruapp_core.testing import (
    crear_admin,
    crear_cliente,
    crear_gruero,
    crear_servicio,
    crear_servicio_completado,
    crear_usuario,
)
from logistics.models import Servicio


def local(*args):
    return timezone.make_aware(datetime(*args))


# Monday 13 to Monday 20 January 2025, America/Santiago
SEMANA = '2025-W03'
MIERCOLES = local(2025, 1, 15, 14, 30)


class TestPeriodoLiquidacion(TestCase):

    def test_semana_iso_bounds(self):
        periodo = PeriodoLiquidacion.semana_iso(SEMANA)

        self.assertEqual(periodo.inicio, local(2025, 1, 13))
        self.assertEqual(periodo.fin, local(2025, 1, 20))
        self.assertEqual(periodo.etiqueta, SEMANA)

    def test_semana_actual_starts_on_monday(self):
        periodo = PeriodoLiquidacion.semana_actual(ahora=MIERCOLES)
        self.assertEqual(periodo, PeriodoLiquidacion.semana_iso(SEMANA))

    def test_semana_actual_on_monday_midnight(self):
        periodo = PeriodoLiquidacion.semana_actual(ahora=local(2025, 1, 13))
        self.assertEqual(periodo.inicio, local(2025, 1, 13))

    def test_semana_actual_on_sunday_night(self):
        periodo = PeriodoLiquidacion.semana_actual(ahora=local(2025, 1, 19, 23, 59))
        self.assertEqual(periodo.etiqueta, SEMANA)

    def test_invalid_week_labels(self):
        for etiqueta in ['2025-3', '2025-W3', 'semana', '2025-W54', '']:
            with self.assertRaises(ValidationError):
                PeriodoLiquidacion.semana_iso(etiqueta)

    def test_inicio_must_precede_fin(self):
        with self.assertRaises(ValidationError):
            PeriodoLiquidacion(local(2025, 1, 20), local(2025, 1, 13))
        with self.assertRaises(ValidationError):
            PeriodoLiquidacion(local(2025, 1, 13), local(2025, 1, 13))

    def test_desde_parametros(self):
        self.assertEqual(
            PeriodoLiquidacion.desde_parametros({'periodo': SEMANA}).etiqueta,
            SEMANA
        )

        periodo = PeriodoLiquidacion.desde_parametros({'inicio': '2025-01-01', 'fin': '2025-01-15'})
        self.assertEqual(periodo.inicio, local(2025, 1, 1))
        self.assertEqual(periodo.etiqueta, '2025-01-01/2025-01-15')

    def test_desde_parametros_requires_both_bounds(self):
        with self.assertRaises(ValidationError):
            PeriodoLiquidacion.desde_parametros({'inicio': '2025-01-01'})
        with self.assertRaises(ValidationError):
            PeriodoLiquidacion.desde_parametros({'inicio': 'ayer', 'fin': '2025-01-15'})

    def test_desde_parametros_defaults_to_current_week(self):
        self.assertEqual(
            PeriodoLiquidacion.desde_parametros({}),
            PeriodoLiquidacion.semana_actual()
        )


class TestSettlementBatcher(TestCase):
    """Tests for calcular_liquidacion."""

    def setUp(self):
        self.periodo = PeriodoLiquidacion.semana_iso(SEMANA)
        self.cliente = crear_cliente()
        self.gruero = crear_gruero()

    def _completado(self, monto, gruero=None, cuando=MIERCOLES):
        return crear_servicio_completado(self.cliente, gruero or self.gruero, monto, completado_at=cuando)

    def test_scenario_a_single_driver_group(self):
        for monto in (38500, 25000, 40000):
            self._completado(monto)

        propuesta = calcular_liquidacion(self.periodo)

        self.assertEqual(propuesta.total_grueros, 1)
        grupo = propuesta.grupos[0]
        self.assertEqual(grupo.gruero, self.gruero)
        self.assertEqual(grupo.monto_total, 103500)
        self.assertEqual(grupo.total_servicios, 3)
        self.assertEqual(propuesta.monto_total_general, 103500)

    def test_scenario_c_cancelled_services_never_qualify(self):
        crear_servicio(
            self.cliente,
            self.gruero,
            status='CANCELADO',
            motivo_cancelacion='cliente no se presentó',
            cancelado_at=MIERCOLES,
        )

        propuesta = calcular_liquidacion(self.periodo)

        self.assertEqual(propuesta.grupos, [])
        self.assertEqual(propuesta.monto_total_general, 0)

    def test_window_is_half_open(self):
        dentro = self._completado(10000, cuando=self.periodo.inicio)
        self._completado(20000, cuando=self.periodo.fin)
        self._completado(30000, cuando=self.periodo.inicio - timedelta(seconds=1))

        propuesta = calcular_liquidacion(self.periodo)

        self.assertEqual([s.id for s in propuesta.grupos[0].servicios], [str(dentro.id)])

    def test_paid_and_unfinished_services_are_excluded(self):
        self._completado(10000)
        crear_servicio(self.cliente, self.gruero, status='EN_SITIO')
        PayoutService.registrar_pago(self.gruero, self.periodo, numero_comprobante='TRX-1')
        self._completado(5000)

        propuesta = calcular_liquidacion(self.periodo)

        self.assertEqual(propuesta.grupos[0].monto_total, 5000)

    def test_groups_sorted_by_amount_then_driver_id(self):
        otro = crear_gruero(nombre='Ana')
        tercero = crear_gruero(nombre='Luis')
        self._completado(20000, gruero=otro)
        self._completado(20000, gruero=tercero)
        self._completado(50000)

        propuesta = calcular_liquidacion(self.periodo)

        self.assertEqual(propuesta.grupos[0].gruero, self.gruero)
        empatados = [str(g.gruero.pk) for g in propuesta.grupos[1:]]
        self.assertEqual(empatados, sorted(empatados))

    def test_no_empty_groups_and_totals_add_up(self):
        crear_gruero(nombre='Sin servicios')
        otro = crear_gruero(nombre='Ana')
        self._completado(12000)
        self._completado(8000, gruero=otro)
        self._completado(9000, gruero=otro)

        propuesta = calcular_liquidacion(self.periodo)

        self.assertEqual(propuesta.total_grueros, 2)
        self.assertTrue(all(g.total_servicios > 0 for g in propuesta.grupos))
        self.assertEqual(
            sum(g.monto_total for g in propuesta.grupos),
            propuesta.monto_total_general
        )

    def test_service_lines_carry_trip_details(self):
        servicio = self._completado(15000)

        linea = calcular_liquidacion(self.periodo).grupos[0].servicios[0]

        self.assertEqual(linea.id, str(servicio.id))
        self.assertEqual(linea.monto, 15000)
        self.assertEqual(linea.origen, servicio.origen_direccion)
        self.assertEqual(linea.cliente_nombre, self.cliente.nombre)


class TestRegistrarPago(TestCase):
    """Tests for PayoutService.registrar_pago."""

    def setUp(self):
        self.periodo = PeriodoLiquidacion.semana_iso(SEMANA)
        self.admin = crear_admin()
        self.cliente = crear_cliente()
        self.gruero = crear_gruero()
        self.servicios = [
            crear_servicio_completado(self.cliente, self.gruero, monto, completado_at=MIERCOLES)
            for monto in (38500, 25000, 40000)
        ]

    def _pagar(self, **kwargs):
        kwargs.setdefault('numero_comprobante', 'TRX-2025-0001')
        kwargs.setdefault('admin_user', self.admin)
        return PayoutService.registrar_pago(self.gruero, self.periodo, **kwargs)

    def test_scenario_a_payout_marks_all_services(self):
        pago = self._pagar(notas_admin='Semana 3')

        self.assertEqual(pago.monto_total, 103500)
        self.assertEqual(pago.total_servicios, 3)
        self.assertEqual(pago.periodo, SEMANA)
        self.assertEqual(pago.metodo_pago, MetodoPago.TRANSFERENCIA)
        self.assertEqual(pago.pagado_por, self.admin)
        self.assertEqual(
            sorted(pago.servicio_ids),
            sorted(str(s.id) for s in self.servicios)
        )
        for servicio in self.servicios:
            servicio.refresh_from_db()
            self.assertTrue(servicio.pagado)
            self.assertEqual(servicio.pago, pago)

    def test_banking_snapshot_is_copied(self):
        pago = self._pagar()

        self.gruero.numero_cuenta = '99999999'
        self.gruero.save()
        pago.refresh_from_db()

        self.assertEqual(pago.numero_cuenta, '12345678')
        self.assertEqual(pago.banco, 'Banco Estado')
        self.assertEqual(pago.rut_titular, '12345678-9')

    def test_scenario_b_second_payout_is_refused(self):
        self._pagar()

        with self.assertRaises(ConflictError) as ctx:
            self._pagar(numero_comprobante='TRX-2025-0002')

        self.assertEqual(ctx.exception.message, "No hay servicios pendientes para este gruero")
        self.assertEqual(Pago.objects.count(), 1)

    def test_accepts_driver_id(self):
        pago = PayoutService.registrar_pago(self.gruero.pk, self.periodo, numero_comprobante='X-1')
        self.assertEqual(pago.gruero, self.gruero)

    def test_empty_comprobante_is_rejected(self):
        for comprobante in ['', '   ', None]:
            with self.assertRaises(ValidationError):
                self._pagar(numero_comprobante=comprobante)

        self.assertEqual(Pago.objects.count(), 0)
        self.assertFalse(Servicio.objects.filter(pagado=True).exists())

    def test_unknown_method_is_rejected(self):
        with self.assertRaises(ValidationError):
            self._pagar(metodo_pago='CHEQUE')

    def test_cash_method(self):
        pago = self._pagar(metodo_pago=MetodoPago.EFECTIVO)
        self.assertEqual(pago.metodo_pago, 'EFECTIVO')

    def test_unknown_driver(self):
        with self.assertRaises(NotFoundError):
            PayoutService.registrar_pago(
                '00000000-0000-0000-0000-000000000000',
                self.periodo,
                numero_comprobante='X-1'
            )

    def test_only_touches_the_driver_and_period(self):
        otro = crear_gruero(nombre='Ana')
        ajeno = crear_servicio_completado(self.cliente, otro, 30000, completado_at=MIERCOLES)
        anterior = crear_servicio_completado(
            self.cliente, self.gruero, 30000, completado_at=MIERCOLES - timedelta(weeks=1)
        )

        self._pagar()

        ajeno.refresh_from_db()
        anterior.refresh_from_db()
        self.assertFalse(ajeno.pagado)
        self.assertFalse(anterior.pagado)

    def test_failure_leaves_no_partial_effect(self):
        with mock.patch('finance.services.logger') as logger:
            logger.info.side_effect = RuntimeError('disk full')
            with self.assertRaises(RuntimeError):
                self._pagar()

        self.assertEqual(Pago.objects.count(), 0)
        self.assertFalse(Servicio.objects.filter(pagado=True).exists())

    def test_stale_selection_rolls_back(self):
        otro = crear_gruero(nombre='Ana')
        ya_pagado = crear_servicio_completado(self.cliente, otro, 1000, completado_at=MIERCOLES)
        PayoutService.registrar_pago(otro, self.periodo, numero_comprobante='PREV')

        incluidos = [self.servicios[0].pk, ya_pagado.pk]
        with mock.patch(
            'finance.services.servicios_pendientes',
            return_value=Servicio.objects.filter(pk__in=incluidos),
        ):
            with self.assertRaises(ConflictError):
                self._pagar()

        self.assertEqual(Pago.objects.count(), 1)
        self.servicios[0].refresh_from_db()
        self.assertFalse(self.servicios[0].pagado)

    def test_pending_selection_is_empty_after_payout(self):
        self._pagar()
        self.assertFalse(servicios_pendientes(self.periodo, gruero=self.gruero).exists())


@skipUnless(connection.vendor == 'postgresql', "Row locks need PostgreSQL (TEST_DB_ENGINE=postgresql)")
class TestConcurrentPayouts(TransactionTestCase):
    """Two admins recording the same payout at once on separate connections."""

    def setUp(self):
        self.periodo = PeriodoLiquidacion.semana_iso(SEMANA)
        cliente = crear_cliente()
        self.gruero = crear_gruero()
        for monto in (38500, 25000):
            crear_servicio_completado(cliente, self.gruero, monto, completado_at=MIERCOLES)

    def test_parallel_payouts_settle_once(self):
        barrera = threading.Barrier(2)
        resultados = []

        def pagar(comprobante):
            try:
                barrera.wait()
                PayoutService.registrar_pago(self.gruero.pk, self.periodo, numero_comprobante=comprobante)
                resultados.append('pagado')
            except ConflictError:
                resultados.append('conflicto')
            finally:
                connection.close()

        hilos = [threading.Thread(target=pagar, args=(f'TRX-{n}',)) for n in (1, 2)]
        for hilo in hilos:
            hilo.start()
        for hilo in hilos:
            hilo.join(timeout=30)

        self.assertEqual(sorted(resultados), ['conflicto', 'pagado'])
        pago = Pago.objects.get()
        self.assertEqual(pago.monto_total, 63500)
        self.assertEqual(Servicio.objects.filter(pago=pago).count(), 2)


class TestPagoImmutability(TestCase):

    def setUp(self):
        cliente = crear_cliente()
        self.gruero = crear_gruero()
        crear_servicio_completado(cliente, self.gruero, 20000, completado_at=MIERCOLES)
        self.pago = PayoutService.registrar_pago(
            self.gruero,
            PeriodoLiquidacion.semana_iso(SEMANA),
            numero_comprobante='TRX-9'
        )

    def test_update_is_refused(self):
        self.pago.notas_admin = 'corregido'
        with self.assertRaises(ImmutableRecordError):
            self.pago.save()

        self.pago.refresh_from_db()
        self.assertEqual(self.pago.notas_admin, '')

    def test_delete_is_refused(self):
        with self.assertRaises(ImmutableRecordError):
            self.pago.delete()
        self.assertTrue(Pago.objects.filter(pk=self.pago.pk).exists())

    def test_immutable_error_is_a_conflict(self):
        self.assertTrue(issubclass(ImmutableRecordError, ConflictError))
        self.assertEqual(ImmutableRecordError.status_code, 409)


class TestPayoutReads(TestCase):
    """Tests for historial and resumen_gruero."""

    def setUp(self):
        self.periodo = PeriodoLiquidacion.semana_iso(SEMANA)
        self.cliente = crear_cliente()
        self.gruero = crear_gruero()
        crear_servicio_completado(self.cliente, self.gruero, 40000, completado_at=MIERCOLES)
        self.pago = PayoutService.registrar_pago(self.gruero, self.periodo, numero_comprobante='A-1')
        crear_servicio_completado(self.cliente, self.gruero, 15000, completado_at=MIERCOLES)
        crear_servicio(self.cliente, self.gruero, status='EN_CAMINO')

    def test_resumen_gruero(self):
        resumen = PayoutService.resumen_gruero(self.gruero)

        self.assertEqual(resumen['total_pendiente'], 15000)
        self.assertEqual(resumen['servicios_pendientes'], 1)
        self.assertEqual(resumen['total_recibido'], 40000)
        self.assertEqual(resumen['total_servicios_completados'], 2)
        self.assertEqual(resumen['pagos_recibidos'], [self.pago])

    def test_historial_filters_by_driver(self):
        otro = crear_gruero(nombre='Ana')
        crear_servicio_completado(self.cliente, otro, 7000, completado_at=MIERCOLES)
        PayoutService.registrar_pago(otro, self.periodo, numero_comprobante='B-1')

        resultado = PayoutService.historial(gruero_id=self.gruero.pk)

        self.assertEqual(resultado['total_pagos'], 1)
        self.assertEqual(resultado['monto_total'], 40000)
        self.assertEqual(PayoutService.historial()['monto_total'], 47000)


class TestPayoutAPI(TestCase):
    """Tests for /api/admin/pagos/ and /api/gruero/pagos/."""

    def setUp(self):
        self.api = APIClient()
        self.admin = crear_admin()
        self.api.force_authenticate(user=self.admin)
        self.cliente = crear_cliente()
        self.gruero = crear_gruero()
        for monto in (38500, 25000, 40000):
            crear_servicio_completado(self.cliente, self.gruero, monto, completado_at=MIERCOLES)

    def _marcar(self, **extra):
        body = {
            'grueroId': str(self.gruero.id),
            'metodoPago': 'TRANSFERENCIA',
            'numeroComprobante': 'TRX-77',
            'notasAdmin': '',
            'periodo': SEMANA,
        }
        body.update(extra)
        return self.api.post('/api/admin/pagos/marcar-pagado/', body, format='json')

    def test_pendientes_shape(self):
        response = self.api.get('/api/admin/pagos/pendientes/', {'periodo': SEMANA})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['periodo'], SEMANA)
        self.assertEqual(response.data['totalGrueros'], 1)
        self.assertEqual(response.data['montoTotalGeneral'], 103500)
        grupo = response.data['grueros'][0]
        self.assertEqual(grupo['grueroId'], str(self.gruero.id))
        self.assertEqual(grupo['montoTotal'], 103500)
        self.assertEqual(grupo['totalServicios'], 3)
        self.assertEqual(grupo['numeroCuenta'], '12345678')
        self.assertEqual(len(grupo['servicios']), 3)

    def test_pendientes_bad_period(self):
        response = self.api.get('/api/admin/pagos/pendientes/', {'periodo': '2025-13'})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['code'], 'VALIDATION_ERROR')

    def test_marcar_pagado_then_conflict(self):
        response = self._marcar()

        self.assertEqual(response.status_code, 201)
        self.assertTrue(response.data['success'])
        self.assertEqual(response.data['serviciosActualizados'], 3)
        self.assertEqual(response.data['pago']['montoTotal'], 103500)

        response = self._marcar(numeroComprobante='TRX-78')

        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.data['message'], "No hay servicios pendientes para este gruero")
        self.assertEqual(Pago.objects.count(), 1)

    def test_marcar_pagado_requires_comprobante(self):
        response = self._marcar(numeroComprobante='  ')

        self.assertEqual(response.status_code, 400)
        self.assertEqual(Pago.objects.count(), 0)

    def test_marcar_pagado_unknown_driver(self):
        response = self._marcar(grueroId='00000000-0000-0000-0000-000000000000')
        self.assertEqual(response.status_code, 404)

    def test_historial(self):
        self._marcar()
        response = self.api.get('/api/admin/pagos/historial/', {'grueroId': str(self.gruero.id)})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['totalPagos'], 1)
        self.assertEqual(response.data['montoTotal'], 103500)

    def test_admin_routes_require_staff(self):
        self.api.force_authenticate(user=self.gruero.user)
        response = self.api.get('/api/admin/pagos/pendientes/')
        self.assertEqual(response.status_code, 403)

    def test_gruero_resumen(self):
        self._marcar()
        crear_servicio_completado(self.cliente, self.gruero, 12000)

        self.api.force_authenticate(user=self.gruero.user)
        response = self.api.get('/api/gruero/pagos/resumen/')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['totalPendiente'], 12000)
        self.assertEqual(response.data['totalRecibido'], 103500)
        self.assertEqual(len(response.data['pagosRecibidos']), 1)

    def test_gruero_resumen_without_profile(self):
        self.api.force_authenticate(user=crear_usuario())
        response = self.api.get('/api/gruero/pagos/resumen/')
        self.assertEqual(response.status_code, 404)
