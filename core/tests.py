"""
GRUAPP Core Tests
=================

Tests for:
1. Gruero profile helpers (vehicle types, documents, banking data)
2. Account lifecycle (verification, suspension, deletion)
3. Expired documents sweep (service + Celery task)
4. Error envelope and state machine helpers
5. Admin accounts API
"""

from datetime import date, timedelta

from django.contrib.auth import get_user_model
from django.core.exceptions import ImproperlyConfigured
from django.db import IntegrityError, transaction
from django.test import TestCase
from rest_framework.test import APIClient

from core.api_exceptions import camelize, custom_exception_handler
from core.exceptions import (
    ConflictError,
    NotFoundError,
    StateTransitionError,
    ValidationError,
    get_or_not_found,
)
from core.models import Cliente, EstadoVerificacion, Gruero, TipoVehiculo, parse_tipos_vehiculo
from core.services import AccountService
from core.state_machine import es_terminal, validar_tabla, verificar_transicion
from core.tasks import suspend_accounts_with_expired_documents
from finance.services import PayoutService
from finance.settlement import PeriodoLiquidacion, servicios_pendientes
from gruapp_core.testing import (
    crear_admin,
    crear_cliente,
    crear_gruero,
    crear_reclamo,
    crear_servicio,
    crear_servicio_completado,
    crear_usuario,
)
from logistics.models import Calificacion, Servicio
from support.models import Reclamo

User = get_user_model()

HOY = date(2025, 3, 1)


class TestGrueroProfile(TestCase):
    """Tests for Gruero helpers."""

    # ==========================================
    # Vehicle types
    # ==========================================

    def test_parse_valid_list(self):
        self.assertEqual(
            parse_tipos_vehiculo('["AUTOMOVIL", "SUV", "SUV"]'),
            frozenset({TipoVehiculo.AUTOMOVIL, TipoVehiculo.SUV})
        )

    def test_parse_drops_unknown_codes(self):
        with self.assertLogs('core.models', level='WARNING'):
            tipos = parse_tipos_vehiculo('["BUS", "TRACTOR"]')
        self.assertEqual(tipos, frozenset({TipoVehiculo.BUS}))

    def test_parse_malformed_input_is_empty(self):
        """Malformed JSON or a non-list never raises."""
        for raw in ['no es json', '{"AUTOMOVIL": true}', '"SUV"', '']:
            self.assertEqual(parse_tipos_vehiculo(raw), frozenset(), raw)
        self.assertEqual(parse_tipos_vehiculo(None), frozenset())

    def test_profile_exposes_parsed_types(self):
        gruero = crear_gruero(tipos_vehiculos_atiende='["CAMION_PESADO"]')
        self.assertEqual(gruero.tipos_vehiculos, frozenset({TipoVehiculo.CAMION_PESADO}))

    # ==========================================
    # Documents
    # ==========================================

    def test_documents_expire_strictly_before_today(self):
        gruero = crear_gruero(
            licencia_vencimiento=HOY - timedelta(days=1),
            seguro_vencimiento=HOY,
            revision_vencimiento=HOY + timedelta(days=30),
        )
        self.assertEqual(gruero.documentos_vencidos(HOY), ['Licencia de Conducir'])

    def test_missing_dates_never_expire(self):
        self.assertEqual(crear_gruero().documentos_vencidos(HOY), [])

    def test_puede_operar(self):
        self.assertTrue(crear_gruero().puede_operar)
        self.assertFalse(crear_gruero(estado='PENDIENTE').puede_operar)
        self.assertFalse(crear_gruero(cuenta_suspendida=True).puede_operar)

    def test_suspended_driver_must_be_approved(self):
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                crear_gruero(estado='RECHAZADO', cuenta_suspendida=True)


class TestVerification(TestCase):
    """Tests for AccountService.aprobar / rechazar."""

    def setUp(self):
        self.admin = crear_admin()
        self.gruero = crear_gruero(estado='PENDIENTE')

    def test_aprobar(self):
        gruero = AccountService.aprobar(self.gruero, admin_user=self.admin)

        gruero.refresh_from_db()
        self.assertEqual(gruero.estado_verificacion, EstadoVerificacion.APROBADO)
        self.assertIsNotNone(gruero.verificado_at)

    def test_rechazar_keeps_reason(self):
        gruero = AccountService.rechazar(self.gruero, "Licencia ilegible", admin_user=self.admin)

        gruero.refresh_from_db()
        self.assertEqual(gruero.estado_verificacion, EstadoVerificacion.RECHAZADO)
        self.assertEqual(gruero.motivo_rechazo, "Licencia ilegible")

    def test_rechazar_requires_reason(self):
        with self.assertRaises(ValidationError):
            AccountService.rechazar(self.gruero, '')

    def test_only_pending_drivers_are_reviewed(self):
        AccountService.aprobar(self.gruero)

        with self.assertRaises(StateTransitionError):
            AccountService.aprobar(self.gruero)
        with self.assertRaises(StateTransitionError):
            AccountService.rechazar(self.gruero, "Tarde")

        self.gruero.refresh_from_db()
        self.assertEqual(self.gruero.estado_verificacion, EstadoVerificacion.APROBADO)


class TestSuspension(TestCase):
    """Tests for AccountService.suspender / reactivar."""

    def test_scenario_e_pending_driver_cannot_be_suspended(self):
        gruero = crear_gruero(estado='PENDIENTE')

        with self.assertRaises(StateTransitionError) as ctx:
            AccountService.suspender(gruero, "Reclamos reiterados")

        self.assertEqual(ctx.exception.message, "Solo se pueden suspender grueros aprobados")
        gruero.refresh_from_db()
        self.assertFalse(gruero.cuenta_suspendida)

    def test_suspend_and_reactivate_driver(self):
        gruero = AccountService.suspender(crear_gruero(), "Reclamos reiterados")

        self.assertTrue(gruero.cuenta_suspendida)
        self.assertEqual(gruero.motivo_suspension, "Reclamos reiterados")
        self.assertIsNotNone(gruero.suspendida_at)
        self.assertFalse(gruero.puede_operar)

        gruero = AccountService.reactivar(gruero)

        self.assertFalse(gruero.cuenta_suspendida)
        self.assertEqual(gruero.motivo_suspension, '')
        self.assertIsNone(gruero.suspendida_at)
        self.assertEqual(gruero.estado_verificacion, EstadoVerificacion.APROBADO)

    def test_suspend_client(self):
        cliente = AccountService.suspender(crear_cliente(), "No pagó el servicio")
        self.assertTrue(cliente.cuenta_suspendida)

    def test_double_suspension_is_refused(self):
        cliente = AccountService.suspender(crear_cliente(), "Fraude")
        with self.assertRaises(StateTransitionError):
            AccountService.suspender(cliente, "Otra vez")

    def test_reactivate_active_account_is_refused(self):
        with self.assertRaises(StateTransitionError):
            AccountService.reactivar(crear_cliente())

    def test_suspension_requires_reason(self):
        with self.assertRaises(ValidationError):
            AccountService.suspender(crear_gruero(), '   ')


class TestAccountDeletion(TestCase):
    """Tests for AccountService.eliminar_cuenta."""

    def setUp(self):
        self.cliente = crear_cliente()
        self.gruero = crear_gruero()

    def test_refused_with_active_services(self):
        crear_servicio(self.cliente, self.gruero, status='EN_CAMINO')
        crear_servicio(self.cliente, self.gruero, status='ACEPTADO')
        crear_servicio_completado(self.cliente, self.gruero, 20000)

        with self.assertRaises(ConflictError) as ctx:
            AccountService.eliminar_cuenta(self.gruero)

        self.assertEqual(ctx.exception.detail['servicios_activos'], 2)
        self.assertTrue(Gruero.objects.filter(pk=self.gruero.pk).exists())
        self.assertEqual(Servicio.objects.count(), 3)

    def test_client_with_requested_service_is_refused(self):
        crear_servicio(self.cliente)
        with self.assertRaises(ConflictError):
            AccountService.eliminar_cuenta(self.cliente)

    def test_driver_deletion_is_permanent_and_ledger_survives(self):
        periodo = PeriodoLiquidacion.semana_actual()
        pagado = crear_servicio_completado(self.cliente, self.gruero, 30000)
        pago = PayoutService.registrar_pago(self.gruero, periodo, numero_comprobante='TRX-1')
        pendiente = crear_servicio_completado(self.cliente, self.gruero, 15000)
        crear_servicio(self.cliente, self.gruero, status='CANCELADO', motivo_cancelacion='x')
        Calificacion.objects.create(servicio=pagado, cliente=self.cliente, gruero=self.gruero, puntuacion=5)
        crear_reclamo(pendiente)
        user_id = self.gruero.user_id

        resumen = AccountService.eliminar_cuenta(self.gruero)

        self.assertEqual(resumen['tipo'], 'gruero')
        self.assertEqual(resumen['calificaciones_eliminadas'], 1)
        self.assertEqual(resumen['reclamos_eliminados'], 1)
        self.assertEqual(resumen['servicios_eliminados'], 3)
        self.assertFalse(Gruero.objects.filter(pk=self.gruero.pk).exists())
        self.assertFalse(User.objects.filter(pk=user_id).exists())
        self.assertFalse(Reclamo.objects.exists())

        pago.refresh_from_db()
        self.assertIsNone(pago.gruero)
        self.assertEqual(pago.servicio_ids, [str(pagado.id)])
        self.assertEqual(pago.numero_cuenta, '12345678')

    def test_client_deletion_drops_unpaid_services_from_settlement(self):
        crear_servicio_completado(self.cliente, self.gruero, 25000)

        AccountService.eliminar_cuenta(self.cliente)

        self.assertFalse(servicios_pendientes(PeriodoLiquidacion.semana_actual()).exists())
        self.assertTrue(Gruero.objects.filter(pk=self.gruero.pk).exists())

    def test_deleted_account_cannot_be_deleted_again(self):
        AccountService.eliminar_cuenta(self.cliente)
        with self.assertRaises(Cliente.DoesNotExist):
            AccountService.eliminar_cuenta(self.cliente)

    def test_single_profile_deletion_removes_user(self):
        user_id = self.cliente.user_id

        resumen = AccountService.eliminar_cuenta(self.cliente)

        self.assertTrue(resumen['usuario_eliminado'])
        self.assertFalse(User.objects.filter(pk=user_id).exists())

    def test_driver_deletion_keeps_client_profile_of_same_user(self):
        otro_gruero = crear_gruero()
        cliente = Cliente.objects.create(user=self.gruero.user)
        servicio = crear_servicio_completado(cliente, otro_gruero, 10000)

        resumen = AccountService.eliminar_cuenta(self.gruero)

        self.assertFalse(resumen['usuario_eliminado'])
        self.assertFalse(Gruero.objects.filter(pk=self.gruero.pk).exists())
        self.assertTrue(User.objects.filter(pk=self.gruero.user_id).exists())
        self.assertTrue(Cliente.objects.filter(pk=cliente.pk).exists())
        self.assertTrue(Servicio.objects.filter(pk=servicio.pk).exists())

    def test_client_deletion_keeps_driver_profile_of_same_user(self):
        cliente = Cliente.objects.create(user=self.gruero.user)

        resumen = AccountService.eliminar_cuenta(cliente)

        self.assertFalse(resumen['usuario_eliminado'])
        self.assertFalse(Cliente.objects.filter(pk=cliente.pk).exists())
        self.gruero.refresh_from_db()
        self.assertEqual(self.gruero.user_id, cliente.user_id)
        self.assertEqual(self.gruero.estado_verificacion, EstadoVerificacion.APROBADO)


class TestExpiredDocumentsSweep(TestCase):
    """Tests for the daily expired-documents suspension."""

    def setUp(self):
        ayer = HOY - timedelta(days=1)
        self.vencido = crear_gruero(licencia_vencimiento=ayer, seguro_vencimiento=date(2025, 1, 1))
        self.al_dia = crear_gruero(licencia_vencimiento=HOY)
        self.pendiente = crear_gruero(estado='PENDIENTE', licencia_vencimiento=ayer)
        self.suspendido = crear_gruero(
            cuenta_suspendida=True,
            motivo_suspension='Manual',
            licencia_vencimiento=ayer,
        )

    def test_only_approved_active_drivers_are_suspended(self):
        suspendidos = AccountService.suspender_por_documentos_vencidos(hoy=HOY)

        self.assertEqual([g.pk for g in suspendidos], [self.vencido.pk])
        self.vencido.refresh_from_db()
        self.assertTrue(self.vencido.cuenta_suspendida)
        self.assertEqual(
            self.vencido.motivo_suspension,
            "DOCUMENTOS_VENCIDOS: Licencia de Conducir, Seguro"
        )

        self.al_dia.refresh_from_db()
        self.pendiente.refresh_from_db()
        self.suspendido.refresh_from_db()
        self.assertFalse(self.al_dia.cuenta_suspendida)
        self.assertFalse(self.pendiente.cuenta_suspendida)
        self.assertEqual(self.suspendido.motivo_suspension, 'Manual')

    def test_sweep_is_idempotent(self):
        AccountService.suspender_por_documentos_vencidos(hoy=HOY)
        self.assertEqual(AccountService.suspender_por_documentos_vencidos(hoy=HOY), [])

    def test_celery_task(self):
        resultado = suspend_accounts_with_expired_documents.apply(args=['2025-03-01']).get()

        self.assertEqual(resultado['suspended'], 1)
        self.assertEqual(resultado['gruero_ids'], [str(self.vencido.pk)])


class TestErrorHandling(TestCase):
    """Tests for the error envelope and shared helpers."""

    def test_camelize(self):
        self.assertEqual(camelize('servicios_activos'), 'serviciosActivos')
        self.assertEqual(camelize('estado_actual'), 'estadoActual')
        self.assertEqual(camelize('periodo'), 'periodo')

    def test_business_error_envelope(self):
        response = custom_exception_handler(ConflictError("Ocupado", servicios_activos=2), {})

        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.data, {
            'success': False,
            'code': 'RESOURCE_CONFLICT',
            'message': 'Ocupado',
            'serviciosActivos': 2,
        })

    def test_not_found_envelope(self):
        response = custom_exception_handler(NotFoundError(), {})
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data['code'], 'RESOURCE_NOT_FOUND')

    def test_unexpected_errors_are_left_to_django(self):
        with self.assertLogs('core.api_exceptions', level='ERROR'):
            self.assertIsNone(custom_exception_handler(RuntimeError('boom'), {}))

    def test_get_or_not_found(self):
        gruero = crear_gruero()
        self.assertEqual(get_or_not_found(Gruero, pk=gruero.pk), gruero)
        with self.assertRaises(NotFoundError):
            get_or_not_found(Gruero, pk='no-es-uuid')
        with self.assertRaises(NotFoundError):
            get_or_not_found(Gruero.objects.filter(estado_verificacion='PENDIENTE'), pk=gruero.pk)

    def test_state_machine_helpers(self):
        tabla = {
            EstadoVerificacion.PENDIENTE: frozenset({EstadoVerificacion.APROBADO}),
            EstadoVerificacion.APROBADO: frozenset(),
        }
        with self.assertRaises(ImproperlyConfigured):
            validar_tabla(tabla, EstadoVerificacion)

        tabla[EstadoVerificacion.RECHAZADO] = frozenset()
        validar_tabla(tabla, EstadoVerificacion)
        self.assertTrue(es_terminal(tabla, EstadoVerificacion.APROBADO))
        verificar_transicion(tabla, 'PENDIENTE', 'APROBADO')
        with self.assertRaises(StateTransitionError):
            verificar_transicion(tabla, 'APROBADO', 'PENDIENTE')


class TestCuentasAdminAPI(TestCase):
    """Tests for /api/admin/grueros/ and /api/admin/clientes/."""

    def setUp(self):
        self.api = APIClient()
        self.admin = crear_admin()
        self.api.force_authenticate(user=self.admin)
        self.cliente = crear_cliente()
        self.gruero = crear_gruero(estado='PENDIENTE')

    def _url(self, cuenta, accion=''):
        recurso = 'grueros' if isinstance(cuenta, Gruero) else 'clientes'
        base = f'/api/admin/{recurso}/{cuenta.id}/'
        return f'{base}{accion}/' if accion else base

    def test_list_filters_by_verification(self):
        crear_gruero()
        response = self.api.get('/api/admin/grueros/', {'estadoVerificacion': 'PENDIENTE'})

        self.assertEqual(response.status_code, 200)
        self.assertEqual([g['id'] for g in response.data['results']], [str(self.gruero.id)])

    def test_aprobar_then_suspend(self):
        response = self.api.patch(self._url(self.gruero, 'aprobar'))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['data']['estadoVerificacion'], 'APROBADO')

        response = self.api.patch(
            self._url(self.gruero, 'suspender'),
            {'motivo': 'Reclamos reiterados'},
            format='json'
        )
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.data['data']['cuentaSuspendida'])

    def test_suspend_pending_driver_returns_409(self):
        response = self.api.patch(
            self._url(self.gruero, 'suspender'),
            {'motivo': 'Reclamos reiterados'},
            format='json'
        )

        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.data['code'], 'INVALID_STATE_TRANSITION')
        self.assertEqual(response.data['estadoActual'], 'PENDIENTE')

    def test_rechazar_without_reason_returns_400(self):
        response = self.api.patch(self._url(self.gruero, 'rechazar'), {}, format='json')
        self.assertEqual(response.status_code, 400)

    def test_client_suspend_and_reactivate(self):
        response = self.api.patch(self._url(self.cliente, 'suspender'), {'motivo': 'Fraude'}, format='json')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['message'], 'Cliente suspendido')

        response = self.api.patch(self._url(self.cliente, 'reactivar'))
        self.assertEqual(response.status_code, 200)
        self.assertFalse(response.data['data']['cuentaSuspendida'])

    def test_delete_with_active_services_returns_409(self):
        crear_servicio(self.cliente, status='SOLICITADO')

        response = self.api.delete(self._url(self.cliente))

        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.data['serviciosActivos'], 1)
        self.assertEqual(
            response.data['message'],
            "No se puede eliminar un cliente con servicios activos. Debe cancelarlos primero."
        )

    def test_delete_returns_summary(self):
        response = self.api.delete(self._url(self.gruero))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['eliminados'], {'calificaciones': 0, 'reclamos': 0, 'servicios': 0})
        self.assertEqual(self.api.get(self._url(self.gruero)).status_code, 404)

    def test_requires_staff(self):
        self.api.force_authenticate(user=crear_usuario())
        response = self.api.get('/api/admin/clientes/')

        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.data['code'], 'PERMISSION_DENIED')

    def test_requires_authentication(self):
        response = APIClient().get('/api/admin/grueros/')

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.data['code'], 'AUTHENTICATION_REQUIRED')

    def test_jwt_token(self):
        user = crear_usuario()
        response = APIClient().post(
            '/api/auth/token/',
            {'username': user.username, 'password': 'testpass123'},
            format='json'
        )

        self.assertEqual(response.status_code, 200)
        self.assertIn('access', response.data)
