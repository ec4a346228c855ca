"""
GRUAPP Logistics Tests
======================

Tests for:
1. Service transition table
2. Lifecycle operations (aceptar, completar, cancelar...)
3. Database check constraints and migration state
4. Admin servicios API
"""

from io import StringIO

from django.core.management import call_command
from django.db import IntegrityError, transaction
from django.test import TestCase
from rest_framework.test import APIClient

from core.exceptions import StateTransitionError, ValidationError
from gruapp_core.testing import (
    crear_admin,
    crear_cliente,
    crear_gruero,
    crear_servicio,
    crear_servicio_completado,
    crear_usuario,
)
from logistics.models import Servicio, ServicioStatus
from logistics.services import lifecycle
from logistics.services.lifecycle import TRANSICIONES_SERVICIO


class TestTransitionTable(TestCase):

    def test_every_status_has_an_entry(self):
        self.assertEqual(set(TRANSICIONES_SERVICIO), set(ServicioStatus))

    def test_terminal_states_have_no_exits(self):
        self.assertEqual(TRANSICIONES_SERVICIO[ServicioStatus.COMPLETADO], frozenset())
        self.assertEqual(TRANSICIONES_SERVICIO[ServicioStatus.CANCELADO], frozenset())

    def test_cancel_reachable_from_every_open_state(self):
        for estado, destinos in TRANSICIONES_SERVICIO.items():
            if destinos:
                self.assertIn(ServicioStatus.CANCELADO, destinos, estado)


class TestServiceLifecycle(TestCase):
    """Tests for logistics.services.lifecycle."""

    def setUp(self):
        self.cliente = crear_cliente()
        self.gruero = crear_gruero()
        self.servicio = crear_servicio(self.cliente)

    def _hasta_en_sitio(self):
        servicio = lifecycle.aceptar(self.servicio, self.gruero)
        servicio = lifecycle.marcar_en_camino(servicio)
        return lifecycle.marcar_en_sitio(servicio)

    # ==========================================
    # Happy path
    # ==========================================

    def test_full_flow_stamps_every_timestamp(self):
        servicio = self._hasta_en_sitio()
        servicio = lifecycle.completar(servicio, 48000, 38500)

        servicio.refresh_from_db()
        self.assertEqual(servicio.status, ServicioStatus.COMPLETADO)
        self.assertEqual(servicio.gruero, self.gruero)
        self.assertIsNotNone(servicio.aceptado_at)
        self.assertIsNotNone(servicio.en_camino_at)
        self.assertIsNotNone(servicio.en_sitio_at)
        self.assertIsNotNone(servicio.completado_at)
        self.assertFalse(servicio.pagado)

    def test_completar_computes_commission(self):
        servicio = lifecycle.completar(self._hasta_en_sitio(), 48000, 38500)
        self.assertEqual(servicio.comision_plataforma, 9500)
        self.assertEqual(
            servicio.comision_plataforma,
            servicio.total_cliente - servicio.total_gruero
        )

    def test_completar_allows_driver_share_above_client_total(self):
        servicio = lifecycle.completar(self._hasta_en_sitio(), 30000, 32000)
        self.assertEqual(servicio.comision_plataforma, -2000)

    # ==========================================
    # Refusals
    # ==========================================

    def test_aceptar_rejects_pending_driver(self):
        pendiente = crear_gruero(estado='PENDIENTE')
        with self.assertRaises(ValidationError):
            lifecycle.aceptar(self.servicio, pendiente)

        self.servicio.refresh_from_db()
        self.assertEqual(self.servicio.status, ServicioStatus.SOLICITADO)
        self.assertIsNone(self.servicio.gruero)

    def test_aceptar_rejects_suspended_driver(self):
        suspendido = crear_gruero(cuenta_suspendida=True, motivo_suspension='Reclamos')
        with self.assertRaises(ValidationError):
            lifecycle.aceptar(self.servicio, suspendido)

    def test_completar_requires_integer_amounts(self):
        servicio = self._hasta_en_sitio()
        for total_cliente, total_gruero in [
            (None, 1000),
            (1000, None),
            (1000.5, 900),
            (True, 900),
            ('48000', 38500),
            (-1, 0),
            (1000, -5),
        ]:
            with self.assertRaises(ValidationError):
                lifecycle.completar(servicio, total_cliente, total_gruero)

        servicio.refresh_from_db()
        self.assertEqual(servicio.status, ServicioStatus.EN_SITIO)
        self.assertIsNone(servicio.total_cliente)

    def test_cancelar_requires_motivo(self):
        with self.assertRaises(ValidationError):
            lifecycle.cancelar(self.servicio, '   ')

        self.servicio.refresh_from_db()
        self.assertEqual(self.servicio.status, ServicioStatus.SOLICITADO)

    def test_cannot_skip_states(self):
        with self.assertRaises(StateTransitionError) as ctx:
            lifecycle.marcar_en_sitio(self.servicio)

        self.assertEqual(ctx.exception.detail['estado_actual'], 'SOLICITADO')
        self.assertEqual(ctx.exception.detail['estado_destino'], 'EN_SITIO')

    def test_terminal_states_are_final(self):
        servicio = lifecycle.completar(self._hasta_en_sitio(), 48000, 38500)

        with self.assertRaises(StateTransitionError):
            lifecycle.cancelar(servicio, 'Cliente no se presentó')

        servicio.refresh_from_db()
        self.assertEqual(servicio.status, ServicioStatus.COMPLETADO)
        self.assertEqual(servicio.motivo_cancelacion, '')

    def test_terminal_state_reported_before_missing_input(self):
        completado = lifecycle.completar(self._hasta_en_sitio(), 48000, 38500)

        with self.assertRaises(StateTransitionError) as ctx:
            lifecycle.completar(completado, None, None)
        self.assertEqual(ctx.exception.detail['estado_actual'], 'COMPLETADO')

        with self.assertRaises(StateTransitionError):
            lifecycle.cancelar(completado, '')
        with self.assertRaises(StateTransitionError):
            lifecycle.aceptar(completado, None)

        cancelado = lifecycle.cancelar(crear_servicio(self.cliente), 'Duplicado')
        with self.assertRaises(StateTransitionError) as ctx:
            lifecycle.cancelar(cancelado, '   ')
        self.assertEqual(ctx.exception.detail['estado_actual'], 'CANCELADO')
        with self.assertRaises(StateTransitionError):
            lifecycle.completar(cancelado, 'abc', -1)

    def test_cancelled_service_has_no_amounts(self):
        servicio = lifecycle.aceptar(self.servicio, self.gruero)
        servicio = lifecycle.cancelar(servicio, 'Cliente no se presentó')

        self.assertEqual(servicio.status, ServicioStatus.CANCELADO)
        self.assertIsNotNone(servicio.cancelado_at)
        self.assertIsNone(servicio.total_gruero)
        self.assertIsNone(servicio.comision_plataforma)

        with self.assertRaises(StateTransitionError):
            lifecycle.marcar_en_camino(servicio)

    # ==========================================
    # cambiar_estado dispatcher
    # ==========================================

    def test_cambiar_estado_dispatches(self):
        servicio = lifecycle.cambiar_estado(self.servicio, 'ACEPTADO', gruero=self.gruero)
        self.assertEqual(servicio.status, ServicioStatus.ACEPTADO)

        servicio = lifecycle.cambiar_estado(servicio, 'CANCELADO', motivo='Grúa averiada')
        self.assertEqual(servicio.motivo_cancelacion, 'Grúa averiada')

    def test_cambiar_estado_unknown_state(self):
        with self.assertRaises(ValidationError):
            lifecycle.cambiar_estado(self.servicio, 'VOLANDO')

    def test_cambiar_estado_back_to_solicitado(self):
        with self.assertRaises(StateTransitionError):
            lifecycle.cambiar_estado(self.servicio, 'SOLICITADO')


class TestServicioConstraints(TestCase):
    """Invariants also enforced by the database."""

    def setUp(self):
        self.cliente = crear_cliente()
        self.gruero = crear_gruero()

    def test_paid_requires_completed(self):
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                crear_servicio(self.cliente, self.gruero, status='EN_CAMINO', pagado=True)

    def test_completed_commission_must_match(self):
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                crear_servicio(
                    self.cliente,
                    self.gruero,
                    status='COMPLETADO',
                    total_cliente=50000,
                    total_gruero=40000,
                    comision_plataforma=5000,
                )

    def test_completed_requires_amounts(self):
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                crear_servicio(self.cliente, self.gruero, status='COMPLETADO')


class TestMigrations(TestCase):

    def test_models_match_migrations(self):
        salida = StringIO()
        try:
            call_command('makemigrations', '--check', '--dry-run', stdout=salida)
        except SystemExit:
            self.fail(f"Models have changes without a migration:\n{salida.getvalue()}")


class TestServicioAdminAPI(TestCase):
    """Tests for /api/admin/servicios/."""

    def setUp(self):
        self.api = APIClient()
        self.admin = crear_admin()
        self.api.force_authenticate(user=self.admin)
        self.cliente = crear_cliente()
        self.gruero = crear_gruero()
        self.servicio = crear_servicio(self.cliente)

    def _url(self, servicio, accion=''):
        base = f'/api/admin/servicios/{servicio.id}/'
        return f'{base}{accion}/' if accion else base

    def test_list_filters_by_status(self):
        crear_servicio(self.cliente, status='CANCELADO', motivo_cancelacion='x')
        response = self.api.get('/api/admin/servicios/', {'status': 'SOLICITADO'})

        self.assertEqual(response.status_code, 200)
        ids = [item['id'] for item in response.data['results']]
        self.assertEqual(ids, [str(self.servicio.id)])

    def test_patch_estado_accepts_with_driver(self):
        response = self.api.patch(
            self._url(self.servicio, 'estado'),
            {'status': 'ACEPTADO', 'grueroId': str(self.gruero.id)},
            format='json'
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['data']['status'], 'ACEPTADO')
        self.assertEqual(response.data['data']['grueroId'], str(self.gruero.id))

    def test_patch_estado_illegal_edge_returns_409(self):
        response = self.api.patch(
            self._url(self.servicio, 'estado'),
            {'status': 'COMPLETADO', 'totalCliente': 1000, 'totalGruero': 800},
            format='json'
        )

        self.assertEqual(response.status_code, 409)
        self.assertFalse(response.data['success'])
        self.assertEqual(response.data['code'], 'INVALID_STATE_TRANSITION')
        self.assertEqual(response.data['estadoActual'], 'SOLICITADO')
        self.assertEqual(response.data['estadoDestino'], 'COMPLETADO')

    def test_patch_cancelar_without_motivo_returns_400(self):
        response = self.api.patch(self._url(self.servicio, 'cancelar'), {}, format='json')

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['code'], 'VALIDATION_ERROR')
        self.servicio.refresh_from_db()
        self.assertEqual(self.servicio.status, ServicioStatus.SOLICITADO)

    def test_patch_cancelar_completed_without_motivo_returns_409(self):
        completado = crear_servicio_completado(self.cliente, self.gruero, 40000)

        response = self.api.patch(self._url(completado, 'cancelar'), {}, format='json')

        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.data['code'], 'INVALID_STATE_TRANSITION')
        self.assertEqual(response.data['estadoActual'], 'COMPLETADO')

    def test_patch_cancelar(self):
        response = self.api.patch(
            self._url(self.servicio, 'cancelar'),
            {'motivo': 'Cliente no se presentó'},
            format='json'
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(Servicio.objects.get(pk=self.servicio.pk).status, ServicioStatus.CANCELADO)

    def test_non_staff_is_forbidden(self):
        self.api.force_authenticate(user=crear_usuario())
        response = self.api.get('/api/admin/servicios/')

        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.data['code'], 'PERMISSION_DENIED')

    def test_unknown_id_returns_404(self):
        response = self.api.get('/api/admin/servicios/00000000-0000-0000-0000-000000000000/')
        self.assertEqual(response.status_code, 404)
