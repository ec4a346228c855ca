"""
GRUAPP Support Tests
====================

Tests for:
1. Complaint transitions (SupportService)
2. Internal notes and statistics
3. Admin reclamos API
"""

from django.test import TestCase
from rest_framework.test import APIClient

from core.exceptions import StateTransitionError, ValidationError
from gruapp_core.testing import (
    crear_admin,
    crear_cliente,
    crear_gruero,
    crear_reclamo,
    crear_servicio_completado,
    crear_usuario,
)
from support.models import Reclamo, ReclamoEstado
from support.services import TRANSICIONES_RECLAMO, SupportService


class TestReclamoWorkflow(TestCase):
    """Tests for SupportService transitions."""

    def setUp(self):
        self.admin = crear_admin()
        servicio = crear_servicio_completado(crear_cliente(), crear_gruero(), 30000)
        self.reclamo = crear_reclamo(servicio)

    def test_transition_table_covers_every_state(self):
        self.assertEqual(set(TRANSICIONES_RECLAMO), set(ReclamoEstado))

    def test_review_then_resolve(self):
        reclamo = SupportService.marcar_en_revision(self.reclamo, self.admin)
        self.assertEqual(reclamo.estado, ReclamoEstado.EN_REVISION)
        self.assertIsNone(reclamo.resuelto_at)

        reclamo = SupportService.resolver(reclamo, self.admin, "Se reembolsó el 20% del servicio")

        reclamo.refresh_from_db()
        self.assertEqual(reclamo.estado, ReclamoEstado.RESUELTO)
        self.assertEqual(reclamo.resolucion, "Se reembolsó el 20% del servicio")
        self.assertEqual(reclamo.resuelto_por, self.admin)
        self.assertIsNotNone(reclamo.resuelto_at)

    def test_resolve_directly_from_pending(self):
        reclamo = SupportService.resolver(self.reclamo, self.admin, "Resuelto por teléfono")
        self.assertEqual(reclamo.estado, ReclamoEstado.RESUELTO)

    def test_reject_prefixes_reason(self):
        reclamo = SupportService.rechazar(self.reclamo, self.admin, "Sin evidencia")

        reclamo.refresh_from_db()
        self.assertEqual(reclamo.estado, ReclamoEstado.RECHAZADO)
        self.assertEqual(reclamo.resolucion, "RECHAZADO: Sin evidencia")
        self.assertEqual(reclamo.resuelto_por, self.admin)

    def test_scenario_d_resolved_complaint_cannot_be_rejected(self):
        SupportService.resolver(self.reclamo, self.admin, "Reembolso aplicado")

        with self.assertRaises(StateTransitionError) as ctx:
            SupportService.rechazar(self.reclamo, self.admin, "Error de digitación")

        self.assertEqual(ctx.exception.detail['estado_actual'], 'RESUELTO')
        self.reclamo.refresh_from_db()
        self.assertEqual(self.reclamo.estado, ReclamoEstado.RESUELTO)
        self.assertEqual(self.reclamo.resolucion, "Reembolso aplicado")

    def test_closed_complaints_cannot_reopen_or_be_reviewed(self):
        SupportService.rechazar(self.reclamo, self.admin, "Duplicado")

        for operacion in (
            lambda: SupportService.marcar_en_revision(self.reclamo, self.admin),
            lambda: SupportService.resolver(self.reclamo, self.admin, "Otra"),
            lambda: SupportService.cambiar_estado(self.reclamo, self.admin, 'PENDIENTE'),
        ):
            with self.assertRaises(StateTransitionError):
                operacion()

    def test_review_twice_is_refused(self):
        SupportService.marcar_en_revision(self.reclamo, self.admin)
        with self.assertRaises(StateTransitionError):
            SupportService.marcar_en_revision(self.reclamo, self.admin)

    def test_resolution_text_is_required(self):
        with self.assertRaises(ValidationError):
            SupportService.resolver(self.reclamo, self.admin, '  ')
        with self.assertRaises(ValidationError):
            SupportService.rechazar(self.reclamo, self.admin, None)

        self.reclamo.refresh_from_db()
        self.assertEqual(self.reclamo.estado, ReclamoEstado.PENDIENTE)
        self.assertEqual(self.reclamo.resolucion, '')

    def test_cambiar_estado_dispatches(self):
        reclamo = SupportService.cambiar_estado(self.reclamo, self.admin, 'EN_REVISION')
        self.assertEqual(reclamo.estado, ReclamoEstado.EN_REVISION)

        reclamo = SupportService.cambiar_estado(reclamo, self.admin, 'RECHAZADO', "Fuera de plazo")
        self.assertEqual(reclamo.resolucion, "RECHAZADO: Fuera de plazo")

    def test_cambiar_estado_unknown(self):
        with self.assertRaises(ValidationError):
            SupportService.cambiar_estado(self.reclamo, self.admin, 'ARCHIVADO')

    # ==========================================
    # Notes and statistics
    # ==========================================

    def test_notes_allowed_after_closure(self):
        SupportService.resolver(self.reclamo, self.admin, "Reembolso aplicado")

        reclamo = SupportService.agregar_notas(self.reclamo, "Cliente conforme por correo")

        reclamo.refresh_from_db()
        self.assertEqual(reclamo.notas_internas, "Cliente conforme por correo")
        self.assertEqual(reclamo.estado, ReclamoEstado.RESUELTO)
        self.assertEqual(reclamo.resolucion, "Reembolso aplicado")

    def test_notes_can_be_cleared(self):
        SupportService.agregar_notas(self.reclamo, "temporal")
        reclamo = SupportService.agregar_notas(self.reclamo, '')
        self.assertEqual(reclamo.notas_internas, '')

    def test_estadisticas(self):
        servicio = self.reclamo.servicio
        SupportService.marcar_en_revision(crear_reclamo(servicio), self.admin)
        SupportService.resolver(crear_reclamo(servicio), self.admin, "OK")
        SupportService.rechazar(crear_reclamo(servicio), self.admin, "No corresponde")

        stats = SupportService.estadisticas()

        self.assertEqual(stats['PENDIENTE'], 1)
        self.assertEqual(stats['EN_REVISION'], 1)
        self.assertEqual(stats['RESUELTO'], 1)
        self.assertEqual(stats['RECHAZADO'], 1)
        self.assertEqual(stats['total'], 4)

    def test_estadisticas_empty(self):
        Reclamo.objects.all().delete()
        stats = SupportService.estadisticas()
        self.assertEqual(stats['total'], 0)
        self.assertEqual(stats['PENDIENTE'], 0)


class TestReclamoAdminAPI(TestCase):
    """Tests for /api/admin/reclamos/."""

    def setUp(self):
        self.api = APIClient()
        self.admin = crear_admin()
        self.api.force_authenticate(user=self.admin)
        self.servicio = crear_servicio_completado(crear_cliente(), crear_gruero(), 30000)
        self.reclamo = crear_reclamo(self.servicio, prioridad='ALTA')

    def _url(self, accion):
        return f'/api/admin/reclamos/{self.reclamo.id}/{accion}/'

    def test_list_filters(self):
        crear_reclamo(self.servicio, tipo='PROBLEMA_PAGO', prioridad='BAJA')

        response = self.api.get('/api/admin/reclamos/', {'prioridad': 'ALTA'})

        self.assertEqual(response.status_code, 200)
        self.assertEqual([r['id'] for r in response.data['results']], [str(self.reclamo.id)])

        response = self.api.get('/api/admin/reclamos/', {'tipo': 'PROBLEMA_PAGO', 'estado': 'PENDIENTE'})
        self.assertEqual(response.data['count'], 1)

    def test_patch_estado(self):
        response = self.api.patch(self._url('estado'), {'estado': 'EN_REVISION'}, format='json')

        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.data['success'])
        self.assertEqual(response.data['data']['estado'], 'EN_REVISION')

    def test_patch_estado_rejection_uses_motivo(self):
        response = self.api.patch(
            self._url('estado'),
            {'estado': 'RECHAZADO', 'motivo': 'Sin antecedentes'},
            format='json'
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['data']['resolucion'], 'RECHAZADO: Sin antecedentes')

    def test_patch_resolver(self):
        response = self.api.patch(self._url('resolver'), {'resolucion': 'Reembolso total'}, format='json')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['data']['estado'], 'RESUELTO')
        self.assertEqual(response.data['data']['resueltoPor'], self.admin.username)

    def test_patch_resolver_without_text(self):
        response = self.api.patch(self._url('resolver'), {}, format='json')

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['code'], 'VALIDATION_ERROR')

    def test_scenario_d_over_http(self):
        self.api.patch(self._url('resolver'), {'resolucion': 'Reembolso total'}, format='json')

        response = self.api.patch(self._url('rechazar'), {'motivo': 'Cambio de opinión'}, format='json')

        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.data['code'], 'INVALID_STATE_TRANSITION')
        self.reclamo.refresh_from_db()
        self.assertEqual(self.reclamo.resolucion, 'Reembolso total')

    def test_patch_notas(self):
        response = self.api.patch(self._url('notas'), {'notas': 'Llamar el lunes'}, format='json')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['data']['notasInternas'], 'Llamar el lunes')

    def test_patch_notas_requires_field(self):
        response = self.api.patch(self._url('notas'), {}, format='json')
        self.assertEqual(response.status_code, 400)

    def test_estadisticas(self):
        response = self.api.get('/api/admin/reclamos/estadisticas/')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data, {
            'pendientes': 1,
            'enRevision': 0,
            'resueltos': 0,
            'rechazados': 0,
            'total': 1,
        })

    def test_non_staff_is_forbidden(self):
        self.api.force_authenticate(user=crear_usuario())
        response = self.api.get('/api/admin/reclamos/')
        self.assertEqual(response.status_code, 403)
