"""
Shared transition-table check used by the service and complaint workflows.
"""

from django.core.exceptions import ImproperlyConfigured

from core.exceptions import StateTransitionError


def validar_tabla(tabla, estados):
    """Fail at import time if a transition table misses a state."""
    faltantes = set(estados) - set(tabla)
    if faltantes:
        raise ImproperlyConfigured(f"Transition table missing states: {sorted(faltantes)}")
    return tabla


def es_terminal(tabla, estado) -> bool:
    return not tabla[estado]


def verificar_transicion(tabla, estado_actual, estado_destino):
    """
    Raise StateTransitionError unless estado_actual -> estado_destino
    is an edge of the table.
    """
    if estado_destino not in tabla.get(estado_actual, frozenset()):
        raise StateTransitionError(
            estado_actual=str(estado_actual),
            estado_destino=str(estado_destino),
        )
