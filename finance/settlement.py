"""
FINANCE App - Settlement Batcher for GRUAPP

Turns completed, unpaid services into per-driver payout proposals for a
half-open window [inicio, fin). Pure read: no locks, no writes.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime, time, timedelta

from dateutil.relativedelta import relativedelta, MO
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from core.exceptions import ValidationError
from logistics.models import Servicio, ServicioStatus

SEMANA_ISO_RE = re.compile(r'^(\d{4})-W(\d{2})$')


def _inicio_del_dia(fecha):
    return timezone.make_aware(datetime.combine(fecha, time.min))


@dataclass(frozen=True)
class PeriodoLiquidacion:
    """Settlement window, inicio inclusive, fin exclusive."""

    inicio: datetime
    fin: datetime

    def __post_init__(self):
        if self.inicio >= self.fin:
            raise ValidationError(
                "El inicio del período debe ser anterior a su fin",
                inicio=self.inicio.isoformat(),
                fin=self.fin.isoformat(),
            )

    @classmethod
    def semana_actual(cls, ahora=None):
        """Monday 00:00 local time of the current week to the next Monday."""
        ahora = timezone.localtime(ahora or timezone.now())
        lunes = ahora.date() + relativedelta(weekday=MO(-1))
        inicio = _inicio_del_dia(lunes)
        return cls(inicio, _inicio_del_dia(lunes + timedelta(weeks=1)))

    @classmethod
    def semana_iso(cls, etiqueta):
        """Parse an ISO week label such as '2025-W03'."""
        match = SEMANA_ISO_RE.match((etiqueta or '').strip())
        if not match:
            raise ValidationError(f"Período inválido: {etiqueta!r} (formato AAAA-Wss)", campo='periodo')
        anio, semana = int(match.group(1)), int(match.group(2))
        try:
            lunes = datetime.fromisocalendar(anio, semana, 1).date()
        except ValueError:
            raise ValidationError(f"La semana {etiqueta} no existe", campo='periodo')
        return cls(_inicio_del_dia(lunes), _inicio_del_dia(lunes + timedelta(weeks=1)))

    @classmethod
    def desde_parametros(cls, params):
        """
        Build a period from request data.

        Accepts `periodo` (ISO week label) or `inicio` + `fin` (dates or
        datetimes). Falls back to the current week when neither is given.
        """
        periodo = params.get('periodo')
        if periodo:
            return cls.semana_iso(periodo)

        inicio, fin = params.get('inicio'), params.get('fin')
        if inicio or fin:
            if not (inicio and fin):
                raise ValidationError("Debe indicar inicio y fin del período", campo='inicio')
            return cls(_parse_instante(inicio, 'inicio'), _parse_instante(fin, 'fin'))

        return cls.semana_actual()

    @property
    def etiqueta(self) -> str:
        inicio = timezone.localtime(self.inicio)
        fin = timezone.localtime(self.fin)
        alineado = (
            inicio.weekday() == 0
            and inicio.time() == time.min
            and fin - inicio == timedelta(weeks=1)
        )
        if alineado:
            anio, semana, _ = inicio.isocalendar()
            return f"{anio}-W{semana:02d}"
        return f"{inicio.date().isoformat()}/{fin.date().isoformat()}"


def _parse_instante(valor, campo):
    if isinstance(valor, datetime):
        instante = valor
    else:
        try:
            instante = parse_datetime(str(valor))
            if instante is None:
                fecha = parse_date(str(valor))
                instante = datetime.combine(fecha, time.min) if fecha else None
        except ValueError:
            instante = None
    if instante is None:
        raise ValidationError(f"Fecha inválida: {valor!r}", campo=campo)
    if timezone.is_naive(instante):
        instante = timezone.make_aware(instante)
    return instante


@dataclass(frozen=True)
class ServicioPendiente:
    id: str
    fecha: datetime
    cliente_nombre: str
    origen: str
    destino: str
    monto: int


@dataclass
class GrupoGruero:
    gruero: object
    servicios: list = field(default_factory=list)

    @property
    def monto_total(self) -> int:
        return sum(s.monto for s in self.servicios)

    @property
    def total_servicios(self) -> int:
        return len(self.servicios)


@dataclass
class PropuestaLiquidacion:
    periodo: PeriodoLiquidacion
    grupos: list

    @property
    def total_grueros(self) -> int:
        return len(self.grupos)

    @property
    def monto_total_general(self) -> int:
        return sum(g.monto_total for g in self.grupos)


def servicios_pendientes(periodo, gruero=None):
    """Completed, unsettled services finished inside the period."""
    qs = Servicio.objects.filter(
        status=ServicioStatus.COMPLETADO,
        pagado=False,
        pago__isnull=True,
        gruero__isnull=False,
        completado_at__gte=periodo.inicio,
        completado_at__lt=periodo.fin,
    )
    if gruero is not None:
        qs = qs.filter(gruero=gruero)
    return qs


def calcular_liquidacion(periodo) -> PropuestaLiquidacion:
    """
    Group pending services by driver.

    Groups are sorted by amount descending, then driver id ascending.
    A driver without qualifying services never appears.
    """
    qs = (
        servicios_pendientes(periodo)
        .select_related('gruero__user', 'cliente__user')
        .order_by('completado_at')
    )

    grupos = {}
    for servicio in qs:
        grupo = grupos.get(servicio.gruero_id)
        if grupo is None:
            grupo = grupos[servicio.gruero_id] = GrupoGruero(gruero=servicio.gruero)
        grupo.servicios.append(ServicioPendiente(
            id=str(servicio.id),
            fecha=servicio.completado_at,
            cliente_nombre=servicio.cliente.nombre,
            origen=servicio.origen_direccion,
            destino=servicio.destino_direccion,
            monto=servicio.total_gruero,
        ))

    ordenados = sorted(grupos.values(), key=lambda g: (-g.monto_total, str(g.gruero.pk)))
    return PropuestaLiquidacion(periodo=periodo, grupos=ordenados)
