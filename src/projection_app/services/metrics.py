from __future__ import annotations

from typing import Iterable

from ..models.catalog import CatalogSnapshot
from ..models.common import safe_ratio
from ..models.metrics import (
    BurnRateResult,
    GrossUp,
    LtvCacRating,
    Margins,
    RecurringRevenue,
    RunwayStatus,
    SimpleUnitEconomics,
)
from ..models.parameters import FiscalConstants
from ..models.projection import MonthlyProjection
from .income_statement import REVENUE_TYPES


def burn_rate(ingresos: float, costos: float) -> float:
    """Monthly cash burned; zero when the period is profitable."""
    return max(0.0, costos - ingresos)


def runway(capital: float, burn: float, constants: FiscalConstants) -> float:
    if burn <= 0:
        return constants.runway_infinito
    return capital / burn


def runway_status(months: float, constants: FiscalConstants) -> RunwayStatus:
    if months < constants.runway_critico:
        return RunwayStatus.CRITICAL
    if months < constants.runway_alerta:
        return RunwayStatus.WARNING
    return RunwayStatus.HEALTHY


def burn_rate_summary(ingresos: float, costos: float, capital: float, constants: FiscalConstants) -> BurnRateResult:
    burn = burn_rate(ingresos, costos)
    months = runway(capital, burn, constants)
    return BurnRateResult(
        burn_rate_mensual=burn,
        runway=min(months, constants.runway_infinito),
        estado=runway_status(months, constants),
    )


def withholding_for_net(net: float, rate: float) -> float:
    """Withholding the payer absorbs so the payee still receives ``net``."""
    if rate >= 1 or rate < 0:
        return 0.0
    return net * rate / (1 - rate)


def gross_up(net: float, rate: float) -> GrossUp:
    # Out-of-range rates pass the net value through untouched.
    if rate >= 1 or rate < 0:
        return GrossUp(base_gravable=net, retencion=0, total_a_pagar=net)
    base = net / (1 - rate)
    return GrossUp(
        base_gravable=round(base),
        retencion=round(base * rate),
        total_a_pagar=round(base),
    )


def margins(ingresos: float, cogs: float, opex: float, depreciacion: float = 0.0, impuestos: float = 0.0) -> Margins:
    if not ingresos:
        return Margins(margen_bruto=0.0, margen_ebitda=0.0, margen_neto=0.0)
    utilidad_bruta = ingresos - cogs
    ebitda = utilidad_bruta - opex
    utilidad_neta = ebitda - depreciacion - impuestos
    return Margins(
        margen_bruto=utilidad_bruta / ingresos * 100,
        margen_ebitda=ebitda / ingresos * 100,
        margen_neto=utilidad_neta / ingresos * 100,
    )


def unit_economics_simple(arpu: float, churn_mensual: float, cac: float) -> SimpleUnitEconomics:
    if churn_mensual <= 0 or churn_mensual >= 1 or arpu <= 0:
        return SimpleUnitEconomics(ltv=0.0, cac=cac, ltv_cac_ratio=0.0, payback_meses=0.0)
    ltv = arpu / churn_mensual
    return SimpleUnitEconomics(
        ltv=ltv,
        cac=cac,
        ltv_cac_ratio=safe_ratio(ltv, cac) if cac > 0 else 0.0,
        payback_meses=cac / arpu,
    )


def evaluate_ltv_cac(ratio: float) -> LtvCacRating:
    if ratio >= 5:
        return LtvCacRating.EXCELLENT
    if ratio >= 3:
        return LtvCacRating.GOOD
    if ratio >= 1:
        return LtvCacRating.WARNING
    return LtvCacRating.CRITICAL


def cash_conversion_cycle(dias_cartera: float, dias_proveedores: float, ventas: float) -> float:
    # No inventory: CCC = DSO - DPO, undefined without sales.
    if not ventas:
        return 0.0
    return dias_cartera - dias_proveedores


def arpu(ingresos: float, usuarios_activos: float) -> float:
    return safe_ratio(ingresos, usuarios_activos)


def recurring_revenue(ingresos_recurrentes: Iterable[float]) -> RecurringRevenue:
    mrr = float(sum(ingresos_recurrentes))
    return RecurringRevenue(mrr=mrr, arr=mrr * 12)


def recurring_revenue_of(projection: MonthlyProjection, catalog: CatalogSnapshot) -> RecurringRevenue:
    """MRR and ARR from the subscription lines of one projected month."""
    amounts = []
    for codigo, amount in projection.ingresos_por_item.items():
        item = catalog.get_item_by_code(codigo)
        if item is not None and REVENUE_TYPES.get(item.sub_categoria) == "suscripciones":
            amounts.append(amount)
    return recurring_revenue(amounts)
