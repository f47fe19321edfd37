from __future__ import annotations

import math
from typing import List, Optional, Tuple

from ..errors import CatalogError, ConfigurationError
from ..logging_config import get_logger
from ..models.alerts import Alert, AlertCategory, AlertSeverity
from ..models.catalog import CatalogItem, CatalogSnapshot, CostBasis, CostBucket, ItemKind
from ..models.common import safe_ratio
from ..models.diagnostics import DiagnosticChecks, FlowStep, StepKind, UnitDiagnostic
from ..models.parameters import FiscalConstants, MacroTable, ModelConfiguration
from ..models.projection import UnitEconomics
from .alerts import sort_by_severity
from .calculator import ProjectionEngine
from .metrics import gross_up, withholding_for_net
from .pricing import bucket_of, driver_volume, unit_cost, unit_economics_for_item

log = get_logger(__name__)

# Order money leaves a sale: collection channel, payout and its taxes, then platform costs.
_STEP_ORDER = (
    CostBucket.GATEWAY,
    CostBucket.SMS,
    CostBucket.PROFESSIONAL_PAYOUT,
    CostBucket.COMPLIANCE,
    CostBucket.WHATSAPP,
    CostBucket.INFRASTRUCTURE,
)
_CHANNEL_BASES = (CostBasis.DIGITAL_VOLUME, CostBasis.CASH_VOLUME)


class _MoneyWalk:
    def __init__(self) -> None:
        self.steps: List[FlowStep] = []
        self.acumulado = 0.0

    def add(self, tipo: StepKind, concepto: str, codigo: str, monto: float, formula: str) -> None:
        self.acumulado += monto
        self.info(tipo, concepto, codigo, monto, formula, self.acumulado)

    def info(self, tipo: StepKind, concepto: str, codigo: str, monto: float, formula: str, acumulado: float) -> None:
        self.steps.append(
            FlowStep(
                orden=len(self.steps) + 1,
                concepto=concepto,
                codigo=codigo,
                tipo=tipo,
                monto=monto,
                formula=formula,
                acumulado=acumulado,
            )
        )


def diagnose_unit(
    codigo: str,
    catalog: CatalogSnapshot,
    macro: MacroTable,
    constants: FiscalConstants,
    config: ModelConfiguration,
    volumen: int = 1,
    mix_digital: Optional[float] = None,
    anio: Optional[int] = None,
    gastos_fijos: Optional[float] = None,
) -> UnitDiagnostic:
    """Walk the money of ``volumen`` sales of one SKU and audit each step.

    The walk reuses the per-item unit economics, so its contribution margin is
    the one the projection engine books. Fixed costs default to the engine's
    OPEX for December of ``anio`` at zero volume, which carries no one-time
    setup charges.
    """
    item = catalog.get_item_by_code(codigo)
    if item is None or item.tipo != ItemKind.REVENUE:
        raise CatalogError(f"Unknown revenue item {codigo}")
    if volumen < 1:
        raise ConfigurationError(f"Diagnostic volume must be at least 1, got {volumen}")
    mix = config.mix_pago_digital if mix_digital is None else mix_digital
    if not 0 <= mix <= 1:
        raise ConfigurationError(f"Digital payment mix must be between 0 and 1, got {mix}")
    year = config.anio_inicio if anio is None else anio

    engine = ProjectionEngine(catalog, macro, constants)
    booked = engine.project_month(year, 1, {codigo: volumen}, config)
    if gastos_fijos is None:
        gastos_fijos = engine.project_month(year, 12, {}, config).total_opex

    economics = unit_economics_for_item(item, volumen, year, macro, mix, catalog, constants, config.anio_inicio)
    price = economics.precio_indexado
    walk = _MoneyWalk()
    walk.add(StepKind.INFLOW, f"Gross revenue ({item.concepto})", codigo, economics.ingreso_total, f"{price:,} x {volumen}")

    applicable = _applicable_costs(catalog, item, volumen, mix)
    for bucket in _STEP_ORDER:
        for cost, quantity in applicable:
            if bucket_of(cost) != bucket:
                continue
            amount = quantity * unit_cost(cost, price, year, macro, config.anio_inicio)
            walk.add(StepKind.OUTFLOW, cost.concepto, cost.codigo, -amount, _cost_formula(cost, price, quantity))
        if bucket == CostBucket.PROFESSIONAL_PAYOUT and economics.pago_profesional:
            payout = economics.pago_profesional
            rate = constants.tasa_retefuente_servicios
            walk.add(
                StepKind.TAX,
                "Withholding assumed (gross-up)",
                "RETEFUENTE",
                -economics.retefuente,
                f"{payout:,.0f} / (1 - {rate:.2%}) - {payout:,.0f}",
            )
            walk.add(
                StepKind.TAX,
                "GMF on disbursement",
                "GMF",
                -economics.gmf,
                f"({payout:,.0f} + {economics.retefuente:,.0f}) x {constants.tasa_gmf:.2%}",
            )

    margen = walk.acumulado
    margen_pct = safe_ratio(margen, economics.ingreso_total)
    walk.info(StepKind.INFO, "Contribution margin", "MC", margen, f"{margen_pct:.2%} of gross revenue", margen)

    margen_unitario = margen / volumen
    punto_equilibrio = math.ceil(gastos_fijos / margen_unitario) if margen_unitario > 0 else None
    objetivo = margen_unitario - price * constants.margen_neto_objetivo
    volumen_objetivo = math.ceil(gastos_fijos / objetivo) if objetivo > 0 else None
    walk.info(
        StepKind.INFO,
        "Break-even units per month",
        "PE",
        punto_equilibrio if punto_equilibrio is not None else 0,
        f"{gastos_fijos:,.0f} / {margen_unitario:,.0f}",
        margen,
    )

    ica = economics.ingreso_total * constants.tasa_ica
    walk.info(
        StepKind.TAX,
        "ICA on gross revenue",
        "ICA",
        -ica,
        f"{economics.ingreso_total:,.0f} x {constants.tasa_ica:.3%}",
        margen - ica,
    )

    checks = _audit(economics, constants, mix, margen, ica, booked.ica, applicable)
    alerts = _diagnostic_alerts(constants, checks, margen_pct, economics.retefuente, economics.pago_profesional)
    log.debug("unit_diagnostic_built", codigo=codigo, anio=year, margen_pct=margen_pct, alertas=len(alerts))

    return UnitDiagnostic(
        codigo=codigo,
        anio=year,
        volumen=volumen,
        precio_entrada=economics.ingreso_total,
        mix_digital=mix,
        mix_rural=1 - mix,
        flujo=walk.steps,
        margen_contribucion=margen,
        margen_contribucion_pct=margen_pct,
        ica=ica,
        gastos_fijos=gastos_fijos,
        punto_equilibrio_unidades=punto_equilibrio,
        volumen_objetivo=volumen_objetivo,
        verificaciones=checks,
        alertas=alerts,
    )


def _applicable_costs(
    catalog: CatalogSnapshot, item: CatalogItem, volumen: int, mix: float
) -> List[Tuple[CatalogItem, float]]:
    applicable: List[Tuple[CatalogItem, float]] = []
    for cost in catalog.costos_variables:
        if not cost.activo:
            continue
        quantity = driver_volume(cost, item, volumen, mix)
        if quantity:
            applicable.append((cost, quantity))
    return applicable


def _cost_formula(cost: CatalogItem, price: int, quantity: float) -> str:
    if cost.es_porcentaje:
        return f"{price:,} x {cost.valor_unitario:.0%} x {quantity:g}"
    return f"{cost.valor_unitario:,.0f} x {quantity:g}"


def _audit(
    economics: UnitEconomics,
    constants: FiscalConstants,
    mix: float,
    margen: float,
    ica: float,
    booked_ica: int,
    applicable: List[Tuple[CatalogItem, float]],
) -> DiagnosticChecks:
    tolerancia = constants.tolerancia_cuadre
    expected = gross_up(economics.pago_profesional, constants.tasa_retefuente_servicios)
    gateways = [cost for cost, _ in applicable if bucket_of(cost) == CostBucket.GATEWAY]
    return DiagnosticChecks(
        gross_up_correcto=abs(expected.base_gravable - economics.pago_profesional - economics.retefuente) < tolerancia,
        sms_solo_rural=economics.sms == 0 or mix < 1,
        pasarela_segmentada=all(cost.base_calculo in _CHANNEL_BASES for cost in gateways),
        ica_sobre_ingresos=abs(ica - booked_ica) <= tolerancia,
        infraestructura_escalable=economics.infraestructura > 0,
        flujo_cuadra=abs(margen - economics.margen_contribucion) < tolerancia,
    )


def _diagnostic_alerts(
    constants: FiscalConstants,
    checks: DiagnosticChecks,
    margen_pct: float,
    retefuente: float,
    payout: float,
) -> List[Alert]:
    alerts: List[Alert] = []
    minimo = constants.margen_contribucion_minimo

    if margen_pct < 0:
        alerts.append(
            Alert(
                codigo="margen_negativo",
                severidad=AlertSeverity.CRITICAL,
                categoria=AlertCategory.PROFITABILITY,
                titulo="Every sale loses money",
                descripcion="Contribution margin is negative.",
                valor_actual=margen_pct * 100,
                benchmark=minimo * 100,
                accion_recomendada="Review the cost structure or raise the price",
            )
        )
    elif margen_pct < minimo:
        alerts.append(
            Alert(
                codigo="margen_bajo",
                severidad=AlertSeverity.HIGH,
                categoria=AlertCategory.PROFITABILITY,
                titulo="Contribution margin too thin",
                descripcion=f"Margin of {margen_pct:.2%} cannot cover fixed costs.",
                valor_actual=margen_pct * 100,
                benchmark=minimo * 100,
                accion_recomendada="Review the cost structure or raise the price",
            )
        )

    if not checks.gross_up_correcto:
        alerts.append(
            Alert(
                codigo="gross_up_incorrecto",
                severidad=AlertSeverity.CRITICAL,
                categoria=AlertCategory.CONSISTENCY,
                titulo="Withholding gross-up miscalculated",
                descripcion="Assumed withholding does not match net / (1 - rate) - net.",
                valor_actual=retefuente,
                benchmark=withholding_for_net(payout, constants.tasa_retefuente_servicios),
                accion_recomendada="Compute withholding from the grossed-up base",
            )
        )

    if not checks.infraestructura_escalable:
        alerts.append(
            Alert(
                codigo="infraestructura_fija",
                severidad=AlertSeverity.MEDIUM,
                categoria=AlertCategory.EFFICIENCY,
                titulo="Infrastructure cost does not scale",
                descripcion="No per-transaction infrastructure cost applies to this item.",
                valor_actual=0,
                benchmark=0,
                accion_recomendada="Model cloud spend as a per-transaction cost",
            )
        )

    return sort_by_severity(alerts)
