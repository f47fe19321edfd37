from __future__ import annotations

from typing import List, Optional, Sequence

from ..models.alerts import Alert, AlertCategory, AlertSeverity
from ..models.metrics import SimpleUnitEconomics
from ..models.parameters import FiscalConstants
from ..models.statements import BalanceSheet, CashFlowStatement
from ..models.triangulation import TriangulationResult

_SEVERITY_ORDER = {AlertSeverity.CRITICAL: 0, AlertSeverity.HIGH: 1, AlertSeverity.MEDIUM: 2}


def sort_by_severity(alerts: Sequence[Alert]) -> List[Alert]:
    return sorted(alerts, key=lambda alert: _SEVERITY_ORDER[alert.severidad])


def negative_operating_streak(flows: Sequence[CashFlowStatement]) -> int:
    """Consecutive trailing periods with negative operating cash flow."""
    streak = 0
    for flow in reversed(flows):
        if flow.flujo_operativo >= 0:
            break
        streak += 1
    return streak


def detect_alerts(
    constants: FiscalConstants,
    runway_meses: Optional[float] = None,
    unit_economics: Optional[SimpleUnitEconomics] = None,
    churn_mensual: Optional[float] = None,
    balance: Optional[BalanceSheet] = None,
    triangulation: Optional[TriangulationResult] = None,
    meses_flujo_negativo: int = 0,
) -> List[Alert]:
    alerts: List[Alert] = []

    if runway_meses is not None and runway_meses < constants.runway_critico:
        alerts.append(
            Alert(
                codigo="runway_critico",
                severidad=AlertSeverity.CRITICAL,
                categoria=AlertCategory.LIQUIDITY,
                titulo=f"Runway below {constants.runway_critico:g} months",
                descripcion=f"At the current burn rate only {runway_meses:.1f} months of operation remain.",
                valor_actual=runway_meses,
                benchmark=constants.runway_critico,
                accion_recomendada="Raise funding or cut monthly burn",
            )
        )

    if unit_economics is not None:
        ratio = unit_economics.ltv_cac_ratio
        if 0 < ratio < constants.ltv_cac_minimo:
            alerts.append(
                Alert(
                    codigo="ltv_cac_bajo",
                    severidad=AlertSeverity.CRITICAL,
                    categoria=AlertCategory.EFFICIENCY,
                    titulo=f"LTV/CAC below {constants.ltv_cac_minimo:g}",
                    descripcion=f"Current ratio {ratio:.2f}; each acquired customer destroys value.",
                    valor_actual=ratio,
                    benchmark=constants.ltv_cac_minimo,
                    accion_recomendada="Lower acquisition cost or raise lifetime value",
                )
            )
        if unit_economics.cac > constants.cac_maximo:
            alerts.append(
                Alert(
                    codigo="cac_elevado",
                    severidad=AlertSeverity.HIGH,
                    categoria=AlertCategory.EFFICIENCY,
                    titulo="Acquisition cost above benchmark",
                    descripcion=f"CAC {unit_economics.cac:,.0f} exceeds {constants.cac_maximo:,.0f}.",
                    valor_actual=unit_economics.cac,
                    benchmark=constants.cac_maximo,
                    accion_recomendada="Optimise acquisition channels and conversion",
                )
            )

    if balance is not None and not balance.ecuacion_patrimonial.valido:
        alerts.append(
            Alert(
                codigo="balance_descuadrado",
                severidad=AlertSeverity.CRITICAL,
                categoria=AlertCategory.PROFITABILITY,
                titulo="Balance sheet does not balance",
                descripcion=f"Accounting equation off by {balance.ecuacion_patrimonial.diferencia:,.0f}.",
                valor_actual=balance.ecuacion_patrimonial.diferencia,
                benchmark=constants.tolerancia_cuadre,
                accion_recomendada="Review asset, liability and equity inputs",
            )
        )

    if triangulation is not None:
        for error in triangulation.errores:
            alerts.append(
                Alert(
                    codigo=f"triangulacion_{error.tipo.value}",
                    severidad=AlertSeverity.CRITICAL,
                    categoria=AlertCategory.CONSISTENCY,
                    titulo="Statements do not reconcile",
                    descripcion=error.mensaje,
                    valor_actual=error.diferencia,
                    benchmark=constants.tolerancia_cuadre,
                    accion_recomendada="Rebuild the three statements from the same projection",
                )
            )

    if churn_mensual is not None and churn_mensual > constants.churn_maximo:
        alerts.append(
            Alert(
                codigo="churn_elevado",
                severidad=AlertSeverity.HIGH,
                categoria=AlertCategory.EFFICIENCY,
                titulo="High monthly churn",
                descripcion=f"Churn {churn_mensual * 100:.1f}% (maximum {constants.churn_maximo * 100:.1f}%).",
                valor_actual=churn_mensual * 100,
                benchmark=constants.churn_maximo * 100,
                accion_recomendada="Invest in retention",
            )
        )

    if meses_flujo_negativo >= constants.meses_flujo_negativo:
        alerts.append(
            Alert(
                codigo="flujo_negativo",
                severidad=AlertSeverity.HIGH,
                categoria=AlertCategory.LIQUIDITY,
                titulo="Persistent negative operating cash flow",
                descripcion=f"{meses_flujo_negativo} consecutive months with negative operating cash flow.",
                valor_actual=meses_flujo_negativo,
                benchmark=constants.meses_flujo_negativo - 1,
                accion_recomendada="Review cost structure and speed up collections",
            )
        )

    return sort_by_severity(alerts)
