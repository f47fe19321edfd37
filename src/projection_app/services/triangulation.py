from __future__ import annotations

from typing import List

from ..logging_config import get_logger
from ..models.statements import BalanceSheet, CashFlowStatement
from ..models.triangulation import (
    MismatchKind,
    TriangulationChecks,
    TriangulationError,
    TriangulationMetrics,
    TriangulationResult,
)

log = get_logger(__name__)


def validate_triangulation(
    pl_net_income: float,
    balance: BalanceSheet,
    cash_flow: CashFlowStatement,
    tolerance: float = 1.0,
) -> TriangulationResult:
    """Cross-check income statement, balance sheet and cash flow for one period.

    Every check runs; mismatches are collected and returned, never raised.
    """
    errores: List[TriangulationError] = []

    ecuacion = balance.ecuacion_patrimonial
    balance_cuadra = ecuacion.valido
    if not balance_cuadra:
        errores.append(
            TriangulationError(
                tipo=MismatchKind.BALANCE,
                mensaje="Assets do not equal liabilities plus equity",
                valor_esperado=ecuacion.activos,
                valor_actual=ecuacion.pasivos + ecuacion.patrimonio,
                diferencia=ecuacion.diferencia,
            )
        )

    utilidad_balance = balance.patrimonio.utilidad_del_ejercicio
    utilidad_cierra = abs(pl_net_income - utilidad_balance) < tolerance
    if not utilidad_cierra:
        errores.append(
            TriangulationError(
                tipo=MismatchKind.NET_INCOME,
                mensaje="Net income in the income statement differs from the balance sheet",
                valor_esperado=pl_net_income,
                valor_actual=utilidad_balance,
                diferencia=pl_net_income - utilidad_balance,
            )
        )

    flujo_concilia = cash_flow.concilia_con_balance
    if not flujo_concilia:
        esperado = cash_flow.saldo_inicial + cash_flow.flujo_neto
        errores.append(
            TriangulationError(
                tipo=MismatchKind.CASH_FLOW,
                mensaje="Cash flow ending balance does not follow from opening balance and net flow",
                valor_esperado=esperado,
                valor_actual=cash_flow.saldo_final,
                diferencia=cash_flow.diferencia_con_balance or cash_flow.saldo_final - esperado,
            )
        )

    efectivo_concilia = abs(cash_flow.saldo_final - balance.efectivo) < tolerance
    if not efectivo_concilia:
        errores.append(
            TriangulationError(
                tipo=MismatchKind.CASH,
                mensaje="Balance sheet cash differs from cash flow ending balance",
                valor_esperado=cash_flow.saldo_final,
                valor_actual=balance.efectivo,
                diferencia=balance.efectivo - cash_flow.saldo_final,
            )
        )

    for error in errores:
        log.warning(
            "triangulation_mismatch",
            periodo=balance.periodo,
            tipo=error.tipo.value,
            diferencia=error.diferencia,
        )

    return TriangulationResult(
        valido=not errores,
        errores=errores,
        validaciones=TriangulationChecks(
            balance_cuadra=balance_cuadra,
            utilidad_cierra=utilidad_cierra,
            flujo_concilia=flujo_concilia,
            efectivo_concilia=efectivo_concilia,
        ),
        metricas=TriangulationMetrics(
            activos_totales=balance.total_activos,
            pasivos_totales=balance.total_pasivos,
            patrimonio_total=balance.patrimonio.total_patrimonio,
            efectivo_balance=balance.efectivo,
            efectivo_flujo=cash_flow.saldo_final,
            utilidad_pyl=pl_net_income,
            utilidad_balance=utilidad_balance,
            capital_trabajo_devengado=balance.patrimonio.capital_trabajo_devengado,
        ),
    )
