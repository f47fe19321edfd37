from __future__ import annotations

import pytest

from projection_app.models.statements import BalanceSheetInputs
from projection_app.models.triangulation import MismatchKind
from projection_app.sample_data import build_sample_volumes
from projection_app.services.balance_sheet import build_balance_sheet
from projection_app.services.cash_flow import build_cash_flow
from projection_app.services.triangulation import validate_triangulation

# Opening cash is capital less the 90M already invested in fixed assets.
OPENING_CASH = 410_000_000


@pytest.fixture
def balance_inputs(engine, config):
    projection = engine.project_month(2026, 5, build_sample_volumes(), config, depreciacion=333_333, amortizacion=2_077_778)
    cash_flow = build_cash_flow(projection, OPENING_CASH, config)
    inputs = BalanceSheetInputs(
        anio=projection.anio,
        mes=projection.mes,
        utilidad_neta=projection.utilidad_neta,
        depreciacion=projection.depreciacion,
        amortizacion=projection.amortizacion,
        ingresos_brutos=projection.ingresos_brutos,
        costo_ventas=projection.total_costos_directos,
        efectivo=cash_flow.saldo_final,
        capital_social=config.capital_inicial,
        dias_cartera=config.dias_cartera,
        dias_proveedores=config.dias_proveedores,
        ppe_bruto_inicial=12_000_000,
        software_bruto_inicial=78_000_000,
    )
    return projection, inputs, cash_flow


@pytest.fixture
def statements(balance_inputs):
    projection, inputs, cash_flow = balance_inputs
    return projection, build_balance_sheet(inputs), cash_flow


def test_statements_from_same_projection_validate(statements):
    projection, balance, cash_flow = statements

    result = validate_triangulation(projection.utilidad_neta, balance, cash_flow)

    assert result.valido
    assert result.errores == []
    assert result.validaciones.balance_cuadra
    assert result.validaciones.utilidad_cierra
    assert result.validaciones.flujo_concilia
    assert result.validaciones.efectivo_concilia
    assert result.metricas.efectivo_balance == result.metricas.efectivo_flujo


def test_perturbed_cash_is_reported(statements):
    projection, balance, cash_flow = statements

    result = validate_triangulation(projection.utilidad_neta, balance.with_cash(balance.efectivo + 1_000), cash_flow)

    assert not result.valido
    assert not result.validaciones.efectivo_concilia
    mismatches = result.errors_of(MismatchKind.CASH)
    assert len(mismatches) == 1
    assert mismatches[0].diferencia == 1_000


def test_unbalanced_openings_are_reported(balance_inputs):
    projection, inputs, cash_flow = balance_inputs
    balance = build_balance_sheet(inputs.model_copy(update={"capital_social": inputs.capital_social + 5_000_000}))

    result = validate_triangulation(projection.utilidad_neta, balance, cash_flow)

    assert not result.validaciones.balance_cuadra
    assert result.validaciones.efectivo_concilia
    mismatches = result.errors_of(MismatchKind.BALANCE)
    assert len(mismatches) == 1
    assert mismatches[0].diferencia == -5_000_000


def test_all_mismatches_are_accumulated(balance_inputs):
    projection, inputs, cash_flow = balance_inputs
    broken_flow = cash_flow.model_copy(update={"concilia_con_balance": False, "saldo_final": cash_flow.saldo_final + 10})
    broken_balance = build_balance_sheet(inputs.model_copy(update={"capital_social": inputs.capital_social + 5}))

    result = validate_triangulation(projection.utilidad_neta + 500, broken_balance, broken_flow)

    kinds = {error.tipo for error in result.errores}
    assert kinds == {MismatchKind.BALANCE, MismatchKind.NET_INCOME, MismatchKind.CASH_FLOW, MismatchKind.CASH}
    assert not result.valido


def test_working_capital_line_is_reported(statements):
    projection, balance, cash_flow = statements

    result = validate_triangulation(projection.utilidad_neta, balance, cash_flow)

    assert result.metricas.capital_trabajo_devengado == (
        balance.activos_corrientes.cuentas_por_cobrar - balance.pasivos_corrientes.total_corriente
    )


def test_sub_unit_differences_are_tolerated(statements):
    projection, balance, cash_flow = statements

    result = validate_triangulation(projection.utilidad_neta + 0.4, balance, cash_flow)

    assert result.valido
    assert result.metricas.utilidad_pyl == pytest.approx(projection.utilidad_neta + 0.4)
