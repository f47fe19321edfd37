from __future__ import annotations

import pytest

from projection_app.models.capex import CapexItem, CapexPlan
from projection_app.models.triangulation import OpeningBalances
from projection_app.sample_data import build_sample_volumes
from projection_app.services.statements import StatementBuilder
from projection_app.services.volumes import expand_volumes


@pytest.fixture
def short_config(config):
    return config.model_copy(update={"anio_fin": 2027})


@pytest.fixture
def builder(catalog, macro, constants):
    return StatementBuilder(catalog, macro, constants)


def test_sample_run_triangulates_every_period(builder, short_config):
    run = builder.run(short_config, expand_volumes(build_sample_volumes(), short_config))

    assert [year.anio for year in run.anios] == [2026, 2027]
    assert run.valido
    for year in run.anios:
        assert year.triangulacion.valido
        assert len(year.meses) == 12
        assert all(month.triangulacion.valido for month in year.meses)


def test_cash_rolls_from_capital_and_between_years(builder, short_config):
    run = builder.run(short_config, expand_volumes(build_sample_volumes(), short_config))
    first, second = run.anios

    assert first.meses[0].flujo_caja.saldo_inicial == 500_000_000
    assert first.flujo_caja.saldo_final == first.meses[-1].flujo_caja.saldo_final
    assert first.balance.efectivo == first.flujo_caja.saldo_final
    assert second.meses[0].flujo_caja.saldo_inicial == first.balance.efectivo
    for previous, current in zip(first.meses, first.meses[1:]):
        assert current.flujo_caja.saldo_inicial == previous.flujo_caja.saldo_final


def test_catalog_capex_is_invested_and_depreciated(builder, short_config):
    run = builder.run(short_config, expand_volumes(build_sample_volumes(), short_config))
    january = run.anios[0].meses[0]

    assert january.flujo_caja.flujo_inversion == -90_000_000
    assert january.proyeccion.depreciacion == round(12_000_000 / 36)
    assert january.proyeccion.amortizacion == round(70_000_000 / 36 + 8_000_000 / 60)
    assert january.balance.activos_no_corrientes.software_desarrollo == 78_000_000
    assert run.anios[0].meses[1].flujo_caja.flujo_inversion == 0


def test_income_statement_matches_balance(builder, short_config):
    run = builder.run(short_config, expand_volumes(build_sample_volumes(), short_config))

    for year in run.anios:
        assert year.estado_resultados.utilidad_neta == year.balance.patrimonio.utilidad_del_ejercicio
        assert year.estado_resultados.utilidad_neta == year.proyeccion.totales.utilidad_neta


def test_equity_rolls_forward_between_years(builder, short_config):
    run = builder.run(short_config, expand_volumes(build_sample_volumes(), short_config))
    first, second = run.anios
    closing = first.balance.patrimonio
    opening_retained = closing.utilidades_retenidas + closing.utilidad_del_ejercicio

    equity = second.balance.patrimonio

    expected_reserve = closing.reserva_legal + 0.10 * max(0, second.proyeccion.totales.utilidad_neta)
    assert equity.reserva_legal == pytest.approx(expected_reserve, abs=1)
    assert equity.reserva_legal + equity.utilidades_retenidas == closing.reserva_legal + opening_retained
    assert equity.utilidad_del_ejercicio == second.proyeccion.totales.utilidad_neta


def test_custom_capex_and_opening_balances(builder, short_config):
    plan = CapexPlan(items=[CapexItem(codigo="SRV", anio=2027, mes=3, monto=24_000_000, vida_util_meses=24)])
    opening = OpeningBalances(efectivo=80_000_000, capital_social=80_000_000)

    run = builder.run(short_config, {}, capex_plan=plan, opening=opening)
    second = run.anios[1]

    assert run.anios[0].meses[0].flujo_caja.saldo_inicial == 80_000_000
    assert second.meses[2].flujo_caja.flujo_inversion == -24_000_000
    assert second.meses[2].proyeccion.depreciacion == 1_000_000
    assert second.meses[1].proyeccion.depreciacion == 0
    assert run.valido
