from __future__ import annotations

import pytest

from projection_app.errors import ProjectionError
from projection_app.sample_data import build_sample_volumes
from projection_app.services.cash_flow import build_cash_flow, sum_cash_flows


def test_ending_cash_follows_from_net_flow(engine, config):
    month = engine.project_month(2026, 4, build_sample_volumes(), config, depreciacion=333_333, amortizacion=2_077_778)

    flow = build_cash_flow(month, 100_000_000, config, capex=5_000_000, aportes=20_000_000)

    assert flow.saldo_inicial == 100_000_000
    assert flow.saldo_final == flow.saldo_inicial + flow.flujo_neto
    assert flow.concilia_con_balance
    assert flow.flujo_inversion == -5_000_000
    assert flow.flujo_financiacion == 20_000_000
    assert flow.flujo_neto == month.utilidad_neta + month.depreciacion + month.amortizacion - 5_000_000 + 20_000_000


def test_collections_split_by_digital_mix(engine, config):
    month = engine.project_month(2026, 1, build_sample_volumes(), config)

    flow = build_cash_flow(month, 0, config)

    assert flow.cobro_clientes == month.ingresos_brutos + month.iva_generado
    assert flow.recaudo_pasarela + flow.recaudo_efectivo == flow.cobro_clientes
    assert flow.recaudo_pasarela == round(flow.cobro_clientes * config.mix_pago_digital)
    assert flow.pago_iva == month.iva_generado
    assert flow.pago_retefuente == month.retefuente_asumida
    assert flow.pago_renta == month.provision_renta


def test_operating_disbursements_cover_all_cash_costs(engine, config):
    month = engine.project_month(2026, 2, build_sample_volumes(), config)

    flow = build_cash_flow(month, 0, config)

    assert flow.total_salidas_operativas == month.total_costos_directos - month.retefuente_asumida + month.total_opex
    assert flow.flujo_operativo == flow.total_entradas - flow.total_salidas_operativas


def test_sum_cash_flows_chains_months(engine, config):
    flows = []
    cash = 500_000_000
    for month in range(1, 4):
        projection = engine.project_month(2026, month, build_sample_volumes(), config)
        flow = build_cash_flow(projection, cash, config)
        flows.append(flow)
        cash = flow.saldo_final

    quarter = sum_cash_flows(flows, "2026-Q1")

    assert quarter.periodo == "2026-Q1"
    assert quarter.saldo_inicial == 500_000_000
    assert quarter.saldo_final == flows[-1].saldo_final
    assert quarter.flujo_neto == sum(flow.flujo_neto for flow in flows)
    assert quarter.concilia_con_balance


def test_sum_cash_flows_flags_broken_chain(engine, config):
    projection = engine.project_month(2026, 1, build_sample_volumes(), config)
    first = build_cash_flow(projection, 0, config)
    second = build_cash_flow(projection, first.saldo_final + 1_000, config)

    combined = sum_cash_flows([first, second], "2026")

    assert not combined.concilia_con_balance
    assert combined.diferencia_con_balance == -1_000


def test_sum_cash_flows_requires_input():
    with pytest.raises(ProjectionError):
        sum_cash_flows([], "2026")
