from __future__ import annotations

import pytest

from projection_app.errors import CatalogError, ConfigurationError
from projection_app.models.catalog import CostBasis
from projection_app.models.diagnostics import StepKind
from projection_app.services.diagnostics import diagnose_unit
from projection_app.services.pricing import unit_economics_for_item


def _with_costs(catalog, **updates):
    costs = tuple(cost.model_copy(update=updates[cost.codigo]) if cost.codigo in updates else cost for cost in catalog.costos_variables)
    return catalog.model_copy(update={"costos_variables": costs})


def test_money_walk_follows_the_sale(catalog, macro, constants, config):
    diagnostic = diagnose_unit("ING-001", catalog, macro, constants, config, gastos_fijos=10_000_000)

    codes = [step.codigo for step in diagnostic.flujo]
    assert codes == [
        "ING-001",
        "C-VAR-06",
        "C-VAR-07",
        "C-VAR-09",
        "C-VAR-01",
        "RETEFUENTE",
        "GMF",
        "C-VAR-10",
        "C-VAR-08",
        "C-VAR-11",
        "MC",
        "PE",
        "ICA",
    ]
    assert [step.orden for step in diagnostic.flujo] == list(range(1, 14))
    assert diagnostic.flujo[0].tipo == StepKind.INFLOW
    assert diagnostic.flujo[0].monto == 150_000
    amounts = {step.codigo: step.monto for step in diagnostic.flujo}
    assert amounts["C-VAR-06"] == pytest.approx(-4_550)
    assert amounts["C-VAR-07"] == pytest.approx(-2_160)
    assert amounts["C-VAR-09"] == pytest.approx(-45)
    assert amounts["C-VAR-01"] == pytest.approx(-45_000)
    assert amounts["RETEFUENTE"] == pytest.approx(-45_000 * 0.11 / 0.89)
    assert amounts["GMF"] == pytest.approx(-(45_000 + 45_000 * 0.11 / 0.89) * 0.004)


def test_contribution_margin_matches_unit_economics(catalog, macro, constants, config):
    diagnostic = diagnose_unit("ING-001", catalog, macro, constants, config, volumen=3, gastos_fijos=10_000_000)
    item = catalog.get_item_by_code("ING-001")
    economics = unit_economics_for_item(
        item, 3, 2026, macro, config.mix_pago_digital, catalog, constants, config.anio_inicio
    )

    assert diagnostic.margen_contribucion == pytest.approx(economics.margen_contribucion)
    assert diagnostic.margen_contribucion_pct == pytest.approx(economics.margen_contribucion / 450_000)
    assert diagnostic.verificaciones.flujo_cuadra
    assert diagnostic.flujo[-1].acumulado == pytest.approx(diagnostic.margen_contribucion - diagnostic.ica)


def test_break_even_and_target_volume(catalog, macro, constants, config):
    diagnostic = diagnose_unit("ING-001", catalog, macro, constants, config, gastos_fijos=10_000_000)

    assert diagnostic.margen_contribucion == pytest.approx(89_100.955, abs=0.01)
    assert diagnostic.punto_equilibrio_unidades == 113
    assert diagnostic.volumen_objetivo == 151
    assert diagnostic.ica == pytest.approx(150_000 * constants.tasa_ica)


def test_fixed_costs_default_to_recurring_opex(catalog, macro, constants, config, engine):
    diagnostic = diagnose_unit("ING-001", catalog, macro, constants, config)

    assert diagnostic.gastos_fijos == engine.project_month(2026, 12, {}, config).total_opex
    assert diagnostic.gastos_fijos > 0


def test_sample_item_passes_every_audit(catalog, macro, constants, config):
    diagnostic = diagnose_unit("ING-001", catalog, macro, constants, config, gastos_fijos=10_000_000)
    checks = diagnostic.verificaciones

    assert checks.gross_up_correcto
    assert checks.sms_solo_rural
    assert checks.pasarela_segmentada
    assert checks.ica_sobre_ingresos
    assert checks.infraestructura_escalable
    assert diagnostic.alertas == []


def test_unsegmented_channel_costs_fail_audit(catalog, macro, constants, config):
    flat = _with_costs(
        catalog,
        **{
            "C-VAR-06": {"base_calculo": CostBasis.TRANSACTIONAL_VOLUME},
            "C-VAR-09": {"base_calculo": CostBasis.TRANSACTIONAL_VOLUME},
        },
    )

    diagnostic = diagnose_unit("ING-001", flat, macro, constants, config, mix_digital=1.0, gastos_fijos=10_000_000)

    assert diagnostic.mix_rural == 0
    assert not diagnostic.verificaciones.sms_solo_rural
    assert not diagnostic.verificaciones.pasarela_segmentada


def test_missing_infrastructure_cost_is_flagged(catalog, macro, constants, config):
    without_infra = _with_costs(catalog, **{"C-VAR-11": {"activo": False}})

    diagnostic = diagnose_unit("ING-001", without_infra, macro, constants, config, gastos_fijos=10_000_000)

    assert not diagnostic.verificaciones.infraestructura_escalable
    assert [alert.codigo for alert in diagnostic.alertas] == ["infraestructura_fija"]


def test_price_below_costs_is_critical(catalog, macro, constants, config):
    cheap = catalog.with_overrides({"ING-001": 10_000})

    diagnostic = diagnose_unit("ING-001", cheap, macro, constants, config, gastos_fijos=10_000_000)

    assert diagnostic.margen_contribucion < 0
    assert diagnostic.punto_equilibrio_unidades is None
    assert diagnostic.volumen_objetivo is None
    assert diagnostic.alertas[0].codigo == "margen_negativo"


def test_thin_margin_is_flagged(catalog, macro, constants, config):
    strict = constants.model_copy(update={"margen_contribucion_minimo": 0.80})

    diagnostic = diagnose_unit("ING-001", catalog, macro, strict, config, gastos_fijos=10_000_000)

    assert [alert.codigo for alert in diagnostic.alertas] == ["margen_bajo"]


def test_items_without_payout_skip_withholding(catalog, macro, constants, config):
    diagnostic = diagnose_unit("ING-005", catalog, macro, constants, config, gastos_fijos=10_000_000)

    codes = [step.codigo for step in diagnostic.flujo]
    assert "RETEFUENTE" not in codes
    assert "GMF" not in codes
    assert diagnostic.verificaciones.gross_up_correcto


@pytest.mark.parametrize("codigo", ["ING-404", "C-VAR-01"])
def test_unknown_or_non_revenue_code_is_rejected(catalog, macro, constants, config, codigo):
    with pytest.raises(CatalogError):
        diagnose_unit(codigo, catalog, macro, constants, config)


def test_invalid_volume_or_mix_is_rejected(catalog, macro, constants, config):
    with pytest.raises(ConfigurationError):
        diagnose_unit("ING-001", catalog, macro, constants, config, volumen=0)
    with pytest.raises(ConfigurationError):
        diagnose_unit("ING-001", catalog, macro, constants, config, mix_digital=1.5)
