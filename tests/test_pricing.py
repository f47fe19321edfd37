from __future__ import annotations

import pytest

from projection_app.models.parameters import MacroParameters, MacroTable
from projection_app.services.pricing import indexed_price, unit_economics_for_item


def test_indexed_price_same_year_is_identity(macro):
    assert indexed_price(150_000, 2026, 2026, macro) == 150_000
    assert indexed_price(99.6, 2027, 2027, macro) == 100


def test_indexed_price_compounds_each_year(macro):
    assert indexed_price(100_000, 2026, 2027, macro) == 104_500
    assert indexed_price(100_000, 2026, 2028, macro) == round(100_000 * 1.045 * 1.04)


def test_indexed_price_is_monotonic(macro):
    base = 150_000
    one = indexed_price(base, 2026, 2027, macro)
    two = indexed_price(base, 2026, 2028, macro)

    assert two > one > base


def test_indexed_price_skips_missing_years():
    table = MacroTable.from_list([MacroParameters(anio=2026, inflacion=0.045, trm=4200, tasa_renta=0.35, tasa_iva=0.19)])

    assert indexed_price(100_000, 2026, 2028, table) == 104_500


def test_unit_economics_gateway_and_payout(catalog, macro, constants):
    item = catalog.get_item_by_code("ING-001")

    economics = unit_economics_for_item(item, 100, 2026, macro, 0.7, catalog, constants, 2026)

    assert economics.ingreso_total == 15_000_000
    assert economics.pasarela == pytest.approx(671_000)
    assert economics.pago_profesional == pytest.approx(4_500_000)
    assert economics.sms == pytest.approx(30 * 150)
    assert economics.whatsapp == pytest.approx(100 * 250)
    assert economics.cumplimiento == pytest.approx(100 * 3_000)
    assert economics.infraestructura == pytest.approx(100 * 130)
    assert economics.retefuente == pytest.approx(4_500_000 * 0.11 / 0.89)
    assert economics.gmf == pytest.approx((4_500_000 + economics.retefuente) * 0.004)
    assert economics.margen_contribucion == pytest.approx(economics.ingreso_total - economics.costo_total)


def test_unit_economics_without_escrow_skips_compliance(catalog, macro, constants):
    item = catalog.get_item_by_code("ING-004")

    economics = unit_economics_for_item(item, 10, 2026, macro, 0.7, catalog, constants, 2026)

    assert economics.cumplimiento == 0
    assert economics.pago_profesional == 0
    assert economics.retefuente == 0


def test_unit_economics_zero_volume_is_all_zero(catalog, macro, constants):
    item = catalog.get_item_by_code("ING-002")

    economics = unit_economics_for_item(item, 0, 2027, macro, 0.7, catalog, constants, 2026)

    assert economics.ingreso_total == 0
    assert economics.costo_total == 0
    assert economics.margen_contribucion == 0
    assert economics.margen_pct == 0


def test_full_digital_mix_has_no_sms(catalog, macro, constants):
    item = catalog.get_item_by_code("ING-001")

    economics = unit_economics_for_item(item, 100, 2026, macro, 1.0, catalog, constants, 2026)

    assert economics.sms == 0
    assert economics.pasarela == pytest.approx(100 * 6_500)
