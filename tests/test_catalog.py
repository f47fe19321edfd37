from __future__ import annotations

import pytest
from pydantic import ValidationError

from projection_app.errors import CatalogError
from projection_app.models.catalog import CatalogSnapshot, ItemKind


def _revenue(codigo: str, **extra):
    return {"codigo": codigo, "concepto": codigo, "tipo": "ingreso", "categoria": "Servicios", "valorUnitario": 1000, **extra}


def test_lookup_by_code(catalog):
    item = catalog.get_item_by_code("ING-001")

    assert item is not None
    assert item.valor_unitario == 150_000
    assert item.genera_escrow
    assert catalog.get_item_by_code("ING-999") is None


def test_linked_cost_points_back_to_revenue(catalog):
    cost = catalog.get_linked_cost("ING-001")

    assert cost is not None
    assert cost.codigo == "C-VAR-01"
    assert cost.valor_unitario == pytest.approx(0.30)
    assert catalog.get_linked_cost("ING-004") is None


def test_total_payroll_applies_benefits_factor(catalog):
    assert catalog.get_total_payroll(1.0) == pytest.approx(24_500_000)
    assert catalog.get_total_payroll(1.52) == pytest.approx(24_500_000 * 1.52)


def test_items_by_kind_and_capex_total(catalog):
    assert len(catalog.items_by_kind(ItemKind.REVENUE)) == 7
    assert {item.codigo for item in catalog.items_by_kind(ItemKind.CAPEX)} == {"INV-001", "INV-002", "INV-003"}
    assert catalog.get_capex_total() == pytest.approx(90_000_000)


def test_from_records_accepts_camel_case():
    snapshot = CatalogSnapshot.from_records(ingresos=[_revenue("ING-A", gravaIva=True)])

    assert snapshot.ingresos[0].grava_iva
    assert snapshot.to_wire()["ingresos"][0]["valorUnitario"] == 1000


def test_duplicate_codes_are_rejected():
    with pytest.raises(CatalogError):
        CatalogSnapshot.from_records(ingresos=[_revenue("ING-A"), _revenue("ING-A")])


def test_dangling_link_is_rejected():
    cost = {
        "codigo": "C-A",
        "concepto": "Pago",
        "tipo": "costo_variable",
        "categoria": "Costo Directo",
        "valorUnitario": 0.3,
        "esPorcentaje": True,
        "vinculadoA": "ING-MISSING",
    }
    with pytest.raises(CatalogError):
        CatalogSnapshot.from_records(ingresos=[_revenue("ING-A")], costos_variables=[cost])


def test_percentage_outside_unit_interval_is_rejected():
    with pytest.raises(CatalogError):
        CatalogSnapshot.from_records(ingresos=[_revenue("ING-A", esPorcentaje=True, valorUnitario=30)])


def test_overrides_produce_new_snapshot(catalog):
    updated = catalog.with_overrides({"ING-001": 180_000})

    assert updated is not catalog
    assert updated.get_item_by_code("ING-001").valor_unitario == 180_000
    assert catalog.get_item_by_code("ING-001").valor_unitario == 150_000
    assert catalog.with_overrides({}) is catalog


def test_overrides_are_validated(catalog):
    with pytest.raises(CatalogError):
        catalog.with_overrides({"C-VAR-01": 1.5})
    with pytest.raises(CatalogError):
        catalog.with_overrides({"ING-404": 10})


def test_snapshot_is_immutable(catalog):
    item = catalog.get_item_by_code("ING-001")

    with pytest.raises(ValidationError):
        item.valor_unitario = 1
