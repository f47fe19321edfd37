from __future__ import annotations

from typing import Dict

from ..models.catalog import CatalogSnapshot
from ..models.common import pct, period_label
from ..models.projection import AnnualProjection
from ..models.statements import (
    AdministrationExpenses,
    CostOfSales,
    IncomeStatement,
    OperatingExpenses,
    RevenueByType,
    SalesExpenses,
)

# Catalog sub-category -> ERI revenue line; anything else lands in "otros".
REVENUE_TYPES: Dict[str, str] = {
    "B2C": "servicios_legales",
    "Premium": "servicios_legales",
    "Recurrente": "suscripciones",
    "Micro-servicio": "productos_digitales",
    "SaaS": "productos_digitales",
}


def _revenue_by_type(annual: AnnualProjection, catalog: CatalogSnapshot) -> RevenueByType:
    lines = {"servicios_legales": 0, "suscripciones": 0, "productos_digitales": 0}
    for codigo, amount in annual.ingresos_por_item.items():
        item = catalog.get_item_by_code(codigo)
        line = REVENUE_TYPES.get(item.sub_categoria) if item is not None else None
        if line is not None:
            lines[line] += amount
    total = annual.totales.ingresos_brutos
    return RevenueByType(**lines, otros=total - sum(lines.values()), total=total)


def build_income_statement(annual: AnnualProjection, catalog: CatalogSnapshot) -> IncomeStatement:
    """Reclassify an annual projection into the ERI layout.

    Every line is taken from the already-rounded projection totals, so the
    revenue breakdown adds up to the projected revenue exactly.
    """
    totals = annual.totales
    ingresos = _revenue_by_type(annual, catalog)

    pagos_profesionales = totals.pagos_profesionales + totals.retefuente_asumida + totals.gmf
    costo_ventas = CostOfSales(
        pagos_profesionales=pagos_profesionales,
        costos_pasarela=totals.pasarela,
        costos_transaccionales=totals.total_costos_directos - pagos_profesionales - totals.pasarela,
        total=totals.total_costos_directos,
    )
    utilidad_bruta = ingresos.total - costo_ventas.total

    depreciacion_amortizacion = totals.depreciacion + totals.amortizacion
    administracion = AdministrationExpenses(
        personal=totals.nomina,
        administrativos=totals.administrativos,
        tecnologia=totals.tecnologia,
        depreciacion_amortizacion=depreciacion_amortizacion,
        total=totals.nomina + totals.administrativos + totals.tecnologia + depreciacion_amortizacion,
    )
    ventas = SalesExpenses(marketing=totals.marketing, total=totals.marketing)
    gastos = OperatingExpenses(
        administracion=administracion,
        ventas=ventas,
        total_gastos_operacionales=administracion.total + ventas.total,
    )

    ebitda = utilidad_bruta - (gastos.total_gastos_operacionales - depreciacion_amortizacion)
    utilidad_operacional = utilidad_bruta - gastos.total_gastos_operacionales
    utilidad_antes_impuestos = utilidad_operacional - totals.ica
    utilidad_neta = utilidad_antes_impuestos - totals.provision_renta

    return IncomeStatement(
        periodo=period_label(annual.anio),
        anio_fiscal=annual.anio,
        ingresos_ordinarios=ingresos,
        costo_ventas=costo_ventas,
        utilidad_bruta=utilidad_bruta,
        margen_bruto_pct=pct(utilidad_bruta, ingresos.total),
        gastos_operacionales=gastos,
        ebitda=ebitda,
        margen_ebitda_pct=pct(ebitda, ingresos.total),
        utilidad_operacional=utilidad_operacional,
        margen_operacional_pct=pct(utilidad_operacional, ingresos.total),
        ica=totals.ica,
        utilidad_antes_impuestos=utilidad_antes_impuestos,
        impuesto_renta=totals.provision_renta,
        utilidad_neta=utilidad_neta,
        margen_neto_pct=pct(utilidad_neta, ingresos.total),
    )
