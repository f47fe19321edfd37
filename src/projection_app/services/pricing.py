from __future__ import annotations

from typing import Dict

from ..logging_config import get_logger
from ..models.catalog import CatalogItem, CatalogSnapshot, CostBasis, CostBucket
from ..models.common import pct
from ..models.parameters import FiscalConstants, MacroTable
from ..models.projection import UnitEconomics
from .metrics import withholding_for_net

log = get_logger(__name__)


def indexed_price(base: float, base_year: int, target_year: int, macro: MacroTable) -> int:
    """Compound a base-year price up to ``target_year``.

    Each year from ``base_year`` up to (not including) ``target_year`` adds its
    inflation; years missing from the table add none.
    """
    price = base
    for year in range(base_year, target_year):
        params = macro.find(year)
        if params is None:
            log.debug("inflation_year_missing", anio=year)
            continue
        price *= 1 + params.inflacion
    return round(price)


def bucket_of(cost: CatalogItem) -> CostBucket:
    return cost.rubro or CostBucket.INFRASTRUCTURE


def driver_volume(cost: CatalogItem, revenue: CatalogItem, volume: float, digital_mix: float) -> float:
    """Units of ``cost`` consumed when ``volume`` units of ``revenue`` are sold."""
    basis = cost.base_calculo
    if basis in (CostBasis.LINKED_VALUE, CostBasis.LINKED_VOLUME):
        return volume if cost.vinculado_a == revenue.codigo else 0.0
    if basis == CostBasis.TRANSACTIONAL_VOLUME:
        return volume
    if basis == CostBasis.ESCROW_VOLUME:
        return volume if revenue.genera_escrow else 0.0
    if basis == CostBasis.DIGITAL_VOLUME:
        return volume * digital_mix
    if basis == CostBasis.CASH_VOLUME:
        return volume * (1 - digital_mix)
    # OWN_VOLUME costs are driven by their own code, not by a sale.
    return 0.0


def unit_cost(cost: CatalogItem, price: float, year: int, macro: MacroTable, base_year: int) -> float:
    if cost.es_porcentaje:
        return price * cost.valor_unitario
    return indexed_price(cost.valor_unitario, base_year, year, macro)


def unit_economics_for_item(
    item: CatalogItem,
    volume: int,
    year: int,
    macro: MacroTable,
    digital_mix: float,
    catalog: CatalogSnapshot,
    constants: FiscalConstants,
    base_year: int,
) -> UnitEconomics:
    volume = max(0, volume)
    price = indexed_price(item.valor_unitario, base_year, year, macro)
    ingreso_total = float(price * volume)

    buckets: Dict[CostBucket, float] = {bucket: 0.0 for bucket in CostBucket}
    if volume:
        for cost in catalog.costos_variables:
            if not cost.activo:
                continue
            quantity = driver_volume(cost, item, volume, digital_mix)
            if quantity:
                buckets[bucket_of(cost)] += quantity * unit_cost(cost, price, year, macro, base_year)

    payout = buckets[CostBucket.PROFESSIONAL_PAYOUT]
    retefuente = withholding_for_net(payout, constants.tasa_retefuente_servicios)
    gmf = (payout + retefuente) * constants.tasa_gmf
    costo_total = sum(buckets.values()) + retefuente + gmf
    margen = ingreso_total - costo_total

    return UnitEconomics(
        codigo=item.codigo,
        volumen=volume,
        precio_indexado=price,
        ingreso_total=ingreso_total,
        pago_profesional=payout,
        retefuente=retefuente,
        gmf=gmf,
        pasarela=buckets[CostBucket.GATEWAY],
        sms=buckets[CostBucket.SMS],
        whatsapp=buckets[CostBucket.WHATSAPP],
        cumplimiento=buckets[CostBucket.COMPLIANCE],
        infraestructura=buckets[CostBucket.INFRASTRUCTURE],
        costo_total=costo_total,
        margen_contribucion=margen,
        margen_pct=pct(margen, ingreso_total),
    )
