from __future__ import annotations

from collections import defaultdict
from typing import Dict, List, Mapping, Optional, Tuple, Union

from ..errors import ConfigurationError
from ..logging_config import get_logger
from ..models.catalog import CatalogItem, CatalogSnapshot, CostBasis, Frequency
from ..models.common import business_days, period_label, round_currency
from ..models.parameters import FiscalConstants, MacroParameters, MacroTable, ModelConfiguration
from ..models.projection import AnnualProjection, MonthlyProjection, PeriodFigures, UnitEconomics
from .pricing import bucket_of, indexed_price, unit_cost, unit_economics_for_item

log = get_logger(__name__)

VolumeMap = Mapping[str, int]
YearVolumes = Mapping[str, Union[int, Mapping[int, int]]]

_UNIT_BUCKETS = ("pago_profesional", "retefuente", "gmf", "pasarela", "sms", "whatsapp", "cumplimiento", "infraestructura")


def payroll_cost(num_empleados: int, salario_promedio: float, factor_prestacional: float) -> float:
    return num_empleados * salario_promedio * factor_prestacional


def month_volumes(volumes: YearVolumes, month: int) -> Dict[str, int]:
    """Resolve a yearly volume plan to a single month; a plain int applies to every month."""
    resolved: Dict[str, int] = {}
    for codigo, plan in volumes.items():
        if isinstance(plan, Mapping):
            resolved[codigo] = plan.get(month, 0)
        else:
            resolved[codigo] = plan
    return resolved


class ProjectionEngine:
    def __init__(self, catalog: CatalogSnapshot, macro: MacroTable, constants: FiscalConstants) -> None:
        self.catalog = catalog
        self.macro = macro
        self.constants = constants

    def project_month(
        self,
        year: int,
        month: int,
        volumes: VolumeMap,
        config: ModelConfiguration,
        depreciacion: float = 0.0,
        amortizacion: float = 0.0,
    ) -> MonthlyProjection:
        if not config.anio_inicio <= year <= config.anio_fin:
            raise ConfigurationError(f"Year {year} is outside the configured range {config.anio_inicio}-{config.anio_fin}")
        if not 1 <= month <= 12:
            raise ConfigurationError(f"Month {month} is not between 1 and 12")
        params = self.macro.get(year)
        self._warn_unknown_codes(year, month, volumes)

        revenue_by_item, iva_generado, unit_totals = self._compute_revenue(year, volumes, config, params)
        direct = self._compute_direct_costs(year, volumes, config, unit_totals)
        total_costos_directos = sum(direct.values())

        ingresos_brutos = sum(revenue_by_item.values())
        ingresos_netos = ingresos_brutos
        utilidad_bruta = ingresos_netos - total_costos_directos

        opex = self._compute_opex(year, month, config, ingresos_brutos)
        total_opex = sum(opex.values())
        ebitda = utilidad_bruta - total_opex

        depreciacion_mes = round_currency(depreciacion)
        amortizacion_mes = round_currency(amortizacion)
        utilidad_operacional = ebitda - depreciacion_mes - amortizacion_mes

        ica = round_currency(ingresos_brutos * self.constants.tasa_ica)
        utilidad_antes_impuestos = utilidad_operacional - ica
        provision_renta = self._compute_income_tax(utilidad_antes_impuestos, params)
        utilidad_neta = utilidad_antes_impuestos - provision_renta

        return MonthlyProjection(
            anio=year,
            mes=month,
            periodo=period_label(year, month),
            dias_habiles=business_days(month),
            ingresos_por_item=revenue_by_item,
            ingresos_brutos=ingresos_brutos,
            iva_generado=iva_generado,
            ingresos_netos=ingresos_netos,
            pagos_profesionales=direct["pago_profesional"],
            retefuente_asumida=direct["retefuente"],
            gmf=direct["gmf"],
            pasarela=direct["pasarela"],
            whatsapp=direct["whatsapp"],
            sms=direct["sms"],
            cumplimiento=direct["cumplimiento"],
            infraestructura=direct["infraestructura"],
            total_costos_directos=total_costos_directos,
            utilidad_bruta=utilidad_bruta,
            nomina=opex["nomina"],
            marketing=opex["marketing"],
            administrativos=opex["administrativos"],
            tecnologia=opex["tecnologia"],
            total_opex=total_opex,
            ebitda=ebitda,
            depreciacion=depreciacion_mes,
            amortizacion=amortizacion_mes,
            utilidad_operacional=utilidad_operacional,
            ica=ica,
            utilidad_antes_impuestos=utilidad_antes_impuestos,
            provision_renta=provision_renta,
            utilidad_neta=utilidad_neta,
        )

    def project_year(
        self,
        year: int,
        volumes: YearVolumes,
        config: ModelConfiguration,
        depreciacion: Optional[Mapping[int, float]] = None,
        amortizacion: Optional[Mapping[int, float]] = None,
    ) -> AnnualProjection:
        depreciacion = depreciacion or {}
        amortizacion = amortizacion or {}
        months = [
            self.project_month(
                year,
                month,
                month_volumes(volumes, month),
                config,
                depreciacion=depreciacion.get(month, 0.0),
                amortizacion=amortizacion.get(month, 0.0),
            )
            for month in range(1, 13)
        ]
        return self.aggregate(year, months)

    def project_range(self, config: ModelConfiguration, volumes_by_year: Mapping[int, YearVolumes]) -> List[AnnualProjection]:
        self.macro.require_range(config.anio_inicio, config.anio_fin)
        return [self.project_year(year, volumes_by_year.get(year, {}), config) for year in config.years()]

    @staticmethod
    def aggregate(year: int, months: List[MonthlyProjection]) -> AnnualProjection:
        revenue_by_item: Dict[str, int] = defaultdict(int)
        for month in months:
            for codigo, amount in month.ingresos_por_item.items():
                revenue_by_item[codigo] += amount
        annual = AnnualProjection(
            anio=year,
            meses=months,
            totales=PeriodFigures.field_sum([month.figures() for month in months]),
            ingresos_por_item=dict(revenue_by_item),
        )
        log.info(
            "projection_year_built",
            anio=year,
            ingresos_brutos=annual.totales.ingresos_brutos,
            ebitda=annual.totales.ebitda,
            utilidad_neta=annual.totales.utilidad_neta,
        )
        return annual

    def _warn_unknown_codes(self, year: int, month: int, volumes: VolumeMap) -> None:
        for codigo in volumes:
            if self.catalog.get_item_by_code(codigo) is None:
                log.debug("volume_code_ignored", codigo=codigo, anio=year, mes=month)

    def _compute_revenue(
        self,
        year: int,
        volumes: VolumeMap,
        config: ModelConfiguration,
        params: MacroParameters,
    ) -> Tuple[Dict[str, int], int, Dict[str, float]]:
        revenue_by_item: Dict[str, int] = {}
        iva = 0.0
        unit_totals: Dict[str, float] = {name: 0.0 for name in _UNIT_BUCKETS}
        for item in self.catalog.ingresos:
            if not item.activo:
                continue
            economics: UnitEconomics = unit_economics_for_item(
                item,
                max(0, volumes.get(item.codigo, 0)),
                year,
                self.macro,
                config.mix_pago_digital,
                self.catalog,
                self.constants,
                config.anio_inicio,
            )
            revenue_by_item[item.codigo] = round_currency(economics.ingreso_total)
            if item.grava_iva:
                iva += economics.ingreso_total * params.tasa_iva
            for name in _UNIT_BUCKETS:
                unit_totals[name] += getattr(economics, name)
        return revenue_by_item, round_currency(iva), unit_totals

    def _compute_direct_costs(
        self,
        year: int,
        volumes: VolumeMap,
        config: ModelConfiguration,
        unit_totals: Dict[str, float],
    ) -> Dict[str, int]:
        totals = dict(unit_totals)
        for cost in self.catalog.costos_variables:
            if not cost.activo or cost.base_calculo != CostBasis.OWN_VOLUME:
                continue
            quantity = max(0, volumes.get(cost.codigo, 0))
            if quantity:
                totals[bucket_of(cost).value] += quantity * unit_cost(cost, 0.0, year, self.macro, config.anio_inicio)
        return {name: round_currency(totals[name]) for name in _UNIT_BUCKETS}

    def _compute_opex(self, year: int, month: int, config: ModelConfiguration, ingresos_brutos: int) -> Dict[str, int]:
        opex: Dict[str, float] = {"nomina": 0.0, "marketing": 0.0, "administrativos": 0.0, "tecnologia": 0.0}
        opex["nomina"] = self._compute_payroll(year, config)
        opex["marketing"] = ingresos_brutos * config.marketing_pct
        for item in self.catalog.gastos:
            if not item.activo or item.es_nomina:
                continue
            amount = indexed_price(item.valor_unitario, config.anio_inicio, year, self.macro)
            opex[item.clase_gasto.value] += amount * self._monthly_share(item, year, month, config)
        return {name: round_currency(value) for name, value in opex.items()}

    def _compute_payroll(self, year: int, config: ModelConfiguration) -> float:
        factor = self.constants.factor_prestacional
        if config.num_empleados is not None and config.salario_promedio is not None:
            return payroll_cost(config.num_empleados, config.salario_promedio, factor)
        base = self.catalog.get_total_payroll(1.0)
        return indexed_price(base, config.anio_inicio, year, self.macro) * factor

    def _compute_income_tax(self, utilidad_antes_impuestos: int, params: MacroParameters) -> int:
        if utilidad_antes_impuestos <= 0:
            return 0
        return round_currency(utilidad_antes_impuestos * params.tasa_renta)

    @staticmethod
    def _monthly_share(item: CatalogItem, year: int, month: int, config: ModelConfiguration) -> float:
        if item.frecuencia == Frequency.ANNUAL:
            return 1 / 12
        if item.frecuencia == Frequency.BIMONTHLY:
            return 1 / 2
        if item.frecuencia == Frequency.ONE_TIME:
            return 1.0 if (year, month) == (config.anio_inicio, 1) else 0.0
        return 1.0
