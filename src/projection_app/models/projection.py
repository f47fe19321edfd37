from __future__ import annotations

from typing import Dict, List

from pydantic import Field

from .common import EngineModel, pct


class UnitEconomics(EngineModel):
    codigo: str
    volumen: int
    precio_indexado: int
    ingreso_total: float
    pago_profesional: float
    retefuente: float
    gmf: float
    pasarela: float
    sms: float
    whatsapp: float
    cumplimiento: float
    infraestructura: float
    costo_total: float
    margen_contribucion: float
    margen_pct: float


class PeriodFigures(EngineModel):
    """Monetary figures of one period, in whole currency units."""

    ingresos_brutos: int = 0
    iva_generado: int = 0
    ingresos_netos: int = 0

    pagos_profesionales: int = 0
    retefuente_asumida: int = 0
    gmf: int = 0
    pasarela: int = 0
    whatsapp: int = 0
    sms: int = 0
    cumplimiento: int = 0
    infraestructura: int = 0
    total_costos_directos: int = 0
    utilidad_bruta: int = 0

    nomina: int = 0
    marketing: int = 0
    administrativos: int = 0
    tecnologia: int = 0
    total_opex: int = 0
    ebitda: int = 0

    depreciacion: int = 0
    amortizacion: int = 0
    utilidad_operacional: int = 0
    ica: int = 0
    utilidad_antes_impuestos: int = 0
    provision_renta: int = 0
    utilidad_neta: int = 0

    @classmethod
    def field_sum(cls, periods: List["PeriodFigures"]) -> "PeriodFigures":
        totals = {name: sum(getattr(period, name) for period in periods) for name in cls.model_fields}
        return cls(**totals)


class MonthlyProjection(PeriodFigures):
    anio: int
    mes: int
    periodo: str
    dias_habiles: int
    ingresos_por_item: Dict[str, int] = Field(default_factory=dict)

    def figures(self) -> PeriodFigures:
        return PeriodFigures(**{name: getattr(self, name) for name in PeriodFigures.model_fields})


class AnnualProjection(EngineModel):
    anio: int
    meses: List[MonthlyProjection]
    totales: PeriodFigures
    ingresos_por_item: Dict[str, int] = Field(default_factory=dict)

    @property
    def margen_bruto_pct(self) -> float:
        return pct(self.totales.utilidad_bruta, self.totales.ingresos_netos)

    @property
    def margen_ebitda_pct(self) -> float:
        return pct(self.totales.ebitda, self.totales.ingresos_netos)

    @property
    def margen_neto_pct(self) -> float:
        return pct(self.totales.utilidad_neta, self.totales.ingresos_netos)
