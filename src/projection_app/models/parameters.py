from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from pydantic import Field, confloat, conint, model_validator

from ..errors import ConfigurationError
from .common import EngineModel


class MacroParameters(EngineModel):
    anio: int
    inflacion: float = Field(..., description="Annual inflation as a fraction (0.045 for 4.5%)")
    trm: float = Field(..., description="Currency reference rate, local units per USD")
    tasa_renta: confloat(ge=0, le=1)
    tasa_iva: confloat(ge=0, le=1)
    tasa_politica: float = 0.0
    salario_minimo: float = 0.0
    uvt: float = 0.0


class MacroTable(EngineModel):
    parametros: Dict[int, MacroParameters] = Field(default_factory=dict)

    @classmethod
    def from_list(cls, rows: Iterable[MacroParameters]) -> "MacroTable":
        return cls(parametros={row.anio: row for row in rows})

    def rows(self) -> List[MacroParameters]:
        return [self.parametros[year] for year in sorted(self.parametros)]

    def find(self, anio: int) -> Optional[MacroParameters]:
        return self.parametros.get(anio)

    def get(self, anio: int) -> MacroParameters:
        params = self.parametros.get(anio)
        if params is None:
            raise ConfigurationError(f"Missing macro parameters for year {anio}")
        return params

    def require_range(self, anio_inicio: int, anio_fin: int) -> None:
        missing = [year for year in range(anio_inicio, anio_fin + 1) if year not in self.parametros]
        if missing:
            raise ConfigurationError(f"Missing macro parameters for years {missing}")


class FiscalConstants(EngineModel):
    """Jurisdiction rule set injected into every formula that needs a rate."""

    version: str = "CO-2026.1"
    tasa_ica: confloat(ge=0, le=1) = 0.00966
    tasa_retefuente_servicios: confloat(ge=0, le=1) = 0.11
    tasa_gmf: confloat(ge=0, le=1) = 0.004
    tasa_reserva_legal: confloat(ge=0, le=1) = 0.10
    factor_prestacional: confloat(ge=1) = 1.52
    runway_infinito: float = 999.0
    runway_critico: float = 6.0
    runway_alerta: float = 12.0
    churn_maximo: float = 0.07
    ltv_cac_minimo: float = 3.0
    cac_maximo: float = 100_000.0
    meses_flujo_negativo: int = 3
    margen_contribucion_minimo: float = 0.05
    margen_neto_objetivo: float = 0.15
    tolerancia_cuadre: float = 1.0


class ModelConfiguration(EngineModel):
    anio_inicio: conint(ge=2000, le=2100)
    anio_fin: conint(ge=2000, le=2100)
    capital_inicial: confloat(ge=0) = 0.0
    meta_crecimiento_anual: confloat(ge=-1) = 0.0
    mix_pago_digital: confloat(ge=0, le=1) = 0.7
    tasa_churn_mensual: confloat(ge=0, le=1) = 0.05
    dias_cartera: confloat(ge=0) = 30
    dias_proveedores: confloat(ge=0) = 45
    dias_escrow: confloat(ge=0) = 5
    marketing_pct: confloat(ge=0, le=1) = 0.15
    num_empleados: Optional[conint(ge=0)] = None
    salario_promedio: Optional[confloat(ge=0)] = None

    @model_validator(mode="after")
    def _year_range(self) -> "ModelConfiguration":
        if self.anio_inicio > self.anio_fin:
            raise ValueError(f"anio_inicio ({self.anio_inicio}) must not be after anio_fin ({self.anio_fin})")
        return self

    def years(self) -> List[int]:
        return list(range(self.anio_inicio, self.anio_fin + 1))
