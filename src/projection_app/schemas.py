from __future__ import annotations

from typing import Dict, List, Optional, Union

from pydantic import BaseModel, Field, confloat, conint

from .models.catalog import CatalogSnapshot
from .models.diagnostics import UnitDiagnostic
from .models.metrics import BurnRateResult, RecurringRevenue
from .models.parameters import FiscalConstants, ModelConfiguration
from .models.projection import AnnualProjection, MonthlyProjection
from .models.triangulation import AnnualStatements


class MonthProjectionRequest(BaseModel):
    config: ModelConfiguration
    anio: int
    mes: conint(ge=1, le=12)
    volumenes: Dict[str, int] = Field(default_factory=dict)
    precios: Dict[str, float] = Field(default_factory=dict, description="Unit price overrides by catalog code")
    depreciacion: confloat(ge=0) = 0.0
    amortizacion: confloat(ge=0) = 0.0


class YearProjectionRequest(BaseModel):
    config: ModelConfiguration
    anio: int
    volumenes: Dict[str, Union[int, Dict[int, int]]] = Field(default_factory=dict)
    precios: Dict[str, float] = Field(default_factory=dict)


class StatementsRequest(BaseModel):
    config: ModelConfiguration
    volumenes_base: Dict[str, int] = Field(default_factory=dict, description="First-month volumes, grown by the configured annual target")
    precios: Dict[str, float] = Field(default_factory=dict)
    incluir_capex: bool = True


class UnitDiagnosticRequest(BaseModel):
    config: ModelConfiguration
    codigo: str = "ING-001"
    volumen: conint(ge=1) = 1
    mix_digital: Optional[confloat(ge=0, le=1)] = None
    precios: Dict[str, float] = Field(default_factory=dict)


class RunwayRequest(BaseModel):
    ingresos_mensuales: float
    costos_mensuales: float
    capital_disponible: float


class CatalogResponse(BaseModel):
    catalogo: CatalogSnapshot
    constantes: FiscalConstants


class MonthProjectionResponse(BaseModel):
    proyeccion: MonthlyProjection
    ingresos_recurrentes: RecurringRevenue


class YearProjectionResponse(BaseModel):
    proyeccion: AnnualProjection


class StatementsResponse(BaseModel):
    valido: bool
    anios: List[AnnualStatements]


class RunwayResponse(BaseModel):
    resultado: BurnRateResult


class UnitDiagnosticResponse(BaseModel):
    diagnostico: UnitDiagnostic
