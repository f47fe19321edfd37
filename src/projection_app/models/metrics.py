from __future__ import annotations

from enum import Enum

from .common import EngineModel


class RunwayStatus(str, Enum):
    CRITICAL = "critico"
    WARNING = "alerta"
    HEALTHY = "saludable"


class LtvCacRating(str, Enum):
    EXCELLENT = "excelente"
    GOOD = "bueno"
    WARNING = "alerta"
    CRITICAL = "critico"


class GrossUp(EngineModel):
    base_gravable: float
    retencion: int
    total_a_pagar: float


class BurnRateResult(EngineModel):
    burn_rate_mensual: float
    runway: float
    estado: RunwayStatus


class Margins(EngineModel):
    margen_bruto: float
    margen_ebitda: float
    margen_neto: float


class SimpleUnitEconomics(EngineModel):
    ltv: float
    cac: float
    ltv_cac_ratio: float
    payback_meses: float


class RecurringRevenue(EngineModel):
    mrr: float
    arr: float
