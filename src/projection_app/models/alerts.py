from __future__ import annotations

from enum import Enum

from .common import EngineModel


class AlertSeverity(str, Enum):
    CRITICAL = "critica"
    HIGH = "alta"
    MEDIUM = "media"


class AlertCategory(str, Enum):
    LIQUIDITY = "liquidez"
    EFFICIENCY = "eficiencia"
    PROFITABILITY = "rentabilidad"
    CONSISTENCY = "consistencia"


class Alert(EngineModel):
    codigo: str
    severidad: AlertSeverity
    categoria: AlertCategory
    titulo: str
    descripcion: str
    valor_actual: float
    benchmark: float
    accion_recomendada: str
