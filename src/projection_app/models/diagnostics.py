from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import Field

from .alerts import Alert
from .common import EngineModel


class StepKind(str, Enum):
    INFLOW = "entrada"
    OUTFLOW = "salida"
    TAX = "impuesto"
    INFO = "info"


class FlowStep(EngineModel):
    orden: int
    concepto: str
    codigo: str
    tipo: StepKind
    monto: float
    formula: str
    acumulado: float


class DiagnosticChecks(EngineModel):
    gross_up_correcto: bool
    sms_solo_rural: bool
    pasarela_segmentada: bool
    ica_sobre_ingresos: bool
    infraestructura_escalable: bool
    flujo_cuadra: bool


class UnitDiagnostic(EngineModel):
    """Step-by-step money walk of one SKU sale, from collection to ICA."""

    codigo: str
    anio: int
    volumen: int
    precio_entrada: float
    mix_digital: float
    mix_rural: float
    flujo: List[FlowStep] = Field(default_factory=list)
    margen_contribucion: float
    margen_contribucion_pct: float
    ica: float
    gastos_fijos: float
    # None when no volume reaches the target with the current cost structure.
    punto_equilibrio_unidades: Optional[int] = None
    volumen_objetivo: Optional[int] = None
    verificaciones: DiagnosticChecks
    alertas: List[Alert] = Field(default_factory=list)
