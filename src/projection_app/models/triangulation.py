from __future__ import annotations

from enum import Enum
from typing import List

from pydantic import Field

from .common import EngineModel
from .projection import AnnualProjection, MonthlyProjection
from .statements import BalanceSheet, CashFlowStatement, IncomeStatement


class MismatchKind(str, Enum):
    BALANCE = "balance"
    NET_INCOME = "utilidad"
    CASH_FLOW = "flujo"
    CASH = "efectivo"


class Severity(str, Enum):
    CRITICAL = "critica"
    WARNING = "advertencia"


class TriangulationError(EngineModel):
    tipo: MismatchKind
    mensaje: str
    valor_esperado: float
    valor_actual: float
    diferencia: float
    severidad: Severity = Severity.CRITICAL


class TriangulationChecks(EngineModel):
    balance_cuadra: bool
    utilidad_cierra: bool
    flujo_concilia: bool
    efectivo_concilia: bool


class TriangulationMetrics(EngineModel):
    activos_totales: int
    pasivos_totales: int
    patrimonio_total: int
    efectivo_balance: int
    efectivo_flujo: int
    utilidad_pyl: float
    utilidad_balance: int
    capital_trabajo_devengado: int


class TriangulationResult(EngineModel):
    valido: bool
    errores: List[TriangulationError] = Field(default_factory=list)
    validaciones: TriangulationChecks
    metricas: TriangulationMetrics

    def errors_of(self, tipo: MismatchKind) -> List[TriangulationError]:
        return [error for error in self.errores if error.tipo == tipo]


class OpeningBalances(EngineModel):
    efectivo: float = 0.0
    capital_social: float = 0.0
    reserva_legal: float = 0.0
    utilidades_retenidas: float = 0.0
    ppe_bruto: float = 0.0
    depreciacion_acumulada: float = 0.0
    software_bruto: float = 0.0
    amortizacion_acumulada: float = 0.0


class MonthlyStatements(EngineModel):
    proyeccion: MonthlyProjection
    flujo_caja: CashFlowStatement
    balance: BalanceSheet
    triangulacion: TriangulationResult


class AnnualStatements(EngineModel):
    anio: int
    proyeccion: AnnualProjection
    estado_resultados: IncomeStatement
    flujo_caja: CashFlowStatement
    balance: BalanceSheet
    triangulacion: TriangulationResult
    meses: List[MonthlyStatements]


class StatementsRun(EngineModel):
    anios: List[AnnualStatements]

    @property
    def valido(self) -> bool:
        return all(
            year.triangulacion.valido and all(month.triangulacion.valido for month in year.meses)
            for year in self.anios
        )
