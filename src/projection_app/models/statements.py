from __future__ import annotations

from datetime import date

from pydantic import Field, confloat, conint

from .common import EngineModel


# ---- Estado de Resultados Integral (ERI) ----


class RevenueByType(EngineModel):
    servicios_legales: int
    suscripciones: int
    productos_digitales: int
    otros: int
    total: int


class CostOfSales(EngineModel):
    pagos_profesionales: int
    costos_pasarela: int
    costos_transaccionales: int
    total: int


class AdministrationExpenses(EngineModel):
    personal: int
    administrativos: int
    tecnologia: int
    depreciacion_amortizacion: int
    total: int


class SalesExpenses(EngineModel):
    marketing: int
    total: int


class OperatingExpenses(EngineModel):
    administracion: AdministrationExpenses
    ventas: SalesExpenses
    total_gastos_operacionales: int


class IncomeStatement(EngineModel):
    periodo: str
    anio_fiscal: int
    ingresos_ordinarios: RevenueByType
    costo_ventas: CostOfSales
    utilidad_bruta: int
    margen_bruto_pct: float
    gastos_operacionales: OperatingExpenses
    ebitda: int
    margen_ebitda_pct: float
    utilidad_operacional: int
    margen_operacional_pct: float
    ica: int
    utilidad_antes_impuestos: int
    impuesto_renta: int
    utilidad_neta: int
    margen_neto_pct: float


# ---- Balance General ----


class BalanceSheetInputs(EngineModel):
    anio: int
    mes: conint(ge=1, le=12) = 12

    utilidad_neta: float
    depreciacion: float = 0.0
    amortizacion: float = 0.0

    ingresos_brutos: float = 0.0
    costo_ventas: float = 0.0

    efectivo: float
    capital_social: float = 0.0
    reserva_legal_inicial: float = 0.0
    utilidades_retenidas_iniciales: float = 0.0

    dias_cartera: confloat(ge=0) = 30
    dias_proveedores: confloat(ge=0) = 45
    escrow_profesionales: float = 0.0
    impuestos_por_pagar: float = 0.0

    capex_periodo: float = 0.0
    inversion_software: float = 0.0
    ppe_bruto_inicial: float = 0.0
    depreciacion_acumulada_inicial: float = 0.0
    software_bruto_inicial: float = 0.0
    amortizacion_acumulada_inicial: float = 0.0

    tasa_reserva_legal: confloat(ge=0, le=1) = 0.10
    tolerancia: float = 1.0


class CurrentAssets(EngineModel):
    efectivo: int
    cuentas_por_cobrar: int
    total_corriente: int


class NonCurrentAssets(EngineModel):
    propiedad_planta_equipo: int
    depreciacion_acumulada: int
    propiedad_planta_equipo_neto: int
    software_desarrollo: int
    amortizacion_acumulada: int
    software_neto: int
    total_no_corriente: int


class CurrentLiabilities(EngineModel):
    cuentas_por_pagar: int
    impuestos_por_pagar: int
    escrow_profesionales: int
    total_corriente: int


class Equity(EngineModel):
    capital_social: int
    reserva_legal: int
    utilidades_retenidas: int
    utilidad_del_ejercicio: int
    capital_trabajo_devengado: int = Field(
        ...,
        description="Receivables less payables, escrow and taxes payable; accrued but not settled in cash",
    )
    total_patrimonio: int


class AccountingEquation(EngineModel):
    activos: int
    pasivos: int
    patrimonio: int
    diferencia: float
    valido: bool


class BalanceSheet(EngineModel):
    periodo: str
    fecha: date
    activos_corrientes: CurrentAssets
    activos_no_corrientes: NonCurrentAssets
    total_activos: int
    pasivos_corrientes: CurrentLiabilities
    total_pasivos: int
    patrimonio: Equity
    ecuacion_patrimonial: AccountingEquation

    @property
    def efectivo(self) -> int:
        return self.activos_corrientes.efectivo

    def with_cash(self, efectivo: int) -> "BalanceSheet":
        """Copy with a different reported cash figure and nothing else recomputed."""
        corrientes = self.activos_corrientes.model_copy(update={"efectivo": efectivo})
        return self.model_copy(update={"activos_corrientes": corrientes})


# ---- Flujo de Caja ----


class CashFlowStatement(EngineModel):
    periodo: str
    saldo_inicial: int

    cobro_clientes: int
    recaudo_pasarela: int
    recaudo_efectivo: int
    total_entradas: int

    pagos_profesionales: int
    pagos_proveedores: int
    pagos_nomina: int
    pagos_marketing: int
    pagos_tecnologia: int
    pagos_administrativos: int
    total_salidas_operativas: int
    flujo_operativo: int

    pago_iva: int
    pago_retefuente: int
    pago_ica: int
    pago_renta: int
    total_impuestos: int

    flujo_inversion: int = 0
    flujo_financiacion: int = 0

    flujo_neto: int
    saldo_final: int
    concilia_con_balance: bool
    diferencia_con_balance: float = 0.0
