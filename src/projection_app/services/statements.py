from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import List, Mapping, Optional, Tuple

from ..logging_config import get_logger
from ..models.capex import CapexItem, CapexPlan, DepreciationCharge
from ..models.catalog import CatalogSnapshot
from ..models.common import period_label
from ..models.parameters import FiscalConstants, MacroTable, ModelConfiguration
from ..models.projection import MonthlyProjection
from ..models.statements import BalanceSheet, BalanceSheetInputs, CashFlowStatement
from ..models.triangulation import AnnualStatements, MonthlyStatements, OpeningBalances, StatementsRun
from .balance_sheet import build_balance_sheet
from .calculator import ProjectionEngine, YearVolumes, month_volumes
from .cash_flow import build_cash_flow, sum_cash_flows
from .income_statement import build_income_statement
from .triangulation import validate_triangulation

log = get_logger(__name__)


@dataclass
class DepreciationTrack:
    remaining_months: int
    monthly_charge: float
    intangible: bool


@dataclass
class LedgerState:
    efectivo: float
    capital_social: float
    reserva_legal: float
    utilidades_retenidas: float
    ppe_bruto: float
    depreciacion_acumulada: float
    software_bruto: float
    amortizacion_acumulada: float
    tracks: List[DepreciationTrack] = field(default_factory=list)

    @classmethod
    def from_opening(cls, opening: OpeningBalances) -> "LedgerState":
        return cls(
            efectivo=opening.efectivo,
            capital_social=opening.capital_social,
            reserva_legal=opening.reserva_legal,
            utilidades_retenidas=opening.utilidades_retenidas,
            ppe_bruto=opening.ppe_bruto,
            depreciacion_acumulada=opening.depreciacion_acumulada,
            software_bruto=opening.software_bruto,
            amortizacion_acumulada=opening.amortizacion_acumulada,
        )

    def close(self, balance: BalanceSheet) -> None:
        self.efectivo = balance.efectivo
        self.reserva_legal = balance.patrimonio.reserva_legal
        self.utilidades_retenidas = balance.patrimonio.utilidades_retenidas + balance.patrimonio.utilidad_del_ejercicio
        self.ppe_bruto = balance.activos_no_corrientes.propiedad_planta_equipo
        self.depreciacion_acumulada = balance.activos_no_corrientes.depreciacion_acumulada
        self.software_bruto = balance.activos_no_corrientes.software_desarrollo
        self.amortizacion_acumulada = balance.activos_no_corrientes.amortizacion_acumulada


class StatementBuilder:
    """Runs the projection month by month and closes all three statements for each period."""

    def __init__(self, catalog: CatalogSnapshot, macro: MacroTable, constants: FiscalConstants) -> None:
        self.catalog = catalog
        self.macro = macro
        self.constants = constants
        self.engine = ProjectionEngine(catalog, macro, constants)

    def run(
        self,
        config: ModelConfiguration,
        volumes_by_year: Mapping[int, YearVolumes],
        capex_plan: Optional[CapexPlan] = None,
        opening: Optional[OpeningBalances] = None,
    ) -> StatementsRun:
        self.macro.require_range(config.anio_inicio, config.anio_fin)
        if capex_plan is None:
            capex_plan = CapexPlan.from_catalog(self.catalog, config.anio_inicio)
        if opening is None:
            opening = OpeningBalances(efectivo=config.capital_inicial, capital_social=config.capital_inicial)

        state = LedgerState.from_opening(opening)
        years = [self._run_year(year, volumes_by_year.get(year, {}), config, capex_plan, state) for year in config.years()]
        result = StatementsRun(anios=years)
        log.info(
            "statements_run_completed",
            anio_inicio=config.anio_inicio,
            anio_fin=config.anio_fin,
            valido=result.valido,
            efectivo_final=state.efectivo,
        )
        return result

    def _run_year(
        self,
        year: int,
        volumes: YearVolumes,
        config: ModelConfiguration,
        capex_plan: CapexPlan,
        state: LedgerState,
    ) -> AnnualStatements:
        year_opening = replace(state, tracks=list(state.tracks))
        months: List[MonthlyStatements] = []
        tangible_total = 0.0
        intangible_total = 0.0

        for month in range(1, 13):
            tangible, intangible = self._schedule_capex(capex_plan.items_for(year, month), state)
            tangible_total += tangible
            intangible_total += intangible
            charge = self._compute_depreciation(state.tracks)

            projection = self.engine.project_month(
                year,
                month,
                month_volumes(volumes, month),
                config,
                depreciacion=charge.depreciacion,
                amortizacion=charge.amortizacion,
            )
            cash_flow = build_cash_flow(projection, state.efectivo, config, capex=tangible + intangible)
            balance = build_balance_sheet(
                self._balance_inputs(projection, cash_flow, config, state, tangible, intangible)
            )
            months.append(
                MonthlyStatements(
                    proyeccion=projection,
                    flujo_caja=cash_flow,
                    balance=balance,
                    triangulacion=validate_triangulation(
                        projection.utilidad_neta, balance, cash_flow, self.constants.tolerancia_cuadre
                    ),
                )
            )
            state.close(balance)

        annual = self.engine.aggregate(year, [month.proyeccion for month in months])
        income_statement = build_income_statement(annual, self.catalog)
        annual_cash_flow = sum_cash_flows([month.flujo_caja for month in months], period_label(year))
        december = annual.meses[-1]
        annual_inputs = BalanceSheetInputs(
            anio=year,
            mes=12,
            utilidad_neta=annual.totales.utilidad_neta,
            depreciacion=annual.totales.depreciacion,
            amortizacion=annual.totales.amortizacion,
            ingresos_brutos=december.ingresos_brutos,
            costo_ventas=december.total_costos_directos,
            efectivo=annual_cash_flow.saldo_final,
            capital_social=year_opening.capital_social,
            reserva_legal_inicial=year_opening.reserva_legal,
            utilidades_retenidas_iniciales=year_opening.utilidades_retenidas,
            dias_cartera=config.dias_cartera,
            dias_proveedores=config.dias_proveedores,
            escrow_profesionales=self._escrow_balance(december, config),
            capex_periodo=tangible_total,
            inversion_software=intangible_total,
            ppe_bruto_inicial=year_opening.ppe_bruto,
            depreciacion_acumulada_inicial=year_opening.depreciacion_acumulada,
            software_bruto_inicial=year_opening.software_bruto,
            amortizacion_acumulada_inicial=year_opening.amortizacion_acumulada,
            tasa_reserva_legal=self.constants.tasa_reserva_legal,
            tolerancia=self.constants.tolerancia_cuadre,
        )
        annual_balance = build_balance_sheet(annual_inputs)
        # Year-end closing supersedes the monthly roll for equity.
        state.close(annual_balance)

        return AnnualStatements(
            anio=year,
            proyeccion=annual,
            estado_resultados=income_statement,
            flujo_caja=annual_cash_flow,
            balance=annual_balance,
            triangulacion=validate_triangulation(
                income_statement.utilidad_neta, annual_balance, annual_cash_flow, self.constants.tolerancia_cuadre
            ),
            meses=months,
        )

    def _balance_inputs(
        self,
        projection: MonthlyProjection,
        cash_flow: CashFlowStatement,
        config: ModelConfiguration,
        state: LedgerState,
        tangible: float,
        intangible: float,
    ) -> BalanceSheetInputs:
        return BalanceSheetInputs(
            anio=projection.anio,
            mes=projection.mes,
            utilidad_neta=projection.utilidad_neta,
            depreciacion=projection.depreciacion,
            amortizacion=projection.amortizacion,
            ingresos_brutos=projection.ingresos_brutos,
            costo_ventas=projection.total_costos_directos,
            efectivo=cash_flow.saldo_final,
            capital_social=state.capital_social,
            reserva_legal_inicial=state.reserva_legal,
            utilidades_retenidas_iniciales=state.utilidades_retenidas,
            dias_cartera=config.dias_cartera,
            dias_proveedores=config.dias_proveedores,
            escrow_profesionales=self._escrow_balance(projection, config),
            capex_periodo=tangible,
            inversion_software=intangible,
            ppe_bruto_inicial=state.ppe_bruto,
            depreciacion_acumulada_inicial=state.depreciacion_acumulada,
            software_bruto_inicial=state.software_bruto,
            amortizacion_acumulada_inicial=state.amortizacion_acumulada,
            tasa_reserva_legal=self.constants.tasa_reserva_legal,
            tolerancia=self.constants.tolerancia_cuadre,
        )

    @staticmethod
    def _escrow_balance(projection: MonthlyProjection, config: ModelConfiguration) -> float:
        # Payouts held for the configured days before disbursement.
        return projection.pagos_profesionales / 30 * config.dias_escrow

    @staticmethod
    def _schedule_capex(items: List[CapexItem], state: LedgerState) -> Tuple[float, float]:
        tangible = 0.0
        intangible = 0.0
        for item in items:
            if item.es_intangible:
                intangible += item.monto
            else:
                tangible += item.monto
            monthly = max(0.0, (item.monto - item.valor_residual) / item.vida_util_meses)
            state.tracks.append(DepreciationTrack(item.vida_util_meses, monthly, item.es_intangible))
        return tangible, intangible

    @staticmethod
    def _compute_depreciation(tracks: List[DepreciationTrack]) -> DepreciationCharge:
        depreciacion = 0.0
        amortizacion = 0.0
        for track in tracks:
            if track.remaining_months <= 0:
                continue
            if track.intangible:
                amortizacion += track.monthly_charge
            else:
                depreciacion += track.monthly_charge
            track.remaining_months -= 1
        tracks[:] = [track for track in tracks if track.remaining_months > 0]
        return DepreciationCharge(depreciacion=depreciacion, amortizacion=amortizacion)
