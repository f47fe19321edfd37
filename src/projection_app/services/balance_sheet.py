from __future__ import annotations

from ..models.common import month_end, period_label, round_currency
from ..models.statements import (
    AccountingEquation,
    BalanceSheet,
    BalanceSheetInputs,
    CurrentAssets,
    CurrentLiabilities,
    Equity,
    NonCurrentAssets,
)


def build_balance_sheet(inputs: BalanceSheetInputs) -> BalanceSheet:
    """Close the books for one period from the figures the caller supplies.

    Cash is reported exactly as given; the cash flow statement owns it, so
    books whose cash does not follow from the openings fail the equation.
    Receivables and payables use the days-outstanding approximation
    (amount / 30 x days), not an aged schedule.
    """
    efectivo = round_currency(inputs.efectivo)
    cuentas_por_cobrar = round_currency(inputs.ingresos_brutos / 30 * inputs.dias_cartera)
    activos_corrientes = CurrentAssets(
        efectivo=efectivo,
        cuentas_por_cobrar=cuentas_por_cobrar,
        total_corriente=efectivo + cuentas_por_cobrar,
    )

    ppe_bruto = round_currency(inputs.ppe_bruto_inicial + inputs.capex_periodo)
    depreciacion_acumulada = round_currency(inputs.depreciacion_acumulada_inicial + inputs.depreciacion)
    software_bruto = round_currency(inputs.software_bruto_inicial + inputs.inversion_software)
    amortizacion_acumulada = round_currency(inputs.amortizacion_acumulada_inicial + inputs.amortizacion)
    ppe_neto = ppe_bruto - depreciacion_acumulada
    software_neto = software_bruto - amortizacion_acumulada
    activos_no_corrientes = NonCurrentAssets(
        propiedad_planta_equipo=ppe_bruto,
        depreciacion_acumulada=depreciacion_acumulada,
        propiedad_planta_equipo_neto=ppe_neto,
        software_desarrollo=software_bruto,
        amortizacion_acumulada=amortizacion_acumulada,
        software_neto=software_neto,
        total_no_corriente=ppe_neto + software_neto,
    )
    total_activos = activos_corrientes.total_corriente + activos_no_corrientes.total_no_corriente

    cuentas_por_pagar = round_currency(inputs.costo_ventas / 30 * inputs.dias_proveedores)
    impuestos_por_pagar = round_currency(inputs.impuestos_por_pagar)
    escrow = round_currency(inputs.escrow_profesionales)
    pasivos_corrientes = CurrentLiabilities(
        cuentas_por_pagar=cuentas_por_pagar,
        impuestos_por_pagar=impuestos_por_pagar,
        escrow_profesionales=escrow,
        total_corriente=cuentas_por_pagar + impuestos_por_pagar + escrow,
    )
    total_pasivos = pasivos_corrientes.total_corriente

    # Losses never shrink the legal reserve.
    reserva_inicial = round_currency(inputs.reserva_legal_inicial)
    reserva_legal = round_currency(inputs.reserva_legal_inicial + inputs.tasa_reserva_legal * max(0.0, inputs.utilidad_neta))
    utilidades_retenidas = round_currency(inputs.utilidades_retenidas_iniciales) - (reserva_legal - reserva_inicial)
    utilidad_del_ejercicio = round_currency(inputs.utilidad_neta)
    capital_social = round_currency(inputs.capital_social)

    # Cash carries no collection or payment lag, so these balances sit in equity until settled.
    capital_trabajo_devengado = cuentas_por_cobrar - pasivos_corrientes.total_corriente
    patrimonio_contable = capital_social + reserva_legal + utilidades_retenidas + utilidad_del_ejercicio
    patrimonio = Equity(
        capital_social=capital_social,
        reserva_legal=reserva_legal,
        utilidades_retenidas=utilidades_retenidas,
        utilidad_del_ejercicio=utilidad_del_ejercicio,
        capital_trabajo_devengado=capital_trabajo_devengado,
        total_patrimonio=patrimonio_contable + capital_trabajo_devengado,
    )

    diferencia = float(total_activos - total_pasivos - patrimonio.total_patrimonio)
    return BalanceSheet(
        periodo=period_label(inputs.anio, inputs.mes),
        fecha=month_end(inputs.anio, inputs.mes),
        activos_corrientes=activos_corrientes,
        activos_no_corrientes=activos_no_corrientes,
        total_activos=total_activos,
        pasivos_corrientes=pasivos_corrientes,
        total_pasivos=total_pasivos,
        patrimonio=patrimonio,
        ecuacion_patrimonial=AccountingEquation(
            activos=total_activos,
            pasivos=total_pasivos,
            patrimonio=patrimonio.total_patrimonio,
            diferencia=diferencia,
            valido=abs(diferencia) < inputs.tolerancia,
        ),
    )
