from __future__ import annotations

from typing import List

from ..errors import ProjectionError
from ..models.common import round_currency
from ..models.parameters import ModelConfiguration
from ..models.projection import MonthlyProjection
from ..models.statements import CashFlowStatement

_SUMMED_FIELDS = (
    "cobro_clientes",
    "recaudo_pasarela",
    "recaudo_efectivo",
    "total_entradas",
    "pagos_profesionales",
    "pagos_proveedores",
    "pagos_nomina",
    "pagos_marketing",
    "pagos_tecnologia",
    "pagos_administrativos",
    "total_salidas_operativas",
    "flujo_operativo",
    "pago_iva",
    "pago_retefuente",
    "pago_ica",
    "pago_renta",
    "total_impuestos",
    "flujo_inversion",
    "flujo_financiacion",
    "flujo_neto",
)


def build_cash_flow(
    projection: MonthlyProjection,
    opening_cash: float,
    config: ModelConfiguration,
    capex: float = 0.0,
    aportes: float = 0.0,
) -> CashFlowStatement:
    """Cash movements of one month; collections and payments land in the month they accrue."""
    saldo_inicial = round_currency(opening_cash)

    cobro_clientes = projection.ingresos_brutos + projection.iva_generado
    recaudo_pasarela = round_currency(cobro_clientes * config.mix_pago_digital)
    recaudo_efectivo = cobro_clientes - recaudo_pasarela

    pagos_proveedores = projection.pasarela + projection.sms + projection.whatsapp + projection.cumplimiento + projection.gmf
    pagos_tecnologia = projection.infraestructura + projection.tecnologia
    total_salidas = (
        projection.pagos_profesionales
        + pagos_proveedores
        + projection.nomina
        + projection.marketing
        + pagos_tecnologia
        + projection.administrativos
    )
    flujo_operativo = cobro_clientes - total_salidas

    total_impuestos = projection.iva_generado + projection.retefuente_asumida + projection.ica + projection.provision_renta
    flujo_inversion = -round_currency(capex)
    flujo_financiacion = round_currency(aportes)

    flujo_neto = flujo_operativo - total_impuestos + flujo_inversion + flujo_financiacion
    saldo_final = saldo_inicial + flujo_neto

    return CashFlowStatement(
        periodo=projection.periodo,
        saldo_inicial=saldo_inicial,
        cobro_clientes=cobro_clientes,
        recaudo_pasarela=recaudo_pasarela,
        recaudo_efectivo=recaudo_efectivo,
        total_entradas=cobro_clientes,
        pagos_profesionales=projection.pagos_profesionales,
        pagos_proveedores=pagos_proveedores,
        pagos_nomina=projection.nomina,
        pagos_marketing=projection.marketing,
        pagos_tecnologia=pagos_tecnologia,
        pagos_administrativos=projection.administrativos,
        total_salidas_operativas=total_salidas,
        flujo_operativo=flujo_operativo,
        pago_iva=projection.iva_generado,
        pago_retefuente=projection.retefuente_asumida,
        pago_ica=projection.ica,
        pago_renta=projection.provision_renta,
        total_impuestos=total_impuestos,
        flujo_inversion=flujo_inversion,
        flujo_financiacion=flujo_financiacion,
        flujo_neto=flujo_neto,
        saldo_final=saldo_final,
        concilia_con_balance=saldo_final == saldo_inicial + flujo_neto,
    )


def sum_cash_flows(flows: List[CashFlowStatement], periodo: str) -> CashFlowStatement:
    """Aggregate consecutive monthly statements into one period."""
    if not flows:
        raise ProjectionError("Cannot aggregate an empty list of cash flow statements")
    totals = {name: sum(getattr(flow, name) for flow in flows) for name in _SUMMED_FIELDS}
    saldo_inicial = flows[0].saldo_inicial
    saldo_final = saldo_inicial + totals["flujo_neto"]
    diferencia = float(saldo_final - flows[-1].saldo_final)
    return CashFlowStatement(
        periodo=periodo,
        saldo_inicial=saldo_inicial,
        saldo_final=saldo_final,
        concilia_con_balance=all(flow.concilia_con_balance for flow in flows) and diferencia == 0,
        diferencia_con_balance=diferencia,
        **totals,
    )
