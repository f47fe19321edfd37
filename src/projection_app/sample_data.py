from __future__ import annotations

from typing import Dict

from .models.catalog import CatalogItem, CatalogSnapshot, CostBasis, CostBucket, ExpenseClass, Frequency, ItemKind
from .models.parameters import FiscalConstants, MacroParameters, MacroTable, ModelConfiguration


def build_default_catalog() -> CatalogSnapshot:
    ingresos = (
        CatalogItem(
            codigo="ING-001",
            concepto="Consulta Legal Estándar",
            tipo=ItemKind.REVENUE,
            categoria="Servicios Legales",
            sub_categoria="B2C",
            valor_unitario=150_000,
            frecuencia=Frequency.PER_TRANSACTION,
            genera_escrow=True,
            cuenta_puc="4155",
        ),
        CatalogItem(
            codigo="ING-002",
            concepto="SOS Legal Inmediato",
            tipo=ItemKind.REVENUE,
            categoria="Servicios Legales",
            sub_categoria="Premium",
            valor_unitario=200_000,
            frecuencia=Frequency.PER_CASE,
            genera_escrow=True,
            cuenta_puc="4155",
        ),
        CatalogItem(
            codigo="ING-003",
            concepto="Validación Flash",
            tipo=ItemKind.REVENUE,
            categoria="Servicios Legales",
            sub_categoria="Micro-servicio",
            valor_unitario=30_000,
            frecuencia=Frequency.PER_TRANSACTION,
            genera_escrow=True,
            cuenta_puc="4155",
        ),
        CatalogItem(
            codigo="ING-004",
            concepto="Descarga Documento",
            tipo=ItemKind.REVENUE,
            categoria="Productos Digitales",
            sub_categoria="SaaS",
            valor_unitario=15_000,
            frecuencia=Frequency.PER_DOCUMENT,
            grava_iva=True,
            cuenta_puc="4135",
        ),
        CatalogItem(
            codigo="ING-005",
            concepto="Suscripción Abogado Pro",
            tipo=ItemKind.REVENUE,
            categoria="Suscripciones",
            sub_categoria="Recurrente",
            valor_unitario=150_000,
            frecuencia=Frequency.MONTHLY,
            grava_iva=True,
            cuenta_puc="4155",
        ),
        CatalogItem(
            codigo="ING-006",
            concepto="Plan Corporativo",
            tipo=ItemKind.REVENUE,
            categoria="Suscripciones",
            sub_categoria="Recurrente",
            valor_unitario=5_000_000,
            frecuencia=Frequency.MONTHLY,
            cuenta_puc="4155",
        ),
        CatalogItem(
            codigo="ING-007",
            concepto="Fee Onboarding Abogado",
            tipo=ItemKind.REVENUE,
            categoria="Otros Ingresos",
            sub_categoria="Setup",
            valor_unitario=50_000,
            frecuencia=Frequency.ONE_TIME,
            grava_iva=True,
            cuenta_puc="4175",
        ),
    )

    costos_variables = (
        CatalogItem(
            codigo="C-VAR-01",
            concepto="Pago Abogado Consulta Estándar",
            tipo=ItemKind.VARIABLE_COST,
            categoria="Costo Directo",
            valor_unitario=0.30,
            frecuencia=Frequency.PER_TRANSACTION,
            vinculado_a="ING-001",
            es_porcentaje=True,
            rubro=CostBucket.PROFESSIONAL_PAYOUT,
            base_calculo=CostBasis.LINKED_VALUE,
            cuenta_puc="6135",
        ),
        CatalogItem(
            codigo="C-VAR-02",
            concepto="Pago Abogado SOS",
            tipo=ItemKind.VARIABLE_COST,
            categoria="Costo Directo",
            valor_unitario=0.60,
            frecuencia=Frequency.PER_CASE,
            vinculado_a="ING-002",
            es_porcentaje=True,
            rubro=CostBucket.PROFESSIONAL_PAYOUT,
            base_calculo=CostBasis.LINKED_VALUE,
            cuenta_puc="6135",
        ),
        CatalogItem(
            codigo="C-VAR-03",
            concepto="Pago Abogado Validación Flash",
            tipo=ItemKind.VARIABLE_COST,
            categoria="Costo Directo",
            valor_unitario=0.50,
            frecuencia=Frequency.PER_TRANSACTION,
            vinculado_a="ING-003",
            es_porcentaje=True,
            rubro=CostBucket.PROFESSIONAL_PAYOUT,
            base_calculo=CostBasis.LINKED_VALUE,
            cuenta_puc="6135",
        ),
        CatalogItem(
            codigo="C-VAR-06",
            concepto="Pasarela Pago Digital",
            tipo=ItemKind.VARIABLE_COST,
            categoria="Costo Transaccional",
            valor_unitario=6_500,
            frecuencia=Frequency.PER_TRANSACTION,
            rubro=CostBucket.GATEWAY,
            base_calculo=CostBasis.DIGITAL_VOLUME,
            cuenta_puc="5305",
        ),
        CatalogItem(
            codigo="C-VAR-07",
            concepto="Recaudo en Efectivo",
            tipo=ItemKind.VARIABLE_COST,
            categoria="Costo Transaccional",
            valor_unitario=7_200,
            frecuencia=Frequency.PER_TRANSACTION,
            rubro=CostBucket.GATEWAY,
            base_calculo=CostBasis.CASH_VOLUME,
            cuenta_puc="5305",
        ),
        CatalogItem(
            codigo="C-VAR-08",
            concepto="Notificación WhatsApp",
            tipo=ItemKind.VARIABLE_COST,
            categoria="Costo Transaccional",
            valor_unitario=250,
            frecuencia=Frequency.PER_TRANSACTION,
            rubro=CostBucket.WHATSAPP,
            base_calculo=CostBasis.TRANSACTIONAL_VOLUME,
            cuenta_puc="5135",
        ),
        CatalogItem(
            codigo="C-VAR-09",
            concepto="Notificación SMS Pago Efectivo",
            tipo=ItemKind.VARIABLE_COST,
            categoria="Costo Transaccional",
            valor_unitario=150,
            frecuencia=Frequency.PER_TRANSACTION,
            vinculado_a="C-VAR-07",
            rubro=CostBucket.SMS,
            base_calculo=CostBasis.CASH_VOLUME,
            cuenta_puc="5135",
        ),
        CatalogItem(
            codigo="C-VAR-10",
            concepto="Consulta SAGRILAFT",
            tipo=ItemKind.VARIABLE_COST,
            categoria="Cumplimiento",
            valor_unitario=3_000,
            frecuencia=Frequency.PER_CASE,
            rubro=CostBucket.COMPLIANCE,
            base_calculo=CostBasis.ESCROW_VOLUME,
            cuenta_puc="5110",
        ),
        CatalogItem(
            codigo="C-VAR-11",
            concepto="Infraestructura Cloud por Transacción",
            tipo=ItemKind.VARIABLE_COST,
            categoria="Tecnología",
            valor_unitario=130,
            frecuencia=Frequency.PER_TRANSACTION,
            rubro=CostBucket.INFRASTRUCTURE,
            base_calculo=CostBasis.TRANSACTIONAL_VOLUME,
            cuenta_puc="5135",
        ),
    )

    gastos = (
        CatalogItem(
            codigo="G-ADM-01",
            concepto="Nómina CEO",
            tipo=ItemKind.FIXED_EXPENSE,
            categoria="Nómina",
            valor_unitario=12_000_000,
            es_nomina=True,
            cuenta_puc="5105",
        ),
        CatalogItem(
            codigo="G-ADM-02",
            concepto="Nómina CTO",
            tipo=ItemKind.FIXED_EXPENSE,
            categoria="Nómina",
            valor_unitario=10_000_000,
            es_nomina=True,
            cuenta_puc="5105",
        ),
        CatalogItem(
            codigo="G-ADM-03",
            concepto="Nómina Soporte",
            tipo=ItemKind.FIXED_EXPENSE,
            categoria="Nómina",
            valor_unitario=2_500_000,
            es_nomina=True,
            cuenta_puc="5105",
        ),
        CatalogItem(
            codigo="G-ADM-04",
            concepto="Contabilidad y Revisoría",
            tipo=ItemKind.FIXED_EXPENSE,
            categoria="Gastos Admin",
            valor_unitario=1_200_000,
            cuenta_puc="5110",
        ),
        CatalogItem(
            codigo="G-ADM-05",
            concepto="Arriendo Coworking",
            tipo=ItemKind.FIXED_EXPENSE,
            categoria="Gastos Admin",
            valor_unitario=2_000_000,
            cuenta_puc="5120",
        ),
        CatalogItem(
            codigo="G-TEC-02",
            concepto="Licencias SaaS y Hosting Base",
            tipo=ItemKind.FIXED_EXPENSE,
            categoria="Gastos Tech",
            valor_unitario=1_500_000,
            clase_gasto=ExpenseClass.TECHNOLOGY,
            cuenta_puc="5135",
        ),
        CatalogItem(
            codigo="G-MKT-01",
            concepto="Pauta Digital Base",
            tipo=ItemKind.FIXED_EXPENSE,
            categoria="Marketing",
            valor_unitario=3_000_000,
            clase_gasto=ExpenseClass.MARKETING,
            es_cac=True,
            cuenta_puc="5235",
        ),
    )

    impuestos = (
        CatalogItem(
            codigo="IMP-001",
            concepto="Impuesto de Renta",
            tipo=ItemKind.TAX,
            categoria="Impuestos",
            valor_unitario=0.35,
            es_porcentaje=True,
            frecuencia=Frequency.ANNUAL,
        ),
        CatalogItem(
            codigo="IMP-002",
            concepto="ICA Bogotá",
            tipo=ItemKind.TAX,
            categoria="Impuestos",
            valor_unitario=0.00966,
            es_porcentaje=True,
            frecuencia=Frequency.BIMONTHLY,
        ),
        CatalogItem(
            codigo="IMP-003",
            concepto="GMF 4x1000",
            tipo=ItemKind.TAX,
            categoria="Impuestos",
            valor_unitario=0.004,
            es_porcentaje=True,
            frecuencia=Frequency.PER_TRANSACTION,
        ),
    )

    inversiones = (
        CatalogItem(
            codigo="INV-001",
            concepto="Desarrollo MVP Plataforma",
            tipo=ItemKind.CAPEX,
            categoria="Intangibles",
            valor_unitario=70_000_000,
            frecuencia=Frequency.ONE_TIME,
            es_intangible=True,
            vida_util_meses=36,
            cuenta_puc="1635",
        ),
        CatalogItem(
            codigo="INV-002",
            concepto="Estructuración Legal y Marca",
            tipo=ItemKind.CAPEX,
            categoria="Intangibles",
            valor_unitario=8_000_000,
            frecuencia=Frequency.ONE_TIME,
            es_intangible=True,
            vida_util_meses=60,
            cuenta_puc="1610",
        ),
        CatalogItem(
            codigo="INV-003",
            concepto="Equipos de Cómputo",
            tipo=ItemKind.CAPEX,
            categoria="Propiedad Planta y Equipo",
            valor_unitario=12_000_000,
            frecuencia=Frequency.ONE_TIME,
            vida_util_meses=36,
            cuenta_puc="1528",
        ),
    )

    return CatalogSnapshot(
        ingresos=ingresos,
        costos_variables=costos_variables,
        gastos=gastos,
        impuestos=impuestos,
        inversiones=inversiones,
    )


def build_macro_table() -> MacroTable:
    return MacroTable.from_list(
        [
            MacroParameters(anio=2026, inflacion=0.045, trm=4200, tasa_renta=0.35, tasa_iva=0.19, tasa_politica=0.09, salario_minimo=1_750_905, uvt=52_374),
            MacroParameters(anio=2027, inflacion=0.040, trm=4300, tasa_renta=0.35, tasa_iva=0.19, tasa_politica=0.08, salario_minimo=1_838_450, uvt=54_731),
            MacroParameters(anio=2028, inflacion=0.035, trm=4350, tasa_renta=0.35, tasa_iva=0.19, tasa_politica=0.075, salario_minimo=1_920_180, uvt=56_920),
            MacroParameters(anio=2029, inflacion=0.032, trm=4400, tasa_renta=0.35, tasa_iva=0.19, tasa_politica=0.07, salario_minimo=1_995_070, uvt=58_912),
            MacroParameters(anio=2030, inflacion=0.030, trm=4450, tasa_renta=0.35, tasa_iva=0.19, tasa_politica=0.065, salario_minimo=2_066_890, uvt=60_797),
            MacroParameters(anio=2031, inflacion=0.030, trm=4500, tasa_renta=0.35, tasa_iva=0.19, tasa_politica=0.06, salario_minimo=2_134_060, uvt=62_621),
        ]
    )


def build_fiscal_constants() -> FiscalConstants:
    return FiscalConstants()


def build_sample_configuration() -> ModelConfiguration:
    return ModelConfiguration(
        anio_inicio=2026,
        anio_fin=2031,
        capital_inicial=500_000_000,
        meta_crecimiento_anual=0.30,
        mix_pago_digital=0.70,
        tasa_churn_mensual=0.05,
        dias_cartera=5,
        dias_proveedores=30,
        dias_escrow=5,
        marketing_pct=0.15,
    )


def build_sample_volumes() -> Dict[str, int]:
    """Monthly volumes for the first projected month."""
    return {
        "ING-001": 400,
        "ING-002": 60,
        "ING-003": 300,
        "ING-004": 500,
        "ING-005": 80,
        "ING-006": 3,
        "ING-007": 25,
    }
