from __future__ import annotations

from typing import Dict, Mapping

from fastapi import FastAPI, HTTPException

from .errors import ProjectionError
from .logging_config import configure_logging, get_logger
from .models.capex import CapexPlan
from .models.catalog import CatalogSnapshot
from .models.parameters import ModelConfiguration
from .sample_data import build_default_catalog, build_fiscal_constants, build_macro_table
from .schemas import (
    CatalogResponse,
    MonthProjectionRequest,
    MonthProjectionResponse,
    RunwayRequest,
    RunwayResponse,
    StatementsRequest,
    StatementsResponse,
    UnitDiagnosticRequest,
    UnitDiagnosticResponse,
    YearProjectionRequest,
    YearProjectionResponse,
)
from .services.calculator import ProjectionEngine
from .services.diagnostics import diagnose_unit
from .services.metrics import burn_rate_summary, recurring_revenue_of
from .services.statements import StatementBuilder
from .services.volumes import expand_volumes
from .settings import get_settings

settings = get_settings()
configure_logging(settings.log_level)
log = get_logger(__name__)

app = FastAPI(title=settings.api_title, version=settings.api_version)

CATALOG = build_default_catalog()
MACRO = build_macro_table()
CONSTANTS = build_fiscal_constants()


def _catalog(precios: Mapping[str, float]) -> CatalogSnapshot:
    try:
        return CATALOG.with_overrides(precios)
    except ProjectionError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


def _check_horizon(config: ModelConfiguration) -> None:
    years = config.anio_fin - config.anio_inicio + 1
    if years > settings.max_projection_years:
        raise HTTPException(
            status_code=400,
            detail=f"Projection spans {years} years; at most {settings.max_projection_years} allowed",
        )


@app.get("/health")
def healthcheck() -> Dict[str, str]:
    return {"status": "ok", "constants": CONSTANTS.version}


@app.get("/catalog", response_model=CatalogResponse)
def get_catalog() -> CatalogResponse:
    return CatalogResponse(catalogo=CATALOG, constantes=CONSTANTS)


@app.post("/projections/month", response_model=MonthProjectionResponse)
def project_month(payload: MonthProjectionRequest) -> MonthProjectionResponse:
    catalog = _catalog(payload.precios)
    engine = ProjectionEngine(catalog, MACRO, CONSTANTS)
    try:
        projection = engine.project_month(
            payload.anio,
            payload.mes,
            payload.volumenes,
            payload.config,
            depreciacion=payload.depreciacion,
            amortizacion=payload.amortizacion,
        )
    except ProjectionError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return MonthProjectionResponse(proyeccion=projection, ingresos_recurrentes=recurring_revenue_of(projection, catalog))


@app.post("/projections/year", response_model=YearProjectionResponse)
def project_year(payload: YearProjectionRequest) -> YearProjectionResponse:
    engine = ProjectionEngine(_catalog(payload.precios), MACRO, CONSTANTS)
    try:
        projection = engine.project_year(payload.anio, payload.volumenes, payload.config)
    except ProjectionError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return YearProjectionResponse(proyeccion=projection)


@app.post("/statements", response_model=StatementsResponse)
def build_statements(payload: StatementsRequest) -> StatementsResponse:
    _check_horizon(payload.config)
    catalog = _catalog(payload.precios)
    builder = StatementBuilder(catalog, MACRO, CONSTANTS)
    capex_plan = None if payload.incluir_capex else CapexPlan()
    try:
        run = builder.run(payload.config, expand_volumes(payload.volumenes_base, payload.config), capex_plan=capex_plan)
    except ProjectionError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    if not run.valido:
        log.warning("statements_not_reconciled", anio_inicio=payload.config.anio_inicio, anio_fin=payload.config.anio_fin)
    return StatementsResponse(valido=run.valido, anios=run.anios)


@app.post("/metrics/runway", response_model=RunwayResponse)
def runway(payload: RunwayRequest) -> RunwayResponse:
    result = burn_rate_summary(
        payload.ingresos_mensuales,
        payload.costos_mensuales,
        payload.capital_disponible,
        CONSTANTS,
    )
    return RunwayResponse(resultado=result)


@app.post("/diagnostics/unit", response_model=UnitDiagnosticResponse)
def unit_diagnostic(payload: UnitDiagnosticRequest) -> UnitDiagnosticResponse:
    catalog = _catalog(payload.precios)
    try:
        diagnostic = diagnose_unit(
            payload.codigo,
            catalog,
            MACRO,
            CONSTANTS,
            payload.config,
            volumen=payload.volumen,
            mix_digital=payload.mix_digital,
        )
    except ProjectionError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return UnitDiagnosticResponse(diagnostico=diagnostic)
