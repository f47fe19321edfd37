from __future__ import annotations

from enum import Enum
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from pydantic import Field, ValidationError, model_validator

from ..errors import CatalogError
from .common import EngineModel


class ItemKind(str, Enum):
    REVENUE = "ingreso"
    VARIABLE_COST = "costo_variable"
    FIXED_EXPENSE = "gasto"
    TAX = "impuesto"
    CAPEX = "capex"


class Frequency(str, Enum):
    PER_TRANSACTION = "por_transaccion"
    PER_DOCUMENT = "por_documento"
    PER_CASE = "por_caso"
    MONTHLY = "mensual"
    BIMONTHLY = "bimestral"
    ANNUAL = "anual"
    ONE_TIME = "unica_vez"


class CostBucket(str, Enum):
    PROFESSIONAL_PAYOUT = "pago_profesional"
    GATEWAY = "pasarela"
    SMS = "sms"
    WHATSAPP = "whatsapp"
    COMPLIANCE = "cumplimiento"
    INFRASTRUCTURE = "infraestructura"


class ExpenseClass(str, Enum):
    ADMINISTRATIVE = "administrativos"
    TECHNOLOGY = "tecnologia"
    MARKETING = "marketing"


class CostBasis(str, Enum):
    OWN_VOLUME = "volumen_propio"
    LINKED_VOLUME = "volumen_vinculado"
    LINKED_VALUE = "valor_vinculado"
    TRANSACTIONAL_VOLUME = "volumen_transaccional"
    ESCROW_VOLUME = "volumen_escrow"
    DIGITAL_VOLUME = "volumen_digital"
    CASH_VOLUME = "volumen_efectivo"


class CatalogItem(EngineModel):
    codigo: str
    concepto: str
    tipo: ItemKind
    categoria: str
    sub_categoria: str = ""
    valor_unitario: float
    frecuencia: Frequency = Frequency.MONTHLY
    vinculado_a: Optional[str] = None
    es_porcentaje: bool = False
    grava_iva: bool = False
    es_nomina: bool = False
    es_cac: bool = False
    activo: bool = True
    genera_escrow: bool = False
    rubro: Optional[CostBucket] = None
    clase_gasto: ExpenseClass = ExpenseClass.ADMINISTRATIVE
    base_calculo: CostBasis = CostBasis.OWN_VOLUME
    es_intangible: bool = False
    vida_util_meses: int = Field(default=0, ge=0)
    cuenta_puc: str = ""

    @model_validator(mode="after")
    def _percentage_is_fraction(self) -> "CatalogItem":
        if self.es_porcentaje and not 0 <= self.valor_unitario <= 1:
            raise ValueError(f"{self.codigo}: percentage items store a fraction, got {self.valor_unitario}")
        return self


def _parse_items(records: Iterable[Mapping[str, object]]) -> Tuple[CatalogItem, ...]:
    items: List[CatalogItem] = []
    for record in records:
        try:
            items.append(CatalogItem.model_validate(record))
        except ValidationError as exc:
            raise CatalogError(f"Invalid catalog record {record.get('codigo')}: {exc.errors()[0]['msg']}") from exc
    return tuple(items)


class CatalogSnapshot(EngineModel):
    """Read-only catalog of priced concepts.

    A snapshot is never edited in place: overrides produce a new snapshot.
    """

    ingresos: Tuple[CatalogItem, ...] = ()
    costos_variables: Tuple[CatalogItem, ...] = ()
    gastos: Tuple[CatalogItem, ...] = ()
    impuestos: Tuple[CatalogItem, ...] = ()
    inversiones: Tuple[CatalogItem, ...] = ()

    @model_validator(mode="after")
    def _check_integrity(self) -> "CatalogSnapshot":
        seen: Dict[str, CatalogItem] = {}
        for item in self.all_items():
            if item.codigo in seen:
                raise CatalogError(f"Duplicate catalog code {item.codigo}")
            seen[item.codigo] = item
        for item in self.all_items():
            if item.vinculado_a and item.vinculado_a not in seen:
                raise CatalogError(f"Item {item.codigo} linked to unknown code {item.vinculado_a}")
        return self

    @classmethod
    def from_records(
        cls,
        ingresos: Iterable[Mapping[str, object]] = (),
        costos_variables: Iterable[Mapping[str, object]] = (),
        gastos: Iterable[Mapping[str, object]] = (),
        impuestos: Iterable[Mapping[str, object]] = (),
        inversiones: Iterable[Mapping[str, object]] = (),
    ) -> "CatalogSnapshot":
        return cls(
            ingresos=_parse_items(ingresos),
            costos_variables=_parse_items(costos_variables),
            gastos=_parse_items(gastos),
            impuestos=_parse_items(impuestos),
            inversiones=_parse_items(inversiones),
        )

    def all_items(self) -> List[CatalogItem]:
        return [*self.ingresos, *self.costos_variables, *self.gastos, *self.impuestos, *self.inversiones]

    def get_item_by_code(self, codigo: str) -> Optional[CatalogItem]:
        return next((item for item in self.all_items() if item.codigo == codigo), None)

    def get_linked_cost(self, revenue_code: str) -> Optional[CatalogItem]:
        return next((item for item in self.costos_variables if item.vinculado_a == revenue_code), None)

    def get_total_payroll(self, benefits_factor: float) -> float:
        base = sum(item.valor_unitario for item in self.gastos if item.es_nomina and item.activo)
        return base * benefits_factor

    def items_by_kind(self, tipo: ItemKind) -> List[CatalogItem]:
        return [item for item in self.all_items() if item.tipo == tipo and item.activo]

    def get_capex_total(self) -> float:
        return sum(item.valor_unitario for item in self.inversiones if item.activo)

    def with_overrides(self, precios: Mapping[str, float]) -> "CatalogSnapshot":
        """Return a new snapshot with unit values replaced for the given codes."""
        if not precios:
            return self
        unknown = sorted(set(precios) - {item.codigo for item in self.all_items()})
        if unknown:
            raise CatalogError(f"Price overrides reference unknown codes {unknown}")

        def _apply(items: Tuple[CatalogItem, ...]) -> Tuple[CatalogItem, ...]:
            updated: List[CatalogItem] = []
            for item in items:
                if item.codigo not in precios:
                    updated.append(item)
                    continue
                try:
                    updated.append(CatalogItem.model_validate({**item.model_dump(), "valor_unitario": precios[item.codigo]}))
                except ValidationError as exc:
                    raise CatalogError(f"Invalid override for {item.codigo}: {exc.errors()[0]['msg']}") from exc
            return tuple(updated)

        return CatalogSnapshot(
            ingresos=_apply(self.ingresos),
            costos_variables=_apply(self.costos_variables),
            gastos=_apply(self.gastos),
            impuestos=_apply(self.impuestos),
            inversiones=_apply(self.inversiones),
        )
