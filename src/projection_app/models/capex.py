from __future__ import annotations

from typing import List

from pydantic import Field, conint

from .catalog import CatalogSnapshot
from .common import EngineModel


class CapexItem(EngineModel):
    codigo: str
    anio: int
    mes: conint(ge=1, le=12) = 1
    monto: float
    vida_util_meses: conint(ge=1) = 36
    valor_residual: float = 0.0
    es_intangible: bool = False


class CapexPlan(EngineModel):
    items: List[CapexItem] = Field(default_factory=list)

    @classmethod
    def from_catalog(cls, catalog: CatalogSnapshot, anio: int, mes: int = 1) -> "CapexPlan":
        """Schedule every active catalog investment once, at the given month."""
        return cls(
            items=[
                CapexItem(
                    codigo=item.codigo,
                    anio=anio,
                    mes=mes,
                    monto=item.valor_unitario,
                    vida_util_meses=item.vida_util_meses or 36,
                    es_intangible=item.es_intangible,
                )
                for item in catalog.inversiones
                if item.activo
            ]
        )

    def items_for(self, anio: int, mes: int) -> List[CapexItem]:
        return [item for item in self.items if item.anio == anio and item.mes == mes]


class DepreciationCharge(EngineModel):
    depreciacion: float
    amortizacion: float
