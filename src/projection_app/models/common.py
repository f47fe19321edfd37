from __future__ import annotations

from datetime import date
from typing import Dict

from dateutil.relativedelta import relativedelta
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class EngineModel(BaseModel):
    """Immutable record exchanged with collaborators.

    Field names are snake_case; serialised output uses camelCase aliases
    (``ingresos_brutos`` -> ``ingresosBrutos``).
    """

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )

    def to_wire(self) -> Dict[str, object]:
        return self.model_dump(by_alias=True, mode="json")


def round_currency(value: float) -> int:
    return int(round(value))


def safe_ratio(numerator: float, denominator: float, default: float = 0.0) -> float:
    if not denominator:
        return default
    return numerator / denominator


def pct(numerator: float, denominator: float) -> float:
    return round(safe_ratio(numerator, denominator) * 100, 2)


def period_label(year: int, month: int | None = None) -> str:
    if month is None:
        return f"{year}"
    return f"{year}-{month:02d}"


def month_end(year: int, month: int) -> date:
    return date(year, month, 1) + relativedelta(months=1, days=-1)


# Base working days per month (Colombian calendar, 2026 reference)
BUSINESS_DAYS: Dict[int, int] = {
    1: 20,
    2: 19,
    3: 21,
    4: 19,
    5: 20,
    6: 20,
    7: 21,
    8: 20,
    9: 22,
    10: 20,
    11: 19,
    12: 17,
}


def business_days(month: int) -> int:
    return BUSINESS_DAYS.get(month, 20)
