from __future__ import annotations

from typing import Dict, Mapping

from ..models.parameters import ModelConfiguration

YearPlan = Dict[str, Dict[int, int]]


def monthly_growth_rate(annual_growth: float) -> float:
    return (1 + annual_growth) ** (1 / 12) - 1


def expand_volumes(base: Mapping[str, int], config: ModelConfiguration) -> Dict[int, YearPlan]:
    """Grow first-month volumes month over month so each year compounds to the annual target."""
    rate = monthly_growth_rate(config.meta_crecimiento_anual)
    plan: Dict[int, YearPlan] = {}
    for offset, year in enumerate(config.years()):
        year_plan: YearPlan = {}
        for codigo, volume in base.items():
            start = max(0, volume)
            year_plan[codigo] = {
                month: round(start * (1 + rate) ** (offset * 12 + month - 1)) for month in range(1, 13)
            }
        plan[year] = year_plan
    return plan
