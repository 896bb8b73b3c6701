"""
Factor attribution — decide which part of the cash flow a sampled value perturbs.

Two modes:
  "impact" (default): dispatch on the variable's declared impact
      revenue, market_share  -> revenue multiplier
      costs                  -> cost multiplier
      churn_rate             -> churn modifier
      growth_rate            -> absolute monthly growth rate
  "name": compatibility with historical results, which matched on the name
      "revenue" / "demand"   -> revenue multiplier
      "cost" / "expense"     -> cost multiplier
      "churn"                -> churn modifier
      anything else          -> ignored (still sampled)

Every declared variable is sampled every month whether or not it is
attributed, so the random stream layout never depends on attribution.
"""

from __future__ import annotations

from typing import Optional, Sequence

import numpy as np

from core.config import EngineConfig
from core.schema import SimulationVariable
from distributions.sampler import sample_variable

from .base import MonthFactors
from .scenario import ScenarioMultipliers

IMPACT_TO_FACTOR = {
    "revenue": "revenue",
    "market_share": "revenue",
    "costs": "cost",
    "churn_rate": "churn",
    "growth_rate": "growth",
}

NAME_PATTERNS = (
    (("revenue", "demand"), "revenue"),
    (("cost", "expense"), "cost"),
    (("churn",), "churn"),
)


def classify(variable: SimulationVariable, mode: str = "impact") -> Optional[str]:
    """Return "revenue" | "cost" | "churn" | "growth" or None."""
    if mode == "name":
        name = variable.name.lower()
        for needles, kind in NAME_PATTERNS:
            if any(n in name for n in needles):
                return kind
        return None
    return IMPACT_TO_FACTOR.get(variable.impact)


def draw_month_factors(
    variables: Sequence[SimulationVariable],
    multipliers: ScenarioMultipliers,
    rng: np.random.Generator,
    n_paths: int,
    config: EngineConfig,
) -> MonthFactors:
    """
    Draw one value per variable per iteration and fold them into MonthFactors.

    With no declared variables the defaults carry the scenario instead:
    revenue = market_growth, cost = cost_efficiency.
    """
    if not variables:
        return MonthFactors(
            revenue=np.full(n_paths, float(multipliers.market_growth)),
            cost=np.full(n_paths, float(multipliers.cost_efficiency)),
            churn=np.ones(n_paths),
            growth_rate=np.full(n_paths, float(config.base_growth_rate)),
        )

    revenue = np.ones(n_paths)
    cost = np.ones(n_paths)
    churn = np.ones(n_paths)
    growth_sum = np.zeros(n_paths)
    n_growth = 0

    for v in variables:
        draws = sample_variable(v, rng, n_paths, legacy=config.legacy_parameter_defaults)
        kind = classify(v, config.attribution)
        if kind == "revenue":
            revenue = revenue * np.clip(draws, *config.revenue_factor_bounds)
        elif kind == "cost":
            cost = cost * np.clip(draws, *config.cost_factor_bounds)
        elif kind == "churn":
            churn = churn * np.clip(draws, *config.churn_factor_bounds)
        elif kind == "growth":
            growth_sum = growth_sum + np.clip(draws, *config.growth_rate_bounds)
            n_growth += 1

    growth = growth_sum / n_growth if n_growth else np.full(n_paths, float(config.base_growth_rate))
    return MonthFactors(revenue=revenue, cost=cost, churn=churn, growth_rate=growth)
