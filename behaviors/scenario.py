"""
Scenario Parameter Table — named market stances as fixed multiplier sets.

A scenario is applied uniformly to every iteration that runs under it:

  optimistic:   faster growth, more adoption, leaner costs, weaker competition
  realistic:    everything neutral (1.0)
  pessimistic:  slower growth, less adoption, costlier operations, tougher competition

Every multiplier moves revenue up / costs down monotonically from pessimistic
to optimistic, so for identical random draws the per-path outcome (and hence
the scenario mean) is ordered optimistic >= realistic >= pessimistic.

The table is an immutable constant; there is nothing to initialise or reset.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from types import MappingProxyType
from typing import Dict, Mapping

import pandas as pd

from core.errors import InputValidationError


@dataclass(frozen=True)
class ScenarioMultipliers:
    market_growth: float
    adoption_rate: float
    cost_efficiency: float
    competition_impact: float
    description: str = ""

    def as_dict(self) -> Dict[str, float]:
        d = asdict(self)
        d.pop("description")
        return d


SCENARIO_TABLE: Mapping[str, ScenarioMultipliers] = MappingProxyType({
    "optimistic": ScenarioMultipliers(
        market_growth=1.3,
        adoption_rate=1.5,
        cost_efficiency=0.8,
        competition_impact=0.7,
        description="Favourable market: strong demand, efficient operations",
    ),
    "realistic": ScenarioMultipliers(
        market_growth=1.0,
        adoption_rate=1.0,
        cost_efficiency=1.0,
        competition_impact=1.0,
        description="Normal market conditions",
    ),
    "pessimistic": ScenarioMultipliers(
        market_growth=0.7,
        adoption_rate=0.6,
        cost_efficiency=1.3,
        competition_impact=1.4,
        description="Adverse market: weak demand, cost pressure, fierce competition",
    ),
})


def get_scenario(name: str) -> ScenarioMultipliers:
    try:
        return SCENARIO_TABLE[name]
    except KeyError:
        raise InputValidationError(
            f"Unknown scenario type {name!r} (expected one of {', '.join(SCENARIO_TABLE)})"
        ) from None


def scenario_table_frame() -> pd.DataFrame:
    """The multiplier table as a DataFrame, one row per scenario."""
    return pd.DataFrame([
        {"Scenario": name, **m.as_dict(), "Description": m.description}
        for name, m in SCENARIO_TABLE.items()
    ])
