from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

# Canonical vocabularies accepted on the wire.
DISTRIBUTIONS: Tuple[str, ...] = ("normal", "uniform", "triangular", "lognormal")

IMPACTS: Tuple[str, ...] = ("revenue", "costs", "growth_rate", "market_share", "churn_rate")

SCENARIO_NAMES: Tuple[str, ...] = ("optimistic", "realistic", "pessimistic")

# Parameters each distribution needs before it can be sampled.
REQUIRED_PARAMETERS: Dict[str, Tuple[str, ...]] = {
    "normal": ("mean", "stdDev"),
    "uniform": ("min", "max"),
    "triangular": ("min", "max", "mode"),
    "lognormal": ("mean", "stdDev"),
}

# Fallbacks used only when EngineConfig.legacy_parameter_defaults is set.
LEGACY_PARAMETER_DEFAULTS: Dict[str, Dict[str, float]] = {
    "normal": {"mean": 1.0, "stdDev": 0.1},
    "uniform": {"min": 0.8, "max": 1.2},
    "triangular": {"min": 0.8, "max": 1.2, "mode": 1.0},
    "lognormal": {"mean": 0.0, "stdDev": 0.1},
}

# Baseline used when the idea omits a financial field.
DEFAULT_PRICE = 50.0
DEFAULT_MONTHLY_COST = 1000.0
DEFAULT_INITIAL_INVESTMENT = 10000.0

# Longest projection accepted, in months (ten years).
MAX_TIME_HORIZON = 120


@dataclass(frozen=True)
class SimulationVariable:
    """One uncertain input: a distribution plus the part of the cash flow it perturbs."""
    name: str
    distribution: str
    parameters: Dict[str, float] = field(default_factory=dict)
    impact: str = "revenue"

    def with_parameters(self, parameters: Dict[str, float]) -> "SimulationVariable":
        return SimulationVariable(
            name=self.name,
            distribution=self.distribution,
            parameters=dict(parameters),
            impact=self.impact,
        )


@dataclass(frozen=True)
class SimulationParams:
    time_horizon: int
    iterations: int
    confidence_level: float = 0.95
    variables: Tuple[SimulationVariable, ...] = ()
    seed: Optional[int] = None

    def with_variables(self, variables) -> "SimulationParams":
        return SimulationParams(
            time_horizon=self.time_horizon,
            iterations=self.iterations,
            confidence_level=self.confidence_level,
            variables=tuple(variables),
            seed=self.seed,
        )


@dataclass(frozen=True)
class IdeaFinancialBaseline:
    price: float = DEFAULT_PRICE
    monthly_cost: float = DEFAULT_MONTHLY_COST
    initial_investment: float = DEFAULT_INITIAL_INVESTMENT
