"""
Starter variable set for a business idea.

When a founder has no data of their own, these five uncertainties cover the
usual suspects: demand, acquisition cost, competitive pressure, operational
efficiency and market growth. Values are relative factors around 1.0 except
the growth rate, which is an absolute monthly rate.
"""

from __future__ import annotations

from typing import Dict, List, Tuple

from core.schema import SimulationVariable

DEFAULT_VARIABLES: Tuple[SimulationVariable, ...] = (
    SimulationVariable(
        name="market_demand",
        distribution="normal",
        parameters={"mean": 1.0, "stdDev": 0.2},
        impact="revenue",
    ),
    SimulationVariable(
        name="customer_acquisition_cost",
        distribution="triangular",
        parameters={"min": 0.8, "max": 1.5, "mode": 1.0},
        impact="costs",
    ),
    SimulationVariable(
        name="competition_impact",
        distribution="uniform",
        parameters={"min": 0.7, "max": 1.3},
        impact="market_share",
    ),
    SimulationVariable(
        name="operational_efficiency",
        distribution="normal",
        parameters={"mean": 1.0, "stdDev": 0.15},
        impact="costs",
    ),
    SimulationVariable(
        name="market_growth_rate",
        distribution="triangular",
        parameters={"min": 0.02, "max": 0.15, "mode": 0.05},
        impact="growth_rate",
    ),
)

DEFAULT_SIMULATION_SETTINGS: Dict[str, float] = {
    "time_horizon": 36,
    "iterations": 1000,
    "confidence_level": 0.95,
}


def default_variables() -> List[SimulationVariable]:
    """Fresh list of the starter variables (safe to mutate)."""
    return [v.with_parameters(v.parameters) for v in DEFAULT_VARIABLES]
