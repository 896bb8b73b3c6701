"""
Path Simulator — monthly cash-flow trajectories for a batch of iterations.

For month m = 1..horizon (t = m - 1), with factors drawn fresh every month:

  revenue(m) = price · (1 + g · market_growth)^t
               · Π revenue factors · churn adjustment
               · adoption_rate / competition_impact            clamped >= 0
  cost(m)    = monthly_cost · (1 + cost_growth)^t
               · Π cost factors · cost_efficiency              clamped >= 0
  profit(m)  = revenue(m) - cost(m)
  cumulative(m) = cumulative(m - 1) + profit(m),  cumulative(0) = -initial_investment

g is the base monthly growth rate (0.05) unless growth_rate variables are
declared. The churn adjustment is (1 - base_churn · c) / (1 - base_churn),
i.e. neutral at c = 1.

Iterations are independent rows of the batch; a single trajectory is just a
batch of one.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, NamedTuple, Optional, Sequence

import numpy as np
import pandas as pd

from behaviors.attribution import draw_month_factors
from behaviors.scenario import ScenarioMultipliers
from core.config import EngineConfig
from core.schema import IdeaFinancialBaseline, SimulationVariable


class PathMonth(NamedTuple):
    month: int
    revenue: float
    costs: float
    profit: float
    cumulative_profit: float


@dataclass(frozen=True)
class PathBatch:
    """
    Output of simulate_paths: one row per iteration, one column per month.
    """
    revenue: np.ndarray            # shape (n_paths, horizon)
    costs: np.ndarray              # shape (n_paths, horizon)
    profit: np.ndarray             # shape (n_paths, horizon)
    cumulative_profit: np.ndarray  # shape (n_paths, horizon)

    @property
    def n_paths(self) -> int:
        return self.cumulative_profit.shape[0]

    @property
    def horizon(self) -> int:
        return self.cumulative_profit.shape[1]

    @property
    def final_values(self) -> np.ndarray:
        """Terminal cumulative profit of each iteration."""
        return self.cumulative_profit[:, -1]

    def get_path(self, path_idx: int) -> List[PathMonth]:
        return [
            PathMonth(
                month=t + 1,
                revenue=float(self.revenue[path_idx, t]),
                costs=float(self.costs[path_idx, t]),
                profit=float(self.profit[path_idx, t]),
                cumulative_profit=float(self.cumulative_profit[path_idx, t]),
            )
            for t in range(self.horizon)
        ]

    def to_dataframe(self) -> pd.DataFrame:
        """Long format: path_id, month, revenue, costs, profit, cumulative_profit."""
        n, h = self.cumulative_profit.shape
        return pd.DataFrame({
            "path_id": np.repeat(np.arange(n), h),
            "month": np.tile(np.arange(1, h + 1), n),
            "revenue": self.revenue.reshape(-1),
            "costs": self.costs.reshape(-1),
            "profit": self.profit.reshape(-1),
            "cumulative_profit": self.cumulative_profit.reshape(-1),
        })

    @classmethod
    def concat(cls, batches: Sequence["PathBatch"]) -> "PathBatch":
        return cls(
            revenue=np.vstack([b.revenue for b in batches]),
            costs=np.vstack([b.costs for b in batches]),
            profit=np.vstack([b.profit for b in batches]),
            cumulative_profit=np.vstack([b.cumulative_profit for b in batches]),
        )


def simulate_paths(
    baseline: IdeaFinancialBaseline,
    horizon: int,
    variables: Sequence[SimulationVariable],
    multipliers: ScenarioMultipliers,
    rng: np.random.Generator,
    n_paths: int,
    config: Optional[EngineConfig] = None,
) -> PathBatch:
    """
    Simulate `n_paths` independent trajectories over `horizon` months.

    Random numbers are consumed month by month, variable by variable, each
    draw vectorised across the batch.
    """
    cfg = config or EngineConfig()
    m = multipliers

    revenue = np.zeros((n_paths, horizon), dtype=float)
    costs = np.zeros((n_paths, horizon), dtype=float)
    cumulative = np.full(n_paths, -float(baseline.initial_investment))
    cumulative_out = np.zeros((n_paths, horizon), dtype=float)

    churn_base = float(cfg.base_churn_rate)
    scenario_scale = float(m.adoption_rate) / float(m.competition_impact)
    cost_growth = 1.0 + float(cfg.cost_growth_rate)

    for t in range(horizon):
        f = draw_month_factors(variables, m, rng, n_paths, cfg)

        growth = np.power(1.0 + f.growth_rate * float(m.market_growth), t)
        churn_adj = (1.0 - churn_base * f.churn) / (1.0 - churn_base)
        rev_t = float(baseline.price) * growth * f.revenue * churn_adj * scenario_scale
        rev_t = np.maximum(rev_t, 0.0)

        cost_t = float(baseline.monthly_cost) * cost_growth ** t * f.cost * float(m.cost_efficiency)
        cost_t = np.maximum(cost_t, 0.0)

        cumulative = cumulative + (rev_t - cost_t)
        revenue[:, t] = rev_t
        costs[:, t] = cost_t
        cumulative_out[:, t] = cumulative

    return PathBatch(
        revenue=revenue,
        costs=costs,
        profit=revenue - costs,
        cumulative_profit=cumulative_out,
    )


def simulate_path(
    baseline: IdeaFinancialBaseline,
    horizon: int,
    variables: Sequence[SimulationVariable],
    multipliers: ScenarioMultipliers,
    rng: np.random.Generator,
    config: Optional[EngineConfig] = None,
) -> List[PathMonth]:
    """One trajectory: [(month, revenue, costs, profit, cumulative_profit), ...]."""
    batch = simulate_paths(baseline, horizon, variables, multipliers, rng, 1, config)
    return batch.get_path(0)
