"""
Aggregate N simulated paths into one scenario's MonteCarloResult.

Instead of: "month 24 cumulative profit = 3,200" (one path, no context)
The founder gets:
  - the distribution of final cumulative profit (mean, median, spread, tails)
  - a month-by-month projection averaged over all iterations, with the
    probability of being at or above break-even each month
  - risk metrics: P(loss), VaR95, expected shortfall, break-even month
  - headline final metrics: revenue, costs, ROI, NPV, margin, payback

run_scenario() is the Monte Carlo Aggregator entry point: it runs the paths
(engine.runner) and aggregates them (this module).
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import numpy as np
import pandas as pd

from behaviors.scenario import ScenarioMultipliers, get_scenario
from core.config import EngineConfig
from core.errors import NonFiniteOutcomeError
from core.schema import IdeaFinancialBaseline, SimulationParams
from core.utils import discount_factors
from engine.paths import PathBatch
from engine.runner import run_paths

from .metrics import (
    RiskMetrics,
    Statistics,
    break_even_probabilities,
    compute_risk_metrics,
    compute_statistics,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MonthlyProjection:
    month: int
    revenue: float
    costs: float
    profit: float
    cumulative_profit: float
    break_even_probability: float

    def to_dict(self) -> Dict:
        return {
            "month": self.month,
            "revenue": self.revenue,
            "costs": self.costs,
            "profit": self.profit,
            "cumulative_profit": self.cumulative_profit,
            "break_even_probability": self.break_even_probability,
        }


@dataclass(frozen=True)
class FinalMetrics:
    """Headline numbers derived from the averaged projection."""
    total_revenue: float
    total_costs: float
    net_profit: float
    roi: Optional[float]            # % of initial investment; None if nothing was invested
    npv: float
    profit_margin: float            # % of total revenue
    payback_period: Optional[int]

    def to_dict(self) -> Dict:
        return {
            "totalRevenue": self.total_revenue,
            "totalCosts": self.total_costs,
            "netProfit": self.net_profit,
            "roi": self.roi,
            "npv": self.npv,
            "profitMargin": self.profit_margin,
            "paybackPeriod": self.payback_period,
        }


@dataclass
class MonteCarloResult:
    scenario: str
    statistics: Statistics
    projections: List[MonthlyProjection]
    risk_metrics: RiskMetrics
    final_metrics: FinalMetrics
    n_iterations: int = 0
    final_values: np.ndarray = field(default_factory=lambda: np.array([]), repr=False)

    def to_dict(self) -> Dict:
        return {
            "scenario": self.scenario,
            "statistics": self.statistics.to_dict(),
            "projections": [p.to_dict() for p in self.projections],
            "riskMetrics": self.risk_metrics.to_dict(),
            "finalMetrics": self.final_metrics.to_dict(),
        }

    def projections_frame(self) -> pd.DataFrame:
        return pd.DataFrame([p.to_dict() for p in self.projections])


def build_projections(batch: PathBatch) -> List[MonthlyProjection]:
    """Cross-iteration means per month, plus P(cumulative profit >= 0)."""
    revenue = batch.revenue.mean(axis=0)
    costs = batch.costs.mean(axis=0)
    profit = batch.profit.mean(axis=0)
    cumulative = batch.cumulative_profit.mean(axis=0)
    be_prob = break_even_probabilities(batch.cumulative_profit)
    return [
        MonthlyProjection(
            month=t + 1,
            revenue=float(revenue[t]),
            costs=float(costs[t]),
            profit=float(profit[t]),
            cumulative_profit=float(cumulative[t]),
            break_even_probability=float(be_prob[t]),
        )
        for t in range(batch.horizon)
    ]


def compute_final_metrics(
    projections: List[MonthlyProjection],
    statistics: Statistics,
    risk: RiskMetrics,
    baseline: IdeaFinancialBaseline,
    *,
    annual_discount_rate: float = 0.10,
) -> FinalMetrics:
    """
    total_revenue / total_costs  sums of the averaged monthly projection
    net_profit                   mean final cumulative profit
    roi                          net_profit / initial_investment × 100
    npv                          Σ profit_m / (1 + r/12)^m - initial_investment
    profit_margin                (revenue - costs) / revenue × 100, 0 with no revenue
    payback_period               the break-even month
    """
    revenue = np.array([p.revenue for p in projections])
    costs = np.array([p.costs for p in projections])
    profit = np.array([p.profit for p in projections])
    total_revenue = float(revenue.sum())
    total_costs = float(costs.sum())
    investment = float(baseline.initial_investment)

    npv = float((profit * discount_factors(len(profit), annual_discount_rate)).sum()) - investment
    roi = statistics.mean / investment * 100.0 if investment > 0 else None
    margin = (total_revenue - total_costs) / total_revenue * 100.0 if total_revenue > 0 else 0.0

    return FinalMetrics(
        total_revenue=total_revenue,
        total_costs=total_costs,
        net_profit=statistics.mean,
        roi=roi,
        npv=npv,
        profit_margin=margin,
        payback_period=risk.break_even_month,
    )


def _require_finite(
    scenario: str,
    batch: PathBatch,
    stats_: Statistics,
    projections: List[MonthlyProjection],
    final: FinalMetrics,
) -> None:
    """Raise NonFiniteOutcomeError if any reported number overflowed to inf / nan."""
    arrays = (batch.revenue, batch.costs, batch.cumulative_profit)
    summary = [
        stats_.mean, stats_.std_dev,
        final.total_revenue, final.total_costs, final.npv, final.profit_margin,
    ]
    summary += [p.cumulative_profit for p in projections]
    summary += [p.profit for p in projections]
    if not (all(np.isfinite(a).all() for a in arrays) and np.isfinite(summary).all()):
        raise NonFiniteOutcomeError(scenario)


def aggregate_path_results(
    batch: PathBatch,
    *,
    scenario: str,
    baseline: IdeaFinancialBaseline,
    confidence_level: float = 0.95,
    config: Optional[EngineConfig] = None,
) -> MonteCarloResult:
    """
    Aggregate a PathBatch into a MonteCarloResult.

    Parameters
    ----------
    batch : PathBatch
        Output of engine.runner.run_paths(), one row per iteration
    scenario : str
        Scenario label reported back to the caller
    baseline : IdeaFinancialBaseline
        Used for ROI / NPV
    confidence_level : float
        Fraction for the central confidence interval
    """
    cfg = config or EngineConfig()
    stats_ = compute_statistics(batch.final_values, confidence_level=confidence_level)
    risk = compute_risk_metrics(batch.cumulative_profit)
    projections = build_projections(batch)
    final = compute_final_metrics(
        projections, stats_, risk, baseline, annual_discount_rate=cfg.annual_discount_rate,
    )
    _require_finite(scenario, batch, stats_, projections, final)
    return MonteCarloResult(
        scenario=scenario,
        statistics=stats_,
        projections=projections,
        risk_metrics=risk,
        final_metrics=final,
        n_iterations=batch.n_paths,
        final_values=batch.final_values.copy(),
    )


def run_scenario(
    baseline: IdeaFinancialBaseline,
    params: SimulationParams,
    scenario_name: str,
    config: Optional[EngineConfig] = None,
    *,
    multipliers: Optional[ScenarioMultipliers] = None,
    cancel_event: Optional[threading.Event] = None,
) -> MonteCarloResult:
    """
    Run the full Monte Carlo for one scenario: N independent paths, then aggregate.

    `multipliers` overrides the table lookup (the sensitivity analyzer passes
    the realistic multipliers explicitly).
    """
    cfg = config or EngineConfig()
    m = multipliers or get_scenario(scenario_name)
    logger.info(
        "Running %s scenario: %d iterations x %d months, %d variable(s)",
        scenario_name, params.iterations, params.time_horizon, len(params.variables),
    )
    batch = run_paths(baseline, params, m, cfg, cancel_event=cancel_event)
    result = aggregate_path_results(
        batch,
        scenario=scenario_name,
        baseline=baseline,
        confidence_level=params.confidence_level,
        config=cfg,
    )
    logger.info(
        "%s scenario done: mean=%.2f P(loss)=%.3f break-even=%s",
        scenario_name, result.statistics.mean, result.risk_metrics.probability_of_loss,
        result.risk_metrics.break_even_month,
    )
    return result
