"""
Distribution statistics and risk metrics over the terminal cumulative profit.

All percentile cuts use the nearest-rank convention sorted[floor(n·p)]
rather than interpolation, so the reported numbers are always actual
simulated outcomes:

  median           sorted[floor(n · 0.50)]
  percentile_p     sorted[floor(n · p)]         p ∈ {0.05, 0.25, 0.75, 0.95}
  VaR95            sorted[floor(n · 0.05)]
  ExpectedShortfall  mean(sorted[0 .. varIndex])  (VaR index included)

stdDev is the population standard deviation (divide by n).
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Optional

import numpy as np

from core.utils import nearest_rank

VAR_LEVEL = 0.05
BREAK_EVEN_THRESHOLD = 0.5


@dataclass(frozen=True)
class Statistics:
    mean: float
    median: float
    std_dev: float
    min: float
    max: float
    percentile_5: float
    percentile_25: float
    percentile_75: float
    percentile_95: float
    confidence_level: float
    ci_lower: float
    ci_upper: float

    def to_dict(self) -> Dict:
        return {
            "mean": self.mean,
            "median": self.median,
            "stdDev": self.std_dev,
            "min": self.min,
            "max": self.max,
            "percentile_5": self.percentile_5,
            "percentile_25": self.percentile_25,
            "percentile_75": self.percentile_75,
            "percentile_95": self.percentile_95,
            "confidenceInterval": {
                "level": self.confidence_level,
                "lower": self.ci_lower,
                "upper": self.ci_upper,
            },
        }


@dataclass(frozen=True)
class RiskMetrics:
    probability_of_loss: float
    value_at_risk_95: float
    expected_shortfall: float
    break_even_month: Optional[int]

    def to_dict(self) -> Dict:
        return {
            "probability_of_loss": self.probability_of_loss,
            "value_at_risk_95": self.value_at_risk_95,
            "expected_shortfall": self.expected_shortfall,
            "break_even_month": self.break_even_month,
        }


def compute_statistics(final_values: np.ndarray, *, confidence_level: float = 0.95) -> Statistics:
    """
    Summary statistics of the terminal cumulative profit across iterations.

    The confidence interval is the central `confidence_level` band:
    nearest-rank cuts at (1 - cl) / 2 and (1 + cl) / 2.
    """
    values = np.asarray(final_values, dtype=float)
    if values.size == 0:
        raise ValueError("No simulated outcomes to summarise.")
    s = np.sort(values)
    tail = (1.0 - confidence_level) / 2.0
    return Statistics(
        mean=float(np.mean(values)),
        median=nearest_rank(s, 0.50),
        std_dev=float(np.std(values)),
        min=float(s[0]),
        max=float(s[-1]),
        percentile_5=nearest_rank(s, 0.05),
        percentile_25=nearest_rank(s, 0.25),
        percentile_75=nearest_rank(s, 0.75),
        percentile_95=nearest_rank(s, 0.95),
        confidence_level=float(confidence_level),
        ci_lower=nearest_rank(s, tail),
        ci_upper=nearest_rank(s, 1.0 - tail),
    )


def break_even_probabilities(cumulative_profit: np.ndarray) -> np.ndarray:
    """Fraction of iterations with cumulative profit >= 0, per month. Shape (horizon,)."""
    return np.mean(np.asarray(cumulative_profit) >= 0.0, axis=0)


def break_even_month(cumulative_profit: np.ndarray, *, threshold: float = BREAK_EVEN_THRESHOLD) -> Optional[int]:
    """First month (1-based) where at least `threshold` of iterations are non-negative."""
    n = cumulative_profit.shape[0]
    counts = np.sum(np.asarray(cumulative_profit) >= 0.0, axis=0)
    hits = np.nonzero(counts >= n * threshold)[0]
    return int(hits[0]) + 1 if hits.size else None


def compute_risk_metrics(cumulative_profit: np.ndarray) -> RiskMetrics:
    """
    Risk metrics from the full (n_paths, horizon) cumulative-profit matrix.

    probability_of_loss  = count(final < 0) / n
    value_at_risk_95     = sorted[floor(n · 0.05)]
    expected_shortfall   = mean(sorted[0 .. varIndex]) inclusive
    break_even_month     = first month with >= 50% non-negative, else None
    """
    cum = np.asarray(cumulative_profit, dtype=float)
    final = cum[:, -1]
    n = final.size
    s = np.sort(final)
    var_index = min(int(math.floor(n * VAR_LEVEL)), n - 1)
    return RiskMetrics(
        probability_of_loss=float(np.count_nonzero(final < 0.0)) / n,
        value_at_risk_95=float(s[var_index]),
        expected_shortfall=float(np.mean(s[: var_index + 1])),
        break_even_month=break_even_month(cum),
    )
