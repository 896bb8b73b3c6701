"""
Per-month random factors shared by every iteration in a batch.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class MonthFactors:
    """
    Factors drawn for one month across a batch of iterations.

    Each array has shape (n_paths,).
    revenue and cost are products of the clamped multipliers attributed to them.
    churn is the product of churn modifiers (1.0 = base churn).
    growth_rate is the absolute monthly growth rate before market_growth.
    """

    revenue: np.ndarray
    cost: np.ndarray
    churn: np.ndarray
    growth_rate: np.ndarray
