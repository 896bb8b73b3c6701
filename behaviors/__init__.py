"""
Behaviors — scenario multipliers and the mapping of sampled values onto the cash flow.
"""

from .base import MonthFactors
from .scenario import SCENARIO_TABLE, ScenarioMultipliers, get_scenario
from .attribution import classify, draw_month_factors
from .revenue_model import REVENUE_MODELS, detect_revenue_model

__all__ = [
    "MonthFactors",
    "SCENARIO_TABLE",
    "ScenarioMultipliers",
    "get_scenario",
    "classify",
    "draw_month_factors",
    "REVENUE_MODELS",
    "detect_revenue_model",
]
