"""
PM outputs — statistics, risk metrics, scenario aggregation, and sensitivity analysis.
"""

from .metrics import RiskMetrics, Statistics, compute_risk_metrics, compute_statistics
from .aggregator import MonteCarloResult, MonthlyProjection, aggregate_path_results, run_scenario
from .sensitivity import SensitivityResult, analyze_all, analyze_variable

__all__ = [
    "RiskMetrics",
    "Statistics",
    "compute_risk_metrics",
    "compute_statistics",
    "MonteCarloResult",
    "MonthlyProjection",
    "aggregate_path_results",
    "run_scenario",
    "SensitivityResult",
    "analyze_all",
    "analyze_variable",
]
