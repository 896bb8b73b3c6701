"""
One-at-a-time sensitivity analysis.

For each declared variable:
  1. base run        : the unmodified parameters (shared by all variables)
  2. perturbed run   : the same parameters with that one variable's central
                       value raised by 10% (distributions.perturb_variable)
  3. impact_on_outcome = (perturbed_mean - base_mean) / |base_mean| × 100
     correlation       = impact_on_outcome / 10   (% outcome change per 1% input change)
  4. impact_on_break_even = perturbed_month - base_month

Both runs use the same seed, so they see identical underlying random numbers
and the difference reflects the perturbation, not sampling noise.

A run that never breaks even has break_even_month None. The delta is None
whenever either side is None; "never" is not treated as month 0.

Total work is one base run plus one run per variable.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Tuple

import pandas as pd

from behaviors.scenario import ScenarioMultipliers, get_scenario
from core.config import EngineConfig
from core.schema import IdeaFinancialBaseline, SimulationParams, SimulationVariable
from core.utils import fresh_seed
from distributions.sampler import perturb_variable

from .aggregator import MonteCarloResult, run_scenario

logger = logging.getLogger(__name__)

PERTURBATION = 0.10
SENSITIVITY_SCENARIO = "realistic"


@dataclass(frozen=True)
class SensitivityResult:
    variable_name: str
    correlation: float
    impact_on_outcome: float
    impact_on_break_even: Optional[int]
    base_mean: float
    perturbed_mean: float

    def to_dict(self) -> Dict:
        return {
            "variable": self.variable_name,
            "correlation": self.correlation,
            "impact_on_npv": self.impact_on_outcome,
            "impact_on_break_even": self.impact_on_break_even,
        }


def elasticity(base_mean: float, perturbed_mean: float, pct: float = PERTURBATION) -> Tuple[float, float]:
    """Return (impact_on_outcome in %, elasticity per 1% input change)."""
    if base_mean == 0:
        return 0.0, 0.0
    impact = (perturbed_mean - base_mean) / abs(base_mean) * 100.0
    return impact, impact / (pct * 100.0)


def break_even_delta(base_month: Optional[int], perturbed_month: Optional[int]) -> Optional[int]:
    if base_month is None or perturbed_month is None:
        return None
    return perturbed_month - base_month


def analyze_variable(
    baseline: IdeaFinancialBaseline,
    params: SimulationParams,
    variable: SimulationVariable,
    multipliers: ScenarioMultipliers,
    config: Optional[EngineConfig] = None,
    *,
    base: Optional[MonteCarloResult] = None,
    cancel_event: Optional[threading.Event] = None,
) -> SensitivityResult:
    """
    Estimate one variable's marginal effect on the mean final cumulative profit.

    Parameters
    ----------
    base : MonteCarloResult, optional
        A precomputed base run with the same params/multipliers/seed. Computed
        here when omitted.
    """
    cfg = config or EngineConfig()
    if params.seed is None:
        # base and perturbed runs must share a seed
        params = replace(params, seed=fresh_seed())
        base = None
    if base is None:
        base = run_scenario(
            baseline, params, SENSITIVITY_SCENARIO, cfg,
            multipliers=multipliers, cancel_event=cancel_event,
        )

    bumped = perturb_variable(variable, PERTURBATION, legacy=cfg.legacy_parameter_defaults)
    perturbed_params = params.with_variables(
        bumped if v.name == variable.name else v for v in params.variables
    )
    perturbed = run_scenario(
        baseline, perturbed_params, SENSITIVITY_SCENARIO, cfg,
        multipliers=multipliers, cancel_event=cancel_event,
    )

    impact, corr = elasticity(base.statistics.mean, perturbed.statistics.mean)
    return SensitivityResult(
        variable_name=variable.name,
        correlation=corr,
        impact_on_outcome=impact,
        impact_on_break_even=break_even_delta(
            base.risk_metrics.break_even_month,
            perturbed.risk_metrics.break_even_month,
        ),
        base_mean=base.statistics.mean,
        perturbed_mean=perturbed.statistics.mean,
    )


def analyze_all(
    baseline: IdeaFinancialBaseline,
    params: SimulationParams,
    config: Optional[EngineConfig] = None,
    *,
    multipliers: Optional[ScenarioMultipliers] = None,
    base: Optional[MonteCarloResult] = None,
    cancel_event: Optional[threading.Event] = None,
) -> List[SensitivityResult]:
    """Sensitivity of every declared variable, in declaration order, against "realistic"."""
    if not params.variables:
        return []
    cfg = config or EngineConfig()
    m = multipliers or get_scenario(SENSITIVITY_SCENARIO)
    if params.seed is None:
        params = replace(params, seed=fresh_seed())
        base = None
    if base is None:
        base = run_scenario(
            baseline, params, SENSITIVITY_SCENARIO, cfg, multipliers=m, cancel_event=cancel_event,
        )

    logger.info("Sensitivity analysis over %d variable(s)", len(params.variables))
    return [
        analyze_variable(baseline, params, v, m, cfg, base=base, cancel_event=cancel_event)
        for v in params.variables
    ]


def sensitivity_frame(results: List[SensitivityResult]) -> pd.DataFrame:
    """Tornado-style table, most influential variable first."""
    df = pd.DataFrame([
        {
            "Variable": r.variable_name,
            "Elasticity": r.correlation,
            "Impact on Outcome (%)": r.impact_on_outcome,
            "Impact on Break-even (months)": r.impact_on_break_even,
        }
        for r in results
    ])
    if df.empty:
        return df
    return df.reindex(df["Elasticity"].abs().sort_values(ascending=False).index).reset_index(drop=True)
