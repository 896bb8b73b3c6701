"""
Engine configuration.
Scenario multipliers live in behaviors/scenario.py (SCENARIO_TABLE).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Literal, Optional, Tuple


@dataclass(frozen=True)
class EngineConfig:
    # parallel execution
    chunk_size: int = 250          # iterations per worker task (fixes the seed layout)
    max_workers: Optional[int] = None  # None -> os.cpu_count()

    # external insight collaborator
    insight_timeout: float = 30.0
    insight_model: str = "gpt-4o-mini"

    # variable handling
    attribution: Literal["impact", "name"] = "impact"
    legacy_parameter_defaults: bool = False

    # cash-flow model constants
    base_growth_rate: float = 0.05      # monthly revenue growth before market_growth
    cost_growth_rate: float = 0.02      # monthly cost inflation
    base_churn_rate: float = 0.05
    annual_discount_rate: float = 0.10  # NPV in final metrics

    # clamps applied to each sampled factor
    revenue_factor_bounds: Tuple[float, float] = (0.1, 3.0)
    cost_factor_bounds: Tuple[float, float] = (0.5, 2.0)
    churn_factor_bounds: Tuple[float, float] = (0.5, 2.0)
    growth_rate_bounds: Tuple[float, float] = (0.0, 1.0)

    def __post_init__(self):
        if self.attribution not in ("impact", "name"):
            raise ValueError(f"attribution must be 'impact' or 'name', got {self.attribution!r}")
        if self.chunk_size < 1:
            raise ValueError("chunk_size must be >= 1")

    @property
    def workers(self) -> int:
        return max(1, self.max_workers or os.cpu_count() or 1)

    @classmethod
    def from_env(cls, **overrides) -> "EngineConfig":
        """Build a config from SCENARIO_SIM_* environment variables, then apply overrides."""
        cfg = cls()
        env = {}
        if os.getenv("SCENARIO_SIM_CHUNK_SIZE"):
            env["chunk_size"] = int(os.environ["SCENARIO_SIM_CHUNK_SIZE"])
        if os.getenv("SCENARIO_SIM_MAX_WORKERS"):
            env["max_workers"] = int(os.environ["SCENARIO_SIM_MAX_WORKERS"])
        if os.getenv("SCENARIO_SIM_INSIGHT_TIMEOUT"):
            env["insight_timeout"] = float(os.environ["SCENARIO_SIM_INSIGHT_TIMEOUT"])
        if os.getenv("SCENARIO_SIM_INSIGHT_MODEL"):
            env["insight_model"] = os.environ["SCENARIO_SIM_INSIGHT_MODEL"]
        if os.getenv("SCENARIO_SIM_ATTRIBUTION"):
            env["attribution"] = os.environ["SCENARIO_SIM_ATTRIBUTION"]
        if os.getenv("SCENARIO_SIM_LEGACY_DEFAULTS"):
            env["legacy_parameter_defaults"] = os.environ["SCENARIO_SIM_LEGACY_DEFAULTS"].lower() in (
                "1", "true", "yes",
            )
        env.update(overrides)
        return replace(cfg, **env)
