"""
Response Assembler — the single entry point and recovery boundary of the engine.

Flow for one request:
  1. validate the body (app.request) and every variable (distributions.sampler)
  2. fix a seed (request seed, or fresh entropy) shared by all runs
  3. Monte Carlo per requested scenario (pm.aggregator.run_scenario)
  4. sensitivity per declared variable against "realistic" (pm.sensitivity)
  5. narrative insights from the external generator, bounded by a timeout
  6. assemble the JSON payload

handle_request() never raises: validation problems come back as 400,
cancellation as 499, anything unexpected as 500.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

from behaviors.scenario import get_scenario
from core.config import EngineConfig
from core.errors import SimulationError
from core.schema import IdeaFinancialBaseline, SimulationParams
from core.utils import fresh_seed
from distributions.sampler import validate_variable
from insights.narrative import (
    InsightGenerator,
    default_insight_generator,
    generate_insights_safely,
)
from pm.aggregator import MonteCarloResult, run_scenario
from pm.sensitivity import SENSITIVITY_SCENARIO, analyze_all

from .request import SimulationRequest, parse_request

logger = logging.getLogger(__name__)


def _params_echo(params: SimulationParams) -> Dict[str, Any]:
    return {
        "timeHorizon": params.time_horizon,
        "iterations": params.iterations,
        "confidenceLevel": params.confidence_level,
        "seed": params.seed,
        "variables": [
            {
                "name": v.name,
                "type": v.distribution,
                "parameters": dict(v.parameters),
                "impact": v.impact,
            }
            for v in params.variables
        ],
    }


def _baseline_dict(baseline: IdeaFinancialBaseline) -> Dict[str, float]:
    return {
        "price": baseline.price,
        "monthly_cost": baseline.monthly_cost,
        "initial_investment": baseline.initial_investment,
    }


def run_simulation(
    request: SimulationRequest,
    config: Optional[EngineConfig] = None,
    *,
    insight_generator: Optional[InsightGenerator] = None,
    cancel_event: Optional[threading.Event] = None,
) -> Dict[str, Any]:
    """Run every stage for an already-parsed request and return the response payload."""
    cfg = config or EngineConfig()
    params = request.to_params()
    for v in params.variables:
        validate_variable(v, legacy=cfg.legacy_parameter_defaults)
    if params.seed is None:
        params = replace(params, seed=fresh_seed())

    baseline = request.idea_data.to_baseline()
    revenue_model = request.idea_data.detected_revenue_model()
    scenarios = request.scenario_types
    logger.info(
        "Scenario simulation for %r (%s): %d iterations, %d months, scenarios=%s",
        request.idea_data.title, revenue_model, params.iterations, params.time_horizon,
        ",".join(scenarios),
    )

    results: Dict[str, MonteCarloResult] = {}
    for name in scenarios:
        results[name] = run_scenario(baseline, params, name, cfg, cancel_event=cancel_event)

    # same params, seed and multipliers -> the realistic run doubles as the sensitivity base
    sensitivity = analyze_all(
        baseline,
        params,
        cfg,
        multipliers=get_scenario(SENSITIVITY_SCENARIO),
        base=results.get(SENSITIVITY_SCENARIO),
        cancel_event=cancel_event,
    )

    payload: Dict[str, Any] = {
        "ideaTitle": request.idea_data.title,
        "revenueModel": revenue_model,
        "simulationParams": _params_echo(params),
        "results": {name: r.to_dict() for name, r in results.items()},
        "sensitivityAnalysis": [s.to_dict() for s in sensitivity],
    }

    generator = insight_generator or default_insight_generator(cfg)
    payload["insights"] = generate_insights_safely(
        generator,
        {**payload, "baseline": _baseline_dict(baseline)},
        timeout=cfg.insight_timeout,
    )
    payload["generatedAt"] = datetime.now(timezone.utc).isoformat()
    payload["metadata"] = {
        "totalIterations": params.iterations * len(scenarios),
        "timeHorizon": params.time_horizon,
        "confidenceLevel": params.confidence_level,
        "seed": params.seed,
        "attribution": cfg.attribution,
        "revenueModel": revenue_model,
    }
    logger.info("Scenario simulation completed")
    return payload


def handle_request(
    body: Any,
    config: Optional[EngineConfig] = None,
    *,
    insight_generator: Optional[InsightGenerator] = None,
    cancel_event: Optional[threading.Event] = None,
) -> Tuple[int, Dict[str, Any]]:
    """
    Validate, simulate and assemble; return (status, payload).

    Errors are reported as {"error": message, "results": None}.
    """
    try:
        request = parse_request(body)
        return 200, run_simulation(
            request,
            config,
            insight_generator=insight_generator,
            cancel_event=cancel_event,
        )
    except SimulationError as exc:
        logger.warning("Scenario simulation rejected (%d): %s", exc.status, exc.message)
        return exc.status, exc.to_payload()
    except Exception:
        logger.exception("Error in scenario simulation")
        return 500, {"error": "Internal error while running the simulation", "results": None}
