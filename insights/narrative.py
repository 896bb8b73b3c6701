"""
Narrative insights — advisory free-text summary from an external LLM.

The numeric simulation never depends on this module succeeding. Generators
raise ExternalCollaboratorError on failure; generate_insights_safely() turns
any failure or timeout into a placeholder string.
"""

from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from typing import Any, Dict, List, Optional

from core.config import EngineConfig
from core.errors import ExternalCollaboratorError

logger = logging.getLogger(__name__)

INSIGHTS_UNAVAILABLE = (
    "Narrative insights are unavailable for this simulation; "
    "the numeric results above are complete."
)

SYSTEM_PROMPT = (
    "You are a financial analyst specialised in Monte Carlo simulations and "
    "business models. Give practical, strategic insights grounded in the "
    "simulation data."
)


class InsightGenerator:
    """Interface for narrative generators (LLM-backed or otherwise)."""

    def generate(self, payload: Dict[str, Any]) -> str:
        raise NotImplementedError


class NullInsightGenerator(InsightGenerator):
    """Used when no text-generation service is configured."""

    def __init__(self, message: str = INSIGHTS_UNAVAILABLE):
        self.message = message

    def generate(self, payload: Dict[str, Any]) -> str:
        return self.message


def _fmt(value: Optional[float], spec: str = ",.2f", suffix: str = "") -> str:
    return "N/A" if value is None else f"{value:{spec}}{suffix}"


def build_prompt(payload: Dict[str, Any]) -> str:
    """Render the simulation summary the model is asked to interpret."""
    baseline = payload.get("baseline", {})
    revenue_model = payload.get("revenueModel", "one_time")
    lines: List[str] = [
        "Analyse the Monte Carlo simulation results for this business idea:",
        "",
        f"IDEA: {payload.get('ideaTitle', 'Untitled')}",
        f"REVENUE MODEL: {revenue_model}",
        f"INITIAL INVESTMENT: {_fmt(baseline.get('initial_investment'))}",
        f"MONTHLY COSTS: {_fmt(baseline.get('monthly_cost'))}",
        f"PRICE: {_fmt(baseline.get('price'))}",
        "",
        "SIMULATION RESULTS:",
    ]
    for scenario, result in payload.get("results", {}).items():
        stats = result["statistics"]
        risk = result["riskMetrics"]
        final = result.get("finalMetrics", {})
        lines += [
            f"{scenario.upper()}:",
            f"- Mean final profit: {_fmt(stats['mean'])}",
            f"- ROI: {_fmt(final.get('roi'), '.1f', '%')}",
            f"- Payback: {risk['break_even_month'] or 'N/A'} months",
            f"- Probability of loss: {_fmt(risk['probability_of_loss'] * 100, '.1f', '%')}",
        ]
    sensitivity = payload.get("sensitivityAnalysis", [])
    if sensitivity:
        lines += ["", "SENSITIVITY ANALYSIS:"]
        lines += [
            f"- {s['variable']}: impact on outcome {_fmt(s['impact_on_npv'], '.1f', '%')}"
            for s in sensitivity
        ]
    lines += [
        "",
        "Provide: 1) financial viability, 2) main risks, 3) the variables that most "
        "drive success, 4) concrete ways to shorten the payback period, "
        f"5) risk mitigation strategies for the {revenue_model} model. "
        "Be specific and practical.",
    ]
    return "\n".join(lines)


class OpenAIInsightGenerator(InsightGenerator):
    """Chat-completions call to OpenAI; the client is injectable for tests."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        *,
        model: str = "gpt-4o-mini",
        max_tokens: int = 1500,
        temperature: float = 0.7,
        client: Any = None,
    ):
        if client is None:
            from openai import OpenAI

            client = OpenAI(api_key=api_key or os.getenv("OPENAI_API_KEY"))
        self.client = client
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature

    def generate(self, payload: Dict[str, Any]) -> str:
        try:
            resp = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": build_prompt(payload)},
                ],
                max_tokens=self.max_tokens,
                temperature=self.temperature,
            )
        except Exception as exc:
            raise ExternalCollaboratorError(f"insight generation failed: {exc}") from exc

        try:
            text = resp.choices[0].message.content
        except (AttributeError, IndexError) as exc:
            raise ExternalCollaboratorError("insight response had no message content") from exc
        if not text:
            raise ExternalCollaboratorError("insight response was empty")
        return text


def default_insight_generator(config: Optional[EngineConfig] = None) -> InsightGenerator:
    """OpenAI when OPENAI_API_KEY is set, otherwise the placeholder generator."""
    cfg = config or EngineConfig()
    api_key = os.getenv("OPENAI_API_KEY")
    if not api_key:
        logger.info("OPENAI_API_KEY not set, skipping narrative insights")
        return NullInsightGenerator()
    return OpenAIInsightGenerator(api_key, model=cfg.insight_model)


def generate_insights_safely(
    generator: InsightGenerator,
    payload: Dict[str, Any],
    *,
    timeout: float = 30.0,
) -> str:
    """
    Call `generator` on a worker thread, waiting at most `timeout` seconds.

    Never raises: errors and timeouts are logged and the placeholder is
    returned. A timed-out call is left to finish in the background.
    """
    pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix="insights")
    future = pool.submit(generator.generate, payload)
    try:
        text = future.result(timeout=timeout)
    except FutureTimeout:
        logger.warning("Insight generation timed out after %.1fs", timeout)
        return INSIGHTS_UNAVAILABLE
    except Exception as exc:
        logger.warning("Insight generation failed: %s", exc)
        return INSIGHTS_UNAVAILABLE
    finally:
        pool.shutdown(wait=False, cancel_futures=True)

    if not isinstance(text, str) or not text.strip():
        return INSIGHTS_UNAVAILABLE
    return text
