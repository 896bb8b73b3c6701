import threading
from types import SimpleNamespace

import pytest

from core.errors import ExternalCollaboratorError
from insights.narrative import (
    INSIGHTS_UNAVAILABLE,
    InsightGenerator,
    NullInsightGenerator,
    OpenAIInsightGenerator,
    build_prompt,
    default_insight_generator,
    generate_insights_safely,
)

PAYLOAD = {
    "ideaTitle": "Neighbourhood bakery",
    "baseline": {"price": 100.0, "monthly_cost": 50.0, "initial_investment": 10000.0},
    "results": {
        "realistic": {
            "statistics": {"mean": -7070.9},
            "riskMetrics": {"break_even_month": None, "probability_of_loss": 1.0},
            "finalMetrics": {"roi": -70.7},
        },
    },
    "sensitivityAnalysis": [{"variable": "market_demand", "impact_on_npv": 4.2}],
}


class FakeCompletions:
    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def _client(completions):
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


def test_build_prompt_mentions_inputs():
    prompt = build_prompt(PAYLOAD)
    assert "Neighbourhood bakery" in prompt
    assert "REALISTIC" in prompt
    assert "Payback: N/A months" in prompt
    assert "market_demand" in prompt


def test_openai_generator_uses_chat_completions():
    completions = FakeCompletions(content="Viable, but slow payback.")
    gen = OpenAIInsightGenerator(model="test-model", client=_client(completions))
    assert gen.generate(PAYLOAD) == "Viable, but slow payback."
    call = completions.calls[0]
    assert call["model"] == "test-model"
    assert call["messages"][0]["role"] == "system"
    assert "Neighbourhood bakery" in call["messages"][1]["content"]


def test_openai_generator_wraps_failures():
    gen = OpenAIInsightGenerator(client=_client(FakeCompletions(error=ConnectionError("down"))))
    with pytest.raises(ExternalCollaboratorError):
        gen.generate(PAYLOAD)

    empty = OpenAIInsightGenerator(client=_client(FakeCompletions(content="")))
    with pytest.raises(ExternalCollaboratorError):
        empty.generate(PAYLOAD)


def test_default_generator_without_key(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    gen = default_insight_generator()
    assert isinstance(gen, NullInsightGenerator)
    assert gen.generate(PAYLOAD) == INSIGHTS_UNAVAILABLE


def test_safe_wrapper_recovers_from_errors():
    gen = OpenAIInsightGenerator(client=_client(FakeCompletions(error=RuntimeError("500"))))
    assert generate_insights_safely(gen, PAYLOAD, timeout=5.0) == INSIGHTS_UNAVAILABLE


def test_safe_wrapper_times_out():
    release = threading.Event()

    class Slow(InsightGenerator):
        def generate(self, payload):
            release.wait(5.0)
            return "too late"

    try:
        assert generate_insights_safely(Slow(), PAYLOAD, timeout=0.05) == INSIGHTS_UNAVAILABLE
    finally:
        release.set()


def test_safe_wrapper_rejects_blank_text():
    assert generate_insights_safely(NullInsightGenerator("   "), PAYLOAD) == INSIGHTS_UNAVAILABLE
    assert generate_insights_safely(NullInsightGenerator("ok"), PAYLOAD) == "ok"


def test_build_prompt_names_revenue_model():
    prompt = build_prompt({**PAYLOAD, "revenueModel": "subscription"})
    assert "REVENUE MODEL: subscription" in prompt
    assert "strategies for the subscription model" in prompt
    assert "REVENUE MODEL: one_time" in build_prompt(PAYLOAD)
