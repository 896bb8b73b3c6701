import numpy as np
import pytest

from core.config import EngineConfig
from core.schema import IdeaFinancialBaseline, SimulationParams, SimulationVariable
from insights.narrative import InsightGenerator


class StubInsights(InsightGenerator):
    def __init__(self, text="Looks viable."):
        self.text = text
        self.payloads = []

    def generate(self, payload):
        self.payloads.append(payload)
        return self.text


@pytest.fixture
def config():
    return EngineConfig(chunk_size=100, max_workers=2, insight_timeout=5.0)


@pytest.fixture
def baseline():
    return IdeaFinancialBaseline(price=100.0, monthly_cost=50.0, initial_investment=10000.0)


@pytest.fixture
def rng():
    return np.random.default_rng(12345)


@pytest.fixture
def revenue_variable():
    return SimulationVariable(
        name="market_demand",
        distribution="normal",
        parameters={"mean": 1.0, "stdDev": 0.1},
        impact="revenue",
    )


@pytest.fixture
def cost_variable():
    return SimulationVariable(
        name="operational_efficiency",
        distribution="triangular",
        parameters={"min": 0.8, "max": 1.5, "mode": 1.0},
        impact="costs",
    )


@pytest.fixture
def seeded_params(revenue_variable, cost_variable):
    return SimulationParams(
        time_horizon=12,
        iterations=400,
        confidence_level=0.9,
        variables=(revenue_variable, cost_variable),
        seed=2024,
    )


@pytest.fixture
def stub_insights():
    return StubInsights()


def make_body(**overrides):
    body = {
        "ideaData": {
            "title": "Neighbourhood bakery",
            "pricing": 100,
            "monthly_costs": 50,
            "initial_investment": 10000,
        },
        "simulationParams": {
            "timeHorizon": 24,
            "iterations": 1000,
            "confidenceLevel": 0.95,
            "variables": [],
            "seed": 7,
        },
        "scenarioTypes": ["realistic"],
    }
    for key, value in overrides.items():
        if key in body["simulationParams"] or key == "variables":
            body["simulationParams"][key] = value
        else:
            body[key] = value
    return body


@pytest.fixture
def body_factory():
    return make_body
