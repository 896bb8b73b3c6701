from dataclasses import FrozenInstanceError

import numpy as np
import pytest

from behaviors.attribution import classify
from behaviors.scenario import SCENARIO_TABLE, get_scenario, scenario_table_frame
from core.config import EngineConfig
from core.errors import InputValidationError
from core.schema import SimulationVariable
from engine.paths import simulate_path, simulate_paths

HORIZON = 12
T = np.arange(HORIZON)


def _point(name, value, impact):
    return SimulationVariable(name, "normal", {"mean": value, "stdDev": 0.0}, impact)


# ---------------------------------------------------------------------------
# Scenario table
# ---------------------------------------------------------------------------

def test_scenario_table_values():
    assert SCENARIO_TABLE["optimistic"].as_dict() == {
        "market_growth": 1.3, "adoption_rate": 1.5, "cost_efficiency": 0.8, "competition_impact": 0.7,
    }
    assert SCENARIO_TABLE["realistic"].as_dict() == {
        "market_growth": 1.0, "adoption_rate": 1.0, "cost_efficiency": 1.0, "competition_impact": 1.0,
    }
    assert SCENARIO_TABLE["pessimistic"].as_dict() == {
        "market_growth": 0.7, "adoption_rate": 0.6, "cost_efficiency": 1.3, "competition_impact": 1.4,
    }
    assert list(scenario_table_frame()["Scenario"]) == ["optimistic", "realistic", "pessimistic"]


def test_scenario_table_is_immutable():
    with pytest.raises(TypeError):
        SCENARIO_TABLE["realistic"] = SCENARIO_TABLE["optimistic"]
    with pytest.raises(FrozenInstanceError):
        SCENARIO_TABLE["realistic"].market_growth = 2.0


def test_unknown_scenario_rejected():
    with pytest.raises(InputValidationError):
        get_scenario("apocalyptic")


# ---------------------------------------------------------------------------
# Attribution
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "impact, expected",
    [("revenue", "revenue"), ("market_share", "revenue"), ("costs", "cost"),
     ("churn_rate", "churn"), ("growth_rate", "growth")],
)
def test_classify_by_impact(impact, expected):
    assert classify(_point("anything", 1.0, impact)) == expected


def test_classify_by_name():
    assert classify(_point("Demand_Shock", 1.0, "costs"), "name") == "revenue"
    assert classify(_point("server_expense", 1.0, "revenue"), "name") == "cost"
    assert classify(_point("user_churn", 1.0, "revenue"), "name") == "churn"
    assert classify(_point("competition_impact", 1.0, "market_share"), "name") is None


# ---------------------------------------------------------------------------
# Path simulator
# ---------------------------------------------------------------------------

def test_no_variables_realistic_is_deterministic(baseline, rng):
    batch = simulate_paths(baseline, HORIZON, [], get_scenario("realistic"), rng, 3)

    expected_rev = 100.0 * 1.05 ** T
    expected_cost = 50.0 * 1.02 ** T
    for row in range(3):
        np.testing.assert_allclose(batch.revenue[row], expected_rev)
        np.testing.assert_allclose(batch.costs[row], expected_cost)
    np.testing.assert_allclose(
        batch.cumulative_profit[0], -10000.0 + np.cumsum(expected_rev - expected_cost),
    )


def test_no_variables_optimistic_applies_multipliers(baseline, rng):
    batch = simulate_paths(baseline, HORIZON, [], get_scenario("optimistic"), rng, 1)

    expected_rev = 100.0 * (1 + 0.05 * 1.3) ** T * 1.3 * (1.5 / 0.7)
    expected_cost = 50.0 * 1.02 ** T * 0.8 * 0.8
    np.testing.assert_allclose(batch.revenue[0], expected_rev)
    np.testing.assert_allclose(batch.costs[0], expected_cost)


def test_revenue_factor_is_clamped(baseline, rng):
    wild = SimulationVariable("demand", "uniform", {"min": 10.0, "max": 20.0}, "revenue")
    batch = simulate_paths(baseline, HORIZON, [wild], get_scenario("realistic"), rng, 5)
    np.testing.assert_allclose(batch.revenue, np.tile(300.0 * 1.05 ** T, (5, 1)))


def test_cost_factor_is_clamped(baseline, rng):
    negative = _point("cost_shock", -5.0, "costs")
    batch = simulate_paths(baseline, HORIZON, [negative], get_scenario("realistic"), rng, 2)
    np.testing.assert_allclose(batch.costs[0], 50.0 * 1.02 ** T * 0.5)
    assert np.all(batch.costs > 0)


def test_growth_rate_variable_replaces_base_growth(baseline, rng):
    growth = _point("market_growth_rate", 0.1, "growth_rate")
    batch = simulate_paths(baseline, HORIZON, [growth], get_scenario("realistic"), rng, 1)
    np.testing.assert_allclose(batch.revenue[0], 100.0 * 1.1 ** T)


def test_negative_growth_draws_are_clipped(baseline, rng):
    shrink = _point("market_growth_rate", -0.5, "growth_rate")
    batch = simulate_paths(baseline, HORIZON, [shrink], get_scenario("realistic"), rng, 1)
    np.testing.assert_allclose(batch.revenue[0], np.full(HORIZON, 100.0))


def test_churn_modifier(baseline, rng):
    churn = _point("churn", 2.0, "churn_rate")
    batch = simulate_paths(baseline, HORIZON, [churn], get_scenario("realistic"), rng, 1)
    np.testing.assert_allclose(batch.revenue[0], 100.0 * 1.05 ** T * (0.9 / 0.95))


def test_name_attribution_mode(baseline, rng):
    shock = _point("demand_shock", 2.0, "costs")
    realistic = get_scenario("realistic")

    by_impact = simulate_paths(baseline, HORIZON, [shock], realistic, rng, 1)
    np.testing.assert_allclose(by_impact.revenue[0], 100.0 * 1.05 ** T)
    np.testing.assert_allclose(by_impact.costs[0], 100.0 * 1.02 ** T)

    by_name = simulate_paths(
        baseline, HORIZON, [shock], realistic, rng, 1, EngineConfig(attribution="name"),
    )
    np.testing.assert_allclose(by_name.revenue[0], 200.0 * 1.05 ** T)
    np.testing.assert_allclose(by_name.costs[0], 50.0 * 1.02 ** T)


def test_batch_shapes_and_invariants(baseline, rng, revenue_variable, cost_variable):
    batch = simulate_paths(
        baseline, 24, [revenue_variable, cost_variable], get_scenario("pessimistic"), rng, 50,
    )
    assert batch.revenue.shape == (50, 24)
    assert batch.n_paths == 50
    assert batch.horizon == 24
    assert np.all(batch.revenue >= 0)
    assert np.all(batch.costs >= 0)
    np.testing.assert_allclose(batch.profit, batch.revenue - batch.costs)
    np.testing.assert_allclose(
        batch.cumulative_profit, -baseline.initial_investment + np.cumsum(batch.profit, axis=1),
    )
    np.testing.assert_array_equal(batch.final_values, batch.cumulative_profit[:, -1])
    with pytest.raises(FrozenInstanceError):
        batch.revenue = np.zeros((50, 24))

    df = batch.to_dataframe()
    assert len(df) == 50 * 24
    assert df["month"].min() == 1 and df["month"].max() == 24


def test_simulate_path_single_trajectory(baseline, rng, revenue_variable):
    path = simulate_path(baseline, 6, [revenue_variable], get_scenario("realistic"), rng)
    assert [m.month for m in path] == [1, 2, 3, 4, 5, 6]
    running = -baseline.initial_investment
    for m in path:
        assert m.profit == pytest.approx(m.revenue - m.costs)
        running += m.profit
        assert m.cumulative_profit == pytest.approx(running)
