from dataclasses import replace

import pytest

from behaviors.scenario import get_scenario
from core.schema import SimulationParams
from pm.sensitivity import (
    analyze_all,
    analyze_variable,
    break_even_delta,
    elasticity,
    sensitivity_frame,
)


def test_elasticity_formula():
    assert elasticity(100.0, 110.0) == pytest.approx((10.0, 1.0))
    assert elasticity(-100.0, -90.0) == pytest.approx((10.0, 1.0))
    assert elasticity(200.0, 180.0) == pytest.approx((-10.0, -1.0))
    assert elasticity(0.0, 50.0) == (0.0, 0.0)


def test_break_even_delta_propagates_none():
    assert break_even_delta(10, 8) == -2
    assert break_even_delta(None, 8) is None
    assert break_even_delta(10, None) is None
    assert break_even_delta(None, None) is None


def test_directions_match_impacts(baseline, seeded_params, config):
    results = analyze_all(baseline, seeded_params, config)
    by_name = {r.variable_name: r for r in results}
    assert [r.variable_name for r in results] == ["market_demand", "operational_efficiency"]
    assert by_name["market_demand"].correlation >= 0
    assert by_name["operational_efficiency"].correlation <= 0
    assert by_name["market_demand"].perturbed_mean >= by_name["market_demand"].base_mean


def test_standalone_variable_matches_batch(baseline, seeded_params, config):
    batch = analyze_all(baseline, seeded_params, config)
    alone = analyze_variable(
        baseline, seeded_params, seeded_params.variables[0], get_scenario("realistic"), config,
    )
    assert alone == batch[0]


def test_unseeded_run_still_uses_common_random_numbers(baseline, seeded_params, config):
    params = replace(seeded_params, seed=None)
    results = analyze_all(baseline, params, config)
    assert results[0].correlation >= 0
    assert results[1].correlation <= 0


def test_no_variables_means_no_work(baseline, config):
    params = SimulationParams(time_horizon=12, iterations=100, seed=1)
    assert analyze_all(baseline, params, config) == []


def test_wire_shape_and_frame(baseline, seeded_params, config):
    results = analyze_all(baseline, seeded_params, config)
    assert set(results[0].to_dict()) == {
        "variable", "correlation", "impact_on_npv", "impact_on_break_even",
    }
    frame = sensitivity_frame(results)
    assert len(frame) == 2
    assert frame["Elasticity"].abs().is_monotonic_decreasing
