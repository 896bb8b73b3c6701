import json
import logging

import pytest

from app.cli import main
from core.config import EngineConfig
from core.logging_setup import configure_logging


@pytest.fixture(autouse=True)
def _restore_root_logger(monkeypatch):
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    monkeypatch.setattr("core.logging_setup._CONFIGURED", False)
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def test_cli_writes_response(tmp_path, body_factory):
    request = tmp_path / "request.json"
    request.write_text(json.dumps(body_factory(iterations=200)), encoding="utf-8")
    out = tmp_path / "response.json"

    code = main([str(request), "--seed", "3", "--workers", "2", "--no-insights", "--output", str(out)])
    assert code == 0
    payload = json.loads(out.read_text(encoding="utf-8"))
    assert payload["metadata"]["seed"] == 3
    assert len(payload["results"]["realistic"]["projections"]) == 24


def test_cli_reports_invalid_requests(tmp_path, body_factory, capsys):
    request = tmp_path / "request.json"
    request.write_text(json.dumps(body_factory(iterations=0)), encoding="utf-8")
    assert main([str(request), "--no-insights"]) == 1
    assert json.loads(capsys.readouterr().out)["results"] is None


def test_cli_rejects_malformed_json(tmp_path):
    request = tmp_path / "request.json"
    request.write_text("{not json", encoding="utf-8")
    assert main([str(request)]) == 2


def test_config_from_env(monkeypatch):
    monkeypatch.setenv("SCENARIO_SIM_CHUNK_SIZE", "64")
    monkeypatch.setenv("SCENARIO_SIM_ATTRIBUTION", "name")
    monkeypatch.setenv("SCENARIO_SIM_LEGACY_DEFAULTS", "true")
    cfg = EngineConfig.from_env(max_workers=3)
    assert cfg.chunk_size == 64
    assert cfg.attribution == "name"
    assert cfg.legacy_parameter_defaults is True
    assert cfg.workers == 3


def test_config_rejects_bad_values(monkeypatch):
    monkeypatch.delenv("SCENARIO_SIM_CHUNK_SIZE", raising=False)
    monkeypatch.delenv("SCENARIO_SIM_ATTRIBUTION", raising=False)
    with pytest.raises(ValueError):
        EngineConfig.from_env(attribution="fuzzy")
    with pytest.raises(ValueError):
        EngineConfig.from_env(chunk_size=0)


def test_configure_logging_is_idempotent():
    root = logging.getLogger()
    configure_logging("DEBUG")
    handlers = list(root.handlers)
    configure_logging("WARNING")
    assert root.handlers == handlers
    assert root.level == logging.WARNING


@pytest.mark.parametrize("overrides", [{"attribution": "fuzzy"}, {"chunk_size": 0}])
def test_config_constructor_validates(overrides):
    with pytest.raises(ValueError):
        EngineConfig(**overrides)


def test_cli_rejects_horizon_overflow_with_strict_json(tmp_path, body_factory, capsys):
    body = body_factory(timeHorizon=1000, iterations=50, scenarioTypes=["optimistic", "realistic"])
    body["simulationParams"]["variables"] = [
        {"name": "growth", "type": "normal", "parameters": {"mean": 1.0, "stdDev": 0.05},
         "impact": "growth_rate"},
    ]
    request = tmp_path / "request.json"
    request.write_text(json.dumps(body), encoding="utf-8")
    assert main([str(request), "--no-insights"]) == 1
    payload = json.loads(capsys.readouterr().out)
    assert payload["results"] is None
    assert "timeHorizon" in payload["error"]
