"""
Core package — schema definitions, configuration, errors, and shared utilities.
No simulation logic lives here.
"""

from .schema import (
    DISTRIBUTIONS,
    IMPACTS,
    SCENARIO_NAMES,
    IdeaFinancialBaseline,
    SimulationParams,
    SimulationVariable,
)
from .config import EngineConfig
from .errors import (
    DistributionParameterError,
    ExternalCollaboratorError,
    InputValidationError,
    NonFiniteOutcomeError,
    SimulationCancelled,
    SimulationError,
)
from .utils import nearest_rank, spawn_generators

__all__ = [
    "DISTRIBUTIONS",
    "IMPACTS",
    "SCENARIO_NAMES",
    "IdeaFinancialBaseline",
    "SimulationParams",
    "SimulationVariable",
    "EngineConfig",
    "DistributionParameterError",
    "ExternalCollaboratorError",
    "InputValidationError",
    "NonFiniteOutcomeError",
    "SimulationCancelled",
    "SimulationError",
    "nearest_rank",
    "spawn_generators",
]
