"""
Error taxonomy for the simulation engine.

Every failure the engine can surface derives from SimulationError and carries
the HTTP-style status the response assembler reports it with.
"""

from __future__ import annotations

from typing import Optional


class SimulationError(Exception):
    status: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_payload(self) -> dict:
        return {"error": self.message, "results": None}


class InputValidationError(SimulationError):
    """Request is malformed or out of range. Nothing is computed."""
    status = 400


class DistributionParameterError(InputValidationError):
    """A variable declares an unsupported distribution or lacks a required parameter."""

    def __init__(self, variable: Optional[str], message: str):
        label = variable if variable is not None else "<unnamed>"
        super().__init__(f"Variable '{label}': {message}")
        self.variable = variable

    def to_payload(self) -> dict:
        payload = super().to_payload()
        payload["variable"] = self.variable
        return payload


class NonFiniteOutcomeError(InputValidationError):
    """The inputs drive the cash flow past float range (inf / nan outcomes)."""

    def __init__(self, scenario: str):
        super().__init__(
            f"Scenario '{scenario}' produced non-finite results; "
            "reduce timeHorizon, growth or revenue factors"
        )
        self.scenario = scenario


class ExternalCollaboratorError(SimulationError):
    """The narrative-insight service failed. Always recovered by the caller."""
    status = 502


class SimulationCancelled(SimulationError):
    status = 499

    def __init__(self, message: str = "Simulation cancelled"):
        super().__init__(message)
