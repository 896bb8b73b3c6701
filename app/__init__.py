"""
Application layer — request validation, response assembly, and the CLI.
"""

from .assembler import handle_request, run_simulation
from .request import SimulationRequest, parse_request

__all__ = ["handle_request", "run_simulation", "SimulationRequest", "parse_request"]
