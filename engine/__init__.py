"""
Cash-flow simulation engine — vectorised path simulator + parallel Monte Carlo runner.
"""

from .paths import PathBatch, PathMonth, simulate_path, simulate_paths
from .runner import run_paths

__all__ = ["PathBatch", "PathMonth", "simulate_path", "simulate_paths", "run_paths"]
