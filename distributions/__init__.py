"""
Distributions package — sample, validate and describe uncertain input variables.

  1. sampler.py     — Box–Muller / uniform / triangular / lognormal draws,
                      strict parameter validation, +10% perturbation
  2. benchmarks.py  — starter variable set for ideas without data
"""

from .benchmarks import DEFAULT_VARIABLES, default_variables
from .sampler import (
    analytic_mean,
    describe_variables,
    perturb_variable,
    resolve_parameters,
    sample,
    sample_variable,
    validate_variable,
)

__all__ = [
    "DEFAULT_VARIABLES",
    "default_variables",
    "analytic_mean",
    "describe_variables",
    "perturb_variable",
    "resolve_parameters",
    "sample",
    "sample_variable",
    "validate_variable",
]
