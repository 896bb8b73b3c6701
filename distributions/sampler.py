"""
Distribution Sampler — one random draw (or one vector of draws) per call.

Input:  distribution name + parameter dict + numpy Generator
Output: float (size=None) or ndarray of independent draws

Supported distributions and their draw formulas:
  normal      Box–Muller:  mean + std · sqrt(-2 ln u1) · cos(2π u2),  u1, u2 ∈ (0, 1]
  uniform     min + r · (max - min),                                   r ∈ [0, 1)
  triangular  inverse CDF, f = (mode - min) / (max - min)
                r <  f:  min + sqrt(r · (max - min) · (mode - min))
                r >= f:  max - sqrt((1 - r) · (max - min) · (max - mode))
  lognormal   exp(Normal(mean, std))

Every distribution consumes a fixed number of uniforms per draw (normal and
lognormal two, uniform and triangular one), independent of the parameter
values. Two runs with the same seed therefore see the same underlying
uniforms even when a parameter has been perturbed (common random numbers).

Parameter validation is strict: a missing parameter raises
DistributionParameterError naming the variable. The legacy fallbacks
(normal(1, 0.1), uniform(0.8, 1.2), ...; constant 1.0 for an unknown
distribution) are only used when explicitly requested.
"""

from __future__ import annotations

import math
from typing import Dict, Iterable, Mapping, Optional, Union

import numpy as np
import pandas as pd
from scipy import stats

from core.errors import DistributionParameterError
from core.schema import (
    DISTRIBUTIONS,
    IMPACTS,
    LEGACY_PARAMETER_DEFAULTS,
    REQUIRED_PARAMETERS,
    SimulationVariable,
)
from core.utils import require_keys

Draw = Union[float, np.ndarray]


# ---------------------------------------------------------------------------
# Raw draws
# ---------------------------------------------------------------------------

def _open_unit(rng: np.random.Generator, size) -> np.ndarray:
    """Uniforms on (0, 1]; keeps log(u) finite in Box–Muller."""
    return 1.0 - rng.random(size)


def _normal(mean: float, std: float, rng: np.random.Generator, size) -> np.ndarray:
    u1 = _open_unit(rng, size)
    u2 = _open_unit(rng, size)
    z = np.sqrt(-2.0 * np.log(u1)) * np.cos(2.0 * math.pi * u2)
    return mean + std * z


def _uniform(lo: float, hi: float, rng: np.random.Generator, size) -> np.ndarray:
    r = rng.random(size)
    return lo + r * (hi - lo)


def _triangular(lo: float, hi: float, mode: float, rng: np.random.Generator, size) -> np.ndarray:
    r = np.asarray(rng.random(size), dtype=float)
    width = hi - lo
    f = (mode - lo) / width
    left = lo + np.sqrt(r * width * (mode - lo))
    right = hi - np.sqrt((1.0 - r) * width * (hi - mode))
    return np.where(r < f, left, right)


def sample(
    distribution: str,
    parameters: Mapping[str, float],
    rng: np.random.Generator,
    size: Optional[int] = None,
) -> Draw:
    """
    Draw from one of the supported distributions.

    Parameters
    ----------
    distribution : str
        "normal" | "uniform" | "triangular" | "lognormal"
    parameters : mapping
        mean/stdDev, min/max or min/max/mode, already resolved by resolve_parameters
    rng : np.random.Generator
        The only source of randomness; the function is otherwise pure.
    size : int, optional
        None returns a float, an int returns an array of that many draws.
    """
    p = parameters
    if distribution == "normal":
        out = _normal(float(p["mean"]), float(p["stdDev"]), rng, size)
    elif distribution == "uniform":
        out = _uniform(float(p["min"]), float(p["max"]), rng, size)
    elif distribution == "triangular":
        out = _triangular(float(p["min"]), float(p["max"]), float(p["mode"]), rng, size)
    elif distribution == "lognormal":
        out = np.exp(_normal(float(p["mean"]), float(p["stdDev"]), rng, size))
    else:
        raise DistributionParameterError(None, f"unsupported distribution {distribution!r}")

    if size is None:
        return float(out)
    return np.asarray(out, dtype=float)


# ---------------------------------------------------------------------------
# Variable-level helpers
# ---------------------------------------------------------------------------

def resolve_parameters(variable: SimulationVariable, *, legacy: bool = False) -> Dict[str, float]:
    """
    Return the numeric parameters needed to sample `variable`.

    Strict mode raises on anything missing; legacy mode fills the gaps with
    LEGACY_PARAMETER_DEFAULTS.
    """
    dist = variable.distribution
    if dist not in REQUIRED_PARAMETERS:
        if legacy:
            return {}
        raise DistributionParameterError(
            variable.name,
            f"unsupported distribution {dist!r} (expected one of {', '.join(DISTRIBUTIONS)})",
        )

    supplied = {k: v for k, v in (variable.parameters or {}).items() if v is not None}
    required = REQUIRED_PARAMETERS[dist]
    missing = require_keys(supplied, required)
    if missing and not legacy:
        raise DistributionParameterError(
            variable.name,
            f"{dist} distribution requires parameter(s): {', '.join(missing)}",
        )

    resolved = dict(LEGACY_PARAMETER_DEFAULTS[dist]) if legacy else {}
    resolved.update({k: float(supplied[k]) for k in required if k in supplied})
    return resolved


def validate_variable(variable: SimulationVariable, *, legacy: bool = False) -> Dict[str, float]:
    """
    Fail fast on a variable that cannot be sampled sensibly.

    Checks: known impact, required parameters, finite values, stdDev >= 0,
    max > min (uniform/triangular), min <= mode <= max (triangular).
    Returns the resolved parameters.
    """
    if variable.impact not in IMPACTS:
        raise DistributionParameterError(
            variable.name,
            f"unsupported impact {variable.impact!r} (expected one of {', '.join(IMPACTS)})",
        )

    params = resolve_parameters(variable, legacy=legacy)
    for key, value in params.items():
        if not math.isfinite(value):
            raise DistributionParameterError(variable.name, f"parameter {key} must be finite")

    dist = variable.distribution
    if dist in ("normal", "lognormal") and params["stdDev"] < 0:
        raise DistributionParameterError(variable.name, "stdDev must be non-negative")
    if dist in ("uniform", "triangular") and params["max"] <= params["min"]:
        raise DistributionParameterError(variable.name, "max must be greater than min")
    if dist == "triangular" and not (params["min"] <= params["mode"] <= params["max"]):
        raise DistributionParameterError(variable.name, "mode must lie within [min, max]")
    return params


def sample_variable(
    variable: SimulationVariable,
    rng: np.random.Generator,
    size: Optional[int] = None,
    *,
    legacy: bool = False,
) -> Draw:
    """Sample a declared variable; unknown distributions give 1.0 in legacy mode."""
    params = resolve_parameters(variable, legacy=legacy)
    if variable.distribution not in REQUIRED_PARAMETERS:
        return 1.0 if size is None else np.ones(size, dtype=float)
    return sample(variable.distribution, params, rng, size)


def perturb_variable(variable: SimulationVariable, pct: float = 0.10, *, legacy: bool = False) -> SimulationVariable:
    """
    Clone `variable` with its central value raised by `pct`.

      normal       mean × (1 + pct), a zero mean is taken as 1
      lognormal    mean + ln(1 + pct)        (median exp(mean) × (1 + pct))
      uniform      min, max × (1 + pct)      (mean × (1 + pct))
      triangular   min, max, mode × (1 + pct)
    """
    if variable.distribution not in REQUIRED_PARAMETERS:
        return variable
    params = resolve_parameters(variable, legacy=legacy)
    scale = 1.0 + pct
    if variable.distribution == "normal":
        params["mean"] = (params["mean"] or 1.0) * scale
    elif variable.distribution == "lognormal":
        params["mean"] = params["mean"] + math.log(scale)
    else:
        for key in ("min", "max", "mode"):
            if key in params:
                params[key] = params[key] * scale
    return variable.with_parameters(params)


# ---------------------------------------------------------------------------
# Analytic summaries
# ---------------------------------------------------------------------------

def analytic_distribution(variable: SimulationVariable, *, legacy: bool = False):
    """
    Frozen scipy.stats distribution equivalent to `variable`,
    or None for a point mass (zero spread) or unknown distribution.
    """
    if variable.distribution not in REQUIRED_PARAMETERS:
        return None
    p = resolve_parameters(variable, legacy=legacy)
    dist = variable.distribution
    if dist == "normal":
        return stats.norm(loc=p["mean"], scale=p["stdDev"]) if p["stdDev"] > 0 else None
    if dist == "lognormal":
        return stats.lognorm(s=p["stdDev"], scale=math.exp(p["mean"])) if p["stdDev"] > 0 else None
    width = p["max"] - p["min"]
    if width <= 0:
        return None
    if dist == "uniform":
        return stats.uniform(loc=p["min"], scale=width)
    return stats.triang(c=(p["mode"] - p["min"]) / width, loc=p["min"], scale=width)


def analytic_mean(variable: SimulationVariable, *, legacy: bool = False) -> float:
    """Expected value of the variable's distribution."""
    frozen = analytic_distribution(variable, legacy=legacy)
    if frozen is not None:
        return float(frozen.mean())
    if variable.distribution not in REQUIRED_PARAMETERS:
        return 1.0
    p = resolve_parameters(variable, legacy=legacy)
    if variable.distribution == "normal":
        return p["mean"]
    if variable.distribution == "lognormal":
        return math.exp(p["mean"])
    return p["min"]


def describe_variables(variables: Iterable[SimulationVariable], *, legacy: bool = False) -> pd.DataFrame:
    """Summary table of the declared variables: analytic mean, std and 5/95 percentiles."""
    rows = []
    for v in variables:
        frozen = analytic_distribution(v, legacy=legacy)
        mean = analytic_mean(v, legacy=legacy)
        rows.append({
            "Variable": v.name,
            "Distribution": v.distribution,
            "Impact": v.impact,
            "Mean": mean,
            "StdDev": float(frozen.std()) if frozen is not None else 0.0,
            "P05": float(frozen.ppf(0.05)) if frozen is not None else mean,
            "P95": float(frozen.ppf(0.95)) if frozen is not None else mean,
        })
    return pd.DataFrame(rows, columns=["Variable", "Distribution", "Impact", "Mean", "StdDev", "P05", "P95"])
