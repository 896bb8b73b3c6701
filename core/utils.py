from __future__ import annotations

import math
from typing import List, Optional, Sequence

import numpy as np


def nearest_rank(sorted_values: np.ndarray, p: float) -> float:
    """
    Nearest-rank percentile: sorted[floor(n * p)], index clamped to the last element.
    No interpolation (np.percentile's default would interpolate).
    """
    n = len(sorted_values)
    if n == 0:
        raise ValueError("nearest_rank of an empty sample")
    idx = min(int(math.floor(n * p)), n - 1)
    return float(sorted_values[idx])


def chunk_sizes(total: int, chunk_size: int) -> List[int]:
    """Split `total` iterations into fixed-size chunks; the last one takes the remainder."""
    if total <= 0:
        return []
    full, rest = divmod(total, chunk_size)
    sizes = [chunk_size] * full
    if rest:
        sizes.append(rest)
    return sizes


def spawn_generators(seed: Optional[int], n: int) -> List[np.random.Generator]:
    """One independent Generator per task, all derived from a single seed."""
    children = np.random.SeedSequence(seed).spawn(n)
    return [np.random.default_rng(ss) for ss in children]


def fresh_seed() -> int:
    """Draw a 64-bit seed from OS entropy (used when the request gives none)."""
    return int(np.random.SeedSequence().generate_state(1, dtype=np.uint64)[0])


def annual_to_monthly_rate(annual_rate: float) -> float:
    """Simple monthly rate r/12, as used for discounting monthly profit."""
    return float(annual_rate) / 12.0


def discount_factors(n_months: int, annual_rate: float) -> np.ndarray:
    """1 / (1 + r/12)^m for m = 1..n_months."""
    months = np.arange(1, n_months + 1, dtype=float)
    return 1.0 / np.power(1.0 + annual_to_monthly_rate(annual_rate), months)


def require_keys(mapping: dict, keys: Sequence[str]) -> List[str]:
    """Return the keys missing (or None) in `mapping`."""
    return [k for k in keys if mapping.get(k) is None]
