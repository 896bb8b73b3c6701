"""
Monte Carlo runner — fans iterations out over a thread pool and merges them back.

Iterations are split into fixed-size chunks (EngineConfig.chunk_size). Each
chunk:
  - gets its own numpy Generator, spawned from SeedSequence(seed)
  - simulates its rows with the vectorised Path Simulator
  - shares nothing mutable with the other chunks

Chunks are merged in submission order, and the chunk layout depends only on
(iterations, chunk_size), so a seed reproduces the same PathBatch whatever
the worker count. numpy releases the GIL inside its kernels, which is what
lets the threads overlap.

A threading.Event passed as `cancel_event` aborts the run: chunks not yet
started are cancelled and SimulationCancelled is raised.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from typing import List, Optional

import numpy as np

from behaviors.scenario import ScenarioMultipliers
from core.config import EngineConfig
from core.errors import SimulationCancelled
from core.schema import IdeaFinancialBaseline, SimulationParams
from core.utils import chunk_sizes, spawn_generators

from .paths import PathBatch, simulate_paths

logger = logging.getLogger(__name__)

_POLL_SECONDS = 0.05


def _cancelled(cancel_event: Optional[threading.Event]) -> bool:
    return cancel_event is not None and cancel_event.is_set()


def _run_chunk(
    baseline: IdeaFinancialBaseline,
    params: SimulationParams,
    multipliers: ScenarioMultipliers,
    rng: np.random.Generator,
    n_paths: int,
    config: EngineConfig,
    cancel_event: Optional[threading.Event],
) -> PathBatch:
    if _cancelled(cancel_event):
        raise SimulationCancelled()
    return simulate_paths(
        baseline,
        params.time_horizon,
        params.variables,
        multipliers,
        rng,
        n_paths,
        config,
    )


def run_paths(
    baseline: IdeaFinancialBaseline,
    params: SimulationParams,
    multipliers: ScenarioMultipliers,
    config: Optional[EngineConfig] = None,
    *,
    cancel_event: Optional[threading.Event] = None,
) -> PathBatch:
    """
    Run `params.iterations` independent trajectories and return them as one batch.

    Parameters
    ----------
    baseline : IdeaFinancialBaseline
        Read-only economics shared by every chunk
    params : SimulationParams
        Horizon, iteration count, variables and seed (None -> fresh entropy)
    multipliers : ScenarioMultipliers
        The scenario applied to every iteration
    config : EngineConfig
        chunk_size / max_workers and model constants
    cancel_event : threading.Event, optional
        Set it from another thread to abort the run

    Returns
    -------
    PathBatch with iterations rows, ordered by chunk
    """
    cfg = config or EngineConfig()
    if params.iterations < 1 or params.time_horizon < 1:
        raise ValueError("iterations and time_horizon must be >= 1")

    sizes = chunk_sizes(params.iterations, cfg.chunk_size)
    rngs = spawn_generators(params.seed, len(sizes))
    workers = min(cfg.workers, len(sizes))
    logger.debug(
        "Dispatching %d iterations as %d chunk(s) on %d worker(s)",
        params.iterations, len(sizes), workers,
    )

    if workers == 1:
        batches: List[PathBatch] = [
            _run_chunk(baseline, params, multipliers, rng, n, cfg, cancel_event)
            for rng, n in zip(rngs, sizes)
        ]
        return PathBatch.concat(batches)

    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="mc-chunk") as pool:
        futures = [
            pool.submit(_run_chunk, baseline, params, multipliers, rng, n, cfg, cancel_event)
            for rng, n in zip(rngs, sizes)
        ]
        pending = set(futures)
        while pending:
            done, pending = wait(pending, timeout=_POLL_SECONDS, return_when=FIRST_EXCEPTION)
            failed = [f for f in done if not f.cancelled() and f.exception() is not None]
            if failed or _cancelled(cancel_event):
                for f in pending:
                    f.cancel()
                if failed:
                    raise failed[0].exception()
                raise SimulationCancelled()

        batches = [f.result() for f in futures]

    return PathBatch.concat(batches)
