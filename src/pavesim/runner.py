from __future__ import annotations

from typing import Any

import numpy as np
import pandas as pd

from .log_cfg import logger
from .mcs import monte_carlo
from .params import SimulationParameters
from .simulation import PavingSimulation, SimulationResult

REPLICATION_METRICS = (
    "total_time",
    "plant_utilization",
    "paver_utilization",
    "paver_idle_time",
    "effective_paver_time",
    "effective_paver_utilization",
    "longest_idle_between_unloads",
)
"""Numeric metrics reported per replication by :func:`run_replications`."""


def run_simulation(params: SimulationParameters, seed: Any = None) -> SimulationResult:
    """Run one simulation of ``params``.

    Parameters
    ----------
    params:
        Validated run configuration.

    seed:
        Anything :func:`numpy.random.default_rng` accepts. Runs with equal
        seeds, or with degenerate speed ranges, are identical.

    Returns
    -------
    SimulationResult
        ``completed`` is ``False`` when the configuration can never lay the
        target (for example an initial queue that cannot be reached).
    """
    result = PavingSimulation(params, seed=seed).run()
    logger.info(
        "%d trucks / initial queue %d: %s in %.1f min, paver idle %.1f min",
        params.total_trucks,
        params.initial_queue,
        "completed" if result.completed else "exhausted",
        result.total_time,
        result.paver_idle_time,
    )
    return result


def run_replications(params: SimulationParameters, runs: int = 30, seed: Any = None) -> pd.DataFrame:
    """Run ``runs`` independent replications of ``params``.

    Every replication draws its speeds from its own child of
    ``numpy.random.SeedSequence(seed)``, so a fixed ``seed`` reproduces the
    whole table.

    Returns
    -------
    pandas.DataFrame
        One row per replication with a ``run`` column, a ``completed`` column
        and the :data:`REPLICATION_METRICS` columns.
    """
    if runs < 1:
        raise ValueError("runs must be >= 1")

    children = iter(np.random.SeedSequence(seed).spawn(runs))
    completed: list[bool] = []

    def _one_run():
        result = PavingSimulation(params, seed=next(children)).run()
        completed.append(result.completed)
        return [getattr(result, name) for name in REPLICATION_METRICS]

    values = monte_carlo(_one_run, runs=runs)
    frame = pd.DataFrame(values, columns=list(REPLICATION_METRICS))
    frame.insert(0, "completed", completed)
    frame.insert(0, "run", range(1, runs + 1))
    logger.info(
        "%d replications: mean total time %.1f min, mean paver idle %.1f min",
        runs,
        frame["total_time"].mean(),
        frame["paver_idle_time"].mean(),
    )
    return frame
