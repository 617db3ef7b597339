"""Fleet-size / initial-queue sweep and selection of the best configuration.

Every grid point is simulated by its own :class:`~pavesim.simulation.PavingSimulation`,
so points can be evaluated in any order and in separate processes. Only the
completed runs are returned.
"""
from __future__ import annotations

import concurrent.futures
from dataclasses import asdict, dataclass
from typing import Any, Iterable, Optional

import numpy as np
import pandas as pd

from pavesim.log_cfg import logger
from pavesim.params import OptimizationParameters, SimulationParameters
from pavesim.simulation import PavingSimulation

IDLE_TOLERANCE = 1.0
"""Minutes of paver idle time within which two configurations count as equal."""


@dataclass(frozen=True)
class OptimizationResult:
    """Ranking metrics of one completed grid point."""

    truck_count: int
    initial_queue: int
    paver_idle_time: float
    simulation_time: float
    utilization: float
    effective_paver_idle_time: float
    effective_paver_time: float
    effective_paver_utilization: float
    longest_idle_between_unloads: float


def _evaluate(params: SimulationParameters, seed: Any) -> Optional[OptimizationResult]:
    """Simulate one grid point; ``None`` if it never completes."""
    result = PavingSimulation(params, seed=seed).run()
    if not result.completed:
        logger.debug(
            "Dropped %d trucks / initial queue %d: target not reached",
            params.total_trucks, params.initial_queue,
        )
        return None
    return OptimizationResult(
        truck_count=params.total_trucks,
        initial_queue=params.initial_queue,
        paver_idle_time=result.paver_idle_time,
        simulation_time=result.total_time,
        utilization=result.paver_utilization,
        effective_paver_idle_time=result.effective_paver_idle_time,
        effective_paver_time=result.effective_paver_time,
        effective_paver_utilization=result.effective_paver_utilization,
        longest_idle_between_unloads=result.longest_idle_between_unloads,
    )


def run_optimization(
    opt_params: OptimizationParameters,
    *,
    max_workers: Optional[int] = None,
    seed: Any = None,
) -> list[OptimizationResult]:
    """Simulate every ``(trucks, initial_queue)`` pair of the sweep.

    Parameters
    ----------
    opt_params:
        Base parameters and the inclusive truck / queue ranges. Queue values
        larger than the fleet size of a point are skipped.

    max_workers:
        ``None`` or ``1`` evaluates the grid in this process; a larger value
        spreads it over a :class:`concurrent.futures.ProcessPoolExecutor`.

    seed:
        When given, grid point ``i`` uses child ``i`` of
        ``numpy.random.SeedSequence(seed)``, so the output does not depend on
        ``max_workers``.

    Returns
    -------
    list[OptimizationResult]
        Completed runs ordered by ``(truck_count, initial_queue)``.
    """
    if max_workers is not None and max_workers < 1:
        raise ValueError("max_workers must be >= 1")

    grid = opt_params.grid()
    if seed is None:
        seeds: list[Any] = [None] * len(grid)
    else:
        seeds = list(np.random.SeedSequence(seed).spawn(len(grid)))
    tasks = [
        (opt_params.base_params.replace(total_trucks=trucks, initial_queue=queue), point_seed)
        for (trucks, queue), point_seed in zip(grid, seeds)
    ]
    logger.debug("Sweeping %d configurations (max_workers=%s)", len(tasks), max_workers)

    outcomes: list[Optional[OptimizationResult]] = []
    if max_workers is None or max_workers == 1:
        outcomes = [_evaluate(params, point_seed) for params, point_seed in tasks]
    else:
        with concurrent.futures.ProcessPoolExecutor(max_workers=max_workers) as executor:
            futures = {executor.submit(_evaluate, params, point_seed): params for params, point_seed in tasks}
            for future in concurrent.futures.as_completed(futures):
                outcomes.append(future.result())

    results = sorted(
        (outcome for outcome in outcomes if outcome is not None),
        key=lambda r: (r.truck_count, r.initial_queue),
    )
    logger.info("Sweep finished: %d of %d configurations completed", len(results), len(tasks))
    return results


def find_optimal_configuration(
    results: Iterable[OptimizationResult],
    tolerance: float = IDLE_TOLERANCE,
) -> Optional[OptimizationResult]:
    """Pick the smallest fleet whose paver idle time is near the minimum.

    All results within ``tolerance`` minutes of the lowest paver idle time
    are candidates; the one with the fewest trucks wins, the first one
    encountered on ties. Returns ``None`` only for an empty input.
    """
    results = list(results)
    if not results:
        return None

    min_idle = min(r.paver_idle_time for r in results)
    best: Optional[OptimizationResult] = None
    for r in results:
        if r.paver_idle_time <= min_idle + tolerance:
            if best is None or r.truck_count < best.truck_count:
                best = r
    return best


def results_frame(results: Iterable[OptimizationResult]) -> pd.DataFrame:
    """Sweep results as a DataFrame, one row per configuration."""
    columns = list(OptimizationResult.__dataclass_fields__)
    return pd.DataFrame([asdict(r) for r in results], columns=columns)


def summarize_by_fleet_size(results: Iterable[OptimizationResult]) -> pd.DataFrame:
    """Paver idle time statistics per fleet size.

    Returns a frame indexed by ``truck_count`` with the columns
    ``configurations``, ``mean_idle``, ``min_idle``, ``max_idle`` and
    ``best_initial_queue`` (the queue of the lowest-idle row, first on ties).
    """
    frame = results_frame(results)
    if frame.empty:
        return pd.DataFrame(
            columns=["configurations", "mean_idle", "min_idle", "max_idle", "best_initial_queue"],
            index=pd.Index([], name="truck_count"),
        )
    grouped = frame.groupby("truck_count")
    summary = grouped["paver_idle_time"].agg(
        configurations="count", mean_idle="mean", min_idle="min", max_idle="max"
    )
    summary["best_initial_queue"] = frame.loc[grouped["paver_idle_time"].idxmin(), "initial_queue"].to_numpy()
    return summary
