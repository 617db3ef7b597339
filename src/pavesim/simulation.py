"""Simulation driver for one plant / paver configuration.

:class:`PavingSimulation` owns every piece of mutable state of a run -- the
trucks, the event timeline, both resource controllers, the totals and the
snapshot trace -- so independent instances can run side by side. A run goes
``INITIALIZING -> RUNNING -> COMPLETED | EXHAUSTED`` and produces a
:class:`SimulationResult`.

Examples
--------
>>> from pavesim.params import DEFAULT_PARAMETERS
>>> result = PavingSimulation(DEFAULT_PARAMETERS, seed=1).run()
>>> result.completed
True
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

import numpy as np
import pandas as pd

from pavesim._utils import _utilization
from pavesim.des import (
    EventKind,
    PaverController,
    PlantController,
    SimEvent,
    Timeline,
    Truck,
    TruckState,
)
from pavesim.dist import travel_minutes, uniform
from pavesim.log_cfg import logger
from pavesim.params import SimulationParameters
from pavesim.recorder import QueueSnapshot, SnapshotRecorder, snapshots_frame


class RunState(Enum):
    INITIALIZING = "initializing"
    RUNNING = "running"
    COMPLETED = "completed"
    EXHAUSTED = "exhausted"


@dataclass
class SimulationResult:
    """Trace and summary metrics of one run.

    Attributes
    ----------
    snapshots : list[QueueSnapshot]
        Periodic samples plus the final sample.
    total_time : float
        Clock value when the run stopped (minutes).
    plant_utilization, paver_utilization : float
        Busy share of ``[0, total_time]``.
    avg_trucks_in_system : float
        Trucks in the loop; the whole fleet for the whole run.
    completed : bool
        ``True`` if the target was laid, ``False`` if the event timeline ran
        dry first.
    paver_idle_time : float
        Idle minutes of the paver; it only accrues after the paver started.
    effective_paver_idle_time : float
        Idle minutes within ``[paver_start_time, total_time]``.
    effective_paver_time : float
        Length of that window; ``0`` if the paver never started.
    effective_paver_utilization : float
        Busy share of that window.
    longest_idle_between_unloads : float
        Longest time between two consecutive unloading completions.
    plant_idle_time : float
        Idle minutes of the plant.
    paver_start_time : float or None
        When the initial queue was first reached.
    events_processed : int
        Events popped from the timeline.
    """

    snapshots: list[QueueSnapshot]
    total_time: float
    plant_utilization: float
    paver_utilization: float
    avg_trucks_in_system: float
    completed: bool
    paver_idle_time: float
    effective_paver_idle_time: float
    effective_paver_time: float
    effective_paver_utilization: float
    longest_idle_between_unloads: float
    plant_idle_time: float = 0.0
    paver_start_time: Optional[float] = None
    events_processed: int = 0

    def snapshots_frame(self) -> pd.DataFrame:
        """The snapshot trace as a DataFrame."""
        return snapshots_frame(self.snapshots)

    def metrics(self) -> dict[str, Any]:
        """Scalar metrics only (everything but the snapshot trace)."""
        return {
            "total_time": self.total_time,
            "completed": self.completed,
            "plant_utilization": self.plant_utilization,
            "paver_utilization": self.paver_utilization,
            "avg_trucks_in_system": self.avg_trucks_in_system,
            "plant_idle_time": self.plant_idle_time,
            "paver_idle_time": self.paver_idle_time,
            "paver_start_time": self.paver_start_time,
            "effective_paver_idle_time": self.effective_paver_idle_time,
            "effective_paver_time": self.effective_paver_time,
            "effective_paver_utilization": self.effective_paver_utilization,
            "longest_idle_between_unloads": self.longest_idle_between_unloads,
            "events_processed": self.events_processed,
        }


class PavingSimulation:
    """One run of the haul loop for a fixed :class:`SimulationParameters`.

    Parameters
    ----------
    params : SimulationParameters
        Validated run configuration.
    seed : int, numpy.random.SeedSequence or numpy.random.Generator, optional
        Source of the trip speed draws. ``None`` draws fresh entropy.
    """

    def __init__(self, params: SimulationParameters, seed=None):
        if not isinstance(params, SimulationParameters):
            raise TypeError(f"params must be SimulationParameters, got {type(params)!r}")
        self.params = params
        self.rng = np.random.default_rng(seed)
        self.loaded_speed = uniform(params.loaded_speed_min, params.loaded_speed_max)
        self.empty_speed = uniform(params.empty_speed_min, params.empty_speed_max)

        self.state = RunState.INITIALIZING
        self.timeline = Timeline()
        self.trucks: list[Truck] = []
        self.produced = 0.0
        self.laid = 0.0
        self.plant = PlantController(self.timeline, params.loading_time, self._production_done)
        self.paver = PaverController(self.timeline, params.unloading_time, self._paving_done,
                                     params.initial_queue)
        self.recorder = SnapshotRecorder()
        self.events_processed = 0
        self.longest_idle_between_unloads = 0.0
        self._last_unload_time: Optional[float] = None
        self._handlers = {
            EventKind.PLANT_ARRIVAL: self._on_plant_arrival,
            EventKind.LOADING_COMPLETE: self._on_loading_complete,
            EventKind.PAVER_ARRIVAL: self._on_paver_arrival,
            EventKind.UNLOADING_COMPLETE: self._on_unloading_complete,
            EventKind.SNAPSHOT: self._on_snapshot,
        }

    @property
    def now(self) -> float:
        return self.timeline.now

    def _production_done(self) -> bool:
        return self.produced >= self.params.target_quantity

    def _paving_done(self) -> bool:
        return self.laid >= self.params.target_quantity

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def run(self) -> SimulationResult:
        """Run to completion or exhaustion and return the result."""
        if self.state is not RunState.INITIALIZING:
            raise RuntimeError("A PavingSimulation can only be run once; create a new instance.")
        logger.debug(
            "Run started: %d trucks, initial queue %d, target %g t",
            self.params.total_trucks, self.params.initial_queue, self.params.target_quantity,
        )
        self._initialize()

        self.state = RunState.RUNNING
        while not self._paving_done():
            event = self.timeline.pop_earliest()
            if event is None:
                break
            self.events_processed += 1
            self._dispatch(event)
            self.plant.try_admit()
            self.paver.try_admit()

        self.state = RunState.COMPLETED if self._paving_done() else RunState.EXHAUSTED
        self._take_snapshot()
        result = self._result()
        logger.debug(
            "Run %s at t=%g after %d events (paver idle %g min)",
            self.state.value, result.total_time, result.events_processed, result.paver_idle_time,
        )
        return result

    def _initialize(self) -> None:
        self.trucks = [Truck(truck_id) for truck_id in range(self.params.total_trucks)]
        for truck in self.trucks:
            self.plant.enqueue(truck)
        self.timeline.schedule(SimEvent(0.0, EventKind.SNAPSHOT))
        self.plant.try_admit()

    def _dispatch(self, event: SimEvent) -> None:
        logger.debug("t=%.2f %s truck=%s", self.now, event.kind.value, event.truck_id)
        handler = self._handlers[event.kind]
        if event.truck_id is None:
            handler()
        else:
            handler(self.trucks[event.truck_id])

    # ------------------------------------------------------------------
    # Truck transitions
    # ------------------------------------------------------------------
    def _travel(self, truck: Truck, speed: float, state: TruckState, arrival: EventKind) -> None:
        truck.enter(state, self.now)
        truck.speed = speed
        self.timeline.schedule_in(travel_minutes(self.params.distance, speed), arrival, truck.id)

    def _retire(self, truck: Truck) -> None:
        truck.enter(TruckState.RETIRED, self.now)
        truck.speed = None

    def _on_plant_arrival(self, truck: Truck) -> None:
        truck.speed = None
        if self._production_done():
            self._retire(truck)
            return
        truck.enter(TruckState.QUEUED_AT_PLANT, self.now)
        self.plant.enqueue(truck)

    def _on_loading_complete(self, truck: Truck) -> None:
        self.plant.release()
        load = min(self.params.truck_capacity, self.params.target_quantity - self.produced)
        truck.load = load
        self.produced += load
        self._travel(truck, self.loaded_speed.sample(self.rng), TruckState.TRAVELING_LOADED,
                     EventKind.PAVER_ARRIVAL)

    def _on_paver_arrival(self, truck: Truck) -> None:
        truck.speed = None
        truck.enter(TruckState.QUEUED_AT_PAVER, self.now)
        was_active = self.paver.active
        self.paver.enqueue(truck)
        if self.paver.active and not was_active:
            logger.debug("t=%.2f paver started with %d trucks queued", self.now, len(self.paver.queue))

    def _on_unloading_complete(self, truck: Truck) -> None:
        self.paver.release()
        amount = min(truck.load, self.params.target_quantity - self.laid)
        self.laid += amount
        truck.load = 0.0

        if self.paver.active and self._last_unload_time is not None:
            gap = self.now - self._last_unload_time
            self.longest_idle_between_unloads = max(self.longest_idle_between_unloads, gap)
        self._last_unload_time = self.now

        if self._paving_done():
            self._retire(truck)
            return
        self._travel(truck, self.empty_speed.sample(self.rng), TruckState.TRAVELING_EMPTY,
                     EventKind.PLANT_ARRIVAL)

    def _on_snapshot(self) -> None:
        self._take_snapshot()
        # stop sampling once nothing else can happen, otherwise an infeasible
        # run would never drain its timeline
        if self.timeline.has_truck_events():
            self.timeline.schedule_in(self.recorder.interval, EventKind.SNAPSHOT)

    def _take_snapshot(self) -> QueueSnapshot:
        return self.recorder.record(
            time=self.now,
            trucks=self.trucks,
            produced=self.produced,
            laid=self.laid,
            plant_idle=self.plant.idle,
            paver_idle=self.paver.idle,
        )

    # ------------------------------------------------------------------
    # Metrics
    # ------------------------------------------------------------------
    def _result(self) -> SimulationResult:
        total_time = self.now
        paver_end = self.now
        if self.paver.start_time is not None:
            effective_time = paver_end - self.paver.start_time
        else:
            effective_time = 0.0
        return SimulationResult(
            snapshots=list(self.recorder.snapshots),
            total_time=total_time,
            plant_utilization=_utilization(total_time, self.plant.idle_time),
            paver_utilization=_utilization(total_time, self.paver.idle_time),
            avg_trucks_in_system=float(self.params.total_trucks),
            completed=self.state is RunState.COMPLETED,
            paver_idle_time=self.paver.idle_time,
            effective_paver_idle_time=self.paver.idle_time,
            effective_paver_time=effective_time,
            effective_paver_utilization=_utilization(effective_time, self.paver.idle_time),
            longest_idle_between_unloads=self.longest_idle_between_unloads,
            plant_idle_time=self.plant.idle_time,
            paver_start_time=self.paver.start_time,
            events_processed=self.events_processed,
        )
