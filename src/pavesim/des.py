"""Discrete event primitives for the plant / paver haul loop.

The module holds the building blocks that :class:`pavesim.simulation.PavingSimulation`
wires together:

* :class:`Timeline` -- the pending-event calendar. It is backed by a
  :class:`simpy.Environment`, whose heap orders events by time and, for equal
  times, by insertion order.
* :class:`Truck` and :class:`TruckState` -- a flat per-truck record plus its
  lifecycle tag.
* :class:`PlantController` and :class:`PaverController` -- single-server queues
  that decide when the next truck is admitted and accumulate idle time.
"""
from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

import simpy


class EventKind(Enum):
    PLANT_ARRIVAL = "truck_arrive_plant"
    LOADING_COMPLETE = "truck_finish_loading"
    PAVER_ARRIVAL = "truck_arrive_paver"
    UNLOADING_COMPLETE = "truck_finish_unloading"
    SNAPSHOT = "snapshot"


@dataclass(frozen=True)
class SimEvent:
    """A pending event: absolute ``time``, ``kind`` and the truck it concerns."""

    time: float
    kind: EventKind
    truck_id: Optional[int] = None


class Timeline:
    """Pending events in nondecreasing time order.

    Events are handed to the underlying :class:`simpy.Environment` as
    timeouts. :meth:`pop_earliest` steps the environment once, so the
    environment clock always equals the time of the last popped event.

    Examples
    --------
    >>> timeline = Timeline()
    >>> _ = timeline.schedule(SimEvent(5, EventKind.SNAPSHOT))
    >>> _ = timeline.schedule(SimEvent(2, EventKind.SNAPSHOT))
    >>> timeline.pop_earliest().time
    2
    """

    def __init__(self):
        self._env = simpy.Environment()
        self._delivered: deque[SimEvent] = deque()
        self._pending = 0
        self._pending_truck_events = 0

    def __len__(self) -> int:
        return self._pending

    @property
    def now(self) -> float:
        """Time of the most recently popped event (``0`` before the first)."""
        return self._env.now

    def schedule(self, event: SimEvent) -> SimEvent:
        """Insert ``event``; it must not lie before :attr:`now`."""
        delay = event.time - self._env.now
        if delay < 0:
            raise ValueError(f"Cannot schedule {event.kind.name} at {event.time:g}, before now ({self.now:g}).")
        timeout = self._env.timeout(delay, value=event)
        timeout.callbacks.append(self._deliver)
        self._pending += 1
        if event.truck_id is not None:
            self._pending_truck_events += 1
        return event

    def schedule_in(self, delay: float, kind: EventKind, truck_id: Optional[int] = None) -> SimEvent:
        """Schedule ``kind`` ``delay`` minutes from now."""
        return self.schedule(SimEvent(self._env.now + delay, kind, truck_id))

    def _deliver(self, timeout) -> None:
        self._delivered.append(timeout.value)

    def pop_earliest(self) -> Optional[SimEvent]:
        """Remove and return the earliest event, or ``None`` when empty."""
        if not self._pending:
            return None
        self._env.step()
        event = self._delivered.popleft()
        self._pending -= 1
        if event.truck_id is not None:
            self._pending_truck_events -= 1
        return event

    def has_truck_events(self) -> bool:
        """Whether any event other than a snapshot is still pending."""
        return self._pending_truck_events > 0


class TruckState(Enum):
    QUEUED_AT_PLANT = "plant_queue"
    LOADING = "loading"
    TRAVELING_LOADED = "traveling_loaded"
    QUEUED_AT_PAVER = "paver_queue"
    UNLOADING = "unloading"
    TRAVELING_EMPTY = "traveling_empty"
    RETIRED = "retired"


@dataclass
class Truck:
    """State of one truck. ``speed`` is only set while the truck travels."""

    id: int
    state: TruckState = TruckState.QUEUED_AT_PLANT
    load: float = 0.0
    state_since: float = 0.0
    speed: Optional[float] = None

    def enter(self, state: TruckState, time: float) -> None:
        self.state = state
        self.state_since = time


class ResourceController:
    """Single-server FIFO queue with idle-time accounting.

    Idle time accrues while the resource is active, its slot is free and its
    target is not yet met. The gap since the slot was last known to be free is
    booked each time :meth:`try_admit` finds the slot free.

    Parameters
    ----------
    timeline : Timeline
        Calendar that receives service completion events.
    service_time : float
        Fixed duration of one service (minutes).
    completion_kind : EventKind
        Kind of the event scheduled when a truck is admitted.
    service_state : TruckState
        State an admitted truck enters.
    is_done : callable
        Returns ``True`` once the resource has nothing more to do.
    active : bool
        Whether the resource may serve (and accrue idle time) from time 0.
    """

    name = "resource"

    def __init__(
        self,
        timeline: Timeline,
        service_time: float,
        completion_kind: EventKind,
        service_state: TruckState,
        is_done: Callable[[], bool],
        active: bool = True,
    ):
        self.timeline = timeline
        self.service_time = service_time
        self.completion_kind = completion_kind
        self.service_state = service_state
        self.is_done = is_done
        self.queue: deque[Truck] = deque()
        self.serving: Optional[Truck] = None
        self.idle_time = 0.0
        self.active = active
        self._free_since: Optional[float] = timeline.now if active else None

    def __repr__(self) -> str:
        serving = self.serving.id if self.serving is not None else None
        return f"{type(self).__name__}(queue={len(self.queue)}, serving={serving}, idle_time={self.idle_time:g})"

    @property
    def idle(self) -> bool:
        """Active with nobody in service."""
        return self.active and self.serving is None

    def enqueue(self, truck: Truck) -> None:
        self.queue.append(truck)

    def try_admit(self) -> Optional[Truck]:
        """Start serving the front truck if the resource can.

        Returns the admitted truck, or ``None`` when the slot is busy, the
        resource is inactive or finished, or the queue is empty.
        """
        if self.serving is not None or not self.active or self.is_done():
            return None
        now = self.timeline.now
        self.idle_time += now - self._free_since
        self._free_since = now
        if not self.queue:
            return None

        truck = self.queue.popleft()
        truck.enter(self.service_state, now)
        self.serving = truck
        self._free_since = None
        self.timeline.schedule_in(self.service_time, self.completion_kind, truck.id)
        return truck

    def release(self) -> Truck:
        """Free the slot at the current time and return the truck served."""
        truck = self.serving
        if truck is None:
            raise RuntimeError(f"{self.name} released while nothing was in service")
        self.serving = None
        self._free_since = self.timeline.now
        return truck


class PlantController(ResourceController):
    """Loads trucks; active from time 0."""

    name = "plant"

    def __init__(self, timeline: Timeline, loading_time: float, is_done: Callable[[], bool]):
        super().__init__(timeline, loading_time, EventKind.LOADING_COMPLETE, TruckState.LOADING, is_done)


class PaverController(ResourceController):
    """Unloads trucks; starts once ``initial_queue`` trucks wait for it.

    The start check is a one-time latch: after :attr:`start_time` is set it
    is never evaluated again, even if the queue later runs dry.
    """

    name = "paver"

    def __init__(self, timeline: Timeline, unloading_time: float, is_done: Callable[[], bool],
                 initial_queue: int):
        super().__init__(timeline, unloading_time, EventKind.UNLOADING_COMPLETE, TruckState.UNLOADING,
                         is_done, active=False)
        self.initial_queue = initial_queue
        self.start_time: Optional[float] = None

    def enqueue(self, truck: Truck) -> None:
        super().enqueue(truck)
        if not self.active and len(self.queue) >= self.initial_queue:
            self.activate()

    def activate(self) -> None:
        self.active = True
        self.start_time = self.timeline.now
        self._free_since = self.timeline.now
