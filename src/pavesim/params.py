"""Run and sweep parameters for the paving simulation.

All values are validated on construction so that a bad configuration fails
before any event is processed. Units: tons, minutes, km and km/h.
"""
from __future__ import annotations

from dataclasses import dataclass, fields, replace as _dc_replace
from numbers import Integral, Real


def _check_integer(value, name: str) -> None:
    if isinstance(value, bool) or not isinstance(value, Integral):
        raise ValueError(f"{name} must be an integer, got {value!r}.")


def _check_positive(value, name: str) -> None:
    if isinstance(value, bool) or not isinstance(value, Real):
        raise ValueError(f"{name} must be a number, got {value!r}.")
    if value <= 0:
        raise ValueError(f"{name} must be positive.")


def _check_range(low, high, name: str) -> None:
    _check_positive(low, f"{name} minimum")
    _check_positive(high, f"{name} maximum")
    if low > high:
        raise ValueError(f"{name} minimum ({low:g}) must not exceed its maximum ({high:g}).")


@dataclass(frozen=True)
class SimulationParameters:
    """Configuration of a single simulation run.

    Attributes
    ----------
    total_trucks : int
        Fleet size.
    target_quantity : float
        Tons to be laid; ``0`` completes immediately.
    truck_capacity : float
        Tons a truck carries per trip.
    loading_time, unloading_time : float
        Fixed service durations at the plant and at the paver (minutes).
    loaded_speed_min, loaded_speed_max : float
        Bounds of the uniform speed drawn for each loaded trip (km/h).
    empty_speed_min, empty_speed_max : float
        Bounds of the uniform speed drawn for each empty return trip (km/h).
    distance : float
        One-way distance between plant and paver (km).
    initial_queue : int
        Number of trucks that must be queued at the paver before it starts
        working. Checked only until the paver first starts.
    """

    total_trucks: int
    target_quantity: float
    truck_capacity: float
    loading_time: float
    unloading_time: float
    loaded_speed_min: float
    loaded_speed_max: float
    empty_speed_min: float
    empty_speed_max: float
    distance: float
    initial_queue: int

    def __post_init__(self):
        _check_integer(self.total_trucks, "total_trucks")
        if self.total_trucks < 1:
            raise ValueError("total_trucks must be at least 1.")
        if isinstance(self.target_quantity, bool) or not isinstance(self.target_quantity, Real):
            raise ValueError(f"target_quantity must be a number, got {self.target_quantity!r}.")
        if self.target_quantity < 0:
            raise ValueError("target_quantity must not be negative.")
        _check_positive(self.truck_capacity, "truck_capacity")
        _check_positive(self.loading_time, "loading_time")
        _check_positive(self.unloading_time, "unloading_time")
        _check_range(self.loaded_speed_min, self.loaded_speed_max, "loaded speed")
        _check_range(self.empty_speed_min, self.empty_speed_max, "empty speed")
        _check_positive(self.distance, "distance")
        _check_integer(self.initial_queue, "initial_queue")
        if not 1 <= self.initial_queue <= self.total_trucks:
            raise ValueError(
                f"initial_queue must be between 1 and total_trucks ({self.total_trucks}), "
                f"got {self.initial_queue}."
            )

    def replace(self, **changes) -> "SimulationParameters":
        """Return a validated copy with ``changes`` applied."""
        return _dc_replace(self, **changes)

    def as_dict(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}


DEFAULT_PARAMETERS = SimulationParameters(
    total_trucks=8,
    target_quantity=500,
    truck_capacity=40,
    loading_time=15,
    unloading_time=10,
    loaded_speed_min=20,
    loaded_speed_max=30,
    empty_speed_min=40,
    empty_speed_max=50,
    distance=5,
    initial_queue=3,
)
"""Parameter set used when the caller has no configuration of its own."""


@dataclass(frozen=True)
class OptimizationParameters:
    """Grid swept by :func:`pavesim.optimizer.run_optimization`.

    ``base_params`` supplies every field except the fleet size and the initial
    queue, which are overwritten for each grid point. Both ranges are
    inclusive; queue values above the fleet size of a grid point are skipped.
    """

    base_params: SimulationParameters
    min_trucks: int
    max_trucks: int
    min_queue: int
    max_queue: int

    def __post_init__(self):
        if not isinstance(self.base_params, SimulationParameters):
            raise ValueError("base_params must be a SimulationParameters instance.")
        for name in ("min_trucks", "max_trucks", "min_queue", "max_queue"):
            _check_integer(getattr(self, name), name)
        if self.min_trucks < 1:
            raise ValueError("min_trucks must be at least 1.")
        if self.min_queue < 1:
            raise ValueError("min_queue must be at least 1.")
        if self.min_trucks > self.max_trucks:
            raise ValueError("min_trucks must not exceed max_trucks.")
        if self.min_queue > self.max_queue:
            raise ValueError("min_queue must not exceed max_queue.")

    @classmethod
    def around(cls, params: SimulationParameters, min_trucks: int = 3, extra_trucks: int = 5,
               max_queue: int = 8) -> "OptimizationParameters":
        """Sweep from ``min_trucks`` to ``params.total_trucks + extra_trucks``
        trucks and initial queues ``1..max_queue``."""
        return cls(
            base_params=params,
            min_trucks=min(min_trucks, params.total_trucks),
            max_trucks=params.total_trucks + extra_trucks,
            min_queue=1,
            max_queue=max_queue,
        )

    def grid(self) -> list[tuple[int, int]]:
        """All ``(trucks, initial_queue)`` pairs in sweep order."""
        return [
            (trucks, queue)
            for trucks in range(self.min_trucks, self.max_trucks + 1)
            for queue in range(self.min_queue, min(self.max_queue, trucks) + 1)
        ]
