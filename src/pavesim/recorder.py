"""Periodic sampling of the fleet for downstream charting.

A :class:`SnapshotRecorder` turns the live truck collection and running totals
into :class:`QueueSnapshot` rows. The simulation driver samples every
:data:`SNAPSHOT_INTERVAL` minutes and once more when the run ends.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import asdict, dataclass
from typing import Iterable

import pandas as pd

from pavesim.des import Truck, TruckState

SNAPSHOT_INTERVAL = 5.0
"""Minutes between two periodic snapshots."""


@dataclass(frozen=True)
class QueueSnapshot:
    """Fleet distribution and totals at one instant.

    The per-state counts always add up to the fleet size; trucks with no work
    left are counted as ``retired``.
    """

    time: float
    plant_queue: int
    loading: int
    traveling_loaded: int
    paver_queue: int
    unloading: int
    traveling_empty: int
    retired: int
    produced: float
    laid: float
    plant_idle: bool
    paver_idle: bool

    @property
    def total_trucks(self) -> int:
        return (
            self.plant_queue
            + self.loading
            + self.traveling_loaded
            + self.paver_queue
            + self.unloading
            + self.traveling_empty
            + self.retired
        )


class SnapshotRecorder:
    """Collects :class:`QueueSnapshot` rows for one run."""

    def __init__(self, interval: float = SNAPSHOT_INTERVAL):
        if interval <= 0:
            raise ValueError("Snapshot interval must be positive.")
        self.interval = interval
        self.snapshots: list[QueueSnapshot] = []

    def __len__(self) -> int:
        return len(self.snapshots)

    def record(
        self,
        time: float,
        trucks: Iterable[Truck],
        produced: float,
        laid: float,
        plant_idle: bool,
        paver_idle: bool,
    ) -> QueueSnapshot:
        """Count trucks per state and append a snapshot taken at ``time``."""
        counts = Counter(truck.state for truck in trucks)
        snapshot = QueueSnapshot(
            time=time,
            plant_queue=counts[TruckState.QUEUED_AT_PLANT],
            loading=counts[TruckState.LOADING],
            traveling_loaded=counts[TruckState.TRAVELING_LOADED],
            paver_queue=counts[TruckState.QUEUED_AT_PAVER],
            unloading=counts[TruckState.UNLOADING],
            traveling_empty=counts[TruckState.TRAVELING_EMPTY],
            retired=counts[TruckState.RETIRED],
            produced=produced,
            laid=laid,
            plant_idle=plant_idle,
            paver_idle=paver_idle,
        )
        self.snapshots.append(snapshot)
        return snapshot

    def to_frame(self) -> pd.DataFrame:
        return snapshots_frame(self.snapshots)


def snapshots_frame(snapshots: Iterable[QueueSnapshot]) -> pd.DataFrame:
    """Return snapshots as a DataFrame with one row per sample.

    The columns are the :class:`QueueSnapshot` fields in declaration order; an
    empty input still yields those columns.
    """
    columns = list(QueueSnapshot.__dataclass_fields__)
    return pd.DataFrame([asdict(s) for s in snapshots], columns=columns)
