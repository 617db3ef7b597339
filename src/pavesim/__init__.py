"""pavesim simulates an asphalt plant feeding a paver through a truck fleet and searches for the fleet configuration with the least paver idle time. Current subpackage includes des (event primitives), simulation (the run driver) and optimizer (the fleet sweep) modules.
"""
from pavesim.params import DEFAULT_PARAMETERS, OptimizationParameters, SimulationParameters
from pavesim.des import EventKind, SimEvent, Timeline, Truck, TruckState
from pavesim.recorder import QueueSnapshot, SnapshotRecorder
from pavesim.simulation import PavingSimulation, RunState, SimulationResult
from pavesim.optimizer import (
    OptimizationResult,
    find_optimal_configuration,
    results_frame,
    run_optimization,
    summarize_by_fleet_size,
)
from pavesim.log_cfg import log_config, logger, LogConfig
from pavesim.runner import run_replications, run_simulation

__version__ = "1.0.0"
