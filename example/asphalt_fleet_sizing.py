"""
Asphalt Paving: Fleet Sizing with pavesim

OVERVIEW:
    An asphalt plant loads trucks one at a time; the trucks haul the mix to a
    paver that lays it, then return empty. The paver only starts once a
    configurable number of trucks is waiting for it. Truck speeds vary from
    trip to trip.

PURPOSE:
    Demonstrate how to:
    - Run a single simulation and read its summary metrics
    - Export the queue snapshots for charting
    - Repeat a stochastic run to see the spread of outcomes
    - Sweep fleet size and initial queue and pick the best configuration

PROCESS FLOW (per truck):
    - Loading at the plant: 15 min (fixed)
    - Haul: 5 km at Uniform(20, 30) km/h
    - Unloading at the paver: 10 min (fixed)
    - Return: 5 km at Uniform(40, 50) km/h
"""
import logging

import pavesim
from pavesim import DEFAULT_PARAMETERS, OptimizationParameters


def single_run():
    result = pavesim.run_simulation(DEFAULT_PARAMETERS, seed=2024)
    print(f"Project duration: {result.total_time:.1f} min")
    print(f"Paver idle: {result.paver_idle_time:.1f} min "
          f"(utilization while paving {result.effective_paver_utilization:.0%})")
    print(f"Longest wait between two unloads: {result.longest_idle_between_unloads:.1f} min")

    snapshots = result.snapshots_frame()
    print(snapshots[["time", "plant_queue", "paver_queue", "produced", "laid"]].tail())


def replications():
    table = pavesim.run_replications(DEFAULT_PARAMETERS, runs=50, seed=7)
    print(table[["total_time", "paver_idle_time"]].describe())


def fleet_sweep():
    sweep = OptimizationParameters.around(DEFAULT_PARAMETERS)
    results = pavesim.run_optimization(sweep, max_workers=4, seed=7)
    print(pavesim.summarize_by_fleet_size(results))

    best = pavesim.find_optimal_configuration(results)
    if best is None:
        print("No configuration reached the target.")
    else:
        print(f"Best: {best.truck_count} trucks, start paving with {best.initial_queue} waiting "
              f"({best.paver_idle_time:.1f} min paver idle)")


if __name__ == "__main__":
    pavesim.LogConfig(enabled=True, console_level=logging.INFO, file_path=None)
    single_run()
    replications()
    fleet_sweep()
