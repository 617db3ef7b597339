import pytest

from pavesim.optimizer import (
    OptimizationResult,
    find_optimal_configuration,
    results_frame,
    run_optimization,
    summarize_by_fleet_size,
)
from pavesim.params import OptimizationParameters


def _result(trucks, idle, queue=1):
    return OptimizationResult(
        truck_count=trucks,
        initial_queue=queue,
        paver_idle_time=idle,
        simulation_time=300.0,
        utilization=0.9,
        effective_paver_idle_time=idle,
        effective_paver_time=280.0,
        effective_paver_utilization=0.85,
        longest_idle_between_unloads=12.0,
    )


def test_smallest_fleet_within_tolerance_wins():
    results = [_result(3, 120), _result(4, 100), _result(5, 100.4)]

    best = find_optimal_configuration(results)

    assert best.truck_count == 4


def test_tolerance_includes_boundary():
    results = [_result(6, 50), _result(5, 51)]

    assert find_optimal_configuration(results).truck_count == 5
    assert find_optimal_configuration(results, tolerance=0.5).truck_count == 6


def test_first_result_wins_on_equal_fleet_size():
    first = _result(4, 10, queue=2)
    second = _result(4, 10.5, queue=1)

    assert find_optimal_configuration([_result(7, 10), first, second]) is first


def test_no_results_no_optimum():
    assert find_optimal_configuration([]) is None


@pytest.fixture
def two_load_sweep(fixed_speed_params):
    base = fixed_speed_params.replace(target_quantity=80)
    return OptimizationParameters(base, min_trucks=1, max_trucks=3, min_queue=1, max_queue=2)


def test_sweep_covers_grid_in_order(two_load_sweep):
    results = run_optimization(two_load_sweep)

    assert [(r.truck_count, r.initial_queue) for r in results] == [(1, 1), (2, 1), (2, 2), (3, 1), (3, 2)]
    single = results[0]
    # one truck: unloads 25..35, reloads 42.5..57.5, unloads again 67.5..77.5
    assert single.simulation_time == pytest.approx(77.5)
    assert single.paver_idle_time == pytest.approx(32.5)
    assert single.longest_idle_between_unloads == pytest.approx(42.5)


def test_sweep_drops_infeasible_configurations(fixed_speed_params):
    # only one load is ever produced, so a paver waiting for two never starts
    opt = OptimizationParameters(fixed_speed_params, min_trucks=1, max_trucks=2, min_queue=1, max_queue=2)

    results = run_optimization(opt)

    assert [(r.truck_count, r.initial_queue) for r in results] == [(1, 1), (2, 1)]


def test_parallel_sweep_matches_serial(two_load_sweep):
    serial = run_optimization(two_load_sweep, seed=5)
    parallel = run_optimization(two_load_sweep, seed=5, max_workers=2)

    assert parallel == serial


def test_invalid_worker_count(two_load_sweep):
    with pytest.raises(ValueError):
        run_optimization(two_load_sweep, max_workers=0)


def test_results_frame_and_fleet_summary():
    results = [_result(3, 120, 1), _result(3, 100, 2), _result(4, 90, 1), _result(4, 90, 2)]

    frame = results_frame(results)
    summary = summarize_by_fleet_size(results)

    assert len(frame) == 4
    assert frame["truck_count"].tolist() == [3, 3, 4, 4]
    assert summary.index.tolist() == [3, 4]
    assert summary["configurations"].tolist() == [2, 2]
    assert summary["mean_idle"].tolist() == [110, 90]
    assert summary["min_idle"].tolist() == [100, 90]
    assert summary["best_initial_queue"].tolist() == [2, 1]


def test_fleet_summary_of_nothing():
    summary = summarize_by_fleet_size([])

    assert summary.empty
    assert "mean_idle" in summary.columns
