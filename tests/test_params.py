import pytest

from pavesim.params import DEFAULT_PARAMETERS, OptimizationParameters, SimulationParameters


@pytest.mark.parametrize(
    "changes",
    [
        {"total_trucks": 0, "initial_queue": 1},
        {"total_trucks": 2.5},
        {"target_quantity": -1},
        {"truck_capacity": 0},
        {"loading_time": 0},
        {"unloading_time": -5},
        {"distance": 0},
        {"loaded_speed_min": 0},
        {"loaded_speed_min": 35, "loaded_speed_max": 30},
        {"empty_speed_min": 55, "empty_speed_max": 50},
        {"initial_queue": 0},
        {"initial_queue": 9},
        {"initial_queue": True},
    ],
)
def test_invalid_parameters_fail_fast(changes):
    with pytest.raises(ValueError):
        DEFAULT_PARAMETERS.replace(**changes)


def test_degenerate_speed_range_is_valid():
    params = DEFAULT_PARAMETERS.replace(loaded_speed_min=25, loaded_speed_max=25)
    assert params.loaded_speed_min == params.loaded_speed_max == 25


def test_replace_returns_new_instance():
    params = DEFAULT_PARAMETERS.replace(total_trucks=4, initial_queue=2)

    assert params.total_trucks == 4
    assert DEFAULT_PARAMETERS.total_trucks == 8
    assert params.as_dict()["initial_queue"] == 2


def test_zero_target_is_valid():
    assert SimulationParameters(**{**DEFAULT_PARAMETERS.as_dict(), "target_quantity": 0}).target_quantity == 0


def test_optimization_grid_respects_fleet_size():
    opt = OptimizationParameters(DEFAULT_PARAMETERS, min_trucks=1, max_trucks=3, min_queue=1, max_queue=2)

    assert opt.grid() == [(1, 1), (2, 1), (2, 2), (3, 1), (3, 2)]


def test_optimization_grid_can_be_empty():
    opt = OptimizationParameters(DEFAULT_PARAMETERS, min_trucks=1, max_trucks=2, min_queue=3, max_queue=4)

    assert opt.grid() == []


@pytest.mark.parametrize(
    "ranges",
    [
        {"min_trucks": 0, "max_trucks": 3, "min_queue": 1, "max_queue": 2},
        {"min_trucks": 4, "max_trucks": 3, "min_queue": 1, "max_queue": 2},
        {"min_trucks": 1, "max_trucks": 3, "min_queue": 0, "max_queue": 2},
        {"min_trucks": 1, "max_trucks": 3, "min_queue": 3, "max_queue": 2},
    ],
)
def test_invalid_sweep_ranges(ranges):
    with pytest.raises(ValueError):
        OptimizationParameters(DEFAULT_PARAMETERS, **ranges)


def test_default_sweep_around_parameters():
    opt = OptimizationParameters.around(DEFAULT_PARAMETERS)

    assert (opt.min_trucks, opt.max_trucks) == (3, 13)
    assert (opt.min_queue, opt.max_queue) == (1, 8)
