import pytest

from pavesim.params import SimulationParameters


@pytest.fixture
def fixed_speed_params():
    """One truck, one load, constant speeds: the paver unloads from t=25 to t=35."""
    return SimulationParameters(
        total_trucks=1,
        target_quantity=40,
        truck_capacity=40,
        loading_time=15,
        unloading_time=10,
        loaded_speed_min=30,
        loaded_speed_max=30,
        empty_speed_min=40,
        empty_speed_max=40,
        distance=5,
        initial_queue=1,
    )
