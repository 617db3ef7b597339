import pytest

from pavesim.des import (
    EventKind,
    PaverController,
    PlantController,
    SimEvent,
    Timeline,
    Truck,
    TruckState,
)


def _advance(timeline, time):
    timeline.schedule(SimEvent(time, EventKind.SNAPSHOT))
    timeline.pop_earliest()


def test_admission_schedules_completion():
    timeline = Timeline()
    plant = PlantController(timeline, loading_time=15, is_done=lambda: False)
    first, second = Truck(0), Truck(1)
    plant.enqueue(first)
    plant.enqueue(second)

    admitted = plant.try_admit()

    assert admitted is first
    assert first.state is TruckState.LOADING
    assert plant.serving is first
    assert list(plant.queue) == [second]
    event = timeline.pop_earliest()
    assert event == SimEvent(15, EventKind.LOADING_COMPLETE, 0)


def test_busy_resource_does_not_admit_or_accrue_idle_time():
    timeline = Timeline()
    plant = PlantController(timeline, loading_time=15, is_done=lambda: False)
    plant.enqueue(Truck(0))
    plant.enqueue(Truck(1))
    plant.try_admit()
    _advance(timeline, 5)

    assert plant.try_admit() is None
    assert plant.idle_time == 0
    assert len(plant.queue) == 1


def test_idle_time_covers_gaps_while_slot_is_free():
    timeline = Timeline()
    plant = PlantController(timeline, loading_time=3, is_done=lambda: False)

    _advance(timeline, 4)
    assert plant.try_admit() is None
    assert plant.idle_time == 4

    plant.enqueue(Truck(0))
    assert plant.try_admit() is not None
    assert plant.idle_time == 4

    completion = timeline.pop_earliest()
    assert completion.time == 7
    plant.release()
    assert plant.try_admit() is None

    _advance(timeline, 10)
    plant.try_admit()
    assert plant.idle_time == 7


def test_finished_resource_neither_admits_nor_accrues():
    timeline = Timeline()
    plant = PlantController(timeline, loading_time=3, is_done=lambda: True)
    plant.enqueue(Truck(0))
    _advance(timeline, 8)

    assert plant.try_admit() is None
    assert plant.idle_time == 0
    assert len(plant.queue) == 1


def test_paver_waits_for_initial_queue():
    timeline = Timeline()
    paver = PaverController(timeline, unloading_time=10, is_done=lambda: False, initial_queue=2)
    _advance(timeline, 20)

    paver.enqueue(Truck(0))
    assert not paver.active
    assert paver.try_admit() is None
    assert paver.idle_time == 0

    _advance(timeline, 26)
    paver.enqueue(Truck(1))
    assert paver.active
    assert paver.start_time == 26

    admitted = paver.try_admit()
    assert admitted.id == 0
    assert admitted.state is TruckState.UNLOADING
    assert paver.idle_time == 0


def test_paver_start_is_latched():
    timeline = Timeline()
    paver = PaverController(timeline, unloading_time=10, is_done=lambda: False, initial_queue=1)
    paver.enqueue(Truck(0))
    paver.try_admit()
    timeline.pop_earliest()
    paver.release()

    _advance(timeline, 30)
    paver.try_admit()

    assert paver.active
    assert paver.start_time == 0
    assert paver.idle_time == 20


def test_release_without_service_raises():
    timeline = Timeline()
    plant = PlantController(timeline, loading_time=3, is_done=lambda: False)

    with pytest.raises(RuntimeError):
        plant.release()
