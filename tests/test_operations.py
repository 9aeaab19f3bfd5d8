import pytest

from lineplan.errors import InvalidPositionError, ScheduleIntegrityError
from lineplan.models import Schedule, ShopInstance
from lineplan.operations import insert_order, remove_order, swap_orders, validate_schedule
from tests.helpers import DARK, DARK_NUTS, MILK, WHITE, build, machine, order


def small_instance() -> ShopInstance:
    """Two machines, four orders; the nut order only fits on B."""
    machines = (machine("A", dark=5, milk=4, white=3), machine("B", dark=4, dark_nuts=8, white=2, milk=3))
    orders = (
        order("o1", DARK, 2, 10),
        order("o2", MILK, 1, 20),
        order("o3", WHITE, 3, 30),
        order("o4", DARK_NUTS, 1, 40),
    )
    return ShopInstance(machines=machines, orders=orders)


def test_insert_defaults_to_end_and_leaves_source_untouched():
    inst = small_instance()
    sched = build(inst, {"A": ["o1", "o2"]})
    new = insert_order(sched, inst.order("o3"), "A")
    assert new.as_ids()["A"] == ["o1", "o2", "o3"]
    assert sched.as_ids()["A"] == ["o1", "o2"]


def test_insert_at_front_and_middle():
    inst = small_instance()
    sched = build(inst, {"A": ["o1", "o2"]})
    assert insert_order(sched, inst.order("o3"), "A", 0).as_ids()["A"] == ["o3", "o1", "o2"]
    assert insert_order(sched, inst.order("o3"), "A", 1).as_ids()["A"] == ["o1", "o3", "o2"]


def test_untouched_machines_are_shared():
    inst = small_instance()
    sched = build(inst, {"A": ["o1"], "B": ["o4"]})
    new = insert_order(sched, inst.order("o2"), "A")
    assert new.queue("B") is sched.queue("B")
    new = remove_order(new, "A", 0)
    assert new.queue("B") is sched.queue("B")


def test_remove_then_insert_round_trip():
    inst = small_instance()
    sched = build(inst, {"A": ["o1", "o2"], "B": ["o4"]})
    for position in range(3):
        inserted = insert_order(sched, inst.order("o3"), "A", position)
        assert remove_order(inserted, "A", position).as_ids() == sched.as_ids()
        assert remove_order(inserted, "A", position) == sched


@pytest.mark.parametrize("position", [-1, 3])
def test_insert_out_of_range(position):
    inst = small_instance()
    sched = build(inst, {"A": ["o1", "o2"]})
    with pytest.raises(InvalidPositionError):
        insert_order(sched, inst.order("o3"), "A", position)


@pytest.mark.parametrize("position", [-1, 2])
def test_remove_out_of_range(position):
    inst = small_instance()
    sched = build(inst, {"A": ["o1", "o2"]})
    with pytest.raises(InvalidPositionError):
        remove_order(sched, "A", position)


def test_remove_from_empty_machine_fails():
    inst = small_instance()
    with pytest.raises(InvalidPositionError):
        remove_order(Schedule.empty(inst.machines), "B", 0)


def test_unknown_machine_fails():
    inst = small_instance()
    with pytest.raises(InvalidPositionError):
        insert_order(Schedule.empty(inst.machines), inst.order("o1"), "Z")


def test_invalid_position_is_an_index_error():
    assert issubclass(InvalidPositionError, IndexError)


def test_swap_same_machine_both_directions():
    inst = small_instance()
    sched = build(inst, {"A": ["o1", "o2", "o3"]})
    assert swap_orders(sched, "A", 0, "A", 2).as_ids()["A"] == ["o3", "o2", "o1"]
    assert swap_orders(sched, "A", 2, "A", 0).as_ids()["A"] == ["o3", "o2", "o1"]
    assert swap_orders(sched, "A", 1, "A", 2).as_ids()["A"] == ["o1", "o3", "o2"]


def test_swap_across_machines():
    inst = small_instance()
    sched = build(inst, {"A": ["o1", "o2"], "B": ["o3", "o4"]})
    swapped = swap_orders(sched, "A", 1, "B", 0)
    assert swapped.as_ids() == {"A": ["o1", "o3"], "B": ["o2", "o4"]}
    swapped = swap_orders(sched, "A", 0, "B", 1)
    assert swapped.as_ids() == {"A": ["o4", "o2"], "B": ["o3", "o1"]}


def test_validate_complete_schedule():
    inst = small_instance()
    sched = build(inst, {"A": ["o1", "o2"], "B": ["o3", "o4"]})
    assert validate_schedule(inst, sched)


def test_validate_detects_missing_duplicate_and_ineligible():
    inst = small_instance()
    partial = build(inst, {"A": ["o1"]})
    with pytest.raises(ScheduleIntegrityError):
        validate_schedule(inst, partial)
    assert validate_schedule(inst, partial, require_complete=False)

    duplicated = build(inst, {"A": ["o1", "o2", "o3"], "B": ["o4", "o1"]})
    with pytest.raises(ScheduleIntegrityError):
        validate_schedule(inst, duplicated)

    ineligible = build(inst, {"A": ["o1", "o2", "o3", "o4"]})
    with pytest.raises(ScheduleIntegrityError):
        validate_schedule(inst, ineligible)
