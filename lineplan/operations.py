"""Schedule mutation primitives: copy-on-write insert/remove and validation.

Concepts
--------
Schedule value
    Every helper here returns a *new* :class:`~lineplan.models.Schedule`; the
    input is never modified. Only the touched machine's tuple is rebuilt, the
    remaining per-machine tuples are shared with the source schedule, so each
    call costs O(length of the affected machine's sequence).
Composite moves
    Relocation and swapping in the optimizer are expressed as sequences of
    ``remove_order`` / ``insert_order`` calls, never as in-place reorders.
"""

from __future__ import annotations

from collections import Counter

from .errors import InvalidPositionError, ScheduleIntegrityError
from .models import Machine, Order, Schedule, ShopInstance


def insert_order(
    schedule: Schedule,
    order: Order,
    machine: Machine | str,
    position: int | None = None,
) -> Schedule:
    """Return a schedule with ``order`` spliced into ``machine``'s sequence.

    Args:
        schedule: Source schedule (left untouched).
        order: Order to insert.
        machine: Target machine or machine id.
        position: 0-based index in ``[0, len]``; ``None`` appends.

    Raises:
        InvalidPositionError: Unknown machine or position out of range.
    """
    queue = schedule.queue(machine)
    if position is None:
        position = len(queue)
    if not (0 <= position <= len(queue)):
        raise InvalidPositionError(
            f"Insert position {position} out of range [0, {len(queue)}]"
        )
    return schedule.with_queue(machine, queue[:position] + (order,) + queue[position:])


def remove_order(schedule: Schedule, machine: Machine | str, position: int) -> Schedule:
    """Return a schedule without the order at ``position`` on ``machine``.

    Raises:
        InvalidPositionError: Unknown machine or position outside ``[0, len - 1]``.
    """
    queue = schedule.queue(machine)
    if not (0 <= position < len(queue)):
        raise InvalidPositionError(
            f"Remove position {position} out of range [0, {len(queue) - 1}]"
        )
    return schedule.with_queue(machine, queue[:position] + queue[position + 1 :])


def swap_orders(
    schedule: Schedule,
    machine_a: Machine | str,
    index_a: int,
    machine_b: Machine | str,
    index_b: int,
) -> Schedule:
    """Exchange the orders at two slots (same machine or two machines).

    The later-indexed order is removed first so the earlier index stays
    valid, then each order is reinserted into the other's slot.
    """
    order_a = schedule.queue(machine_a)[index_a]
    order_b = schedule.queue(machine_b)[index_b]
    if index_a < index_b:
        swapped = remove_order(schedule, machine_b, index_b)
        swapped = remove_order(swapped, machine_a, index_a)
        swapped = insert_order(swapped, order_b, machine_a, index_a)
        swapped = insert_order(swapped, order_a, machine_b, index_b)
    else:
        swapped = remove_order(schedule, machine_a, index_a)
        swapped = remove_order(swapped, machine_b, index_b)
        swapped = insert_order(swapped, order_a, machine_b, index_b)
        swapped = insert_order(swapped, order_b, machine_a, index_a)
    return swapped


def validate_schedule(
    instance: ShopInstance,
    schedule: Schedule,
    require_complete: bool = True,
) -> bool:
    """Validate that every order appears exactly once on an eligible machine.

    Args:
        instance: Problem instance supplying machines and orders.
        schedule: Candidate schedule to check.
        require_complete: When True every order of ``instance`` must be
            assigned; when False a partial schedule (during construction)
            is accepted.

    Returns:
        True if the schedule is valid.

    Raises:
        ScheduleIntegrityError: Foreign machine, unknown or duplicated order,
            order placed on a machine that cannot process it, or a missing
            order when ``require_complete`` is set.
    """
    if tuple(schedule.machines) != tuple(instance.machines):
        raise ScheduleIntegrityError("Schedule machines differ from instance machines")
    known = {o.order_id for o in instance.orders}
    counts: Counter[str] = Counter()
    for machine, queue in schedule.items():
        for order in queue:
            if order.order_id not in known:
                raise ScheduleIntegrityError(f"Unknown order {order.order_id}")
            if not machine.can_process(order.product):
                raise ScheduleIntegrityError(
                    f"Order {order.order_id} on ineligible machine {machine.machine_id}"
                )
            counts[order.order_id] += 1
    duplicated = sorted(oid for oid, c in counts.items() if c > 1)
    if duplicated:
        raise ScheduleIntegrityError(f"Orders assigned more than once: {duplicated}")
    if require_complete:
        missing = sorted(known - set(counts))
        if missing:
            raise ScheduleIntegrityError(f"Unassigned orders: {missing}")
    return True
