from typing import Iterable

from .models import Machine, Order, OrderEntry, Schedule, SwitchoverEntry, Timeline, TimelineEntry
from .switchover import DEFAULT_POLICY, SwitchoverPolicy, switchover_between


def expand_machine(
    machine: Machine,
    queue: Iterable[Order],
    policy: SwitchoverPolicy = DEFAULT_POLICY,
) -> list[TimelineEntry]:
    """Expand one machine's order sequence into timeline entries.

    A switchover entry precedes every order except the first one; each entry
    carries its duration and the cumulative end time on the machine.

    Args:
        machine: Machine processing the queue (supplies unit times).
        queue: Orders in processing order.
        policy: Switchover durations and neutral color.

    Returns:
        Entries ordered by time, alternating order/switchover/order/...
    """
    entries: list[TimelineEntry] = []
    end = 0
    previous: Order | None = None
    for order in queue:
        if previous is not None:
            switchover = switchover_between(previous, order, policy)
            end += switchover.duration
            entries.append(
                SwitchoverEntry(duration=switchover.duration, end=end, costly=switchover.costly)
            )
        duration = machine.processing_time(order)
        end += duration
        entries.append(OrderEntry(order=order, duration=duration, end=end))
        previous = order
    return entries


def expand(schedule: Schedule, policy: SwitchoverPolicy = DEFAULT_POLICY) -> Timeline:
    """Decode a schedule into a detailed per-machine timeline.

    The timeline is never stored; it is recomputed on demand (rendering,
    relevance filtering in the optimizer, tests).

    Returns:
        ``machine_id -> entries`` in machine registration order.
    """
    return {
        machine.machine_id: expand_machine(machine, queue, policy)
        for machine, queue in schedule.items()
    }


def end_time(entries: list[TimelineEntry]) -> int:
    return entries[-1].end if entries else 0


def check_timeline(timeline: Timeline) -> bool:
    """Ensure each machine's entries are contiguous and well formed.

    Every entry must end exactly ``duration`` after the previous one and a
    switchover may only sit between two order entries.

    Returns:
        True if the timeline is consistent.

    Raises:
        AssertionError: On the first inconsistency found.
    """
    for machine_id, entries in timeline.items():
        previous_end = 0
        for k, entry in enumerate(entries):
            if entry.end != previous_end + entry.duration:
                raise AssertionError(
                    f"Gap or overlap on machine {machine_id} at entry {k}: "
                    f"previous end {previous_end}, end {entry.end}, duration {entry.duration}"
                )
            if isinstance(entry, SwitchoverEntry):
                if k == 0 or k == len(entries) - 1:
                    raise AssertionError(f"Dangling switchover on machine {machine_id}")
                if not isinstance(entries[k - 1], OrderEntry) or not isinstance(
                    entries[k + 1], OrderEntry
                ):
                    raise AssertionError(
                        f"Switchover not between two orders on machine {machine_id}"
                    )
            elif k > 0 and isinstance(entries[k - 1], OrderEntry):
                raise AssertionError(
                    f"Missing switchover before entry {k} on machine {machine_id}"
                )
            previous_end = entry.end
    return True
