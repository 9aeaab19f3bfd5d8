"""Schedule scoring with optional reuse of unchanged per-machine results.

Contains ``score_machine`` for a single machine queue and ``score_schedule``
which aggregates the per-machine results. Passing a previous score together
with the machines touched by an edit skips recomputation for every other
machine; the result is identical to a full recomputation as long as the
caller names every machine it changed.
"""

from __future__ import annotations

from typing import Iterable

from .models import Machine, MachineScore, Order, Schedule, Score
from .switchover import DEFAULT_POLICY, SwitchoverPolicy, switchover_between


def score_machine(
    machine: Machine,
    queue: Iterable[Order],
    policy: SwitchoverPolicy = DEFAULT_POLICY,
) -> MachineScore:
    tardiness = 0
    costly = 0
    end = 0
    previous: Order | None = None
    for order in queue:
        if previous is not None:
            switchover = switchover_between(previous, order, policy)
            end += switchover.duration
            if switchover.costly:
                costly += 1
        end += machine.processing_time(order)
        if end > order.due:
            tardiness += end - order.due
        previous = order
    return MachineScore(tardiness=tardiness, costly_switchovers=costly, end_time=end)


def aggregate(machine_scores: dict[str, MachineScore]) -> Score:
    total_tardiness = sum(s.tardiness for s in machine_scores.values())
    costly = sum(s.costly_switchovers for s in machine_scores.values())
    makespan = max((s.end_time for s in machine_scores.values()), default=0)
    # an empty schedule has no machine at the makespan
    at_makespan = (
        sum(1 for s in machine_scores.values() if s.end_time == makespan) if makespan > 0 else 0
    )
    return Score(
        total_tardiness=total_tardiness,
        costly_switchovers=costly,
        makespan=makespan,
        machines_at_makespan=at_makespan,
        machine_scores=machine_scores,
    )


def score_schedule(
    schedule: Schedule,
    previous: Score | None = None,
    changed_machines: Iterable[Machine | str] = (),
    policy: SwitchoverPolicy = DEFAULT_POLICY,
) -> Score:
    """Score a schedule, reusing ``previous`` for machines not in ``changed_machines``.

    Args:
        schedule: Schedule to evaluate.
        previous: Score of the schedule the edit started from. When None every
            machine is recomputed.
        changed_machines: Machines (or machine ids) whose sequence differs from
            the schedule ``previous`` was computed for.
        policy: Switchover durations and neutral color.

    Returns:
        Aggregated Score with a fresh per-machine breakdown mapping.
    """
    changed = {m if isinstance(m, str) else m.machine_id for m in changed_machines}
    machine_scores: dict[str, MachineScore] = {}
    for machine, queue in schedule.items():
        machine_id = machine.machine_id
        if previous is not None and machine_id not in changed:
            cached = previous.machine_scores.get(machine_id)
            if cached is not None:
                machine_scores[machine_id] = cached
                continue
        machine_scores[machine_id] = score_machine(machine, queue, policy)
    return aggregate(machine_scores)
