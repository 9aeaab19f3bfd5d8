"""Greedy construction heuristic: scarcity first, earliest due, best position.

Orders are taken in ascending ``(number of eligible machines, due)`` order
(stable for ties). Each order is tried at every position of every eligible
machine; the best resulting schedule according to :func:`improves` is
committed before moving on to the next order.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .comparator import improves
from .errors import InfeasibleOrderError
from .evaluation import score_schedule
from .history import CONSTRUCTION, Snapshot
from .models import Order, Schedule, Score, ShopInstance
from .operations import insert_order
from .switchover import DEFAULT_POLICY, SwitchoverPolicy

logger = logging.getLogger("lineplan.construction")


@dataclass
class ConstructionResult:
    schedule: Schedule
    score: Score
    snapshots: list[Snapshot] = field(default_factory=list)
    infeasible: list[InfeasibleOrderError] = field(default_factory=list)


def construction_order(instance: ShopInstance) -> list[Order]:
    """Orders sorted by (eligible machine count, due time); stable on ties."""
    return sorted(
        instance.orders,
        key=lambda o: (len(instance.eligible_machines(o.product)), o.due),
    )


def best_insertion(
    instance: ShopInstance,
    schedule: Schedule,
    score: Score,
    order: Order,
    policy: SwitchoverPolicy = DEFAULT_POLICY,
) -> tuple[Schedule, Score]:
    """Try ``order`` at every position of every eligible machine.

    Enumeration runs over machines in registration order and positions in
    ascending order; only a strict improvement replaces the incumbent, so the
    first optimal slot wins.

    Returns:
        ``(schedule, incremental_score)`` of the chosen insertion.

    Raises:
        InfeasibleOrderError: No machine can process the order's product.
    """
    best_schedule: Schedule | None = None
    best_score: Score | None = None
    for machine in instance.eligible_machines(order.product):
        for position in range(len(schedule.queue(machine)) + 1):
            candidate = insert_order(schedule, order, machine, position)
            candidate_score = score_schedule(
                candidate, previous=score, changed_machines=(machine,), policy=policy
            )
            if best_score is None or improves(best_score, candidate_score):
                best_schedule = candidate
                best_score = candidate_score
    if best_schedule is None or best_score is None:
        raise InfeasibleOrderError(order.order_id, order.product.product_id)
    return best_schedule, best_score


def insert_best(
    instance: ShopInstance,
    schedule: Schedule,
    score: Score,
    order: Order,
    policy: SwitchoverPolicy = DEFAULT_POLICY,
) -> Snapshot:
    """Commit ``order`` at its best slot; the snapshot carries a full re-score."""
    schedule, _ = best_insertion(instance, schedule, score, order, policy)
    return Snapshot(
        schedule=schedule,
        score=score_schedule(schedule, policy=policy),
        stage=CONSTRUCTION,
    )


def construct(
    instance: ShopInstance,
    policy: SwitchoverPolicy = DEFAULT_POLICY,
    strict: bool = False,
) -> ConstructionResult:
    """Build a first schedule containing every feasible order.

    Args:
        instance: Machines and orders to plan.
        policy: Switchover durations and neutral color.
        strict: Raise on the first infeasible order instead of reporting it.

    Returns:
        ConstructionResult with the final schedule and score, one snapshot
        per inserted order and the list of infeasible orders (each one left
        unassigned).

    Raises:
        InfeasibleOrderError: Only when ``strict`` is True.
    """
    schedule = Schedule.empty(instance.machines)
    score = score_schedule(schedule, policy=policy)
    result = ConstructionResult(schedule=schedule, score=score)
    for order in construction_order(instance):
        try:
            snapshot = insert_best(instance, schedule, score, order, policy)
        except InfeasibleOrderError as exc:
            if strict:
                raise
            logger.warning("%s", exc)
            result.infeasible.append(exc)
            continue
        schedule, score = snapshot.schedule, snapshot.score
        result.snapshots.append(snapshot)
        logger.debug(
            "inserted %s step=%d tardiness=%d makespan=%d costly=%d",
            order.order_id,
            len(result.snapshots),
            score.total_tardiness,
            score.makespan,
            score.costly_switchovers,
        )
    result.schedule = schedule
    result.score = score
    logger.info(
        "Construction done: orders=%d infeasible=%d tardiness=%d makespan=%d costly=%d",
        schedule.order_count(),
        len(result.infeasible),
        score.total_tardiness,
        score.makespan,
        score.costly_switchovers,
    )
    return result
