import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from .comparator import improves
from .evaluation import score_schedule
from .history import OPTIMIZATION, History
from .models import Order, OrderEntry, Schedule, Score, ShopInstance, SwitchoverEntry
from .operations import insert_order, remove_order, swap_orders
from .switchover import DEFAULT_POLICY, SwitchoverPolicy
from .timeline import end_time, expand

logger = logging.getLogger("lineplan.search")

RELOCATE = "relocate"
SWAP = "swap"


@dataclass(frozen=True)
class Move:
    """Description of a committed neighbourhood move.

    Fields:
        kind: ``"relocate"`` or ``"swap"``.
        order_id: Order that was picked as relevant (A).
        machine_id / position: Slot A occupied before the move.
        target_machine_id / target_position: Slot A occupies afterwards.
        other_order_id: Order exchanged with A (swap only).
    """

    kind: str
    order_id: str
    machine_id: str
    position: int
    target_machine_id: str
    target_position: int
    other_order_id: Optional[str] = None


@dataclass(frozen=True)
class StepResult:
    schedule: Schedule
    score: Score
    move: Move


def relevant_orders(
    schedule: Schedule,
    score: Score,
    policy: SwitchoverPolicy = DEFAULT_POLICY,
) -> set[str]:
    """Select order ids worth moving in the next sweep.

    Rules, applied per machine on the detailed timeline:
        - machine finishing at the makespan: all its orders;
        - otherwise, scanning backward from the last entry: the first overdue
          order and every order before it;
        - the orders directly before and after each costly switchover.
    """
    relevant: set[str] = set()
    for machine_id, entries in expand(schedule, policy).items():
        if not entries:
            continue
        if end_time(entries) == score.makespan:
            relevant.update(
                e.order.order_id for e in entries if isinstance(e, OrderEntry)
            )
            continue
        before_overdue = False
        for k in range(len(entries) - 1, -1, -1):
            entry = entries[k]
            if isinstance(entry, OrderEntry):
                if before_overdue:
                    relevant.add(entry.order.order_id)
                elif entry.end > entry.order.due:
                    relevant.add(entry.order.order_id)
                    before_overdue = True
            elif isinstance(entry, SwitchoverEntry) and entry.costly:
                # switchovers always sit between two order entries
                relevant.add(entries[k - 1].order.order_id)
                relevant.add(entries[k + 1].order.order_id)
    return relevant


class _BestCandidate:
    """Incumbent of one sweep; only strict improvements replace it."""

    def __init__(self, schedule: Schedule, score: Score) -> None:
        self.schedule = schedule
        self.score = score
        self.move: Optional[Move] = None
        self.evals = 0

    def offer(self, schedule: Schedule, score: Score, move: Move) -> None:
        self.evals += 1
        if improves(self.score, score):
            self.schedule = schedule
            self.score = score
            self.move = move


def _relocations(
    instance: ShopInstance,
    schedule: Schedule,
    score: Score,
    order: Order,
    machine_id: str,
    position: int,
    best: _BestCandidate,
    policy: SwitchoverPolicy,
) -> None:
    without = remove_order(schedule, machine_id, position)
    score_without = score_schedule(
        without, previous=score, changed_machines=(machine_id,), policy=policy
    )
    for machine in instance.eligible_machines(order.product):
        for target in range(len(without.queue(machine)) + 1):
            if machine.machine_id == machine_id and target == position:
                continue
            candidate = insert_order(without, order, machine, target)
            candidate_score = score_schedule(
                candidate, previous=score_without, changed_machines=(machine,), policy=policy
            )
            best.offer(
                candidate,
                candidate_score,
                Move(RELOCATE, order.order_id, machine_id, position, machine.machine_id, target),
            )


def _swaps(
    schedule: Schedule,
    score: Score,
    order: Order,
    machine_id: str,
    position: int,
    best: _BestCandidate,
    policy: SwitchoverPolicy,
) -> None:
    machine_a = schedule.machines[schedule.slot(machine_id)]
    for machine_b, queue_b in schedule.items():
        if not machine_b.can_process(order.product):
            continue
        for index_b, other in enumerate(queue_b):
            if other == order or not machine_a.can_process(other.product):
                continue
            candidate = swap_orders(schedule, machine_a, position, machine_b, index_b)
            candidate_score = score_schedule(
                candidate,
                previous=score,
                changed_machines=(machine_a, machine_b),
                policy=policy,
            )
            best.offer(
                candidate,
                candidate_score,
                Move(
                    SWAP,
                    order.order_id,
                    machine_id,
                    position,
                    machine_b.machine_id,
                    index_b,
                    other_order_id=other.order_id,
                ),
            )


def optimize_step(
    instance: ShopInstance,
    schedule: Schedule,
    score: Score,
    policy: SwitchoverPolicy = DEFAULT_POLICY,
) -> Optional[StepResult]:
    """Run one full relocate/swap sweep over the relevant orders.

    Every relevant order is tried at every other slot of every eligible
    machine and swapped with every compatible order. The single best
    candidate of the whole sweep is returned if it improves ``score``.

    Args:
        instance: Problem instance (eligibility lookup).
        schedule: Current schedule.
        score: Score of ``schedule``.
        policy: Switchover durations and neutral color.

    Returns:
        StepResult with the new schedule, its fully recomputed score and the
        move applied, or None when ``schedule`` is a local optimum.
    """
    relevant = relevant_orders(schedule, score, policy)
    best = _BestCandidate(schedule, score)
    for machine, queue in schedule.items():
        for position, order in enumerate(queue):
            if order.order_id not in relevant:
                continue
            _relocations(
                instance, schedule, score, order, machine.machine_id, position, best, policy
            )
            _swaps(schedule, score, order, machine.machine_id, position, best, policy)
    logger.debug(
        "[search] sweep relevant=%d evals=%d improved=%s",
        len(relevant),
        best.evals,
        best.move is not None,
    )
    if best.move is None:
        return None
    return StepResult(
        schedule=best.schedule,
        score=score_schedule(best.schedule, policy=policy),
        move=best.move,
    )


def local_search(
    instance: ShopInstance,
    schedule: Schedule,
    score: Score,
    policy: SwitchoverPolicy = DEFAULT_POLICY,
    max_steps: Optional[int] = None,
    time_limit_ms: Optional[int] = None,
    history: Optional[History] = None,
    on_step: Optional[Callable[[int, StepResult], None]] = None,
) -> tuple[Schedule, Score, int, bool]:
    """Repeat :func:`optimize_step` until a local optimum (or a caller limit).

    Args:
        max_steps: Optional cap on committed steps.
        time_limit_ms: Optional wall-clock limit checked before each sweep.
        history: When given, every committed step is appended to it.
        on_step: Callback ``(step_number, result)`` after each commit.

    Returns:
        ``(schedule, score, steps, reached_local_optimum)``.
    """
    t0 = time.perf_counter()
    limit_s = (time_limit_ms / 1000.0) if time_limit_ms is not None else None
    steps = 0
    while True:
        if max_steps is not None and steps >= max_steps:
            logger.info("[search] stop max_steps=%d reached", max_steps)
            return schedule, score, steps, False
        if limit_s is not None and (time.perf_counter() - t0) >= limit_s:
            logger.info("[search] stop time_limit reached at step %d", steps)
            return schedule, score, steps, False
        result = optimize_step(instance, schedule, score, policy)
        if result is None:
            logger.info(
                "[search] local optimum after %d steps tardiness=%d makespan=%d costly=%d",
                steps,
                score.total_tardiness,
                score.makespan,
                score.costly_switchovers,
            )
            return schedule, score, steps, True
        steps += 1
        schedule, score = result.schedule, result.score
        if history is not None:
            history.append(schedule, score, stage=OPTIMIZATION)
        logger.info(
            "[search] step %d %s %s tardiness=%d makespan=%d costly=%d at_makespan=%d",
            steps,
            result.move.kind,
            result.move.order_id,
            score.total_tardiness,
            score.makespan,
            score.costly_switchovers,
            score.machines_at_makespan,
        )
        if on_step is not None:
            on_step(steps, result)
