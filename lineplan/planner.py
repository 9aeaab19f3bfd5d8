"""Step-wise planning driver with explicit, caller-owned state.

The engine never schedules its own continuation: the caller holds a
:class:`PlannerState` and calls :func:`advance` once per transition (one
inserted order during construction, one committed sweep during
optimization). Stopping early simply means not calling ``advance`` again.

State machine::

    UNINITIALIZED -> CONSTRUCTING -> CONSTRUCTED -> OPTIMIZING -> LOCAL_OPTIMUM
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

from .construction import construction_order, insert_best
from .errors import InfeasibleOrderError
from .evaluation import score_schedule
from .history import OPTIMIZATION, History
from .models import Order, Schedule, Score, ShopInstance
from .search import Move, StepResult, local_search, optimize_step
from .switchover import DEFAULT_POLICY, SwitchoverPolicy

logger = logging.getLogger("lineplan.planner")


class Phase(str, Enum):
    UNINITIALIZED = "uninitialized"
    CONSTRUCTING = "constructing"
    CONSTRUCTED = "constructed"
    OPTIMIZING = "optimizing"
    LOCAL_OPTIMUM = "local_optimum"


@dataclass
class PlannerState:
    """Everything the driver needs between two engine calls."""

    instance: ShopInstance
    policy: SwitchoverPolicy = DEFAULT_POLICY
    phase: Phase = Phase.UNINITIALIZED
    schedule: Schedule | None = None
    score: Score | None = None
    history: History = field(default_factory=History)
    pending: list[Order] = field(default_factory=list)
    infeasible: list[InfeasibleOrderError] = field(default_factory=list)
    optimization_steps: int = 0
    last_move: Move | None = None

    @property
    def finished(self) -> bool:
        return self.phase is Phase.LOCAL_OPTIMUM

    @property
    def pre_optimization_index(self) -> int:
        return self.history.last_construction_index


def start(instance: ShopInstance, policy: SwitchoverPolicy = DEFAULT_POLICY) -> PlannerState:
    return PlannerState(instance=instance, policy=policy)


def _begin_construction(state: PlannerState) -> None:
    state.schedule = Schedule.empty(state.instance.machines)
    state.score = score_schedule(state.schedule, policy=state.policy)
    for order in construction_order(state.instance):
        if state.instance.eligible_machines(order.product):
            state.pending.append(order)
        else:
            exc = InfeasibleOrderError(order.order_id, order.product.product_id)
            logger.warning("%s", exc)
            state.infeasible.append(exc)
    state.phase = Phase.CONSTRUCTING
    if not state.pending:
        state.phase = Phase.CONSTRUCTED


def _construction_step(state: PlannerState) -> None:
    order = state.pending.pop(0)
    snapshot = insert_best(state.instance, state.schedule, state.score, order, state.policy)
    state.schedule, state.score = snapshot.schedule, snapshot.score
    state.history.extend([snapshot])
    if not state.pending:
        state.phase = Phase.CONSTRUCTED
        logger.info(
            "Construction finished: snapshots=%d tardiness=%d makespan=%d costly=%d",
            len(state.history),
            state.score.total_tardiness,
            state.score.makespan,
            state.score.costly_switchovers,
        )


def _commit(state: PlannerState, result: StepResult) -> None:
    state.phase = Phase.OPTIMIZING
    state.schedule = result.schedule
    state.score = result.score
    state.last_move = result.move
    state.optimization_steps += 1
    state.history.append(result.schedule, result.score, stage=OPTIMIZATION)


def _reach_local_optimum(state: PlannerState) -> None:
    state.phase = Phase.LOCAL_OPTIMUM
    state.last_move = None
    logger.info("Local optimum reached after %d steps", state.optimization_steps)


def _optimization_step(state: PlannerState) -> None:
    result = optimize_step(state.instance, state.schedule, state.score, state.policy)
    if result is None:
        _reach_local_optimum(state)
    else:
        _commit(state, result)


def advance(state: PlannerState) -> PlannerState:
    """Perform exactly one state transition and return the (same) state."""
    if state.phase is Phase.UNINITIALIZED:
        _begin_construction(state)
    elif state.phase is Phase.CONSTRUCTING:
        _construction_step(state)
    elif state.phase in (Phase.CONSTRUCTED, Phase.OPTIMIZING):
        _optimization_step(state)
    return state


def run_to_local_optimum(
    state: PlannerState,
    max_steps: int | None = None,
    time_limit_ms: int | None = None,
) -> PlannerState:
    """Drive the planner until a local optimum or a caller-side limit.

    Construction always runs to completion through :func:`advance`; the
    optimization phase is handed to :func:`~lineplan.search.local_search`,
    which checks ``max_steps`` (counted over the whole run) and
    ``time_limit_ms`` between sweeps.
    """
    while state.phase in (Phase.UNINITIALIZED, Phase.CONSTRUCTING):
        advance(state)
    if state.finished:
        return state
    remaining = None if max_steps is None else max(0, max_steps - state.optimization_steps)
    _, _, _, reached = local_search(
        state.instance,
        state.schedule,
        state.score,
        state.policy,
        max_steps=remaining,
        time_limit_ms=time_limit_ms,
        on_step=lambda _, result: _commit(state, result),
    )
    if reached:
        _reach_local_optimum(state)
    return state
