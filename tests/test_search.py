from lineplan.comparator import improves
from lineplan.construction import construct
from lineplan.evaluation import score_schedule
from lineplan.generator import generate_instance
from lineplan.history import History
from lineplan.models import Schedule, ShopInstance
from lineplan.operations import validate_schedule
from lineplan.search import RELOCATE, SWAP, local_search, optimize_step, relevant_orders
from tests.helpers import DARK, MILK, WHITE, build, machine, order


def test_relevance_filter_rules():
    inst = ShopInstance(
        machines=(machine("A", dark=1, white=1, milk=1), machine("B", dark=1, white=1, milk=1)),
        orders=(
            order("a1", DARK, quantity=50, due=1000),
            order("b1", MILK, due=100),
            order("b2", DARK, due=0),
            order("b3", WHITE, due=100),
            order("b4", MILK, due=100),
            order("b5", MILK, due=100),
        ),
    )
    sched = build(inst, {"A": ["a1"], "B": ["b1", "b2", "b3", "b4", "b5"]})
    score = score_schedule(sched)
    assert score.makespan == 50
    # a1: makespan machine; b2: overdue, b1 precedes it; b2/b3 surround a costly switchover
    assert relevant_orders(sched, score) == {"a1", "b1", "b2", "b3"}


def test_relevance_ignores_empty_machines_and_on_time_orders():
    inst = ShopInstance(
        machines=(machine("A", dark=1), machine("B", dark=1), machine("C", dark=1)),
        orders=(order("a1", DARK, quantity=5, due=100), order("b1", DARK, quantity=1, due=100)),
    )
    sched = build(inst, {"A": ["a1"], "B": ["b1"]})
    assert relevant_orders(sched, score_schedule(sched)) == {"a1"}


def test_relocation_to_idle_machine():
    inst = ShopInstance(
        machines=(machine("A", dark=1), machine("B", dark=1)),
        orders=(order("o1", DARK, quantity=10, due=100), order("o2", DARK, quantity=10, due=100)),
    )
    sched = build(inst, {"A": ["o1", "o2"]})
    score = score_schedule(sched)
    assert score.makespan == 25
    step = optimize_step(inst, sched, score)
    assert step is not None
    assert step.move.kind == RELOCATE
    assert (step.move.order_id, step.move.target_machine_id, step.move.target_position) == (
        "o1",
        "B",
        0,
    )
    assert step.schedule.as_ids() == {"A": ["o2"], "B": ["o1"]}
    assert step.score.makespan == 10
    assert step.score.machines_at_makespan == 2
    # balanced: nothing improves any more
    assert optimize_step(inst, step.schedule, step.score) is None


def test_swap_exchanges_orders_between_machines():
    inst = ShopInstance(
        machines=(machine("A", dark=1, white=10), machine("B", dark=10, white=1)),
        orders=(order("w", WHITE, quantity=5, due=100), order("d", DARK, quantity=5, due=100)),
    )
    sched = build(inst, {"A": ["w"], "B": ["d"]})
    score = score_schedule(sched)
    assert score.makespan == 50
    step = optimize_step(inst, sched, score)
    assert step is not None
    assert step.move.kind == SWAP
    assert step.move.order_id == "w"
    assert step.move.other_order_id == "d"
    assert step.schedule.as_ids() == {"A": ["d"], "B": ["w"]}
    assert step.score.makespan == 5


def test_step_score_is_full_recomputation():
    inst = ShopInstance(
        machines=(machine("A", dark=1, white=1), machine("B", dark=1, white=1)),
        orders=(
            order("o1", DARK, quantity=4, due=100),
            order("o2", WHITE, quantity=3, due=2),
            order("o3", DARK, quantity=2, due=100),
        ),
    )
    sched = build(inst, {"A": ["o1", "o2", "o3"]})
    score = score_schedule(sched)
    step = optimize_step(inst, sched, score)
    assert step is not None
    assert step.score == score_schedule(step.schedule)
    assert improves(score, step.score)


def test_empty_schedule_is_local_optimum():
    inst = ShopInstance(machines=(machine("A", dark=1),), orders=())
    sched = Schedule.empty(inst.machines)
    assert optimize_step(inst, sched, score_schedule(sched)) is None


def test_local_search_is_monotone_and_terminates():
    inst = generate_instance(seed=1, plain_orders=10, allergen_orders=4, machines_a=2, machines_b=2)
    result = construct(inst)
    history = History(result.snapshots)
    schedule, score, steps, reached = local_search(
        inst, result.schedule, result.score, history=history
    )
    assert reached
    assert len(history) == len(result.snapshots) + steps
    scores = [result.score] + [s.score for s in history[len(result.snapshots):]]
    for before, after in zip(scores, scores[1:]):
        assert improves(before, after)
    assert all(s.stage == "optimization" for s in history[len(result.snapshots):])
    validate_schedule(inst, schedule)
    assert optimize_step(inst, schedule, score) is None


def test_local_search_respects_max_steps():
    inst = ShopInstance(
        machines=(machine("A", dark=1), machine("B", dark=1)),
        orders=(order("o1", DARK, quantity=10, due=100), order("o2", DARK, quantity=10, due=100)),
    )
    sched = build(inst, {"A": ["o1", "o2"]})
    seen = []
    schedule, score, steps, reached = local_search(
        inst, sched, score_schedule(sched), max_steps=1, on_step=lambda k, r: seen.append(k)
    )
    assert (steps, reached, seen) == (1, False, [1])
    schedule, score, steps, reached = local_search(inst, schedule, score)
    assert (steps, reached) == (0, True)


def test_search_is_deterministic():
    inst = generate_instance(seed=4, plain_orders=9, allergen_orders=3, machines_a=2, machines_b=1)
    runs = []
    for _ in range(2):
        result = construct(inst)
        schedule, score, steps, _ = local_search(inst, result.schedule, result.score)
        runs.append((schedule.as_ids(), score.summary(), steps))
    assert runs[0] == runs[1]


def test_relocation_beats_equally_good_swap():
    inst = ShopInstance(
        machines=(machine("A", dark=1), machine("B", dark=1)),
        orders=(
            order("p", DARK, quantity=1, due=100),
            order("q", DARK, quantity=5, due=100),
            order("r", DARK, quantity=5, due=100),
        ),
    )
    sched = build(inst, {"A": ["p"], "B": ["q", "r"]})
    score = score_schedule(sched)
    assert score.makespan == 15
    step = optimize_step(inst, sched, score)
    # moving q in front of p and swapping q with p both reach makespan 11
    assert step is not None
    assert step.score.makespan == 11
    assert (step.move.kind, step.move.order_id, step.move.other_order_id) == (RELOCATE, "q", None)
    assert (step.move.target_machine_id, step.move.target_position) == ("A", 0)
    assert step.schedule.as_ids() == {"A": ["q", "p"], "B": ["r"]}


def test_equal_swaps_keep_first_partner_in_machine_order():
    inst = ShopInstance(
        machines=(
            machine("A", dark=1, white=10),
            machine("B", dark=10, white=1),
            machine("C", dark=10, white=1),
        ),
        orders=(
            order("w", WHITE, quantity=5, due=100),
            order("d1", DARK, quantity=5, due=100),
            order("d2", DARK, quantity=5, due=100),
        ),
    )
    sched = build(inst, {"A": ["w"], "B": ["d1"], "C": ["d2"]})
    score = score_schedule(sched)
    assert (score.makespan, score.machines_at_makespan) == (50, 3)
    step = optimize_step(inst, sched, score)
    # swapping w with d1 or with d2 both leave one machine at makespan 50
    assert step is not None
    assert (step.move.kind, step.move.order_id, step.move.other_order_id) == (SWAP, "w", "d1")
    assert step.schedule.as_ids() == {"A": ["d1"], "B": ["w"], "C": ["d2"]}
    assert (step.score.makespan, step.score.machines_at_makespan) == (50, 1)
