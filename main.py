#!/usr/bin/env python3
"""Command line entry point: plan one instance as described by a config file."""

import argparse
import logging
import os
from datetime import datetime

from lineplan.config import PlannerConfig, load_config
from lineplan.errors import InfeasibleOrderError
from lineplan.generator import generate_instance
from lineplan.history import HistoryCursor
from lineplan.models import ShopInstance
from lineplan.operations import validate_schedule
from lineplan.parser import load_instance
from lineplan.planner import Phase, run_to_local_optimum, start
from lineplan.report import write_results_json
from lineplan.visualization import next_unique_path, plot_gantt, plot_score_progress

logger = logging.getLogger("lineplan")


def build_instance(config: PlannerConfig) -> tuple[ShopInstance, str]:
    """Load the configured instance file or generate a sample plant."""
    if config.instance_file:
        instance = load_instance(config.instance_file)
        label = os.path.basename(config.instance_file)
    else:
        gen = config.generator
        instance = generate_instance(
            seed=gen.seed,
            plain_orders=gen.plain_orders,
            allergen_orders=gen.allergen_orders,
            machines_a=gen.machines_a,
            machines_b=gen.machines_b,
        )
        label = (
            f"generated_seed{gen.seed}_a{gen.machines_a}_b{gen.machines_b}"
            f"_o{gen.plain_orders + gen.allergen_orders}"
        )
    logger.info(
        "Instance: %s machines=%d orders=%d", label, len(instance.machines), len(instance.orders)
    )
    return instance, label


def run(config: PlannerConfig) -> int:
    instance, label = build_instance(config)
    state = start(instance, config.policy)
    if config.strict:
        # surface infeasible orders before any work is done
        for order in instance.orders:
            if not instance.eligible_machines(order.product):
                raise InfeasibleOrderError(order.order_id, order.product.product_id)
    state = run_to_local_optimum(
        state, max_steps=config.max_steps, time_limit_ms=config.time_limit_ms
    )
    validate_schedule(instance, state.schedule, require_complete=not state.infeasible)

    cursor = HistoryCursor(state.history)
    constructed = cursor.pre_optimization()
    if constructed is not None:
        logger.info(
            "After construction: tardiness=%d makespan=%d costly=%d at_makespan=%d",
            constructed.score.total_tardiness,
            constructed.score.makespan,
            constructed.score.costly_switchovers,
            constructed.score.machines_at_makespan,
        )
    final = cursor.last()
    if final is not None:
        logger.info(
            "Final (%s, %d optimization steps): tardiness=%d makespan=%d costly=%d at_makespan=%d",
            "local optimum" if state.phase is Phase.LOCAL_OPTIMUM else "stopped early",
            cursor.optimization_iteration,
            final.score.total_tardiness,
            final.score.makespan,
            final.score.costly_switchovers,
            final.score.machines_at_makespan,
        )

    out_dir = config.output.dir
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    if config.output.results_json:
        try:
            write_results_json(state, out_dir, label, timestamp=stamp)
        except Exception as e:
            logger.warning("Failed to write results JSON: %s", e)
    if config.output.gantt:
        try:
            for name, snapshot in (("construction", constructed), ("final", final)):
                if snapshot is None:
                    continue
                path = next_unique_path(os.path.join(out_dir, f"gantt_{name}_{stamp}.png"))
                plot_gantt(snapshot.schedule, path, policy=config.policy, score=snapshot.score)
                logger.info("Saved Gantt chart to %s", path)
        except Exception as e:
            logger.warning("Failed to create Gantt charts: %s", e)
    if config.output.progress_plot and len(state.history):
        try:
            path = next_unique_path(os.path.join(out_dir, f"score_progress_{stamp}.png"))
            plot_score_progress(
                state.history.scores(), path, pre_optimization_index=state.pre_optimization_index
            )
            logger.info("Saved score progress plot to %s", path)
        except Exception as e:
            logger.warning("Failed to create score progress plot: %s", e)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Parallel machine production planner")
    parser.add_argument(
        "--config",
        default="config.yaml",
        help="Path to the YAML/JSON configuration file",
    )
    args = parser.parse_args(argv)
    config = load_config(args.config)
    logging.basicConfig(
        level=getattr(logging, str(config.log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return run(config)


if __name__ == "__main__":
    raise SystemExit(main())
