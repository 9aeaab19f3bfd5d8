"""JSON results payload for one planning run."""
from __future__ import annotations

import json
import logging
import os
from datetime import datetime
from typing import Any, Dict, Optional

from .models import OrderEntry
from .planner import PlannerState
from .timeline import expand

logger = logging.getLogger("lineplan.report")


def build_results_payload(state: PlannerState, instance_label: str, timestamp: str) -> Dict[str, Any]:
    pre_index = state.pre_optimization_index
    construction_score = state.history[pre_index].score.summary() if pre_index >= 0 else None
    timeline = expand(state.schedule, state.policy) if state.schedule is not None else {}
    completion = {
        machine_id: {
            entry.order.order_id: entry.end
            for entry in entries
            if isinstance(entry, OrderEntry)
        }
        for machine_id, entries in timeline.items()
    }
    return {
        "instance": instance_label,
        "timestamp": timestamp,
        "phase": state.phase.value,
        "orders": len(state.instance.orders),
        "machines": len(state.instance.machines),
        "infeasible_orders": [exc.order_id for exc in state.infeasible],
        "snapshots": len(state.history),
        "pre_optimization_index": pre_index,
        "optimization_steps": state.optimization_steps,
        "construction_score": construction_score,
        "final_score": state.score.summary() if state.score is not None else None,
        "schedule": state.schedule.as_ids() if state.schedule is not None else {},
        "completion_times": completion,
        "score_history": [s.score.summary() for s in state.history],
    }


def write_results_json(
    state: PlannerState,
    out_dir: str,
    instance_label: str,
    timestamp: Optional[str] = None,
) -> str:
    stamp = timestamp or datetime.now().strftime("%Y%m%d_%H%M%S")
    os.makedirs(out_dir, exist_ok=True)
    path = os.path.join(out_dir, f"results_{stamp}.json")
    payload = build_results_payload(state, instance_label, stamp)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, ensure_ascii=False, indent=2)
    logger.info("Saved results JSON to %s", path)
    return path
