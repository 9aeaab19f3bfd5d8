"""Parallel-machine production planning: greedy construction plus local search.

Exports the domain model and the engine entry points.
"""

from lineplan.comparator import improves  # noqa: F401
from lineplan.construction import ConstructionResult, construct  # noqa: F401
from lineplan.errors import (  # noqa: F401
    InfeasibleOrderError,
    InvalidPositionError,
    ScheduleIntegrityError,
)
from lineplan.evaluation import score_schedule  # noqa: F401
from lineplan.history import History, HistoryCursor, Snapshot  # noqa: F401
from lineplan.models import (  # noqa: F401
    Color,
    Machine,
    Order,
    Product,
    Schedule,
    Score,
    ShopInstance,
)
from lineplan.operations import insert_order, remove_order  # noqa: F401
from lineplan.search import optimize_step  # noqa: F401
from lineplan.timeline import expand  # noqa: F401

__all__ = [
    "Color",
    "ConstructionResult",
    "History",
    "HistoryCursor",
    "InfeasibleOrderError",
    "InvalidPositionError",
    "Machine",
    "Order",
    "Product",
    "Schedule",
    "ScheduleIntegrityError",
    "Score",
    "ShopInstance",
    "Snapshot",
    "construct",
    "expand",
    "improves",
    "insert_order",
    "optimize_step",
    "remove_order",
    "score_schedule",
]
