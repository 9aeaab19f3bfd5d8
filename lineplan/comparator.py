"""Lexicographic comparison of schedule scores.

Priority: total tardiness, then makespan, then costly switchovers, then the
number of machines finishing at the makespan. Lower is better on every tier.
"""

from __future__ import annotations

from .models import Score


def score_key(score: Score) -> tuple[int, int, int, int]:
    return (
        score.total_tardiness,
        score.makespan,
        score.costly_switchovers,
        score.machines_at_makespan,
    )


def improves(current: Score, candidate: Score) -> bool:
    """True if ``candidate`` is strictly better than ``current``.

    Equal scores are never an improvement, so a score never improves over
    itself and ties keep whichever candidate was seen first.
    """
    return score_key(candidate) < score_key(current)
