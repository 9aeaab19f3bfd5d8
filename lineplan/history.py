"""Append-only record of committed (schedule, score) pairs and a caller-owned cursor."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Iterator, overload

from .models import Schedule, Score

CONSTRUCTION = "construction"
OPTIMIZATION = "optimization"


@dataclass(frozen=True)
class Snapshot:
    schedule: Schedule
    score: Score
    stage: str = CONSTRUCTION


class History(Sequence):
    """Ordered, indexable ledger; entries can be appended but never changed."""

    def __init__(self, snapshots: list[Snapshot] | None = None) -> None:
        self._snapshots: list[Snapshot] = list(snapshots or [])

    def append(self, schedule: Schedule, score: Score, stage: str = CONSTRUCTION) -> Snapshot:
        snapshot = Snapshot(schedule=schedule, score=score, stage=stage)
        self._snapshots.append(snapshot)
        return snapshot

    def extend(self, snapshots: Sequence[Snapshot]) -> None:
        self._snapshots.extend(snapshots)

    @overload
    def __getitem__(self, index: int) -> Snapshot: ...

    @overload
    def __getitem__(self, index: slice) -> list[Snapshot]: ...

    def __getitem__(self, index):
        return self._snapshots[index]

    def __len__(self) -> int:
        return len(self._snapshots)

    def __iter__(self) -> Iterator[Snapshot]:
        return iter(self._snapshots)

    @property
    def last_construction_index(self) -> int:
        """Index of the last construction snapshot, -1 if there is none."""
        index = -1
        for k, snapshot in enumerate(self._snapshots):
            if snapshot.stage == CONSTRUCTION:
                index = k
        return index

    def scores(self) -> list[Score]:
        return [s.score for s in self._snapshots]


@dataclass
class HistoryCursor:
    """Navigation position into a :class:`History`, owned by the driver.

    Moves never leave ``[0, len(history) - 1]``; on an empty history the
    index stays at -1.
    """

    history: History
    index: int = -1

    @property
    def current(self) -> Snapshot | None:
        if 0 <= self.index < len(self.history):
            return self.history[self.index]
        return None

    @property
    def can_go_back(self) -> bool:
        return self.index > 0

    @property
    def can_go_forward(self) -> bool:
        return self.index < len(self.history) - 1

    @property
    def optimization_iteration(self) -> int:
        """Number of optimization steps up to the cursor, 0 during construction."""
        return max(0, self.index - self.history.last_construction_index)

    def first(self) -> Snapshot | None:
        if len(self.history):
            self.index = 0
        return self.current

    def previous(self) -> Snapshot | None:
        if self.can_go_back:
            self.index -= 1
        return self.current

    def pre_optimization(self) -> Snapshot | None:
        """Jump to the last snapshot produced by construction."""
        marker = self.history.last_construction_index
        if marker >= 0:
            self.index = marker
        return self.current

    def next(self) -> Snapshot | None:
        if self.can_go_forward:
            self.index += 1
        return self.current

    def last(self) -> Snapshot | None:
        self.index = len(self.history) - 1
        return self.current
