"""Priority roll-up and current-record selection.

Priority is never persisted. It is recomputed from the current snapshot wherever it
is shown, so the ingestion and presentation paths cannot drift apart.
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum
from typing import Protocol

from watch_core.models import GameExpectation, GameStateSnapshot
from watch_core.time import ensure_utc

HIGH_TENSION = 70
LOW_TENSION = 30


class Priority(str, Enum):
    """Coarse watchability label used for sorting and display."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class SnapshotSignals(Protocol):
    """The four snapshot fields the roll-up reads."""

    tension_score: int
    momentum_shifts: int
    lead_changes: int
    close_finish: bool


def derive_priority(snapshot: SnapshotSignals | None) -> Priority:
    """
    Roll a snapshot up into a priority label.

    Depends only on tension_score, momentum_shifts, lead_changes and close_finish.
    A game with no snapshot yet is medium.

    Example:
        >>> derive_priority(None)
        <Priority.MEDIUM: 'medium'>
    """
    if snapshot is None:
        return Priority.MEDIUM

    tension = snapshot.tension_score
    momentum = snapshot.momentum_shifts
    lead_changes = snapshot.lead_changes

    if tension >= HIGH_TENSION or snapshot.close_finish or (momentum >= 3 and lead_changes >= 2):
        return Priority.HIGH

    if tension <= LOW_TENSION and momentum <= 1 and lead_changes <= 1:
        return Priority.LOW

    return Priority.MEDIUM


def select_current_snapshot(
    snapshots: Iterable[GameStateSnapshot],
) -> GameStateSnapshot | None:
    """
    Pick the snapshot that represents a game's current state.

    The final snapshot wins over recency (the earliest-captured one if several were
    written); otherwise the most recently captured snapshot. Empty input gives None.
    """
    snapshots = list(snapshots)
    if not snapshots:
        return None

    finals = [snapshot for snapshot in snapshots if snapshot.is_final]
    if finals:
        return min(finals, key=lambda snapshot: ensure_utc(snapshot.captured_at))

    return max(snapshots, key=lambda snapshot: ensure_utc(snapshot.captured_at))


def select_latest_expectation(
    expectations: Iterable[GameExpectation],
) -> GameExpectation | None:
    """Most recently captured odds quote, or None."""
    return max(
        expectations,
        key=lambda expectation: ensure_utc(expectation.captured_at),
        default=None,
    )
