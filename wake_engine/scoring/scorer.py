"""Wakefulness score: puzzle, snooze, consistency and recall components."""

import math
from dataclasses import dataclass

PUZZLE_MAX = 50
SNOOZE_MAX = 30
CONSISTENCY_MAX = 20
RECALL_MAX = 10
TOTAL_MAX = 100

_FREE_PUZZLE_SECONDS = 20
_MAX_TIME_PENALTY = 25
_ERROR_PENALTY = 10

# snooze count -> points; 3 or more scores nothing
_SNOOZE_POINTS = {0: 30, 1: 20, 2: 10}


@dataclass(frozen=True)
class ScoreBreakdown:
    puzzle: int
    snooze: int
    consistency: int
    recall: int
    total: int


def puzzle_score(time_ms: float, errors: int) -> int:
    """50 points, minus 5 per full 10 s beyond 20 s (max 25), minus 10 per error."""
    points = PUZZLE_MAX
    seconds = time_ms / 1000
    if seconds > _FREE_PUZZLE_SECONDS:
        penalty = math.floor((seconds - _FREE_PUZZLE_SECONDS) / 10) * 5
        points -= min(penalty, _MAX_TIME_PENALTY)
    points -= _ERROR_PENALTY * errors
    return max(0, min(PUZZLE_MAX, points))


def snooze_score(snooze_count: int) -> int:
    if snooze_count <= 0:
        return SNOOZE_MAX
    return _SNOOZE_POINTS.get(snooze_count, 0)


def consistency_score(wake_time_delta_minutes: float) -> int:
    delta = abs(wake_time_delta_minutes)
    if delta <= 10:
        return CONSISTENCY_MAX
    if delta <= 20:
        return 10
    return 0


def recall_score(correct: bool | None) -> int:
    if correct is None:
        return 0
    return RECALL_MAX if correct else 0


def score(
    puzzle_time_ms: float,
    puzzle_errors: int,
    snooze_count: int,
    wake_time_delta_minutes: float,
    recall_correct: bool | None = None,
) -> ScoreBreakdown:
    """Score one wake encounter.

    Deterministic for identical inputs. The components can add up to 110
    when recall is answered correctly with no penalties; the total is
    capped at 100.
    """
    puzzle = puzzle_score(puzzle_time_ms, puzzle_errors)
    snooze = snooze_score(snooze_count)
    consistency = consistency_score(wake_time_delta_minutes)
    recall = recall_score(recall_correct)
    return ScoreBreakdown(
        puzzle=puzzle,
        snooze=snooze,
        consistency=consistency,
        recall=recall,
        total=min(TOTAL_MAX, puzzle + snooze + consistency + recall),
    )
