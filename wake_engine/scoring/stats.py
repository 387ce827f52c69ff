"""Score history statistics: grade, average and weekly trend."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from wake_engine.alarms.types import WakeRecord


class Trend(Enum):
    UP = "up"
    DOWN = "down"
    STABLE = "stable"


@dataclass(frozen=True)
class Grade:
    letter: str
    message: str


_GRADES = [
    (90, Grade("A+", "Excellent morning!")),
    (80, Grade("A", "Great start!")),
    (70, Grade("B", "Good effort!")),
    (60, Grade("C", "Room to improve")),
    (50, Grade("D", "Try harder tomorrow")),
]
_FAILING = Grade("F", "Sleep quality matters!")

_TREND_THRESHOLD = 5


def grade(total: int) -> Grade:
    for floor, g in _GRADES:
        if total >= floor:
            return g
    return _FAILING


def average_score(records: list[WakeRecord]) -> int:
    """Rounded mean of the total scores, 0 for no records."""
    if not records:
        return 0
    return int(sum(r.score.total for r in records) / len(records) + 0.5)


def weekly_trend(records: list[WakeRecord]) -> Trend:
    """Compare the later half of the history against the earlier half."""
    if len(records) < 3:
        return Trend.STABLE

    ordered = sorted(records, key=lambda r: datetime.fromisoformat(r.completed_at))
    half = len(ordered) // 2
    diff = average_score(ordered[half:]) - average_score(ordered[:half])

    if diff > _TREND_THRESHOLD:
        return Trend.UP
    if diff < -_TREND_THRESHOLD:
        return Trend.DOWN
    return Trend.STABLE
