"""Puzzle difficulty for the snooze and dismiss gates.

Dismissing is never easier than snoozing at the same snooze count, and both
paths get harder the more the user snoozes.
"""

from wake_engine.alarms.types import AlarmConfig, PuzzleMode

MIN_LEVEL = 1
MAX_LEVEL = 4
AUTO_DISMISS_BASE = 2


def _clamp(level: int) -> int:
    return max(MIN_LEVEL, min(MAX_LEVEL, level))


def snooze_difficulty(snooze_count: int) -> int:
    if snooze_count <= 1:
        return MIN_LEVEL
    return _clamp(snooze_count)


def dismiss_difficulty(alarm: AlarmConfig, snooze_count: int) -> int:
    if alarm.puzzle_mode == PuzzleMode.AUTO:
        base = AUTO_DISMISS_BASE
    else:
        base = _clamp(alarm.puzzle_difficulty)
    return _clamp(base + max(0, snooze_count) // 2)
