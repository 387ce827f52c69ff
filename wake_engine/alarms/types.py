"""Alarm, recall and wake record types."""

from dataclasses import dataclass, field
from enum import Enum

from wake_engine.scoring.scorer import ScoreBreakdown


class PuzzleMode(Enum):
    AUTO = "auto"
    MANUAL = "manual"


class ScheduleType(Enum):
    WORKDAYS = "workdays"
    WEEKENDS = "weekends"
    DAILY = "daily"
    CUSTOM = "custom"


@dataclass
class AlarmConfig:
    id: str
    time: str  # "HH:MM"
    snooze_minutes: int = 5
    puzzle_enabled: bool = True
    puzzle_mode: PuzzleMode = PuzzleMode.AUTO
    puzzle_difficulty: int = 2
    heart_rate_enabled: bool = False
    recall_enabled: bool = False
    enabled: bool = True
    schedule: ScheduleType = ScheduleType.DAILY
    custom_days: list[int] = field(default_factory=list)  # 0 = Sunday
    sound_ref: str = "default"
    label: str = ""

    @property
    def hour(self) -> int:
        return int(self.time.split(":")[0])

    @property
    def minute(self) -> int:
        return int(self.time.split(":")[1])

    @classmethod
    def from_dict(cls, data: dict) -> "AlarmConfig":
        kwargs = dict(data)
        if "puzzle_mode" in kwargs:
            kwargs["puzzle_mode"] = PuzzleMode(kwargs["puzzle_mode"])
        if "schedule" in kwargs:
            kwargs["schedule"] = ScheduleType(kwargs["schedule"])
        return cls(**kwargs)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "time": self.time,
            "snooze_minutes": self.snooze_minutes,
            "puzzle_enabled": self.puzzle_enabled,
            "puzzle_mode": self.puzzle_mode.value,
            "puzzle_difficulty": self.puzzle_difficulty,
            "heart_rate_enabled": self.heart_rate_enabled,
            "recall_enabled": self.recall_enabled,
            "enabled": self.enabled,
            "schedule": self.schedule.value,
            "custom_days": list(self.custom_days),
            "sound_ref": self.sound_ref,
            "label": self.label,
        }


@dataclass(frozen=True)
class RecallItem:
    id: str
    question: str
    answer: str
    created_at: str = ""


@dataclass(frozen=True)
class WakeRecord:
    """One completed dismissal. Written once, never updated."""

    id: str
    alarm_id: str
    completed_at: str  # ISO-8601
    score: ScoreBreakdown
    snooze_count: int
    puzzle_time_ms: int
    puzzle_errors: int
    recall_correct: bool | None
    wake_time_delta_minutes: int  # positive = late
    heart_rate_bpm: int | None = None
    heart_rate_confidence: float | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "WakeRecord":
        kwargs = dict(data)
        kwargs["score"] = ScoreBreakdown(**kwargs["score"])
        return cls(**kwargs)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "alarm_id": self.alarm_id,
            "completed_at": self.completed_at,
            "score": {
                "puzzle": self.score.puzzle,
                "snooze": self.score.snooze,
                "consistency": self.score.consistency,
                "recall": self.score.recall,
                "total": self.score.total,
            },
            "snooze_count": self.snooze_count,
            "puzzle_time_ms": self.puzzle_time_ms,
            "puzzle_errors": self.puzzle_errors,
            "recall_correct": self.recall_correct,
            "wake_time_delta_minutes": self.wake_time_delta_minutes,
            "heart_rate_bpm": self.heart_rate_bpm,
            "heart_rate_confidence": self.heart_rate_confidence,
        }
