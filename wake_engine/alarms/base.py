"""Abstract bases for the collaborators the orchestrator drives."""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from wake_engine.alarms.types import AlarmConfig, RecallItem, WakeRecord


@dataclass(frozen=True)
class PuzzleResult:
    errors: int
    time_ms: int


@dataclass(frozen=True)
class RecallResult:
    correct: bool


@dataclass(frozen=True)
class HeartRateReading:
    bpm: int | None
    confidence: float
    samples: int = 0
    quality: str = ""
    finger_present: bool = True


class Storage(ABC):
    @abstractmethod
    def load_alarm(self, alarm_id: str) -> AlarmConfig | None:
        """Return the alarm configuration, or None if it does not exist."""

    @abstractmethod
    def load_recall_items(self) -> list[RecallItem]:
        """Return all stored recall items."""

    @abstractmethod
    def append_wake_record(self, record: WakeRecord) -> None:
        """Persist a completed wake record."""


class Scheduler(ABC):
    @abstractmethod
    def schedule_snooze_reminder(
        self, alarm_id: str, duration_minutes: int, sound_ref: str, label: str
    ) -> None:
        """Ring again after duration_minutes."""

    @abstractmethod
    def cancel_active_notification(self, alarm_id: str) -> None:
        """Silence the ringing notification and any pending snooze."""

    @abstractmethod
    def rearm_alarm(self, alarm: AlarmConfig) -> None:
        """Arm the alarm for its next scheduled occurrence."""


class PuzzleSubsystem(ABC):
    @abstractmethod
    async def present(self, level: int) -> PuzzleResult:
        """Run a puzzle at the given difficulty until the user solves it."""


class RecallSubsystem(ABC):
    @abstractmethod
    async def present(self, items: list[RecallItem]) -> RecallResult:
        """Quiz the user on one of the items until they finish."""


class HeartRateSubsystem(ABC):
    @abstractmethod
    async def measure(self) -> HeartRateReading:
        """Take one heart-rate measurement. Never fails for lack of signal."""
