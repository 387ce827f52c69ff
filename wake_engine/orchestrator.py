"""Dismissal orchestrator: state machine sequencing the wake gates."""

import logging
import math
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

from wake_engine.alarms.base import (
    HeartRateSubsystem,
    PuzzleSubsystem,
    RecallSubsystem,
    Scheduler,
    Storage,
)
from wake_engine.alarms.types import AlarmConfig, WakeRecord
from wake_engine.difficulty.policy import dismiss_difficulty, snooze_difficulty
from wake_engine.scoring.scorer import score

logger = logging.getLogger(__name__)


class State(Enum):
    RINGING = "ringing"
    PUZZLE_FOR_SNOOZE = "puzzle_for_snooze"
    RESCHEDULED = "rescheduled"
    PUZZLE_FOR_DISMISS = "puzzle_for_dismiss"
    HEART_RATE_CHECK = "heart_rate_check"
    RECALL_CHECK = "recall_check"
    SCORED = "scored"
    REARMED = "rearmed"


TERMINAL_STATES = frozenset({State.RESCHEDULED, State.REARMED})


@dataclass
class WakeSession:
    alarm_id: str
    snooze_count: int = 0
    stage: State = State.RINGING
    puzzle_started_at: datetime | None = None
    puzzle_time_ms: int = 0
    puzzle_errors: int = 0
    recall_correct: bool | None = None
    heart_rate_bpm: int | None = None
    heart_rate_confidence: float | None = None


def scheduled_instant(alarm: AlarmConfig, now: datetime) -> datetime:
    """The occurrence of the alarm's time of day closest to now.

    Picks between yesterday, today and tomorrow so an alarm at 23:55
    dismissed at 00:05 counts as ten minutes late, not a day early.
    """
    today = now.replace(hour=alarm.hour, minute=alarm.minute, second=0, microsecond=0)
    candidates = [today - timedelta(days=1), today, today + timedelta(days=1)]
    return min(candidates, key=lambda c: abs((now - c).total_seconds()))


class DismissalOrchestrator:
    """Drive one ringing episode from RINGING to a terminal state.

    Snooze: PUZZLE_FOR_SNOOZE -> RESCHEDULED.
    Dismiss: PUZZLE_FOR_DISMISS -> [HEART_RATE_CHECK] -> [RECALL_CHECK]
    -> SCORED -> REARMED.
    """

    def __init__(
        self,
        alarm: AlarmConfig,
        storage: Storage,
        scheduler: Scheduler,
        puzzle: PuzzleSubsystem,
        recall: RecallSubsystem | None = None,
        heart_rate: HeartRateSubsystem | None = None,
        snooze_count: int = 0,
        scheduled_at: datetime | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.alarm = alarm
        self.storage = storage
        self.scheduler = scheduler
        self.puzzle = puzzle
        self.recall = recall
        self.heart_rate = heart_rate
        self.clock = clock

        self._scheduled_at = scheduled_at
        self._in_flight = False
        self._record: WakeRecord | None = None
        self.session = WakeSession(alarm_id=alarm.id, snooze_count=snooze_count)
        logger.info("Alarm %s ringing (snoozed %d times)", alarm.id, snooze_count)

    @property
    def state(self) -> State:
        return self.session.stage

    def _enter(self, state: State) -> None:
        logger.debug("Alarm %s: %s -> %s", self.alarm.id, self.session.stage.value, state.value)
        self.session.stage = state

    def _accepts_request(self, action: str) -> bool:
        if self._in_flight:
            logger.debug("Ignoring %s for %s: gate in flight", action, self.alarm.id)
            return False
        if self.session.stage in TERMINAL_STATES:
            logger.debug("Ignoring %s for %s: episode ended", action, self.alarm.id)
            return False
        if action == "snooze" and self._record is not None:
            logger.debug("Ignoring snooze for %s: already scored", self.alarm.id)
            return False
        return True

    async def request_snooze(self) -> bool:
        """Solve the snooze puzzle, then schedule a reminder.

        Returns True once rescheduled, False if the request was ignored.
        """
        if not self._accepts_request("snooze"):
            return False
        self._in_flight = True
        try:
            if self.alarm.puzzle_enabled:
                level = snooze_difficulty(self.session.snooze_count)
                self._enter(State.PUZZLE_FOR_SNOOZE)
                await self._run_puzzle(level)

            self.session.snooze_count += 1
            self.scheduler.schedule_snooze_reminder(
                self.alarm.id,
                self.alarm.snooze_minutes,
                self.alarm.sound_ref,
                self.alarm.label,
            )
            self._enter(State.RESCHEDULED)
            logger.info(
                "Alarm %s snoozed for %d min (snooze #%d)",
                self.alarm.id, self.alarm.snooze_minutes, self.session.snooze_count,
            )
            return True
        except Exception:
            logger.exception("Snooze failed for alarm %s", self.alarm.id)
            self._enter(State.RINGING)
            raise
        finally:
            self._in_flight = False

    async def request_dismiss(self) -> WakeRecord | None:
        """Run every enabled gate, score the encounter and re-arm the alarm.

        Returns the written WakeRecord, or None if the request was ignored.
        Once the record is stored, a failed re-arm leaves the episode in
        SCORED and a retry only repeats the scheduler steps.
        """
        if not self._accepts_request("dismiss"):
            return None
        self._in_flight = True
        try:
            if self._record is None:
                await self._run_gates()
                record = self._score()
                self.storage.append_wake_record(record)
                self._record = record
            self._rearm()
            return self._record
        except Exception:
            logger.exception("Dismiss failed for alarm %s", self.alarm.id)
            self._enter(State.RINGING if self._record is None else State.SCORED)
            raise
        finally:
            self._in_flight = False

    async def _run_gates(self) -> None:
        if self.alarm.puzzle_enabled:
            level = dismiss_difficulty(self.alarm, self.session.snooze_count)
            self._enter(State.PUZZLE_FOR_DISMISS)
            await self._run_puzzle(level)

        if self.alarm.heart_rate_enabled and self.heart_rate is not None:
            self._enter(State.HEART_RATE_CHECK)
            reading = await self.heart_rate.measure()
            self.session.heart_rate_bpm = reading.bpm
            self.session.heart_rate_confidence = reading.confidence

        if self.alarm.recall_enabled and self.recall is not None:
            items = self.storage.load_recall_items()
            if items:
                self._enter(State.RECALL_CHECK)
                result = await self.recall.present(items)
                self.session.recall_correct = result.correct

    async def _run_puzzle(self, level: int) -> None:
        started = self.clock()
        self.session.puzzle_started_at = started
        self.session.puzzle_errors = 0
        logger.info("Alarm %s: puzzle at difficulty %d", self.alarm.id, level)
        result = await self.puzzle.present(level)
        self.session.puzzle_errors = result.errors
        time_ms = result.time_ms
        if time_ms <= 0:
            # subsystem did not time itself
            time_ms = max(0, int((self.clock() - started).total_seconds() * 1000))
        self.session.puzzle_time_ms = time_ms

    def _score(self) -> WakeRecord:
        now = self.clock()
        scheduled = self._scheduled_at or scheduled_instant(self.alarm, now)
        delta_ms = (now - scheduled).total_seconds() * 1000
        delta_minutes = math.floor(delta_ms / 60000 + 0.5)

        s = self.session
        breakdown = score(
            s.puzzle_time_ms,
            s.puzzle_errors,
            s.snooze_count,
            delta_minutes,
            s.recall_correct,
        )
        self._enter(State.SCORED)
        logger.info("Alarm %s scored %d", self.alarm.id, breakdown.total)

        return WakeRecord(
            id=uuid.uuid4().hex,
            alarm_id=self.alarm.id,
            completed_at=now.isoformat(),
            score=breakdown,
            snooze_count=s.snooze_count,
            puzzle_time_ms=s.puzzle_time_ms,
            puzzle_errors=s.puzzle_errors,
            recall_correct=s.recall_correct,
            wake_time_delta_minutes=delta_minutes,
            heart_rate_bpm=s.heart_rate_bpm,
            heart_rate_confidence=s.heart_rate_confidence,
        )

    def _rearm(self) -> None:
        self.scheduler.cancel_active_notification(self.alarm.id)
        self.scheduler.rearm_alarm(self.alarm)
        self._enter(State.REARMED)
        logger.info("Alarm %s dismissed and re-armed", self.alarm.id)


def open_episode(
    alarm_id: str,
    storage: Storage,
    scheduler: Scheduler,
    puzzle: PuzzleSubsystem,
    recall: RecallSubsystem | None = None,
    heart_rate: HeartRateSubsystem | None = None,
    snooze_count: int = 0,
    clock: Callable[[], datetime] = datetime.now,
) -> DismissalOrchestrator | None:
    """Start a ringing episode for a stored alarm. None if it is unknown."""
    alarm = storage.load_alarm(alarm_id)
    if alarm is None:
        logger.warning("Alarm %s fired but is not in storage", alarm_id)
        return None
    return DismissalOrchestrator(
        alarm,
        storage,
        scheduler,
        puzzle,
        recall=recall,
        heart_rate=heart_rate,
        snooze_count=snooze_count,
        clock=clock,
    )
