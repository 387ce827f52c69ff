"""In-process scheduler on the asyncio event loop.

Stands in for the OS exact-alarm service: nothing survives a restart, so
callers re-arm every enabled alarm on startup.
"""

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime

from wake_engine.alarms.base import Scheduler
from wake_engine.alarms.types import AlarmConfig
from wake_engine.scheduling.schedule import next_occurrence

logger = logging.getLogger(__name__)

ALARM = "alarm"
SNOOZE = "snooze"


class LoopScheduler(Scheduler):
    def __init__(
        self,
        on_fire: Callable[[str, str], None],
        clock: Callable[[], datetime] = datetime.now,
        loop: asyncio.AbstractEventLoop | None = None,
    ):
        self.on_fire = on_fire
        self.clock = clock
        self._loop = loop
        self._handles: dict[tuple[str, str], asyncio.TimerHandle] = {}

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def pending(self, alarm_id: str) -> list[str]:
        """Kinds of trigger currently armed for the alarm."""
        return [kind for (aid, kind) in self._handles if aid == alarm_id]

    def _arm(self, alarm_id: str, kind: str, delay_seconds: float) -> None:
        key = (alarm_id, kind)
        old = self._handles.pop(key, None)
        if old is not None:
            old.cancel()
        self._handles[key] = self._get_loop().call_later(
            max(0.0, delay_seconds), self._fire, alarm_id, kind
        )

    def _fire(self, alarm_id: str, kind: str) -> None:
        self._handles.pop((alarm_id, kind), None)
        logger.info("Firing %s for alarm %s", kind, alarm_id)
        self.on_fire(alarm_id, kind)

    def schedule_snooze_reminder(
        self, alarm_id: str, duration_minutes: int, sound_ref: str, label: str
    ) -> None:
        logger.info(
            "Snooze reminder for %s (%s) in %d min, sound=%s",
            alarm_id, label or "Alarm", duration_minutes, sound_ref,
        )
        self._arm(alarm_id, SNOOZE, duration_minutes * 60)

    def cancel_active_notification(self, alarm_id: str) -> None:
        for kind in (ALARM, SNOOZE):
            handle = self._handles.pop((alarm_id, kind), None)
            if handle is not None:
                handle.cancel()

    def rearm_alarm(self, alarm: AlarmConfig) -> None:
        now = self.clock()
        when = next_occurrence(alarm, now)
        if when is None:
            logger.info("Alarm %s has no upcoming occurrence", alarm.id)
            return
        logger.info("Alarm %s armed for %s", alarm.id, when.isoformat(timespec="minutes"))
        self._arm(alarm.id, ALARM, (when - now).total_seconds())
