"""JSON file storage for alarms, recall items and wake records."""

import json
import logging
import re
from collections.abc import Callable
from datetime import datetime, timedelta
from pathlib import Path

from wake_engine.alarms.base import Storage
from wake_engine.alarms.types import AlarmConfig, PuzzleMode, RecallItem, WakeRecord

logger = logging.getLogger(__name__)

_TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def validate_alarm(alarm: AlarmConfig) -> None:
    """Reject configurations the engine cannot run."""
    if not _TIME_RE.match(alarm.time):
        raise ValueError(f"Alarm {alarm.id}: time must be HH:MM, got {alarm.time!r}")
    if alarm.puzzle_mode == PuzzleMode.MANUAL and alarm.puzzle_difficulty not in (1, 2, 3, 4):
        raise ValueError(
            f"Alarm {alarm.id}: manual difficulty must be 1-4, got {alarm.puzzle_difficulty}"
        )
    if alarm.snooze_minutes <= 0:
        raise ValueError(f"Alarm {alarm.id}: snooze duration must be positive")
    if any(d not in range(7) for d in alarm.custom_days):
        raise ValueError(f"Alarm {alarm.id}: custom days must be 0-6")


class JsonStorage(Storage):
    """Single JSON document holding all persisted data.

    Wake records older than retention_days are dropped on every append.
    """

    def __init__(
        self,
        path: str | Path,
        retention_days: int = 30,
        max_recall_items: int = 100,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.path = Path(path)
        self.retention_days = retention_days
        self.max_recall_items = max_recall_items
        self.clock = clock

    def _read(self) -> dict:
        if not self.path.exists():
            return {"alarms": [], "recall_items": [], "wake_records": []}
        with open(self.path) as f:
            data = json.load(f)
        data.setdefault("alarms", [])
        data.setdefault("recall_items", [])
        data.setdefault("wake_records", [])
        return data

    def _write(self, data: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp, "w") as f:
            json.dump(data, f, indent=2)
        tmp.replace(self.path)

    # Alarms

    def load_alarms(self) -> list[AlarmConfig]:
        alarms = [AlarmConfig.from_dict(a) for a in self._read()["alarms"]]
        for alarm in alarms:
            validate_alarm(alarm)
        return alarms

    def load_alarm(self, alarm_id: str) -> AlarmConfig | None:
        for raw in self._read()["alarms"]:
            if raw["id"] == alarm_id:
                alarm = AlarmConfig.from_dict(raw)
                validate_alarm(alarm)
                return alarm
        return None

    def save_alarm(self, alarm: AlarmConfig) -> None:
        validate_alarm(alarm)
        data = self._read()
        alarms = data["alarms"]
        for i, existing in enumerate(alarms):
            if existing["id"] == alarm.id:
                alarms[i] = alarm.to_dict()
                break
        else:
            alarms.append(alarm.to_dict())
        self._write(data)

    def delete_alarm(self, alarm_id: str) -> None:
        data = self._read()
        data["alarms"] = [a for a in data["alarms"] if a["id"] != alarm_id]
        self._write(data)

    # Recall items

    def load_recall_items(self) -> list[RecallItem]:
        return [RecallItem(**item) for item in self._read()["recall_items"]]

    def save_recall_item(self, item: RecallItem) -> None:
        data = self._read()
        items = data["recall_items"]
        for i, existing in enumerate(items):
            if existing["id"] == item.id:
                items[i] = item.__dict__.copy()
                break
        else:
            if len(items) >= self.max_recall_items:
                raise ValueError(f"Maximum of {self.max_recall_items} recall items allowed")
            items.append(item.__dict__.copy())
        self._write(data)

    def delete_recall_item(self, item_id: str) -> None:
        data = self._read()
        data["recall_items"] = [i for i in data["recall_items"] if i["id"] != item_id]
        self._write(data)

    # Wake records

    def load_wake_records(self) -> list[WakeRecord]:
        return [WakeRecord.from_dict(r) for r in self._read()["wake_records"]]

    def recent_wake_records(self, days: int = 7) -> list[WakeRecord]:
        cutoff = self.clock() - timedelta(days=days)
        return [
            r for r in self.load_wake_records()
            if datetime.fromisoformat(r.completed_at) > cutoff
        ]

    def append_wake_record(self, record: WakeRecord) -> None:
        data = self._read()
        data["wake_records"].append(record.to_dict())

        cutoff = self.clock() - timedelta(days=self.retention_days)
        before = len(data["wake_records"])
        data["wake_records"] = [
            r for r in data["wake_records"]
            if datetime.fromisoformat(r["completed_at"]) > cutoff
        ]
        dropped = before - len(data["wake_records"])
        if dropped:
            logger.debug("Dropped %d wake records older than %d days", dropped, self.retention_days)

        self._write(data)
        logger.info("Saved wake record %s for alarm %s", record.id, record.alarm_id)
