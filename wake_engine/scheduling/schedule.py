"""Next-occurrence computation for recurring alarms."""

from datetime import datetime, timedelta

from wake_engine.alarms.types import AlarmConfig, ScheduleType

# Day numbers: 0 = Sunday ... 6 = Saturday
_SCHEDULE_DAYS = {
    ScheduleType.WORKDAYS: [1, 2, 3, 4, 5],
    ScheduleType.WEEKENDS: [0, 6],
    ScheduleType.DAILY: [0, 1, 2, 3, 4, 5, 6],
}


def alarm_days(alarm: AlarmConfig) -> list[int]:
    if alarm.schedule == ScheduleType.CUSTOM:
        return sorted(set(alarm.custom_days))
    return _SCHEDULE_DAYS[alarm.schedule]


def _sunday_based(dt: datetime) -> int:
    # datetime.weekday() is Monday=0
    return (dt.weekday() + 1) % 7


def next_occurrence(alarm: AlarmConfig, now: datetime) -> datetime | None:
    """First time strictly after now at which the alarm should fire."""
    if not alarm.enabled:
        return None
    days = alarm_days(alarm)
    if not days:
        return None

    today = _sunday_based(now)
    for ahead in range(8):
        if (today + ahead) % 7 not in days:
            continue
        candidate = (now + timedelta(days=ahead)).replace(
            hour=alarm.hour, minute=alarm.minute, second=0, microsecond=0
        )
        if candidate <= now:
            continue
        return candidate
    return None
