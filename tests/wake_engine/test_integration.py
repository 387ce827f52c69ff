"""Integration tests: full episode with real storage, scheduler and PPG pipeline."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from wake_engine.alarms.base import PuzzleResult, RecallResult
from wake_engine.alarms.types import RecallItem
from wake_engine.orchestrator import State, open_episode
from wake_engine.ppg.monitor import HeartRateMonitor
from wake_engine.ppg.processor import SignalProcessor
from wake_engine.scheduling.loop_scheduler import LoopScheduler
from wake_engine.scoring.stats import average_score
from wake_engine.storage.json_store import JsonStorage
from tests.wake_engine.conftest import NOW, make_alarm, ppg_samples


def _source(samples):
    async def gen():
        for s in samples:
            yield s
    return gen


@pytest.fixture
def store(tmp_path):
    s = JsonStorage(tmp_path / "data.json", clock=lambda: NOW)
    s.save_alarm(make_alarm(heart_rate_enabled=True, recall_enabled=True))
    s.save_recall_item(RecallItem(id="r1", question="Capital of France?", answer="Paris"))
    return s


@pytest.fixture
def puzzle():
    p = MagicMock()
    p.present = AsyncMock(return_value=PuzzleResult(errors=1, time_ms=32000))
    return p


class TestE2EDismiss:
    """Ring → puzzle → heart rate from camera samples → recall → record + re-arm."""

    @pytest.mark.asyncio
    async def test_full_dismiss(self, store, puzzle):
        scheduler = LoopScheduler(on_fire=MagicMock(), clock=lambda: NOW)
        recall = MagicMock()
        recall.present = AsyncMock(return_value=RecallResult(correct=True))
        monitor = HeartRateMonitor(SignalProcessor(), _source(ppg_samples(period=24, n=240)))

        orch = open_episode(
            "a1", store, scheduler, puzzle,
            recall=recall, heart_rate=monitor, clock=lambda: NOW,
        )
        record = await orch.request_dismiss()

        assert orch.state == State.REARMED
        puzzle.present.assert_awaited_once_with(2)
        recall.present.assert_awaited_once_with(store.load_recall_items())

        # 50 - 5 (32 s) - 10 (one error) + 30 + 20 + 10
        assert record.score.puzzle == 35
        assert record.score.total == 95
        assert record.heart_rate_bpm == 75
        assert record.recall_correct is True

        assert store.load_wake_records() == [record]
        assert average_score(store.load_wake_records()) == 95
        assert scheduler.pending("a1") == ["alarm"]
        scheduler.cancel_active_notification("a1")


class TestE2ESnoozeThenDismiss:
    """Snooze once, then the reminder re-opens the episode with the carried count."""

    @pytest.mark.asyncio
    async def test_snooze_then_dismiss(self, store, puzzle):
        scheduler = LoopScheduler(on_fire=MagicMock(), clock=lambda: NOW)
        store.save_alarm(make_alarm())

        first = open_episode("a1", store, scheduler, puzzle, clock=lambda: NOW)
        await first.request_snooze()

        assert first.state == State.RESCHEDULED
        assert scheduler.pending("a1") == ["snooze"]
        assert store.load_wake_records() == []

        second = open_episode(
            "a1", store, scheduler, puzzle,
            snooze_count=first.session.snooze_count, clock=lambda: NOW,
        )
        record = await second.request_dismiss()

        assert record.snooze_count == 1
        assert record.score.snooze == 20
        assert [r.id for r in store.load_wake_records()] == [record.id]
        assert scheduler.pending("a1") == ["alarm"]
        scheduler.cancel_active_notification("a1")
