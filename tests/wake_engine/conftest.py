"""Shared fixtures for wake_engine tests."""

from datetime import datetime
from unittest.mock import AsyncMock, MagicMock

import numpy as np
import pytest

from wake_engine.alarms.base import HeartRateReading, PuzzleResult, RecallResult
from wake_engine.alarms.types import AlarmConfig, RecallItem
from wake_engine.orchestrator import DismissalOrchestrator

# Monday
NOW = datetime(2026, 10, 19, 7, 5)


def make_alarm(**overrides) -> AlarmConfig:
    values = dict(
        id="a1",
        time="07:00",
        snooze_minutes=5,
        label="Morning",
        heart_rate_enabled=False,
        recall_enabled=False,
    )
    values.update(overrides)
    return AlarmConfig(**values)


def ppg_wave(period: int, n: int, base: float = 150.0, amplitude: float = 10.0) -> np.ndarray:
    """Pulse-like intensity trace starting and ending near a trough."""
    i = np.arange(n)
    return base - amplitude * np.cos(2 * np.pi * i / period)


def ppg_samples(period: int, n: int, sample_rate: float = 30.0) -> list[tuple[float, float]]:
    wave = ppg_wave(period, n)
    return [(float(v), i * 1000.0 / sample_rate) for i, v in enumerate(wave)]


@pytest.fixture
def collaborators():
    """Mocked storage, scheduler and subsystems with sensible defaults."""
    storage = MagicMock()
    storage.load_recall_items.return_value = [
        RecallItem(id="r1", question="Capital of France?", answer="Paris"),
    ]
    scheduler = MagicMock()
    puzzle = MagicMock()
    puzzle.present = AsyncMock(return_value=PuzzleResult(errors=0, time_ms=15000))
    recall = MagicMock()
    recall.present = AsyncMock(return_value=RecallResult(correct=True))
    heart_rate = MagicMock()
    heart_rate.measure = AsyncMock(
        return_value=HeartRateReading(bpm=64, confidence=92.0, samples=240)
    )
    return storage, scheduler, puzzle, recall, heart_rate


@pytest.fixture
def make_orch(collaborators):
    storage, scheduler, puzzle, recall, heart_rate = collaborators

    def _make(alarm: AlarmConfig | None = None, **kwargs) -> DismissalOrchestrator:
        return DismissalOrchestrator(
            alarm or make_alarm(),
            storage,
            scheduler,
            puzzle,
            recall=recall,
            heart_rate=heart_rate,
            clock=lambda: NOW,
            **kwargs,
        )

    return _make
