"""Tests for HeartRateMonitor over a SignalProcessor."""

from unittest.mock import MagicMock

import pytest

from wake_engine.ppg.monitor import HeartRateMonitor
from wake_engine.ppg.processor import SignalProcessor
from tests.wake_engine.conftest import ppg_samples, ppg_wave


def _source(samples):
    async def gen():
        for s in samples:
            yield s
    return gen


class TestMeasure:
    @pytest.mark.asyncio
    async def test_measures_periodic_pulse(self):
        monitor = HeartRateMonitor(SignalProcessor(), _source(ppg_samples(period=30, n=240)))

        reading = await monitor.measure()

        assert reading.bpm == 60
        assert reading.confidence > 90.0
        assert reading.samples == 240
        assert reading.quality == "good"

    @pytest.mark.asyncio
    async def test_stops_after_window(self):
        monitor = HeartRateMonitor(
            SignalProcessor(), _source(ppg_samples(period=30, n=400)), window_samples=240
        )

        reading = await monitor.measure()

        assert reading.samples == 240

    @pytest.mark.asyncio
    async def test_short_source_completes_without_reading(self):
        monitor = HeartRateMonitor(SignalProcessor(), _source(ppg_samples(period=30, n=10)))

        reading = await monitor.measure()

        assert reading.bpm is None
        assert reading.confidence == 0.0
        assert reading.samples == 10

    @pytest.mark.asyncio
    async def test_resets_processor_first(self):
        """Leftover samples from an earlier session do not leak in."""
        processor = SignalProcessor()
        for i in range(100):
            processor.ingest(255.0 if i % 3 else 0.0, i)

        monitor = HeartRateMonitor(processor, _source(ppg_samples(period=24, n=240)))
        reading = await monitor.measure()

        assert reading.bpm == 75

    @pytest.mark.asyncio
    async def test_reports_progress_per_sample(self):
        on_progress = MagicMock()
        monitor = HeartRateMonitor(
            SignalProcessor(), _source(ppg_samples(period=30, n=50)), on_progress=on_progress
        )

        await monitor.measure()

        assert on_progress.call_count == 50
        last_result, last_quality = on_progress.call_args[0]
        assert last_result.progress_pct == 100.0

    @pytest.mark.asyncio
    async def test_source_error_propagates(self):
        async def broken():
            yield (150.0, 0.0)
            raise RuntimeError("camera closed")

        monitor = HeartRateMonitor(SignalProcessor(), broken)

        with pytest.raises(RuntimeError):
            await monitor.measure()


class TestFingerPresence:
    @pytest.mark.asyncio
    async def test_dim_pulse_measured_at_true_rate(self):
        """Troughs below the finger threshold are still part of the signal."""
        wave = ppg_wave(period=30, n=240, base=105.0)
        samples = [(float(v), i * 1000.0 / 30) for i, v in enumerate(wave)]
        monitor = HeartRateMonitor(SignalProcessor(), _source(samples))

        reading = await monitor.measure()

        assert reading.bpm == 60
        assert reading.finger_present is True
        assert reading.quality == "fair"

    @pytest.mark.asyncio
    async def test_every_sample_reaches_processor(self):
        on_progress = MagicMock()
        samples = [(20.0, i * 33.3) for i in range(5)] + ppg_samples(period=30, n=240)
        monitor = HeartRateMonitor(
            SignalProcessor(), _source(samples), window_samples=245, on_progress=on_progress
        )

        reading = await monitor.measure()

        assert reading.samples == 245
        assert reading.bpm == 60
        assert reading.finger_present is True
        assert on_progress.call_count == 245

    @pytest.mark.asyncio
    async def test_lifted_finger_reported(self):
        samples = ppg_samples(period=30, n=240) + [(20.0, 8000.0 + i * 33.3) for i in range(40)]
        monitor = HeartRateMonitor(SignalProcessor(), _source(samples), window_samples=280)

        reading = await monitor.measure()

        assert reading.samples == 280
        assert reading.finger_present is False
        assert reading.quality == "poor"
