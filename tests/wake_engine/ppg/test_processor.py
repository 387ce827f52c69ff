"""Tests for SignalProcessor heart-rate estimation."""

import numpy as np
import pytest

from wake_engine.ppg.processor import Quality, SignalProcessor, is_finger_present, quality_tier
from tests.wake_engine.conftest import ppg_wave


def _feed(processor: SignalProcessor, values) -> list:
    return [processor.ingest(v, i * 33.3) for i, v in enumerate(values)]


class TestWarmUp:
    def test_fewer_than_min_samples_has_no_estimate(self):
        """19 samples of a clean pulse → no heart rate yet."""
        processor = SignalProcessor()
        results = _feed(processor, ppg_wave(period=30, n=19))

        for r in results:
            assert r.heart_rate_bpm is None
            assert r.progress_pct < 100
            assert r.confidence == 0.0

    def test_progress_counts_toward_min_samples(self):
        processor = SignalProcessor()
        results = _feed(processor, ppg_wave(period=30, n=20))

        assert results[9].progress_pct == pytest.approx(50.0)
        assert results[19].progress_pct == 100.0


class TestHeartRateEstimate:
    @pytest.mark.parametrize("period", [20, 24, 30, 40])
    def test_periodic_wave_gives_expected_bpm(self, period):
        """Period P samples at 30/s → 1800/P BPM."""
        processor = SignalProcessor()
        result = _feed(processor, ppg_wave(period=period, n=240))[-1]

        expected = round(60 / (period / 30))
        assert result.heart_rate_bpm is not None
        assert abs(result.heart_rate_bpm - expected) <= 2
        assert result.progress_pct == 100.0

    def test_regular_rhythm_has_high_confidence(self):
        processor = SignalProcessor()
        result = _feed(processor, ppg_wave(period=30, n=240))[-1]

        assert result.confidence > 90.0

    def test_flat_signal_has_no_estimate(self):
        processor = SignalProcessor()
        result = _feed(processor, np.full(240, 150.0))[-1]

        assert result.heart_rate_bpm is None
        assert processor.peaks == []

    def test_rate_below_range_rejected(self):
        """A 60-sample period is 30 BPM, under the 40 BPM floor."""
        processor = SignalProcessor()
        result = _feed(processor, ppg_wave(period=60, n=240))[-1]

        assert result.heart_rate_bpm is None
        assert result.confidence == 0.0

    def test_peaks_respect_minimum_distance(self):
        processor = SignalProcessor()
        _feed(processor, ppg_wave(period=30, n=240))

        peaks = processor.peaks
        assert len(peaks) >= 2
        assert all(b - a >= 15 for a, b in zip(peaks, peaks[1:]))


class TestBuffer:
    def test_buffer_never_exceeds_capacity(self):
        processor = SignalProcessor()
        result = _feed(processor, ppg_wave(period=30, n=300))[-1]

        assert len(processor) == 240
        assert result.heart_rate_bpm == 60

    def test_reset_clears_samples_and_peaks(self):
        processor = SignalProcessor()
        _feed(processor, ppg_wave(period=30, n=240))

        processor.reset()

        assert len(processor) == 0
        assert processor.peaks == []
        assert processor.ingest(150.0, 0.0).heart_rate_bpm is None


class TestFingerAndQuality:
    def test_finger_present_above_threshold(self):
        assert is_finger_present(101.0) is True
        assert is_finger_present(100.0) is False

    @pytest.mark.parametrize(
        "intensity, tier",
        [
            (10.0, Quality.POOR),
            (79.9, Quality.POOR),
            (80.0, Quality.FAIR),
            (119.9, Quality.FAIR),
            (120.0, Quality.GOOD),
            (179.9, Quality.GOOD),
            (180.0, Quality.EXCELLENT),
            (255.0, Quality.EXCELLENT),
        ],
    )
    def test_quality_tiers(self, intensity, tier):
        assert quality_tier(intensity) == tier
