"""Heart-rate estimation from fingertip brightness (PPG).

The camera is covered by a fingertip with the flash on; each frame's average
red intensity rises and falls with blood volume. Peaks in the smoothed
intensity are heartbeats.
"""

import logging
from collections import deque
from dataclasses import dataclass
from enum import Enum

import numpy as np

logger = logging.getLogger(__name__)


class Quality(Enum):
    POOR = "poor"
    FAIR = "fair"
    GOOD = "good"
    EXCELLENT = "excellent"


@dataclass(frozen=True)
class PPGResult:
    heart_rate_bpm: int | None
    confidence: float  # 0-100
    progress_pct: float  # 0-100


def is_finger_present(avg_intensity: float, threshold: float = 100.0) -> bool:
    """Covered lens with flash on reads bright red."""
    return avg_intensity > threshold


def quality_tier(avg_intensity: float) -> Quality:
    """User feedback only; never gates a measurement."""
    if avg_intensity < 80:
        return Quality.POOR
    if avg_intensity < 120:
        return Quality.FAIR
    if avg_intensity < 180:
        return Quality.GOOD
    return Quality.EXCELLENT


class SignalProcessor:
    """Rolling-window heart-rate estimator for one measurement session.

    Call reset() at the start of every measurement. ingest() does bounded
    work per sample, so it is safe to call from a frame callback.
    """

    def __init__(
        self,
        capacity: int = 240,
        min_samples: int = 20,
        smoothing_window: int = 5,
        sample_rate: float = 30.0,
        min_peak_distance: int = 15,
        threshold_ratio: float = 0.6,
        min_bpm: int = 40,
        max_bpm: int = 200,
    ):
        self.capacity = capacity
        self.min_samples = min_samples
        self.smoothing_window = smoothing_window
        self.sample_rate = sample_rate
        self.min_peak_distance = min_peak_distance
        self.threshold_ratio = threshold_ratio
        self.min_bpm = min_bpm
        self.max_bpm = max_bpm

        self._buffer: deque[tuple[float, float]] = deque(maxlen=capacity)
        self._peaks: list[int] = []

    def __len__(self) -> int:
        return len(self._buffer)

    @property
    def peaks(self) -> list[int]:
        """Buffer indices of the peaks found by the last ingest()."""
        return list(self._peaks)

    def reset(self) -> None:
        """Clear samples and peak state before a new measurement."""
        self._buffer.clear()
        self._peaks = []

    def ingest(self, intensity: float, timestamp_ms: float) -> PPGResult:
        """Add one sample and return the current estimate."""
        self._buffer.append((float(intensity), float(timestamp_ms)))
        progress = min(100.0, len(self._buffer) / self.min_samples * 100)

        if len(self._buffer) < self.min_samples:
            return PPGResult(heart_rate_bpm=None, confidence=0.0, progress_pct=progress)

        values = np.fromiter((s[0] for s in self._buffer), dtype=np.float64)
        smoothed = self._smooth(values)
        self._peaks = self._detect_peaks(smoothed)

        if len(self._peaks) < 2:
            return PPGResult(heart_rate_bpm=None, confidence=0.0, progress_pct=progress)

        intervals = np.diff(self._peaks).astype(np.float64)
        avg_interval = float(intervals.mean())
        bpm = int(60.0 / (avg_interval / self.sample_rate) + 0.5)

        if bpm < self.min_bpm or bpm > self.max_bpm:
            logger.debug("Rejected estimate of %d BPM", bpm)
            return PPGResult(heart_rate_bpm=None, confidence=0.0, progress_pct=progress)

        cv = float(intervals.std()) / avg_interval
        confidence = max(0.0, min(100.0, (1.0 - cv) * 100.0))
        return PPGResult(heart_rate_bpm=bpm, confidence=confidence, progress_pct=progress)

    def _smooth(self, values: np.ndarray) -> np.ndarray:
        """Centered moving average; the window shrinks at the buffer edges."""
        n = len(values)
        w = self.smoothing_window
        csum = np.concatenate(([0.0], np.cumsum(values)))
        idx = np.arange(n)
        lo = np.maximum(0, idx - w)
        hi = np.minimum(n, idx + w + 1)
        return (csum[hi] - csum[lo]) / (hi - lo)

    def _detect_peaks(self, data: np.ndarray) -> list[int]:
        if len(data) < 5:
            return []

        mean = float(data.mean())
        threshold = mean + (float(data.max()) - mean) * self.threshold_ratio

        centre = data[2:-2]
        is_peak = (
            (centre > data[1:-3])
            & (centre > data[:-4])
            & (centre > data[3:-1])
            & (centre > data[4:])
            & (centre > threshold)
        )

        peaks: list[int] = []
        for i in np.flatnonzero(is_peak) + 2:
            # 15 samples at 30/s caps the rate at 120 BPM
            if not peaks or i - peaks[-1] >= self.min_peak_distance:
                peaks.append(int(i))
        return peaks
