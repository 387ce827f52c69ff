"""Heart-rate gate: feeds camera samples through a SignalProcessor."""

import logging
from collections import deque
from collections.abc import AsyncIterable, Callable

import numpy as np

from wake_engine.alarms.base import HeartRateReading, HeartRateSubsystem
from wake_engine.ppg.processor import (
    PPGResult,
    Quality,
    SignalProcessor,
    is_finger_present,
    quality_tier,
)

logger = logging.getLogger(__name__)

Sample = tuple[float, float]  # (intensity, timestamp_ms)


class HeartRateMonitor(HeartRateSubsystem):
    """Measure heart rate over one window of samples.

    The measurement always completes: a source that ends early, or a signal
    too noisy to estimate, yields a reading with bpm=None. Every sample is
    processed. Finger presence and quality are judged on the mean of the
    last ``presence_window`` samples and only drive feedback.
    """

    def __init__(
        self,
        processor: SignalProcessor,
        source: Callable[[], AsyncIterable[Sample]],
        window_samples: int = 240,
        finger_threshold: float = 100.0,
        presence_window: int = 30,
        on_progress: Callable[[PPGResult, Quality], None] | None = None,
    ):
        self.processor = processor
        self.source = source
        self.window_samples = window_samples
        self.finger_threshold = finger_threshold
        self.presence_window = presence_window
        self.on_progress = on_progress

    async def measure(self) -> HeartRateReading:
        self.processor.reset()
        recent: deque[float] = deque(maxlen=self.presence_window)

        bpm: int | None = None
        confidence = 0.0
        quality = Quality.POOR
        finger = False
        count = 0

        async for intensity, timestamp_ms in self.source():
            result = self.processor.ingest(intensity, timestamp_ms)
            count += 1

            recent.append(intensity)
            level = float(np.mean(recent))
            quality = quality_tier(level)
            present = is_finger_present(level, self.finger_threshold)
            if present != finger:
                logger.info(
                    "Finger %s (mean intensity %.0f)", "placed" if present else "lifted", level
                )
                finger = present

            if result.heart_rate_bpm is not None:
                bpm = result.heart_rate_bpm
                confidence = result.confidence

            if self.on_progress is not None:
                self.on_progress(result, quality)

            if count >= self.window_samples:
                break

        logger.info(
            "Heart-rate measurement done: bpm=%s confidence=%.0f samples=%d finger=%s",
            bpm, confidence, count, finger,
        )
        return HeartRateReading(
            bpm=bpm,
            confidence=confidence,
            samples=count,
            quality=quality.value,
            finger_present=finger,
        )
