# wake_engine/main.py
import argparse
import asyncio
import logging
import os

from wake_engine.config import load_config
from wake_engine.console import ConsolePuzzle, ConsoleRecall, replay_samples
from wake_engine.orchestrator import open_episode
from wake_engine.ppg.monitor import HeartRateMonitor
from wake_engine.ppg.processor import SignalProcessor
from wake_engine.scheduling.loop_scheduler import LoopScheduler
from wake_engine.scoring.stats import average_score, grade, weekly_trend
from wake_engine.storage.json_store import JsonStorage

logger = logging.getLogger(__name__)


async def ring(
    alarm_id: str, action: str, samples_path: str | None, config_path: str | None
) -> None:
    config = load_config(config_path)
    logging.basicConfig(level=config.logging.level, format=config.logging.format)

    storage = JsonStorage(
        config.storage.path,
        retention_days=config.storage.retention_days,
        max_recall_items=config.storage.max_recall_items,
    )
    scheduler = LoopScheduler(
        on_fire=lambda aid, kind: logger.info("Alarm %s would ring (%s)", aid, kind)
    )

    heart_rate = None
    if samples_path is not None:
        ppg = config.ppg
        processor = SignalProcessor(
            capacity=ppg.capacity,
            min_samples=ppg.min_samples,
            smoothing_window=ppg.smoothing_window,
            sample_rate=ppg.sample_rate,
            min_peak_distance=ppg.min_peak_distance,
            threshold_ratio=ppg.threshold_ratio,
            min_bpm=ppg.min_bpm,
            max_bpm=ppg.max_bpm,
        )
        heart_rate = HeartRateMonitor(
            processor,
            source=lambda: replay_samples(samples_path, ppg.sample_rate),
            window_samples=ppg.capacity,
            finger_threshold=ppg.finger_threshold,
            presence_window=ppg.presence_window,
        )

    orchestrator = open_episode(
        alarm_id,
        storage,
        scheduler,
        ConsolePuzzle(),
        recall=ConsoleRecall(),
        heart_rate=heart_rate,
    )
    if orchestrator is None:
        print(f"No alarm with id {alarm_id!r}")
        return

    if action == "snooze":
        await orchestrator.request_snooze()
        print(f"Snoozed for {orchestrator.alarm.snooze_minutes} minutes")
        return

    record = await orchestrator.request_dismiss()
    s = record.score
    g = grade(s.total)
    print(f"Wakefulness score: {s.total} ({g.letter}) - {g.message}")
    print(f"  puzzle {s.puzzle}/50, snooze {s.snooze}/30, "
          f"consistency {s.consistency}/20, recall {s.recall}/10")

    history = storage.recent_wake_records(days=7)
    print(f"7-day average: {average_score(history)}, trend: {weekly_trend(history).value}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Run one alarm ringing episode")
    parser.add_argument("alarm_id")
    parser.add_argument("action", choices=["dismiss", "snooze"], default="dismiss", nargs="?")
    parser.add_argument("--samples", help="CSV of intensity,timestamp_ms for the heart-rate check")
    args = parser.parse_args()

    config_path = os.environ.get("WAKE_ENGINE_CONFIG")
    asyncio.run(ring(args.alarm_id, args.action, args.samples, config_path))


if __name__ == "__main__":
    main()
