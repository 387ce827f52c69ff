# wake_engine/config.py
from dataclasses import dataclass, field, fields, is_dataclass
from pathlib import Path
import yaml

DEFAULT_CONFIG_PATH = Path(__file__).with_name("config.yaml")


@dataclass
class PPGConfig:
    capacity: int = 240  # ~8 s at 30 samples/s
    min_samples: int = 20
    smoothing_window: int = 5
    sample_rate: float = 30.0
    min_peak_distance: int = 15
    threshold_ratio: float = 0.6
    min_bpm: int = 40
    max_bpm: int = 200
    finger_threshold: float = 100.0
    presence_window: int = 30  # ~1 s of samples for finger detection


@dataclass
class StorageConfig:
    path: str = "wake_engine_data.json"
    retention_days: int = 30
    max_recall_items: int = 100


@dataclass
class LoggingConfig:
    level: str = "INFO"
    format: str = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


@dataclass
class WakeEngineConfig:
    ppg: PPGConfig = field(default_factory=PPGConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _build_nested(cls, data: dict | None):
    """Build a config dataclass from a YAML mapping, recursing into sections."""
    if not data:
        return cls()
    sections = {f.name: f.default_factory for f in fields(cls) if is_dataclass(f.default_factory)}
    kwargs = {}
    for key, value in data.items():
        section = sections.get(key)
        kwargs[key] = _build_nested(section, value) if section and isinstance(value, dict) else value
    return cls(**kwargs)


def load_config(path: str | Path | None = None) -> WakeEngineConfig:
    """Load settings from ``path``, or from the config.yaml shipped in the package."""
    with open(path or DEFAULT_CONFIG_PATH) as f:
        data = yaml.safe_load(f) or {}
    return _build_nested(WakeEngineConfig, data)
