from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from phrase_drill.alignment import validate_word_thresholds
from phrase_drill.evaluator import validate_threshold_percent

CONFIG_PATH = Path(__file__).resolve().parent.parent / "config.json"

DEFAULTS = {
    "threshold_percent": 85,
    "correct_threshold": 0.9,
    "approximate_threshold": 0.6,
    "db_path": "progress.db",
}


@dataclass
class Settings:
    threshold_percent: int = DEFAULTS["threshold_percent"]
    correct_threshold: float = DEFAULTS["correct_threshold"]
    approximate_threshold: float = DEFAULTS["approximate_threshold"]
    db_path: str = DEFAULTS["db_path"]

    @property
    def project_root(self) -> Path:
        return Path(__file__).resolve().parent.parent

    @property
    def db_full_path(self) -> Path:
        return self.project_root / self.db_path

    def validate(self) -> None:
        """Raise ValidationError if any grading threshold is out of range."""
        validate_threshold_percent(self.threshold_percent)
        validate_word_thresholds(self.correct_threshold, self.approximate_threshold)

    def to_dict(self) -> dict:
        return {
            "threshold_percent": self.threshold_percent,
            "correct_threshold": self.correct_threshold,
            "approximate_threshold": self.approximate_threshold,
            "db_path": self.db_path,
        }


def load_settings() -> Settings:
    if CONFIG_PATH.exists():
        raw = json.loads(CONFIG_PATH.read_text())
        known = {f.name for f in Settings.__dataclass_fields__.values()}
        filtered = {k: v for k, v in raw.items() if k in known}
        settings = Settings(**filtered)
    else:
        settings = Settings()
    settings.validate()
    return settings


def save_settings(settings: Settings) -> None:
    CONFIG_PATH.write_text(json.dumps(settings.to_dict(), indent=4) + "\n")
