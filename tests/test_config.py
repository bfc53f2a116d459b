"""Tests for configuration loading and saving."""
from __future__ import annotations

import json
from unittest.mock import patch

import pytest

from phrase_drill.config import DEFAULTS, Settings, load_settings, save_settings
from phrase_drill.errors import ValidationError


class TestSettings:
    def test_defaults(self):
        s = Settings()
        assert s.threshold_percent == 85
        assert s.correct_threshold == 0.9
        assert s.approximate_threshold == 0.6

    def test_to_dict(self):
        d = Settings().to_dict()
        assert d == DEFAULTS

    def test_to_dict_roundtrip(self):
        s = Settings(threshold_percent=70, db_path="x.db")
        s2 = Settings(**s.to_dict())
        assert s2.threshold_percent == 70
        assert s2.db_path == "x.db"

    def test_validate_ok(self):
        Settings(threshold_percent=0, correct_threshold=1, approximate_threshold=0).validate()

    @pytest.mark.parametrize("overrides", [
        {"threshold_percent": 101},
        {"threshold_percent": -5},
        {"correct_threshold": 1.2},
        {"approximate_threshold": 0.95},
    ])
    def test_validate_rejects(self, overrides):
        with pytest.raises(ValidationError):
            Settings(**overrides).validate()


class TestLoadSaveSettings:
    def test_load_from_file(self, tmp_path):
        config_path = tmp_path / "config.json"
        config_path.write_text(json.dumps({"threshold_percent": 90}))

        with patch("phrase_drill.config.CONFIG_PATH", config_path):
            s = load_settings()
        assert s.threshold_percent == 90
        assert s.correct_threshold == 0.9

    def test_load_missing_file(self, tmp_path):
        with patch("phrase_drill.config.CONFIG_PATH", tmp_path / "nonexistent.json"):
            s = load_settings()
        assert s.threshold_percent == 85

    def test_load_invalid_values(self, tmp_path):
        config_path = tmp_path / "config.json"
        config_path.write_text(json.dumps({"threshold_percent": 250}))
        with patch("phrase_drill.config.CONFIG_PATH", config_path):
            with pytest.raises(ValidationError):
                load_settings()

    def test_unknown_keys_ignored(self, tmp_path):
        config_path = tmp_path / "config.json"
        config_path.write_text(json.dumps({"threshold_percent": 80, "unknown_key": 1}))
        with patch("phrase_drill.config.CONFIG_PATH", config_path):
            s = load_settings()
        assert s.threshold_percent == 80
        assert not hasattr(s, "unknown_key")

    def test_save_creates_file(self, tmp_path):
        config_path = tmp_path / "config.json"
        with patch("phrase_drill.config.CONFIG_PATH", config_path):
            save_settings(Settings(threshold_percent=75))
        data = json.loads(config_path.read_text())
        assert data["threshold_percent"] == 75
