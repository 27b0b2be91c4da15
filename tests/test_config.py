"""Tests for simulation settings loading."""

import json

import pytest

from asistente.config import SimulationSettings, load_settings, make_rng
from asistente.exceptions import SettingsError


class TestLoadSettings:
    def test_defaults_without_path(self):
        settings = load_settings()
        assert settings == SimulationSettings()
        assert settings.chat_reply_delay == 1.5
        assert settings.upload_first_success_rate == 0.9
        assert settings.upload_retry_success_rate == 0.7
        assert settings.lookup_success_rate == 0.8
        assert settings.lookup_progress_cap == 90

    def test_partial_override(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"chat_reply_delay": 0, "lookup_success_rate": 1}))
        settings = load_settings(path)
        assert settings.chat_reply_delay == 0
        assert settings.lookup_success_rate == 1
        assert settings.upload_duration == 2.0

    def test_missing_file(self, tmp_path):
        with pytest.raises(SettingsError, match="file not found"):
            load_settings(tmp_path / "nope.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json")
        with pytest.raises(SettingsError, match="invalid JSON"):
            load_settings(path)

    def test_not_an_object(self, tmp_path):
        path = tmp_path / "list.json"
        path.write_text("[1, 2]")
        with pytest.raises(SettingsError, match="expected a JSON object"):
            load_settings(path)

    def test_out_of_range_probability(self, tmp_path):
        path = tmp_path / "range.json"
        path.write_text(json.dumps({"upload_first_success_rate": 1.5}))
        with pytest.raises(SettingsError, match="upload_first_success_rate"):
            load_settings(path)


class TestMakeRng:
    def test_seeded_is_reproducible(self):
        assert make_rng(7).random() == make_rng(7).random()
