"""Simulation settings: delays, progress steps and success probabilities."""

import json
import random
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from asistente.exceptions import SettingsError


class SimulationSettings(BaseModel):
    """Timing and outcome knobs for the simulated backend.

    Durations are in seconds of scheduler time. Probabilities are in [0, 1].
    """

    chat_reply_delay: float = Field(default=1.5, ge=0)

    upload_tick: float = Field(default=0.08, gt=0)
    upload_step: int = Field(default=5, gt=0)
    upload_duration: float = Field(default=2.0, ge=0)
    processing_duration: float = Field(default=3.0, ge=0)
    upload_first_success_rate: float = Field(default=0.9, ge=0, le=1)
    upload_retry_success_rate: float = Field(default=0.7, ge=0, le=1)

    lookup_tick: float = Field(default=0.5, gt=0)
    lookup_step: int = Field(default=10, gt=0)
    lookup_progress_cap: int = Field(default=90, ge=0, le=100)
    lookup_duration: float = Field(default=3.0, ge=0)
    lookup_success_rate: float = Field(default=0.8, ge=0, le=1)


def load_settings(path: Path | None = None) -> SimulationSettings:
    """Load settings from a JSON file; missing keys keep their defaults."""
    if path is None:
        return SimulationSettings()
    if not path.exists():
        raise SettingsError(str(path), "file not found")
    try:
        raw = json.loads(path.read_text())
    except json.JSONDecodeError as exc:
        raise SettingsError(str(path), f"invalid JSON ({exc.msg})") from exc
    if not isinstance(raw, dict):
        raise SettingsError(str(path), "expected a JSON object")
    try:
        return SimulationSettings.model_validate(raw)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        raise SettingsError(str(path), problems) from exc


def make_rng(seed: int | None = None) -> random.Random:
    """Random source for simulated outcomes; seeded for reproducible runs."""
    return random.Random(seed)
