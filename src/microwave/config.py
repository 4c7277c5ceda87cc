from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[2]
DEFAULT_SESSION_DIR = PROJECT_ROOT / "data" / "processed" / "sessions"

DEFAULT_DURATION_MS = 30_000
PRESET_DURATIONS_MS = (10_000, 30_000, 60_000, 90_000, 120_000)
# 0.05 rad per frame at 60 frames per second.
FOOD_SPIN_RAD_PER_MS = 0.003


@dataclass(frozen=True)
class MicrowaveSettings:
    default_duration_ms: int = DEFAULT_DURATION_MS
    preset_durations_ms: tuple[int, ...] = PRESET_DURATIONS_MS
    frame_interval_ms: int = 100
    food_spin_rad_per_ms: float = FOOD_SPIN_RAD_PER_MS
    scene_height_px: int = 520

    def __post_init__(self) -> None:
        if not self.preset_durations_ms:
            msg = "preset_durations_ms must not be empty"
            raise ValueError(msg)
        if any(preset <= 0 for preset in self.preset_durations_ms):
            msg = "preset_durations_ms must all be positive"
            raise ValueError(msg)
        if len(set(self.preset_durations_ms)) != len(self.preset_durations_ms):
            msg = "preset_durations_ms must be unique"
            raise ValueError(msg)
        if self.default_duration_ms not in self.preset_durations_ms:
            msg = "default_duration_ms must be one of preset_durations_ms"
            raise ValueError(msg)
        if self.frame_interval_ms <= 0:
            msg = "frame_interval_ms must be positive"
            raise ValueError(msg)
        if self.food_spin_rad_per_ms < 0:
            msg = "food_spin_rad_per_ms must be non-negative"
            raise ValueError(msg)
        if self.scene_height_px <= 0:
            msg = "scene_height_px must be positive"
            raise ValueError(msg)


DEFAULT_SETTINGS = MicrowaveSettings()

__all__ = [
    "PROJECT_ROOT",
    "DEFAULT_SESSION_DIR",
    "DEFAULT_DURATION_MS",
    "PRESET_DURATIONS_MS",
    "FOOD_SPIN_RAD_PER_MS",
    "MicrowaveSettings",
    "DEFAULT_SETTINGS",
]
