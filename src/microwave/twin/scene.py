from __future__ import annotations

import math

from microwave.config import DEFAULT_SETTINGS, MicrowaveSettings
from microwave.timer.controller import TimerEvent, TimerSample, TimerState
from microwave.timer.formatting import format_time

DING_TEXT = "Ding! Your food is ready!"
NOT_STARTED_TEXT = "Not started"


def _food_rotation(elapsed_ms: int, spin_rad_per_ms: float) -> float:
    angle = max(0, elapsed_ms) * spin_rad_per_ms
    return math.fmod(angle, 2.0 * math.pi)


def build_visual_frame(
    sample: TimerSample,
    *,
    elapsed_ms: int,
    settings: MicrowaveSettings = DEFAULT_SETTINGS,
) -> dict[str, float | int | bool | str]:
    """Map one controller sample into a renderer-ready frame payload."""
    display_text = format_time(sample.remaining_ms)
    food_rotation_rad = _food_rotation(elapsed_ms, settings.food_spin_rad_per_ms)
    return {
        "frame_seq": f"{sample.state}:{sample.remaining_ms}",
        "state": str(sample.state),
        "remaining_ms": sample.remaining_ms,
        "display_text": display_text,
        "door_open": sample.state is TimerState.OPENED,
        "light_on": sample.state in (TimerState.RUNNING, TimerState.OPENED),
        "is_cooking": sample.state is TimerState.RUNNING,
        "ended": sample.state is TimerState.ENDED,
        "food_rotation_rad": food_rotation_rad,
        "food_spin_rad_per_ms": settings.food_spin_rad_per_ms,
    }


def dialog_text(event: TimerEvent, *, duration_ms: int) -> str:
    """Ding text, or for an opened door "Not started", "Time left: ..." or "Done! ..."."""
    if event.kind == "ended":
        return DING_TEXT
    time_text = format_time(event.remaining_ms)
    if event.state is TimerState.ENDED:
        return f"Done! Time left: {time_text}"
    if event.state is TimerState.IDLE and event.remaining_ms == duration_ms:
        return NOT_STARTED_TEXT
    return f"Time left: {time_text}"


__all__ = ["DING_TEXT", "NOT_STARTED_TEXT", "build_visual_frame", "dialog_text"]
