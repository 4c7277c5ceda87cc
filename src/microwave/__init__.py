"""Microwave twin: countdown timer core plus its scene and replay helpers."""

from microwave.config import DEFAULT_SETTINGS, MicrowaveSettings
from microwave.log import configure_logging
from microwave.timer.clock import monotonic_ms
from microwave.timer.controller import (
    CommandResult,
    InvalidTransition,
    TimerController,
    TimerEvent,
    TimerSample,
    TimerState,
)
from microwave.timer.formatting import format_time
from microwave.twin.scene import build_visual_frame, dialog_text
from microwave.twin.session import SessionCommand, parse_script, run_session, session_summary

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "MicrowaveSettings",
    "DEFAULT_SETTINGS",
    "configure_logging",
    "monotonic_ms",
    "format_time",
    "TimerState",
    "TimerSample",
    "TimerEvent",
    "InvalidTransition",
    "CommandResult",
    "TimerController",
    "build_visual_frame",
    "dialog_text",
    "SessionCommand",
    "parse_script",
    "run_session",
    "session_summary",
]
