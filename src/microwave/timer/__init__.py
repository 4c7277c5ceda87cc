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

__all__ = [
    "format_time",
    "monotonic_ms",
    "TimerState",
    "TimerSample",
    "TimerEvent",
    "InvalidTransition",
    "CommandResult",
    "TimerController",
]
