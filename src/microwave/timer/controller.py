from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import Literal

from microwave.config import DEFAULT_DURATION_MS
from microwave.timer.formatting import format_time

logger = logging.getLogger(__name__)

EventKind = Literal["ended", "opened"]


class TimerState(StrEnum):
    IDLE = "idle"
    RUNNING = "running"
    OPENED = "opened"
    ENDED = "ended"


@dataclass(frozen=True)
class TimerSample:
    remaining_ms: int
    state: TimerState

    def __post_init__(self) -> None:
        if self.remaining_ms < 0:
            msg = "remaining_ms must be non-negative"
            raise ValueError(msg)

    @property
    def display(self) -> str:
        return format_time(self.remaining_ms)


@dataclass(frozen=True)
class TimerEvent:
    """Payload handed to the presentation callback.

    ``state`` is the controller state after the command that produced the
    event, so an ``"opened"`` event seen in IDLE means the door was opened
    before cooking started and one seen in ENDED means the food is done.
    """

    kind: EventKind
    remaining_ms: int
    state: TimerState


@dataclass(frozen=True)
class InvalidTransition:
    command: str
    state: TimerState
    reason: str

    def __str__(self) -> str:
        return f"{self.command} not allowed while {self.state}: {self.reason}"


@dataclass(frozen=True)
class CommandResult:
    sample: TimerSample
    rejected: InvalidTransition | None = None

    @property
    def ok(self) -> bool:
        return self.rejected is None


EventCallback = Callable[[TimerEvent], None]


class TimerController:
    """Countdown state machine behind the microwave display.

    The controller never reads a clock. Hosts pass a non-decreasing
    millisecond timestamp into ``start``, ``open`` and ``sample``; a clock
    that runs backwards is a caller error and is not detected.

    Commands that are not allowed in the current state either do nothing or
    come back with ``CommandResult.rejected`` set. Nothing here raises for a
    state problem; ``select`` raises ``ValueError`` only for a negative duration.
    """

    def __init__(
        self,
        duration_ms: int = DEFAULT_DURATION_MS,
        *,
        on_event: EventCallback | None = None,
    ) -> None:
        if duration_ms < 0:
            msg = "duration_ms must be non-negative"
            raise ValueError(msg)
        self._duration_ms = int(duration_ms)
        self._remaining_ms = self._duration_ms
        self._budget_ms = self._duration_ms
        self._state = TimerState.IDLE
        self._started_at_ms: int | None = None
        self._ding_emitted = False
        self._on_event = on_event

    @property
    def duration_ms(self) -> int:
        return self._duration_ms

    @property
    def remaining_ms(self) -> int:
        return self._remaining_ms

    @property
    def state(self) -> TimerState:
        return self._state

    @property
    def started_at_ms(self) -> int | None:
        return self._started_at_ms

    @property
    def elapsed_ms(self) -> int:
        """Cooking time consumed in the current cycle, as of the last sample."""
        return self._duration_ms - self._remaining_ms

    @property
    def is_cooking(self) -> bool:
        return self._state is TimerState.RUNNING

    def set_event_callback(self, on_event: EventCallback | None) -> None:
        self._on_event = on_event

    def snapshot(self) -> TimerSample:
        return TimerSample(remaining_ms=self._remaining_ms, state=self._state)

    def select(self, duration_ms: int) -> CommandResult:
        """Configure a new countdown length and reset to IDLE."""
        if duration_ms < 0:
            msg = "duration_ms must be non-negative"
            raise ValueError(msg)
        if self._state is TimerState.RUNNING:
            return self._reject("select", "cannot change duration of a running countdown")

        self._duration_ms = int(duration_ms)
        self._remaining_ms = self._duration_ms
        self._budget_ms = self._duration_ms
        self._ding_emitted = False
        self._transition(TimerState.IDLE, "select")
        return CommandResult(self.snapshot())

    def start(self, now_ms: int) -> CommandResult:
        """Start from IDLE, or resume from OPENED with the frozen remaining time."""
        if self._state is TimerState.RUNNING:
            return CommandResult(self.snapshot())
        if self._state is TimerState.ENDED:
            return self._reject("start", "countdown finished, select a duration first")

        self._budget_ms = self._remaining_ms
        self._started_at_ms = int(now_ms)
        self._ding_emitted = False
        self._transition(TimerState.RUNNING, "start")
        return CommandResult(self.snapshot())

    def open(self, now_ms: int) -> CommandResult:
        """Open the door, pausing a running countdown.

        Outside RUNNING this changes nothing, but the callback still receives
        the current remaining time so the host can report it.
        """
        if self._state is TimerState.RUNNING:
            self._remaining_ms = self._remaining_at(now_ms)
            self._started_at_ms = None
            self._transition(TimerState.OPENED, "open")

        self._emit("opened")
        return CommandResult(self.snapshot())

    def close(self) -> CommandResult:
        if self._state is TimerState.OPENED:
            self._transition(TimerState.IDLE, "close")
        return CommandResult(self.snapshot())

    def sample(self, now_ms: int) -> TimerSample:
        """Advance the countdown to ``now_ms`` and report it.

        Safe to call every frame. The ``"ended"`` event fires on the sample
        that first reaches zero and never again until the next ``start``.
        """
        if self._state is not TimerState.RUNNING:
            return self.snapshot()

        remaining = self._remaining_at(now_ms)
        self._remaining_ms = remaining
        if remaining <= 0:
            self._remaining_ms = 0
            self._started_at_ms = None
            self._transition(TimerState.ENDED, "sample")
            if not self._ding_emitted:
                self._ding_emitted = True
                self._emit("ended")
        return self.snapshot()

    def _remaining_at(self, now_ms: int) -> int:
        if self._started_at_ms is None:
            return self._remaining_ms
        elapsed = int(now_ms) - self._started_at_ms
        return max(0, min(self._budget_ms - elapsed, self._duration_ms))

    def _transition(self, target: TimerState, command: str) -> None:
        if target is not self._state:
            logger.debug(
                "timer %s: %s -> %s (remaining=%d ms)",
                command,
                self._state,
                target,
                self._remaining_ms,
            )
        self._state = target

    def _reject(self, command: str, reason: str) -> CommandResult:
        rejection = InvalidTransition(command=command, state=self._state, reason=reason)
        logger.info("timer rejected %s", rejection)
        return CommandResult(self.snapshot(), rejected=rejection)

    def _emit(self, kind: EventKind) -> None:
        if self._on_event is None:
            return
        self._on_event(
            TimerEvent(kind=kind, remaining_ms=self._remaining_ms, state=self._state)
        )


__all__ = [
    "TimerState",
    "TimerSample",
    "TimerEvent",
    "InvalidTransition",
    "CommandResult",
    "EventCallback",
    "TimerController",
]
