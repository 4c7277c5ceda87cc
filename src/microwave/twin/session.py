from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Literal

import numpy as np
import pandas as pd

from microwave.config import DEFAULT_SETTINGS, MicrowaveSettings
from microwave.timer.controller import CommandResult, TimerController, TimerEvent

logger = logging.getLogger(__name__)

CommandName = Literal["select", "start", "open", "close"]
COMMAND_NAMES: tuple[str, ...] = ("select", "start", "open", "close")


@dataclass(frozen=True)
class SessionCommand:
    at_ms: int
    command: CommandName
    duration_ms: int | None = None

    def __post_init__(self) -> None:
        if self.at_ms < 0:
            msg = "at_ms must be non-negative"
            raise ValueError(msg)
        if self.command not in COMMAND_NAMES:
            msg = f"unknown command: {self.command!r}"
            raise ValueError(msg)
        if self.command == "select":
            if self.duration_ms is None:
                msg = "select requires duration_ms"
                raise ValueError(msg)
            if self.duration_ms < 0:
                msg = "duration_ms must be non-negative"
                raise ValueError(msg)
        elif self.duration_ms is not None:
            msg = f"{self.command} does not take duration_ms"
            raise ValueError(msg)


def parse_script(text: str) -> list[SessionCommand]:
    """Parse ``<at_ms> <command> [duration_ms]`` lines into commands.

    Blank lines and anything after ``#`` are ignored.
    """
    commands: list[SessionCommand] = []
    for line_no, raw_line in enumerate(text.splitlines(), start=1):
        line = raw_line.split("#", 1)[0].strip()
        if not line:
            continue
        parts = line.split()
        if len(parts) not in (2, 3):
            msg = f"line {line_no}: expected '<at_ms> <command> [duration_ms]'"
            raise ValueError(msg)
        try:
            at_ms = int(parts[0])
            duration_ms = int(parts[2]) if len(parts) == 3 else None
        except ValueError as exc:
            msg = f"line {line_no}: timestamps and durations must be integers"
            raise ValueError(msg) from exc
        try:
            commands.append(
                SessionCommand(at_ms=at_ms, command=parts[1], duration_ms=duration_ms)  # type: ignore[arg-type]
            )
        except ValueError as exc:
            msg = f"line {line_no}: {exc}"
            raise ValueError(msg) from exc
    return commands


def _apply(
    controller: TimerController,
    command: SessionCommand,
) -> CommandResult:
    if command.command == "select" and command.duration_ms is not None:
        return controller.select(command.duration_ms)
    if command.command == "start":
        return controller.start(command.at_ms)
    if command.command == "open":
        return controller.open(command.at_ms)
    return controller.close()


def run_session(
    commands: Iterable[SessionCommand],
    *,
    until_ms: int,
    frame_interval_ms: int | None = None,
    settings: MicrowaveSettings = DEFAULT_SETTINGS,
) -> pd.DataFrame:
    """Replay scripted commands against a fresh controller on a fixed frame clock.

    One row is recorded per sampled timestamp: every frame tick from 0 to
    ``until_ms`` plus every command timestamp in that range. Commands due at a
    timestamp are applied in script order before that timestamp is sampled.
    """
    if until_ms < 0:
        msg = "until_ms must be non-negative"
        raise ValueError(msg)
    interval = settings.frame_interval_ms if frame_interval_ms is None else frame_interval_ms
    if interval <= 0:
        msg = "frame_interval_ms must be positive"
        raise ValueError(msg)

    ordered = sorted(commands, key=lambda item: item.at_ms)
    frame_times = np.arange(0, until_ms + 1, interval, dtype=np.int64)
    command_times = np.array(
        [item.at_ms for item in ordered if item.at_ms <= until_ms], dtype=np.int64
    )
    timestamps = np.unique(
        np.concatenate([frame_times, command_times, np.array([until_ms], dtype=np.int64)])
    )

    events: list[TimerEvent] = []
    controller = TimerController(settings.default_duration_ms, on_event=events.append)

    rows: list[dict[str, object]] = []
    cursor = 0
    for now in timestamps.tolist():
        applied: list[str] = []
        rejected: list[str] = []
        while cursor < len(ordered) and ordered[cursor].at_ms <= now:
            command = ordered[cursor]
            cursor += 1
            result = _apply(controller, command)
            applied.append(command.command)
            if not result.ok:
                rejected.append(str(result.rejected))

        sample = controller.sample(now)
        rows.append(
            {
                "time_ms": now,
                "remaining_ms": sample.remaining_ms,
                "state": str(sample.state),
                "display": sample.display,
                "duration_ms": controller.duration_ms,
                "command": ";".join(applied),
                "rejected": "; ".join(rejected),
                "event": ";".join(event.kind for event in events),
            }
        )
        events.clear()

    logger.debug("replayed %d commands over %d frames", cursor, len(rows))
    return pd.DataFrame(rows)


def session_summary(trace: pd.DataFrame) -> dict[str, object]:
    """Headline numbers for a replayed session trace."""
    if trace.empty:
        return {
            "frames": 0,
            "final_state": None,
            "final_display": None,
            "dings": 0,
            "rejections": 0,
            "ended_at_ms": None,
        }
    events = trace["event"].str.split(";").explode()
    ended_rows = trace[trace["event"].str.contains("ended", regex=False)]
    return {
        "frames": int(len(trace)),
        "final_state": str(trace["state"].iloc[-1]),
        "final_display": str(trace["display"].iloc[-1]),
        "dings": int((events == "ended").sum()),
        "rejections": int((trace["rejected"] != "").sum()),
        "ended_at_ms": int(ended_rows["time_ms"].iloc[0]) if not ended_rows.empty else None,
    }


__all__ = ["SessionCommand", "parse_script", "run_session", "session_summary"]
