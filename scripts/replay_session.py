from __future__ import annotations

import argparse
import logging
from datetime import UTC, datetime
from pathlib import Path

from microwave.config import DEFAULT_SESSION_DIR, DEFAULT_SETTINGS
from microwave.log import configure_logging
from microwave.twin.session import parse_script, run_session, session_summary


def replay_script(
    *,
    script_path: Path,
    until_ms: int,
    frame_interval_ms: int,
    output_path: Path | None = None,
) -> Path:
    commands = parse_script(script_path.read_text(encoding="utf-8"))
    trace = run_session(commands, until_ms=until_ms, frame_interval_ms=frame_interval_ms)

    if output_path is None:
        DEFAULT_SESSION_DIR.mkdir(parents=True, exist_ok=True)
        stamp = datetime.now(UTC).strftime("%Y%m%dT%H%M%SZ")
        output_path = DEFAULT_SESSION_DIR / f"{script_path.stem}_{stamp}.csv"
    else:
        output_path.parent.mkdir(parents=True, exist_ok=True)
    trace.to_csv(output_path, index=False)

    summary = session_summary(trace)
    print(
        f"Replayed {len(commands)} commands over {summary['frames']} frames: "
        f"final {summary['final_display']} ({summary['final_state']}), "
        f"{summary['dings']} ding(s), {summary['rejections']} rejected"
    )
    print(f"Wrote trace to: {output_path}")
    return output_path


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Replay a scripted microwave timer session and write the frame trace."
    )
    parser.add_argument(
        "script",
        help="Script file with '<at_ms> <command> [duration_ms]' lines.",
    )
    parser.add_argument(
        "--until-ms",
        type=int,
        required=True,
        help="Last host clock timestamp to sample, in milliseconds.",
    )
    parser.add_argument(
        "--frame-interval-ms",
        type=int,
        default=DEFAULT_SETTINGS.frame_interval_ms,
        help="Spacing between sampled frames in milliseconds.",
    )
    parser.add_argument(
        "--output",
        default=None,
        help="CSV path for the trace. Defaults to a timestamped file under data/processed/sessions.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log every timer transition.",
    )
    return parser


def main() -> None:
    parser = _build_parser()
    args = parser.parse_args()
    configure_logging(logging.DEBUG if args.verbose else logging.WARNING)

    replay_script(
        script_path=Path(args.script),
        until_ms=args.until_ms,
        frame_interval_ms=args.frame_interval_ms,
        output_path=Path(args.output) if args.output else None,
    )


if __name__ == "__main__":
    main()
