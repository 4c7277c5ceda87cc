from __future__ import annotations


def format_time(ms: int) -> str:
    """Format a duration in milliseconds as ``MM:SS.mmm``.

    Minutes are zero-padded to two digits but never wrap into hours, so
    one hour renders as ``60:00.000``. Every field is truncated, never rounded.
    ``ms`` must be non-negative; negative input is not checked.
    """
    ms = int(ms)
    minutes = ms // 60_000
    seconds = (ms // 1000) % 60
    millis = ms % 1000
    return f"{minutes:02d}:{seconds:02d}.{millis:03d}"


__all__ = ["format_time"]
