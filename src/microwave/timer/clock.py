from __future__ import annotations

import time


def monotonic_ms() -> int:
    """Host clock in whole milliseconds; non-decreasing within one process."""
    return time.monotonic_ns() // 1_000_000


__all__ = ["monotonic_ms"]
