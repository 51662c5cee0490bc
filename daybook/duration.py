from __future__ import annotations

import time

from .models import ActivityLog, ClosedPause


def now_ms() -> int:
    return time.time_ns() // 1_000_000


def paused_span(log: ActivityLog, now: int) -> int:
    total = 0
    for interval in log.pause_intervals:
        if isinstance(interval, ClosedPause):
            total += interval.resumed_at - interval.paused_at
        else:
            total += now - interval.paused_at
    return total


def calculate_accumulated_duration(log: ActivityLog, now: int | None = None) -> int:
    """Return elapsed milliseconds since the log started, net of every pause.

    An open trailing pause counts up to ``now``, so the value stays constant while paused. Both the
    live timer and the final duration written at stop go through here.
    """
    current = now if now is not None else now_ms()
    return max(0, current - log.start_time - paused_span(log, current))


def format_duration(milliseconds: int) -> str:
    """Render a duration as HH:MM:SS, flooring to whole seconds."""
    safe_seconds = max(0, int(milliseconds) // 1000)
    hours, remainder = divmod(safe_seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    return f"{hours:02}:{minutes:02}:{seconds:02}"
