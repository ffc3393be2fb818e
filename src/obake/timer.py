"""Elapsed-time helpers for the quiz clock.

Nothing here schedules work. The caller owns the polling loop (e.g. a
one-second interval in the UI) and passes the current time in.
"""

import time
from typing import Callable

from .config import settings
from .models import WireModel

Clock = Callable[[], int]


def system_clock() -> int:
    """Milliseconds since the epoch."""
    return int(time.time() * 1000)


class TimerState(WireModel):
    elapsed_seconds: int
    formatted_time: str
    show_warning: bool


def get_elapsed_seconds(start_time: int, now: int) -> int:
    return max(0, (now - start_time) // 1000)


def format_time(seconds: int) -> str:
    """Format seconds as M:SS; minutes are not wrapped into hours."""
    safe_seconds = max(0, int(seconds))
    minutes, remaining = divmod(safe_seconds, 60)
    return f"{minutes}:{remaining:02d}"


def should_show_warning(elapsed_seconds: int) -> bool:
    return elapsed_seconds >= settings.WARNING_THRESHOLD_SECONDS


def get_timer_state(start_time: int, now: int) -> TimerState:
    elapsed = get_elapsed_seconds(start_time, now)
    return TimerState(
        elapsed_seconds=elapsed,
        formatted_time=format_time(elapsed),
        show_warning=should_show_warning(elapsed),
    )
