"""Wall-clock helpers and the free-slot generator used by appointment booking.

Times travel through the API as ``"HH:MM"`` strings and are compared as
minutes since midnight. ``24:00`` is accepted as the end-of-day sentinel so a
booking that ends at midnight can be stored and read back.
"""
import re
from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Optional

DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]

BLOCKING_STATUSES = ("scheduled", "confirmed")

_TIME_RE = re.compile(r"^([0-9]{1,2}):([0-9]{2})$")


def time_to_minutes(value: str) -> int:
    """Parse ``"HH:MM"`` into minutes since midnight.

    Raises ValueError for anything that is not a wall-clock time.
    """
    if not isinstance(value, str):
        raise ValueError(f"Invalid time value: {value!r}")
    match = _TIME_RE.match(value.strip())
    if not match:
        raise ValueError(f"Invalid time format: {value!r}. Use HH:MM")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if minutes > 59 or hours > 24 or (hours == 24 and minutes != 0):
        raise ValueError(f"Time out of range: {value!r}")
    return hours * 60 + minutes


def minutes_to_time(minutes: int) -> str:
    hours, mins = divmod(minutes, 60)
    return f"{hours:02d}:{mins:02d}"


def normalize_time(value: str) -> str:
    """Return the zero-padded form of a valid time string."""
    return minutes_to_time(time_to_minutes(value))


def day_of_week(day: date) -> int:
    # 0 = Sunday .. 6 = Saturday
    return (day.weekday() + 1) % 7


def day_name(dow: int) -> str:
    return DAY_NAMES[dow]


def intervals_overlap(start_a: int, end_a: int, start_b: int, end_b: int) -> bool:
    # Half-open intervals: touching edges do not overlap
    return start_a < end_b and end_a > start_b


@dataclass
class Slot:
    start_time: str
    end_time: str
    day_name: Optional[str]


def generate_slots(windows: Iterable, booked: Iterable, duration: int = 60) -> List[Slot]:
    """Split availability windows into fixed-length slots not overlapping a booking.

    ``windows`` items expose ``start_time``, ``end_time`` and ``day_name``;
    ``booked`` items expose ``start_time`` and ``end_time``. Slots are emitted
    window by window in ascending time. The last slot of a window whose span is
    not a multiple of ``duration`` runs past the window end.
    """
    if duration <= 0:
        raise ValueError("Slot duration must be positive")
    booked_minutes = [(time_to_minutes(b.start_time), time_to_minutes(b.end_time)) for b in booked]

    slots: List[Slot] = []
    for window in windows:
        start = time_to_minutes(window.start_time)
        end = time_to_minutes(window.end_time)
        t = start
        while t < end:
            taken = any(intervals_overlap(t, t + duration, b_start, b_end) for b_start, b_end in booked_minutes)
            if not taken:
                slots.append(Slot(
                    start_time=minutes_to_time(t),
                    end_time=minutes_to_time(t + duration),
                    day_name=getattr(window, "day_name", None),
                ))
            t += duration
    return slots
