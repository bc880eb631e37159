"""Schedule calculation utilities.

Maps calendar-day progression onto a split's cyclic day index. All day
arithmetic is done on calendar dates, never on elapsed seconds, so DST
shifts cannot produce off-by-one day counts.
"""
from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import AbstractSet, Protocol

from .models import Split
from .types import AutoAdvanceResult, TodaysWorkout


# ============== Clock ==============

class Clock(Protocol):
    """Source of local wall-clock time."""

    def now(self) -> datetime:
        """Return the current local time."""
        ...


class SystemClock:
    """Clock backed by the system's local time."""

    def now(self) -> datetime:
        return datetime.now()


class FixedClock:
    """Clock frozen at a given instant; move it with advance()."""

    def __init__(self, current: datetime):
        self.current = current

    def now(self) -> datetime:
        return self.current

    def advance(self, days: int = 0, **kwargs: float) -> None:
        self.current = self.current + timedelta(days=days, **kwargs)


_system_clock = SystemClock()


def _clock(clock: Clock | None) -> Clock:
    return clock or _system_clock


def now_iso(clock: Clock | None = None) -> str:
    """Get the current local time as ISO-8601."""
    return _clock(clock).now().isoformat()


# ============== Calendar Helpers ==============

def to_local_date(value: date | datetime) -> date:
    """Strip time-of-day, converting aware datetimes to local time first."""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone()
        return value.date()
    return value


def to_midnight(value: date | datetime) -> datetime:
    """Normalize to local midnight (naive)."""
    d = to_local_date(value)
    return datetime(d.year, d.month, d.day)


def today(clock: Clock | None = None) -> date:
    """Get today's local calendar date."""
    return to_local_date(_clock(clock).now())


def days_between(start: date | datetime, end: date | datetime) -> int:
    """Whole calendar days from start to end (negative if end is earlier)."""
    return (to_local_date(end) - to_local_date(start)).days


def js_weekday(value: date | datetime) -> int:
    """Weekday with Sunday=0 ... Saturday=6."""
    return to_local_date(value).isoweekday() % 7


def format_date(value: date | datetime) -> str:
    """Format like 'Saturday, October 17, 2026'."""
    d = to_local_date(value)
    return f"{d.strftime('%A')}, {d.strftime('%B')} {d.day}, {d.year}"


# ============== Holidays ==============

def is_holiday(weekly_holidays: AbstractSet[int], day_of_week: int) -> bool:
    """Check whether a weekday (0=Sunday) is a rest day."""
    return day_of_week in weekly_holidays


def is_today_holiday(weekly_holidays: AbstractSet[int], clock: Clock | None = None) -> bool:
    """Check whether today's weekday is a rest day."""
    return is_holiday(weekly_holidays, js_weekday(today(clock)))


# ============== Day Transitions ==============

def advance_to_next_day(split: Split, clock: Clock | None = None) -> Split:
    """Move to the next day in the cycle, wrapping after the last."""
    return replace(
        split,
        current_day_index=(split.current_day_index + 1) % len(split.days),
        last_updated=now_iso(clock),
    )


def go_to_previous_day(split: Split, clock: Clock | None = None) -> Split:
    """Move back one day, wrapping from the first day to the last."""
    if split.current_day_index == 0:
        prev_index = len(split.days) - 1
    else:
        prev_index = split.current_day_index - 1
    return replace(split, current_day_index=prev_index, last_updated=now_iso(clock))


def reset_split(split: Split, clock: Clock | None = None) -> Split:
    """Go back to day 1."""
    return replace(split, current_day_index=0, last_updated=now_iso(clock))


# ============== Today's Workout ==============

def get_todays_workout(split: Split | None, clock: Clock | None = None) -> TodaysWorkout | None:
    """Resolve what to train today.

    Returns None when there is no split, the split has no days, or today's
    calendar weekday is one of the split's weekly holidays. The holiday check
    looks at today's weekday only, never at which split day is current.
    """
    if split is None or not split.days:
        return None

    if is_today_holiday(split.weekly_holidays, clock):
        return None

    day = split.current_day
    if day is None:
        return None
    return TodaysWorkout(muscle_groups=day.muscle_groups, day_number=day.day_number)


# ============== Auto-Advance ==============

def auto_advance(
    split: Split,
    last_access_date: date | datetime | None,
    current_date: date | datetime,
    clock: Clock | None = None,
) -> AutoAdvanceResult:
    """Catch the split up with the calendar days elapsed since last access.

    Every non-holiday day in (last_access_date, current_date] applies one
    advance_to_next_day. Holidays consume a calendar day without advancing.

    Args:
        split: The active split
        last_access_date: Stored access cursor, None on first run
        current_date: Today
        clock: Clock used to stamp lastUpdated on each step

    Returns:
        AutoAdvanceResult. When no day has elapsed (or the clock went
        backwards) the split is returned as-is and the cursor is unchanged.
    """
    current = to_local_date(current_date)

    if last_access_date is None:
        return AutoAdvanceResult(
            split=split,
            new_last_access_date=current,
            cursor_changed=True,
        )

    last = to_local_date(last_access_date)
    days_passed = days_between(last, current)

    if days_passed <= 0:
        return AutoAdvanceResult(
            split=split,
            new_last_access_date=last,
            days_passed=days_passed,
        )

    working = split
    steps = 0
    for offset in range(1, days_passed + 1):
        day = last + timedelta(days=offset)
        if not is_holiday(split.weekly_holidays, js_weekday(day)):
            working = advance_to_next_day(working, clock)
            steps += 1

    return AutoAdvanceResult(
        split=working,
        new_last_access_date=current,
        days_passed=days_passed,
        steps_applied=steps,
        cursor_changed=True,
    )
