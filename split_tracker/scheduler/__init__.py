"""Split scheduling engine."""
from .collection import (
    add_split,
    create_split,
    delete_split,
    find_split,
    get_active_split,
    set_active_split,
    update_split,
)
from .models import Split, SplitDay, make_days, remove_day, renumber_days, toggle_holiday, validate_split
from .schedule import (
    Clock,
    FixedClock,
    SystemClock,
    advance_to_next_day,
    auto_advance,
    format_date,
    get_todays_workout,
    go_to_previous_day,
    is_holiday,
    is_today_holiday,
    reset_split,
)
from .types import (
    DAYS_OF_WEEK,
    AutoAdvanceResult,
    SplitNotFoundError,
    SplitValidationError,
    StorageReadError,
    StorageWriteError,
    TodayStatus,
    TodaysWorkout,
    Weekday,
)

__all__ = [
    "Split",
    "SplitDay",
    "make_days",
    "remove_day",
    "renumber_days",
    "toggle_holiday",
    "validate_split",
    "add_split",
    "create_split",
    "delete_split",
    "find_split",
    "get_active_split",
    "set_active_split",
    "update_split",
    "Clock",
    "FixedClock",
    "SystemClock",
    "advance_to_next_day",
    "auto_advance",
    "format_date",
    "get_todays_workout",
    "go_to_previous_day",
    "is_holiday",
    "is_today_holiday",
    "reset_split",
    "DAYS_OF_WEEK",
    "AutoAdvanceResult",
    "SplitNotFoundError",
    "SplitValidationError",
    "StorageReadError",
    "StorageWriteError",
    "TodayStatus",
    "TodaysWorkout",
    "Weekday",
]
