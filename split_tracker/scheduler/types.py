"""Core type definitions for the split scheduler.

This module defines:
- Weekday constants (0=Sunday, matching the stored holiday sets)
- Result types returned by the resolver and the auto-advance scheduler
- Errors raised across the package
"""
from dataclasses import dataclass
from datetime import date
from enum import IntEnum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .models import Split


# ============== Weekdays ==============

class Weekday(IntEnum):
    """Calendar weekday, Sunday first."""
    SUNDAY = 0
    MONDAY = 1
    TUESDAY = 2
    WEDNESDAY = 3
    THURSDAY = 4
    FRIDAY = 5
    SATURDAY = 6

    @property
    def label(self) -> str:
        return self.name.capitalize()


DAYS_OF_WEEK = [d.label for d in Weekday]


# ============== Errors ==============

class SplitValidationError(ValueError):
    """Raised when a split's content is not acceptable."""


class SplitNotFoundError(KeyError):
    """Raised when an operation targets a split id that is not in the collection."""

    def __init__(self, split_id: str) -> None:
        super().__init__(split_id)
        self.split_id = split_id

    def __str__(self) -> str:
        return f"Split not found: {self.split_id}"


class StorageReadError(RuntimeError):
    """Raised when a stored value cannot be read or parsed."""

    def __init__(self, key: str, cause: BaseException) -> None:
        super().__init__(f"Failed to read {key}: {cause}")
        self.key = key
        self.cause = cause


class StorageWriteError(RuntimeError):
    """Raised when the key-value store rejects a write."""

    def __init__(self, key: str, cause: BaseException) -> None:
        super().__init__(f"Failed to write {key}: {cause}")
        self.key = key
        self.cause = cause


# ============== Result Types ==============

@dataclass(frozen=True)
class TodaysWorkout:
    """The workout to do today."""
    muscle_groups: str
    day_number: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "muscleGroups": self.muscle_groups,
            "dayNumber": self.day_number,
        }


@dataclass
class TodayStatus:
    """What the host shows after a resume."""
    today: date
    active_split: "Split | None" = None
    workout: TodaysWorkout | None = None
    is_rest_day: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "today": self.today.isoformat(),
            "activeSplitId": self.active_split.id if self.active_split else None,
            "workout": self.workout.to_dict() if self.workout else None,
            "isRestDay": self.is_rest_day,
        }


@dataclass
class AutoAdvanceResult:
    """Outcome of reconciling elapsed calendar days with a split.

    new_last_access_date equals the previous cursor when no day elapsed;
    cursor_changed tells the caller whether it needs persisting.
    """
    split: "Split"
    new_last_access_date: date
    days_passed: int = 0
    steps_applied: int = 0
    cursor_changed: bool = False

    @property
    def advanced(self) -> bool:
        return self.steps_applied > 0
