"""Data models for workout splits."""
import itertools
import time
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Iterable

from .types import SplitValidationError


_last_id_ms = 0


def new_split_id() -> str:
    """Allocate a time-based split id, unique within this process."""
    global _last_id_ms
    now = int(time.time() * 1000)
    _last_id_ms = now if now > _last_id_ms else _last_id_ms + 1
    return str(_last_id_ms)


@dataclass(frozen=True)
class SplitDay:
    """One position in a split's cycle."""
    day_number: int
    muscle_groups: str

    def to_dict(self) -> dict[str, Any]:
        return {"dayNumber": self.day_number, "muscleGroups": self.muscle_groups}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SplitDay":
        return cls(
            day_number=int(data.get("dayNumber", 0)),
            muscle_groups=str(data.get("muscleGroups", "")),
        )


@dataclass
class Split:
    """A named, cyclic, multi-day training program."""
    # Identity
    id: str = field(default_factory=new_split_id)
    name: str = ""

    # Definition
    days: list[SplitDay] = field(default_factory=list)
    weekly_holidays: frozenset[int] = field(default_factory=frozenset)

    # Runtime state
    is_active: bool = False
    current_day_index: int = 0
    last_updated: str = field(default_factory=lambda: datetime.now().isoformat())

    @property
    def current_day(self) -> SplitDay | None:
        if 0 <= self.current_day_index < len(self.days):
            return self.days[self.current_day_index]
        return None

    def to_dict(self) -> dict[str, Any]:
        """Convert to the stored JSON shape."""
        return {
            "id": self.id,
            "name": self.name,
            "days": [d.to_dict() for d in self.days],
            "weeklyHolidays": sorted(self.weekly_holidays),
            "isActive": self.is_active,
            "currentDayIndex": self.current_day_index,
            "lastUpdated": self.last_updated,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Split":
        """Create from the stored JSON shape.

        An out-of-range currentDayIndex is wrapped back into the cycle.
        """
        days = [SplitDay.from_dict(d) for d in data.get("days") or []]
        index = int(data.get("currentDayIndex", 0) or 0)
        if days:
            index %= len(days)
        else:
            index = 0

        return cls(
            id=str(data["id"]),
            name=str(data.get("name", "")),
            days=days,
            weekly_holidays=frozenset(int(h) for h in data.get("weeklyHolidays") or []),
            is_active=bool(data.get("isActive", False)),
            current_day_index=index,
            last_updated=str(data.get("lastUpdated") or datetime.now().isoformat()),
        )


# ============== Construction & Editing ==============

def make_days(muscle_groups: Iterable[str]) -> list[SplitDay]:
    """Build a numbered day list from muscle group labels."""
    return [SplitDay(day_number=i + 1, muscle_groups=mg) for i, mg in enumerate(muscle_groups)]


def renumber_days(days: Iterable[SplitDay]) -> list[SplitDay]:
    """Restore dayNumber == position + 1."""
    return [replace(d, day_number=i) for i, d in zip(itertools.count(1), days)]


def remove_day(days: list[SplitDay], index: int) -> list[SplitDay]:
    """Remove the day at index and renumber the rest."""
    if len(days) <= 1:
        raise SplitValidationError("A split must have at least one day")
    if not 0 <= index < len(days):
        raise IndexError(f"Day index out of range: {index}")
    return renumber_days(d for i, d in enumerate(days) if i != index)


def toggle_holiday(weekly_holidays: frozenset[int], day_of_week: int) -> frozenset[int]:
    """Add or remove a weekday from the holiday set."""
    if day_of_week in weekly_holidays:
        return weekly_holidays - {day_of_week}
    return weekly_holidays | {day_of_week}


def validate_split(split: Split) -> None:
    """Check a split before it is saved.

    Raises:
        SplitValidationError: naming the first problem found
    """
    if not split.name.strip():
        raise SplitValidationError("Please enter a split name")
    if not split.days:
        raise SplitValidationError("A split must have at least one day")
    if any(not d.muscle_groups.strip() for d in split.days):
        raise SplitValidationError("Please fill in all muscle group fields")
    bad = sorted(h for h in split.weekly_holidays if not 0 <= h <= 6)
    if bad:
        raise SplitValidationError(f"Weekly holidays must be between 0 and 6: {bad}")
    if not 0 <= split.current_day_index < len(split.days):
        raise SplitValidationError(
            f"Current day index {split.current_day_index} is outside 0..{len(split.days) - 1}"
        )
