"""Operations on the split collection.

Every function returns a new list; the input list is never mutated.
"""
from dataclasses import replace
from typing import Iterable

from .models import Split, SplitDay, new_split_id
from .schedule import Clock, now_iso


def create_split(
    name: str,
    days: Iterable[SplitDay],
    weekly_holidays: Iterable[int] = (),
    clock: Clock | None = None,
) -> Split:
    """Create a new, inactive split positioned on day 1."""
    return Split(
        id=new_split_id(),
        name=name,
        days=list(days),
        weekly_holidays=frozenset(weekly_holidays),
        is_active=False,
        current_day_index=0,
        last_updated=now_iso(clock),
    )


def get_active_split(splits: list[Split]) -> Split | None:
    """Get the active split, if any."""
    return next((s for s in splits if s.is_active), None)


def find_split(splits: list[Split], split_id: str) -> Split | None:
    """Get a split by id."""
    return next((s for s in splits if s.id == split_id), None)


def _deactivate_others(splits: list[Split], keep_id: str) -> list[Split]:
    return [
        replace(s, is_active=False) if s.is_active and s.id != keep_id else s
        for s in splits
    ]


def add_split(splits: list[Split], split: Split) -> list[Split]:
    """Append a split; its id must be new to the collection."""
    if find_split(splits, split.id) is not None:
        raise ValueError(f"Duplicate split id: {split.id}")
    if split.is_active:
        splits = _deactivate_others(splits, split.id)
    return [*splits, split]


def set_active_split(splits: list[Split], split_id: str) -> list[Split]:
    """Activate one split and deactivate all others."""
    return [replace(s, is_active=s.id == split_id) for s in splits]


def delete_split(splits: list[Split], split_id: str) -> list[Split]:
    """Remove a split; unknown ids are ignored."""
    return [s for s in splits if s.id != split_id]


def update_split(splits: list[Split], updated: Split) -> list[Split]:
    """Replace the split with the same id; unknown ids are ignored.

    An active replacement deactivates every other split.
    """
    if find_split(splits, updated.id) is None:
        return list(splits)
    if updated.is_active:
        splits = _deactivate_others(splits, updated.id)
    return [updated if s.id == updated.id else s for s in splits]
