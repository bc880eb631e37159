"""Split service: the host-facing entry point.

Wires the pure scheduling functions to a SplitStore. The service keeps a
cached copy of the collection and only replaces it after a successful
write, so a failed save leaves both storage and memory as they were.
"""
from dataclasses import replace
from pathlib import Path
from typing import Callable, Iterable

from loguru import logger

from ..collection import (
    add_split,
    create_split,
    delete_split,
    find_split,
    get_active_split,
    set_active_split,
    update_split,
)
from ..models import Split, SplitDay, make_days, renumber_days, validate_split
from ..schedule import (
    Clock,
    SystemClock,
    advance_to_next_day,
    auto_advance,
    get_todays_workout,
    go_to_previous_day,
    is_today_holiday,
    now_iso,
    reset_split,
    today,
)
from ..types import SplitNotFoundError, TodayStatus
from .store import SplitStore

logger = logger.bind(module="scheduler.service")


async def auto_advance_split_if_needed(
    split: Split,
    store: SplitStore,
    clock: Clock | None = None,
) -> Split:
    """Advance the split for the days elapsed since the last access.

    Reads the access cursor, applies auto_advance and writes the cursor back
    when a new day has begun. Never raises: on any failure the original
    split is returned unchanged.
    """
    try:
        last_access = await store.load_last_access_date()
        result = auto_advance(split, last_access, today(clock), clock)

        if result.cursor_changed:
            await store.save_last_access_date(result.new_last_access_date)

        if result.advanced:
            logger.info(
                f"Auto-advanced split {split.id} by {result.steps_applied} day(s) "
                f"over {result.days_passed} calendar day(s)"
            )
        return result.split

    except Exception as e:
        logger.error(f"Auto-advance failed for split {split.id}: {e}")
        return split


class SplitService:
    """Manages the split collection for a single user."""

    def __init__(self, store: SplitStore, clock: Clock | None = None):
        """Initialize service.

        Args:
            store: Persistence for splits and the access cursor
            clock: Local time source, defaults to the system clock
        """
        self.store = store
        self.clock = clock or SystemClock()
        self._splits: list[Split] = []

    @property
    def splits(self) -> list[Split]:
        return list(self._splits)

    @property
    def active_split(self) -> Split | None:
        return get_active_split(self._splits)

    async def load(self) -> list[Split]:
        """Reload the collection from storage."""
        self._splits = await self.store.load_splits()
        return self.splits

    async def _commit(self, splits: list[Split]) -> None:
        await self.store.save_splits(splits)
        self._splits = splits

    def _require(self, split_id: str) -> Split:
        split = find_split(self._splits, split_id)
        if split is None:
            raise SplitNotFoundError(split_id)
        return split

    # ============== Home ==============

    async def resume(self) -> TodayStatus:
        """Handle an app resume: catch up the active split and resolve today.

        The collection is only rewritten when auto-advance moved the day
        index.

        Raises:
            StorageWriteError: if the advanced split cannot be saved
        """
        await self.load()
        active = self.active_split

        if active is not None:
            advanced = await auto_advance_split_if_needed(active, self.store, self.clock)
            if advanced.current_day_index != active.current_day_index:
                await self._commit(update_split(self._splits, advanced))
                active = advanced

        return self.today_status(active)

    def today_status(self, split: Split | None = None) -> TodayStatus:
        split = split if split is not None else self.active_split
        current = today(self.clock)
        if split is None:
            return TodayStatus(today=current)
        return TodayStatus(
            today=current,
            active_split=split,
            workout=get_todays_workout(split, self.clock),
            is_rest_day=is_today_holiday(split.weekly_holidays, self.clock),
        )

    # ============== Manual Transitions ==============

    async def _transition(
        self,
        fn: Callable[[Split, Clock | None], Split],
        split_id: str | None,
    ) -> Split | None:
        await self.load()
        if split_id is None:
            split = self.active_split
            if split is None:
                return None
        else:
            split = self._require(split_id)

        updated = fn(split, self.clock)
        await self._commit(update_split(self._splits, updated))
        return updated

    async def next_day(self, split_id: str | None = None) -> Split | None:
        """Advance a split (default: the active one) by one day."""
        return await self._transition(advance_to_next_day, split_id)

    async def previous_day(self, split_id: str | None = None) -> Split | None:
        """Move a split (default: the active one) back one day."""
        return await self._transition(go_to_previous_day, split_id)

    async def reset(self, split_id: str | None = None) -> Split | None:
        """Put a split (default: the active one) back on day 1."""
        return await self._transition(reset_split, split_id)

    # ============== Collection Management ==============

    async def create(
        self,
        name: str,
        days: Iterable[SplitDay | str],
        weekly_holidays: Iterable[int] = (),
    ) -> Split:
        """Create and store a new split.

        Args:
            name: Split name, trimmed before saving
            days: SplitDay objects or plain muscle group labels
            weekly_holidays: Rest weekdays, 0=Sunday

        Raises:
            SplitValidationError: if the split is not valid
        """
        await self.load()
        split = create_split(name.strip(), _coerce_days(days), weekly_holidays, self.clock)
        validate_split(split)

        await self._commit(add_split(self._splits, split))
        logger.info(f"Created split {split.id}: {split.name}")
        return split

    async def edit(
        self,
        split_id: str,
        name: str | None = None,
        days: Iterable[SplitDay | str] | None = None,
        weekly_holidays: Iterable[int] | None = None,
    ) -> Split:
        """Update a split's name, days or holidays.

        If the new day list is shorter than the current position, the
        index wraps back into the cycle.

        Raises:
            SplitNotFoundError: if no split has this id
            SplitValidationError: if the result is not valid
        """
        await self.load()
        split = self._require(split_id)

        changes: dict = {"last_updated": now_iso(self.clock)}
        if name is not None:
            changes["name"] = name.strip()
        if days is not None:
            new_days = _coerce_days(days)
            changes["days"] = new_days
            if new_days:
                changes["current_day_index"] = split.current_day_index % len(new_days)
        if weekly_holidays is not None:
            changes["weekly_holidays"] = frozenset(weekly_holidays)

        updated = replace(split, **changes)
        validate_split(updated)

        await self._commit(update_split(self._splits, updated))
        logger.info(f"Updated split {split_id}")
        return updated

    async def activate(self, split_id: str) -> Split:
        """Make a split the only active one.

        Raises:
            SplitNotFoundError: if no split has this id
        """
        await self.load()
        self._require(split_id)

        await self._commit(set_active_split(self._splits, split_id))
        logger.info(f"Activated split {split_id}")
        return self._require(split_id)

    async def delete(self, split_id: str) -> bool:
        """Delete a split. Returns False if it did not exist."""
        await self.load()
        if find_split(self._splits, split_id) is None:
            return False

        await self._commit(delete_split(self._splits, split_id))
        logger.info(f"Deleted split {split_id}")
        return True

    # ============== YAML Export/Import ==============

    async def export_yaml(self, path: str | Path) -> Path:
        return await self.store.export_yaml(path)

    async def import_yaml(self, path: str | Path) -> int:
        """Replace the collection with the splits in a YAML file.

        Every split is validated first; only the first active split stays
        active.

        Returns:
            Number of splits imported
        """
        imported = SplitStore.read_yaml(path)
        splits: list[Split] = []
        for split in imported:
            validate_split(split)
            splits = add_split(splits, replace(split, is_active=False))

        active = get_active_split(imported)
        if active is not None:
            splits = set_active_split(splits, active.id)

        await self._commit(splits)
        logger.info(f"Imported {len(splits)} splits from {path}")
        return len(splits)


def _coerce_days(days: Iterable[SplitDay | str]) -> list[SplitDay]:
    items = list(days)
    if all(isinstance(d, str) for d in items):
        return make_days(d.strip() for d in items)
    return renumber_days(
        d if isinstance(d, SplitDay) else SplitDay(day_number=0, muscle_groups=d.strip())
        for d in items
    )
