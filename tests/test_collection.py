"""Tests for split models and collection operations."""
from datetime import datetime

import pytest

from split_tracker.scheduler.collection import (
    add_split,
    create_split,
    delete_split,
    find_split,
    get_active_split,
    set_active_split,
    update_split,
)
from split_tracker.scheduler.models import (
    Split,
    SplitDay,
    make_days,
    remove_day,
    renumber_days,
    toggle_holiday,
    validate_split,
)
from split_tracker.scheduler.schedule import FixedClock
from split_tracker.scheduler.types import DAYS_OF_WEEK, SplitValidationError


@pytest.fixture
def clock():
    return FixedClock(datetime(2026, 10, 17, 10, 0))


@pytest.fixture
def splits(clock):
    return [
        create_split("Push Pull Legs", make_days(["Push", "Pull", "Legs"]), [0], clock),
        create_split("Upper Lower", make_days(["Upper", "Lower"]), [], clock),
        create_split("Full Body", make_days(["Full"]), [0, 6], clock),
    ]


def _active_count(splits):
    return sum(1 for s in splits if s.is_active)


class TestSplitModel:
    """Tests for Split and SplitDay."""

    def test_create_split_defaults(self, clock):
        split = create_split("PPL", make_days(["Push", "Pull", "Legs"]), [6, 0], clock)

        assert split.id
        assert split.is_active is False
        assert split.current_day_index == 0
        assert split.weekly_holidays == frozenset({0, 6})
        assert split.last_updated == "2026-10-17T10:00:00"
        assert [d.day_number for d in split.days] == [1, 2, 3]

    def test_ids_are_unique(self, splits):
        assert len({s.id for s in splits}) == len(splits)

    def test_to_dict_uses_stored_keys(self, splits):
        data = splits[0].to_dict()

        assert data["name"] == "Push Pull Legs"
        assert data["days"][1] == {"dayNumber": 2, "muscleGroups": "Pull"}
        assert data["weeklyHolidays"] == [0]
        assert data["isActive"] is False
        assert data["currentDayIndex"] == 0
        assert data["lastUpdated"] == "2026-10-17T10:00:00"

    def test_from_dict_wraps_out_of_range_index(self):
        split = Split.from_dict({
            "id": "1",
            "name": "PPL",
            "days": [{"dayNumber": 1, "muscleGroups": "Push"}, {"dayNumber": 2, "muscleGroups": "Pull"}],
            "weeklyHolidays": [6, 0],
            "isActive": True,
            "currentDayIndex": 5,
            "lastUpdated": "2026-10-17T10:00:00.000Z",
        })

        assert split.current_day_index == 1
        assert split.weekly_holidays == frozenset({0, 6})
        assert split.is_active is True
        assert split.current_day == SplitDay(day_number=2, muscle_groups="Pull")

    def test_days_of_week(self):
        assert DAYS_OF_WEEK[0] == "Sunday"
        assert DAYS_OF_WEEK[6] == "Saturday"


class TestDayEditing:
    """Tests for day list helpers."""

    def test_remove_day_renumbers(self):
        days = remove_day(make_days(["Push", "Pull", "Legs"]), 1)
        assert days == [SplitDay(1, "Push"), SplitDay(2, "Legs")]

    def test_cannot_remove_last_day(self):
        with pytest.raises(SplitValidationError):
            remove_day(make_days(["Full"]), 0)

    def test_remove_day_out_of_range(self):
        with pytest.raises(IndexError):
            remove_day(make_days(["Push", "Pull"]), 5)

    def test_renumber_days(self):
        days = renumber_days([SplitDay(4, "A"), SplitDay(9, "B")])
        assert [d.day_number for d in days] == [1, 2]

    def test_toggle_holiday(self):
        holidays = toggle_holiday(frozenset(), 3)
        assert holidays == frozenset({3})
        assert toggle_holiday(holidays, 3) == frozenset()


class TestValidation:
    """Tests for validate_split."""

    def test_valid(self, splits):
        for split in splits:
            validate_split(split)

    @pytest.mark.parametrize(
        "changes, message",
        [
            ({"name": "   "}, "split name"),
            ({"days": []}, "at least one day"),
            ({"days": make_days(["Push", " "])}, "muscle group"),
            ({"weekly_holidays": frozenset({7})}, "between 0 and 6"),
        ],
    )
    def test_invalid(self, changes, message):
        split = Split(id="x", name="PPL", days=make_days(["Push"]))
        for key, value in changes.items():
            setattr(split, key, value)

        with pytest.raises(SplitValidationError, match=message):
            validate_split(split)


class TestCollection:
    """Tests for collection operations."""

    def test_set_active_split(self, splits):
        result = set_active_split(splits, splits[1].id)

        assert _active_count(result) == 1
        assert get_active_split(result).id == splits[1].id
        # Inputs are untouched
        assert _active_count(splits) == 0

    def test_set_active_replaces_previous(self, splits):
        result = set_active_split(set_active_split(splits, splits[0].id), splits[2].id)
        assert _active_count(result) == 1
        assert get_active_split(result).id == splits[2].id

    def test_set_active_unknown_id_deactivates_all(self, splits):
        result = set_active_split(set_active_split(splits, splits[0].id), "missing")
        assert _active_count(result) == 0

    def test_at_most_one_active_through_updates(self, splits, clock):
        result = set_active_split(splits, splits[0].id)
        result = update_split(result, Split.from_dict({**splits[1].to_dict(), "isActive": True}))
        assert _active_count(result) == 1
        assert get_active_split(result).id == splits[1].id

        new = create_split("Bro", make_days(["Chest"]), [], clock)
        new.is_active = True
        result = add_split(result, new)
        assert _active_count(result) == 1
        assert get_active_split(result).id == new.id

    def test_delete_split(self, splits):
        result = delete_split(splits, splits[1].id)
        assert [s.id for s in result] == [splits[0].id, splits[2].id]

    def test_delete_missing_id_is_noop(self, splits):
        result = delete_split(splits, "missing")
        assert result == splits

    def test_update_split(self, splits):
        renamed = Split.from_dict({**splits[0].to_dict(), "name": "PPL v2"})
        result = update_split(splits, renamed)

        assert find_split(result, splits[0].id).name == "PPL v2"
        assert [s.id for s in result] == [s.id for s in splits]

    def test_update_missing_id_is_noop(self, splits):
        result = update_split(splits, Split(id="missing", name="Ghost", days=make_days(["X"])))
        assert result == splits

    def test_add_duplicate_id(self, splits):
        with pytest.raises(ValueError):
            add_split(splits, splits[0])

    def test_get_active_split_none(self, splits):
        assert get_active_split(splits) is None
        assert get_active_split([]) is None
