"""Tests for week_planner.planning.types."""

import pytest

from week_planner.planning.types import DayCell, WeekBucket


def test_week_bucket_days_are_read_only():
    bucket = WeekBucket.from_lists(10, [2, 2, 2, 2, 2, 0])
    with pytest.raises(TypeError):
        bucket.days["lundi"] = DayCell(planifie=99)
    assert bucket.planned() == [2, 2, 2, 2, 2, 0]


def test_week_bucket_copies_a_plain_dict():
    days = {"lundi": DayCell(planifie=3)}
    bucket = WeekBucket(objectif=3, days=days)
    days["lundi"] = DayCell(planifie=50)
    assert bucket.planned() == [3, 0, 0, 0, 0, 0]


def test_week_bucket_is_hashable():
    a = WeekBucket.from_lists(5, [1, 1, 1, 1, 1, 0])
    b = WeekBucket.from_lists(5, [1, 1, 1, 1, 1, 0])
    assert a == b
    assert len({a, b}) == 1
    assert a != WeekBucket.from_lists(5, [5, 0, 0, 0, 0, 0])
