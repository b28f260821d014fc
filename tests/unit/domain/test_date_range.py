from datetime import datetime, timedelta

import pytest

from app.domain.value_objects.date_range import DateRange


def test_two_full_days_bill_two_days():
    date_range = DateRange(datetime(2025, 6, 1, 10, 0), datetime(2025, 6, 3, 10, 0))

    assert date_range.billable_days == 2
    assert date_range.billable_days * 50000 == 100000


def test_same_day_rental_bills_minimum_one_day():
    date_range = DateRange(datetime(2025, 6, 1, 10, 0), datetime(2025, 6, 1, 13, 0))

    assert date_range.duration == timedelta(hours=3)
    assert date_range.billable_days * 50000 == 50000


def test_partial_day_rounds_up():
    date_range = DateRange(datetime(2025, 6, 1, 10, 0), datetime(2025, 6, 3, 11, 0))

    assert date_range.billable_days == 3


@pytest.mark.parametrize(
    "start,end",
    [
        (datetime(2025, 6, 3), datetime(2025, 6, 1)),
        (datetime(2025, 6, 1), datetime(2025, 6, 1)),
    ],
)
def test_start_must_precede_end(start, end):
    with pytest.raises(ValueError):
        DateRange(start, end)


def test_touching_ranges_do_not_overlap():
    first = DateRange(datetime(2025, 6, 1, 10), datetime(2025, 6, 3, 10))
    second = DateRange(datetime(2025, 6, 3, 10), datetime(2025, 6, 5, 10))

    assert not first.overlaps_with(second)
    assert not second.overlaps_with(first)


def test_overlap_is_symmetric():
    first = DateRange(datetime(2025, 6, 1), datetime(2025, 6, 5))
    second = DateRange(datetime(2025, 6, 3), datetime(2025, 6, 7))

    assert first.overlaps_with(second)
    assert second.overlaps_with(first)


def test_is_within_window():
    date_range = DateRange(datetime(2025, 6, 1), datetime(2025, 6, 5))

    assert date_range.is_within(datetime(2025, 6, 1), datetime(2025, 6, 5))
    assert not date_range.is_within(datetime(2025, 6, 2), datetime(2025, 6, 30))
