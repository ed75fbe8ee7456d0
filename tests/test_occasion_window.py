"""Pure date-window helpers behind the occasion finder."""
from __future__ import annotations

import datetime as dt

import pytest

from app.services.reminders.occasions import (
    falls_within_window,
    next_occurrence,
    observed_on,
    occasion_window,
)


def test_window_is_inclusive_on_both_ends():
    window = occasion_window(dt.date(2025, 6, 10), 7)
    assert window[0] == dt.date(2025, 6, 10)
    assert window[-1] == dt.date(2025, 6, 17)
    assert len(window) == 8


def test_zero_day_window_is_just_today():
    assert occasion_window(dt.date(2025, 3, 1), 0) == [dt.date(2025, 3, 1)]


def test_negative_window_rejected():
    with pytest.raises(ValueError):
        occasion_window(dt.date(2025, 3, 1), -1)


def test_year_boundary_from_dec_30():
    as_of = dt.date(2025, 12, 30)
    for day in range(1, 7):
        assert falls_within_window(dt.date(1990, 1, day), as_of, 7)
    assert falls_within_window(dt.date(1990, 12, 30), as_of, 7)
    assert falls_within_window(dt.date(1990, 12, 31), as_of, 7)
    assert not falls_within_window(dt.date(1990, 12, 29), as_of, 7)
    assert not falls_within_window(dt.date(1990, 1, 7), as_of, 7)


def test_year_boundary_from_dec_28_includes_jan_1_to_4():
    as_of = dt.date(2025, 12, 28)
    included = [d for d in range(1, 10) if falls_within_window(dt.date(2000, 1, d), as_of, 7)]
    assert included == [1, 2, 3, 4]


def test_next_occurrence_rolls_into_next_year():
    assert next_occurrence(dt.date(1985, 1, 3), dt.date(2025, 12, 30)) == dt.date(2026, 1, 3)
    assert next_occurrence(dt.date(1985, 12, 31), dt.date(2025, 12, 30)) == dt.date(2025, 12, 31)


def test_occasion_today_is_today():
    as_of = dt.date(2025, 6, 10)
    assert next_occurrence(dt.date(1970, 6, 10), as_of) == as_of
    assert falls_within_window(dt.date(1970, 6, 10), as_of, 0)


def test_leap_day_observed_on_feb_28_in_common_years():
    leap_birthday = dt.date(2000, 2, 29)
    assert observed_on(leap_birthday, 2025) == dt.date(2025, 2, 28)
    assert observed_on(leap_birthday, 2028) == dt.date(2028, 2, 29)
    assert falls_within_window(leap_birthday, dt.date(2025, 2, 25), 3)
    assert not falls_within_window(leap_birthday, dt.date(2025, 3, 1), 7)
