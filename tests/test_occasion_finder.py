from __future__ import annotations

import datetime as dt

import pytest

from app.core.exceptions import InvalidOccasionTypeError
from app.models import models
from app.services.reminders import OccasionFinder, falls_within_window


def _names(customers):
    return [c.name for c in customers]


def test_finds_birthdays_inside_window(db_session, make_salon, make_customer, today):
    salon = make_salon()
    make_customer(salon, name="Today", birthday=dt.date(1990, 6, 10))
    make_customer(salon, name="InThree", birthday=dt.date(1985, 6, 13))
    make_customer(salon, name="LastDay", birthday=dt.date(1979, 6, 17))
    make_customer(salon, name="TooLate", birthday=dt.date(1979, 6, 18))
    make_customer(salon, name="Yesterday", birthday=dt.date(1979, 6, 9))
    make_customer(salon, name="NoBirthday")

    found = OccasionFinder(db_session).find_upcoming(salon.id, "birthday", today, 7)

    assert _names(found) == ["Today", "InThree", "LastDay"]


def test_excludes_inactive_customers_and_other_salons(db_session, make_salon, make_customer, today):
    salon = make_salon()
    other = make_salon(name="Other Salon")
    make_customer(salon, name="Active", birthday=dt.date(1990, 6, 12))
    make_customer(salon, name="Inactive", birthday=dt.date(1990, 6, 12), is_active=False)
    make_customer(other, name="Elsewhere", birthday=dt.date(1990, 6, 12))

    found = OccasionFinder(db_session).find_upcoming(salon.id, models.OccasionType.BIRTHDAY, today, 7)

    assert _names(found) == ["Active"]


def test_anniversary_uses_its_own_column(db_session, make_salon, make_customer, today):
    salon = make_salon()
    make_customer(salon, name="Married", anniversary=dt.date(2015, 6, 11))
    make_customer(salon, name="BirthdayOnly", birthday=dt.date(1990, 6, 11))

    finder = OccasionFinder(db_session)

    assert _names(finder.find_upcoming(salon.id, "anniversary", today, 7)) == ["Married"]
    assert _names(finder.find_upcoming(salon.id, "birthday", today, 7)) == ["BirthdayOnly"]


def test_window_crossing_new_year(db_session, make_salon, make_customer):
    salon = make_salon()
    make_customer(salon, name="Dec29", birthday=dt.date(1990, 12, 29))
    make_customer(salon, name="Dec31", birthday=dt.date(1990, 12, 31))
    make_customer(salon, name="Jan1", birthday=dt.date(1990, 1, 1))
    make_customer(salon, name="Jan6", birthday=dt.date(1990, 1, 6))
    make_customer(salon, name="Jan7", birthday=dt.date(1990, 1, 7))

    found = OccasionFinder(db_session).find_upcoming(salon.id, "birthday", dt.date(2025, 12, 30), 7)

    assert _names(found) == ["Dec31", "Jan1", "Jan6"]


def test_results_sorted_by_customer_id(db_session, make_salon, make_customer, today):
    salon = make_salon()
    first = make_customer(salon, name="Zed", birthday=dt.date(1990, 6, 15))
    second = make_customer(salon, name="Abe", birthday=dt.date(1990, 6, 11))

    found = OccasionFinder(db_session).find_upcoming(salon.id, "birthday", today, 7)

    assert [c.id for c in found] == sorted([first.id, second.id])


def test_leap_day_birthday_found_on_feb_28(db_session, make_salon, make_customer):
    salon = make_salon()
    make_customer(salon, name="Leapling", birthday=dt.date(2000, 2, 29))

    found = OccasionFinder(db_session).find_upcoming(salon.id, "birthday", dt.date(2025, 2, 28), 0)

    assert _names(found) == ["Leapling"]


def test_full_year_window_returns_everyone_with_a_date(db_session, make_salon, make_customer, today):
    salon = make_salon()
    make_customer(salon, name="A", birthday=dt.date(1990, 1, 1))
    make_customer(salon, name="B", birthday=dt.date(1990, 9, 30))
    make_customer(salon, name="C")

    found = OccasionFinder(db_session).find_upcoming(salon.id, "birthday", today, 366)

    assert _names(found) == ["A", "B"]


def test_unknown_occasion_type_rejected(db_session, make_salon, today):
    salon = make_salon()
    with pytest.raises(InvalidOccasionTypeError):
        OccasionFinder(db_session).find_upcoming(salon.id, "graduation", today, 7)


@pytest.mark.parametrize(
    "as_of, window_days",
    [
        (dt.date(2025, 12, 28), 7),
        (dt.date(2025, 12, 31), 0),
        (dt.date(2025, 2, 25), 3),
        (dt.date(2025, 2, 28), 0),
        (dt.date(2028, 2, 28), 1),
        (dt.date(2028, 3, 1), 7),
    ],
)
def test_query_agrees_with_pure_window_check(db_session, make_salon, make_customer, as_of, window_days):
    salon = make_salon()
    dates = [
        dt.date(1990, 12, 27),
        dt.date(1990, 12, 28),
        dt.date(1990, 12, 31),
        dt.date(1991, 1, 1),
        dt.date(1991, 1, 4),
        dt.date(1991, 1, 5),
        dt.date(1990, 2, 27),
        dt.date(1990, 2, 28),
        dt.date(2000, 2, 29),
        dt.date(1990, 3, 1),
        dt.date(1990, 3, 8),
        dt.date(1990, 3, 9),
    ]
    for day in dates:
        make_customer(salon, name=day.isoformat(), birthday=day)

    found = OccasionFinder(db_session).find_upcoming(salon.id, "birthday", as_of, window_days)

    expected = [day.isoformat() for day in dates if falls_within_window(day, as_of, window_days)]
    assert _names(found) == expected
