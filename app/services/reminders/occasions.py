"""Upcoming birthday / anniversary lookup.

Occasions recur every year, so the look-ahead window is evaluated on
month/day only. The window itself is a plain function (``occasion_window``)
so the year-wrap and leap-day behaviour can be tested without a database; the
SQL filter is derived from the same list of dates.
"""
from __future__ import annotations

import calendar
import datetime as dt
import logging
from collections import defaultdict
from collections.abc import Iterable

from sqlalchemy import and_, extract, or_
from sqlalchemy.orm import Session
from sqlalchemy.sql.elements import ColumnElement

from app.core.exceptions import InvalidOccasionTypeError
from app.models import models

logger = logging.getLogger(__name__)

# A window this long covers every calendar day, leap years included.
FULL_YEAR_DAYS = 366


def parse_occasion_type(value: str | models.OccasionType) -> models.OccasionType:
    try:
        return models.OccasionType(value)
    except ValueError:
        raise InvalidOccasionTypeError(str(value)) from None


def occasion_window(as_of: dt.date, window_days: int) -> list[dt.date]:
    """Concrete dates from ``as_of`` to ``as_of + window_days``, both inclusive."""
    if window_days < 0:
        raise ValueError("window_days must be >= 0")
    return [as_of + dt.timedelta(days=offset) for offset in range(window_days + 1)]


def observed_on(occasion: dt.date, year: int) -> dt.date:
    """The date an occasion is observed in ``year``.

    Feb 29 occasions fall back to Feb 28 outside leap years.
    """
    if occasion.month == 2 and occasion.day == 29 and not calendar.isleap(year):
        return dt.date(year, 2, 28)
    return occasion.replace(year=year)


def next_occurrence(occasion: dt.date, as_of: dt.date) -> dt.date:
    """First observed date of ``occasion`` on or after ``as_of``."""
    candidate = observed_on(occasion, as_of.year)
    if candidate < as_of:
        candidate = observed_on(occasion, as_of.year + 1)
    return candidate


def falls_within_window(occasion: dt.date, as_of: dt.date, window_days: int) -> bool:
    if window_days < 0:
        raise ValueError("window_days must be >= 0")
    return (next_occurrence(occasion, as_of) - as_of).days <= window_days


def _month_days(dates: Iterable[dt.date]) -> dict[int, set[int]]:
    by_month: dict[int, set[int]] = defaultdict(set)
    for day in dates:
        by_month[day.month].add(day.day)
        # Leap-day occasions are observed on Feb 28 in common years.
        if day.month == 2 and day.day == 28 and not calendar.isleap(day.year):
            by_month[2].add(29)
    return by_month


def window_clause(column, as_of: dt.date, window_days: int) -> ColumnElement[bool]:
    """SQL predicate matching ``column`` month/day against the window."""
    by_month = _month_days(occasion_window(as_of, window_days))
    return or_(
        *(
            and_(extract("month", column) == month, extract("day", column).in_(sorted(days)))
            for month, days in sorted(by_month.items())
        )
    )


class OccasionFinder:
    def __init__(self, db: Session) -> None:
        self.db = db

    def find_upcoming(
        self,
        salon_id: int,
        occasion_type: str | models.OccasionType,
        as_of: dt.date,
        window_days: int,
    ) -> list[models.Customer]:
        """Active customers of ``salon_id`` whose occasion falls in ``[as_of, as_of + window_days]``.

        Sorted by customer id.
        """
        occasion = parse_occasion_type(occasion_type)
        if window_days < 0:
            raise ValueError("window_days must be >= 0")
        column = getattr(models.Customer, occasion.customer_field)

        query = self.db.query(models.Customer).filter(
            models.Customer.salon_id == salon_id,
            models.Customer.is_active.is_(True),
            column.isnot(None),
        )
        if window_days < FULL_YEAR_DAYS:
            query = query.filter(window_clause(column, as_of, window_days))

        customers = query.order_by(models.Customer.id).all()
        logger.debug(
            "Salon %s: %d customer(s) with %s between %s and %s",
            salon_id,
            len(customers),
            occasion.value,
            as_of,
            as_of + dt.timedelta(days=window_days),
        )
        return customers
