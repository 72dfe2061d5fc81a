from datetime import date, datetime, timedelta
from typing import List, Union

from services.errors import InvalidRangeError

DayLike = Union[date, str]

# Trip creation pre-fills the end date this far after the start
DEFAULT_TRIP_LENGTH = timedelta(days=7)


def parse_day(value: DayLike) -> date:
    """Coerce a date or a YYYY-MM-DD string into a calendar date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.strptime(value, "%Y-%m-%d").date()


def expand_date_range(start: DayLike, end: DayLike) -> List[str]:
    """Return one YYYY-MM-DD day key per calendar day from start to end, inclusive.

    Arithmetic is on plain dates, so there is no time-of-day or DST drift.
    Index i of the result is day i + 1 of the trip.
    """
    start_day, end_day = parse_day(start), parse_day(end)
    if end_day < start_day:
        raise InvalidRangeError(f"End date {end_day} is before start date {start_day}")
    span = (end_day - start_day).days
    return [(start_day + timedelta(days=offset)).isoformat() for offset in range(span + 1)]


def default_end_date(start: DayLike) -> date:
    return parse_day(start) + DEFAULT_TRIP_LENGTH
