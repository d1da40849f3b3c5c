import calendar
import datetime
from typing import List, Optional, Union

from dateutil.relativedelta import relativedelta

ISO_DATE_FORMAT = "%Y-%m-%d"


def days_in_month(year: int, month: int) -> int:
    """Number of days in the given month (month is 1-based)."""
    return calendar.monthrange(year, month)[1]


def weekday_index(day: datetime.date) -> int:
    """Sunday-based weekday index (0 = Sunday)."""
    # date.weekday() is Monday-based (0 = Monday)
    return (day.weekday() + 1) % 7


def week_start(day: datetime.date) -> datetime.date:
    """Returns the Sunday on or before `day`."""
    return day - datetime.timedelta(days=weekday_index(day))


def weekdays_in_month(year: int, month: int, weekday: int) -> List[datetime.date]:
    """All dates of the month falling on the given Sunday-based weekday."""
    first = datetime.date(year, month, 1)
    offset = (weekday - weekday_index(first)) % 7
    return [
        datetime.date(year, month, day)
        for day in range(1 + offset, days_in_month(year, month) + 1, 7)
    ]


def nth_weekday_of_month(
    year: int, month: int, week: Union[int, str], weekday: int
) -> Optional[datetime.date]:
    """
    Resolves an ordinal weekday such as "third Tuesday" or "last Friday".

    `week` is 1-based or the string "last". Returns None when the month has
    no such occurrence.
    """
    matching = weekdays_in_month(year, month, weekday)
    if not matching:
        return None
    if week == "last":
        return matching[-1]
    if not isinstance(week, int) or week < 1 or week > len(matching):
        return None
    return matching[week - 1]


def first_of_month(day: datetime.date) -> datetime.date:
    return day.replace(day=1)


def add_months(day: datetime.date, months: int) -> datetime.date:
    """Calendar month arithmetic, clamped to the target month's length."""
    return day + relativedelta(months=months)


def add_years(day: datetime.date, years: int) -> datetime.date:
    """Calendar year arithmetic; Feb 29 clamps to Feb 28 in common years."""
    return day + relativedelta(years=years)


def to_iso(day: datetime.date) -> str:
    return day.strftime(ISO_DATE_FORMAT)


def parse_iso(value: str) -> datetime.date:
    """Parses a `YYYY-MM-DD` string. Raises ValueError on bad input."""
    return datetime.datetime.strptime(value.strip(), ISO_DATE_FORMAT).date()
