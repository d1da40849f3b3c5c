import datetime
import logging
from dataclasses import dataclass
from typing import List, Optional, Set

from .calendar_math import (
    add_months,
    add_years,
    days_in_month,
    first_of_month,
    nth_weekday_of_month,
    to_iso,
    week_start,
    weekday_index,
)
from .settings import (
    DayOverflow,
    Frequency,
    MonthlyType,
    RecurringSettings,
    coerce_frequency,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_ITERATIONS = 2000
DEFAULT_HORIZON_YEARS = 5


class IterationCapExceeded(RuntimeError):
    """Raised in strict mode when expansion would be truncated by the cap."""

    def __init__(self, max_iterations: int, partial: List[str]):
        super().__init__(
            f"Recurrence expansion stopped after {max_iterations} iterations "
            f"with {len(partial)} dates collected"
        )
        self.max_iterations = max_iterations
        self.partial = partial


@dataclass(frozen=True)
class ExpansionResult:
    dates: List[str]
    iterations: int
    truncated: bool
    effective_end: Optional[datetime.date]


def resolve_day(
    year: int, month: int, day: int, overflow: DayOverflow
) -> Optional[datetime.date]:
    """
    Builds (year, month, day), applying `overflow` when the month is too short.
    """
    last = days_in_month(year, month)
    if day <= last:
        return datetime.date(year, month, day)
    if overflow is DayOverflow.SKIP:
        return None
    if overflow is DayOverflow.ROLLOVER:
        return datetime.date(year, month, last) + datetime.timedelta(days=day - last)
    return datetime.date(year, month, last)


class RecurrenceExpander:
    """
    Expands a RecurringSettings value into the concrete dates it denotes.

    The walk is bounded by the effective end date and by a hard iteration cap,
    so it always terminates. Instances hold only configuration and are safe to
    share.
    """

    def __init__(
        self,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
        horizon_years: int = DEFAULT_HORIZON_YEARS,
        day_overflow: DayOverflow = DayOverflow.CLAMP,
    ):
        self._max_iterations = max_iterations
        self._horizon_years = horizon_years
        self._day_overflow = DayOverflow(day_overflow)

    def effective_end(self, settings: RecurringSettings) -> Optional[datetime.date]:
        if not settings.start_date:
            return None
        if settings.end_date:
            return settings.end_date
        try:
            return datetime.date(settings.start_date.year + self._horizon_years, 1, 1)
        except ValueError:
            return datetime.date.max

    def expand(self, settings: RecurringSettings, strict: bool = False) -> List[str]:
        """Sorted, unique ISO dates for `settings`."""
        result = self.expand_with_diagnostics(settings)
        if strict and result.truncated:
            raise IterationCapExceeded(self._max_iterations, result.dates)
        return result.dates

    def expand_with_diagnostics(self, settings: RecurringSettings) -> ExpansionResult:
        start = settings.start_date
        end = self.effective_end(settings)
        if not start or not end:
            return ExpansionResult([], 0, False, None)

        frequency = coerce_frequency(settings.frequency)
        if not isinstance(frequency, Frequency):
            logger.warning(f"Unsupported frequency {frequency!r}, nothing to expand.")
            return ExpansionResult([], 0, False, end)

        dates: Set[str] = set()
        cursor = start
        iterations = 0
        out_of_range = False

        while cursor <= end and iterations < self._max_iterations:
            iterations += 1
            try:
                cursor = self._step(frequency, settings, cursor, end, dates, iterations == 1)
            except (OverflowError, ValueError):
                # The next cursor lies outside the supported date range
                logger.debug(f"Recurrence walk left the date range after {to_iso(cursor)}")
                out_of_range = True
                break

        truncated = (
            not out_of_range and cursor <= end and iterations >= self._max_iterations
        )
        if truncated:
            logger.warning(
                f"Recurrence expansion hit the {self._max_iterations} iteration cap "
                f"before {to_iso(end)}; returning {len(dates)} dates."
            )
        return ExpansionResult(sorted(dates), iterations, truncated, end)

    def _step(
        self,
        frequency: Frequency,
        settings: RecurringSettings,
        cursor: datetime.date,
        end: datetime.date,
        dates: Set[str],
        first: bool,
    ) -> datetime.date:
        """Collects the dates of one period into `dates` and returns the next cursor."""
        start = settings.start_date

        if frequency == Frequency.DAILY:
            dates.add(to_iso(cursor))
            return cursor + datetime.timedelta(days=settings.interval)

        if frequency == Frequency.WEEKLY:
            if first:
                cursor = week_start(start)
            for _ in range(7):
                if weekday_index(cursor) in settings.weekly_days and start <= cursor <= end:
                    dates.add(to_iso(cursor))
                cursor += datetime.timedelta(days=1)
            return cursor + datetime.timedelta(days=(settings.interval - 1) * 7)

        if frequency == Frequency.MONTHLY:
            if settings.monthly_type == MonthlyType.ON_THE:
                candidate = nth_weekday_of_month(
                    cursor.year,
                    cursor.month,
                    settings.monthly_on_the.week,
                    settings.monthly_on_the.day,
                )
            else:
                candidate = resolve_day(
                    cursor.year,
                    cursor.month,
                    settings.monthly_on_day,
                    self._day_overflow,
                )
            if candidate and start <= candidate <= end:
                dates.add(to_iso(candidate))
            return add_months(first_of_month(cursor), settings.interval)

        # Yearly
        candidate = resolve_day(cursor.year, start.month, start.day, self._day_overflow)
        if candidate and start <= candidate <= end:
            dates.add(to_iso(candidate))
        return add_years(cursor, settings.interval)


_default_expander = RecurrenceExpander()


def expand(settings: RecurringSettings, strict: bool = False) -> List[str]:
    """Expands `settings` with the default cap, horizon and overflow policy."""
    return _default_expander.expand(settings, strict=strict)
