import datetime
import enum
import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, FrozenSet, Iterable, Mapping, Optional, Union

from .calendar_math import parse_iso, to_iso, weekday_index

logger = logging.getLogger(__name__)


class InvalidSettingsError(ValueError):
    """Raised when a settings document cannot be turned into RecurringSettings."""


class Frequency(str, enum.Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class MonthlyType(str, enum.Enum):
    ON_DAY = "onDay"
    ON_THE = "onThe"


class DayOverflow(str, enum.Enum):
    """What to do when a day-of-month does not exist in the target month."""

    CLAMP = "clamp"  # use the month's last day
    SKIP = "skip"  # the month contributes nothing
    ROLLOVER = "rollover"  # carry the excess days into the next month


ORDINAL_WEEKS = (1, 2, 3, 4, "last")
WORKING_WEEK = frozenset({1, 2, 3, 4, 5})


@dataclass(frozen=True)
class MonthlyOnThe:
    week: Union[int, str] = 1
    day: int = 0


@dataclass(frozen=True)
class RecurringSettings:
    """Immutable recurrence rule. Build new values with `dataclasses.replace`."""

    frequency: Union[Frequency, str] = Frequency.DAILY
    interval: int = 1
    weekly_days: FrozenSet[int] = field(default_factory=lambda: WORKING_WEEK)
    monthly_type: MonthlyType = MonthlyType.ON_DAY
    monthly_on_day: int = 1
    monthly_on_the: MonthlyOnThe = field(default_factory=MonthlyOnThe)
    start_date: Optional[datetime.date] = None
    end_date: Optional[datetime.date] = None


def default_settings(today: Optional[datetime.date] = None) -> RecurringSettings:
    """Daily, Monday to Friday selected, starting today with no end date."""
    today = today or datetime.date.today()
    return RecurringSettings(
        frequency=Frequency.DAILY,
        interval=1,
        weekly_days=WORKING_WEEK,
        monthly_type=MonthlyType.ON_DAY,
        monthly_on_day=today.day,
        monthly_on_the=MonthlyOnThe(week=1, day=weekday_index(today)),
        start_date=today,
        end_date=None,
    )


# --- Clamping helpers (shared by parsing and the editing session) ---


def clamp_interval(value: Any) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return 1
    return max(1, number or 1)


def clamp_month_day(value: Any) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return 1
    return min(31, max(1, number))


def coerce_week(value: Any) -> Union[int, str]:
    if isinstance(value, str) and value.strip().lower() == "last":
        return "last"
    try:
        number = int(value)
    except (TypeError, ValueError):
        logger.warning(f"Invalid ordinal week {value!r}, using 1.")
        return 1
    if number not in ORDINAL_WEEKS:
        logger.warning(f"Ordinal week {number} out of range, using 1.")
        return 1
    return number


def coerce_weekday(value: Any, default: int = 0) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if 0 <= number <= 6 else default


def coerce_weekly_days(value: Any) -> FrozenSet[int]:
    """
    Accepts either a list of weekday indices or the `{index: bool}` mapping
    used by saved documents. Indices outside 0..6 are dropped.
    """
    if value is None:
        return frozenset()
    if isinstance(value, Mapping):
        candidates: Iterable[Any] = [k for k, selected in value.items() if selected]
    else:
        candidates = value
    days = set()
    for candidate in candidates:
        try:
            index = int(candidate)
        except (TypeError, ValueError):
            logger.warning(f"Ignoring invalid weekday {candidate!r}")
            continue
        if 0 <= index <= 6:
            days.add(index)
        else:
            logger.warning(f"Ignoring weekday {index} outside 0..6")
    return frozenset(days)


def coerce_frequency(value: Any) -> Union[Frequency, str]:
    """Known frequencies become enum members; anything else is kept verbatim."""
    if isinstance(value, Frequency):
        return value
    try:
        return Frequency(str(value).strip().lower())
    except ValueError:
        logger.warning(f"Unsupported frequency {value!r}")
        return str(value)


def coerce_monthly_type(value: Any) -> MonthlyType:
    if isinstance(value, MonthlyType):
        return value
    try:
        return MonthlyType(value)
    except ValueError:
        logger.warning(f"Unknown monthly type {value!r}, using onDay.")
        return MonthlyType.ON_DAY


def coerce_date(value: Any, key: str) -> Optional[datetime.date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    if isinstance(value, str):
        try:
            return parse_iso(value)
        except ValueError as e:
            raise InvalidSettingsError(f"Invalid {key} {value!r}: {e}") from e
    raise InvalidSettingsError(f"Unsupported {key} type: {type(value).__name__}")


def _pick(data: Mapping[str, Any], camel: str, snake: str, default: Any = None) -> Any:
    if camel in data:
        return data[camel]
    return data.get(snake, default)


def settings_from_dict(data: Mapping[str, Any]) -> RecurringSettings:
    """Validates and clamps a raw settings mapping (camelCase or snake_case keys)."""
    if not isinstance(data, Mapping):
        raise InvalidSettingsError(
            f"Settings must be a mapping, got {type(data).__name__}"
        )

    on_the_raw = _pick(data, "monthlyOnThe", "monthly_on_the") or {}
    if not isinstance(on_the_raw, Mapping):
        raise InvalidSettingsError("monthlyOnThe must be a mapping with week/day")

    weekly_raw = _pick(data, "weeklyDays", "weekly_days", None)
    weekly_days = WORKING_WEEK if weekly_raw is None else coerce_weekly_days(weekly_raw)

    return RecurringSettings(
        frequency=coerce_frequency(data.get("frequency", Frequency.DAILY.value)),
        interval=clamp_interval(data.get("interval", 1)),
        weekly_days=weekly_days,
        monthly_type=coerce_monthly_type(
            _pick(data, "monthlyType", "monthly_type", MonthlyType.ON_DAY.value)
        ),
        monthly_on_day=clamp_month_day(
            _pick(data, "monthlyOnDay", "monthly_on_day", 1)
        ),
        monthly_on_the=MonthlyOnThe(
            week=coerce_week(on_the_raw.get("week", 1)),
            day=coerce_weekday(on_the_raw.get("day", 0)),
        ),
        start_date=coerce_date(_pick(data, "startDate", "start_date"), "startDate"),
        end_date=coerce_date(_pick(data, "endDate", "end_date"), "endDate"),
    )


def settings_to_dict(settings: RecurringSettings) -> Dict[str, Any]:
    """Serializes settings into the camelCase document shape."""
    frequency = settings.frequency
    return {
        "frequency": frequency.value if isinstance(frequency, Frequency) else frequency,
        "interval": settings.interval,
        "weeklyDays": {day: day in settings.weekly_days for day in range(7)},
        "monthlyType": settings.monthly_type.value,
        "monthlyOnDay": settings.monthly_on_day,
        "monthlyOnThe": {
            "week": settings.monthly_on_the.week,
            "day": settings.monthly_on_the.day,
        },
        "startDate": to_iso(settings.start_date) if settings.start_date else "",
        "endDate": to_iso(settings.end_date) if settings.end_date else None,
    }


def update_settings(settings: RecurringSettings, **changes: Any) -> RecurringSettings:
    """Returns a copy with `changes` applied, passed through the same clamping."""
    coercers = {
        "frequency": coerce_frequency,
        "interval": clamp_interval,
        "weekly_days": coerce_weekly_days,
        "monthly_type": coerce_monthly_type,
        "monthly_on_day": clamp_month_day,
        "start_date": lambda v: coerce_date(v, "startDate"),
        "end_date": lambda v: coerce_date(v, "endDate"),
    }
    cleaned = {}
    for key, value in changes.items():
        if key == "monthly_on_the":
            if isinstance(value, Mapping):
                value = MonthlyOnThe(
                    week=coerce_week(value.get("week", settings.monthly_on_the.week)),
                    day=coerce_weekday(
                        value.get("day", settings.monthly_on_the.day)
                    ),
                )
            cleaned[key] = MonthlyOnThe(
                week=coerce_week(value.week), day=coerce_weekday(value.day)
            )
        elif key in coercers:
            cleaned[key] = coercers[key](value)
        else:
            raise TypeError(f"Unknown settings field: {key}")
    return replace(settings, **cleaned)

