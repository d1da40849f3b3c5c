import logging
from typing import Dict, Optional, Any

from recurrence.settings import DayOverflow
from utils import parse_time_of_day, format_time_of_day
from .interfaces import IConfigService

logger = logging.getLogger(__name__)

MAX_REMINDER_POLL_SECONDS = 60


class ConfigServiceImpl(IConfigService):
    """Configuration service reading from a dictionary."""

    def __init__(self, config_data: Dict[str, Optional[Any]]):
        self._config = config_data
        logger.debug("ConfigService initialized.")

    def get(self, key: str, default: Optional[Any] = None) -> Optional[Any]:
        value = self._config.get(key)
        return default if value is None else value

    def get_str(self, key: str, default: Optional[str] = None) -> Optional[str]:
        value = self.get(key, default)
        return str(value) if value is not None else None

    def get_int(self, key: str, default: int) -> int:
        value = self.get(key)
        if value is None:
            return default
        try:
            number = int(value)
        except (TypeError, ValueError):
            logger.warning(
                f"Expected integer for config key '{key}', got {value!r}. Using {default}."
            )
            return default
        if number < 1:
            logger.warning(
                f"Config key '{key}' must be positive, got {number}. Using {default}."
            )
            return default
        return number

    def get_log_level(self) -> str:
        return (self.get_str("LOG_LEVEL", "INFO") or "INFO").upper()

    def get_reminder_poll_seconds(self) -> int:
        seconds = self.get_int("REMINDER_POLL_SECONDS", 10)
        # Reminders match on the minute, so a slower poll could miss one
        if seconds > MAX_REMINDER_POLL_SECONDS:
            logger.warning(
                f"REMINDER_POLL_SECONDS={seconds} is above {MAX_REMINDER_POLL_SECONDS}. "
                f"Using {MAX_REMINDER_POLL_SECONDS}."
            )
            return MAX_REMINDER_POLL_SECONDS
        return seconds

    def get_expansion_max_iterations(self) -> int:
        return self.get_int("EXPANSION_MAX_ITERATIONS", 2000)

    def get_expansion_horizon_years(self) -> int:
        return self.get_int("EXPANSION_HORIZON_YEARS", 5)

    def get_monthly_day_overflow(self) -> DayOverflow:
        value = self.get_str("MONTHLY_DAY_OVERFLOW", DayOverflow.CLAMP.value)
        try:
            return DayOverflow(value.strip().lower())  # type: ignore[union-attr]
        except ValueError:
            logger.warning(
                f"Unknown MONTHLY_DAY_OVERFLOW '{value}'. Using '{DayOverflow.CLAMP.value}'."
            )
            return DayOverflow.CLAMP

    def get_default_reminder_time(self) -> str:
        value = self.get_str("DEFAULT_REMINDER_TIME", "09:00")
        parsed = parse_time_of_day(value)
        if parsed is None:
            logger.warning(f"Invalid DEFAULT_REMINDER_TIME '{value}'. Using 09:00.")
            return "09:00"
        return format_time_of_day(parsed)

    def get_schedule_file(self) -> Optional[str]:
        return self.get_str("SCHEDULE_FILE")
