import logging
import sys
from datetime import datetime, time
from typing import Optional, Union


def setup_logging(log_level_name: str = "INFO"):
    """Sets up basic logging configuration."""
    log_level = getattr(logging, log_level_name.upper(), logging.INFO)  # Default to INFO

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stdout,
    )
    # Reduce noise from libraries
    logging.getLogger("schedule").setLevel(logging.WARNING)

    logger = logging.getLogger(__name__)
    logger.info(f"Logging configured at level: {log_level_name}")


def parse_time_of_day(value: Union[str, int, None]) -> Optional[time]:
    """
    Parses "8:30", "08:30" or "0830" into a time. Integers are minutes past
    midnight (YAML reads unquoted 08:30 as a sexagesimal number).
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        hours, minutes = divmod(value, 60)
    else:
        text = str(value).strip()
        try:
            if ":" in text:
                parts = text.split(":")
                if len(parts) != 2:
                    return None
                hours, minutes = int(parts[0]), int(parts[1])
            elif len(text) == 4 and text.isdigit():
                hours, minutes = int(text[:2]), int(text[2:])
            else:
                return None
        except ValueError:
            return None
    if 0 <= hours <= 23 and 0 <= minutes <= 59:
        return time(hours, minutes)
    return None


def format_time_of_day(value: Union[time, datetime]) -> str:
    """HH:MM, the key format of reminder times."""
    return f"{value.hour:02d}:{value.minute:02d}"
