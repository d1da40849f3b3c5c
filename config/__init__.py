import os
import logging
from dotenv import load_dotenv
from typing import Dict, Optional

logger = logging.getLogger(__name__)

# .env loading is kept for local development
load_dotenv()

_loaded_config: Optional[Dict[str, Optional[str]]] = None


def load_app_config(reload: bool = False) -> Dict[str, Optional[str]]:
    """
    Loads configuration from environment variables and returns it as a dict.
    Values are validated and defaulted by ConfigServiceImpl.
    """
    global _loaded_config
    if _loaded_config is not None and not reload:
        return _loaded_config

    config_data = {
        # --- Logging ---
        "LOG_LEVEL": os.getenv("LOG_LEVEL", "INFO"),
        # --- Recurrence expansion ---
        "EXPANSION_MAX_ITERATIONS": os.getenv("EXPANSION_MAX_ITERATIONS", "2000"),
        "EXPANSION_HORIZON_YEARS": os.getenv("EXPANSION_HORIZON_YEARS", "5"),
        "MONTHLY_DAY_OVERFLOW": os.getenv("MONTHLY_DAY_OVERFLOW", "clamp"),
        # --- Reminders ---
        "REMINDER_POLL_SECONDS": os.getenv("REMINDER_POLL_SECONDS", "10"),
        "DEFAULT_REMINDER_TIME": os.getenv("DEFAULT_REMINDER_TIME", "09:00"),
        # --- Startup schedule document (optional) ---
        "SCHEDULE_FILE": os.getenv("SCHEDULE_FILE"),
    }

    if not config_data["SCHEDULE_FILE"]:
        logger.info(
            "SCHEDULE_FILE environment variable not set. Starting without a saved schedule."
        )

    _loaded_config = config_data
    logger.info("Application configuration loaded.")
    return _loaded_config
