import logging
from typing import Callable, Optional

from recurrence.models import ActiveReminder
from .interfaces import INotificationService

logger = logging.getLogger(__name__)


class LoggingNotificationService(INotificationService):
    """Announces reminders through the log, optionally forwarding to a sink."""

    def __init__(self, sink: Optional[Callable[[str], None]] = None):
        self._sink = sink
        logger.debug("NotificationService initialized.")

    @staticmethod
    def format_message(reminder: ActiveReminder) -> str:
        return f"Reminder: {reminder.event_type.title} at {reminder.time} ({reminder.date})"

    def notify(self, reminder: ActiveReminder) -> None:
        message = self.format_message(reminder)
        logger.info(message)
        if self._sink is None:
            return
        try:
            self._sink(message)
        except Exception as e:
            logger.error(f"Error delivering reminder '{message}': {e}", exc_info=True)
