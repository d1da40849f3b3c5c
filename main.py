import logging
import asyncio
import os

from containers import get_container
from recurrence import InvalidSettingsError, load_schedule_document
from recurrence.models import ScheduleDraft
from services.interfaces import IReminderService, IScheduleService
from utils import setup_logging

logger = logging.getLogger(__name__)


def load_startup_schedule(container, path: str, schedule_service: IScheduleService) -> bool:
    """Reads a schedule document and saves it as the initial schedule."""
    if not os.path.isfile(path):
        logger.error(f"Schedule file not found: {path}")
        return False
    try:
        with open(path, "r", encoding="utf-8") as f:
            settings, events, event_types = load_schedule_document(f.read())
    except (OSError, InvalidSettingsError) as e:
        logger.error(f"Could not load schedule file {path}: {e}")
        return False

    expander = container.core.expander()
    result = expander.expand_with_diagnostics(settings)
    if result.truncated:
        logger.warning(
            f"Schedule in {path} was truncated after {result.iterations} iterations."
        )
    schedule_service.save(
        ScheduleDraft(
            settings=settings,
            recurring_dates=result.dates,
            events=events,
            event_types=event_types,
        )
    )
    logger.info(f"Loaded schedule from {path}: {len(result.dates)} recurring dates.")
    return True


async def main_async():
    """Asynchronous main function to initialize and run all components."""
    reminder_service: IReminderService = None  # type: ignore[assignment]

    try:
        container = get_container()
        config_service = container.core.config_service()
        setup_logging(config_service.get_log_level())
        logger.info("Starting application from main.py...")

        schedule_service = container.services.schedule_service()
        reminder_service = container.services.reminder_service()

        schedule_file = config_service.get_schedule_file()
        if schedule_file:
            load_startup_schedule(container, schedule_file, schedule_service)

        next_deadline = reminder_service.next_deadline()
        if next_deadline:
            logger.info(f"Next reminder at {next_deadline:%Y-%m-%d %H:%M}")
        else:
            logger.info("No upcoming reminders.")

        reminder_service.start()
        logger.info("Application running. Press Ctrl+C to stop.")
        while True:
            await asyncio.sleep(3600)

    except (KeyboardInterrupt, asyncio.CancelledError):
        logger.info("Received interrupt, shutting down...")

    except Exception as e:
        logger.critical(f"Application failed to start or crashed: {e}", exc_info=True)

    finally:
        if reminder_service:
            try:
                reminder_service.stop()
            except Exception as stop_e:
                logger.error(f"Error stopping reminder service: {stop_e}")
        logger.info("Application shutdown.")


if __name__ == "__main__":
    try:
        asyncio.run(main_async())
    except KeyboardInterrupt:
        pass
