import datetime
import logging
import threading
import time
from typing import Callable, List, Optional, Set, Tuple

import schedule

from recurrence.calendar_math import parse_iso, to_iso
from recurrence.models import ActiveReminder, UpcomingReminder
from utils import format_time_of_day, parse_time_of_day
from .interfaces import (
    IConfigService,
    IEventTypeService,
    INotificationService,
    IReminderService,
    IScheduleService,
)

logger = logging.getLogger(__name__)

REMINDER_JOB_TAG = "reminder_check"


class ReminderServiceImpl(IReminderService):
    """
    Polls the saved assignments and fires a reminder when an assignment's
    time-of-day matches the current minute on its date.

    Reminders can fire up to one polling interval late. Every fired
    (date, time) pair is remembered so that it fires once.
    """

    _fired: Set[Tuple[str, str]]
    _active: Optional[ActiveReminder]

    def __init__(
        self,
        schedule_service: IScheduleService,
        event_type_service: IEventTypeService,
        notification_service: INotificationService,
        config_service: IConfigService,
        clock: Callable[[], datetime.datetime] = datetime.datetime.now,
        auto_dismiss: bool = False,
    ):
        self._schedule_service = schedule_service
        self._event_type_service = event_type_service
        self._notification_service = notification_service
        self._poll_seconds = config_service.get_reminder_poll_seconds()
        self._clock = clock
        # Notifiers without a UI to close the reminder dismiss it on delivery
        self._auto_dismiss = auto_dismiss
        self._scheduler = schedule.Scheduler()
        self._thread: Optional[threading.Thread] = None
        self._running = False
        self._lock = threading.Lock()
        self._fired = set()
        self._active = None
        logger.debug(f"ReminderService initialized (poll every {self._poll_seconds}s).")

    def _forget_past_days(self, today_key: str) -> None:
        self._fired = {pair for pair in self._fired if pair[0] >= today_key}

    def check_due(
        self, now: Optional[datetime.datetime] = None
    ) -> Optional[ActiveReminder]:
        now = now or self._clock()
        with self._lock:
            if self._active is not None:
                return None
            if self._schedule_service.saved() is None:
                return None

            date_key = to_iso(now.date())
            time_key = format_time_of_day(now)
            self._forget_past_days(date_key)

            assignment = self._schedule_service.events().get(date_key)
            if assignment is None or assignment.time != time_key:
                return None
            if (date_key, assignment.time) in self._fired:
                return None

            event_type = self._event_type_service.get(assignment.type_id)
            if event_type is None:
                logger.warning(
                    f"Event on {date_key} references unknown type {assignment.type_id}"
                )
                return None

            reminder = ActiveReminder(event_type=event_type, time=assignment.time, date=date_key)
            self._fired.add((date_key, assignment.time))
            self._active = reminder

        logger.info(f"Reminder due: '{event_type.title}' on {date_key} at {assignment.time}")
        self._notification_service.notify(reminder)
        if self._auto_dismiss:
            self.dismiss()
        return reminder

    def dismiss(self) -> None:
        with self._lock:
            if self._active:
                logger.debug(f"Reminder for {self._active.date} dismissed")
            self._active = None

    def active_reminder(self) -> Optional[ActiveReminder]:
        return self._active

    def upcoming(
        self, now: Optional[datetime.datetime] = None
    ) -> List[UpcomingReminder]:
        """Not-yet-fired triggers at or after the current minute, soonest first."""
        now = (now or self._clock()).replace(second=0, microsecond=0)
        index = []
        for date_key, assignment in self._schedule_service.events().items():
            at_time = parse_time_of_day(assignment.time)
            if at_time is None:
                logger.warning(f"Invalid reminder time '{assignment.time}' on {date_key}")
                continue
            try:
                at = datetime.datetime.combine(parse_iso(date_key), at_time)
            except ValueError:
                logger.warning(f"Invalid date key '{date_key}' in saved events")
                continue
            if at < now or (date_key, assignment.time) in self._fired:
                continue
            index.append(UpcomingReminder(at=at, date=date_key, assignment=assignment))
        index.sort(key=lambda r: r.at)
        return index

    def next_deadline(
        self, now: Optional[datetime.datetime] = None
    ) -> Optional[datetime.datetime]:
        index = self.upcoming(now)
        return index[0].at if index else None

    def _poll(self) -> None:
        try:
            self.check_due()
        except Exception as e:
            logger.error(f"Error while checking reminders: {e}", exc_info=True)

    def _run_scheduler(self):
        logger.info("Starting reminder runner thread...")
        while self._running:
            self._scheduler.run_pending()
            time.sleep(0.1)
        logger.info("Reminder runner thread stopped.")

    def start(self) -> None:
        if self._running:
            logger.warning("ReminderService is already running.")
            return

        logger.info(f"Starting ReminderService, checking every {self._poll_seconds}s...")
        self._scheduler.every(self._poll_seconds).seconds.do(self._poll).tag(
            REMINDER_JOB_TAG
        )
        self._running = True
        self._thread = threading.Thread(target=self._run_scheduler, daemon=True)
        self._thread.start()

    def stop(self) -> None:
        if not self._running:
            logger.warning("ReminderService is not running.")
            return

        logger.info("Stopping ReminderService...")
        self._running = False
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=2)
        self._scheduler.clear(REMINDER_JOB_TAG)
        self._thread = None
        logger.info("ReminderService stopped.")
