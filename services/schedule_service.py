import datetime
import logging
import threading
from typing import List, Optional, Tuple

from recurrence.calendar_math import to_iso
from recurrence.editing import EditingSession
from recurrence.expander import RecurrenceExpander
from recurrence.models import (
    EventAssignment,
    Events,
    EventType,
    SavedSchedule,
    ScheduleDraft,
)
from .interfaces import IConfigService, IEventTypeService, IScheduleService

logger = logging.getLogger(__name__)


class ScheduleServiceImpl(IScheduleService):
    """
    Keeps the saved schedule in memory and reconciles committed drafts into it.

    Saving never drops assignments on dates outside the new expansion: saved
    and new events are merged by date key, new ones winning on collision.
    """

    _saved: Optional[SavedSchedule]

    def __init__(
        self,
        expander: RecurrenceExpander,
        event_type_service: IEventTypeService,
        config_service: IConfigService,
    ):
        self._expander = expander
        self._event_type_service = event_type_service
        self._default_time = config_service.get_default_reminder_time()
        self._saved = None
        self._events: Events = {}
        self._lock = threading.Lock()
        self._sessions: List[EditingSession] = []
        event_type_service.on_deleted(self.remove_events_of_type)
        logger.debug("ScheduleService initialized.")

    def save(self, draft: ScheduleDraft) -> SavedSchedule:
        with self._lock:
            merged = dict(self._events)
            merged.update(draft.events)
            previous_dates = self._saved.recurring_dates if self._saved else []
            self._saved = SavedSchedule(
                settings=draft.settings,
                recurring_dates=sorted(set(previous_dates) | set(draft.recurring_dates)),
                events=merged,
                event_types=list(draft.event_types),
            )
            self._events = merged
            saved = self._saved
        self._event_type_service.replace_all(draft.event_types)
        logger.info(
            f"Schedule saved: {len(draft.recurring_dates)} new dates, "
            f"{len(draft.events)} new events, {len(merged)} events in total"
        )
        return saved

    def saved(self) -> Optional[SavedSchedule]:
        return self._saved

    def events(self) -> Events:
        with self._lock:
            return dict(self._events)

    def delete_event(self, date_key: str) -> bool:
        with self._lock:
            if self._events.pop(date_key, None) is None:
                logger.warning(f"No event scheduled on {date_key}")
                return False
            if self._saved:
                self._saved.events = self._events
        logger.info(f"Deleted event on {date_key}")
        return True

    def remove_events_of_type(self, type_id: str) -> int:
        """Cascade for a deleted event type; also called by the registry."""
        with self._lock:
            kept = {k: a for k, a in self._events.items() if a.type_id != type_id}
            removed = len(self._events) - len(kept)
            self._events = kept
            if self._saved:
                self._saved.events = kept
                self._saved.event_types = [
                    t for t in self._saved.event_types if t.id != type_id
                ]
        for session in self._sessions:
            session.forget_event_type(type_id)
        if removed:
            logger.info(f"Removed {removed} events of deleted type {type_id}")
        return removed

    def _open_session(self, session: EditingSession) -> EditingSession:
        # Only the most recent session is live, like the single picker dialog
        self._sessions = [session]
        return session

    def start_edit(self, today: Optional[datetime.date] = None) -> EditingSession:
        settings = self._saved.settings if self._saved else None
        return self._open_session(
            EditingSession(
                self._expander,
                self._event_type_service.list,
                initial_settings=settings,
                initial_events=self.events(),
                today=today,
                default_time=self._default_time,
            )
        )

    def create_new(self, today: Optional[datetime.date] = None) -> EditingSession:
        return self._open_session(
            EditingSession(
                self._expander,
                self._event_type_service.list,
                initial_settings=None,
                initial_events={},
                today=today,
                default_time=self._default_time,
            )
        )

    def list_events(
        self, since: Optional[datetime.date] = None
    ) -> List[Tuple[str, EventAssignment, EventType]]:
        since_key = to_iso(since) if since else None
        listed = []
        for date_key, assignment in sorted(self.events().items()):
            if since_key and date_key < since_key:
                continue
            event_type = self._event_type_service.get(assignment.type_id)
            if event_type is None:
                continue
            listed.append((date_key, assignment, event_type))
        return listed
