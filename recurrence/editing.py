import datetime
import logging
from typing import Any, Callable, List, Optional

from .expander import RecurrenceExpander
from .models import (
    DEFAULT_REMINDER_TIME,
    EventAssignment,
    EventMode,
    Events,
    EventType,
    MasterEvent,
    ScheduleDraft,
)
from .settings import RecurringSettings, default_settings, update_settings
from utils import format_time_of_day, parse_time_of_day

logger = logging.getLogger(__name__)


def normalize_time(value: Any) -> Optional[str]:
    """HH:MM form of a reminder time, or None when it cannot be parsed."""
    parsed = parse_time_of_day(value)
    return format_time_of_day(parsed) if parsed is not None else None


class EditingSession:
    """
    State of one recurrence editing session (the date picker).

    Settings are immutable values: every mutation swaps in a new value and
    recomputes the expanded dates. Nothing is saved until `build_draft()` is
    handed to the schedule service.
    """

    def __init__(
        self,
        expander: RecurrenceExpander,
        event_types_provider: Callable[[], List[EventType]],
        initial_settings: Optional[RecurringSettings] = None,
        initial_events: Optional[Events] = None,
        today: Optional[datetime.date] = None,
        default_time: str = DEFAULT_REMINDER_TIME,
    ):
        self._expander = expander
        self._event_types_provider = event_types_provider
        self._default_time = normalize_time(default_time) or DEFAULT_REMINDER_TIME
        self._settings = initial_settings or default_settings(today)
        self._recurring_dates = self._expander.expand(self._settings)
        self.draft_events: Events = dict(initial_events or {})
        self.event_mode = EventMode.INDIVIDUAL
        self.master_event = MasterEvent(time=self._default_time)
        self.selected_date: Optional[str] = None
        self.individual_time = self._default_time
        logger.debug(
            f"Editing session opened with {len(self._recurring_dates)} dates, "
            f"{len(self.draft_events)} draft events"
        )

    @property
    def settings(self) -> RecurringSettings:
        return self._settings

    @property
    def recurring_dates(self) -> List[str]:
        return list(self._recurring_dates)

    # --- Settings ---

    def update_settings(self, **changes: Any) -> List[str]:
        """Applies `changes` (clamped) and returns the recomputed dates."""
        self._settings = update_settings(self._settings, **changes)
        self._recurring_dates = self._expander.expand(self._settings)
        return self.recurring_dates

    def set_interval(self, value: Any) -> List[str]:
        return self.update_settings(interval=value)

    def toggle_weekly_day(self, index: int) -> List[str]:
        days = set(self._settings.weekly_days)
        days.symmetric_difference_update({index})
        return self.update_settings(weekly_days=days)

    # --- Event mode ---

    def set_event_mode(self, mode: EventMode) -> None:
        self.event_mode = EventMode(mode)
        if self.event_mode is not EventMode.INDIVIDUAL:
            self.selected_date = None

    def set_master_event(
        self, type_id: Optional[str] = None, time: Optional[str] = None
    ) -> Optional[MasterEvent]:
        """Returns the updated master event, or None when `time` is invalid."""
        normalized = self.master_event.time
        if time:
            normalized = normalize_time(time)
            if normalized is None:
                logger.warning(f"Ignoring invalid master event time '{time}'")
                return None
        self.master_event = MasterEvent(
            type_id=type_id if type_id is not None else self.master_event.type_id,
            time=normalized,
        )
        return self.master_event

    # --- Individual assignment ---

    def select_date(self, date_key: str) -> Optional[str]:
        """
        Selects a date for individual assignment and returns the time to
        pre-fill. Ignored outside individual mode.
        """
        if self.event_mode is not EventMode.INDIVIDUAL:
            logger.debug(f"Ignoring date selection {date_key} in {self.event_mode} mode")
            return None
        self.selected_date = date_key
        existing = self.draft_events.get(date_key)
        self.individual_time = existing.time if existing else self._default_time
        return self.individual_time

    def assign_event(self, type_id: str) -> bool:
        if not self.selected_date:
            return False
        self.draft_events[self.selected_date] = EventAssignment(
            type_id=type_id, time=self.individual_time
        )
        self.selected_date = None
        return True

    def set_individual_time(self, time: str) -> bool:
        normalized = normalize_time(time)
        if normalized is None:
            logger.warning(f"Ignoring invalid event time '{time}'")
            return False
        self.individual_time = normalized
        if self.selected_date and self.selected_date in self.draft_events:
            current = self.draft_events[self.selected_date]
            self.draft_events[self.selected_date] = EventAssignment(
                type_id=current.type_id, time=normalized
            )
        return True

    def remove_event(self) -> bool:
        if not self.selected_date:
            return False
        removed = self.draft_events.pop(self.selected_date, None) is not None
        self.selected_date = None
        return removed

    def forget_event_type(self, type_id: str) -> None:
        """Drops draft assignments and the master selection for a deleted type."""
        self.draft_events = {
            key: assignment
            for key, assignment in self.draft_events.items()
            if assignment.type_id != type_id
        }
        if self.master_event.type_id == type_id:
            self.master_event = MasterEvent(time=self.master_event.time)

    # --- Commit ---

    def build_draft(self) -> ScheduleDraft:
        """Final per-date events for the current mode, ready to save."""
        events: Events = {}
        if self.event_mode is EventMode.ALL:
            if self.master_event.type_id:
                assignment = EventAssignment(
                    type_id=self.master_event.type_id, time=self.master_event.time
                )
                events = {date_key: assignment for date_key in self._recurring_dates}
            else:
                logger.info("Master event mode without an event type; saving no events.")
        else:
            events = dict(self.draft_events)

        return ScheduleDraft(
            settings=self._settings,
            recurring_dates=self.recurring_dates,
            events=events,
            event_types=list(self._event_types_provider()),
        )
