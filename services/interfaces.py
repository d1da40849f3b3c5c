from typing import Protocol, Optional, List, Any, Callable, Tuple
import datetime

from recurrence.editing import EditingSession
from recurrence.models import (
    ActiveReminder,
    EventAssignment,
    Events,
    EventType,
    SavedSchedule,
    ScheduleDraft,
    UpcomingReminder,
)
from recurrence.settings import DayOverflow


# --- Configuration service interface ---
class IConfigService(Protocol):
    """Access to application configuration values."""

    def get(self, key: str, default: Optional[Any] = None) -> Optional[Any]: ...
    def get_str(self, key: str, default: Optional[str] = None) -> Optional[str]: ...
    def get_int(self, key: str, default: int) -> int: ...
    def get_log_level(self) -> str: ...
    def get_reminder_poll_seconds(self) -> int: ...
    def get_expansion_max_iterations(self) -> int: ...
    def get_expansion_horizon_years(self) -> int: ...
    def get_monthly_day_overflow(self) -> DayOverflow: ...
    def get_default_reminder_time(self) -> str: ...
    def get_schedule_file(self) -> Optional[str]: ...


# Called with the id of a deleted event type
EventTypeDeletedCallback = Callable[[str], None]


# --- Event type registry interface ---
class IEventTypeService(Protocol):
    """Registry of user-defined event labels."""

    def add(self, title: str, color: str) -> Optional[EventType]:
        """Adds a new event type. Returns None for a blank title."""
        ...

    def add_suggestion(self, title: str) -> Optional[EventType]:
        """Adds one of the suggested types unless a same-titled type exists."""
        ...

    def delete(self, type_id: str) -> bool:
        """Removes the type and notifies deletion listeners."""
        ...

    def get(self, type_id: str) -> Optional[EventType]: ...

    def list(self) -> List[EventType]: ...

    def replace_all(self, event_types: List[EventType]) -> None:
        """Overwrites the registry contents (used when a schedule is saved)."""
        ...

    def on_deleted(self, callback: EventTypeDeletedCallback) -> None: ...


# --- Saved schedule interface ---
class IScheduleService(Protocol):
    """Owns the saved schedule and opens editing sessions on it."""

    def save(self, draft: ScheduleDraft) -> SavedSchedule:
        """Merges a committed draft into the saved schedule."""
        ...

    def saved(self) -> Optional[SavedSchedule]: ...

    def events(self) -> Events: ...

    def delete_event(self, date_key: str) -> bool: ...

    def remove_events_of_type(self, type_id: str) -> int: ...

    def start_edit(self, today: Optional[datetime.date] = None) -> EditingSession:
        """Session seeded from the saved settings and events."""
        ...

    def create_new(self, today: Optional[datetime.date] = None) -> EditingSession:
        """Session with default settings and an empty draft."""
        ...

    def list_events(
        self, since: Optional[datetime.date] = None
    ) -> List[Tuple[str, EventAssignment, EventType]]:
        """Saved events sorted by date, skipping assignments of unknown types."""
        ...


# --- Notification interface ---
class INotificationService(Protocol):
    """Delivers a reminder to the user."""

    def notify(self, reminder: ActiveReminder) -> None: ...


# --- Reminder service interface ---
class IReminderService(Protocol):
    """Periodic check of saved assignments for reminders that are due."""

    def check_due(self, now: Optional[datetime.datetime] = None) -> Optional[ActiveReminder]:
        """Fires at most one reminder due at `now`."""
        ...

    def dismiss(self) -> None:
        """Clears the active reminder so that further reminders can fire."""
        ...

    def active_reminder(self) -> Optional[ActiveReminder]: ...

    def upcoming(self, now: Optional[datetime.datetime] = None) -> List[UpcomingReminder]: ...

    def next_deadline(
        self, now: Optional[datetime.datetime] = None
    ) -> Optional[datetime.datetime]: ...

    def start(self) -> None:
        """Starts the polling thread."""
        ...

    def stop(self) -> None:
        """Stops the polling thread."""
        ...
