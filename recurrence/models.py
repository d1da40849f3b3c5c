import datetime
import enum
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .settings import RecurringSettings

DEFAULT_REMINDER_TIME = "09:00"


@dataclass(frozen=True)
class EventType:
    id: str
    title: str
    color: str


# Offered to the user as one-click additions to the registry.
SUGGESTED_EVENT_TYPES = [
    ("Meeting", "bg-blue-500"),
    ("Appointment", "bg-green-500"),
    ("Birthday", "bg-pink-500"),
    ("Anniversary", "bg-purple-500"),
]

COLOR_PALETTE = ["bg-red-500", "bg-amber-500", "bg-indigo-500", "bg-cyan-500"]


@dataclass(frozen=True)
class EventAssignment:
    type_id: str
    time: str  # HH:MM


# Date key (YYYY-MM-DD) -> assignment
Events = Dict[str, EventAssignment]


class EventMode(str, enum.Enum):
    ALL = "all"
    INDIVIDUAL = "individual"


@dataclass(frozen=True)
class MasterEvent:
    type_id: Optional[str] = None
    time: str = DEFAULT_REMINDER_TIME


@dataclass(frozen=True)
class ScheduleDraft:
    """What an editing session hands to the schedule service on commit."""

    settings: RecurringSettings
    recurring_dates: List[str]
    events: Events
    event_types: List[EventType]


@dataclass
class SavedSchedule:
    settings: RecurringSettings
    recurring_dates: List[str] = field(default_factory=list)
    events: Events = field(default_factory=dict)
    event_types: List[EventType] = field(default_factory=list)


@dataclass(frozen=True)
class ActiveReminder:
    event_type: EventType
    time: str
    date: str


@dataclass(frozen=True)
class UpcomingReminder:
    at: datetime.datetime
    date: str
    assignment: EventAssignment
