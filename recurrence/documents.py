import logging
from typing import Any, List, Mapping, Tuple

import yaml

from utils import format_time_of_day, parse_time_of_day
from .calendar_math import parse_iso, to_iso
from .models import EventAssignment, Events, EventType
from .settings import InvalidSettingsError, RecurringSettings, settings_from_dict

logger = logging.getLogger(__name__)


def _parse_events(raw: Any) -> Events:
    events: Events = {}
    if raw is None:
        return events
    if not isinstance(raw, Mapping):
        raise InvalidSettingsError("events must be a mapping of date to assignment")
    for date_value, assignment in raw.items():
        try:
            day = parse_iso(date_value) if isinstance(date_value, str) else date_value
            date_key = to_iso(day)
        except (ValueError, AttributeError):
            logger.warning(f"Skipping event with invalid date {date_value!r}")
            continue
        if not isinstance(assignment, Mapping):
            logger.warning(f"Skipping malformed event on {date_key}")
            continue
        type_id = assignment.get("typeId") or assignment.get("type_id")
        at = parse_time_of_day(assignment.get("time"))
        if not type_id or at is None:
            logger.warning(f"Skipping event on {date_key}: missing type or valid time")
            continue
        events[date_key] = EventAssignment(type_id=str(type_id), time=format_time_of_day(at))
    return events


def _parse_event_types(raw: Any) -> List[EventType]:
    event_types = []
    for item in raw or []:
        if not isinstance(item, Mapping) or not item.get("id") or not item.get("title"):
            logger.warning(f"Skipping malformed event type {item!r}")
            continue
        event_types.append(
            EventType(id=str(item["id"]), title=str(item["title"]), color=str(item.get("color", "")))
        )
    return event_types


def load_schedule_document(
    text: str,
) -> Tuple[RecurringSettings, Events, List[EventType]]:
    """
    Parses a YAML/JSON schedule document with `settings`, `events` and
    `customEventTypes` (or `event_types`) sections. A document holding only a
    settings mapping is accepted as well.
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise InvalidSettingsError(f"Failed to parse schedule document: {e}") from e
    if not isinstance(data, Mapping):
        raise InvalidSettingsError("Schedule document must be a mapping")

    if "settings" not in data:
        return settings_from_dict(data), {}, []

    settings = settings_from_dict(data["settings"])
    events = _parse_events(data.get("events"))
    event_types = _parse_event_types(
        data.get("customEventTypes", data.get("event_types"))
    )
    logger.debug(
        f"Schedule document parsed: {len(events)} events, {len(event_types)} event types"
    )
    return settings, events, event_types

