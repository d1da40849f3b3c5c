import logging
import threading
import time
from typing import Callable, Dict, List, Optional

from recurrence.models import COLOR_PALETTE, SUGGESTED_EVENT_TYPES, EventType
from .interfaces import IEventTypeService, EventTypeDeletedCallback

logger = logging.getLogger(__name__)


class EventTypeServiceImpl(IEventTypeService):
    """In-memory registry of event types, in insertion order."""

    _types: Dict[str, EventType]
    _listeners: List[EventTypeDeletedCallback]

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._types = {}
        self._listeners = []
        self._lock = threading.Lock()
        logger.debug("EventTypeService initialized.")

    def _new_id(self) -> str:
        """evt_<epoch millis>, bumped until unique in this registry."""
        millis = int(self._clock() * 1000)
        candidate = f"evt_{millis}"
        while candidate in self._types:
            millis += 1
            candidate = f"evt_{millis}"
        return candidate

    def add(self, title: str, color: str) -> Optional[EventType]:
        title = (title or "").strip()
        if not title:
            logger.warning("Refusing to add an event type with a blank title.")
            return None
        with self._lock:
            event_type = EventType(id=self._new_id(), title=title, color=color or COLOR_PALETTE[0])
            self._types[event_type.id] = event_type
        logger.info(f"Added event type '{event_type.title}' ({event_type.id})")
        return event_type

    def add_suggestion(self, title: str) -> Optional[EventType]:
        suggestion = next(
            (s for s in SUGGESTED_EVENT_TYPES if s[0].lower() == title.strip().lower()),
            None,
        )
        if suggestion is None:
            logger.warning(f"'{title}' is not a suggested event type.")
            return None
        existing = self.find_by_title(suggestion[0])
        if existing:
            logger.debug(f"Suggested event type '{title}' already registered.")
            return existing
        return self.add(*suggestion)

    def find_by_title(self, title: str) -> Optional[EventType]:
        wanted = title.strip().lower()
        return next((t for t in self.list() if t.title.lower() == wanted), None)

    def delete(self, type_id: str) -> bool:
        with self._lock:
            removed = self._types.pop(type_id, None)
        if removed is None:
            logger.warning(f"Cannot delete unknown event type {type_id}")
            return False
        logger.info(f"Deleted event type '{removed.title}' ({type_id})")
        for callback in list(self._listeners):
            callback(type_id)
        return True

    def get(self, type_id: str) -> Optional[EventType]:
        return self._types.get(type_id)

    def list(self) -> List[EventType]:
        with self._lock:
            return list(self._types.values())

    def replace_all(self, event_types: List[EventType]) -> None:
        with self._lock:
            self._types = {t.id: t for t in event_types}
        logger.debug(f"Event type registry replaced with {len(event_types)} types")

    def on_deleted(self, callback: EventTypeDeletedCallback) -> None:
        self._listeners.append(callback)
