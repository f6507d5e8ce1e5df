"""
In-memory storage backends.

Each storage object owns its records; nothing is shared between
instances, so a Calendar and its storages live exactly as long as the
caller keeps them.
"""

from dataclasses import replace
from datetime import datetime
from typing import Optional
import logging
import uuid

from .event import CalendarEvent, RecurringCalendarEvent
from .interval_tree import IntervalNode, IntervalTree
from .storage import EventStorageLayer, RecurringEventStorageLayer


logger = logging.getLogger(__name__)


class InMemoryEventStorage(EventStorageLayer):
    """
    Event storage keeping everything in dictionaries.

    Overlap queries go through an IntervalTree and return events ordered
    by start date (events with the same start in insertion order).
    Instances are additionally indexed by their recurring event id.
    """

    def __init__(self):
        self._events: dict[str, CalendarEvent] = {}
        self._nodes: dict[str, IntervalNode] = {}
        self._tree: IntervalTree = IntervalTree()
        # recurring_event_id -> instance ids (dict used as an ordered set)
        self._instances: dict[str, dict[str, None]] = {}

    def __len__(self) -> int:
        return len(self._events)

    # ==================== Index Maintenance ====================

    def _index(self, event: CalendarEvent):
        self._events[event.id] = event
        self._nodes[event.id] = self._tree.insert(event.start_date, event.end_date, event.id)
        if event.recurring_event_id:
            self._instances.setdefault(event.recurring_event_id, {})[event.id] = None

    def _unindex(self, event_id: str) -> CalendarEvent:
        event = self._events.pop(event_id)
        moved = self._tree.remove(self._nodes.pop(event_id))
        if moved is not None:
            # the tree moved another event's payload into this node
            self._nodes[moved.data] = moved
        if event.recurring_event_id:
            owned = self._instances.get(event.recurring_event_id, {})
            owned.pop(event_id, None)
            if not owned:
                self._instances.pop(event.recurring_event_id, None)
        return event

    # ==================== StorageLayer ====================

    async def save(self, item: CalendarEvent) -> CalendarEvent:
        event = replace(item, id=str(uuid.uuid4()))
        self._index(event)
        logger.debug("Saved event %s (%s)", event.id, event.title)
        return event

    async def find_by_id(self, item_id: str) -> Optional[CalendarEvent]:
        return self._events.get(item_id)

    async def update(self, item_id: str, item: CalendarEvent) -> Optional[CalendarEvent]:
        if item_id not in self._events:
            return None
        self._unindex(item_id)
        event = replace(item, id=item_id)
        self._index(event)
        logger.debug("Updated event %s", item_id)
        return event

    async def delete(self, item_id: str) -> bool:
        if item_id not in self._events:
            return False
        self._unindex(item_id)
        logger.debug("Deleted event %s", item_id)
        return True

    # ==================== Queries ====================

    async def find_overlapping_with_interval(self, start_date: datetime, end_date: datetime) -> list[CalendarEvent]:
        return [self._events[node.data] for node in self._tree.find_intersecting(start_date, end_date)]

    async def find_by_recurring_event_id(self, recurring_event_id: str) -> list[CalendarEvent]:
        return [self._events[event_id] for event_id in self._instances.get(recurring_event_id, {})]


class InMemoryRecurringEventStorage(RecurringEventStorageLayer):
    """Recurring event templates in a plain dictionary."""

    def __init__(self):
        self._events: dict[str, RecurringCalendarEvent] = {}

    def __len__(self) -> int:
        return len(self._events)

    async def save(self, item: RecurringCalendarEvent) -> RecurringCalendarEvent:
        event = replace(item, id=str(uuid.uuid4()))
        self._events[event.id] = event
        logger.debug("Saved recurring event %s (%s)", event.id, event.title)
        return event

    async def find_by_id(self, item_id: str) -> Optional[RecurringCalendarEvent]:
        return self._events.get(item_id)

    async def update(self, item_id: str, item: RecurringCalendarEvent) -> Optional[RecurringCalendarEvent]:
        if item_id not in self._events:
            return None
        event = replace(item, id=item_id)
        self._events[item_id] = event
        return event

    async def delete(self, item_id: str) -> bool:
        return self._events.pop(item_id, None) is not None
