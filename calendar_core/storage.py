"""
Storage port for calendar_core.

Abstract base classes the Calendar engine persists through. Applications
plug in their own implementation (SQL, CalDAV, ...); memory_storage and
event_storage provide the bundled ones.

Every method is a coroutine: awaiting storage is the only point where a
Calendar operation can suspend.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Generic, Optional, TypeVar

from .event import CalendarEvent, RecurringCalendarEvent


T = TypeVar('T', CalendarEvent, RecurringCalendarEvent)


class StorageLayer(ABC, Generic[T]):
    """
    Basic persistence contract for one kind of record.

    Implementations assign ids on save and must never change them.
    """

    @abstractmethod
    async def save(self, item: T) -> T:
        """Store a new record and return it with its assigned id."""
        pass

    @abstractmethod
    async def find_by_id(self, item_id: str) -> Optional[T]:
        """Get a record by id, or None if there is none."""
        pass

    @abstractmethod
    async def update(self, item_id: str, item: T) -> Optional[T]:
        """Replace the record stored under item_id. Returns None if absent."""
        pass

    @abstractmethod
    async def delete(self, item_id: str) -> bool:
        """Remove a record. Returns False if there was nothing to remove."""
        pass


class EventStorageLayer(StorageLayer[CalendarEvent]):
    """Storage for single events and recurring event instances."""

    @abstractmethod
    async def find_overlapping_with_interval(self, start_date: datetime, end_date: datetime) -> list[CalendarEvent]:
        """
        Get all events intersecting the closed interval [start_date, end_date].

        An event matches unless it ends before start_date or starts after
        end_date, so events touching either boundary are included.
        """
        pass

    @abstractmethod
    async def find_by_recurring_event_id(self, recurring_event_id: str) -> list[CalendarEvent]:
        """Get all instances owned by the given recurring event."""
        pass


RecurringEventStorageLayer = StorageLayer[RecurringCalendarEvent]
