"""
Persistent JSON storage for calendar_core.

Records are kept as iCalendar text inside a JSON file, one file per
collection:

- {storage_dir}/events.json - single events and recurring instances
- {storage_dir}/recurring_events.json - recurring event templates

Files are read once on construction and rewritten after every change.
"""

from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Callable, Generic, Optional, TypeVar
import json
import logging
import os
import uuid

from .errors import StorageError
from .event import CalendarEvent, RecurringCalendarEvent
from .ical_codec import (
    event_to_ical, ical_to_event,
    recurring_event_to_ical, ical_to_recurring_event
)
from .storage import EventStorageLayer, RecurringEventStorageLayer


logger = logging.getLogger(__name__)

T = TypeVar('T', CalendarEvent, RecurringCalendarEvent)

EVENTS_FILENAME = "events.json"
RECURRING_EVENTS_FILENAME = "recurring_events.json"


class StoredRecord:
    """
    A record as written to disk.

    Separate from the event classes, which are the in-memory runtime
    representation.
    """
    def __init__(self, id: str, raw_ical: str):
        self.id = id
        self.raw_ical = raw_ical

    def to_dict(self) -> dict:
        return {"id": self.id, "raw_ical": self.raw_ical}

    @classmethod
    def from_dict(cls, data: dict) -> 'StoredRecord':
        return cls(id=data["id"], raw_ical=data["raw_ical"])


class _JsonCollection(Generic[T]):
    """
    One JSON file holding records of a single kind.

    Structure: {"kind": ..., "updated": ISO timestamp, "records": [...]}
    """

    def __init__(
        self,
        file_path: Path,
        kind: str,
        encode: Callable[[T], str],
        decode: Callable[[str], T],
    ):
        self.file_path = Path(file_path)
        self.kind = kind
        self._encode = encode
        self._decode = decode
        self._items: dict[str, T] = {}
        self._load()

    def _load(self) -> None:
        if not self.file_path.exists():
            return

        try:
            with open(self.file_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            for record_data in data.get("records", []):
                record = StoredRecord.from_dict(record_data)
                self._items[record.id] = self._decode(record.raw_ical)
        except (OSError, ValueError, KeyError) as e:
            logger.error("Error loading %s from %s: %s", self.kind, self.file_path, e)
            raise StorageError(f"Cannot load {self.kind} from {self.file_path}: {e}") from e

        logger.debug("Loaded %d %s from %s", len(self._items), self.kind, self.file_path)

    def _save(self) -> None:
        data = {
            "kind": self.kind,
            "updated": datetime.now().isoformat(),
            "records": [
                StoredRecord(item_id, self._encode(item)).to_dict()
                for item_id, item in self._items.items()
            ],
        }

        try:
            self.file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.file_path, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
        except OSError as e:
            logger.error("Error saving %s to %s: %s", self.kind, self.file_path, e)
            raise StorageError(f"Cannot save {self.kind} to {self.file_path}: {e}") from e

        logger.debug("Saved %d %s to %s", len(self._items), self.kind, self.file_path)

    def _roundtrip(self, item: T) -> T:
        """Item as it reads back from disk."""
        return self._decode(self._encode(item))

    def values(self) -> list[T]:
        return list(self._items.values())

    def get(self, item_id: str) -> Optional[T]:
        return self._items.get(item_id)

    def put(self, item: T) -> T:
        stored = self._roundtrip(item)
        self._items[stored.id] = stored
        self._save()
        return stored

    def remove(self, item_id: str) -> bool:
        if self._items.pop(item_id, None) is None:
            return False
        self._save()
        return True


class JsonEventStorage(EventStorageLayer):
    """
    JSON file-based event storage.

    Overlap and instance queries scan all records; meant for personal
    calendars, not for large shared ones.
    """

    def __init__(self, file_path: Path):
        self._collection: _JsonCollection[CalendarEvent] = _JsonCollection(
            file_path, "events", event_to_ical, ical_to_event
        )

    @property
    def file_path(self) -> Path:
        return self._collection.file_path

    async def save(self, item: CalendarEvent) -> CalendarEvent:
        return self._collection.put(_with_id(item, str(uuid.uuid4())))

    async def find_by_id(self, item_id: str) -> Optional[CalendarEvent]:
        return self._collection.get(item_id)

    async def update(self, item_id: str, item: CalendarEvent) -> Optional[CalendarEvent]:
        if self._collection.get(item_id) is None:
            return None
        return self._collection.put(_with_id(item, item_id))

    async def delete(self, item_id: str) -> bool:
        return self._collection.remove(item_id)

    async def find_overlapping_with_interval(self, start_date: datetime, end_date: datetime) -> list[CalendarEvent]:
        overlapping = [e for e in self._collection.values() if e.overlaps(start_date, end_date)]
        return sorted(overlapping, key=lambda e: e.start_date)

    async def find_by_recurring_event_id(self, recurring_event_id: str) -> list[CalendarEvent]:
        return [e for e in self._collection.values() if e.recurring_event_id == recurring_event_id]


class JsonRecurringEventStorage(RecurringEventStorageLayer):
    """JSON file-based storage of recurring event templates."""

    def __init__(self, file_path: Path):
        self._collection: _JsonCollection[RecurringCalendarEvent] = _JsonCollection(
            file_path, "recurring_events", recurring_event_to_ical, ical_to_recurring_event
        )

    @property
    def file_path(self) -> Path:
        return self._collection.file_path

    async def save(self, item: RecurringCalendarEvent) -> RecurringCalendarEvent:
        return self._collection.put(_with_id(item, str(uuid.uuid4())))

    async def find_by_id(self, item_id: str) -> Optional[RecurringCalendarEvent]:
        return self._collection.get(item_id)

    async def update(self, item_id: str, item: RecurringCalendarEvent) -> Optional[RecurringCalendarEvent]:
        if self._collection.get(item_id) is None:
            return None
        return self._collection.put(_with_id(item, item_id))

    async def delete(self, item_id: str) -> bool:
        return self._collection.remove(item_id)


def _with_id(item: T, item_id: str) -> T:
    return replace(item, id=item_id)


def get_default_storage_dir() -> Path:
    """Get the default storage directory respecting XDG."""
    xdg_data = os.environ.get('XDG_DATA_HOME', os.path.expanduser('~/.local/share'))
    return Path(xdg_data) / 'calendar-core' / 'storage'


def create_storage_backend(
    storage_dir: Optional[Path] = None
) -> tuple[JsonEventStorage, JsonRecurringEventStorage]:
    """Factory function creating the event and recurring event storages."""
    if storage_dir is None:
        storage_dir = get_default_storage_dir()
    storage_dir = Path(storage_dir)

    logger.debug("Using JSON storage at %s", storage_dir)
    return (
        JsonEventStorage(storage_dir / EVENTS_FILENAME),
        JsonRecurringEventStorage(storage_dir / RECURRING_EVENTS_FILENAME),
    )
