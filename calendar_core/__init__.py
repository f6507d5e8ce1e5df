"""
calendar_core - event lifecycle engine.

This package provides the scheduling logic of a calendar application:
- Event model (event.py, options.py)
- Recurrence expansion (recurrence.py)
- Storage port (storage.py) with in-memory (memory_storage.py) and
  JSON/iCalendar file (event_storage.py, ical_codec.py) implementations
- Calendar engine (calendar.py)
- Configuration (config.py) and logging setup (logger.py)
"""

import logging

from .calendar import Calendar
from .config import CalendarConfig, MAX_EVENT_DURATION_MINUTES
from .errors import (
    CalendarError, EventNotFoundError, InvalidEventDurationError,
    OverlappingEventsError, StorageError
)
from .event import (
    CalendarEvent, CountLimit, DateLimit, RecurrenceInterval,
    RecurrenceRule, RecurringCalendarEvent
)
from .event_storage import (
    JsonEventStorage, JsonRecurringEventStorage,
    create_storage_backend, get_default_storage_dir
)
from .logger import setup_logger
from .memory_storage import InMemoryEventStorage, InMemoryRecurringEventStorage
from .options import CalendarEventOptions, DeleteRecurringEventOptions
from .recurrence import (
    DAY, MINUTE, WEEK,
    compute_all_recurrences, compute_end_date, compute_next_date,
    compute_next_recurrence, get_next_day, get_next_month, get_next_week
)
from .storage import EventStorageLayer, RecurringEventStorageLayer, StorageLayer

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    'Calendar',
    'CalendarConfig',
    'MAX_EVENT_DURATION_MINUTES',
    # Errors
    'CalendarError',
    'EventNotFoundError',
    'InvalidEventDurationError',
    'OverlappingEventsError',
    'StorageError',
    # Model
    'CalendarEvent',
    'CountLimit',
    'DateLimit',
    'RecurrenceInterval',
    'RecurrenceRule',
    'RecurringCalendarEvent',
    'CalendarEventOptions',
    'DeleteRecurringEventOptions',
    # Recurrence math
    'DAY',
    'MINUTE',
    'WEEK',
    'compute_all_recurrences',
    'compute_end_date',
    'compute_next_date',
    'compute_next_recurrence',
    'get_next_day',
    'get_next_month',
    'get_next_week',
    # Storage
    'StorageLayer',
    'EventStorageLayer',
    'RecurringEventStorageLayer',
    'InMemoryEventStorage',
    'InMemoryRecurringEventStorage',
    'JsonEventStorage',
    'JsonRecurringEventStorage',
    'create_storage_backend',
    'get_default_storage_dir',
    'setup_logger',
]
