"""
Exceptions raised by the calendar engine and the bundled storages.

All of them derive from CalendarError so callers can catch the whole
family at the boundary where they translate failures for a user.
"""

from typing import Iterable


class CalendarError(Exception):
    """Base class for every error raised by calendar_core."""


class InvalidEventDurationError(CalendarError):
    """Requested duration is not positive or exceeds the configured maximum."""

    def __init__(self, duration_minutes: float, max_minutes: int):
        self.duration_minutes = duration_minutes
        self.max_minutes = max_minutes
        super().__init__(
            f"Event duration of {duration_minutes} minutes is invalid "
            f"(must be positive and at most {max_minutes} minutes)"
        )


class OverlappingEventsError(CalendarError):
    """A write would make two or more events overlap."""

    def __init__(self, overlapping: Iterable = ()):
        self.overlapping = list(overlapping)
        super().__init__(
            "Two or more events would be overlapping. "
            "Change interval or set the `allow_overlapping` option"
        )


class EventNotFoundError(CalendarError):
    """The targeted event or recurring event is not stored."""

    def __init__(self, event_id: str):
        self.event_id = event_id
        super().__init__(f"Event {event_id} is not in calendar")


class StorageError(CalendarError):
    """A file-backed storage could not read or write its data."""
