"""
Per-call options for Calendar operations.

Every field defaults to its disabled value, so passing no options at all
gives the strictest behaviour.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class CalendarEventOptions:
    """Options for creating or updating events."""
    allow_overlapping: bool = False  # skip the overlap check entirely


@dataclass(frozen=True)
class DeleteRecurringEventOptions:
    """Options for Calendar.delete_recurring_event."""
    delete_only_instance_id: Optional[str] = None  # remove just this occurrence
    delete_only_future_instances: bool = False  # keep occurrences that already started
