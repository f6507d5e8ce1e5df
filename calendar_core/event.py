"""
Event model for calendar_core.

CalendarEvent is a single stored occurrence, RecurringCalendarEvent is the
template a series of occurrences is expanded from, and RecurrenceRule
describes how that expansion happens.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Union


class RecurrenceInterval(Enum):
    """Step between two occurrences of a recurring event."""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


@dataclass(frozen=True)
class CountLimit:
    """Stop after a fixed number of occurrences (0 means none at all)."""
    count: int

    def __post_init__(self):
        if self.count < 0:
            raise ValueError(f"Occurrence count must not be negative: {self.count}")


@dataclass(frozen=True)
class DateLimit:
    """Keep occurrences that end strictly before end_date."""
    end_date: datetime


RecurrenceLimit = Union[CountLimit, DateLimit]


@dataclass(frozen=True)
class RecurrenceRule:
    """Interval plus the limit that ends the series."""
    interval: RecurrenceInterval
    limit: RecurrenceLimit

    def __post_init__(self):
        # Accept "daily" etc. so rules can be built from config or JSON
        if not isinstance(self.interval, RecurrenceInterval):
            object.__setattr__(self, 'interval', RecurrenceInterval(self.interval))

    @classmethod
    def by_count(cls, interval: Union[RecurrenceInterval, str], count: int) -> 'RecurrenceRule':
        return cls(interval=interval, limit=CountLimit(count))

    @classmethod
    def until(cls, interval: Union[RecurrenceInterval, str], end_date: datetime) -> 'RecurrenceRule':
        return cls(interval=interval, limit=DateLimit(end_date))


@dataclass(frozen=True)
class CalendarEvent:
    """
    A single event as kept in storage.

    Instances of a recurring event carry the id of their template in
    recurring_event_id; standalone events leave it unset. The id is
    assigned by the storage on save and never changes afterwards.
    """
    title: str
    start_date: datetime
    end_date: datetime
    recurring_event_id: Optional[str] = None
    id: Optional[str] = None

    @property
    def duration_minutes(self) -> float:
        return (self.end_date - self.start_date).total_seconds() / 60

    def overlaps(self, start: datetime, end: datetime) -> bool:
        """
        Check whether this event intersects the closed interval [start, end].

        Touching intervals count as overlapping: an event ending at T
        overlaps an interval starting at T.
        """
        return not (self.end_date < start or self.start_date > end)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "recurring_event_id": self.recurring_event_id,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'CalendarEvent':
        return cls(
            title=data["title"],
            start_date=datetime.fromisoformat(data["start_date"]),
            end_date=datetime.fromisoformat(data["end_date"]),
            recurring_event_id=data.get("recurring_event_id"),
            id=data.get("id"),
        )


@dataclass(frozen=True)
class RecurringCalendarEvent:
    """
    Template of a recurring event.

    start_date and end_date describe the first occurrence; every other
    occurrence is derived from them through rule.
    """
    title: str
    start_date: datetime
    end_date: datetime
    rule: RecurrenceRule
    id: Optional[str] = None

    def first_occurrence(self) -> CalendarEvent:
        """Seed event that recurrence expansion starts from."""
        return CalendarEvent(
            title=self.title,
            start_date=self.start_date,
            end_date=self.end_date,
            recurring_event_id=self.id,
        )

    def to_dict(self) -> dict:
        limit = self.rule.limit
        if isinstance(limit, CountLimit):
            limit_data = {"type": "count", "count": limit.count}
        else:
            limit_data = {"type": "date", "end_date": limit.end_date.isoformat()}
        return {
            "id": self.id,
            "title": self.title,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "rule": {"interval": self.rule.interval.value, "limit": limit_data},
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'RecurringCalendarEvent':
        rule_data = data["rule"]
        limit_data = rule_data["limit"]
        if limit_data["type"] == "count":
            limit = CountLimit(limit_data["count"])
        elif limit_data["type"] == "date":
            limit = DateLimit(datetime.fromisoformat(limit_data["end_date"]))
        else:
            raise ValueError(f"Unknown recurrence limit type: {limit_data['type']}")

        return cls(
            title=data["title"],
            start_date=datetime.fromisoformat(data["start_date"]),
            end_date=datetime.fromisoformat(data["end_date"]),
            rule=RecurrenceRule(interval=RecurrenceInterval(rule_data["interval"]), limit=limit),
            id=data.get("id"),
        )
