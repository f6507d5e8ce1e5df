"""
Recurrence math.

Pure functions that derive end dates, next occurrences and whole series
of occurrences from a seed event and a RecurrenceRule. Nothing here
touches storage or mutates its arguments.
"""

from dataclasses import replace
from datetime import datetime, timedelta

from .event import CalendarEvent, CountLimit, DateLimit, RecurrenceInterval, RecurrenceRule


MINUTE = timedelta(minutes=1)
DAY = timedelta(days=1)
WEEK = timedelta(weeks=1)


def compute_end_date(start_date: datetime, duration_minutes: float) -> datetime:
    return start_date + duration_minutes * MINUTE


def get_next_day(date: datetime) -> datetime:
    return date + DAY


def get_next_week(date: datetime) -> datetime:
    return date + WEEK


def get_next_month(date: datetime) -> datetime:
    """
    Same day-of-month in the following calendar month.

    The day is not clamped to the length of the target month: surplus days
    carry over into the month after, so Jan 31 becomes Mar 3 in a common
    year (Mar 2 in a leap year).
    """
    if date.month == 12:
        year, month = date.year + 1, 1
    else:
        year, month = date.year, date.month + 1
    return date.replace(year=year, month=month, day=1) + (date.day - 1) * DAY


def compute_next_date(date: datetime, interval: RecurrenceInterval) -> datetime:
    if interval is RecurrenceInterval.DAILY:
        return get_next_day(date)
    if interval is RecurrenceInterval.WEEKLY:
        return get_next_week(date)
    if interval is RecurrenceInterval.MONTHLY:
        return get_next_month(date)
    raise ValueError(f"Unsupported recurrence interval: {interval!r}")


def compute_next_recurrence(event: CalendarEvent, rule: RecurrenceRule) -> CalendarEvent:
    """Shift both ends of event by one rule interval. The result has no id."""
    return CalendarEvent(
        title=event.title,
        start_date=compute_next_date(event.start_date, rule.interval),
        end_date=compute_next_date(event.end_date, rule.interval),
        recurring_event_id=event.recurring_event_id,
    )


def is_event_starting_after_date(event: CalendarEvent, date: datetime) -> bool:
    return event.start_date > date


def is_event_ending_before_date(event: CalendarEvent, date: datetime) -> bool:
    return event.end_date < date


def compute_all_recurrences(event: CalendarEvent, rule: RecurrenceRule) -> list[CalendarEvent]:
    """
    Expand rule into the full, finite list of occurrences.

    The seed event is the first occurrence. With a CountLimit exactly
    `count` occurrences are returned. With a DateLimit the seed is kept
    unless it starts after the limit, followed by every later occurrence
    that ends strictly before the limit.

    Args:
        event: First occurrence of the series.
        rule: Interval and limit of the series.

    Returns:
        Occurrences in chronological order, none of them carrying an id.
    """
    seed = replace(event, id=None)
    limit = rule.limit

    if isinstance(limit, CountLimit):
        if limit.count == 0:
            return []
        recurrences = [seed]
        for _ in range(1, limit.count):
            recurrences.append(compute_next_recurrence(recurrences[-1], rule))
        return recurrences

    if isinstance(limit, DateLimit):
        # all instances are too late
        if is_event_starting_after_date(seed, limit.end_date):
            return []
        recurrences = [seed]
        next_event = compute_next_recurrence(seed, rule)
        while is_event_ending_before_date(next_event, limit.end_date):
            recurrences.append(next_event)
            next_event = compute_next_recurrence(next_event, rule)
        return recurrences

    raise ValueError(f"Unsupported recurrence limit: {limit!r}")
