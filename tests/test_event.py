"""Tests for the event model."""

import pytest

from calendar_core import (
    DAY, MINUTE,
    CalendarEvent, CountLimit, DateLimit, RecurrenceInterval, RecurrenceRule,
    RecurringCalendarEvent,
)

from conftest import NOW, make_event


class TestOverlaps:

    def test_contained(self):
        assert make_event(NOW, 60).overlaps(NOW + 10 * MINUTE, NOW + 20 * MINUTE)

    def test_touching_end(self):
        assert make_event(NOW, 30).overlaps(NOW + 30 * MINUTE, NOW + 60 * MINUTE)

    def test_touching_start(self):
        assert make_event(NOW, 30).overlaps(NOW - 30 * MINUTE, NOW)

    def test_disjoint(self):
        event = make_event(NOW, 30)
        assert not event.overlaps(NOW + 31 * MINUTE, NOW + 60 * MINUTE)
        assert not event.overlaps(NOW - DAY, NOW - MINUTE)


def test_duration_minutes():
    assert make_event(NOW, 90).duration_minutes == 90


def test_events_are_immutable():
    event = make_event(NOW)
    with pytest.raises(AttributeError):
        event.title = "Changed"


def test_event_dict_roundtrip():
    event = make_event(NOW, 30, "Lunch", recurring_event_id="series", id="event-1")
    data = event.to_dict()
    assert data["start_date"] == "2024-03-10T12:00:00+00:00"
    assert CalendarEvent.from_dict(data) == event


@pytest.mark.parametrize("rule", [
    RecurrenceRule.by_count(RecurrenceInterval.WEEKLY, 4),
    RecurrenceRule.until("monthly", NOW + 90 * DAY),
])
def test_recurring_event_dict_roundtrip(rule):
    template = RecurringCalendarEvent("Review", NOW, NOW + 60 * MINUTE, rule, id="series")
    assert RecurringCalendarEvent.from_dict(template.to_dict()) == template


def test_recurring_event_from_dict_rejects_unknown_limit():
    data = RecurringCalendarEvent("Review", NOW, NOW + MINUTE, RecurrenceRule.by_count("daily", 1)).to_dict()
    data["rule"]["limit"] = {"type": "forever"}
    with pytest.raises(ValueError):
        RecurringCalendarEvent.from_dict(data)


def test_first_occurrence_is_tagged_with_template_id():
    template = RecurringCalendarEvent("Review", NOW, NOW + 60 * MINUTE, RecurrenceRule.by_count("daily", 1), id="series")
    first = template.first_occurrence()
    assert first == CalendarEvent("Review", NOW, NOW + 60 * MINUTE, recurring_event_id="series")


class TestRecurrenceRule:

    def test_interval_from_string(self):
        rule = RecurrenceRule("weekly", CountLimit(2))
        assert rule.interval is RecurrenceInterval.WEEKLY

    def test_unknown_interval(self):
        with pytest.raises(ValueError):
            RecurrenceRule("hourly", CountLimit(2))

    def test_negative_count(self):
        with pytest.raises(ValueError):
            RecurrenceRule.by_count("daily", -1)

    def test_constructors(self):
        assert RecurrenceRule.by_count("daily", 3).limit == CountLimit(3)
        assert RecurrenceRule.until("daily", NOW).limit == DateLimit(NOW)
