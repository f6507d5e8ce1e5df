"""
iCalendar encoding of events for file-backed storage.

Each record becomes a VCALENDAR holding one VEVENT:

- UID carries the storage id, SUMMARY the title
- DTSTART / DTEND are written in UTC
- RELATED-TO links a recurring instance to its template
- RRULE holds a template's rule as FREQ plus COUNT or UNTIL

iCalendar date-times have a resolution of one second. Sub-second parts
are kept in X-CALENDAR-CORE-*-US properties (microseconds) so a record
reads back exactly as it was written.
"""

from datetime import date, datetime
from typing import Optional
import pytz
from icalendar import Calendar as ICalCalendar, Event as ICalEvent

from .event import (
    CalendarEvent, CountLimit, DateLimit, RecurrenceInterval,
    RecurrenceRule, RecurringCalendarEvent
)


PRODID = '-//calendar-core//calendar-core//'
# Sub-second part of DTSTART, DTEND or UNTIL
MICROSECONDS_PROPERTY = 'X-CALENDAR-CORE-{}-US'


def parse_icalendar(ical_text: str) -> ICalCalendar:
    """Parse VCALENDAR text into an icalendar.Calendar."""
    return ICalCalendar.from_ical(ical_text)


def _utc(dt: datetime) -> datetime:
    return dt.astimezone(pytz.UTC).replace(microsecond=0)


def _add_microseconds(vevent: ICalEvent, name: str, dt: datetime) -> None:
    if dt.microsecond:
        vevent.add(MICROSECONDS_PROPERTY.format(name), str(dt.microsecond))


def _with_microseconds(vevent: ICalEvent, name: str, dt: datetime) -> datetime:
    value = vevent.get(MICROSECONDS_PROPERTY.format(name))
    if value is None:
        return dt
    return dt.replace(microsecond=int(str(value)))


def _to_datetime(value) -> datetime:
    """Normalize a parsed DTSTART/DTEND/UNTIL value to an aware UTC datetime."""
    if isinstance(value, date) and not isinstance(value, datetime):
        value = datetime.combine(value, datetime.min.time())
    if value.tzinfo is None:
        return pytz.UTC.localize(value)
    return value.astimezone(pytz.UTC)


def _wrap(vevent: ICalEvent) -> str:
    vcal = ICalCalendar()
    vcal.add('prodid', PRODID)
    vcal.add('version', '2.0')
    vcal.add_component(vevent)
    return vcal.to_ical().decode('utf-8')


def _base_vevent(uid: Optional[str], title: str, start: datetime, end: datetime) -> ICalEvent:
    vevent = ICalEvent()
    if uid:
        vevent.add('uid', uid)
    vevent.add('summary', title)
    vevent.add('dtstart', _utc(start))
    vevent.add('dtend', _utc(end))
    _add_microseconds(vevent, 'DTSTART', start)
    _add_microseconds(vevent, 'DTEND', end)
    return vevent


def _first_vevent(ical_text: str) -> ICalEvent:
    for component in parse_icalendar(ical_text).walk('VEVENT'):
        return component
    raise ValueError("iCalendar data contains no VEVENT")


def _read_datetime(vevent: ICalEvent, name: str) -> datetime:
    return _with_microseconds(vevent, name, _to_datetime(vevent.get(name).dt))


def _text(vevent: ICalEvent, name: str) -> Optional[str]:
    value = vevent.get(name)
    return str(value) if value is not None else None


def event_to_ical(event: CalendarEvent) -> str:
    vevent = _base_vevent(event.id, event.title, event.start_date, event.end_date)
    if event.recurring_event_id:
        vevent.add('related-to', event.recurring_event_id)
    return _wrap(vevent)


def ical_to_event(ical_text: str) -> CalendarEvent:
    vevent = _first_vevent(ical_text)
    return CalendarEvent(
        title=_text(vevent, 'SUMMARY') or '',
        start_date=_read_datetime(vevent, 'DTSTART'),
        end_date=_read_datetime(vevent, 'DTEND'),
        recurring_event_id=_text(vevent, 'RELATED-TO'),
        id=_text(vevent, 'UID'),
    )


def _rule_to_rrule(rule: RecurrenceRule) -> dict:
    rrule = {'freq': rule.interval.value.upper()}
    if isinstance(rule.limit, CountLimit):
        rrule['count'] = rule.limit.count
    else:
        rrule['until'] = _utc(rule.limit.end_date)
    return rrule


def _rrule_to_rule(vevent: ICalEvent, rrule) -> RecurrenceRule:
    freq = rrule.get('FREQ')
    if not freq:
        raise ValueError("RRULE has no FREQ")
    interval = RecurrenceInterval(str(freq[0]).lower())

    count = rrule.get('COUNT')
    if count:
        return RecurrenceRule(interval, CountLimit(int(count[0])))
    until = rrule.get('UNTIL')
    if until:
        return RecurrenceRule(interval, DateLimit(_with_microseconds(vevent, 'UNTIL', _to_datetime(until[0]))))
    raise ValueError("RRULE has neither COUNT nor UNTIL")


def recurring_event_to_ical(event: RecurringCalendarEvent) -> str:
    vevent = _base_vevent(event.id, event.title, event.start_date, event.end_date)
    vevent.add('rrule', _rule_to_rrule(event.rule))
    if isinstance(event.rule.limit, DateLimit):
        _add_microseconds(vevent, 'UNTIL', event.rule.limit.end_date)
    return _wrap(vevent)


def ical_to_recurring_event(ical_text: str) -> RecurringCalendarEvent:
    vevent = _first_vevent(ical_text)
    rrule = vevent.get('RRULE')
    if rrule is None:
        raise ValueError("Recurring event has no RRULE")
    return RecurringCalendarEvent(
        title=_text(vevent, 'SUMMARY') or '',
        start_date=_read_datetime(vevent, 'DTSTART'),
        end_date=_read_datetime(vevent, 'DTEND'),
        rule=_rrule_to_rule(vevent, rrule),
        id=_text(vevent, 'UID'),
    )
