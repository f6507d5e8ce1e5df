"""
Calendar engine.

Creates, updates and deletes single and recurring events on top of the
storage port, expanding recurrence rules and enforcing the duration and
overlap rules.

The engine does no locking of its own. Every operation awaits several
storage calls in sequence (check, then write), so callers must not run
two operations against the same storage concurrently. Recurring
operations are not transactional: a crash between their writes can leave
a partially written series.
"""

from dataclasses import replace
from datetime import datetime
from typing import Callable, Optional
import logging

from .config import CalendarConfig
from .errors import EventNotFoundError, InvalidEventDurationError, OverlappingEventsError
from .event import CalendarEvent, DateLimit, RecurrenceRule, RecurringCalendarEvent
from .event_storage import create_storage_backend
from .logger import setup_logger
from .options import CalendarEventOptions, DeleteRecurringEventOptions
from .recurrence import compute_all_recurrences, compute_end_date
from .storage import EventStorageLayer, RecurringEventStorageLayer
from .timezone_utils import to_utc_datetime, utc_now


logger = logging.getLogger(__name__)


class Calendar:
    """
    Entry point for all event operations.

    Args:
        event_storage: Storage for single events and recurring instances.
        recurring_event_storage: Storage for recurring event templates.
        config: Limits and timezone; defaults to CalendarConfig().
        clock: Returns the current time. "Now" decides which instances of
            a recurring event are past and which are future.
    """

    def __init__(
        self,
        event_storage: EventStorageLayer,
        recurring_event_storage: RecurringEventStorageLayer,
        config: Optional[CalendarConfig] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._events = event_storage
        self._recurring_events = recurring_event_storage
        self.config = config or CalendarConfig()
        self._clock = clock or utc_now

    @classmethod
    def from_config(cls, config: CalendarConfig) -> 'Calendar':
        """
        Calendar persisting to JSON files in config.storage_dir.

        Also sets the package logger to config.log_level.
        """
        setup_logger(config.log_level_number)
        event_storage, recurring_event_storage = create_storage_backend(config.storage_dir)
        return cls(event_storage, recurring_event_storage, config=config)

    # ==================== Helpers ====================

    def _now(self) -> datetime:
        return to_utc_datetime(self._clock(), self.config.timezone)

    def _to_utc(self, dt: datetime) -> datetime:
        return to_utc_datetime(dt, self.config.timezone)

    def _normalize_rule(self, rule: RecurrenceRule) -> RecurrenceRule:
        if isinstance(rule.limit, DateLimit):
            return replace(rule, limit=DateLimit(self._to_utc(rule.limit.end_date)))
        return rule

    def _check_duration(self, duration_minutes: float) -> None:
        max_minutes = self.config.max_event_duration_minutes
        if duration_minutes <= 0 or duration_minutes > max_minutes:
            logger.info("Rejected event duration of %s minutes (max %s)", duration_minutes, max_minutes)
            raise InvalidEventDurationError(duration_minutes, max_minutes)

    async def _find_overlapping(
        self,
        event: CalendarEvent,
        ignore: Callable[[CalendarEvent], bool] = lambda other: False,
    ) -> list[CalendarEvent]:
        overlapping = await self._events.find_overlapping_with_interval(event.start_date, event.end_date)
        return [other for other in overlapping if not ignore(other)]

    async def _ensure_no_overlap(
        self,
        events: list[CalendarEvent],
        ignore: Callable[[CalendarEvent], bool] = lambda other: False,
    ) -> None:
        """Raise OverlappingEventsError on the first event colliding with stored ones."""
        for event in events:
            overlapping = await self._find_overlapping(event, ignore)
            if overlapping:
                logger.info(
                    "'%s' at %s overlaps %d stored event(s)",
                    event.title, event.start_date.isoformat(), len(overlapping)
                )
                raise OverlappingEventsError(overlapping)

    # ==================== Single Events ====================

    async def create_event(
        self,
        start_date: datetime,
        duration_minutes: float,
        title: str,
        options: Optional[CalendarEventOptions] = None,
    ) -> CalendarEvent:
        """
        Create a standalone event.

        Raises:
            InvalidEventDurationError: duration not in (0, max].
            OverlappingEventsError: another event intersects the new one and
                overlapping is not allowed.
        """
        options = options or CalendarEventOptions()
        self._check_duration(duration_minutes)

        start_date = self._to_utc(start_date)
        event = CalendarEvent(
            title=title,
            start_date=start_date,
            end_date=compute_end_date(start_date, duration_minutes),
        )
        if not options.allow_overlapping:
            await self._ensure_no_overlap([event])

        saved = await self._events.save(event)
        logger.debug("Created event %s '%s'", saved.id, saved.title)
        return saved

    async def get_event(self, event_id: str) -> CalendarEvent:
        event = await self._events.find_by_id(event_id)
        if event is None:
            raise EventNotFoundError(event_id)
        return event

    async def list_events_in_range(self, start_date: datetime, end_date: datetime) -> list[CalendarEvent]:
        """All events (standalone and instances) intersecting [start_date, end_date]."""
        return await self._events.find_overlapping_with_interval(
            self._to_utc(start_date), self._to_utc(end_date)
        )

    async def update_event(
        self,
        event_id: str,
        start_date: datetime,
        duration_minutes: float,
        title: str,
        options: Optional[CalendarEventOptions] = None,
    ) -> CalendarEvent:
        """
        Reschedule and rename an event, keeping its id.

        An event never collides with its own previous version. Instances
        of a recurring event stay attached to their template.

        Checks run in this order: duration, existence of event_id, overlap.
        An unknown id therefore raises EventNotFoundError even when the new
        interval would also collide.

        Raises:
            InvalidEventDurationError, EventNotFoundError, OverlappingEventsError
        """
        options = options or CalendarEventOptions()
        self._check_duration(duration_minutes)

        current = await self.get_event(event_id)
        start_date = self._to_utc(start_date)
        event = CalendarEvent(
            title=title,
            start_date=start_date,
            end_date=compute_end_date(start_date, duration_minutes),
            recurring_event_id=current.recurring_event_id,
        )
        if not options.allow_overlapping:
            await self._ensure_no_overlap([event], ignore=lambda other: other.id == event_id)

        updated = await self._events.update(event_id, event)
        if updated is None:
            raise EventNotFoundError(event_id)
        logger.debug("Updated event %s", event_id)
        return updated

    async def delete_event(self, event_id: str) -> None:
        """Delete a standalone event or a single recurring instance."""
        if not await self._events.delete(event_id):
            raise EventNotFoundError(event_id)
        logger.debug("Deleted event %s", event_id)

    # ==================== Recurring Events ====================

    async def create_recurring_event(
        self,
        start_date: datetime,
        duration_minutes: float,
        title: str,
        rule: RecurrenceRule,
        options: Optional[CalendarEventOptions] = None,
    ) -> RecurringCalendarEvent:
        """
        Create a recurring event and all of its instances.

        Every instance is checked against the stored events before anything
        is written, so a collision leaves storage untouched. The template
        is saved only after that check passes: a rejected series leaves no
        template behind. Instances are not checked against each other.

        Returns:
            The stored template; use list_instances() for the occurrences.
        """
        options = options or CalendarEventOptions()
        self._check_duration(duration_minutes)

        rule = self._normalize_rule(rule)
        start_date = self._to_utc(start_date)
        template = RecurringCalendarEvent(
            title=title,
            start_date=start_date,
            end_date=compute_end_date(start_date, duration_minutes),
            rule=rule,
        )
        instances = compute_all_recurrences(template.first_occurrence(), rule)
        if not options.allow_overlapping:
            await self._ensure_no_overlap(instances)

        saved = await self._recurring_events.save(template)
        for instance in instances:
            await self._events.save(replace(instance, recurring_event_id=saved.id))

        logger.debug(
            "Created recurring event %s '%s' with %d instance(s)",
            saved.id, saved.title, len(instances)
        )
        return saved

    async def get_recurring_event(self, recurring_event_id: str) -> RecurringCalendarEvent:
        template = await self._recurring_events.find_by_id(recurring_event_id)
        if template is None:
            raise EventNotFoundError(recurring_event_id)
        return template

    async def list_instances(self, recurring_event_id: str) -> list[CalendarEvent]:
        """Stored instances of a recurring event, past and future."""
        return await self._events.find_by_recurring_event_id(recurring_event_id)

    async def update_recurring_event(
        self,
        recurring_event_id: str,
        rule: RecurrenceRule,
        options: Optional[CalendarEventOptions] = None,
    ) -> RecurringCalendarEvent:
        """
        Replace the rule of a recurring event for future occurrences.

        Instances that started at or before now are kept as they are. The
        series is re-expanded from the template's original first occurrence
        with the new rule and only occurrences starting after now replace
        the stored future instances.

        Raises:
            EventNotFoundError: the template does not exist.
            OverlappingEventsError: a new instance collides with an event
                not owned by this template; nothing is changed.
        """
        options = options or CalendarEventOptions()
        template = await self.get_recurring_event(recurring_event_id)
        rule = self._normalize_rule(rule)
        now = self._now()

        existing = await self._events.find_by_recurring_event_id(recurring_event_id)
        future_instances = [e for e in existing if e.start_date > now]

        proposed = [
            e for e in compute_all_recurrences(template.first_occurrence(), rule)
            if e.start_date > now
        ]
        if not options.allow_overlapping:
            await self._ensure_no_overlap(
                proposed,
                ignore=lambda other: other.recurring_event_id == recurring_event_id,
            )

        for instance in future_instances:
            await self._events.delete(instance.id)
        for instance in proposed:
            await self._events.save(instance)

        updated = await self._recurring_events.update(recurring_event_id, replace(template, rule=rule))
        if updated is None:
            raise EventNotFoundError(recurring_event_id)

        logger.debug(
            "Updated recurring event %s: replaced %d future instance(s) with %d",
            recurring_event_id, len(future_instances), len(proposed)
        )
        return updated

    async def delete_recurring_event(
        self,
        recurring_event_id: str,
        options: Optional[DeleteRecurringEventOptions] = None,
    ) -> None:
        """
        Delete a recurring event, its instances, or a single instance.

        With delete_only_instance_id only that instance is removed and the
        template stays. Otherwise the template is removed together with all
        its instances, or only with those starting after now when
        delete_only_future_instances is set; past instances then stay in
        storage, still tagged with the id of the deleted template.

        Raises:
            EventNotFoundError: the template, or the instance within it,
                does not exist.
        """
        options = options or DeleteRecurringEventOptions()

        if options.delete_only_instance_id is not None:
            await self._delete_instance(recurring_event_id, options.delete_only_instance_id)
            return

        if not await self._recurring_events.delete(recurring_event_id):
            raise EventNotFoundError(recurring_event_id)

        instances = await self._events.find_by_recurring_event_id(recurring_event_id)
        if options.delete_only_future_instances:
            now = self._now()
            instances = [e for e in instances if e.start_date > now]

        for instance in instances:
            await self._events.delete(instance.id)

        logger.debug(
            "Deleted recurring event %s and %d instance(s)",
            recurring_event_id, len(instances)
        )

    async def _delete_instance(self, recurring_event_id: str, instance_id: str) -> None:
        await self.get_recurring_event(recurring_event_id)

        instance = await self._events.find_by_id(instance_id)
        if instance is None or instance.recurring_event_id != recurring_event_id:
            raise EventNotFoundError(instance_id)

        if not await self._events.delete(instance_id):
            raise EventNotFoundError(instance_id)
        logger.debug("Deleted instance %s of recurring event %s", instance_id, recurring_event_id)
