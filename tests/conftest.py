"""Shared fixtures for calendar_core tests."""

from datetime import datetime, timedelta
import logging

import pytest
import pytz

from calendar_core import (
    Calendar, CalendarEvent, InMemoryEventStorage, InMemoryRecurringEventStorage
)
from calendar_core.logger import PACKAGE_LOGGER


NOW = datetime(2024, 3, 10, 12, 0, tzinfo=pytz.UTC)
EPOCH = datetime(1970, 1, 1, tzinfo=pytz.UTC)
TEN_YEARS = timedelta(days=10 * 365)


@pytest.fixture
def event_storage():
    return InMemoryEventStorage()


@pytest.fixture
def recurring_event_storage():
    return InMemoryRecurringEventStorage()


@pytest.fixture
def calendar(event_storage, recurring_event_storage):
    """Calendar over fresh in-memory storages with the clock frozen at NOW."""
    return Calendar(event_storage, recurring_event_storage, clock=lambda: NOW)


async def all_events(calendar: Calendar) -> list[CalendarEvent]:
    return await calendar.list_events_in_range(EPOCH, NOW + TEN_YEARS)


def make_event(start: datetime, minutes: int = 30, title: str = "Event", **kwargs) -> CalendarEvent:
    return CalendarEvent(
        title=title,
        start_date=start,
        end_date=start + timedelta(minutes=minutes),
        **kwargs,
    )


@pytest.fixture(autouse=True)
def restore_package_logger():
    """Undo setup_logger() calls made through Calendar.from_config."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    level, handlers = logger.level, list(logger.handlers)
    yield logger
    logger.setLevel(level)
    for handler in list(logger.handlers):
        if handler not in handlers:
            logger.removeHandler(handler)
