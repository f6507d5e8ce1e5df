"""Tests for the in-memory storage backends."""

import pytest

from calendar_core import DAY, MINUTE, RecurrenceRule, RecurringCalendarEvent

from conftest import NOW, make_event


pytestmark = pytest.mark.asyncio


class TestInMemoryEventStorage:

    async def test_save_assigns_fresh_id(self, event_storage):
        first = await event_storage.save(make_event(NOW))
        second = await event_storage.save(make_event(NOW))

        assert first.id and second.id
        assert first.id != second.id
        assert len(event_storage) == 2

    async def test_save_ignores_caller_id(self, event_storage):
        saved = await event_storage.save(make_event(NOW, id="chosen"))
        assert saved.id != "chosen"
        assert await event_storage.find_by_id("chosen") is None

    async def test_find_by_id(self, event_storage):
        saved = await event_storage.save(make_event(NOW, title="Lunch"))
        assert await event_storage.find_by_id(saved.id) == saved
        assert await event_storage.find_by_id("missing") is None

    async def test_update_keeps_id(self, event_storage):
        saved = await event_storage.save(make_event(NOW))
        updated = await event_storage.update(saved.id, make_event(NOW + DAY, 60, "Moved"))

        assert updated.id == saved.id
        assert await event_storage.find_by_id(saved.id) == updated
        assert await event_storage.find_overlapping_with_interval(NOW, NOW + MINUTE) == []
        assert await event_storage.find_overlapping_with_interval(NOW + DAY, NOW + DAY) == [updated]

    async def test_update_missing(self, event_storage):
        assert await event_storage.update("missing", make_event(NOW)) is None
        assert len(event_storage) == 0

    async def test_delete(self, event_storage):
        saved = await event_storage.save(make_event(NOW))
        assert await event_storage.delete(saved.id) is True
        assert await event_storage.delete(saved.id) is False
        assert await event_storage.find_by_id(saved.id) is None
        assert await event_storage.find_overlapping_with_interval(NOW, NOW + DAY) == []

    async def test_find_overlapping_with_interval(self, event_storage):
        early = await event_storage.save(make_event(NOW, 30, "Early"))
        late = await event_storage.save(make_event(NOW + 60 * MINUTE, 30, "Late"))

        assert await event_storage.find_overlapping_with_interval(NOW + 30 * MINUTE, NOW + 60 * MINUTE) == [early, late]
        assert await event_storage.find_overlapping_with_interval(NOW + 31 * MINUTE, NOW + 59 * MINUTE) == []

    async def test_queries_stay_correct_after_many_deletes(self, event_storage):
        saved = [await event_storage.save(make_event(NOW + n * DAY)) for n in range(40)]
        for event in saved[::2]:
            await event_storage.delete(event.id)

        remaining = await event_storage.find_overlapping_with_interval(NOW, NOW + 40 * DAY)
        assert remaining == saved[1::2]
        for event in saved[1::2]:
            assert await event_storage.find_by_id(event.id) == event
            assert await event_storage.delete(event.id) is True
        assert len(event_storage) == 0

    async def test_find_by_recurring_event_id(self, event_storage):
        first = await event_storage.save(make_event(NOW, recurring_event_id="series"))
        await event_storage.save(make_event(NOW + DAY, recurring_event_id="other"))
        await event_storage.save(make_event(NOW + 2 * DAY))
        second = await event_storage.save(make_event(NOW + 3 * DAY, recurring_event_id="series"))

        assert await event_storage.find_by_recurring_event_id("series") == [first, second]
        assert await event_storage.find_by_recurring_event_id("unknown") == []

        await event_storage.delete(first.id)
        await event_storage.delete(second.id)
        assert await event_storage.find_by_recurring_event_id("series") == []


class TestInMemoryRecurringEventStorage:

    @pytest.fixture
    def template(self):
        return RecurringCalendarEvent(
            title="Standup",
            start_date=NOW,
            end_date=NOW + 15 * MINUTE,
            rule=RecurrenceRule.by_count("daily", 5),
        )

    async def test_crud(self, recurring_event_storage, template):
        saved = await recurring_event_storage.save(template)
        assert saved.id is not None
        assert await recurring_event_storage.find_by_id(saved.id) == saved

        new_rule = RecurrenceRule.until("weekly", NOW + 30 * DAY)
        updated = await recurring_event_storage.update(saved.id, RecurringCalendarEvent(
            title=saved.title, start_date=saved.start_date, end_date=saved.end_date, rule=new_rule,
        ))
        assert updated.id == saved.id
        assert (await recurring_event_storage.find_by_id(saved.id)).rule == new_rule

        assert await recurring_event_storage.delete(saved.id) is True
        assert await recurring_event_storage.delete(saved.id) is False
        assert len(recurring_event_storage) == 0

    async def test_missing(self, recurring_event_storage, template):
        assert await recurring_event_storage.find_by_id("missing") is None
        assert await recurring_event_storage.update("missing", template) is None
