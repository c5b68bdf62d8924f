"""
Tests for the in-memory schedule store

Tests cover:
- Active-status and past-date filtering, ordering and limits for bookings
- Calendar event range queries
- Write operations
- Loading from mappings and YAML files
"""

import pytest
from datetime import datetime

from atlas.integrations import (
    ACTIVE_BOOKING_STATUSES,
    DataSourceError,
    InMemoryScheduleStore,
    ScheduleDataSource,
)
from atlas.integrations.memory_store import DEFAULT_USER_ID


DAY_START = "2026-10-18T00:00:00"
DAY_END = "2026-10-18T23:59:59"


def fixed_clock():
    return datetime(2026, 10, 18, 8, 0)


class TestBookings:
    """Tests for fetch_upcoming_bookings."""

    @pytest.mark.asyncio
    async def test_sorted_soonest_first(self, populated_store, user_id):
        bookings = await populated_store.fetch_upcoming_bookings(user_id, 20)
        assert [b.id for b in bookings] == [
            "booking_ride_001", "booking_flight_001", "booking_doctor_001"
        ]

    @pytest.mark.asyncio
    async def test_limit(self, populated_store, user_id):
        bookings = await populated_store.fetch_upcoming_bookings(user_id, 2)
        assert len(bookings) == 2

    @pytest.mark.asyncio
    async def test_inactive_statuses_excluded(self, populated_store, user_id):
        assert populated_store.update_booking_status(user_id, "booking_flight_001", "cancelled")
        bookings = await populated_store.fetch_upcoming_bookings(user_id, 20)
        assert "booking_flight_001" not in [b.id for b in bookings]

    @pytest.mark.asyncio
    async def test_undated_bookings_last(self, populated_store, user_id):
        populated_store.add_booking(user_id, {"id": "undated", "booking_type": "ride", "status": "holding"})
        bookings = await populated_store.fetch_upcoming_bookings(user_id, 20)
        assert bookings[-1].id == "undated"

    @pytest.mark.asyncio
    async def test_users_are_isolated(self, populated_store):
        assert await populated_store.fetch_upcoming_bookings("someone_else", 20) == []

    @pytest.mark.asyncio
    async def test_past_bookings_excluded(self, populated_store, user_id):
        populated_store.add_booking(user_id, {
            "id": "yesterday", "booking_type": "ride", "status": "booked",
            "scheduled_time": "2026-10-17T09:00:00",
        })
        populated_store.add_booking(user_id, {
            "id": "earlier_today", "booking_type": "doctor", "status": "confirmed",
            "appointment_time": "2026-10-18T07:59:00",
        })
        bookings = await populated_store.fetch_upcoming_bookings(user_id, 20)
        ids = [b.id for b in bookings]
        assert "yesterday" not in ids
        assert "earlier_today" not in ids
        assert len(ids) == 3

    @pytest.mark.asyncio
    async def test_booking_at_current_time_included(self, empty_store, user_id):
        empty_store.add_booking(user_id, {
            "id": "right_now", "booking_type": "ride", "status": "booked",
            "scheduled_time": "2026-10-18T08:00:00",
        })
        bookings = await empty_store.fetch_upcoming_bookings(user_id, 20)
        assert [b.id for b in bookings] == ["right_now"]

    @pytest.mark.asyncio
    async def test_clock_moves_cutoff(self, sample_flight_booking, user_id):
        store = InMemoryScheduleStore(clock=lambda: datetime(2026, 10, 18, 15, 0))
        store.add_booking(user_id, sample_flight_booking)
        assert await store.fetch_upcoming_bookings(user_id, 20) == []

    def test_nested_blobs_flattened(self, populated_store, user_id):
        rides = [b for b in populated_store._bookings[user_id] if b.booking_type == "ride"]
        assert rides[0].dropoff_address == "500 Market St"

    def test_update_unknown_booking(self, populated_store, user_id):
        assert populated_store.update_booking_status(user_id, "missing", "booked") is False

    def test_active_statuses(self):
        assert "booked" in ACTIVE_BOOKING_STATUSES
        assert "cancelled" not in ACTIVE_BOOKING_STATUSES


class TestEvents:
    """Tests for fetch_calendar_events."""

    @pytest.mark.asyncio
    async def test_events_in_range(self, populated_store, user_id):
        events = await populated_store.fetch_calendar_events(user_id, DAY_START, DAY_END)
        assert [e.id for e in events] == ["event_001"]

    @pytest.mark.asyncio
    async def test_events_outside_range_excluded(self, populated_store, user_id):
        events = await populated_store.fetch_calendar_events(
            user_id, "2026-10-19T00:00:00", "2026-10-19T23:59:59"
        )
        assert events == []

    @pytest.mark.asyncio
    async def test_undated_events_returned(self, empty_store, user_id):
        empty_store.add_event(user_id, {"id": "e_tbd", "title": "Sometime"})
        events = await empty_store.fetch_calendar_events(user_id, DAY_START, DAY_END)
        assert [e.id for e in events] == ["e_tbd"]

    @pytest.mark.asyncio
    async def test_invalid_range_raises(self, empty_store, user_id):
        with pytest.raises(DataSourceError) as exc_info:
            await empty_store.fetch_calendar_events(user_id, "yesterday", DAY_END)
        assert exc_info.value.error_code == "FETCH_FAILED"
        assert exc_info.value.to_dict()["adapter"] == "InMemoryScheduleStore"

    @pytest.mark.asyncio
    async def test_delete_event(self, populated_store, user_id):
        assert populated_store.delete_event(user_id, "event_001") is True
        assert populated_store.delete_event(user_id, "event_001") is False
        assert await populated_store.fetch_calendar_events(user_id, DAY_START, DAY_END) == []


class TestLoading:
    """Tests for building stores from data files."""

    def test_satisfies_protocol(self, empty_store):
        assert isinstance(empty_store, ScheduleDataSource)

    @pytest.mark.asyncio
    async def test_from_dict_default_user(self, sample_flight_booking):
        store = InMemoryScheduleStore.from_dict({"bookings": [sample_flight_booking]}, clock=fixed_clock)
        bookings = await store.fetch_upcoming_bookings(DEFAULT_USER_ID, 20)
        assert [b.id for b in bookings] == ["booking_flight_001"]

    @pytest.mark.asyncio
    async def test_from_yaml(self, tmp_path):
        path = tmp_path / "schedule.yaml"
        path.write_text(
            "user_id: alex\n"
            "bookings:\n"
            "  - id: b1\n"
            "    booking_type: flight\n"
            "    status: booked\n"
            "    depart_date: '2026-10-18T14:00:00'\n"
            "    destination: CDG\n"
            "events:\n"
            "  - id: e1\n"
            "    title: Team sync\n"
            "    start_time: '2026-10-18T10:30:00'\n"
        )
        store = InMemoryScheduleStore.from_yaml(path, clock=fixed_clock)
        assert [b.id for b in await store.fetch_upcoming_bookings("alex", 20)] == ["b1"]
        assert [e.id for e in await store.fetch_calendar_events("alex", DAY_START, DAY_END)] == ["e1"]

    @pytest.mark.asyncio
    async def test_from_yaml_user_override(self, tmp_path):
        path = tmp_path / "schedule.yaml"
        path.write_text("user_id: alex\nevents:\n  - id: e1\n    start_time: '2026-10-18T10:30:00'\n")
        store = InMemoryScheduleStore.from_yaml(path, user_id="sam")
        assert len(await store.fetch_calendar_events("sam", DAY_START, DAY_END)) == 1

    def test_from_yaml_missing_file(self, tmp_path):
        with pytest.raises(DataSourceError):
            InMemoryScheduleStore.from_yaml(tmp_path / "missing.yaml")

    def test_from_yaml_non_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- one\n- two\n")
        with pytest.raises(DataSourceError):
            InMemoryScheduleStore.from_yaml(path)
