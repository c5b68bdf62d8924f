"""
Pytest fixtures for Atlas testing.

Provides:
- A fixed clock for deterministic briefings
- Schedule item builders
- Sample booking and calendar-event records
- Pre-populated in-memory stores and services
"""

import pytest
from datetime import datetime, timedelta
from typing import Optional

from atlas.config import DEFAULT_CONFIG
from atlas.core import ItemKind, ScheduleItem
from atlas.integrations import InMemoryScheduleStore
from atlas.tools import CalendarAwareService, CalendarAwareAgent


USER_ID = "user_001"


# =============================================================================
# CLOCK FIXTURES
# =============================================================================

@pytest.fixture
def now():
    """Sunday 2026-10-18, 08:00."""
    return datetime(2026, 10, 18, 8, 0)


@pytest.fixture
def today(now):
    return now.replace(hour=0, minute=0)


@pytest.fixture
def at(today):
    """Build a datetime on the fixed day: at(14) or at(10, 30)."""
    def _at(hour: int, minute: int = 0, days: int = 0) -> datetime:
        return today + timedelta(days=days, hours=hour, minutes=minute)
    return _at


# =============================================================================
# SCHEDULE ITEM FIXTURES
# =============================================================================

@pytest.fixture
def make_item():
    """Factory for ScheduleItems with sensible defaults."""
    counter = {"n": 0}

    def _make(
        start: datetime,
        minutes: int = 60,
        kind: ItemKind = ItemKind.EVENT,
        title: Optional[str] = None,
        destination: Optional[str] = None,
        details: str = "",
    ) -> ScheduleItem:
        counter["n"] += 1
        return ScheduleItem(
            id=f"item_{counter['n']:03d}",
            kind=kind,
            title=title or f"{kind.value} {counter['n']}",
            start_time=start,
            end_time=start + timedelta(minutes=minutes),
            destination=destination,
            details=details,
        )
    return _make


# =============================================================================
# SAMPLE RECORD FIXTURES
# =============================================================================

@pytest.fixture
def sample_flight_booking():
    """Domestic flight departing at 14:00 on the fixed day."""
    return {
        "id": "booking_flight_001",
        "booking_type": "flight",
        "title": "Flight to Chicago",
        "status": "booked",
        "origin": "SFO",
        "destination": "ORD",
        "depart_date": "2026-10-18T14:00:00",
    }


@pytest.fixture
def sample_international_flight_booking():
    return {
        "id": "booking_flight_002",
        "booking_type": "flight",
        "title": "Flight to Paris",
        "status": "confirmed",
        "origin": "JFK",
        "destination": "CDG",
        "depart_date": "2026-10-18T18:00:00",
    }


@pytest.fixture
def sample_ride_booking():
    return {
        "id": "booking_ride_001",
        "booking_type": "ride",
        "title": "Ride downtown",
        "status": "booked",
        "scheduled_time": "2026-10-18T09:00:00",
        "dropoff_location_json": {"address": "500 Market St"},
    }


@pytest.fixture
def sample_doctor_booking():
    return {
        "id": "booking_doctor_001",
        "booking_type": "doctor",
        "title": "Checkup",
        "status": "confirmed",
        "appointment_time": "2026-10-18T16:30:00",
        "doctor_info_json": {"name": "Dr. Rivera", "specialty": "Cardiology"},
    }


@pytest.fixture
def sample_calendar_event():
    return {
        "id": "event_001",
        "title": "Team sync",
        "description": "Weekly planning",
        "start_time": "2026-10-18T10:30:00",
        "end_time": "2026-10-18T11:00:00",
    }


# =============================================================================
# STORE AND SERVICE FIXTURES
# =============================================================================

@pytest.fixture
def empty_store(now):
    return InMemoryScheduleStore(clock=lambda: now)


@pytest.fixture
def populated_store(
    now,
    sample_flight_booking,
    sample_ride_booking,
    sample_doctor_booking,
    sample_calendar_event,
):
    store = InMemoryScheduleStore(clock=lambda: now)
    store.add_booking(USER_ID, sample_flight_booking)
    store.add_booking(USER_ID, sample_ride_booking)
    store.add_booking(USER_ID, sample_doctor_booking)
    store.add_event(USER_ID, sample_calendar_event)
    return store


@pytest.fixture
def service_factory(now):
    """Create a CalendarAwareService over a store with the fixed clock."""
    def _create(store, config=DEFAULT_CONFIG, **kwargs):
        return CalendarAwareService(store, config=config, clock=lambda: now, **kwargs)
    return _create


@pytest.fixture
def agent_factory(service_factory):
    def _create(store, **kwargs):
        return CalendarAwareAgent(service_factory(store, **kwargs))
    return _create


@pytest.fixture
def user_id():
    return USER_ID
