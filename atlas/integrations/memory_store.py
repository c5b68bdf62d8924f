"""
In-memory schedule store.

Implements ScheduleDataSource over plain lists, with the write operations the
booking flow uses. Backs the test-suite and the CLI's --data files.

YAML layout accepted by from_yaml():

    user_id: demo
    bookings:
      - id: b1
        booking_type: flight
        title: Flight to Paris
        depart_date: "2026-10-18T14:00:00"
        destination: CDG
    events:
      - id: e1
        title: Team sync
        start_time: "2026-10-18T10:30:00"
        end_time: "2026-10-18T11:00:00"
"""

from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union
import logging

import yaml

from . import DataSourceError
from ..core.schedule_items import BookingRecord, CalendarEventRecord
from ..core.timeutils import parse_datetime


logger = logging.getLogger(__name__)

ACTIVE_BOOKING_STATUSES = frozenset({
    "planning", "searching", "watching", "holding", "booked", "confirmed"
})

DEFAULT_USER_ID = "demo"


class InMemoryScheduleStore:
    """
    Bookings and calendar events keyed by user id.

    "Upcoming" is relative to the injected clock: dated bookings earlier
    than clock() are not returned. Undated bookings always are.
    """

    adapter_name = "InMemoryScheduleStore"

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self.clock = clock or datetime.now
        self._bookings: Dict[str, List[BookingRecord]] = {}
        self._events: Dict[str, List[CalendarEventRecord]] = {}

    # -------------------------------------------------------------------------
    # WRITE
    # -------------------------------------------------------------------------

    def add_booking(self, user_id: str, booking: Union[BookingRecord, Dict[str, Any]]) -> BookingRecord:
        if isinstance(booking, dict):
            booking = BookingRecord.from_dict(booking)
        self._bookings.setdefault(user_id, []).append(booking)
        return booking

    def add_event(self, user_id: str, event: Union[CalendarEventRecord, Dict[str, Any]]) -> CalendarEventRecord:
        if isinstance(event, dict):
            event = CalendarEventRecord.from_dict(event)
        self._events.setdefault(user_id, []).append(event)
        return event

    def update_booking_status(self, user_id: str, booking_id: str, status: str) -> bool:
        for booking in self._bookings.get(user_id, []):
            if booking.id == booking_id:
                booking.status = status
                return True
        return False

    def delete_event(self, user_id: str, event_id: str) -> bool:
        events = self._events.get(user_id, [])
        remaining = [e for e in events if e.id != event_id]
        self._events[user_id] = remaining
        return len(remaining) != len(events)

    # -------------------------------------------------------------------------
    # READ (ScheduleDataSource)
    # -------------------------------------------------------------------------

    async def fetch_upcoming_bookings(self, user_id: str, limit: int) -> List[BookingRecord]:
        now = self.clock()
        upcoming = []
        for booking in self._bookings.get(user_id, []):
            if booking.status not in ACTIVE_BOOKING_STATUSES:
                continue
            booking_time = parse_datetime(booking.primary_date)
            if booking_time is not None and booking_time < now:
                continue
            upcoming.append((booking_time, booking))

        # Dated bookings first, soonest first
        upcoming.sort(key=lambda pair: (pair[0] is None, pair[0] or datetime.min))
        return [booking for _, booking in upcoming[:limit]]

    async def fetch_calendar_events(
        self,
        user_id: str,
        start_iso: str,
        end_iso: str
    ) -> List[CalendarEventRecord]:
        start = parse_datetime(start_iso)
        end = parse_datetime(end_iso)
        if start is None or end is None:
            raise DataSourceError(
                self.adapter_name,
                "fetch calendar events",
                f"invalid range {start_iso!r} - {end_iso!r}"
            )

        events = []
        for event in self._events.get(user_id, []):
            event_start = parse_datetime(event.start_time)
            if event_start is None or start <= event_start <= end:
                events.append(event)
        return events

    # -------------------------------------------------------------------------
    # LOADING
    # -------------------------------------------------------------------------

    @classmethod
    def from_dict(cls, data: Dict[str, Any], user_id: Optional[str] = None,
                  clock: Optional[Callable[[], datetime]] = None) -> "InMemoryScheduleStore":
        store = cls(clock=clock)
        owner = user_id or data.get("user_id") or DEFAULT_USER_ID
        for booking in data.get("bookings") or []:
            store.add_booking(owner, booking)
        for event in data.get("events") or []:
            store.add_event(owner, event)
        return store

    @classmethod
    def from_yaml(cls, path: Union[str, Path], user_id: Optional[str] = None,
                  clock: Optional[Callable[[], datetime]] = None) -> "InMemoryScheduleStore":
        data_file = Path(path)
        try:
            with open(data_file) as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise DataSourceError(cls.adapter_name, "load schedule data", str(e), original_error=e) from e

        if not isinstance(data, dict):
            raise DataSourceError(cls.adapter_name, "load schedule data", "root must be a mapping")

        store = cls.from_dict(data, user_id=user_id, clock=clock)
        logger.info(
            f"Loaded {sum(len(v) for v in store._bookings.values())} bookings and "
            f"{sum(len(v) for v in store._events.values())} events from {data_file}"
        )
        return store
