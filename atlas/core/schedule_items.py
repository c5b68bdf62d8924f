"""
Schedule Item Normalizer

Converts heterogeneous booking and calendar-event records into uniform
ScheduleItems with a start/end interval. Records without an end time get a
type-specific duration estimate; records with no usable date are dropped.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional
import logging

from ..config import EngineConfig, DEFAULT_CONFIG
from .timeutils import parse_datetime


logger = logging.getLogger(__name__)


# =============================================================================
# ENUMS
# =============================================================================

class BookingType(Enum):
    """Bookable services."""
    FLIGHT = "flight"
    RIDE = "ride"
    DOCTOR = "doctor"


class ItemKind(Enum):
    """Kinds of normalized schedule items."""
    FLIGHT = "flight"
    RIDE = "ride"
    DOCTOR = "doctor"
    EVENT = "event"        # Generic calendar event or unrecognised booking


# =============================================================================
# SOURCE RECORDS
# =============================================================================

@dataclass
class BookingRecord:
    """A booking as exposed by the booking store."""
    id: str
    booking_type: str
    title: str = ""
    status: str = "planning"
    depart_date: Optional[str] = None       # flights
    scheduled_time: Optional[str] = None    # rides
    appointment_time: Optional[str] = None  # doctor appointments
    origin: Optional[str] = None
    destination: Optional[str] = None
    dropoff_address: Optional[str] = None
    doctor_name: Optional[str] = None
    specialty: Optional[str] = None

    @property
    def primary_date(self) -> Optional[str]:
        """The first populated type-specific date field."""
        return self.depart_date or self.scheduled_time or self.appointment_time

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BookingRecord":
        """Build from a store row, flattening the nested location/doctor blobs."""
        dropoff = data.get("dropoff_location_json") or {}
        doctor = data.get("doctor_info_json") or {}
        return cls(
            id=str(data.get("id", "")),
            booking_type=str(data.get("booking_type", "")),
            title=data.get("title") or "",
            status=data.get("status") or "planning",
            depart_date=data.get("depart_date"),
            scheduled_time=data.get("scheduled_time"),
            appointment_time=data.get("appointment_time"),
            origin=data.get("origin"),
            destination=data.get("destination"),
            dropoff_address=data.get("dropoff_address") or dropoff.get("address"),
            doctor_name=data.get("doctor_name") or doctor.get("name"),
            specialty=data.get("specialty") or doctor.get("specialty"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "booking_type": self.booking_type,
            "title": self.title,
            "status": self.status,
            "depart_date": self.depart_date,
            "scheduled_time": self.scheduled_time,
            "appointment_time": self.appointment_time,
            "origin": self.origin,
            "destination": self.destination,
            "dropoff_address": self.dropoff_address,
            "doctor_name": self.doctor_name,
            "specialty": self.specialty,
        }


@dataclass
class CalendarEventRecord:
    """A generic calendar event as exposed by the booking store."""
    id: str
    title: str = ""
    description: str = ""
    start_time: Optional[str] = None
    end_time: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CalendarEventRecord":
        return cls(
            id=str(data.get("id", "")),
            title=data.get("title") or "",
            description=data.get("description") or "",
            start_time=data.get("start_time"),
            end_time=data.get("end_time"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "start_time": self.start_time,
            "end_time": self.end_time,
        }


# =============================================================================
# SCHEDULE ITEM
# =============================================================================

@dataclass
class ScheduleItem:
    """A uniform [start, end) interval on the user's schedule."""
    id: str
    kind: ItemKind
    title: str
    start_time: datetime
    end_time: datetime
    destination: Optional[str] = None
    details: str = ""
    location: Optional[str] = None
    status: Optional[str] = None

    def __post_init__(self):
        if self.end_time <= self.start_time:
            raise ValueError(
                f"ScheduleItem {self.id!r} must end after it starts "
                f"({self.start_time.isoformat()} >= {self.end_time.isoformat()})"
            )

    @property
    def duration_minutes(self) -> int:
        return int((self.end_time - self.start_time).total_seconds() / 60)

    def overlaps(self, start: datetime, end: datetime) -> bool:
        """Half-open interval overlap with [start, end)."""
        return start < self.end_time and self.start_time < end

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "kind": self.kind.value,
            "title": self.title,
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat(),
            "destination": self.destination,
            "details": self.details,
            "location": self.location,
            "status": self.status,
        }


# =============================================================================
# NORMALIZER
# =============================================================================

class ScheduleNormalizer:
    """Turns booking and calendar-event records into ScheduleItems."""

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or DEFAULT_CONFIG

    def duration_for(self, kind: ItemKind) -> timedelta:
        minutes = {
            ItemKind.FLIGHT: self.config.flight_duration_minutes,
            ItemKind.RIDE: self.config.ride_duration_minutes,
            ItemKind.DOCTOR: self.config.doctor_duration_minutes,
        }.get(kind, self.config.event_duration_minutes)
        return timedelta(minutes=minutes)

    def booking_start(self, booking: BookingRecord) -> Optional[datetime]:
        return parse_datetime(booking.primary_date)

    def normalize_booking(self, booking: BookingRecord) -> Optional[ScheduleItem]:
        start = self.booking_start(booking)
        if start is None:
            logger.debug(f"Dropping booking {booking.id!r}: no usable date")
            return None

        try:
            kind = ItemKind(booking.booking_type)
        except ValueError:
            kind = ItemKind.EVENT

        if kind == ItemKind.FLIGHT:
            details = f"{booking.origin or 'Origin'} to {booking.destination or 'Destination'}"
            location = booking.origin
        elif kind == ItemKind.RIDE:
            details = booking.dropoff_address or ""
            location = booking.dropoff_address
        elif kind == ItemKind.DOCTOR:
            details = booking.doctor_name or booking.specialty or ""
            location = None
        else:
            details = ""
            location = None

        return ScheduleItem(
            id=booking.id,
            kind=kind,
            title=booking.title or f"{booking.booking_type or 'unknown'} booking",
            start_time=start,
            end_time=start + self.duration_for(kind),
            destination=booking.destination,
            details=details,
            location=location,
            status=booking.status,
        )

    def normalize_event(self, event: CalendarEventRecord) -> Optional[ScheduleItem]:
        start = parse_datetime(event.start_time)
        if start is None:
            logger.debug(f"Dropping calendar event {event.id!r}: no usable start time")
            return None

        end = parse_datetime(event.end_time)
        if end is None or end <= start:
            end = start + self.duration_for(ItemKind.EVENT)

        return ScheduleItem(
            id=event.id,
            kind=ItemKind.EVENT,
            title=event.title or "Calendar event",
            start_time=start,
            end_time=end,
            details=event.description,
        )

    def normalize(
        self,
        bookings: Iterable[BookingRecord] = (),
        events: Iterable[CalendarEventRecord] = ()
    ) -> List[ScheduleItem]:
        """Normalize bookings then events. Order is not guaranteed to be chronological."""
        items: List[ScheduleItem] = []
        for booking in bookings:
            item = self.normalize_booking(booking)
            if item:
                items.append(item)
        for event in events:
            item = self.normalize_event(event)
            if item:
                items.append(item)
        return items


def sort_items(items: Iterable[ScheduleItem]) -> List[ScheduleItem]:
    return sorted(items, key=lambda i: (i.start_time, i.end_time))
