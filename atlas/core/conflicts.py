"""
Conflict Detector

Checks a requested booking time against the user's normalized schedule.
Three rule sets are selected by booking type:

- ride:   ride vs. upcoming flights (airport lead time), plus plain overlap
- doctor: overlap with anything, resolved through the slot search
- flight: commitments that end shortly before departure (warning only)

evaluate() is pure: given the requested time and the existing items it
returns a CalendarAwareResult. Fetching the items is the caller's job.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Union

from ..config import EngineConfig, DEFAULT_CONFIG
from .adjustment import AdjustmentEngine
from .buffer_policy import DestinationClassifier, KeywordDestinationClassifier, airport_buffer
from .schedule_items import BookingType, ItemKind, ScheduleItem, sort_items
from .timeutils import format_time, minutes_between


CHECK_FAILED_WARNING = "Could not check calendar for conflicts."
NO_SLOT_WARNING = "Could not find an open slot after your requested time."


# =============================================================================
# ENUMS
# =============================================================================

class ConflictSeverity(Enum):
    HARD = "hard"    # Must not proceed without the suggested time
    SOFT = "soft"    # Advisory; the caller may dismiss it


class CheckOutcome(Enum):
    """Whether the check ran, and what it found."""
    CONFLICT = "conflict"
    NO_CONFLICT = "no_conflict"
    CHECK_FAILED = "check_failed"


class AdjustmentStatus(Enum):
    NOT_NEEDED = "not_needed"        # No conflict
    ADJUSTED = "adjusted"            # adjusted_time is populated
    NO_SLOT_FOUND = "no_slot_found"  # Slot search exhausted its attempts
    UNAVAILABLE = "unavailable"      # Conflict found, no rule computes a time


# =============================================================================
# RESULT TYPES
# =============================================================================

@dataclass
class ScheduleConflict:
    """A single detected collision."""
    severity: ConflictSeverity
    conflicting_item: ScheduleItem
    requested_time: datetime
    conflict_time: datetime
    description: str
    suggested_time: Optional[datetime] = None
    explanation: Optional[str] = None

    @property
    def is_hard(self) -> bool:
        return self.severity == ConflictSeverity.HARD

    def to_dict(self) -> Dict[str, Any]:
        return {
            "severity": self.severity.value,
            "conflicting_item": self.conflicting_item.to_dict(),
            "requested_time": self.requested_time.isoformat(),
            "conflict_time": self.conflict_time.isoformat(),
            "description": self.description,
            "suggested_time": self.suggested_time.isoformat() if self.suggested_time else None,
            "explanation": self.explanation,
        }


@dataclass
class CalendarAwareResult:
    """Result handed back to the booking flow."""
    outcome: CheckOutcome
    original_time: datetime
    conflicts: List[ScheduleConflict] = field(default_factory=list)
    adjusted_time: Optional[datetime] = None
    adjustment: AdjustmentStatus = AdjustmentStatus.NOT_NEEDED
    explanation: Optional[str] = None
    warnings: List[str] = field(default_factory=list)

    @property
    def has_conflict(self) -> bool:
        return self.outcome == CheckOutcome.CONFLICT

    @property
    def check_failed(self) -> bool:
        return self.outcome == CheckOutcome.CHECK_FAILED

    @property
    def has_hard_conflict(self) -> bool:
        return any(c.is_hard for c in self.conflicts)

    @classmethod
    def failed(cls, requested_time: datetime) -> "CalendarAwareResult":
        return cls(
            outcome=CheckOutcome.CHECK_FAILED,
            original_time=requested_time,
            warnings=[CHECK_FAILED_WARNING],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "outcome": self.outcome.value,
            "has_conflict": self.has_conflict,
            "conflicts": [c.to_dict() for c in self.conflicts],
            "adjusted_time": self.adjusted_time.isoformat() if self.adjusted_time else None,
            "adjustment": self.adjustment.value,
            "original_time": self.original_time.isoformat(),
            "explanation": self.explanation,
            "warnings": list(self.warnings),
        }


# =============================================================================
# DETECTOR
# =============================================================================

def _intent_text(intent: Optional[Dict[str, Any]], *keys: str) -> str:
    if not intent:
        return ""
    return " ".join(str(intent[k]) for k in keys if intent.get(k))


class ConflictDetector:
    """Applies the per-booking-type conflict rules."""

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        classifier: Optional[DestinationClassifier] = None,
        adjuster: Optional[AdjustmentEngine] = None
    ):
        self.config = config or DEFAULT_CONFIG
        self.classifier = classifier or KeywordDestinationClassifier.from_config(self.config)
        self.adjuster = adjuster or AdjustmentEngine(self.config)

    def estimated_duration(self, booking_type: BookingType) -> int:
        if booking_type == BookingType.DOCTOR:
            return self.config.doctor_duration_minutes
        if booking_type == BookingType.RIDE:
            return self.config.ride_duration_minutes
        return self.config.event_duration_minutes

    # -------------------------------------------------------------------------
    # RULES
    # -------------------------------------------------------------------------

    def check_ride_against_flights(
        self,
        requested_time: datetime,
        items: Iterable[ScheduleItem],
        intent: Optional[Dict[str, Any]] = None
    ) -> Optional[ScheduleConflict]:
        horizon = requested_time + timedelta(minutes=self.config.ride_lookahead_minutes)
        flights = [
            item for item in items
            if item.kind == ItemKind.FLIGHT and requested_time <= item.start_time <= horizon
        ]
        if not flights:
            return None

        flight = min(flights, key=lambda f: f.start_time)
        flight_time = flight.start_time

        airport_bound = "airport" in _intent_text(
            intent, "dropoff_address", "destination"
        ).lower()
        international = self.classifier.is_international(flight.destination, flight.title)
        buffer = airport_buffer(self.config.buffers, international)
        ideal = self.adjuster.ideal_ride_time(flight_time, buffer)

        if abs(minutes_between(flight_time, requested_time)) < self.config.same_time_window_minutes:
            return ScheduleConflict(
                severity=ConflictSeverity.HARD,
                conflicting_item=flight,
                requested_time=requested_time,
                conflict_time=flight_time,
                description=(
                    f"You have a flight at {format_time(flight_time)}. "
                    f"You cannot schedule a ride at the same time."
                ),
                suggested_time=ideal,
                explanation=self.adjuster.explain_ride_same_time(
                    requested_time, ideal, flight_time, buffer
                ),
            )

        # Ride after departure is presumably post-arrival, not airport-bound
        if requested_time > flight_time:
            return None

        time_to_flight = minutes_between(requested_time, flight_time)
        if airport_bound and time_to_flight < buffer.total_minutes:
            return ScheduleConflict(
                severity=ConflictSeverity.SOFT,
                conflicting_item=flight,
                requested_time=requested_time,
                conflict_time=flight_time,
                description=(
                    f"Your ride at {format_time(requested_time)} may not leave enough "
                    f"time for your {format_time(flight_time)} flight."
                ),
                suggested_time=ideal,
                explanation=self.adjuster.explain_ride_short_buffer(
                    requested_time, ideal, flight_time, buffer
                ),
            )

        return None

    def check_overlap(
        self,
        requested_time: datetime,
        items: Iterable[ScheduleItem],
        booking_type: BookingType
    ) -> Optional[ScheduleConflict]:
        """First item whose [start, end) intersects the requested interval."""
        requested_end = requested_time + timedelta(minutes=self.estimated_duration(booking_type))
        for item in sort_items(items):
            if item.overlaps(requested_time, requested_end):
                return ScheduleConflict(
                    severity=ConflictSeverity.HARD,
                    conflicting_item=item,
                    requested_time=requested_time,
                    conflict_time=item.start_time,
                    description=(
                        f"This time conflicts with your {item.title} "
                        f"at {format_time(item.start_time)}."
                    ),
                )
        return None

    def check_prior_commitments(
        self,
        flight_time: datetime,
        items: Iterable[ScheduleItem]
    ) -> Optional[ScheduleConflict]:
        window = self.config.prior_commitment_window_minutes
        candidates = [
            item for item in items
            if item.kind != ItemKind.FLIGHT
            and 0 < minutes_between(item.end_time, flight_time) < window
        ]
        if not candidates:
            return None

        # Report the commitment that ends closest to departure
        item = max(candidates, key=lambda i: i.end_time)
        gap = round(minutes_between(item.end_time, flight_time))
        return ScheduleConflict(
            severity=ConflictSeverity.SOFT,
            conflicting_item=item,
            requested_time=flight_time,
            conflict_time=item.end_time,
            description=(
                f"Warning: Your {item.title} ends at {format_time(item.end_time)}, "
                f"which is only {gap} minutes before your flight."
            ),
        )

    def crowded_schedule_warning(
        self, requested_time: datetime, items: Iterable[ScheduleItem]
    ) -> Optional[str]:
        window = timedelta(hours=self.config.crowded_schedule_window_hours)
        nearby = [
            item for item in items
            if requested_time - window <= item.start_time <= requested_time + window
        ]
        if len(nearby) > self.config.crowded_schedule_threshold:
            return f"You have {len(nearby)} other events scheduled around this time."
        return None

    # -------------------------------------------------------------------------
    # EVALUATION
    # -------------------------------------------------------------------------

    def evaluate(
        self,
        booking_type: Union[BookingType, str],
        requested_time: datetime,
        items: Iterable[ScheduleItem],
        intent: Optional[Dict[str, Any]] = None
    ) -> CalendarAwareResult:
        """Run the rule set for booking_type against items."""
        booking_type = BookingType(booking_type)
        items = list(items)
        result = CalendarAwareResult(
            outcome=CheckOutcome.NO_CONFLICT,
            original_time=requested_time,
        )

        if booking_type == BookingType.RIDE:
            flight_conflict = self.check_ride_against_flights(requested_time, items, intent)
            if flight_conflict:
                result.conflicts.append(flight_conflict)
                result.adjusted_time = flight_conflict.suggested_time
                result.explanation = flight_conflict.explanation
            overlap = self.check_overlap(requested_time, items, BookingType.RIDE)
            if overlap:
                result.conflicts.append(overlap)

        elif booking_type == BookingType.DOCTOR:
            overlap = self.check_overlap(requested_time, items, BookingType.DOCTOR)
            if overlap:
                result.conflicts.append(overlap)
                slot = self.adjuster.find_next_available_slot(
                    requested_time, items, self.config.appointment_duration_minutes
                )
                if slot is not None:
                    result.adjusted_time = slot
                    result.explanation = self.adjuster.explain_reschedule(
                        requested_time, slot, overlap.conflicting_item
                    )
                    overlap.suggested_time = slot
                    overlap.explanation = result.explanation
                else:
                    result.adjustment = AdjustmentStatus.NO_SLOT_FOUND
                    result.warnings.append(NO_SLOT_WARNING)

        elif booking_type == BookingType.FLIGHT:
            prior = self.check_prior_commitments(requested_time, items)
            if prior:
                result.conflicts.append(prior)
                result.warnings.append(prior.description)

        crowded = self.crowded_schedule_warning(requested_time, items)
        if crowded:
            result.warnings.append(crowded)

        if result.conflicts:
            result.outcome = CheckOutcome.CONFLICT
            if result.adjusted_time is not None:
                result.adjustment = AdjustmentStatus.ADJUSTED
            elif result.adjustment != AdjustmentStatus.NO_SLOT_FOUND:
                result.adjustment = AdjustmentStatus.UNAVAILABLE

        return result
