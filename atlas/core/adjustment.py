"""
Adjustment Engine

Proposes a new time once a conflict has been found: either an exact ride
time derived from airport buffer math, or the next free slot found by a
greedy forward scan.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, List, Optional
import logging

from ..config import EngineConfig, DEFAULT_CONFIG
from .buffer_policy import AirportBuffer
from .schedule_items import ScheduleItem, sort_items
from .timeutils import format_time


logger = logging.getLogger(__name__)


@dataclass
class SlotSearchResult:
    """Outcome of a slot search. slot is None when every attempt collided."""
    preferred_time: datetime
    duration_minutes: int
    slot: Optional[datetime]
    attempts: int

    @property
    def found(self) -> bool:
        return self.slot is not None


class AdjustmentEngine:
    """
    Computes adjusted booking times.

    The slot search is greedy: each collision moves the candidate to the end
    of the colliding item plus the appointment buffer, and the first candidate
    that collides with nothing is returned. It is bounded by
    config.slot_search_attempts and does not backtrack, so it finds the first
    feasible slot along that path rather than a globally earliest one.
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or DEFAULT_CONFIG

    def ideal_ride_time(self, flight_time: datetime, buffer: AirportBuffer) -> datetime:
        return flight_time - timedelta(minutes=buffer.total_minutes)

    def search_slot(
        self,
        preferred_time: datetime,
        items: Iterable[ScheduleItem],
        duration_minutes: Optional[int] = None
    ) -> SlotSearchResult:
        duration = duration_minutes or self.config.appointment_duration_minutes
        length = timedelta(minutes=duration)
        jump = timedelta(minutes=self.config.buffers.appointment_buffer)
        ordered: List[ScheduleItem] = sort_items(items)

        candidate = preferred_time
        for attempt in range(1, self.config.slot_search_attempts + 1):
            candidate_end = candidate + length
            blocking = next(
                (item for item in ordered if item.overlaps(candidate, candidate_end)),
                None
            )
            if blocking is None:
                return SlotSearchResult(preferred_time, duration, candidate, attempt)
            candidate = blocking.end_time + jump

        logger.warning(
            f"No free {duration}-minute slot after {preferred_time.isoformat()} "
            f"within {self.config.slot_search_attempts} attempts"
        )
        return SlotSearchResult(preferred_time, duration, None, self.config.slot_search_attempts)

    def find_next_available_slot(
        self,
        preferred_time: datetime,
        items: Iterable[ScheduleItem],
        duration_minutes: Optional[int] = None
    ) -> Optional[datetime]:
        """Return the first free slot at or after preferred_time, or None."""
        return self.search_slot(preferred_time, items, duration_minutes).slot

    # -------------------------------------------------------------------------
    # EXPLANATIONS
    # -------------------------------------------------------------------------

    @staticmethod
    def explain_ride_same_time(
        requested: datetime, suggested: datetime, flight_time: datetime, buffer: AirportBuffer
    ) -> str:
        return (
            f"I've scheduled your ride to the airport for {format_time(suggested)} "
            f"instead of {format_time(requested)}. This allows {buffer.describe()} "
            f"before your {format_time(flight_time)} flight."
        )

    @staticmethod
    def explain_ride_short_buffer(
        requested: datetime, suggested: datetime, flight_time: datetime, buffer: AirportBuffer
    ) -> str:
        return (
            f"I've adjusted your ride from {format_time(requested)} to {format_time(suggested)} "
            f"to ensure you have {buffer.travel_minutes} minutes travel time plus "
            f"{buffer.check_in_minutes} minutes for {buffer.scope} check-in before your "
            f"{format_time(flight_time)} flight."
        )

    @staticmethod
    def explain_reschedule(requested: datetime, adjusted: datetime, item: ScheduleItem) -> str:
        return (
            f"Rescheduled from {format_time(requested)} to {format_time(adjusted)} "
            f"to avoid conflict with your {item.kind.value}."
        )
