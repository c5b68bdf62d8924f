"""
Calendar-Aware Scheduling Service

Entry point for the booking and chat layers. Exposes the three public
operations of the engine:

- check_calendar_conflicts: consulted before a booking time is confirmed
- get_schedule_briefing: day/week/month/year schedule overview
- detect_briefing_request: keyword intent check on a chat message

Both async operations fetch bookings and calendar events concurrently from
the ScheduleDataSource and then run the pure core. Fetch failures degrade to
a CHECK_FAILED result or an empty briefing; they are never raised.
"""

from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional, Union
import asyncio
import logging

from ..config import EngineConfig, DEFAULT_CONFIG
from ..core import (
    BookingType,
    BookingRecord,
    BriefingGenerator,
    BriefingIntent,
    BriefingIntentDetector,
    BriefingPeriod,
    CalendarAwareResult,
    ConflictDetector,
    DestinationClassifier,
    ScheduleBriefing,
    ScheduleNormalizer,
)
from ..core.timeutils import parse_datetime
from ..integrations import ScheduleDataSource


logger = logging.getLogger(__name__)


class CalendarAwareService:
    """
    Stateless facade over the scheduling core.

    All state lives in the data source; every call computes its result
    fresh, so one service instance can serve concurrent users.
    """

    def __init__(
        self,
        data_source: ScheduleDataSource,
        config: Optional[EngineConfig] = None,
        classifier: Optional[DestinationClassifier] = None,
        clock: Optional[Callable[[], datetime]] = None
    ):
        self.data_source = data_source
        self.config = config or DEFAULT_CONFIG
        self.clock = clock or datetime.now

        self.normalizer = ScheduleNormalizer(self.config)
        self.detector = ConflictDetector(self.config, classifier=classifier)
        self.briefings = BriefingGenerator(self.config)
        self.intents = BriefingIntentDetector(self.config)

    # -------------------------------------------------------------------------
    # CONFLICT CHECK
    # -------------------------------------------------------------------------

    async def check_calendar_conflicts(
        self,
        user_id: str,
        booking_type: Union[BookingType, str],
        requested_time: Union[datetime, str],
        intent: Optional[Dict[str, Any]] = None
    ) -> CalendarAwareResult:
        """
        Check a requested booking time against the user's schedule.

        Raises ValueError only for an unknown booking type or unparseable
        time; data-source and evaluation failures come back as CHECK_FAILED.
        """
        booking_type = BookingType(booking_type)
        requested = parse_datetime(requested_time)
        if requested is None:
            raise ValueError(f"Invalid requested time: {requested_time!r}")

        window = timedelta(hours=self.config.crowded_schedule_window_hours)
        try:
            bookings, events = await asyncio.gather(
                self.data_source.fetch_upcoming_bookings(
                    user_id, self.config.conflict_booking_limit
                ),
                self.data_source.fetch_calendar_events(
                    user_id,
                    (requested - window).isoformat(),
                    (requested + window).isoformat()
                ),
            )
            items = self.normalizer.normalize(bookings, events)
            result = self.detector.evaluate(booking_type, requested, items, intent)
        except Exception as e:
            logger.error(f"Calendar conflict check failed for user {user_id}: {e}", exc_info=True)
            return CalendarAwareResult.failed(requested)

        logger.info(
            f"Conflict check for {booking_type.value} at {requested.isoformat()}: "
            f"{result.outcome.value} ({len(result.conflicts)} conflicts)"
        )
        return result

    # -------------------------------------------------------------------------
    # BRIEFING
    # -------------------------------------------------------------------------

    def _bookings_in_range(
        self, bookings: List[BookingRecord], start: datetime, end: datetime
    ) -> List[BookingRecord]:
        in_range = []
        for booking in bookings:
            booking_time = self.normalizer.booking_start(booking)
            if booking_time is not None and start <= booking_time <= end:
                in_range.append(booking)
        return in_range

    async def get_schedule_briefing(
        self,
        user_id: str,
        period: Union[BriefingPeriod, str] = BriefingPeriod.DAY
    ) -> ScheduleBriefing:
        """Build a briefing for the period starting today."""
        period = BriefingPeriod(period)
        start, end = self.briefings.period_range(period, self.clock())

        try:
            bookings, events = await asyncio.gather(
                self.data_source.fetch_upcoming_bookings(
                    user_id, self.config.briefing_booking_limit
                ),
                self.data_source.fetch_calendar_events(
                    user_id, start.isoformat(), end.isoformat()
                ),
            )
            items = self.normalizer.normalize(
                self._bookings_in_range(bookings, start, end),
                events
            )
            items = [i for i in items if start <= i.start_time <= end]
            briefing = self.briefings.build(period, start, end, items)
        except Exception as e:
            logger.error(f"Schedule briefing failed for user {user_id}: {e}", exc_info=True)
            return self.briefings.failed(period, start, end, str(e))

        logger.info(
            f"Built {period.value} briefing for user {user_id}: "
            f"{len(briefing.items)} items, {len(briefing.gaps)} gaps"
        )
        return briefing

    # -------------------------------------------------------------------------
    # INTENT
    # -------------------------------------------------------------------------

    def detect_briefing_request(self, message: str) -> BriefingIntent:
        return self.intents.detect(message)


def create_calendar_aware_service(
    data_source: ScheduleDataSource,
    config: Optional[EngineConfig] = None,
    **kwargs: Any
) -> CalendarAwareService:
    """Factory function to create a CalendarAwareService."""
    return CalendarAwareService(data_source, config=config, **kwargs)
