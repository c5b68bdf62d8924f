# Atlas scheduling core
# Pure computation over normalized schedule items; no I/O happens here.

from .schedule_items import (
    BookingType,
    ItemKind,
    BookingRecord,
    CalendarEventRecord,
    ScheduleItem,
    ScheduleNormalizer,
    sort_items,
)

from .buffer_policy import (
    DestinationClassifier,
    KeywordDestinationClassifier,
    AirportBuffer,
    airport_buffer,
)

from .adjustment import (
    AdjustmentEngine,
    SlotSearchResult,
)

from .conflicts import (
    ConflictSeverity,
    CheckOutcome,
    AdjustmentStatus,
    ScheduleConflict,
    CalendarAwareResult,
    ConflictDetector,
    CHECK_FAILED_WARNING,
    NO_SLOT_WARNING,
)

from .briefing import (
    BriefingPeriod,
    BusyPeriod,
    Gap,
    ScheduleBriefing,
    BriefingGenerator,
    BRIEFING_FAILED_SUMMARY,
)

from .intent import (
    BriefingIntent,
    BriefingIntentDetector,
)


__all__ = [
    # Normalizer
    "BookingType",
    "ItemKind",
    "BookingRecord",
    "CalendarEventRecord",
    "ScheduleItem",
    "ScheduleNormalizer",
    "sort_items",
    # Buffers
    "DestinationClassifier",
    "KeywordDestinationClassifier",
    "AirportBuffer",
    "airport_buffer",
    # Adjustment
    "AdjustmentEngine",
    "SlotSearchResult",
    # Conflicts
    "ConflictSeverity",
    "CheckOutcome",
    "AdjustmentStatus",
    "ScheduleConflict",
    "CalendarAwareResult",
    "ConflictDetector",
    "CHECK_FAILED_WARNING",
    "NO_SLOT_WARNING",
    # Briefings
    "BriefingPeriod",
    "BusyPeriod",
    "Gap",
    "ScheduleBriefing",
    "BriefingGenerator",
    "BRIEFING_FAILED_SUMMARY",
    # Intent
    "BriefingIntent",
    "BriefingIntentDetector",
]
