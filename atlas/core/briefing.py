"""
Briefing Generator

Builds day/week/month/year schedule briefings: the time-sorted items in the
period, merged busy periods, free-time gaps (day and week only) and a
natural-language summary.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple

from ..config import EngineConfig, DEFAULT_CONFIG
from .schedule_items import ItemKind, ScheduleItem, sort_items
from .timeutils import (
    add_months,
    end_of_day,
    format_date,
    format_time,
    minutes_between,
    start_of_day,
)


BRIEFING_FAILED_SUMMARY = "Unable to retrieve your schedule at this time."


class BriefingPeriod(Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"

    @property
    def tracks_gaps(self) -> bool:
        """Gaps are too coarse to be useful beyond a week."""
        return self in (BriefingPeriod.DAY, BriefingPeriod.WEEK)

    @property
    def label(self) -> str:
        return {
            BriefingPeriod.DAY: "Today",
            BriefingPeriod.WEEK: "This week",
            BriefingPeriod.MONTH: "This month",
            BriefingPeriod.YEAR: "This year",
        }[self]

    @property
    def noun(self) -> str:
        return "today" if self == BriefingPeriod.DAY else f"the {self.value}"


# =============================================================================
# DATA CLASSES
# =============================================================================

@dataclass
class BusyPeriod:
    """A run of items separated by no more than the merge gap."""
    start: datetime
    end: datetime
    description: str
    item_count: int = 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "description": self.description,
            "item_count": self.item_count,
        }


@dataclass
class Gap:
    """Free time between one busy stretch and the next item."""
    start: datetime
    end: datetime

    @property
    def duration_minutes(self) -> int:
        return int(minutes_between(self.start, self.end))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "duration_minutes": self.duration_minutes,
        }


@dataclass
class ScheduleBriefing:
    """Schedule overview for one period."""
    period: BriefingPeriod
    start_date: datetime
    end_date: datetime
    items: List[ScheduleItem] = field(default_factory=list)
    summary: str = ""
    busy_periods: List[BusyPeriod] = field(default_factory=list)
    gaps: List[Gap] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.error is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "period": self.period.value,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "items": [i.to_dict() for i in self.items],
            "summary": self.summary,
            "busy_periods": [b.to_dict() for b in self.busy_periods],
            "gaps": [g.to_dict() for g in self.gaps],
            "error": self.error,
        }


# =============================================================================
# GENERATOR
# =============================================================================

class BriefingGenerator:
    """Aggregates schedule items into a ScheduleBriefing."""

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or DEFAULT_CONFIG

    @staticmethod
    def period_range(period: BriefingPeriod, now: datetime) -> Tuple[datetime, datetime]:
        """[start, end] for the period, from today's midnight to an end-of-day boundary."""
        start = start_of_day(now)
        if period == BriefingPeriod.DAY:
            end = now
        elif period == BriefingPeriod.WEEK:
            end = now + timedelta(days=7)
        elif period == BriefingPeriod.MONTH:
            end = add_months(now, 1)
        else:
            end = add_months(now, 12)
        return start, end_of_day(end)

    def merge_busy_periods(self, items: List[ScheduleItem]) -> List[BusyPeriod]:
        """Walk sorted items, extending the open period while the next start is close enough."""
        periods: List[BusyPeriod] = []
        merge_gap = self.config.busy_merge_gap_minutes

        for item in items:
            if periods and minutes_between(periods[-1].end, item.start_time) <= merge_gap:
                current = periods[-1]
                current.end = max(current.end, item.end_time)
                current.description += f", {item.title}"
                current.item_count += 1
            else:
                periods.append(BusyPeriod(
                    start=item.start_time,
                    end=item.end_time,
                    description=item.title,
                ))
        return periods

    def find_gaps(self, items: List[ScheduleItem]) -> List[Gap]:
        """Free intervals between time-sorted items, measured from the latest end so far."""
        gaps: List[Gap] = []
        if not items:
            return gaps
        busy_until = items[0].end_time
        for following in items[1:]:
            if minutes_between(busy_until, following.start_time) >= self.config.min_gap_minutes:
                gaps.append(Gap(start=busy_until, end=following.start_time))
            busy_until = max(busy_until, following.end_time)
        return gaps

    def build(
        self,
        period: BriefingPeriod,
        start_date: datetime,
        end_date: datetime,
        items: Iterable[ScheduleItem]
    ) -> ScheduleBriefing:
        ordered = sort_items(items)
        busy = self.merge_busy_periods(ordered)
        gaps = self.find_gaps(ordered) if period.tracks_gaps else []
        return ScheduleBriefing(
            period=period,
            start_date=start_date,
            end_date=end_date,
            items=ordered,
            summary=self.summarize(period, ordered, gaps),
            busy_periods=busy,
            gaps=gaps,
        )

    @staticmethod
    def failed(period: BriefingPeriod, start_date: datetime, end_date: datetime,
               error: str) -> ScheduleBriefing:
        return ScheduleBriefing(
            period=period,
            start_date=start_date,
            end_date=end_date,
            summary=BRIEFING_FAILED_SUMMARY,
            error=error,
        )

    # -------------------------------------------------------------------------
    # SUMMARY
    # -------------------------------------------------------------------------

    @staticmethod
    def _describe_day_item(item: ScheduleItem) -> str:
        time_str = format_time(item.start_time)
        if item.kind == ItemKind.FLIGHT:
            return f"a {time_str} flight" + (f" ({item.details})" if item.details else "")
        if item.kind == ItemKind.RIDE:
            return f"a {time_str} ride" + (f" to {item.details}" if item.details else "")
        if item.kind == ItemKind.DOCTOR:
            return f"a {time_str} doctor's appointment" + (f" with {item.details}" if item.details else "")
        return f"{item.title} at {time_str}"

    @staticmethod
    def _describe_dated_item(item: ScheduleItem) -> str:
        date_str = format_date(item.start_time)
        time_str = format_time(item.start_time)
        if item.kind == ItemKind.FLIGHT:
            return f"{date_str}: {time_str} flight" + (f" ({item.details})" if item.details else "")
        if item.kind == ItemKind.RIDE:
            return f"{date_str}: {time_str} ride"
        if item.kind == ItemKind.DOCTOR:
            return f"{date_str}: {time_str} doctor's appointment"
        return f"{date_str}: {item.title}"

    def summarize(self, period: BriefingPeriod, items: List[ScheduleItem], gaps: List[Gap]) -> str:
        if not items:
            return f"You have no scheduled events for {period.noun}."

        count = len(items)
        parts = [f"{period.label}, you have {count} scheduled {'item' if count == 1 else 'items'}."]

        shown = items[:self.config.summary_item_limit]
        if period == BriefingPeriod.DAY:
            parts.append("You have " + ", then ".join(self._describe_day_item(i) for i in shown) + ".")
        else:
            parts.append(". ".join(self._describe_dated_item(i) for i in shown) + ".")

        if count > self.config.summary_item_limit:
            parts.append(f"And {count - self.config.summary_item_limit} more events.")

        if period == BriefingPeriod.DAY:
            significant = [g for g in gaps if g.duration_minutes >= self.config.significant_gap_minutes]
            if significant:
                spans = " and ".join(f"{format_time(g.start)} to {format_time(g.end)}" for g in significant)
                parts.append(f"You have free time {spans}.")

        return " ".join(parts)
