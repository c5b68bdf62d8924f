"""Keyword classifier that spots schedule-briefing requests in chat messages."""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..config import EngineConfig, DEFAULT_CONFIG
from .briefing import BriefingPeriod


@dataclass
class BriefingIntent:
    is_briefing: bool
    period: Optional[BriefingPeriod] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_briefing": self.is_briefing,
            "period": self.period.value if self.period else None,
        }


class BriefingIntentDetector:
    """Lower-cases the message and matches it against the configured keywords."""

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or DEFAULT_CONFIG

    def detect(self, message: str) -> BriefingIntent:
        lower = (message or "").lower()

        if not any(keyword in lower for keyword in self.config.briefing_keywords):
            return BriefingIntent(is_briefing=False)

        for period, keywords in self.config.period_keywords:
            if any(keyword in lower for keyword in keywords):
                return BriefingIntent(is_briefing=True, period=BriefingPeriod(period))

        return BriefingIntent(is_briefing=True, period=BriefingPeriod.DAY)
