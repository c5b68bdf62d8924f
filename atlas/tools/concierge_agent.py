"""
Calendar-Aware Concierge Agent

Glue between the chat/booking layers and CalendarAwareService. Wraps every
outcome in the standard AgentResponse envelope so the chat layer can render
briefings and conflict explanations without knowing the engine's types.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Union

from . import AgentCategory, AgentResponse, BaseAgent
from .calendar_aware import CalendarAwareService
from ..config import EngineConfig
from ..core import BookingType, BriefingPeriod, CalendarAwareResult
from ..integrations import ScheduleDataSource


class RequestType(Enum):
    """Requests the agent understands."""
    CHECK = "check"          # Conflict check before confirming a booking
    BRIEFING = "briefing"    # Explicit briefing for a period
    MESSAGE = "message"      # Free-text chat message


class CalendarAwareAgent(BaseAgent):
    """
    Routes booking and chat requests to the scheduling engine.

    Does:
    - Check requested booking times and surface adjusted times
    - Answer briefing requests detected in chat messages
    - Report "could not check" distinctly from "no conflict"

    Does NOT:
    - Confirm or persist bookings
    - Retry failed fetches
    """

    def __init__(self, service: CalendarAwareService):
        super().__init__("Calendar-Aware Concierge", AgentCategory.SCHEDULING)
        self.service = service

    async def process_request(
        self,
        request_type: RequestType,
        user_id: str,
        details: Optional[Dict[str, Any]] = None
    ) -> AgentResponse:
        details = details or {}

        if request_type == RequestType.CHECK:
            if "booking_type" not in details or "requested_time" not in details:
                return self.error_response("booking_type and requested_time are required")
            return await self.check_booking(
                user_id,
                details["booking_type"],
                details["requested_time"],
                details.get("intent")
            )
        elif request_type == RequestType.BRIEFING:
            return await self.briefing(user_id, details.get("period", BriefingPeriod.DAY.value))
        elif request_type == RequestType.MESSAGE:
            if not details.get("message"):
                return self.error_response("message is required")
            return await self.handle_message(user_id, details["message"])
        else:
            return self.error_response(f"Unknown request type: {request_type}")

    async def check_booking(
        self,
        user_id: str,
        booking_type: Union[BookingType, str],
        requested_time: Union[datetime, str],
        intent: Optional[Dict[str, Any]] = None
    ) -> AgentResponse:
        try:
            result = await self.service.check_calendar_conflicts(
                user_id, booking_type, requested_time, intent
            )
        except ValueError as e:
            return self.error_response(str(e))

        return self.create_response(
            {
                "check": result.to_dict(),
                "proceed_time": self._proceed_time(result),
                "requires_confirmation": result.has_hard_conflict,
            },
            warnings=result.warnings
        )

    @staticmethod
    def _proceed_time(result: CalendarAwareResult) -> Optional[str]:
        """The time the booking flow should use, or None if no safe time exists."""
        if result.adjusted_time is not None:
            return result.adjusted_time.isoformat()
        if result.has_hard_conflict:
            return None
        return result.original_time.isoformat()

    async def briefing(self, user_id: str, period: Union[BriefingPeriod, str]) -> AgentResponse:
        try:
            period = BriefingPeriod(period)
        except ValueError:
            return self.error_response(f"Unknown briefing period: {period}")

        briefing = await self.service.get_schedule_briefing(user_id, period)
        return self.create_response(
            {"briefing": briefing.to_dict(), "reply": briefing.summary},
            success=not briefing.failed,
            errors=[briefing.error] if briefing.failed else None
        )

    async def handle_message(self, user_id: str, message: str) -> AgentResponse:
        """Answer the message with a briefing if it asks for one."""
        intent = self.service.detect_briefing_request(message)
        if not intent.is_briefing:
            return self.create_response({"handled": False, "intent": intent.to_dict()})

        response = await self.briefing(user_id, intent.period)
        response.data["handled"] = True
        response.data["intent"] = intent.to_dict()
        return response


def create_calendar_aware_agent(
    data_source: ScheduleDataSource,
    config: Optional[EngineConfig] = None,
    **kwargs: Any
) -> CalendarAwareAgent:
    """Factory function to create a CalendarAwareAgent over a data source."""
    return CalendarAwareAgent(CalendarAwareService(data_source, config=config, **kwargs))
