# Atlas Tools
# Service and agent facades consumed by the booking and chat layers

from typing import Dict, Any
from datetime import datetime
from enum import Enum
from dataclasses import dataclass, field
import json


class AgentCategory(Enum):
    """Categories of agents."""
    SCHEDULING = "scheduling"   # Conflict checks, briefings
    CHAT = "chat"               # Message routing


@dataclass
class AgentResponse:
    """Standard response wrapper for all agent outputs."""
    agent_name: str
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())
    success: bool = True
    data: Dict[str, Any] = field(default_factory=dict)
    errors: list = field(default_factory=list)
    warnings: list = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "agent_name": self.agent_name,
            "timestamp": self.timestamp,
            "success": self.success,
            "data": self.data,
            "errors": self.errors,
            "warnings": self.warnings
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2, default=str)


class BaseAgent:
    """Base class for Atlas agents."""

    def __init__(self, name: str, category: AgentCategory):
        self.name = name
        self.category = category

    def create_response(self, data: Dict[str, Any],
                       success: bool = True,
                       errors: list = None,
                       warnings: list = None) -> AgentResponse:
        """Create a standardized response."""
        return AgentResponse(
            agent_name=self.name,
            success=success,
            data=data,
            errors=errors or [],
            warnings=warnings or []
        )

    def error_response(self, message: str) -> AgentResponse:
        """Return a failed response for an invalid request."""
        return AgentResponse(
            agent_name=self.name,
            success=False,
            data={"status": "ERROR", "reason": message},
            errors=[message]
        )


from .calendar_aware import (
    CalendarAwareService,
    create_calendar_aware_service,
)

from .concierge_agent import (
    CalendarAwareAgent,
    RequestType,
    create_calendar_aware_agent,
)


__all__ = [
    "AgentCategory",
    "AgentResponse",
    "BaseAgent",
    "CalendarAwareService",
    "create_calendar_aware_service",
    "CalendarAwareAgent",
    "RequestType",
    "create_calendar_aware_agent",
]
