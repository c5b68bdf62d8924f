"""
Atlas Data-Access Integrations

The scheduling engine never owns persistence. Bookings and calendar events
are read through a ScheduleDataSource supplied by the booking subsystem.

Provided here:
- ScheduleDataSource: the async read protocol the engine consumes
- AdapterError / DataSourceError: failures raised by data sources
- InMemoryScheduleStore: a read/write store for tests, demos and the CLI
"""

from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from ..core.schedule_items import BookingRecord, CalendarEventRecord


# =============================================================================
# ERRORS
# =============================================================================

class AdapterError(Exception):
    """Base exception for adapter errors."""

    def __init__(
        self,
        message: str,
        adapter_name: str,
        error_code: Optional[str] = None,
        recoverable: bool = True,
        original_error: Optional[Exception] = None
    ):
        super().__init__(message)
        self.adapter_name = adapter_name
        self.error_code = error_code
        self.recoverable = recoverable
        self.original_error = original_error

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": str(self),
            "adapter": self.adapter_name,
            "code": self.error_code,
            "recoverable": self.recoverable
        }


class DataSourceError(AdapterError):
    """Raised when bookings or calendar events cannot be fetched."""

    def __init__(
        self,
        adapter_name: str,
        operation: str,
        reason: str = "Unknown",
        original_error: Optional[Exception] = None
    ):
        super().__init__(
            message=f"{adapter_name} failed to {operation}: {reason}",
            adapter_name=adapter_name,
            error_code="FETCH_FAILED",
            recoverable=True,
            original_error=original_error
        )
        self.operation = operation


# =============================================================================
# DATA SOURCE PROTOCOL
# =============================================================================

@runtime_checkable
class ScheduleDataSource(Protocol):
    """Read interface the engine needs from the booking store."""

    async def fetch_upcoming_bookings(self, user_id: str, limit: int) -> List[BookingRecord]:
        """Active bookings for the user, at most `limit` of them."""
        ...

    async def fetch_calendar_events(
        self,
        user_id: str,
        start_iso: str,
        end_iso: str
    ) -> List[CalendarEventRecord]:
        """Calendar events whose start lies in [start_iso, end_iso]."""
        ...


from .memory_store import InMemoryScheduleStore, ACTIVE_BOOKING_STATUSES


__all__ = [
    "AdapterError",
    "DataSourceError",
    "ScheduleDataSource",
    "InMemoryScheduleStore",
    "ACTIVE_BOOKING_STATUSES",
]
