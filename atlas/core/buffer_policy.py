"""
Buffer Policy

Airport lead-time math and the international destination lookup. The lookup
is a substring heuristic, not geography: unlisted destinations fall back to
the domestic buffer. Swap in another DestinationClassifier to replace it.
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Protocol, runtime_checkable

from ..config import BufferPolicy, EngineConfig, DEFAULT_CONFIG
from .timeutils import describe_minutes


@runtime_checkable
class DestinationClassifier(Protocol):
    """Decides whether a flight counts as international."""

    def is_international(self, destination: Optional[str], title: Optional[str] = None) -> bool:
        ...


class KeywordDestinationClassifier:
    """Case-insensitive substring match against a fixed token set."""

    def __init__(self, tokens: Iterable[str]):
        self.tokens = frozenset(t.lower() for t in tokens if t)

    def is_international(self, destination: Optional[str], title: Optional[str] = None) -> bool:
        haystacks = [h.lower() for h in (destination, title) if h]
        return any(token in h for h in haystacks for token in self.tokens)

    @classmethod
    def from_config(cls, config: EngineConfig = DEFAULT_CONFIG) -> "KeywordDestinationClassifier":
        return cls(config.international_destinations)


@dataclass(frozen=True)
class AirportBuffer:
    """Lead time needed before a flight: travel to the airport plus check-in."""
    travel_minutes: int
    check_in_minutes: int
    international: bool

    @property
    def total_minutes(self) -> int:
        return self.travel_minutes + self.check_in_minutes

    @property
    def scope(self) -> str:
        return "international" if self.international else "domestic"

    def describe(self) -> str:
        """'1 hour for the trip to the airport and 1.5 hours for domestic check-in'"""
        return (
            f"{describe_minutes(self.travel_minutes)} for the trip to the airport and "
            f"{describe_minutes(self.check_in_minutes)} for {self.scope} check-in"
        )


def airport_buffer(policy: BufferPolicy, international: bool) -> AirportBuffer:
    return AirportBuffer(
        travel_minutes=policy.travel_to_airport,
        check_in_minutes=policy.check_in_minutes(international),
        international=international,
    )
