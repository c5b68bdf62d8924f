"""
Engine configuration for Atlas.

All tunables (buffer times, durations, thresholds, keyword lists) live in a
single immutable EngineConfig that is passed to the engine at construction.
Overrides are loaded from YAML and applied with dataclasses.replace, so a
config value is never mutated once built.
"""

from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union
import logging

import yaml


logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Raised when a configuration file cannot be read or is invalid."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


# =============================================================================
# DEFAULTS
# =============================================================================

# Airport and city tokens matched as substrings against a flight's
# destination or title. Anything not listed is treated as domestic.
INTERNATIONAL_DESTINATIONS: Tuple[str, ...] = (
    "CDG", "LHR", "NRT", "HND", "FCO", "BCN", "AMS", "FRA", "DXB", "SIN",
    "BKK", "SYD", "MEL", "HKG", "ICN", "PEK", "PVG", "DEL", "BOM", "GRU",
    "Paris", "London", "Tokyo", "Rome", "Barcelona", "Amsterdam", "Frankfurt",
    "Dubai", "Singapore", "Bangkok", "Sydney", "Melbourne", "Hong Kong", "Seoul",
    "Beijing", "Shanghai", "Delhi", "Mumbai", "Sao Paulo",
)

BRIEFING_KEYWORDS: Tuple[str, ...] = (
    "briefing", "brief me", "schedule", "what do i have", "what's on", "what is on",
    "my day", "my week", "my month", "my calendar", "upcoming", "planned",
    "what's happening", "what is happening", "agenda", "itinerary",
)

# Checked in order; the first period with a matching keyword wins.
PERIOD_KEYWORDS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("day", ("today", "the day", "my day")),
    ("week", ("week", "next 7 days")),
    ("month", ("month", "next 30 days")),
    ("year", ("year", "next 12 months")),
)


@dataclass(frozen=True)
class BufferPolicy:
    """Lead and trailing times around bookings, in minutes."""
    airport_arrival_domestic: int = 90
    airport_arrival_international: int = 120
    travel_to_airport: int = 60
    appointment_buffer: int = 30
    ride_buffer: int = 15

    def check_in_minutes(self, international: bool) -> int:
        if international:
            return self.airport_arrival_international
        return self.airport_arrival_domestic

    def to_dict(self) -> Dict[str, int]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class EngineConfig:
    """Configuration for the calendar-aware scheduling engine."""

    buffers: BufferPolicy = field(default_factory=BufferPolicy)
    international_destinations: Tuple[str, ...] = INTERNATIONAL_DESTINATIONS
    briefing_keywords: Tuple[str, ...] = BRIEFING_KEYWORDS
    period_keywords: Tuple[Tuple[str, Tuple[str, ...]], ...] = PERIOD_KEYWORDS

    # Estimated durations for records without an end time (minutes)
    flight_duration_minutes: int = 360
    ride_duration_minutes: int = 60
    doctor_duration_minutes: int = 45
    event_duration_minutes: int = 60

    # Conflict detection
    ride_lookahead_minutes: int = 360
    same_time_window_minutes: int = 30
    prior_commitment_window_minutes: int = 180
    crowded_schedule_threshold: int = 3
    crowded_schedule_window_hours: int = 24

    # Slot search
    slot_search_attempts: int = 24
    appointment_duration_minutes: int = 45

    # Briefings
    busy_merge_gap_minutes: int = 30
    min_gap_minutes: int = 60
    significant_gap_minutes: int = 120
    summary_item_limit: int = 5

    # Fetch limits passed to the data source
    conflict_booking_limit: int = 20
    briefing_booking_limit: int = 50

    def with_overrides(self, **overrides: Any) -> "EngineConfig":
        """Return a copy of this config with the given fields replaced."""
        return replace(self, **overrides)


DEFAULT_CONFIG = EngineConfig()


# =============================================================================
# YAML LOADING
# =============================================================================

_THRESHOLD_FIELDS = {
    f.name for f in fields(EngineConfig)
    if f.name not in ("buffers", "international_destinations",
                      "briefing_keywords", "period_keywords")
}
_BUFFER_FIELDS = {f.name for f in fields(BufferPolicy)}
# Durations, attempts and limits must be at least 1
_POSITIVE_FIELDS = {
    "flight_duration_minutes", "ride_duration_minutes", "doctor_duration_minutes",
    "event_duration_minutes", "appointment_duration_minutes", "slot_search_attempts",
    "summary_item_limit", "conflict_booking_limit", "briefing_booking_limit",
}
_KNOWN_SECTIONS = ("buffers", "international_destinations", "briefing_keywords", "thresholds")


def _int_values(section: Dict[str, Any], allowed: set, name: str, path: str) -> Dict[str, int]:
    values: Dict[str, int] = {}
    for key, value in section.items():
        if key not in allowed:
            logger.warning(f"Ignoring unknown {name} key '{key}' in {path}")
            continue
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise ConfigError(f"{name}.{key} must be a non-negative integer, got {value!r}", path)
        if key in _POSITIVE_FIELDS and value < 1:
            raise ConfigError(f"{name}.{key} must be at least 1, got {value!r}", path)
        values[key] = value
    return values


def _string_tuple(value: Any, name: str, path: str) -> Tuple[str, ...]:
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"{name} must be a list of strings", path)
    return tuple(value)


def config_from_dict(data: Dict[str, Any], base: EngineConfig = DEFAULT_CONFIG,
                     path: str = "<dict>") -> EngineConfig:
    """Build an EngineConfig from a parsed mapping, starting from base."""
    if not isinstance(data, dict):
        raise ConfigError("Configuration root must be a mapping", path)

    for key in data:
        if key not in _KNOWN_SECTIONS:
            logger.warning(f"Ignoring unknown config section '{key}' in {path}")

    overrides: Dict[str, Any] = {}

    buffers = data.get("buffers")
    if buffers is not None:
        if not isinstance(buffers, dict):
            raise ConfigError("buffers must be a mapping", path)
        overrides["buffers"] = replace(
            base.buffers, **_int_values(buffers, _BUFFER_FIELDS, "buffers", path)
        )

    if "international_destinations" in data:
        overrides["international_destinations"] = _string_tuple(
            data["international_destinations"], "international_destinations", path
        )

    if "briefing_keywords" in data:
        overrides["briefing_keywords"] = tuple(
            k.lower() for k in _string_tuple(data["briefing_keywords"], "briefing_keywords", path)
        )

    thresholds = data.get("thresholds")
    if thresholds is not None:
        if not isinstance(thresholds, dict):
            raise ConfigError("thresholds must be a mapping", path)
        overrides.update(_int_values(thresholds, _THRESHOLD_FIELDS, "thresholds", path))

    return base.with_overrides(**overrides)


def load_config(path: Union[str, Path], base: EngineConfig = DEFAULT_CONFIG) -> EngineConfig:
    """Load configuration overrides from a YAML file."""
    config_file = Path(path)
    if not config_file.exists():
        raise ConfigError(f"Config file not found: {config_file}", str(config_file))

    try:
        with open(config_file) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_file}: {e}", str(config_file)) from e

    if data is None:
        return base

    config = config_from_dict(data, base=base, path=str(config_file))
    logger.info(f"Loaded engine configuration from {config_file}")
    return config


# =============================================================================
# LOGGING
# =============================================================================

def setup_logging(level: str = "INFO", log_dir: Path = Path("/var/log/atlas")) -> None:
    """Configure logging for the engine and CLI."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    formatter = logging.Formatter(
        '%(asctime)s | %(name)-25s | %(levelname)-8s | %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    console_handler.setLevel(log_level)

    # File handler only when the log directory has been provisioned
    file_handler = None
    if log_dir.exists():
        file_handler = logging.FileHandler(log_dir / "atlas.log")
        file_handler.setFormatter(formatter)
        file_handler.setLevel(log_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.addHandler(console_handler)
    if file_handler:
        root_logger.addHandler(file_handler)
