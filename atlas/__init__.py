"""
Atlas Scheduling Engine

Calendar-aware scheduling for the Atlas travel concierge. Classifies conflicts
between a requested booking (flight, ride, doctor appointment) and the user's
existing commitments, proposes adjusted times, and renders schedule briefings.

Subpackages:
- core: pure engine (normalizer, buffers, conflicts, slot search, briefings)
- integrations: data-access seam for bookings and calendar events
- tools: service and agent facades used by the booking and chat layers
"""

__version__ = "1.0.0"

from .config import EngineConfig, DEFAULT_CONFIG, load_config, setup_logging

__all__ = [
    "__version__",
    "EngineConfig",
    "DEFAULT_CONFIG",
    "load_config",
    "setup_logging",
]
