"""
Service layer for recorded-data workflows.

Services sit between the API/CLI and the streaming algorithms.
"""

# Lazy import: pandas is only needed once a recording is replayed
def get_replay_service():
    """Lazy import for ReplayService to keep pandas out of the core import path."""
    from .replay_service import ReplayService
    return ReplayService

__all__ = [
    "get_replay_service",
]
