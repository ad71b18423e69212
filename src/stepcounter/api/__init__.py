"""
API routers for the step counter application.
"""

from . import steps

__all__ = ["steps"]
