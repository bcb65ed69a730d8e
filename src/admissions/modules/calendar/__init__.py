"""
Calendar Module

Academic calendar events. Publishing an event notifies every active student.
"""

from .router import router

__all__ = ["router"]
