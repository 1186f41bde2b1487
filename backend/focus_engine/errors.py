"""
Focus Scheduling Engine - Error types
"""

from datetime import date
from typing import Optional


class SchedulingError(Exception):
    """Base class for recoverable scheduling failures."""


class NoSlotAvailable(SchedulingError):
    """No free gap in the day window is long enough for the task.

    Callers can recover by shrinking the duration, picking another day
    or relaxing the category preference.
    """

    def __init__(self, title: str, target_date: date, duration_minutes: int, detail: Optional[str] = None):
        self.title = title
        self.target_date = target_date
        self.duration_minutes = duration_minutes
        message = detail or (
            f"No free {duration_minutes}-minute slot for '{title}' on {target_date.isoformat()}"
        )
        super().__init__(message)


class ExternalServiceTimeout(Exception):
    """The optional text-rewrite service did not answer in time.

    Raised and handled inside the phraser; never reaches engine callers.
    """
