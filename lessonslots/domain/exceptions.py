"""
Domain-specific exception hierarchy for the lesson-slot scheduler.

Validation failures are not exceptions; they are returned as
``RejectionReason`` values. These cover collaborator failures only.
"""


class SchedulingError(Exception):
    """Base class for all application-level errors."""


class HolidayAPIError(SchedulingError):
    """Raised when holiday data cannot be fetched or parsed."""


class SlotStoreError(SchedulingError):
    """Raised when slots cannot be loaded from or written to the store."""
