"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .lesson_orchestrator import move_slot, publish_drafts, save_slot
from .scheduling import HolidayProviderProtocol, SchedulingService, SlotStoreProtocol

__all__ = [
    "HolidayProviderProtocol",
    "SchedulingService",
    "SlotStoreProtocol",
    "move_slot",
    "publish_drafts",
    "save_slot",
]
