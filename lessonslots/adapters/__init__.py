"""
Adapters layer - External integrations (holiday API, slot storage).
"""

from .holiday_client import NagerHolidayClient
from .json_slot_store import JsonSlotStore
from .mock_holiday_client import MockHolidayClient

__all__ = ["JsonSlotStore", "MockHolidayClient", "NagerHolidayClient"]
