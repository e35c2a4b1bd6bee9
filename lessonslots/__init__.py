"""
lessonslots - lesson-slot scheduling engine for a driving-school diary.
"""

from .domain.validity import check_slot_validity as check_validity
from .domain.week_copier import copy_week_forward
from .domain.week_generator import generate_week
from .services.lesson_orchestrator import save_slot

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "check_validity",
    "copy_week_forward",
    "generate_week",
    "save_slot",
]
