"""
Domain layer - Pure scheduling logic without external dependencies.
"""

from .models import (
    CopyResult,
    LessonForm,
    ProfileDefaults,
    RejectionReason,
    SaveResult,
    SkipCategory,
    SkipSummary,
    Slot,
    SlotKind,
    SlotStatus,
    SlotValidity,
    WeekConfig,
)
from .placement import student_visible_slots, suggest_start_time
from .status import SlotEvent, StatusTransition, derive_status, transition
from .validity import check_slot_validity
from .week_copier import copy_week_forward
from .week_generator import WeekGenerator, generate_week

__all__ = [
    "CopyResult",
    "LessonForm",
    "ProfileDefaults",
    "RejectionReason",
    "SaveResult",
    "SkipCategory",
    "SkipSummary",
    "Slot",
    "SlotEvent",
    "SlotKind",
    "SlotStatus",
    "SlotValidity",
    "StatusTransition",
    "WeekConfig",
    "WeekGenerator",
    "check_slot_validity",
    "copy_week_forward",
    "derive_status",
    "generate_week",
    "student_visible_slots",
    "suggest_start_time",
    "transition",
]
