"""
Domain models for lesson slots and scheduling results.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional

from .time_math import add_minutes, intervals_overlap, to_minutes


DEFAULT_LESSON_DURATION = 45
DEFAULT_BLOCK_DURATION = 60

# Legacy placeholder the host app writes when a booking lost its student.
UNKNOWN_STUDENT = "Unknown"


class SlotKind(str, Enum):
    """What a slot represents on the instructor's calendar."""
    LESSON = "Lesson"
    BLOCK = "Block"


class SlotStatus(str, Enum):
    """Lifecycle state of a slot."""
    OPEN = "Open"
    BOOKED = "Booked"
    DRAFT = "Draft"
    BLOCKED = "Blocked"
    # Written by the host app's lesson history; never assigned here.
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class SkipCategory(str, Enum):
    """Buckets used to summarise skipped candidates in batch operations."""
    COLLISIONS = "collisions"
    RESTRICTIONS = "restrictions"
    OTHER = "other"


class RejectionReason(Enum):
    """
    Why a slot was refused.

    The display message and the batch-summary category are derived from the
    tag, so callers never need to inspect the message text.
    """
    TOO_EARLY = ("Too Early (Before 06:00)", SkipCategory.OTHER)
    TOO_LATE = ("Too Late (After 23:30)", SkipCategory.OTHER)
    RESTRICTED_MORNING = ("Restricted: Morning Zone (07:30-09:30)", SkipCategory.RESTRICTIONS)
    RESTRICTED_EVENING = ("Restricted: Evening Zone (16:30-19:30)", SkipCategory.RESTRICTIONS)
    COLLISION = ("Time Collision detected", SkipCategory.COLLISIONS)
    MISSING_LOCATION = ("Please select a location!", SkipCategory.OTHER)
    MISSING_VEHICLE_TYPE = ("Please select a vehicle category!", SkipCategory.OTHER)
    MISSING_EXAM_CENTER = ("Please select an Exam Center!", SkipCategory.OTHER)
    MISSING_REASON = ("Please select or type a reason!", SkipCategory.OTHER)
    ILLEGAL_TRANSITION = ("This status change is not allowed", SkipCategory.OTHER)

    def __init__(self, message: str, category: SkipCategory):
        self.message = message
        self.category = category

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class Slot:
    """
    A time interval on one day of an instructor's calendar.

    ``duration`` is frozen at write time and is the authoritative length;
    ``end_time`` is stored alongside it so display code never has to
    re-derive business rules.
    """
    date: str
    start_time: str
    end_time: str
    duration: int
    kind: SlotKind = SlotKind.LESSON
    status: SlotStatus = SlotStatus.OPEN
    id: Optional[str] = None
    location: str = ""
    exam_center: str = ""
    vehicle_type: str = ""
    reason: str = ""
    student_id: Optional[str] = None
    is_double: bool = False
    source: Optional[str] = None
    custom_duration: Optional[int] = None

    @property
    def start_minutes(self) -> int:
        return to_minutes(self.start_time)

    @property
    def end_minutes(self) -> int:
        return to_minutes(self.end_time)

    @property
    def is_block(self) -> bool:
        return self.kind is SlotKind.BLOCK

    def overlaps(self, start_minutes: int, end_minutes: int) -> bool:
        """Check whether this slot overlaps ``[start_minutes, end_minutes)``."""
        return intervals_overlap(self.start_minutes, self.end_minutes, start_minutes, end_minutes)

    def effective_duration(self, default_duration: int = DEFAULT_LESSON_DURATION) -> int:
        """
        Length of the slot, tolerating records written before duration was frozen.

        Fallback chain: ``duration``, then ``custom_duration``, then the
        profile default (doubled for double lessons).
        """
        if self.duration:
            return self.duration
        if self.custom_duration:
            return self.custom_duration
        return default_duration * 2 if self.is_double else default_duration

    def moved_to(self, date: str, start_time: str, duration: Optional[int] = None) -> "Slot":
        """Return a copy placed at a new date/time with ``end_time`` recomputed."""
        length = duration if duration is not None else self.effective_duration()
        return replace(
            self,
            date=date,
            start_time=start_time,
            end_time=add_minutes(start_time, length),
            duration=length,
        )

    def to_record(self) -> Dict[str, Any]:
        """Serialise to the host application's plain record layout."""
        record: Dict[str, Any] = {
            "date": self.date,
            "time": self.start_time,
            "endTime": self.end_time,
            "duration": self.duration,
            "kind": self.kind.value,
            "status": self.status.value,
            "location": self.location,
            "examCenter": self.exam_center,
            "type": self.reason if self.is_block else self.vehicle_type,
            "studentId": self.student_id or "",
            "isDouble": self.is_double,
            "bookedBy": self.source,
            "customDuration": self.custom_duration,
        }
        if self.id:
            record["id"] = self.id
        return record

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Slot":
        """
        Build a slot from a plain record.

        Records without an explicit ``kind`` are Blocks when their status is
        ``Blocked``; the Block reason and the Lesson vehicle category share
        the ``type`` key.
        """
        status = SlotStatus(record.get("status") or SlotStatus.OPEN.value)
        if record.get("kind"):
            kind = SlotKind(record["kind"])
        else:
            kind = SlotKind.BLOCK if status is SlotStatus.BLOCKED else SlotKind.LESSON

        start_time = record["time"]
        slot = cls(
            id=record.get("id"),
            date=record["date"],
            start_time=start_time,
            end_time=record.get("endTime") or start_time,
            duration=int(record.get("duration") or 0),
            kind=kind,
            status=status,
            location=record.get("location") or "",
            exam_center=record.get("examCenter") or "",
            vehicle_type="" if kind is SlotKind.BLOCK else (record.get("type") or ""),
            reason=(record.get("type") or "") if kind is SlotKind.BLOCK else "",
            student_id=record.get("studentId") or None,
            is_double=bool(record.get("isDouble")),
            source=record.get("bookedBy"),
            custom_duration=record.get("customDuration"),
        )

        if not record.get("endTime") or not slot.duration:
            # Legacy record: freeze the geometry from the fallback chain.
            slot = slot.moved_to(slot.date, slot.start_time, slot.effective_duration())
        return slot


@dataclass(frozen=True)
class WeekConfig:
    """Parameters for filling one week with draft lessons."""
    working_days: FrozenSet[int]  # 0=Sunday, 6=Saturday
    start_time: str
    end_time: str
    lesson_duration: int = DEFAULT_LESSON_DURATION
    is_double: bool = False
    vehicle_type: str = ""
    skip_lunch: bool = True
    exam_center: str = ""
    location: str = ""

    @property
    def effective_duration(self) -> int:
        return self.lesson_duration * 2 if self.is_double else self.lesson_duration


@dataclass(frozen=True)
class ProfileDefaults:
    """Instructor profile settings consumed by the engine."""
    lesson_duration: int = DEFAULT_LESSON_DURATION
    default_double_lesson: bool = False
    vehicle_types: List[str] = field(default_factory=list)
    exam_centers: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class LessonForm:
    """A single create-or-edit request coming from the host application."""
    date: str
    start_time: str
    kind: SlotKind = SlotKind.LESSON
    location: str = ""
    vehicle_type: str = ""
    exam_center: str = ""
    reason: str = ""
    student_id: Optional[str] = None
    is_double: bool = False
    status: Optional[SlotStatus] = None
    custom_duration: Optional[int] = None


@dataclass(frozen=True)
class SlotValidity:
    """Outcome of a validity check."""
    valid: bool
    reason: Optional[RejectionReason] = None

    @property
    def message(self) -> Optional[str]:
        return self.reason.message if self.reason else None

    def __bool__(self) -> bool:
        return self.valid


@dataclass(frozen=True)
class SaveResult:
    """Either the fully materialised slot or the first rejection encountered."""
    slot: Optional[Slot] = None
    reason: Optional[RejectionReason] = None

    @property
    def accepted(self) -> bool:
        return self.slot is not None

    @property
    def message(self) -> Optional[str]:
        return self.reason.message if self.reason else None


@dataclass
class SkipSummary:
    """Counts of rejected candidates per category."""
    collisions: int = 0
    restrictions: int = 0
    other: int = 0

    def record(self, reason: RejectionReason) -> None:
        if reason.category is SkipCategory.COLLISIONS:
            self.collisions += 1
        elif reason.category is SkipCategory.RESTRICTIONS:
            self.restrictions += 1
        else:
            self.other += 1

    @property
    def total(self) -> int:
        return self.collisions + self.restrictions + self.other


@dataclass
class CopyResult:
    """Accepted shifted slots plus the skip summary of a week copy."""
    accepted: List[Slot] = field(default_factory=list)
    skipped: SkipSummary = field(default_factory=SkipSummary)

    def summary(self) -> str:
        """User-facing one-line summary."""
        message = f"Copied {len(self.accepted)} slot(s) to next week."
        if self.skipped.total:
            message += (
                f" Skipped {self.skipped.total}: "
                f"{self.skipped.collisions} collision(s), "
                f"{self.skipped.restrictions} restricted zone(s), "
                f"{self.skipped.other} other."
            )
        return message
