"""
Slot status state machine.

Transitions are explicit: callers ask for an event and get back the new
status together with whether the move was legal.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple

from .models import SlotKind, SlotStatus, UNKNOWN_STUDENT


class SlotEvent(str, Enum):
    """Things that can happen to a lesson slot."""
    ATTACH_STUDENT = "attach_student"
    DETACH_STUDENT = "detach_student"
    PUBLISH = "publish"
    CONVERT_TO_DRAFT = "convert_to_draft"


@dataclass(frozen=True)
class StatusTransition:
    status: SlotStatus
    legal: bool


_LESSON_TRANSITIONS: Dict[Tuple[SlotStatus, SlotEvent], SlotStatus] = {
    (SlotStatus.OPEN, SlotEvent.ATTACH_STUDENT): SlotStatus.BOOKED,
    (SlotStatus.DRAFT, SlotEvent.ATTACH_STUDENT): SlotStatus.BOOKED,
    (SlotStatus.BOOKED, SlotEvent.DETACH_STUDENT): SlotStatus.OPEN,
    (SlotStatus.OPEN, SlotEvent.CONVERT_TO_DRAFT): SlotStatus.DRAFT,
    (SlotStatus.BOOKED, SlotEvent.CONVERT_TO_DRAFT): SlotStatus.DRAFT,
}


def has_real_student(student_id: Optional[str]) -> bool:
    """True when a student is actually assigned (not empty, not the legacy placeholder)."""
    return bool(student_id) and student_id != UNKNOWN_STUDENT


def transition(
    kind: SlotKind,
    status: SlotStatus,
    event: SlotEvent,
    has_student: bool = False,
) -> StatusTransition:
    """
    Apply ``event`` to a slot in ``status``.

    Blocks never change state. Publishing a Draft books it when a student is
    attached and opens it otherwise, so a Booked slot always has a student.
    Illegal events leave the status unchanged.
    """
    if kind is SlotKind.BLOCK:
        return StatusTransition(status=SlotStatus.BLOCKED, legal=False)

    if event is SlotEvent.PUBLISH:
        if status is not SlotStatus.DRAFT:
            return StatusTransition(status=status, legal=False)
        published = SlotStatus.BOOKED if has_student else SlotStatus.OPEN
        return StatusTransition(status=published, legal=True)

    target = _LESSON_TRANSITIONS.get((status, event))
    if target is None:
        return StatusTransition(status=status, legal=False)
    return StatusTransition(status=target, legal=True)


def derive_status(
    kind: SlotKind,
    requested: Optional[SlotStatus],
    student_id: Optional[str],
) -> SlotStatus:
    """
    Status for a slot being saved from a form.

    A Block is always Blocked. An explicit Draft stays a Draft until a real
    student is attached; any lesson with a student is Booked, the rest Open.
    """
    if kind is SlotKind.BLOCK:
        return SlotStatus.BLOCKED
    if has_real_student(student_id):
        return SlotStatus.BOOKED
    if requested is SlotStatus.DRAFT:
        return SlotStatus.DRAFT
    return SlotStatus.OPEN
