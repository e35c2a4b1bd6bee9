"""
Single-slot create, edit and move operations.

Computes the frozen duration and end time for one request, validates it and
returns the fully materialised slot for the persistence layer. Nothing here
writes anywhere.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import List, Mapping, Optional, Sequence

from ..domain.models import (
    DEFAULT_BLOCK_DURATION,
    DEFAULT_LESSON_DURATION,
    LessonForm,
    ProfileDefaults,
    RejectionReason,
    SaveResult,
    Slot,
    SlotKind,
    SlotStatus,
)
from ..domain.status import SlotEvent, derive_status, has_real_student, transition
from ..domain.time_math import add_minutes
from ..domain.validity import check_slot_validity

logger = logging.getLogger(__name__)

TEACHER_SOURCE = "teacher"


def frozen_duration(form: LessonForm, profile: ProfileDefaults) -> int:
    """
    Length to store with the slot.

    Blocks use their custom length (60 minutes by default); lessons use the
    profile's lesson length, doubled for double lessons.
    """
    if form.kind is SlotKind.BLOCK:
        return form.custom_duration or DEFAULT_BLOCK_DURATION
    base = profile.lesson_duration or DEFAULT_LESSON_DURATION
    return base * 2 if form.is_double else base


def missing_field(form: LessonForm) -> Optional[RejectionReason]:
    """First required field that is empty, checked before any time logic."""
    if form.kind is SlotKind.BLOCK:
        if not form.reason.strip():
            return RejectionReason.MISSING_REASON
        return None
    if not form.location:
        return RejectionReason.MISSING_LOCATION
    if not form.vehicle_type:
        return RejectionReason.MISSING_VEHICLE_TYPE
    if not form.exam_center:
        return RejectionReason.MISSING_EXAM_CENTER
    return None


def save_slot(
    form: LessonForm,
    editing_slot: Optional[Slot],
    all_slots: Sequence[Slot],
    profile: ProfileDefaults,
    holidays: Optional[Mapping[str, str]] = None,
) -> SaveResult:
    """
    Validate a create/edit request and build the slot to persist.

    Args:
        form: The submitted request
        editing_slot: The slot being edited, or None when creating
        all_slots: Snapshot of committed slots
        profile: Instructor profile defaults
        holidays: ISO date -> holiday name

    Returns:
        SaveResult holding the slot, or the first rejection reason
    """
    duration = frozen_duration(form, profile)
    end_time = add_minutes(form.start_time, duration)

    missing = missing_field(form)
    if missing is not None:
        return SaveResult(reason=missing)

    editing_id = editing_slot.id if editing_slot else None
    validity = check_slot_validity(
        date=form.date,
        start_time=form.start_time,
        duration=duration,
        day_slots=all_slots,
        exclude_slot_id=editing_id,
        holidays=holidays,
    )
    if not validity:
        logger.debug("Rejected %s %s: %s", form.date, form.start_time, validity.message)
        return SaveResult(reason=validity.reason)

    status = derive_status(form.kind, form.status, form.student_id)
    is_block = form.kind is SlotKind.BLOCK

    slot = Slot(
        id=editing_id,
        date=form.date,
        start_time=form.start_time,
        end_time=end_time,
        duration=duration,
        kind=form.kind,
        status=status,
        location="" if is_block else form.location,
        exam_center="" if is_block else form.exam_center,
        vehicle_type="" if is_block else form.vehicle_type,
        reason=form.reason.strip() if is_block else "",
        student_id=None if is_block or not has_real_student(form.student_id) else form.student_id,
        is_double=False if is_block else form.is_double,
        source=TEACHER_SOURCE if status in (SlotStatus.BLOCKED, SlotStatus.BOOKED) else None,
        custom_duration=form.custom_duration if is_block else None,
    )
    return SaveResult(slot=slot)


def move_slot(
    slot: Slot,
    new_date: str,
    new_time: str,
    all_slots: Sequence[Slot],
    holidays: Optional[Mapping[str, str]] = None,
    event: Optional[SlotEvent] = None,
    default_duration: int = DEFAULT_LESSON_DURATION,
) -> SaveResult:
    """
    Move a slot (drag and drop) and optionally change its status.

    The frozen duration travels with the slot; only the end time is
    recomputed. The slot never collides with its own old position.
    """
    status = slot.status
    if event is not None:
        outcome = transition(slot.kind, slot.status, event, has_real_student(slot.student_id))
        if not outcome.legal:
            return SaveResult(reason=RejectionReason.ILLEGAL_TRANSITION)
        status = outcome.status

    duration = slot.effective_duration(default_duration)
    validity = check_slot_validity(
        date=new_date,
        start_time=new_time,
        duration=duration,
        day_slots=all_slots,
        exclude_slot_id=slot.id,
        holidays=holidays,
    )
    if not validity:
        return SaveResult(reason=validity.reason)

    return SaveResult(slot=replace(slot.moved_to(new_date, new_time, duration), status=status))


def publish_drafts(slots: Sequence[Slot]) -> List[Slot]:
    """Publish every Draft in ``slots``; other slots are ignored."""
    published = []
    for slot in slots:
        if slot.status is not SlotStatus.DRAFT:
            continue
        has_student = has_real_student(slot.student_id)
        outcome = transition(slot.kind, slot.status, SlotEvent.PUBLISH, has_student)
        if not outcome.legal:
            continue
        published.append(
            replace(
                slot,
                status=outcome.status,
                source=TEACHER_SOURCE if has_student else slot.source,
            )
        )
    return published
