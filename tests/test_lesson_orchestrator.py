"""
Tests for single-slot save, move and publish.
"""

from dataclasses import replace

import pytest

from lessonslots.domain.models import (
    LessonForm,
    ProfileDefaults,
    RejectionReason,
    Slot,
    SlotKind,
    SlotStatus,
)
from lessonslots.domain.status import SlotEvent
from lessonslots.services.lesson_orchestrator import move_slot, publish_drafts, save_slot


TUESDAY = "2024-11-26"
PROFILE = ProfileDefaults(lesson_duration=45)


def _lesson_form(**overrides):
    values = dict(
        date=TUESDAY,
        start_time="14:00",
        location="Kowloon Tong (MTR)",
        vehicle_type="Private Car (Auto) 1A",
        exam_center="Tin Kwong Road (Kowloon)",
    )
    values.update(overrides)
    return LessonForm(**values)


def _block_form(**overrides):
    values = dict(date=TUESDAY, start_time="14:00", kind=SlotKind.BLOCK, reason="Car service")
    values.update(overrides)
    return LessonForm(**values)


class TestSaveSlot:
    """Tests for save_slot."""

    def test_duration_is_frozen(self):
        """A 90-minute double lesson at 14:00 ends at 15:30, whatever the profile says later."""
        result = save_slot(_lesson_form(is_double=True), None, [], PROFILE, holidays={})

        assert result.accepted
        slot = result.slot
        assert slot.duration == 90
        assert slot.end_time == "15:30"

        stored = replace(slot, id="abc")
        moved = move_slot(stored, TUESDAY, "14:00", [stored], holidays={}, default_duration=60)
        assert moved.slot.duration == 90
        assert moved.slot.end_time == "15:30"

    def test_profile_duration_used_for_lessons(self):
        """Single lessons take the profile length."""
        result = save_slot(_lesson_form(), None, [], ProfileDefaults(lesson_duration=60), holidays={})

        assert result.slot.duration == 60
        assert result.slot.end_time == "15:00"

    def test_block_duration(self):
        """Blocks default to 60 minutes unless a custom length is given."""
        default = save_slot(_block_form(), None, [], PROFILE, holidays={})
        custom = save_slot(_block_form(custom_duration=30), None, [], PROFILE, holidays={})

        assert default.slot.duration == 60
        assert custom.slot.duration == 30
        assert custom.slot.end_time == "14:30"

    @pytest.mark.parametrize(
        "overrides, reason",
        [
            ({"location": ""}, RejectionReason.MISSING_LOCATION),
            ({"vehicle_type": ""}, RejectionReason.MISSING_VEHICLE_TYPE),
            ({"exam_center": ""}, RejectionReason.MISSING_EXAM_CENTER),
            ({"location": "", "exam_center": ""}, RejectionReason.MISSING_LOCATION),
        ],
    )
    def test_missing_lesson_fields(self, overrides, reason):
        """Lessons need a location, vehicle category and exam center."""
        result = save_slot(_lesson_form(**overrides), None, [], PROFILE, holidays={})

        assert not result.accepted
        assert result.reason is reason

    def test_missing_fields_reported_before_time_rules(self):
        """Field presence is checked before any temporal rule."""
        result = save_slot(_lesson_form(start_time="05:00", location=""), None, [], PROFILE, holidays={})

        assert result.reason is RejectionReason.MISSING_LOCATION

    def test_block_needs_reason(self):
        """A Block without reason text is rejected."""
        result = save_slot(_block_form(reason="   "), None, [], PROFILE, holidays={})

        assert result.reason is RejectionReason.MISSING_REASON
        assert result.message == "Please select or type a reason!"

    def test_block_does_not_need_lesson_fields(self):
        """Blocks ignore location, vehicle and exam center."""
        result = save_slot(_block_form(), None, [], PROFILE, holidays={})

        assert result.slot.status is SlotStatus.BLOCKED
        assert result.slot.reason == "Car service"
        assert result.slot.source == "teacher"

    def test_temporal_reason_surfaced_verbatim(self):
        """Validity failures come back unchanged."""
        result = save_slot(_lesson_form(start_time="17:00"), None, [], PROFILE, holidays={})

        assert result.reason is RejectionReason.RESTRICTED_EVENING
        assert result.message == "Restricted: Evening Zone (16:30-19:30)"

    def test_edit_excludes_own_interval(self):
        """Editing a slot does not collide with its previous position."""
        existing = Slot(
            id="abc", date=TUESDAY, start_time="14:00", end_time="14:45", duration=45,
            status=SlotStatus.OPEN,
        )

        edited = save_slot(_lesson_form(start_time="14:15"), existing, [existing], PROFILE, holidays={})
        created = save_slot(_lesson_form(start_time="14:15"), None, [existing], PROFILE, holidays={})

        assert edited.accepted
        assert edited.slot.id == "abc"
        assert created.reason is RejectionReason.COLLISION

    def test_status_open_without_student(self):
        """A lesson without student is Open and has no source."""
        slot = save_slot(_lesson_form(), None, [], PROFILE, holidays={}).slot

        assert slot.status is SlotStatus.OPEN
        assert slot.source is None
        assert slot.student_id is None

    def test_status_booked_with_student(self):
        """A lesson with a student is Booked by the instructor."""
        slot = save_slot(_lesson_form(student_id="s-1"), None, [], PROFILE, holidays={}).slot

        assert slot.status is SlotStatus.BOOKED
        assert slot.source == "teacher"
        assert slot.student_id == "s-1"

    def test_draft_preserved_until_student_attached(self):
        """An explicit Draft stays Draft unless a real student is attached."""
        draft = save_slot(_lesson_form(status=SlotStatus.DRAFT), None, [], PROFILE, holidays={}).slot
        promoted = save_slot(
            _lesson_form(status=SlotStatus.DRAFT, student_id="s-1"), None, [], PROFILE, holidays={}
        ).slot

        assert draft.status is SlotStatus.DRAFT
        assert promoted.status is SlotStatus.BOOKED

    def test_unknown_student_placeholder_is_not_a_student(self):
        """The legacy "Unknown" placeholder does not book a slot."""
        slot = save_slot(_lesson_form(student_id="Unknown"), None, [], PROFILE, holidays={}).slot

        assert slot.status is SlotStatus.OPEN
        assert slot.student_id is None

    def test_block_never_carries_student(self):
        """Blocks drop any student reference."""
        slot = save_slot(_block_form(student_id="s-1"), None, [], PROFILE, holidays={}).slot

        assert slot.status is SlotStatus.BLOCKED
        assert slot.student_id is None


class TestMoveSlot:
    """Tests for move_slot."""

    def _slot(self, **overrides):
        values = dict(
            id="abc", date=TUESDAY, start_time="14:00", end_time="14:45", duration=45,
            status=SlotStatus.DRAFT, student_id="s-1",
        )
        values.update(overrides)
        return Slot(**values)

    def test_move_recomputes_end_time(self):
        """The end time follows the new start."""
        slot = self._slot()

        result = move_slot(slot, "2024-11-27", "10:00", [slot], holidays={})

        assert result.slot.date == "2024-11-27"
        assert result.slot.end_time == "10:45"
        assert result.slot.id == "abc"

    def test_move_into_collision(self):
        """Moving onto another slot is rejected."""
        slot = self._slot()
        other = self._slot(id="xyz", start_time="15:00", end_time="16:00", duration=60)

        result = move_slot(slot, TUESDAY, "15:30", [slot, other], holidays={})

        assert result.reason is RejectionReason.COLLISION

    def test_publish_on_move(self):
        """A move can publish a Draft in the same step."""
        slot = self._slot()

        result = move_slot(slot, TUESDAY, "14:00", [slot], holidays={}, event=SlotEvent.PUBLISH)

        assert result.slot.status is SlotStatus.BOOKED

    def test_illegal_transition(self):
        """Blocks cannot be converted to drafts."""
        block = self._slot(kind=SlotKind.BLOCK, status=SlotStatus.BLOCKED, student_id=None)

        result = move_slot(block, TUESDAY, "14:00", [block], holidays={}, event=SlotEvent.CONVERT_TO_DRAFT)

        assert result.reason is RejectionReason.ILLEGAL_TRANSITION


class TestPublishDrafts:
    """Tests for publish_drafts."""

    def test_publish(self):
        """Drafts with a student are Booked, without one Open; others are ignored."""
        slots = [
            Slot(id="1", date=TUESDAY, start_time="10:00", end_time="10:45", duration=45,
                 status=SlotStatus.DRAFT, student_id="s-1"),
            Slot(id="2", date=TUESDAY, start_time="11:00", end_time="11:45", duration=45,
                 status=SlotStatus.DRAFT),
            Slot(id="3", date=TUESDAY, start_time="12:00", end_time="12:30", duration=30,
                 status=SlotStatus.OPEN),
        ]

        published = publish_drafts(slots)

        assert [(slot.id, slot.status) for slot in published] == [
            ("1", SlotStatus.BOOKED),
            ("2", SlotStatus.OPEN),
        ]
        assert published[0].source == "teacher"
