"""
Tests for the week auto-fill generator.
"""

from itertools import combinations

import pendulum

from lessonslots.domain.models import Slot, SlotKind, SlotStatus, WeekConfig
from lessonslots.domain.time_math import to_minutes
from lessonslots.domain.week_generator import WeekGenerator, generate_week


LONG_AGO = pendulum.naive(2024, 1, 1)

MONDAY = pendulum.date(2024, 11, 25)
TUESDAY = pendulum.date(2024, 11, 26)
SATURDAY = pendulum.date(2024, 11, 30)
SUNDAY = pendulum.date(2024, 12, 1)
CHRISTMAS = pendulum.date(2024, 12, 25)  # Wednesday


def _config(days, start="09:00", end="18:00", duration=45, **kwargs):
    return WeekConfig(
        working_days=frozenset(days),
        start_time=start,
        end_time=end,
        lesson_duration=duration,
        vehicle_type=kwargs.pop("vehicle_type", "Private Car (Auto) 1A"),
        exam_center=kwargs.pop("exam_center", "Tin Kwong Road (Kowloon)"),
        location=kwargs.pop("location", "Kowloon Tong (MTR)"),
        **kwargs,
    )


def _block(date, start, end):
    return Slot(
        id="block-1",
        date=date,
        start_time=start,
        end_time=end,
        duration=to_minutes(end) - to_minutes(start),
        kind=SlotKind.BLOCK,
        status=SlotStatus.BLOCKED,
        reason="Car service",
    )


def _starts(slots):
    return [slot.start_time for slot in slots]


class TestWeekGenerator:
    """Tests for WeekGenerator."""

    def test_snaps_to_collision_end(self):
        """A lesson ends exactly at the Block start and the next resumes at its end."""
        generator = WeekGenerator(_config({0}, start="09:15", end="18:00", duration=45, skip_lunch=True))
        existing = [_block(SUNDAY.to_date_string(), "10:00", "11:00")]

        drafts = generator.generate(SUNDAY.subtract(days=6), existing, holidays={}, now=LONG_AGO)

        assert drafts[0].start_time == "09:15"
        assert drafts[0].end_time == "10:00"
        assert drafts[1].start_time == "11:00"
        assert all(not slot.overlaps(to_minutes("10:00"), to_minutes("11:00")) for slot in drafts)
        assert _starts(drafts) == [
            "09:15", "11:00", "11:45", "13:30", "14:15", "15:00", "15:45", "16:30", "17:15",
        ]

    def test_packing_on_a_weekday(self):
        """Weekday fill skips the Morning zone, the Block, lunch and the Evening zone."""
        generator = WeekGenerator(_config({2}, start="09:00", end="18:00", duration=30, skip_lunch=True))
        existing = [_block(TUESDAY.to_date_string(), "10:00", "11:00")]

        drafts = generator.generate(MONDAY, existing, holidays={}, now=LONG_AGO)

        assert _starts(drafts) == [
            "09:30", "11:00", "11:30", "12:00", "13:30", "14:00", "14:30", "15:00", "15:30", "16:00",
        ]
        assert drafts[0].end_time == "10:00"

    def test_lunch_kept_free(self):
        """With skip_lunch no draft touches 12:30-13:30."""
        generator = WeekGenerator(_config({0}, start="12:00", end="15:00", duration=60, skip_lunch=True))

        drafts = generator.generate(SUNDAY, [], holidays={}, now=LONG_AGO)

        assert _starts(drafts) == ["13:30"]

    def test_lunch_used_when_not_skipped(self):
        """Without skip_lunch lessons pack straight through midday."""
        generator = WeekGenerator(_config({0}, start="12:00", end="15:00", duration=60, skip_lunch=False))

        drafts = generator.generate(SUNDAY, [], holidays={}, now=LONG_AGO)

        assert _starts(drafts) == ["12:00", "13:00", "14:00"]

    def test_non_working_days_are_skipped(self):
        """Only configured weekdays receive drafts."""
        generator = WeekGenerator(_config({1, 3}, start="10:00", end="12:00", duration=60))

        drafts = generator.generate(MONDAY, [], holidays={}, now=LONG_AGO)

        assert sorted({slot.date for slot in drafts}) == ["2024-11-25", "2024-11-27"]

    def test_output_is_chronological(self):
        """Days and times come out in order."""
        generator = WeekGenerator(_config({0, 1, 2, 3, 4, 5, 6}, start="10:00", end="12:00", duration=60))

        drafts = generator.generate(MONDAY, [], holidays={}, now=LONG_AGO)

        keys = [(slot.date, slot.start_time) for slot in drafts]
        assert keys == sorted(keys)
        assert len(drafts) == 14

    def test_double_lessons(self):
        """Double lessons use twice the lesson length."""
        generator = WeekGenerator(_config({0}, start="10:00", end="14:00", duration=45, is_double=True, skip_lunch=False))

        drafts = generator.generate(SUNDAY, [], holidays={}, now=LONG_AGO)

        assert _starts(drafts) == ["10:00", "11:30"]
        assert all(slot.duration == 90 and slot.is_double for slot in drafts)

    def test_past_positions_are_skipped(self):
        """No drafts are created before "now"."""
        generator = WeekGenerator(_config({2}, start="10:00", end="14:00", duration=60, skip_lunch=False))
        now = pendulum.naive(2024, 11, 26, 11, 30)

        drafts = generator.generate(MONDAY, [], holidays={}, now=now)

        assert _starts(drafts) == ["12:00", "13:00"]

    def test_saturday_evening_is_open(self):
        """Saturday keeps only the Morning zone."""
        config = _config({2, 6}, start="16:00", end="18:00", duration=60, skip_lunch=False)

        drafts = WeekGenerator(config).generate(MONDAY, [], holidays={}, now=LONG_AGO)

        assert [(slot.date, slot.start_time) for slot in drafts] == [
            ("2024-11-30", "16:00"),
            ("2024-11-30", "17:00"),
        ]

    def test_holiday_lifts_zones(self):
        """On a holiday the Morning zone may be filled."""
        config = _config({3}, start="07:00", end="10:00", duration=60, skip_lunch=False)
        week_start = pendulum.date(2024, 12, 23)

        on_holiday = WeekGenerator(config).generate(week_start, [], holidays={"2024-12-25": "Christmas Day"}, now=LONG_AGO)
        regular = WeekGenerator(config).generate(week_start, [], holidays={}, now=LONG_AGO)

        assert _starts(on_holiday) == ["07:00", "08:00", "09:00"]
        assert regular == []

    def test_unanticipated_rejection_steps_forward(self):
        """Rejections the cursor rules miss advance by 15 minutes."""
        generator = WeekGenerator(_config({0}, start="05:00", end="07:30", duration=30, skip_lunch=False))

        drafts = generator.generate(SUNDAY, [], holidays={}, now=LONG_AGO)

        assert _starts(drafts) == ["06:00", "06:30", "07:00"]

    def test_drafts_carry_config_fields(self):
        """Generated slots are Draft lessons with the configured details."""
        generator = WeekGenerator(_config({0}, start="10:00", end="11:00", duration=60))

        draft = generator.generate(SUNDAY, [], holidays={}, now=LONG_AGO)[0]

        assert draft.status is SlotStatus.DRAFT
        assert draft.kind is SlotKind.LESSON
        assert draft.id is None
        assert draft.student_id is None
        assert draft.end_time == "11:00"
        assert draft.vehicle_type == "Private Car (Auto) 1A"
        assert draft.exam_center == "Tin Kwong Road (Kowloon)"
        assert draft.location == "Kowloon Tong (MTR)"

    def test_no_overlap_with_existing_or_each_other(self):
        """Generated and existing slots never overlap on the same day."""
        date = TUESDAY.to_date_string()
        existing = [
            _block(date, "09:40", "10:10"),
            _block(date, "10:10", "11:20"),
            _block(date, "14:50", "15:05"),
        ]
        generator = WeekGenerator(_config({2}, start="09:30", end="16:30", duration=45, skip_lunch=True))

        drafts = generator.generate(MONDAY, existing, holidays={}, now=LONG_AGO)

        assert drafts
        for first, second in combinations(drafts + existing, 2):
            if first.date == second.date:
                assert not first.overlaps(second.start_minutes, second.end_minutes)

    def test_snap_uses_latest_overlapping_end(self):
        """When several slots overlap the candidate the cursor jumps past all of them."""
        date = SUNDAY.to_date_string()
        existing = [_block(date, "10:00", "10:30"), _block(date, "10:15", "11:15")]
        generator = WeekGenerator(_config({0}, start="10:00", end="12:00", duration=45, skip_lunch=False))

        drafts = generator.generate(SUNDAY, existing, holidays={}, now=LONG_AGO)

        assert _starts(drafts) == ["11:15"]

    def test_functional_entry_point(self):
        """generate_week wraps WeekGenerator."""
        config = _config({0}, start="10:00", end="12:00", duration=60)

        assert generate_week(SUNDAY, config, [], holidays={}, now=LONG_AGO) == \
            WeekGenerator(config).generate(SUNDAY, [], holidays={}, now=LONG_AGO)
