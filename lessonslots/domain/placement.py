"""
Helpers for placing single slots on the calendar grid.
"""

import math
from typing import List, Optional, Sequence

import pendulum
from pendulum import DateTime

from .models import DEFAULT_LESSON_DURATION, Slot, SlotKind, SlotStatus
from .status import has_real_student
from .time_math import from_minutes
from .validity import DAY_CLOSES, DAY_OPENS, parse_date


def suggest_start_time(
    date: str,
    clicked_hour: int,
    day_slots: Sequence[Slot],
    default_duration: int = DEFAULT_LESSON_DURATION,
    now: Optional[DateTime] = None,
) -> str:
    """
    Pick a start time when the user clicks an hour cell.

    Starts at the top of the hour, or right after the latest-ending slot that
    reaches into that hour. A suggestion in the past is replaced by "now"
    rounded up to the next quarter hour, kept within operating hours.
    """
    hour_start = clicked_hour * 60
    hour_end = hour_start + 60

    latest_end = hour_start
    for slot in day_slots:
        if slot.date != date:
            continue
        start = slot.start_minutes
        end = start + slot.effective_duration(default_duration)
        if end > hour_start and start < hour_end:
            latest_end = max(latest_end, end)

    reference = now or pendulum.now()
    if reference.tzinfo is not None:
        reference = reference.naive()

    day = parse_date(date)
    hours, minutes = divmod(latest_end, 60)
    if pendulum.naive(day.year, day.month, day.day, hours, minutes) < reference:
        elapsed = reference.hour * 3600 + reference.minute * 60 + reference.second
        if reference.microsecond:
            elapsed += 1
        next_quarter = math.ceil(elapsed / 900) * 15
        return from_minutes(min(max(next_quarter, DAY_OPENS), DAY_CLOSES))

    return from_minutes(latest_end)


def student_visible_slots(
    slots: Sequence[Slot],
    now: Optional[DateTime] = None,
) -> List[Slot]:
    """
    Slots a student may book: open, unassigned lessons that have not started.

    Blocks and Drafts never appear.
    """
    reference = now or pendulum.now()
    if reference.tzinfo is not None:
        reference = reference.naive()

    visible = []
    for slot in slots:
        if slot.kind is not SlotKind.LESSON or slot.status is not SlotStatus.OPEN:
            continue
        if has_real_student(slot.student_id):
            continue
        day = parse_date(slot.date)
        hours, minutes = divmod(slot.start_minutes, 60)
        if pendulum.naive(day.year, day.month, day.day, hours, minutes) < reference:
            continue
        visible.append(slot)

    return sorted(visible, key=lambda s: (s.date, s.start_time))
