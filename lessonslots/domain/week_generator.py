"""
Week auto-fill: packs a week with back-to-back draft lessons.

Pure domain logic. The generator reads a snapshot of existing slots and
returns new Draft slots; committing them is the caller's job.
"""

import logging
from typing import List, Mapping, Optional, Sequence

import pendulum
from pendulum import Date, DateTime

from .models import Slot, SlotKind, SlotStatus, WeekConfig
from .time_math import add_minutes, from_minutes, intervals_overlap, to_minutes
from .validity import active_zones, check_slot_validity, weekday_number

logger = logging.getLogger(__name__)


LUNCH_START = to_minutes("12:30")
LUNCH_END = to_minutes("13:30")

# Step used when the final validity check rejects for a reason the
# cursor rules did not anticipate.
FALLBACK_STEP_MINUTES = 15


class WeekGenerator:
    """
    Generates Draft lesson slots for a 7-day window.

    Algorithm, per working day:
    1. Walk a cursor from the configured start to the configured end
    2. Jump over lunch and restricted zones instead of probing them
    3. Step past candidates that start before "now"
    4. Snap to the latest end of any existing slot the candidate overlaps
    5. Use the validity checker as the final gatekeeper
    6. Emit a Draft and advance by the lesson length (no gap)
    """

    def __init__(self, config: WeekConfig):
        self.config = config

    def generate(
        self,
        week_start: Date,
        existing_slots: Sequence[Slot],
        holidays: Optional[Mapping[str, str]] = None,
        now: Optional[DateTime] = None,
    ) -> List[Slot]:
        """
        Generate drafts for the seven days starting at ``week_start``.

        Args:
            week_start: First day of the window
            existing_slots: Snapshot of committed slots (any dates)
            holidays: ISO date -> holiday name
            now: Reference time for skipping the past (defaults to local now)

        Returns:
            New Draft slots in chronological order
        """
        reference = _naive(now or pendulum.now())
        drafts: List[Slot] = []

        for offset in range(7):
            day = week_start.add(days=offset)
            if weekday_number(day) not in self.config.working_days:
                continue

            date_str = day.to_date_string()
            day_slots = [slot for slot in existing_slots if slot.date == date_str]
            day_drafts = self._fill_day(day, day_slots, holidays, reference)
            logger.debug("Generated %d draft(s) for %s", len(day_drafts), date_str)
            drafts.extend(day_drafts)

        return drafts

    def _fill_day(
        self,
        day: Date,
        day_slots: List[Slot],
        holidays: Optional[Mapping[str, str]],
        now: DateTime,
    ) -> List[Slot]:
        config = self.config
        duration = config.effective_duration
        date_str = day.to_date_string()
        zones = active_zones(day, holidays)

        drafts: List[Slot] = []
        cursor = to_minutes(config.start_time)
        day_end = to_minutes(config.end_time)

        while cursor + duration <= day_end:
            candidate_end = cursor + duration

            if config.skip_lunch and intervals_overlap(cursor, candidate_end, LUNCH_START, LUNCH_END):
                cursor = LUNCH_END
                continue

            zone = next((z for z in zones if z.hits(cursor, candidate_end)), None)
            if zone is not None:
                cursor = zone.end
                continue

            if _starts_at(day, cursor) < now:
                cursor += duration
                continue

            blocker_end = self._latest_overlapping_end(day_slots, cursor, candidate_end)
            if blocker_end is not None:
                cursor = blocker_end
                continue

            start_time = from_minutes(cursor)
            validity = check_slot_validity(
                date=date_str,
                start_time=start_time,
                duration=duration,
                day_slots=day_slots,
                holidays=holidays,
            )
            if not validity:
                logger.debug(
                    "Position %s %s rejected (%s), stepping %d min",
                    date_str, start_time, validity.message, FALLBACK_STEP_MINUTES,
                )
                cursor += FALLBACK_STEP_MINUTES
                continue

            drafts.append(self._draft(date_str, start_time, duration))
            cursor += duration

        return drafts

    @staticmethod
    def _latest_overlapping_end(
        day_slots: List[Slot],
        start_minutes: int,
        end_minutes: int,
    ) -> Optional[int]:
        """End of the latest-ending existing slot overlapping the candidate."""
        ends = [
            slot.end_minutes for slot in day_slots
            if slot.overlaps(start_minutes, end_minutes)
        ]
        return max(ends) if ends else None

    def _draft(self, date_str: str, start_time: str, duration: int) -> Slot:
        config = self.config
        return Slot(
            date=date_str,
            start_time=start_time,
            end_time=add_minutes(start_time, duration),
            duration=duration,
            kind=SlotKind.LESSON,
            status=SlotStatus.DRAFT,
            location=config.location,
            exam_center=config.exam_center,
            vehicle_type=config.vehicle_type,
            is_double=config.is_double,
        )


def generate_week(
    week_start: Date,
    config: WeekConfig,
    existing_slots: Sequence[Slot],
    holidays: Optional[Mapping[str, str]] = None,
    now: Optional[DateTime] = None,
) -> List[Slot]:
    """Functional entry point around ``WeekGenerator``."""
    return WeekGenerator(config).generate(week_start, existing_slots, holidays, now)


def _starts_at(day: Date, minutes: int) -> DateTime:
    hours, mins = divmod(minutes, 60)
    return pendulum.naive(day.year, day.month, day.day, hours, mins)


def _naive(moment: DateTime) -> DateTime:
    return moment.naive() if moment.tzinfo is not None else moment
