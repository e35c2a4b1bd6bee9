"""
Slot validity rules.

The single source of truth reused by single-slot saves, week generation and
week copies. Pure: no I/O, no ambient state.
"""

from dataclasses import dataclass
from typing import Iterable, List, Mapping, Optional

import pendulum
from pendulum import Date

from .models import RejectionReason, Slot, SlotValidity
from .time_math import intervals_overlap, to_minutes


DAY_OPENS = to_minutes("06:00")
DAY_CLOSES = to_minutes("23:30")

SUNDAY = 0
SATURDAY = 6


@dataclass(frozen=True)
class RestrictedZone:
    """A time-of-day window in which no lesson may be placed."""
    name: str
    start: int
    end: int
    reason: RejectionReason
    applies_on_saturday: bool = True

    def hits(self, start_minutes: int, end_minutes: int) -> bool:
        return intervals_overlap(start_minutes, end_minutes, self.start, self.end)


MORNING_ZONE = RestrictedZone(
    name="Morning",
    start=to_minutes("07:30"),
    end=to_minutes("09:30"),
    reason=RejectionReason.RESTRICTED_MORNING,
)
EVENING_ZONE = RestrictedZone(
    name="Evening",
    start=to_minutes("16:30"),
    end=to_minutes("19:30"),
    reason=RejectionReason.RESTRICTED_EVENING,
    applies_on_saturday=False,
)
RESTRICTED_ZONES = (MORNING_ZONE, EVENING_ZONE)


def parse_date(date_str: str) -> Date:
    """Parse an ISO ``YYYY-MM-DD`` string into a pendulum Date."""
    return pendulum.from_format(date_str, "YYYY-MM-DD").date()


def weekday_number(day: Date) -> int:
    """Weekday as 0=Sunday .. 6=Saturday."""
    return day.isoweekday() % 7


def active_zones(
    day: Date,
    holidays: Optional[Mapping[str, str]] = None,
) -> List[RestrictedZone]:
    """
    Return the restricted zones in force on ``day``.

    Sundays and holidays are exempt from every zone; Saturdays only keep
    the Morning zone. An unknown holiday calendar (``None``) exempts nothing.
    """
    weekday = weekday_number(day)
    if weekday == SUNDAY or day.to_date_string() in (holidays or {}):
        return []
    return [
        zone for zone in RESTRICTED_ZONES
        if weekday != SATURDAY or zone.applies_on_saturday
    ]


def find_collision(
    date: str,
    start_minutes: int,
    end_minutes: int,
    slots: Iterable[Slot],
    exclude_slot_id: Optional[str] = None,
) -> Optional[Slot]:
    """Return the first same-date slot overlapping the interval, if any."""
    for slot in slots:
        if slot.date != date:
            continue
        if exclude_slot_id is not None and slot.id == exclude_slot_id:
            continue
        if slot.overlaps(start_minutes, end_minutes):
            return slot
    return None


def check_slot_validity(
    date: str,
    start_time: str,
    duration: int,
    day_slots: Iterable[Slot],
    exclude_slot_id: Optional[str] = None,
    holidays: Optional[Mapping[str, str]] = None,
) -> SlotValidity:
    """
    Decide whether ``[start_time, start_time + duration)`` may exist on ``date``.

    Rules are evaluated in order and the first failure wins:

    1. Operating hours (06:00 to 23:30)
    2. Restricted zones, subject to Sunday/holiday/Saturday exemptions
    3. Collision with any other slot on the same date

    Args:
        date: ISO date of the candidate
        start_time: "HH:MM" start of the candidate
        duration: Length in minutes
        day_slots: Existing slots; entries for other dates are ignored
        exclude_slot_id: Id of the slot being edited (never collides with itself)
        holidays: ISO date -> holiday name

    Returns:
        SlotValidity with the rejection reason when invalid
    """
    start_minutes = to_minutes(start_time)
    end_minutes = start_minutes + duration

    if start_minutes < DAY_OPENS:
        return SlotValidity(valid=False, reason=RejectionReason.TOO_EARLY)
    if end_minutes > DAY_CLOSES:
        return SlotValidity(valid=False, reason=RejectionReason.TOO_LATE)

    for zone in active_zones(parse_date(date), holidays):
        if zone.hits(start_minutes, end_minutes):
            return SlotValidity(valid=False, reason=zone.reason)

    if find_collision(date, start_minutes, end_minutes, day_slots, exclude_slot_id):
        return SlotValidity(valid=False, reason=RejectionReason.COLLISION)

    return SlotValidity(valid=True)
