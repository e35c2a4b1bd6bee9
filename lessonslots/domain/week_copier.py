"""
Copies a batch of slots one week forward.
"""

import logging
from dataclasses import replace
from typing import Mapping, Optional, Sequence

from .models import DEFAULT_LESSON_DURATION, CopyResult, Slot, SlotKind, SlotStatus
from .time_math import add_minutes
from .validity import check_slot_validity, parse_date

logger = logging.getLogger(__name__)


def shift_date(date_str: str, days: int = 7) -> str:
    """Shift an ISO date by whole days using calendar arithmetic."""
    return parse_date(date_str).add(days=days).to_date_string()


def copy_week_forward(
    slots_to_copy: Sequence[Slot],
    existing_slots: Sequence[Slot],
    holidays: Optional[Mapping[str, str]] = None,
    default_duration: int = DEFAULT_LESSON_DURATION,
) -> CopyResult:
    """
    Re-validate every slot shifted by seven days.

    Each candidate is checked against ``existing_slots`` only, i.e. the state
    before the batch; candidates of the same batch are not checked against
    each other. Accepted copies lose their id, Blocks stay Blocked and
    everything else becomes a Draft. Rejections are counted, never retried.
    """
    result = CopyResult()

    for slot in slots_to_copy:
        target_date = shift_date(slot.date)
        duration = slot.effective_duration(default_duration)

        validity = check_slot_validity(
            date=target_date,
            start_time=slot.start_time,
            duration=duration,
            day_slots=existing_slots,
            holidays=holidays,
        )
        if not validity:
            logger.debug(
                "Skipping copy of %s %s to %s: %s",
                slot.date, slot.start_time, target_date, validity.message,
            )
            result.skipped.record(validity.reason)
            continue

        status = SlotStatus.BLOCKED if slot.kind is SlotKind.BLOCK else SlotStatus.DRAFT
        result.accepted.append(
            replace(
                slot,
                id=None,
                date=target_date,
                end_time=add_minutes(slot.start_time, duration),
                duration=duration,
                status=status,
            )
        )

    logger.info(
        "Week copy: %d accepted, %d skipped",
        len(result.accepted), result.skipped.total,
    )
    return result
