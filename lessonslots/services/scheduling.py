"""
Application service for calendar scheduling.

The service reads one consistent snapshot from the slot store, delegates the
scheduling decisions to the pure domain functions and hands accepted slots
back to the store in a single write. Collaborators are plain protocols so the
JSON store, a real database or test stubs can be plugged in.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Protocol, Sequence

import pendulum
from pendulum import Date, DateTime

from ..domain.exceptions import HolidayAPIError
from ..domain.models import (
    CopyResult,
    LessonForm,
    ProfileDefaults,
    SaveResult,
    Slot,
    SlotStatus,
    SlotValidity,
    WeekConfig,
)
from ..domain.placement import student_visible_slots, suggest_start_time
from ..domain.validity import check_slot_validity, parse_date
from ..domain.week_copier import copy_week_forward
from ..domain.week_generator import WeekGenerator
from .lesson_orchestrator import publish_drafts, save_slot

logger = logging.getLogger(__name__)


class SlotStoreProtocol(Protocol):
    """Persistence collaborator for slots."""

    def list_slots(self, start_date: Date, end_date: Date) -> List[Slot]:
        """Return committed slots dated within ``[start_date, end_date]``."""

    def save(self, slot: Slot) -> Slot:
        """Insert or update one slot and return it with its id."""

    def save_batch(self, slots: Sequence[Slot]) -> List[Slot]:
        """Insert or update several slots in one write."""


class HolidayProviderProtocol(Protocol):
    """Holiday calendar lookup."""

    def get_holidays(self, years: Sequence[int]) -> Dict[str, str]:
        """Return ISO date -> holiday name for the given years."""


class SchedulingService:
    """
    Orchestrates snapshot reads, engine calls and batch commits.
    """

    def __init__(
        self,
        slot_store: SlotStoreProtocol,
        holiday_provider: HolidayProviderProtocol,
        profile: ProfileDefaults,
        timezone: str = "Asia/Hong_Kong",
    ) -> None:
        self._slot_store = slot_store
        self._holiday_provider = holiday_provider
        self._profile = profile
        self._timezone = timezone

    def now(self) -> DateTime:
        """Local wall-clock time, naive."""
        return pendulum.now(self._timezone).naive()

    def holidays_for(self, days: Iterable[Date]) -> Dict[str, str]:
        """
        Holiday map covering the years of ``days``.

        If the lookup fails the map is empty, so every day is treated as a
        regular (restricted) day.
        """
        years = sorted({day.year for day in days})
        try:
            return self._holiday_provider.get_holidays(years)
        except HolidayAPIError as exc:
            logger.warning("Holiday lookup failed, restricted zones apply on all days: %s", exc)
            return {}

    def check_validity(
        self,
        *,
        date: str,
        start_time: str,
        duration: int,
        exclude_slot_id: Optional[str] = None,
    ) -> SlotValidity:
        """Pre-flight validity check against the committed slots of ``date``."""
        day = parse_date(date)
        return check_slot_validity(
            date=date,
            start_time=start_time,
            duration=duration,
            day_slots=self._slot_store.list_slots(day, day),
            exclude_slot_id=exclude_slot_id,
            holidays=self.holidays_for([day]),
        )

    def save_slot(
        self,
        *,
        form: LessonForm,
        editing_slot: Optional[Slot] = None,
    ) -> SaveResult:
        """Validate one create/edit request and persist it when accepted."""
        day = parse_date(form.date)
        result = save_slot(
            form=form,
            editing_slot=editing_slot,
            all_slots=self._slot_store.list_slots(day, day),
            profile=self._profile,
            holidays=self.holidays_for([day]),
        )
        if not result.accepted:
            logger.info("Slot on %s %s rejected: %s", form.date, form.start_time, result.message)
            return result

        stored = self._slot_store.save(result.slot)
        logger.info("Saved %s slot %s on %s %s", stored.status.value, stored.id, stored.date, stored.start_time)
        return SaveResult(slot=stored)

    def generate_week(
        self,
        *,
        week_start: Date,
        config: WeekConfig,
        now: Optional[DateTime] = None,
    ) -> List[Slot]:
        """Fill the week starting at ``week_start`` with drafts and commit them."""
        week_end = week_start.add(days=6)
        existing = self._slot_store.list_slots(week_start, week_end)
        holidays = self.holidays_for([week_start, week_end])

        drafts = WeekGenerator(config).generate(
            week_start,
            existing,
            holidays=holidays,
            now=now or self.now(),
        )
        logger.info("Generated %d draft(s) for week of %s", len(drafts), week_start.to_date_string())

        if not drafts:
            return []
        return self._slot_store.save_batch(drafts)

    def copy_week_forward(self, *, week_start: Date) -> CopyResult:
        """Copy the week starting at ``week_start`` into the following week."""
        source_end = week_start.add(days=6)
        target_start = week_start.add(days=7)
        target_end = week_start.add(days=13)

        slots_to_copy = self._slot_store.list_slots(week_start, source_end)
        existing = self._slot_store.list_slots(target_start, target_end)

        result = copy_week_forward(
            slots_to_copy,
            existing,
            holidays=self.holidays_for([target_start, target_end]),
            default_duration=self._profile.lesson_duration,
        )

        if result.accepted:
            result.accepted = self._slot_store.save_batch(result.accepted)
        return result

    def publish_drafts(self, *, start_date: Date, end_date: Date) -> List[Slot]:
        """Publish all Drafts dated within the range."""
        drafts = [
            slot for slot in self._slot_store.list_slots(start_date, end_date)
            if slot.status is SlotStatus.DRAFT
        ]
        published = publish_drafts(drafts)
        logger.info("Publishing %d draft(s)", len(published))

        if not published:
            return []
        return self._slot_store.save_batch(published)

    def available_slots(
        self,
        *,
        start_date: Date,
        end_date: Date,
        now: Optional[DateTime] = None,
    ) -> List[Slot]:
        """Slots a student may still book within the range."""
        return student_visible_slots(
            self._slot_store.list_slots(start_date, end_date),
            now=now or self.now(),
        )

    def suggest_start_time(
        self,
        *,
        date: str,
        clicked_hour: int,
        now: Optional[DateTime] = None,
    ) -> str:
        """Start time to pre-fill when an hour cell of ``date`` is clicked."""
        day = parse_date(date)
        return suggest_start_time(
            date,
            clicked_hour,
            self._slot_store.list_slots(day, day),
            default_duration=self._profile.lesson_duration,
            now=now or self.now(),
        )
