"""
File-backed slot store used by the CLI.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import uuid
from dataclasses import replace
from pathlib import Path
from typing import Dict, List, Sequence

from pendulum import Date

from ..domain.exceptions import SlotStoreError
from ..domain.models import Slot

logger = logging.getLogger(__name__)


class JsonSlotStore:
    """
    Keeps slots as a JSON list of plain records.

    Every write rewrites the whole file through a temporary file, so a batch
    either lands completely or not at all.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def list_slots(self, start_date: Date, end_date: Date) -> List[Slot]:
        """Return slots dated within ``[start_date, end_date]``, chronologically."""
        first = start_date.to_date_string()
        last = end_date.to_date_string()
        slots = [slot for slot in self.all_slots() if first <= slot.date <= last]
        return sorted(slots, key=lambda s: (s.date, s.start_time))

    def all_slots(self) -> List[Slot]:
        return self._load()

    def save(self, slot: Slot) -> Slot:
        return self.save_batch([slot])[0]

    def save_batch(self, slots: Sequence[Slot]) -> List[Slot]:
        """
        Insert new slots (assigning ids) and replace existing ones by id.

        Stored records without an id cannot be addressed and are written back
        unchanged.
        """
        anonymous: List[Slot] = []
        stored: Dict[str, Slot] = {}
        for slot in self._load():
            if slot.id:
                stored[slot.id] = slot
            else:
                anonymous.append(slot)

        saved: List[Slot] = []
        for slot in slots:
            if not slot.id:
                slot = replace(slot, id=uuid.uuid4().hex)
            stored[slot.id] = slot
            saved.append(slot)

        self._write(anonymous + list(stored.values()))
        logger.debug("Wrote %d slot(s) to %s", len(saved), self.path)
        return saved

    def delete(self, slot_id: str) -> bool:
        """Remove a slot by id. Returns False when it did not exist."""
        slots = self._load()
        remaining = [slot for slot in slots if slot.id != slot_id]
        if len(remaining) == len(slots):
            return False
        self._write(remaining)
        return True

    def _load(self) -> List[Slot]:
        if not self.path.exists():
            return []

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                records = json.load(f)
        except (OSError, ValueError) as exc:
            raise SlotStoreError(f"Could not read slot store {self.path}: {exc}") from exc

        if not isinstance(records, list):
            raise SlotStoreError(f"Slot store {self.path} must contain a list of records.")

        try:
            return [Slot.from_record(record) for record in records]
        except (KeyError, ValueError) as exc:
            raise SlotStoreError(f"Invalid slot record in {self.path}: {exc}") from exc

    def _write(self, slots: List[Slot]) -> None:
        records = [slot.to_record() for slot in sorted(slots, key=lambda s: (s.date, s.start_time))]
        self.path.parent.mkdir(parents=True, exist_ok=True)

        try:
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(records, f, ensure_ascii=False, indent=2)
            os.replace(tmp_name, self.path)
        except OSError as exc:
            raise SlotStoreError(f"Could not write slot store {self.path}: {exc}") from exc
