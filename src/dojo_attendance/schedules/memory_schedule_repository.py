from __future__ import annotations

import copy
import threading
from collections import defaultdict
from datetime import date
from typing import Optional, Sequence

from ..common.datetime_utils import coerce_date
from ..core.enums import ClassStatus
from ..core.exceptions import ConcurrentUpdateConflict, DataIntegrityWarning
from .mapper import schedule_from_row
from .model import NewSchedule, ScheduleDefinition, SessionOverride
from .repository import ScheduleRepository


class InMemoryScheduleRepository(ScheduleRepository):
    """Document store kept in process memory.

    Each schedule is a dict shaped like a stored row with its ``sessions``
    embedded. Writes to one schedule are serialized by a lock per schedule id,
    so overrides for different dates of the same schedule never overwrite
    each other.
    """

    def __init__(self):
        self._docs: dict[int, dict] = {}
        self._next_id = 1
        self._registry_lock = threading.Lock()
        self._locks: defaultdict[int, threading.Lock] = defaultdict(threading.Lock)

    def _lock_for(self, schedule_id: int) -> threading.Lock:
        with self._registry_lock:
            return self._locks[int(schedule_id)]

    def add_document(self, doc: dict) -> int:
        """Store a raw document as-is (imports, fixtures). Returns its id."""

        with self._registry_lock:
            schedule_id = int(doc.get("schedule_id") or self._next_id)
            self._next_id = max(self._next_id, schedule_id) + 1
            stored = copy.deepcopy(doc)
            stored["schedule_id"] = schedule_id
            stored.setdefault("sessions", [])
            stored.setdefault("version", 0)
            self._docs[schedule_id] = stored
            return schedule_id

    @staticmethod
    def _in_window(doc: dict, range_start: date, range_end: date) -> bool:
        # Unreadable dates still match so the expander can report them.
        try:
            anchor = coerce_date(doc.get("anchor_date"))
            end_raw = doc.get("recurrence_end_date")
            end = coerce_date(end_raw) if end_raw not in (None, "") else None
        except DataIntegrityWarning:
            return True

        if doc.get("recurring"):
            return (end is None or end >= range_start) and anchor <= range_end
        return range_start <= anchor <= range_end

    def list_window_rows(self, *, range_start: date, range_end: date, class_id: Optional[int] = None) -> Sequence[dict]:
        with self._registry_lock:
            docs = [copy.deepcopy(d) for d in self._docs.values()]
        return [
            d
            for d in docs
            if (class_id is None or d.get("class_id") == class_id) and self._in_window(d, range_start, range_end)
        ]

    def get_by_id(self, schedule_id: int) -> Optional[ScheduleDefinition]:
        doc = self._snapshot(schedule_id)
        return schedule_from_row(doc) if doc else None

    def create(self, *, schedule: NewSchedule) -> int:
        return self.add_document(self._fields(schedule))

    @staticmethod
    def _fields(schedule: NewSchedule) -> dict:
        return {
            "class_id": int(schedule.class_id),
            "anchor_date": schedule.anchor_date,
            "start_time": schedule.start_time,
            "end_time": schedule.end_time,
            "recurring": schedule.recurring,
            "days_of_week": list(schedule.days_of_week),
            "recurrence_end_date": schedule.recurrence_end_date,
            "status": schedule.status.value,
        }

    def _snapshot(self, schedule_id: int) -> Optional[dict]:
        with self._registry_lock:
            return copy.deepcopy(self._docs.get(int(schedule_id)))

    def _swap(self, doc: dict) -> bool:
        # Stored docs are never mutated in place; readers copy them under the registry lock.
        with self._registry_lock:
            if doc["schedule_id"] not in self._docs:
                return False
            self._docs[doc["schedule_id"]] = doc
            return True

    def update(self, *, schedule_id: int, schedule: NewSchedule) -> bool:
        with self._lock_for(schedule_id):
            doc = self._snapshot(schedule_id)
            if doc is None:
                return False
            doc.update(self._fields(schedule))
            doc["version"] = int(doc.get("version") or 0) + 1
            return self._swap(doc)

    def delete(self, *, schedule_id: int) -> bool:
        with self._registry_lock:
            self._locks.pop(int(schedule_id), None)
            return self._docs.pop(int(schedule_id), None) is not None

    def apply_session(
        self,
        *,
        schedule_id: int,
        override: SessionOverride,
        schedule_status: Optional[ClassStatus] = None,
        expected_version: Optional[int] = None,
    ) -> bool:
        with self._lock_for(schedule_id):
            doc = self._snapshot(schedule_id)
            if doc is None:
                return False

            version = int(doc.get("version") or 0)
            if schedule_status is not None and expected_version is not None and version != expected_version:
                raise ConcurrentUpdateConflict(
                    f"Schedule {schedule_id} changed (version {version}, expected {expected_version})"
                )

            entry = {
                "session_date": override.session_date,
                "instructor": override.instructor,
                "status": override.status.value,
                "notes": override.notes,
            }
            # Every stored entry for the date is replaced, duplicates included.
            sessions = []
            for s in doc.get("sessions") or []:
                try:
                    same_day = coerce_date(s.get("session_date")) == override.session_date
                except (AttributeError, DataIntegrityWarning):
                    same_day = False
                if not same_day:
                    sessions.append(s)
            sessions.append(entry)
            doc["sessions"] = sessions

            if schedule_status is not None:
                doc["status"] = schedule_status.value
            doc["version"] = version + 1
            return self._swap(doc)
