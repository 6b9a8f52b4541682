# repo_json.py
import copy
import json
import logging
import os
import threading
import uuid
from contextlib import contextmanager
from datetime import date
from typing import Iterable, List, Optional, Set

from dates import today
from errors import StorageError, ValidationError
from models import CompletionEntry, Day, Habit

logger = logging.getLogger(__name__)

TABLES = ("habits", "days", "day_habits")


def _new_id() -> str:
    return str(uuid.uuid4())


def _clean_title(title) -> str:
    if not isinstance(title, str) or not title.strip():
        raise ValidationError("Habit title must be a non-empty string.")
    return title.strip()


def _clean_weekdays(weekdays) -> List[int]:
    if isinstance(weekdays, (str, bytes)) or not isinstance(weekdays, Iterable):
        raise ValidationError("Weekdays must be a list of integers 0-6.")
    cleaned = set()
    for value in weekdays:
        # bool is an int subclass; True is not a weekday
        if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= 6:
            raise ValidationError(f"Weekday {value!r} is outside 0-6 (Sunday=0).")
        cleaned.add(value)
    return sorted(cleaned)


def _check_records(obj):
    """Every stored row must load as its model; raises ValueError otherwise."""
    for name, model in (("habits", Habit), ("days", Day), ("day_habits", CompletionEntry)):
        for position, record in enumerate(obj[name]):
            try:
                model.from_record(record)
            except (KeyError, TypeError, ValueError) as exc:
                raise ValueError(f"bad record {position} in {name!r}: {exc!r}") from exc


class JSONRepo:
    """Habit registry and day ledger kept in one JSON file.

    Every mutation runs inside transaction(): the tables are snapshotted,
    changed in memory, then persisted with an atomic file replace. If the
    write fails the snapshot is restored, so a half-applied change is never
    visible. The lock is re-entrant, so transactions nest and only the
    outermost one writes.
    """

    def __init__(self, path: str):
        self.path = path
        self._lock = threading.RLock()
        self._depth = 0
        try:
            directory = os.path.dirname(path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            if not os.path.exists(path):
                self._write({name: [] for name in TABLES})
            self.data = self._read()
        except (OSError, ValueError) as exc:
            raise StorageError(f"Cannot open habit data at {path}: {exc}") from exc

    def _read(self):
        with open(self.path, "r", encoding="utf-8") as f:
            obj = json.load(f)
        if not isinstance(obj, dict):
            raise ValueError("top-level JSON value must be an object")
        for name in TABLES:
            obj.setdefault(name, [])
            if not isinstance(obj[name], list):
                raise ValueError(f"table {name!r} must be a list")
        _check_records(obj)
        return obj

    def _write(self, obj):
        tmp = self.path + ".tmp"
        try:
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump(obj, f, indent=2)
            os.replace(tmp, self.path)
        finally:
            if os.path.exists(tmp):
                os.remove(tmp)

    @contextmanager
    def transaction(self):
        with self._lock:
            if self._depth:
                yield
                return
            snapshot = copy.deepcopy(self.data)
            self._depth = 1
            try:
                yield
                self._write(self.data)
            except OSError as exc:
                self.data = snapshot
                logger.error("Write to %s failed, changes rolled back: %s", self.path, exc)
                raise StorageError(f"Cannot write habit data: {exc}") from exc
            except BaseException:
                self.data = snapshot
                raise
            finally:
                self._depth = 0

    def locked(self):
        """Hold the repo lock so several reads see one consistent state."""
        return self._lock

    # -------- Habits --------
    def list_habits(self) -> List[Habit]:
        with self._lock:
            return [Habit.from_record(h) for h in self.data["habits"]]

    def get_habit(self, habit_id: str) -> Optional[Habit]:
        with self._lock:
            for h in self.data["habits"]:
                if h["id"] == habit_id:
                    return Habit.from_record(h)
        return None

    def add_habit(self, title: str, weekdays: Iterable[int], created_on: Optional[date] = None) -> str:
        title = _clean_title(title)
        days = _clean_weekdays(weekdays)
        created_on = created_on or today().date
        with self.transaction():
            hid = _new_id()
            self.data["habits"].append(
                {"id": hid, "title": title, "created_at": created_on.isoformat(), "weekdays": days}
            )
        logger.info("Registered habit %s (%r) on weekdays %s", hid, title, days)
        return hid

    # -------- Days --------
    def list_days(self) -> List[Day]:
        """All day rows, oldest first."""
        with self._lock:
            days = [Day.from_record(d) for d in self.data["days"]]
        return sorted(days, key=lambda d: d.date)

    def find_day(self, d: date) -> Optional[Day]:
        key = d.isoformat()
        with self._lock:
            for row in self.data["days"]:
                if row["date"] == key:
                    return Day.from_record(row)
        return None

    def insert_or_fetch_day(self, d: date) -> Day:
        """Return the day row for d, creating it if absent."""
        with self.transaction():
            existing = self.find_day(d)
            if existing is not None:
                return existing
            row = {"id": _new_id(), "date": d.isoformat()}
            self.data["days"].append(row)
            logger.debug("Created day %s for %s", row["id"], row["date"])
            return Day.from_record(row)

    # -------- Completions --------
    def find_entry(self, day_id: str, habit_id: str) -> Optional[CompletionEntry]:
        with self._lock:
            for row in self.data["day_habits"]:
                if row["day_id"] == day_id and row["habit_id"] == habit_id:
                    return CompletionEntry.from_record(row)
        return None

    def add_entry(self, day_id: str, habit_id: str) -> CompletionEntry:
        with self.transaction():
            existing = self.find_entry(day_id, habit_id)
            if existing is not None:
                return existing
            row = {"id": _new_id(), "day_id": day_id, "habit_id": habit_id}
            self.data["day_habits"].append(row)
            return CompletionEntry.from_record(row)

    def delete_entry(self, entry_id: str):
        with self.transaction():
            self.data["day_habits"] = [
                row for row in self.data["day_habits"] if row["id"] != entry_id
            ]

    def entries_for_day(self, day_id: str) -> List[CompletionEntry]:
        with self._lock:
            return [
                CompletionEntry.from_record(row)
                for row in self.data["day_habits"]
                if row["day_id"] == day_id
            ]

    def count_entries(self, day_id: str) -> int:
        return len(self.entries_for_day(day_id))

    def completed_ids(self, d: date) -> Set[str]:
        day = self.find_day(d)
        if day is None:
            return set()
        return {e.habit_id for e in self.entries_for_day(day.id)}
