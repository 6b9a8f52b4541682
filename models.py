# models.py
from dataclasses import dataclass, field
from datetime import date
from typing import FrozenSet

from dates import CalendarDay


@dataclass(frozen=True)
class Habit:
    id: str
    title: str
    created_at: date
    weekdays: FrozenSet[int] = field(default_factory=frozenset)

    @classmethod
    def from_record(cls, record: dict) -> "Habit":
        return cls(
            id=record["id"],
            title=record["title"],
            created_at=date.fromisoformat(record["created_at"]),
            weekdays=frozenset(record["weekdays"]),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "created_at": self.created_at.isoformat(),
            "weekdays": sorted(self.weekdays),
        }


@dataclass(frozen=True)
class Day:
    id: str
    date: date

    @classmethod
    def from_record(cls, record: dict) -> "Day":
        return cls(id=record["id"], date=date.fromisoformat(record["date"]))


@dataclass(frozen=True)
class CompletionEntry:
    id: str
    day_id: str
    habit_id: str

    @classmethod
    def from_record(cls, record: dict) -> "CompletionEntry":
        return cls(id=record["id"], day_id=record["day_id"], habit_id=record["habit_id"])


def is_habit_active_on(h: Habit, day: CalendarDay, include_creation_day: bool = False) -> bool:
    """Has the habit existed long enough to count on this day?

    Habits start the day after registration unless include_creation_day is set.
    Used by both the due-habit lookup and the summary, so they always agree.
    """
    if include_creation_day:
        return h.created_at <= day.date
    return h.created_at < day.date


def is_due_on(h: Habit, day: CalendarDay, include_creation_day: bool = False) -> bool:
    return int(day.weekday) in h.weekdays and is_habit_active_on(h, day, include_creation_day)
