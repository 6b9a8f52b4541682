"""Habit scheduling and completion tracking on top of the JSON repo."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional, Set

from dates import CalendarDay, normalize, today
from errors import NotFoundError
from models import Habit, is_due_on
from repo_json import JSONRepo

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompletionState:
    completed: bool


@dataclass
class DayStatus:
    date: date
    due_habits: Set[str] = field(default_factory=set)
    completed_habits: Set[str] = field(default_factory=set)
    possible_habits: List[Habit] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "date": self.date.isoformat(),
            "due_habits": sorted(self.due_habits),
            "completed_habits": sorted(self.completed_habits),
            "possible_habits": [h.to_dict() for h in self.possible_habits],
        }


@dataclass(frozen=True)
class DaySummary:
    day_id: str
    date: date
    completed: float
    due: float

    def to_dict(self) -> dict:
        return {
            "id": self.day_id,
            "date": self.date.isoformat(),
            "completed": self.completed,
            "due": self.due,
        }


class HabitTracker:
    """Public operations: register, inspect a day, toggle, summarise.

    include_creation_day picks the single rule both the due-habit lookup and
    the summary use for "has this habit started yet". Off by default: a
    habit first counts the day after it was registered.
    """

    def __init__(self, repo: JSONRepo, include_creation_day: bool = False):
        self.repo = repo
        self.include_creation_day = include_creation_day

    # -------- Registry --------
    def register_habit(self, title: str, weekdays, created_on: Optional[date] = None) -> str:
        return self.repo.add_habit(title, weekdays, created_on=created_on)

    def list_habits(self) -> List[Habit]:
        return self.repo.list_habits()

    # -------- Scheduling --------
    def _due(self, day: CalendarDay) -> List[Habit]:
        return [
            h for h in self.repo.list_habits()
            if is_due_on(h, day, self.include_creation_day)
        ]

    def due_habits(self, day: CalendarDay) -> Set[str]:
        return {h.id for h in self._due(day)}

    def get_day(self, when) -> DayStatus:
        day = normalize(when)
        with self.repo.locked():
            possible = self._due(day)
            completed = self.repo.completed_ids(day.date)
        return DayStatus(
            date=day.date,
            due_habits={h.id for h in possible},
            completed_habits=completed,
            possible_habits=possible,
        )

    # -------- Completion --------
    def toggle(self, day: CalendarDay, habit_id: str) -> CompletionState:
        """Flip completion of habit_id on day.

        Two toggles in a row cancel out. A retry after a lost reply flips
        the state again, so callers should re-read the day before retrying.
        """
        repo = self.repo
        with repo.transaction():
            if repo.get_habit(habit_id) is None:
                raise NotFoundError(f"Habit {habit_id!r} does not exist.")
            ledger_day = repo.insert_or_fetch_day(day.date)
            entry = repo.find_entry(ledger_day.id, habit_id)
            if entry is not None:
                repo.delete_entry(entry.id)
                state = CompletionState(completed=False)
            else:
                repo.add_entry(ledger_day.id, habit_id)
                state = CompletionState(completed=True)
        logger.info("Habit %s on %s -> completed=%s", habit_id, day.isoformat(), state.completed)
        return state

    def toggle_habit(self, habit_id: str, when=None) -> CompletionState:
        day = today() if when is None else normalize(when)
        return self.toggle(day, habit_id)

    # -------- Summary --------
    def get_summary(self) -> List[DaySummary]:
        summary = []
        with self.repo.locked():
            habits = self.repo.list_habits()
            days = [(d, self.repo.count_entries(d.id)) for d in self.repo.list_days()]
        for ledger_day, completed in days:
            day = CalendarDay.from_date(ledger_day.date)
            due = sum(1 for h in habits if is_due_on(h, day, self.include_creation_day))
            summary.append(
                DaySummary(
                    day_id=ledger_day.id,
                    date=ledger_day.date,
                    completed=float(completed),
                    due=float(due),
                )
            )
        return summary
