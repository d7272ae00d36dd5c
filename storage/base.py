from abc import ABC, abstractmethod
from datetime import date
from typing import List, Optional

from models.habit import Habit, HabitCompletion, HabitCreate, HabitUpdate
from core.time_utils import get_current_time, iso_date, parse_iso_date, to_local


class HabitStoreError(Exception):
    """The backing store cannot be read safely."""


# Fields a PATCH may not null out
REQUIRED_FIELDS = ("title", "frequency", "selected_days", "reminder_enabled")


class HabitStore(ABC):
    """
    Habit Record Store.

    Every read hands back fresh Habit objects, so callers can treat them as an
    immutable snapshot. Deleting a habit deletes its history with it.
    """

    async def ensure_indexes(self):
        """Backend-specific setup run once at startup."""

    @abstractmethod
    async def load_all(self) -> List[Habit]:
        """All habits, newest created_at first."""
        ...

    @abstractmethod
    async def get(self, habit_id: str) -> Optional[Habit]:
        ...

    @abstractmethod
    async def create(self, data: HabitCreate) -> Habit:
        ...

    @abstractmethod
    async def update(self, habit_id: str, data: HabitUpdate) -> Optional[Habit]:
        ...

    @abstractmethod
    async def delete(self, habit_id: str) -> bool:
        ...

    @abstractmethod
    async def toggle(self, habit_id: str, day: date) -> Optional[HabitCompletion]:
        """Flip the completion flag for one day. First toggle marks it done."""
        ...

    @abstractmethod
    async def save(self, habit: Habit) -> Habit:
        """Insert or fully replace a habit, history included."""
        ...

    async def completions(
        self, habit_id: str, start: Optional[date] = None, end: Optional[date] = None
    ) -> List[HabitCompletion]:
        """Per-day records of one habit within [start, end], newest first."""
        habit = await self.get(habit_id)
        if habit is None:
            return []
        return history_completions(habit, start, end)


def newest_first(habits: List[Habit]) -> List[Habit]:
    return sorted(habits, key=lambda h: to_local(h.created_at), reverse=True)


def new_habit(data: HabitCreate) -> Habit:
    return Habit(**data.model_dump(), created_at=get_current_time(), history={})


def apply_update(habit: Habit, data: HabitUpdate) -> Habit:
    changes = data.model_dump(exclude_unset=True)
    for field in REQUIRED_FIELDS:
        if field in changes and changes[field] is None:
            changes.pop(field)
    return habit.model_copy(update=changes)


def flip(habit: Habit, day: date) -> HabitCompletion:
    key = iso_date(day)
    habit.history[key] = not habit.history.get(key, False)
    return HabitCompletion(habit_id=habit.id, date=key, is_completed=habit.history[key])


def history_completions(
    habit: Habit, start: Optional[date] = None, end: Optional[date] = None
) -> List[HabitCompletion]:
    records = []
    for key, done in habit.history.items():
        day = parse_iso_date(key)
        if day is None:
            continue
        if start is not None and day < start:
            continue
        if end is not None and day > end:
            continue
        records.append(HabitCompletion(habit_id=habit.id, date=key, is_completed=done))
    records.sort(key=lambda r: r.date, reverse=True)
    return records
