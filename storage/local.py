import asyncio
import json
import logging
from datetime import date
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from models.habit import Habit, HabitCompletion, HabitCreate, HabitUpdate
from storage.base import HabitStore, HabitStoreError, apply_update, flip, new_habit, newest_first

logger = logging.getLogger(__name__)

STORAGE_KEY = "habitTrack_habits"


class LocalHabitStore(HabitStore):
    """
    All habits in one JSON blob, rewritten on every change.

    File I/O runs in a worker thread. A blob that cannot be parsed reads as
    empty, but every write refuses to touch it so no history is overwritten.
    """

    def __init__(self, path: str = "data/habits.json"):
        self.path = Path(path)
        self._lock = asyncio.Lock()

    def _load_json(self, strict: bool = False) -> List[Habit]:
        if not self.path.exists():
            return []
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                blob = json.load(f)
            return [Habit(**item) for item in blob.get(STORAGE_KEY, [])]
        except (OSError, ValueError, AttributeError, TypeError, ValidationError) as e:
            if strict:
                raise HabitStoreError(f"Refusing to rewrite unreadable habit store {self.path}: {e}") from e
            # Same as a browser with corrupt local storage: read as empty
            logger.error("Failed to load habits from %s: %s", self.path, e)
            return []

    def _save_json(self, habits: List[Habit]):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        blob = {STORAGE_KEY: [h.model_dump(mode="json", by_alias=True) for h in habits]}
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(blob, f, ensure_ascii=False, indent=2)
        tmp_path.replace(self.path)

    async def _read(self) -> List[Habit]:
        return await asyncio.to_thread(self._load_json)

    async def _read_for_write(self) -> List[Habit]:
        return await asyncio.to_thread(self._load_json, True)

    async def _write(self, habits: List[Habit]):
        await asyncio.to_thread(self._save_json, habits)

    @staticmethod
    def _index(habits: List[Habit], habit_id: str) -> int:
        for i, habit in enumerate(habits):
            if habit.id == habit_id:
                return i
        return -1

    async def load_all(self) -> List[Habit]:
        async with self._lock:
            habits = await self._read()
        return newest_first(habits)

    async def get(self, habit_id: str) -> Optional[Habit]:
        async with self._lock:
            habits = await self._read()
        index = self._index(habits, habit_id)
        return habits[index] if index >= 0 else None

    async def create(self, data: HabitCreate) -> Habit:
        habit = new_habit(data)
        async with self._lock:
            habits = await self._read_for_write()
            habits.append(habit)
            await self._write(habits)
        logger.info("Created habit %s (%s)", habit.id, habit.title)
        return habit

    async def update(self, habit_id: str, data: HabitUpdate) -> Optional[Habit]:
        async with self._lock:
            habits = await self._read_for_write()
            index = self._index(habits, habit_id)
            if index < 0:
                return None
            habits[index] = apply_update(habits[index], data)
            await self._write(habits)
            return habits[index]

    async def delete(self, habit_id: str) -> bool:
        async with self._lock:
            habits = await self._read_for_write()
            remaining = [h for h in habits if h.id != habit_id]
            if len(remaining) == len(habits):
                return False
            await self._write(remaining)
        logger.info("Deleted habit %s", habit_id)
        return True

    async def toggle(self, habit_id: str, day: date) -> Optional[HabitCompletion]:
        async with self._lock:
            habits = await self._read_for_write()
            index = self._index(habits, habit_id)
            if index < 0:
                return None
            completion = flip(habits[index], day)
            await self._write(habits)
            return completion

    async def save(self, habit: Habit) -> Habit:
        async with self._lock:
            habits = await self._read_for_write()
            index = self._index(habits, habit.id)
            if index < 0:
                habits.append(habit)
            else:
                habits[index] = habit
            await self._write(habits)
        return habit
