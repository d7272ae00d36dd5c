import logging
from collections import defaultdict
from datetime import date
from typing import Dict, List, Optional

from pymongo import ReturnDocument

from models.habit import Habit, HabitCompletion, HabitCreate, HabitUpdate
from storage.base import HabitStore, apply_update, new_habit
from core.time_utils import iso_date, to_utc

logger = logging.getLogger(__name__)


class MongoHabitStore(HabitStore):
    """
    Habits in a `habits` collection, per-day records in `habit_completions`.

    Completion documents: {habit_id, date: "YYYY-MM-DD", is_completed}.
    A habit's history is rebuilt from its completion documents on every read.
    """

    def __init__(self, db):
        self.db = db

    async def ensure_indexes(self):
        await self.db.habit_completions.create_index([("habit_id", 1), ("date", 1)], unique=True)

    @staticmethod
    def _habit_doc(habit: Habit) -> dict:
        doc = habit.model_dump(exclude={"id", "history"})
        doc["_id"] = habit.id
        # bson drops tzinfo and reads naive values back as UTC
        doc["created_at"] = to_utc(habit.created_at)
        return doc

    @staticmethod
    def _to_habit(doc: dict, history: Dict[str, bool]) -> Habit:
        data = dict(doc)
        habit_id = data.pop("_id")
        return Habit(id=habit_id, history=history, **data)

    async def _histories(self, habit_ids: List[str]) -> Dict[str, Dict[str, bool]]:
        histories = defaultdict(dict)
        cursor = self.db.habit_completions.find({"habit_id": {"$in": habit_ids}})
        async for c in cursor:
            histories[c["habit_id"]][c["date"]] = bool(c.get("is_completed", False))
        return histories

    async def load_all(self) -> List[Habit]:
        docs = await self.db.habits.find({}).sort("created_at", -1).to_list(length=None)
        histories = await self._histories([d["_id"] for d in docs])
        return [self._to_habit(d, histories.get(d["_id"], {})) for d in docs]

    async def get(self, habit_id: str) -> Optional[Habit]:
        doc = await self.db.habits.find_one({"_id": habit_id})
        if doc is None:
            return None
        histories = await self._histories([habit_id])
        return self._to_habit(doc, histories.get(habit_id, {}))

    async def create(self, data: HabitCreate) -> Habit:
        habit = new_habit(data)
        await self.db.habits.insert_one(self._habit_doc(habit))
        logger.info("Created habit %s (%s)", habit.id, habit.title)
        return habit

    async def update(self, habit_id: str, data: HabitUpdate) -> Optional[Habit]:
        habit = await self.get(habit_id)
        if habit is None:
            return None
        updated = apply_update(habit, data)
        await self.db.habits.update_one(
            {"_id": habit_id},
            {"$set": updated.model_dump(exclude={"id", "history", "created_at"})},
        )
        return updated

    async def delete(self, habit_id: str) -> bool:
        # Completions first, so no history outlives its habit
        await self.db.habit_completions.delete_many({"habit_id": habit_id})
        result = await self.db.habits.delete_one({"_id": habit_id})
        if result.deleted_count == 0:
            return False
        logger.info("Deleted habit %s", habit_id)
        return True

    async def toggle(self, habit_id: str, day: date) -> Optional[HabitCompletion]:
        if await self.db.habits.find_one({"_id": habit_id}, {"_id": 1}) is None:
            return None

        key = iso_date(day)
        # One server-side read-modify-write. A missing record flips to True
        record = await self.db.habit_completions.find_one_and_update(
            {"habit_id": habit_id, "date": key},
            [{"$set": {"is_completed": {"$not": [{"$ifNull": ["$is_completed", False]}]}}}],
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        return HabitCompletion(habit_id=habit_id, date=key, is_completed=record["is_completed"])

    async def completions(
        self, habit_id: str, start: Optional[date] = None, end: Optional[date] = None
    ) -> List[HabitCompletion]:
        query = {"habit_id": habit_id}
        date_range = {}
        if start is not None:
            date_range["$gte"] = iso_date(start)
        if end is not None:
            date_range["$lte"] = iso_date(end)
        if date_range:
            query["date"] = date_range

        docs = await self.db.habit_completions.find(query).sort("date", -1).to_list(length=None)
        return [
            HabitCompletion(habit_id=d["habit_id"], date=d["date"], is_completed=d.get("is_completed", False))
            for d in docs
        ]

    async def save(self, habit: Habit) -> Habit:
        await self.db.habits.replace_one({"_id": habit.id}, self._habit_doc(habit), upsert=True)
        await self.db.habit_completions.delete_many({"habit_id": habit.id})
        if habit.history:
            await self.db.habit_completions.insert_many(
                [{"habit_id": habit.id, "date": k, "is_completed": v} for k, v in habit.history.items()]
            )
        return habit
