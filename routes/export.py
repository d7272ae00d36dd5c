import csv
import io
from typing import Iterable

from fastapi import APIRouter, Depends, Response

from models.habit import Habit
from storage.base import HabitStore
from core.dependencies import get_store
from core.time_utils import parse_iso_date

router = APIRouter(prefix="/api/export", tags=["Export"])

CSV_COLUMNS = ["id", "title", "frequency", "selected_days", "created_at", "date", "completed"]


def habits_to_csv(habits: Iterable[Habit]) -> str:
    """One row per history entry; a habit with no entries still gets one row."""
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(CSV_COLUMNS)

    for habit in habits:
        base = [
            habit.id,
            habit.title,
            habit.frequency,
            " ".join(habit.selected_days),
            habit.created_at.isoformat(),
        ]
        entries = sorted(k for k in habit.history if parse_iso_date(k) is not None)
        if not entries:
            writer.writerow(base + ["", ""])
            continue
        for key in entries:
            writer.writerow(base + [key, "true" if habit.history[key] else "false"])

    return buffer.getvalue()


@router.get("/habits.csv")
async def export_habits(store: HabitStore = Depends(get_store)):
    habits = await store.load_all()
    return Response(
        content=habits_to_csv(habits),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="habits.csv"'},
    )
