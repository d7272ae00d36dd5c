import logging
import re
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from models.habit import (
    CalendarDay,
    Habit,
    HabitCompletion,
    HabitCreate,
    HabitStats,
    HabitUpdate,
)
from storage.base import HabitStore
from core.config import settings
from core.dependencies import get_store
from core.progress import calendar_days
from core.streaks import compute_stats, streak_text
from core.time_utils import add_days, get_current_time, parse_iso_date, today

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/habits", tags=["Habits"])

MONTH_RE = re.compile(r"^(\d{4})-(\d{2})$")


class HabitDetail(Habit):
    completions: List[HabitCompletion] = []


class HabitStatsResponse(HabitStats):
    streak_text: str


def parse_date_param(value: Optional[str], name: str) -> Optional[date]:
    if value is None:
        return None
    parsed = parse_iso_date(value)
    if parsed is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {name}: expected YYYY-MM-DD",
        )
    return parsed


async def get_habit_or_404(store: HabitStore, habit_id: str) -> Habit:
    habit = await store.get(habit_id)
    if habit is None:
        raise HTTPException(status_code=404, detail="Habit not found")
    return habit


@router.get("", response_model=List[Habit])
async def get_habits(store: HabitStore = Depends(get_store)):
    return await store.load_all()


@router.post("", response_model=Habit, status_code=status.HTTP_201_CREATED)
async def create_habit(habit_in: HabitCreate, store: HabitStore = Depends(get_store)):
    return await store.create(habit_in)


@router.get("/{habit_id}", response_model=HabitDetail)
async def get_habit(habit_id: str, store: HabitStore = Depends(get_store)):
    """Habit with its completion records for the last COMPLETIONS_LOOKBACK_DAYS days."""
    habit = await get_habit_or_404(store, habit_id)
    end = today()
    start = add_days(end, -settings.COMPLETIONS_LOOKBACK_DAYS)
    completions = await store.completions(habit_id, start, end)
    return HabitDetail(**habit.model_dump(), completions=completions)


@router.patch("/{habit_id}", response_model=Habit)
async def update_habit(habit_id: str, habit_in: HabitUpdate, store: HabitStore = Depends(get_store)):
    updated = await store.update(habit_id, habit_in)
    if updated is None:
        raise HTTPException(status_code=404, detail="Habit not found")
    return updated


@router.delete("/{habit_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_habit(habit_id: str, store: HabitStore = Depends(get_store)):
    if not await store.delete(habit_id):
        raise HTTPException(status_code=404, detail="Habit not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{habit_id}/toggle/{day}", response_model=HabitCompletion)
async def toggle_habit(habit_id: str, day: str, store: HabitStore = Depends(get_store)):
    """
    Flip completion for one day.

    The first toggle of a day marks it completed; later toggles alternate.
    """
    parsed = parse_date_param(day, "date")
    completion = await store.toggle(habit_id, parsed)
    if completion is None:
        raise HTTPException(status_code=404, detail="Habit not found")
    logger.debug("Habit %s %s -> %s", habit_id, completion.date, completion.is_completed)
    return completion


@router.get("/{habit_id}/completions", response_model=List[HabitCompletion])
async def get_completions(
    habit_id: str,
    start_date: Optional[str] = Query(default=None, alias="startDate"),
    end_date: Optional[str] = Query(default=None, alias="endDate"),
    store: HabitStore = Depends(get_store),
):
    start = parse_date_param(start_date, "startDate")
    end = parse_date_param(end_date, "endDate")
    await get_habit_or_404(store, habit_id)
    return await store.completions(habit_id, start, end)


@router.get("/{habit_id}/stats", response_model=HabitStatsResponse)
async def get_habit_stats(habit_id: str, store: HabitStore = Depends(get_store)):
    habit = await get_habit_or_404(store, habit_id)
    stats = compute_stats(habit, get_current_time())
    return HabitStatsResponse(**stats.model_dump(), streak_text=streak_text(stats.current_streak))


@router.get("/{habit_id}/calendar", response_model=List[CalendarDay])
async def get_habit_calendar(
    habit_id: str,
    month: Optional[str] = Query(default=None, description="YYYY-MM, defaults to the current month"),
    store: HabitStore = Depends(get_store),
):
    habit = await get_habit_or_404(store, habit_id)
    current = today()
    if month is None:
        target = current
    else:
        match = MONTH_RE.match(month)
        if not match or int(match.group(1)) < 1 or not 1 <= int(match.group(2)) <= 12:
            raise HTTPException(status_code=400, detail="Invalid month: expected YYYY-MM")
        target = date(int(match.group(1)), int(match.group(2)), 1)
    return calendar_days(habit, target, current)
