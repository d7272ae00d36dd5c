from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from models.habit import (
    CamelModel,
    ContributionBucket,
    DailyProgress,
    Frequency,
    Granularity,
    WeeklyProgress,
    WindowSpec,
)
from storage.base import HabitStore
from core.config import settings
from core.dependencies import get_store
from core.progress import contribution_buckets, daily_progress, weekly_progress
from core.streaks import best_streak_overall
from core.time_utils import today
from routes.habits import parse_date_param

router = APIRouter(prefix="/api/stats", tags=["Stats"])


class Overview(CamelModel):
    habit_count: int
    today: DailyProgress
    week_percentage: int
    best_streak: int


@router.get("/daily", response_model=DailyProgress)
async def get_daily_progress(
    day: Optional[str] = Query(default=None, alias="date"),
    store: HabitStore = Depends(get_store),
):
    """Progress across all habits due on `date` (default today)."""
    on = parse_date_param(day, "date") or today()
    habits = await store.load_all()
    return daily_progress(habits, on)


@router.get("/weekly", response_model=WeeklyProgress)
async def get_weekly_progress(store: HabitStore = Depends(get_store)):
    habits = await store.load_all()
    return weekly_progress(habits, today())


@router.get("/contributions", response_model=List[ContributionBucket])
async def get_contributions(
    granularity: Granularity = "day",
    length: Optional[int] = Query(default=None, ge=1, le=400),
    end: Optional[date] = None,
    frequency: Optional[Frequency] = None,
    store: HabitStore = Depends(get_store),
):
    """
    Contribution-matrix cells: `length` buckets of `granularity` ending at `end`.

    Default lengths: 30 days, 12 weeks, 12 months.
    """
    if length is None:
        length = settings.CONTRIBUTION_DEFAULT_LENGTH.get(granularity, 30)
    window = WindowSpec(granularity=granularity, length=length, end=end or today(), frequency=frequency)
    habits = await store.load_all()
    return contribution_buckets(habits, window)


@router.get("/overview", response_model=Overview)
async def get_overview(store: HabitStore = Depends(get_store)):
    """Numbers for the dashboard stat cards."""
    habits = await store.load_all()
    current = today()
    return Overview(
        habit_count=len(habits),
        today=daily_progress(habits, current),
        week_percentage=weekly_progress(habits, current).percentage,
        best_streak=best_streak_overall(habits),
    )
