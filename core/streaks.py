import math
from datetime import date, datetime
from typing import Iterable, List, Optional

from models.habit import Habit, HabitStats
from core import time_utils
from core.eligibility import created_day
from core.percent import round_half_up
from core.time_utils import add_days, iso_date, parse_iso_date, to_local


def is_completed(habit: Habit, day: date) -> bool:
    return habit.history.get(iso_date(day)) is True


def completed_dates(habit: Habit) -> List[date]:
    """Completed days in ascending order.

    Keys that are not canonical YYYY-MM-DD dates, and days before the habit
    existed, are skipped. Dict order is irrelevant; we always re-sort.
    """
    start = created_day(habit)
    days = []
    for key, done in habit.history.items():
        if done is not True:
            continue
        day = parse_iso_date(key)
        if day is None or day < start:
            continue
        days.append(day)
    days.sort()
    return days


def current_streak(habit: Habit, today: Optional[date] = None) -> int:
    """
    Consecutive completed days ending today.

    If today has not been completed yet it is treated as still open and the
    count starts from yesterday, so a live streak survives until a whole day
    is skipped. The walk never goes below the creation day.
    """
    if today is None:
        today = time_utils.today()
    start = created_day(habit)

    cursor = today if is_completed(habit, today) else add_days(today, -1)
    streak = 0
    while cursor >= start:
        if not is_completed(habit, cursor):
            break
        streak += 1
        cursor = add_days(cursor, -1)
    return streak


def best_streak(habit: Habit) -> int:
    best = 0
    run = 0
    previous = None
    for day in completed_dates(habit):
        if previous is not None and (day - previous).days == 1:
            run += 1
        else:
            run = 1
        best = max(best, run)
        previous = day
    return best


def days_since_creation(habit: Habit, now: Optional[datetime] = None) -> int:
    """Whole days (rounded up) since created_at, never less than 1."""
    if now is None:
        now = time_utils.get_current_time()
    elapsed = to_local(now) - to_local(habit.created_at)
    return max(1, math.ceil(elapsed.total_seconds() / 86400))


def completion_rate(habit: Habit, now: Optional[datetime] = None) -> int:
    """
    Completed days as a percentage of days since creation.

    Not clamped: completions logged for future dates can push it past 100.
    """
    completed = len(completed_dates(habit))
    return round_half_up(100 * completed / days_since_creation(habit, now))


def compute_stats(habit: Habit, now: Optional[datetime] = None) -> HabitStats:
    if now is None:
        now = time_utils.get_current_time()
    now = to_local(now)
    return HabitStats(
        current_streak=current_streak(habit, now.date()),
        best_streak=best_streak(habit),
        completion_rate=completion_rate(habit, now),
    )


def best_streak_overall(habits: Iterable[Habit]) -> int:
    return max((best_streak(h) for h in habits), default=0)


def streak_text(streak: int) -> str:
    if streak <= 0:
        return "No streak"
    if streak == 1:
        return "1 day streak"
    return f"{streak} day streak"
