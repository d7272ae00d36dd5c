import logging
from datetime import datetime
from typing import Iterable, List, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from core.config import settings
from core.dependencies import get_store
from core.eligibility import is_due
from core.streaks import is_completed
from core.time_utils import get_current_time
from models.habit import Habit
from storage.base import HabitStore

logger = logging.getLogger(__name__)

scheduler = AsyncIOScheduler()


def habits_to_remind(habits: Iterable[Habit], now: datetime) -> List[Habit]:
    """Habits whose reminder time is this minute and that still need doing today."""
    current_time = now.strftime("%H:%M")
    day = now.date()
    return [
        h for h in habits
        if h.reminder_enabled
        and h.reminder_time == current_time
        and is_due(h, day)
        and not is_completed(h, day)
    ]


async def run_reminder_check(store: Optional[HabitStore] = None) -> List[Habit]:
    """
    Compares every habit's reminder time with the current local HH:MM and
    logs a reminder for each match.
    """
    store = store or get_store()
    now = get_current_time()

    try:
        habits = await store.load_all()
    except Exception:
        logger.exception("Reminder check could not load habits")
        return []

    reminders = habits_to_remind(habits, now)
    for habit in reminders:
        logger.info("Habit reminder: time to complete your habit: %s", habit.title)
    return reminders


def start_scheduler():
    scheduler.add_job(
        run_reminder_check,
        IntervalTrigger(minutes=settings.REMINDER_CHECK_MINUTES),
        id="habit_reminders",
        replace_existing=True,
    )
    scheduler.start()
    logger.info("Reminder scheduler started (every %s min)", settings.REMINDER_CHECK_MINUTES)


def stop_scheduler():
    if scheduler.running:
        scheduler.shutdown(wait=False)
