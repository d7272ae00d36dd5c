from datetime import date

from models.habit import Habit
from core.time_utils import local_day, weekday_tag


def created_day(habit: Habit) -> date:
    return local_day(habit.created_at)


def is_due(habit: Habit, day: date) -> bool:
    """
    Whether the habit's recurrence rule asks for action on `day`.

    Rules:
    - Nothing is due before the calendar day the habit was created.
    - 'daily': every day.
    - 'weekly': every day as well. Every view (streaks, daily/weekly progress,
      contribution matrix) goes through this function so they agree.
    - 'custom': only on the weekdays listed in selected_days. No days selected
      means the habit is never due.

    History is never consulted.
    """
    if day < created_day(habit):
        return False

    if habit.frequency == "daily":
        return True
    if habit.frequency == "weekly":
        return True
    if habit.frequency == "custom":
        return weekday_tag(day) in (habit.selected_days or [])
    return False
