from datetime import date
from typing import Iterable, List, Optional, Tuple

from models.habit import (
    CalendarDay,
    ContributionBucket,
    DailyProgress,
    Habit,
    WeekDay,
    WeeklyProgress,
    WindowSpec,
)
from core import time_utils
from core.eligibility import is_due
from core.percent import percentage, round_half_up
from core.streaks import is_completed
from core.time_utils import (
    add_days,
    add_months,
    each_day,
    end_of_month,
    iso_date,
    short_day_name,
    start_of_month,
    start_of_week,
)

# Upper bounds (exclusive) of intensity levels 1-4; 100% is level 5, 0% is level 0.
INTENSITY_THRESHOLDS = [25, 50, 75, 100]


def daily_progress(habits: Iterable[Habit], on: Optional[date] = None) -> DailyProgress:
    """How many of the habits due on `on` (default today) were completed."""
    if on is None:
        on = time_utils.today()
    due = [h for h in habits if is_due(h, on)]
    completed = sum(1 for h in due if is_completed(h, on))
    return DailyProgress(
        total=len(due),
        completed=completed,
        percentage=percentage(completed, len(due)),
    )


def weekly_progress(habits: Iterable[Habit], today: Optional[date] = None) -> WeeklyProgress:
    """
    Per-day completion for the Monday-starting week containing today.

    Days after today get completion=None and is_future=True; they are left
    out of the week's average. A day with nothing due counts as 0%.
    """
    if today is None:
        today = time_utils.today()
    habits = list(habits)
    monday = start_of_week(today)

    days = []
    for offset in range(7):
        day = add_days(monday, offset)
        if day > today:
            days.append(WeekDay(date=iso_date(day), short_name=short_day_name(day), is_future=True))
            continue
        progress = daily_progress(habits, day)
        days.append(WeekDay(date=iso_date(day), short_name=short_day_name(day), completion=progress.percentage))

    past = [d.completion for d in days if not d.is_future]
    week_pct = round_half_up(sum(past) / len(past)) if past else 0
    return WeeklyProgress(days=days, percentage=week_pct)


def intensity_level(pct: int) -> int:
    """0 for nothing completed, 1-4 for partial quartiles, 5 for everything."""
    if pct <= 0:
        return 0
    for level, bound in enumerate(INTENSITY_THRESHOLDS, start=1):
        if pct < bound:
            return level
    return len(INTENSITY_THRESHOLDS) + 1


def bucket_label(span_text: str, pct: int) -> str:
    if pct <= 0:
        return f"{span_text}: No habits completed"
    if pct >= 100:
        return f"{span_text}: All habits completed"
    return f"{span_text}: {pct}% completed"


def _format_day(d: date) -> str:
    return f"{d:%b} {d.day}, {d.year}"


def _bucket_spans(granularity: str, length: int, end: date) -> List[Tuple[date, date, str]]:
    """(start, end, display text) per bucket, oldest first, clipped to `end`."""
    spans = []
    if granularity == "day":
        for back in range(length - 1, -1, -1):
            day = add_days(end, -back)
            spans.append((day, day, _format_day(day)))
    elif granularity == "week":
        last_monday = start_of_week(end)
        for back in range(length - 1, -1, -1):
            start = add_days(last_monday, -7 * back)
            spans.append((start, min(add_days(start, 6), end), f"Week of {_format_day(start)}"))
    elif granularity == "month":
        last_first = start_of_month(end)
        for back in range(length - 1, -1, -1):
            start = add_months(last_first, -back)
            spans.append((start, min(end_of_month(start), end), f"{start:%B %Y}"))
    return spans


def contribution_buckets(habits: Iterable[Habit], window: WindowSpec) -> List[ContributionBucket]:
    """
    Heatmap cells over a trailing window.

    Each bucket's ratio is completed due habit-days over all due habit-days
    inside its span, so a week bucket weighs each day by how many habits
    were due that day.
    """
    end = window.end or time_utils.today()
    habits = [h for h in habits if window.frequency is None or h.frequency == window.frequency]

    buckets = []
    for start, stop, text in _bucket_spans(window.granularity, window.length, end):
        total = 0
        completed = 0
        for day in each_day(start, stop):
            for habit in habits:
                if not is_due(habit, day):
                    continue
                total += 1
                if is_completed(habit, day):
                    completed += 1
        pct = percentage(completed, total)
        buckets.append(
            ContributionBucket(
                start=start,
                end=stop,
                total=total,
                completed=completed,
                percentage=pct,
                level=intensity_level(pct),
                label=bucket_label(text, pct),
            )
        )
    return buckets


def calendar_days(habit: Habit, month: date, today: Optional[date] = None) -> List[CalendarDay]:
    """One entry per day of `month`'s calendar month for the detail view."""
    if today is None:
        today = time_utils.today()
    days = []
    for day in each_day(start_of_month(month), end_of_month(month)):
        key = iso_date(day)
        days.append(
            CalendarDay(
                date=key,
                day=day.day,
                is_completed=habit.history.get(key),
                is_today=day == today,
            )
        )
    return days
