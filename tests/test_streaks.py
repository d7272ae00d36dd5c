from datetime import date, datetime, timedelta

import pytest

from core.streaks import (
    best_streak,
    best_streak_overall,
    completion_rate,
    compute_stats,
    current_streak,
    streak_text,
)

TODAY = date(2024, 1, 10)
NOW = datetime(2024, 1, 10, 12, 0)


def run_of(end: date, length: int) -> dict:
    return {(end - timedelta(days=i)).isoformat(): True for i in range(length)}


def test_reference_scenario(make_habit):
    habit = make_habit(
        history={
            "2024-01-01": True,
            "2024-01-02": True,
            "2024-01-03": False,
            "2024-01-04": True,
        }
    )
    stats = compute_stats(habit, datetime(2024, 1, 4, 12, 0))
    assert stats.current_streak == 1
    assert stats.best_streak == 2
    assert stats.completion_rate == 75


def test_empty_history(make_habit):
    stats = compute_stats(make_habit(), NOW)
    assert (stats.current_streak, stats.best_streak, stats.completion_rate) == (0, 0, 0)


@pytest.mark.parametrize("k", [1, 2, 5, 9])
def test_run_ending_today_is_current_streak(make_habit, k):
    habit = make_habit(history=run_of(TODAY, k))
    assert current_streak(habit, TODAY) == k


def test_streak_survives_until_today_is_over(make_habit):
    habit = make_habit(history=run_of(TODAY - timedelta(days=1), 3))
    assert current_streak(habit, TODAY) == 3


def test_streak_lost_when_yesterday_skipped(make_habit):
    habit = make_habit(history={"2024-01-07": True, "2024-01-08": True})
    assert current_streak(habit, TODAY) == 0


def test_explicit_false_today_still_counts_from_yesterday(make_habit):
    history = run_of(TODAY - timedelta(days=1), 2)
    history["2024-01-10"] = False
    habit = make_habit(history=history)
    assert current_streak(habit, TODAY) == 2


def test_gap_resets_running_streak(make_habit):
    habit = make_habit(
        history={
            "2024-01-01": True,
            "2024-01-02": True,
            "2024-01-03": True,
            "2024-01-05": True,
            "2024-01-06": True,
        }
    )
    assert current_streak(habit, date(2024, 1, 6)) == 2
    assert best_streak(habit) == 3


def test_best_streak_ignores_position_and_key_order(make_habit):
    habit = make_habit(
        history={
            "2024-01-09": True,
            "2024-01-02": True,
            "2024-01-10": True,
            "2024-01-03": True,
            "2024-01-04": True,
            "2024-01-05": True,
        }
    )
    assert best_streak(habit) == 4


def test_false_entries_break_runs(make_habit):
    habit = make_habit(history={"2024-01-01": True, "2024-01-02": False, "2024-01-03": True})
    assert best_streak(habit) == 1


def test_created_today_without_completions(make_habit):
    habit = make_habit(created_at=datetime(2024, 1, 10, 9, 0))
    assert completion_rate(habit, NOW) == 0


def test_completion_rate_never_divides_by_zero_for_future_creation(make_habit):
    habit = make_habit(created_at=datetime(2024, 1, 15), history={"2024-01-10": True})
    stats = compute_stats(habit, NOW)
    assert stats.completion_rate == 0
    assert stats.current_streak == 0
    assert stats.best_streak == 0


def test_completion_rate_is_not_clamped(make_habit):
    habit = make_habit(
        created_at=datetime(2024, 1, 10),
        history={"2024-01-10": True, "2024-01-11": True},
    )
    stats = compute_stats(habit, NOW)
    assert stats.completion_rate == 200
    assert stats.current_streak == 1
    assert stats.best_streak == 2


def test_malformed_keys_are_ignored(make_habit):
    habit = make_habit(
        history={
            "2024-1-5": True,
            "garbage": True,
            "2024-01-09": True,
            "2024-01-10": True,
        }
    )
    stats = compute_stats(habit, NOW)
    assert stats.current_streak == 2
    assert stats.best_streak == 2
    # 2 completions over ceil(9.5) = 10 days
    assert stats.completion_rate == 20


def test_days_before_creation_never_count(make_habit):
    habit = make_habit(
        created_at=datetime(2024, 1, 5),
        history={"2024-01-03": True, "2024-01-04": True, "2024-01-05": True},
    )
    stats = compute_stats(habit, datetime(2024, 1, 5, 12, 0))
    assert stats.current_streak == 1
    assert stats.best_streak == 1
    assert stats.completion_rate == 100


def test_custom_habit_streaks_count_calendar_days(make_habit):
    habit = make_habit(
        frequency="custom",
        selected_days=["mon", "wed", "fri"],
        history={
            "2024-01-01": True,
            "2024-01-03": True,
            "2024-01-05": True,
            "2024-01-08": True,
        },
    )
    # Tuesday 2024-01-09, not done yet; Sunday 01-07 was skipped
    assert current_streak(habit, date(2024, 1, 9)) == 1
    assert best_streak(habit) == 1


def test_gap_between_custom_due_days_resets_run(make_habit):
    habit = make_habit(
        frequency="custom",
        selected_days=["mon", "wed"],
        history={"2024-01-08": True, "2024-01-10": True},
    )
    assert current_streak(habit, date(2024, 1, 10)) == 1
    assert current_streak(habit, date(2024, 1, 11)) == 1
    assert best_streak(habit) == 1


def test_custom_habit_missed_due_day_breaks_streak(make_habit):
    habit = make_habit(
        frequency="custom",
        selected_days=["mon", "wed", "fri"],
        history={"2024-01-01": True, "2024-01-05": True},
    )
    assert current_streak(habit, date(2024, 1, 5)) == 1
    assert best_streak(habit) == 1


def test_weekly_habit_streaks_like_daily(make_habit):
    habit = make_habit(frequency="weekly", history={"2024-01-08": True, "2024-01-10": True})
    assert current_streak(habit, TODAY) == 1
    assert best_streak(habit) == 1


def test_compute_stats_reads_the_clock(make_habit, fixed_clock):
    habit = make_habit(history=run_of(TODAY, 3))
    stats = compute_stats(habit)
    assert stats.current_streak == 3
    assert stats.completion_rate == 30


def test_compute_stats_does_not_mutate_history(make_habit):
    history = {"2024-01-09": True, "junk": True}
    habit = make_habit(history=dict(history))
    compute_stats(habit, NOW)
    assert habit.history == history


def test_best_streak_overall(make_habit):
    habits = [
        make_habit(history=run_of(date(2024, 1, 4), 2)),
        make_habit(history=run_of(date(2024, 1, 8), 5)),
    ]
    assert best_streak_overall(habits) == 5
    assert best_streak_overall([]) == 0


def test_streak_text():
    assert streak_text(0) == "No streak"
    assert streak_text(1) == "1 day streak"
    assert streak_text(12) == "12 day streak"
