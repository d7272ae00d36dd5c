from datetime import date as dt_date, datetime
from typing import Dict, List, Literal, Optional
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel

from core.time_utils import get_current_time

Frequency = Literal["daily", "weekly", "custom"]
FrequencyPeriod = Literal["weekly", "monthly"]
DayOfWeek = Literal["mon", "tue", "wed", "thu", "fri", "sat", "sun"]
Granularity = Literal["day", "week", "month"]


def new_habit_id() -> str:
    return uuid4().hex


def _lowercase(v):
    if isinstance(v, str):
        return v.strip().lower()
    return v


def _day_tags(v):
    if isinstance(v, (list, tuple, set)):
        return [d.strip().lower()[:3] if isinstance(d, str) else d for d in v]
    return v


class CamelModel(BaseModel):
    # JSON uses the browser store's camelCase keys; snake_case is accepted too.
    model_config = {"alias_generator": to_camel, "populate_by_name": True}


class HabitFields(CamelModel):
    title: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    frequency: Frequency = "daily"

    # Custom frequency: target repetitions per period (display only)
    frequency_count: Optional[int] = Field(default=None, ge=1)
    frequency_period: Optional[FrequencyPeriod] = None
    selected_days: List[DayOfWeek] = []

    # Reminders
    reminder_enabled: bool = False
    reminder_time: Optional[str] = Field(default=None, pattern=r"^([01]\d|2[0-3]):[0-5]\d$")

    @field_validator("frequency", "frequency_period", mode="before")
    @classmethod
    def lowercase_choice(cls, v):
        return _lowercase(v)

    @field_validator("selected_days", mode="before")
    @classmethod
    def normalise_days(cls, v):
        if v is None:
            return []
        return _day_tags(v)

    @field_validator("reminder_time", mode="before")
    @classmethod
    def blank_reminder_time(cls, v):
        # The browser form stores "" when no time was picked
        return v or None


class Habit(HabitFields):
    """
    A recurring intention with a sparse completion history.

    Attributes:
    - history: ISO date (YYYY-MM-DD) -> completed flag. A missing date means
      "not completed". Only the toggle operation writes to it.
    - created_at: Immutable. No statistic looks at days before it.
    """
    id: str = Field(default_factory=new_habit_id)
    created_at: datetime = Field(default_factory=get_current_time)
    history: Dict[str, bool] = {}

    @field_validator("history", mode="before")
    @classmethod
    def empty_history(cls, v):
        return {} if v is None else v


class HabitCreate(HabitFields):
    pass


class HabitUpdate(CamelModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = None
    frequency: Optional[Frequency] = None
    frequency_count: Optional[int] = Field(default=None, ge=1)
    frequency_period: Optional[FrequencyPeriod] = None
    selected_days: Optional[List[DayOfWeek]] = None
    reminder_enabled: Optional[bool] = None
    reminder_time: Optional[str] = Field(default=None, pattern=r"^([01]\d|2[0-3]):[0-5]\d$")

    @field_validator("frequency", "frequency_period", mode="before")
    @classmethod
    def lowercase_choice(cls, v):
        return _lowercase(v)

    @field_validator("selected_days", mode="before")
    @classmethod
    def normalise_days(cls, v):
        return _day_tags(v)


class HabitCompletion(CamelModel):
    habit_id: str
    date: str
    is_completed: bool


# --- Derived, never persisted ---

class HabitStats(CamelModel):
    current_streak: int = 0
    best_streak: int = 0
    completion_rate: int = 0


class DailyProgress(CamelModel):
    total: int = 0
    completed: int = 0
    percentage: int = 0


class WeekDay(CamelModel):
    date: str
    short_name: str
    # None marks a day that has not happened yet
    completion: Optional[int] = None
    is_future: bool = False


class WeeklyProgress(CamelModel):
    days: List[WeekDay]
    percentage: int = 0


class WindowSpec(CamelModel):
    granularity: Granularity = "day"
    length: int = Field(default=30, ge=1, le=400)
    end: Optional[dt_date] = None
    frequency: Optional[Frequency] = None


class ContributionBucket(CamelModel):
    start: dt_date
    end: dt_date
    total: int = 0
    completed: int = 0
    percentage: int = 0
    level: int = 0
    label: str


class CalendarDay(CamelModel):
    date: str
    day: int
    is_current_month: bool = True
    is_completed: Optional[bool] = None
    is_today: bool = False
