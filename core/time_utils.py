import calendar
import re
from datetime import date, datetime, timedelta, timezone
from typing import Callable, List, Optional

ISO_DATE_FORMAT = "%Y-%m-%d"
ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

WEEKDAY_TAGS = ["mon", "tue", "wed", "thu", "fri", "sat", "sun"]

# The one place "now" comes from. Tests swap it with set_clock().
_clock: Callable[[], datetime] = datetime.now


def set_clock(clock: Callable[[], datetime]):
    """Replace the source of the current time (e.g. a fixed datetime in tests)."""
    global _clock
    _clock = clock


def reset_clock():
    global _clock
    _clock = datetime.now


def to_local(dt: datetime) -> datetime:
    """Converts a datetime to naive host-local wall time.

    Naive datetimes are assumed to already be local.
    """
    if dt.tzinfo is None:
        return dt
    return dt.astimezone().replace(tzinfo=None)


def to_utc(dt: datetime) -> datetime:
    """Aware UTC datetime for storage. Naive datetimes are taken as local time."""
    return dt.astimezone(timezone.utc)


def get_current_time() -> datetime:
    """Returns the current host-local time."""
    return to_local(_clock())


def today() -> date:
    return get_current_time().date()


def local_day(dt: datetime) -> date:
    """Calendar day of a timestamp in the host-local calendar."""
    return to_local(dt).date()


def iso_date(d: date) -> str:
    return d.strftime(ISO_DATE_FORMAT)


def parse_iso_date(value: str) -> Optional[date]:
    """Parse a canonical YYYY-MM-DD key. Returns None for anything else."""
    if not isinstance(value, str) or not ISO_DATE_RE.match(value):
        return None
    try:
        return datetime.strptime(value, ISO_DATE_FORMAT).date()
    except ValueError:
        return None


def add_days(d: date, n: int) -> date:
    return d + timedelta(days=n)


def weekday(d: date) -> int:
    """Monday=1 .. Sunday=7"""
    return d.isoweekday()


def weekday_tag(d: date) -> str:
    return WEEKDAY_TAGS[d.weekday()]


def short_day_name(d: date) -> str:
    return weekday_tag(d).capitalize()


def start_of_week(d: date) -> date:
    # Weeks start on Monday
    return d - timedelta(days=d.weekday())


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def start_of_month(d: date) -> date:
    return d.replace(day=1)


def end_of_month(d: date) -> date:
    return d.replace(day=days_in_month(d.year, d.month))


def add_months(d: date, n: int) -> date:
    """First day of the month n months away from d's month."""
    index = d.year * 12 + (d.month - 1) + n
    return date(index // 12, index % 12 + 1, 1)


def each_day(start: date, end: date) -> List[date]:
    """Inclusive range of days. Empty when end < start."""
    days = []
    cur = start
    while cur <= end:
        days.append(cur)
        cur += timedelta(days=1)
    return days
