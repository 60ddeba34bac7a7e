"""Timezone resolution and the date/period parsing used by the CLI."""

from __future__ import annotations

import calendar
import os
import re
from datetime import date, datetime, time, timedelta
from typing import Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .config import API_DATE_FMT, API_DATETIME_FMT
from .errors import InvalidParams
from .util import eprint

DATE_RE     = re.compile(r"^\d{4}-\d{2}-\d{2}$")
DATETIME_RE = re.compile(r"^\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}$")

PERIODS = ("today", "yesterday", "this-week", "last-week",
           "this-month", "last-month", "this-quarter", "last-quarter")

_LOCALTIME = "/etc/localtime"


# ── Timezones ────────────────────────────────────────────────────────────────
def is_valid_timezone(name: str) -> bool:
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, OSError):
        return False
    return True

def local_timezone_name() -> Optional[str]:
    """Best-effort IANA name of the host zone, or None when it can't be determined."""
    name = os.environ.get("TZ", "").lstrip(":")
    if name and is_valid_timezone(name):
        return name
    try:
        target = os.path.realpath(_LOCALTIME)
    except OSError:
        return None
    marker = "zoneinfo" + os.sep
    if marker in target:
        name = target.split(marker, 1)[1]
        if is_valid_timezone(name):
            return name
    return None

def get_tz(name: Optional[str]) -> ZoneInfo:
    if name and is_valid_timezone(name):
        return ZoneInfo(name)
    if name:
        eprint(f"Warning: Timezone '{name}' not found; falling back to UTC.", True)
    return ZoneInfo("UTC")


# ── Parsing ──────────────────────────────────────────────────────────────────
def parse_date(s: str, field: str="date") -> date:
    if not isinstance(s, str) or not DATE_RE.match(s):
        raise InvalidParams(f"{field} must be in YYYY-MM-DD format.", field=field)
    try:
        return datetime.strptime(s, API_DATE_FMT).date()
    except ValueError as exc:
        raise InvalidParams(f"{field} '{s}' is not a valid calendar date.", field=field) from exc

def validate_date_or_datetime(s: str, field: str) -> str:
    """Accepts YYYY-MM-DD or YYYY-MM-DD HH:MM:SS, returns the value untouched."""
    if not isinstance(s, str) or not s.strip():
        raise InvalidParams(f"{field} is required.", field=field)
    if DATE_RE.match(s):
        parse_date(s, field)
        return s
    if DATETIME_RE.match(s):
        try:
            datetime.strptime(s, API_DATETIME_FMT)
        except ValueError as exc:
            raise InvalidParams(f"{field} '{s}' is not a valid date-time.", field=field) from exc
        return s
    raise InvalidParams(f"{field} must be YYYY-MM-DD or YYYY-MM-DD HH:MM:SS.", field=field)

def parse_date_spec(spec: str, today: date) -> date:
    """
    Flexible single-date specs relative to ``today``:
    YYYY-MM-DD, M/D (most recent past occurrence), and d-N / w-N / m-N / y-N.
    """
    if DATE_RE.match(spec):
        return parse_date(spec)

    month_day = re.fullmatch(r"(\d{1,2})/(\d{1,2})", spec)
    if month_day:
        month, day = int(month_day.group(1)), int(month_day.group(2))
        if not 1 <= month <= 12 or not 1 <= day <= 31:
            raise InvalidParams(f"Invalid date specification '{spec}'", field="date_spec")
        year = today.year if (month, day) <= (today.month, today.day) else today.year - 1
        max_days = calendar.monthrange(year, month)[1]
        return date(year, month, min(day, max_days))

    match = re.fullmatch(r"([dwmy])-(\d+)", spec.lower())
    if not match:
        raise InvalidParams(f"Invalid date specification '{spec}'", field="date_spec")
    unit, num = match.group(1), int(match.group(2))
    if unit == "d":
        return today - timedelta(days=num)
    if unit == "w":
        return today - timedelta(weeks=num)
    if unit == "m":
        target_month = today.month - num
        target_year = today.year
        while target_month <= 0:
            target_month += 12
            target_year -= 1
        max_days = calendar.monthrange(target_year, target_month)[1]
        return date(target_year, target_month, min(today.day, max_days))
    try:
        return today.replace(year=today.year - num)
    except ValueError:  # Feb 29 into a non-leap year
        return today.replace(year=today.year - num, month=2, day=28)

def parse_week_spec(spec: str, current_year: int) -> Tuple[date, date]:
    """Week number (current year) or YYYY-WNN, returned as (monday, sunday)."""
    if re.fullmatch(r"\d{1,2}", spec):
        year, week = current_year, int(spec)
    elif re.fullmatch(r"\d{4}-W\d{2}", spec):
        year_part, week_part = spec.split("-W")
        year, week = int(year_part), int(week_part)
    else:
        raise InvalidParams(f"Invalid week specification '{spec}'", field="week_spec")
    if not 1 <= week <= 53:
        raise InvalidParams("Week number out of range (1-53)", field="week_spec")
    try:
        start = date.fromisocalendar(year, week, 1)
    except ValueError as exc:
        raise InvalidParams(f"Week {week} does not exist in {year}", field="week_spec") from exc
    return start, start + timedelta(days=6)


# ── Time-range Calculations ─────────────────────────────────────────────────
def _month_start(d: date, months_back: int) -> date:
    month = d.month - months_back
    year = d.year
    while month <= 0:
        month += 12
        year -= 1
    return date(year, month, 1)

def _add_months(d: date, months: int) -> date:
    index = d.month - 1 + months
    return date(d.year + index // 12, index % 12 + 1, 1)

def get_day_range(today: date, period: str) -> Tuple[date, date]:
    if period == "today":
        return today, today
    if period == "yesterday":
        d = today - timedelta(days=1)
        return d, d
    if period in ("this-week", "last-week"):
        start = today - timedelta(days=today.weekday())
        if period == "last-week":
            start -= timedelta(days=7)
        return start, start + timedelta(days=6)
    if period in ("this-month", "last-month"):
        start = _month_start(today, 0 if period == "this-month" else 1)
        return start, _add_months(start, 1) - timedelta(days=1)
    if period in ("this-quarter", "last-quarter"):
        quarter_start = _month_start(today, (today.month - 1) % 3)
        start = quarter_start if period == "this-quarter" else _add_months(quarter_start, -3)
        return start, _add_months(start, 3) - timedelta(days=1)
    raise InvalidParams(f"Unknown period: {period}", field="period")

def day_bounds(start: date, end: date, tz: ZoneInfo) -> Tuple[str, str]:
    """Render a day span as API start/end strings covering whole days."""
    return (
        datetime.combine(start, time.min, tzinfo=tz).strftime(API_DATETIME_FMT),
        datetime.combine(end, time.max, tzinfo=tz).strftime(API_DATETIME_FMT),
    )
