"""
Work allocation across a billing period.

Given a required and a completed amount of minutes, spread what is left over
the remaining workdays of the period and derive per-day targets and earnings.
"""
from __future__ import annotations
import logging
import math
from datetime import date, datetime, timedelta
from typing import List, Optional

from workhours.core.timecodec import parse_time_string
from workhours.core.types import AllocationResult, ScheduledDay
from workhours.errors import ValidationError

logger = logging.getLogger(__name__)

SUNDAY = 6
SATURDAY = 5


def _require_finite(name: str, value) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        raise ValidationError(f"{name} must be a finite number, got {value!r}")
    return value


def determine_start(
    billing_start: date,
    billing_end: date,
    exclude_today: bool,
    today: Optional[date] = None,
) -> date:
    """
    First day to schedule.

    A period entirely in the future or entirely in the past is evaluated from
    its first day; the latter lets a closed period be recomputed in full.
    """
    today = today or date.today()
    if today < billing_start:
        return billing_start
    if today > billing_end:
        return billing_start
    if exclude_today:
        return today + timedelta(days=1)
    return today


def describe_day(d: date) -> str:
    """e.g. 'Sat Jan 04 2025 (Saturday)'"""
    return f"{d.strftime('%a %b %d %Y')} ({d.strftime('%A')})"


def compute_allocation(
    total_minutes: float,
    completed_minutes: float,
    billing_start: date,
    billing_end: date,
    skip_sunday: bool = False,
    skip_saturday: bool = False,
    exclude_today: bool = False,
    hourly_rate: float = 0,
    today: Optional[date] = None,
    full_period: bool = False,
) -> AllocationResult:
    """
    Allocate over the period. With full_period the schedule always begins at
    billing_start, whatever today is.
    """
    total_minutes = _require_finite("total_minutes", total_minutes)
    completed_minutes = _require_finite("completed_minutes", completed_minutes)
    hourly_rate = _require_finite("hourly_rate", hourly_rate)

    remaining = total_minutes - completed_minutes
    if full_period:
        start = billing_start
    else:
        start = determine_start(billing_start, billing_end, exclude_today, today)

    remaining_days = 0
    workdays = 0
    excluded: List[str] = []
    schedule: List[ScheduledDay] = []

    d = start
    while d <= billing_end:
        remaining_days += 1
        weekday = d.weekday()
        if (skip_sunday and weekday == SUNDAY) or (skip_saturday and weekday == SATURDAY):
            excluded.append(describe_day(d))
            schedule.append(ScheduledDay(date=d, is_workday=False))
        else:
            workdays += 1
            schedule.append(ScheduledDay(date=d, is_workday=True))
        d += timedelta(days=1)

    per_day = remaining / workdays if workdays > 0 else 0.0

    def earnings(minutes: float) -> float:
        return minutes / 60 * hourly_rate if hourly_rate > 0 else 0.0

    logger.debug(
        f"Allocated {remaining} min over {workdays} workdays "
        f"({remaining_days} days from {start} to {billing_end})"
    )

    return AllocationResult(
        total_minutes=total_minutes,
        completed_minutes=completed_minutes,
        remaining_minutes=remaining,
        billing_start=billing_start,
        billing_end=billing_end,
        remaining_day_count=remaining_days,
        workday_count=workdays,
        per_workday_minutes=per_day,
        excluded_days=excluded,
        schedule=schedule,
        hourly_rate=hourly_rate,
        total_earnings=earnings(total_minutes),
        completed_earnings=earnings(completed_minutes),
        remaining_earnings=earnings(remaining),
        per_workday_earnings=earnings(per_day),
    )


def parse_date(value, field: str) -> date:
    """A date, or an ISO datetime string reduced to its date part."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError as e:
        raise ValidationError(f"{field} must be a YYYY-MM-DD date, got {value!r}") from e


def compute_allocation_from_strings(
    total: str,
    completed: str,
    billing_start,
    billing_end,
    skip_sunday: bool = False,
    skip_saturday: bool = False,
    exclude_today: bool = False,
    hourly_rate: float = 0,
    today: Optional[date] = None,
) -> AllocationResult:
    """Calculator entry point: time strings and ISO dates in, allocation out."""
    return compute_allocation(
        parse_time_string(total),
        parse_time_string(completed),
        parse_date(billing_start, "billing_start"),
        parse_date(billing_end, "billing_end"),
        skip_sunday=skip_sunday,
        skip_saturday=skip_saturday,
        exclude_today=exclude_today,
        hourly_rate=hourly_rate,
        today=today,
    )
