"""
Numbers behind the dashboard charts. Drawing is left to the client.
"""
from __future__ import annotations
import math
from typing import Any, Dict, Iterable, List, Mapping, Optional

from pydantic import BaseModel, Field

from workhours.core.types import AllocationResult
from workhours.csv_import import (
    CATEGORY_KEYS,
    HOURS_KEYS,
    MINUTES_KEYS,
    first_value,
    to_number,
)


class SeriesPoint(BaseModel):
    date: str
    value: float


class ProgressSeries(BaseModel):
    completedHours: float
    remainingHours: float


class DailyPlanPoint(BaseModel):
    date: str
    plannedHours: float
    actualHours: float


class BurnDownPoint(BaseModel):
    date: str
    plannedRemainingHours: float
    actualRemainingHours: float


class Histogram(BaseModel):
    labels: List[str] = Field(default_factory=list)
    counts: List[int] = Field(default_factory=list)


class EarningsProgress(BaseModel):
    earned: float
    remaining: float


def _round2(value: float) -> float:
    return math.floor(value * 100 + 0.5) / 100


def progress(result: AllocationResult) -> ProgressSeries:
    return ProgressSeries(
        completedHours=result.completed_minutes / 60,
        remainingHours=max(0.0, result.remaining_minutes) / 60,
    )


def daily_plan(result: AllocationResult, actuals_by_date: Mapping[str, float]) -> List[DailyPlanPoint]:
    """Planned hours per scheduled day next to imported actual hours."""
    per_day_hours = result.per_workday_minutes / 60
    return [
        DailyPlanPoint(
            date=day.date.isoformat(),
            plannedHours=per_day_hours if day.is_workday else 0.0,
            actualHours=_round2(actuals_by_date.get(day.date.isoformat(), 0) / 60),
        )
        for day in result.schedule
    ]


def burn_down(result: AllocationResult, actuals_by_date: Mapping[str, float]) -> List[BurnDownPoint]:
    """Remaining hours over the schedule; neither series drops below zero."""
    planned = result.total_minutes
    actual = result.total_minutes
    points: List[BurnDownPoint] = []
    for day in result.schedule:
        key = day.date.isoformat()
        if day.is_workday:
            planned = max(0.0, planned - result.per_workday_minutes)
        actual = max(0.0, actual - actuals_by_date.get(key, 0))
        points.append(
            BurnDownPoint(
                date=key,
                plannedRemainingHours=planned / 60,
                actualRemainingHours=actual / 60,
            )
        )
    return points


def histogram(actuals_by_date: Mapping[str, float], bins: int = 10) -> Histogram:
    """Distribution of daily actual hours."""
    hours = [actuals_by_date[k] / 60 for k in sorted(actuals_by_date)]
    if not hours:
        return Histogram()

    low, high = min(hours), max(hours)
    width = (high - low) / bins or 1
    counts = [0] * bins
    for value in hours:
        counts[min(bins - 1, int(math.floor((value - low) / width)))] += 1
    labels = [
        f"{low + i * width:.1f}-{low + (i + 1) * width:.1f}" for i in range(bins)
    ]
    return Histogram(labels=labels, counts=counts)


def category_breakdown(rows: Iterable[Mapping[str, Any]]) -> Dict[str, float]:
    """Hours per CSV category; blank categories are grouped as Uncategorized."""
    minutes: Dict[str, float] = {}
    for row in rows:
        category = str(first_value(row, CATEGORY_KEYS) or "").strip() or "Uncategorized"
        hrs = to_number(first_value(row, HOURS_KEYS))
        mins = to_number(first_value(row, MINUTES_KEYS))
        minutes[category] = minutes.get(category, 0.0) + hrs * 60 + mins
    return {name: _round2(m / 60) for name, m in minutes.items()}


def earnings_progress(result: AllocationResult) -> Optional[EarningsProgress]:
    if result.hourly_rate <= 0:
        return None
    return EarningsProgress(
        earned=result.completed_earnings,
        remaining=max(0.0, result.remaining_earnings),
    )


def cumulative_earnings(result: AllocationResult) -> List[SeriesPoint]:
    """Projected running total: completed earnings plus one day's rate per workday."""
    if result.hourly_rate <= 0:
        return []
    running = result.completed_earnings
    points = []
    for day in result.schedule:
        if day.is_workday:
            running += result.per_workday_earnings
        points.append(SeriesPoint(date=day.date.isoformat(), value=_round2(running)))
    return points


def daily_earnings(result: AllocationResult) -> List[SeriesPoint]:
    if result.hourly_rate <= 0:
        return []
    return [
        SeriesPoint(
            date=day.date.isoformat(),
            value=result.per_workday_earnings if day.is_workday else 0.0,
        )
        for day in result.schedule
    ]


def build_charts(
    result: AllocationResult,
    actuals_by_date: Mapping[str, float],
    rows: Iterable[Mapping[str, Any]] = (),
) -> Dict[str, Any]:
    earnings = earnings_progress(result)
    return {
        "progress": progress(result).model_dump(),
        "dailyPlan": [p.model_dump() for p in daily_plan(result, actuals_by_date)],
        "burnDown": [p.model_dump() for p in burn_down(result, actuals_by_date)],
        "histogram": histogram(actuals_by_date).model_dump(),
        "categories": category_breakdown(rows),
        "earningsProgress": earnings.model_dump() if earnings else None,
        "cumulativeEarnings": [p.model_dump() for p in cumulative_earnings(result)],
        "dailyEarnings": [p.model_dump() for p in daily_earnings(result)],
    }
