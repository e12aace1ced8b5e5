"""
Summary statistics over per-day records from an external time tracker.
"""
from __future__ import annotations
from typing import Dict, Iterable, List, Optional, Sequence

from workhours.core.types import (
    AggregatedExternalResult,
    CategoryTotal,
    ExternalDayRecord,
    ProductiveDay,
    RankedCategory,
)


def rank_categories(per_day: Iterable[Sequence[CategoryTotal]]) -> List[RankedCategory]:
    """Sum seconds per name, then rank by seconds (ties keep first appearance)."""
    totals: Dict[str, float] = {}
    grand_total = 0.0
    for categories in per_day:
        for cat in categories:
            totals[cat.name] = totals.get(cat.name, 0.0) + cat.seconds
            grand_total += cat.seconds

    ranked = [
        RankedCategory(
            name=name,
            seconds=seconds,
            percent_of_total=(seconds / grand_total * 100) if grand_total > 0 else 0.0,
        )
        for name, seconds in totals.items()
    ]
    # sorted() is stable, so equal totals stay in insertion order
    return sorted(ranked, key=lambda c: c.seconds, reverse=True)


def most_productive_day(records: Sequence[ExternalDayRecord]) -> Optional[ProductiveDay]:
    best: Optional[ExternalDayRecord] = None
    for record in records:
        if record.day_key is None:
            continue
        if best is None or record.total_seconds > best.total_seconds:
            best = record
    if best is None:
        return None
    return ProductiveDay(date=best.day_key, seconds=best.total_seconds)


def aggregate(records: Sequence[ExternalDayRecord]) -> AggregatedExternalResult:
    total_seconds = 0.0
    days_with_data = 0
    for record in records:
        if record.total_seconds > 0:
            total_seconds += record.total_seconds
            days_with_data += 1

    return AggregatedExternalResult(
        total_seconds=total_seconds,
        days_with_data_count=days_with_data,
        average_seconds_per_day=total_seconds / days_with_data if days_with_data else 0.0,
        most_productive_day=most_productive_day(records),
        languages=rank_categories(r.languages for r in records),
        editors=rank_categories(r.editors for r in records),
        operating_systems=rank_categories(r.operating_systems for r in records),
    )


aggregate_external = aggregate


def daily_breakdown(records: Sequence[ExternalDayRecord]) -> Dict[str, float]:
    """Hours per day, keyed by the record's date (or its start as fallback)."""
    daily: Dict[str, float] = {}
    for record in records:
        key = record.day_key
        if key is None:
            continue
        daily[key] = record.total_seconds / 3600
    return daily
