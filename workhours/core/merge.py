"""
Day-by-day comparison of manually logged minutes against externally tracked hours.
"""
from __future__ import annotations
from typing import Dict, Mapping

from workhours.core.types import Classification, MergedDayComparison

# Differences below this share of the manual figure count as a match.
MATCH_THRESHOLD_PERCENT = 5.0


def classify(manual_minutes: float, external_minutes: float) -> Classification:
    if manual_minutes == 0 and external_minutes == 0:
        return Classification(percentage=0.0, status="match")
    if manual_minutes == 0:
        return Classification(percentage=100.0, status="over")

    percentage = abs(external_minutes - manual_minutes) / manual_minutes * 100
    if percentage < MATCH_THRESHOLD_PERCENT:
        status = "match"
    elif external_minutes > manual_minutes:
        status = "over"
    else:
        status = "under"
    return Classification(percentage=percentage, status=status)


def merge(
    external_hours_by_date: Mapping[str, float],
    manual_minutes_by_date: Mapping[str, float],
) -> Dict[str, MergedDayComparison]:
    """Union both date sets; a date missing on one side counts as zero there."""
    merged: Dict[str, MergedDayComparison] = {}
    for day in sorted(set(external_hours_by_date) | set(manual_minutes_by_date)):
        external_hours = external_hours_by_date.get(day, 0) or 0
        manual = manual_minutes_by_date.get(day, 0) or 0
        merged[day] = MergedDayComparison(
            manual_minutes=manual,
            external_seconds=external_hours * 3600,
            difference_minutes=external_hours * 60 - manual,
        )
    return merged


def merge_and_classify(
    external_hours_by_date: Mapping[str, float],
    manual_minutes_by_date: Mapping[str, float],
) -> Dict[str, MergedDayComparison]:
    result: Dict[str, MergedDayComparison] = {}
    for day, comparison in merge(external_hours_by_date, manual_minutes_by_date).items():
        verdict = classify(comparison.manual_minutes, comparison.external_seconds / 60)
        result[day] = comparison.model_copy(
            update={
                "percentage_difference": verdict.percentage,
                "status": verdict.status,
            }
        )
    return result
