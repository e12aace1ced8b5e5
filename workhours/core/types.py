"""
Value types produced by the core computations.
All models serialize to camelCase for the HTTP layer.
"""
from __future__ import annotations
from datetime import date as Date
from typing import Annotated, List, Literal, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CoreModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


# Allocation

class ScheduledDay(CoreModel):
    date: Date
    is_workday: bool


class AllocationResult(CoreModel):
    total_minutes: float
    completed_minutes: float
    remaining_minutes: float
    billing_start: Date
    billing_end: Date
    remaining_day_count: int
    workday_count: int
    per_workday_minutes: float
    excluded_days: List[str] = Field(default_factory=list)
    schedule: List[ScheduledDay] = Field(default_factory=list)
    hourly_rate: float = 0.0
    total_earnings: float = 0.0
    completed_earnings: float = 0.0
    remaining_earnings: float = 0.0
    per_workday_earnings: float = 0.0


# External (time-tracking API) data

class CategoryTotal(CoreModel):
    name: str
    seconds: float = 0.0


def _coerce_categories(value):
    """Treat missing or malformed category arrays as empty."""
    if not isinstance(value, list):
        return []
    cleaned = []
    for item in value:
        if isinstance(item, CategoryTotal):
            cleaned.append(item)
            continue
        if not isinstance(item, dict) or not isinstance(item.get("name"), str):
            continue
        seconds = item.get("seconds", item.get("total_seconds", 0))
        if isinstance(seconds, bool) or not isinstance(seconds, (int, float)):
            seconds = 0
        cleaned.append({"name": item["name"], "seconds": seconds})
    return cleaned


CategoryList = Annotated[List[CategoryTotal], BeforeValidator(_coerce_categories)]


class ExternalDayRecord(CoreModel):
    """One day of tracked activity, already normalized to canonical keys."""
    date: Optional[str] = None
    start: Optional[str] = None
    total_seconds: float = 0.0
    languages: CategoryList = Field(default_factory=list)
    editors: CategoryList = Field(default_factory=list)
    operating_systems: CategoryList = Field(default_factory=list)

    @property
    def day_key(self) -> Optional[str]:
        return self.date or self.start or None


class ProductiveDay(CoreModel):
    date: str
    seconds: float


class RankedCategory(CoreModel):
    name: str
    seconds: float
    percent_of_total: float

    @property
    def hours(self) -> float:
        return self.seconds / 3600


class AggregatedExternalResult(CoreModel):
    total_seconds: float = 0.0
    days_with_data_count: int = 0
    average_seconds_per_day: float = 0.0
    most_productive_day: Optional[ProductiveDay] = None
    languages: List[RankedCategory] = Field(default_factory=list)
    editors: List[RankedCategory] = Field(default_factory=list)
    operating_systems: List[RankedCategory] = Field(default_factory=list)


# Merge / discrepancy

Status = Literal["over", "under", "match"]


class Classification(CoreModel):
    percentage: float
    status: Status


class MergedDayComparison(CoreModel):
    manual_minutes: float
    external_seconds: float
    difference_minutes: float
    percentage_difference: float = 0.0
    status: Status = "match"

    @property
    def manual_hours(self) -> float:
        return self.manual_minutes / 60

    @property
    def external_hours(self) -> float:
        return self.external_seconds / 3600

    @property
    def difference_hours(self) -> float:
        return self.difference_minutes / 60
