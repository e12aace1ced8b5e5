"""
Pydantic models for WakaTime API types and the mapping of summaries
onto canonical ExternalDayRecord values.
Minimal subset based on the endpoints we call.
"""
from __future__ import annotations
from datetime import date
from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import Any, Dict, List, Optional

from workhours.core.aggregator import aggregate, daily_breakdown
from workhours.core.types import AggregatedExternalResult, CoreModel, ExternalDayRecord
from workhours.errors import ValidationError


class WakaTimeUser(BaseModel):
    """Current user (/users/current)."""
    model_config = ConfigDict(extra="ignore")
    id: str
    username: Optional[str] = None
    display_name: Optional[str] = None
    timezone: Optional[str] = None


class WakaTimeProject(BaseModel):
    """Project entry (/users/current/projects)."""
    model_config = ConfigDict(extra="ignore")
    id: Optional[str] = None
    name: str
    created_at: Optional[str] = None
    last_heartbeat_at: Optional[str] = None


class ProjectDataRequest(BaseModel):
    """Request parameters for fetching project data."""
    model_config = ConfigDict(str_strip_whitespace=True)
    projectName: str = Field(min_length=1)
    startDate: date
    endDate: date

    @model_validator(mode="after")
    def check_range(self) -> "ProjectDataRequest":
        if self.endDate < self.startDate:
            raise ValueError("End date must be after start date")
        if self.startDate > date.today():
            raise ValueError("Start date cannot be in the future")
        return self


def record_from_wakatime_day(day: Dict[str, Any]) -> ExternalDayRecord:
    """Map one element of a summaries `data` array onto the canonical record."""
    grand_total = day.get("grand_total")
    seconds = 0.0
    if isinstance(grand_total, dict):
        value = grand_total.get("total_seconds")
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            seconds = float(value)

    rng = day.get("range") if isinstance(day.get("range"), dict) else {}

    return ExternalDayRecord(
        date=rng.get("date") or None,
        start=rng.get("start") or None,
        total_seconds=seconds,
        languages=day.get("languages"),
        editors=day.get("editors"),
        operating_systems=day.get("operating_systems"),
    )


def records_from_summary(summary: Any) -> List[ExternalDayRecord]:
    if not isinstance(summary, dict) or not isinstance(summary.get("data"), list):
        raise ValidationError("Invalid API response structure: expected a 'data' list")
    return [record_from_wakatime_day(day) for day in summary["data"] if isinstance(day, dict)]


class ProjectSummary(CoreModel):
    """Project-level view of a summaries response."""
    project_name: str
    total_seconds: float
    total_hours: int
    total_minutes: int
    digital_time: str
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    stats: AggregatedExternalResult
    daily: Dict[str, float] = Field(default_factory=dict)


def summarize_project(summary: Dict[str, Any], project_name: str) -> ProjectSummary:
    records = records_from_summary(summary)
    stats = aggregate(records)
    total = stats.total_seconds
    hours = int(total // 3600)
    minutes = int((total % 3600) // 60)
    return ProjectSummary(
        project_name=project_name,
        total_seconds=total,
        total_hours=hours,
        total_minutes=minutes,
        digital_time=f"{hours}h {minutes}m",
        start_date=summary.get("start"),
        end_date=summary.get("end"),
        stats=stats,
        daily=daily_breakdown(records),
    )
