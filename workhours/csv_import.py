"""
CSV timesheet import and export.

Rows look like: Date,Task,Category,HRS,MINS. Header casing varies between
exports, so each field is looked up under its known spellings first.
"""
from __future__ import annotations
import csv
import io
import logging
import math
from datetime import date, datetime
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, Field

from workhours.core.allocation import compute_allocation
from workhours.core.timecodec import parse_time_string
from workhours.core.types import AllocationResult
from workhours.errors import FormatError, ValidationError

logger = logging.getLogger(__name__)

CSV_HEADERS = ["Date", "Task", "Category", "HRS", "MINS"]

DATE_KEYS = ("Date", "date", "DATE")
HOURS_KEYS = ("HRS", "Hrs", "hrs")
MINUTES_KEYS = ("MINS", "Mins", "mins")
TASK_KEYS = ("Task", "task")
CATEGORY_KEYS = ("Category", "category")

_DATE_FORMATS = ("%Y-%m-%d", "%m/%d/%Y", "%d %b %Y", "%b %d %Y", "%a %b %d %Y")


class CSVRow(BaseModel):
    date: str
    task: str = ""
    category: str = ""
    hrs: float = 0
    mins: float = 0

    @property
    def minutes(self) -> int:
        return int(math.floor(self.hrs)) * 60 + int(math.floor(self.mins))


class GroupedDate(BaseModel):
    date: str
    minutes: int = 0
    rows: List[CSVRow] = Field(default_factory=list)


class CSVImportResult(BaseModel):
    actualsByDate: Dict[str, int] = Field(default_factory=dict)
    parsedRows: List[Dict[str, Any]] = Field(default_factory=list)
    grouped: List[GroupedDate] = Field(default_factory=list)


def first_value(row: Mapping[str, Any], keys) -> Any:
    for key in keys:
        value = row.get(key)
        if value is not None and value != "":
            return value
    return None


def to_number(value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def parse_row_date(value: Any) -> Optional[date]:
    text = str(value).strip()
    if not text:
        return None
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def normalize_row(row: Mapping[str, Any]) -> Optional[CSVRow]:
    """Canonical row, or None when the date is missing or unparseable."""
    raw_date = first_value(row, DATE_KEYS)
    if raw_date is None:
        return None
    day = parse_row_date(raw_date)
    if day is None:
        return None
    return CSVRow(
        date=day.isoformat(),
        task=str(first_value(row, TASK_KEYS) or ""),
        category=str(first_value(row, CATEGORY_KEYS) or ""),
        hrs=to_number(first_value(row, HOURS_KEYS)),
        mins=to_number(first_value(row, MINUTES_KEYS)),
    )


def parse_csv(text: str) -> CSVImportResult:
    reader = csv.DictReader(io.StringIO(text.strip()))
    parsed_rows: List[Dict[str, Any]] = []
    grouped: Dict[str, GroupedDate] = {}
    skipped = 0

    for raw in reader:
        if not any((v or "").strip() for v in raw.values() if isinstance(v, str)):
            continue
        parsed_rows.append({k: v for k, v in raw.items() if k is not None})
        row = normalize_row(raw)
        if row is None:
            skipped += 1
            continue
        group = grouped.setdefault(row.date, GroupedDate(date=row.date))
        group.minutes += row.minutes
        group.rows.append(row)

    if skipped:
        logger.debug(f"Skipped {skipped} CSV row(s) without a usable date")

    ordered = [grouped[key] for key in sorted(grouped)]
    return CSVImportResult(
        actualsByDate={g.date: g.minutes for g in ordered},
        parsedRows=parsed_rows,
        grouped=ordered,
    )


def parse_required_minutes(text: Optional[str]) -> int:
    """A bare whole number means hours ("160"); anything else is a time string."""
    cleaned = (text or "").strip()
    if not cleaned:
        raise ValidationError("Enter the required hours, e.g. '160' or '160 hrs 0 mins'")
    if cleaned.isdigit():
        return int(cleaned) * 60
    try:
        return parse_time_string(cleaned)
    except FormatError as e:
        raise FormatError(
            "Required hours format invalid. Use '160' or '160 hrs 0 mins'"
        ) from e


def allocate_from_csv(
    result: CSVImportResult,
    required: Optional[str],
    today: Optional[date] = None,
) -> AllocationResult:
    """
    Allocation over the span of the imported dates: completed is the sum of
    the imported minutes and every day in the span counts, weekends included.
    """
    if not result.actualsByDate:
        raise ValidationError("CSV contains no rows with a usable date")
    required_minutes = parse_required_minutes(required)
    keys = sorted(result.actualsByDate)
    return compute_allocation(
        required_minutes,
        sum(result.actualsByDate.values()),
        date.fromisoformat(keys[0]),
        date.fromisoformat(keys[-1]),
        today=today,
        full_period=True,
    )


def export_daily_hours_csv(daily_hours: Mapping[str, float], project_name: str) -> str:
    """One row per date, in date order, as Development work on the project."""
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for day in sorted(daily_hours):
        hours = daily_hours[day]
        whole = int(math.floor(hours))
        minutes = int(math.floor((hours - whole) * 60 + 0.5))
        writer.writerow([day, f"WakaTime - {project_name}", "Development", whole, minutes])
    return buf.getvalue().rstrip("\n")
