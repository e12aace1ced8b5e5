"""
Routes combining the three data sources: CSV import, external tracker
records and manual entries.
"""
from fastapi import APIRouter, Depends
from workhours.core.aggregator import aggregate, daily_breakdown
from workhours.core.merge import merge_and_classify
from workhours.core.types import ExternalDayRecord
from workhours.csv_import import allocate_from_csv, export_daily_hours_csv, parse_csv
from workhours.dependencies import current_request_id, failure
from workhours.errors import ValidationError
from workhours.integrations.wakatime_types import summarize_project
from workhours.models import (
    AggregateRequest,
    ApiResponse,
    CSVExportRequest,
    CSVImportRequest,
    MergeRequest,
)

router = APIRouter(tags=["data"])


@router.post("/csv/import")
async def csv_import(req: CSVImportRequest, req_id: str = Depends(current_request_id)):
    """
    Parse a timesheet CSV into per-date minute totals. When `required` is
    given, also allocate it over the imported date span.
    """
    try:
        result = parse_csv(req.text)
        data = result.model_dump()
        if req.required is not None:
            allocation = allocate_from_csv(result, req.required, req.today)
            data["allocation"] = allocation.model_dump(mode="json", by_alias=True)
    except Exception as e:
        return failure(e, req_id)
    return ApiResponse.success(data=data, request_id=req_id)


@router.post("/csv/export")
async def csv_export(req: CSVExportRequest, req_id: str = Depends(current_request_id)):
    return ApiResponse.success(
        data={"csv": export_daily_hours_csv(req.dailyHours, req.projectName)},
        request_id=req_id,
    )


@router.post("/external/aggregate")
async def external_aggregate(req: AggregateRequest, req_id: str = Depends(current_request_id)):
    """
    Aggregate tracker days. Accepts canonical `records` or a raw
    WakaTime `summary` (which also yields the project-level view).
    """
    try:
        if req.summary is not None:
            project = summarize_project(req.summary, req.projectName or "")
            data = {
                "stats": project.stats.model_dump(by_alias=True),
                "daily": project.daily,
                "project": project.model_dump(by_alias=True, exclude={"stats", "daily"}),
                "days": len(req.summary.get("data") or []),
            }
        elif req.records is not None:
            records = [ExternalDayRecord.model_validate(r) for r in req.records]
            data = {
                "stats": aggregate(records).model_dump(by_alias=True),
                "daily": daily_breakdown(records),
                "days": len(records),
            }
        else:
            raise ValidationError("Provide either 'records' or 'summary'")
    except Exception as e:
        return failure(e, req_id)
    return ApiResponse.success(data=data, request_id=req_id)


@router.post("/merge")
async def merge_sources(req: MergeRequest, req_id: str = Depends(current_request_id)):
    """Per-date manual vs tracked comparison with over/under/match status."""
    merged = merge_and_classify(req.externalHoursByDate, req.manualMinutesByDate)
    data = {
        day: {
            **comparison.model_dump(by_alias=True),
            "manualHours": comparison.manual_hours,
            "externalHours": comparison.external_hours,
            "differenceHours": comparison.difference_hours,
        }
        for day, comparison in merged.items()
    }
    return ApiResponse.success(data=data, request_id=req_id)
