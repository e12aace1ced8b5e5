"""
WakaTime lookups with TTL caching: project names and per-project data.
"""
from fastapi import APIRouter, Body, Depends, Header
from pydantic import ValidationError as PydanticValidationError
from typing import Any, Dict, Optional
import logging
from workhours.config import settings
from workhours.dependencies import current_request_id, failure, get_cache
from workhours.integrations.wakatime_client import WakaTimeAPIError, WakaTimeClient
from workhours.integrations.wakatime_types import ProjectDataRequest
from workhours.models import ApiResponse
from workhours.observability.metrics import wakatime_cache_hits_total, wakatime_requests_total
from workhours.storage import TTLCache

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/wakatime", tags=["wakatime"])


def _client(api_key: Optional[str]) -> WakaTimeClient:
    try:
        return WakaTimeClient(api_key=api_key or settings.WAKATIME_API_KEY)
    except ValueError as e:
        raise WakaTimeAPIError("unauthorized", str(e), 401) from e


def _api_failure(e: Exception, req_id: str) -> ApiResponse:
    if isinstance(e, WakaTimeAPIError):
        wakatime_requests_total.labels(outcome=e.code).inc()
        return ApiResponse.failure(
            code=e.code,
            message=e.message,
            details={"status_code": e.status_code},
            request_id=req_id,
        )
    return failure(e, req_id)


@router.get("/validate")
async def validate_key(
    x_wakatime_key: Optional[str] = Header(None),
    req_id: str = Depends(current_request_id),
):
    try:
        valid = await _client(x_wakatime_key).validate_api_key()
    except Exception as e:
        return _api_failure(e, req_id)
    return ApiResponse.success(data={"valid": valid}, request_id=req_id)


@router.get("/projects")
async def list_projects(
    x_wakatime_key: Optional[str] = Header(None),
    cache: TTLCache = Depends(get_cache),
    req_id: str = Depends(current_request_id),
):
    """Project names, cached for PROJECTS_CACHE_TTL_MINUTES."""
    cached = cache.get("projects")
    if cached is not None:
        wakatime_cache_hits_total.labels(kind="projects").inc()
        return ApiResponse.success(data={"projects": cached, "cached": True}, request_id=req_id)

    try:
        projects = await _client(x_wakatime_key).list_projects()
    except Exception as e:
        return _api_failure(e, req_id)

    wakatime_requests_total.labels(outcome="ok").inc()
    cache.set("projects", projects, settings.PROJECTS_CACHE_TTL_MINUTES)
    return ApiResponse.success(data={"projects": projects, "cached": False}, request_id=req_id)


@router.post("/project-data")
async def project_data(
    payload: Dict[str, Any] = Body(...),
    x_wakatime_key: Optional[str] = Header(None),
    cache: TTLCache = Depends(get_cache),
    req_id: str = Depends(current_request_id),
):
    """
    Summary and hours-per-day for one project over a date range.
    Cached per (project, start, end) for SUMMARY_CACHE_TTL_MINUTES.
    """
    try:
        req = ProjectDataRequest.model_validate(payload)
    except PydanticValidationError as e:
        return failure(e, req_id)

    cache_key = f"{req.projectName}_{req.startDate}_{req.endDate}"
    cached = cache.get(cache_key)
    if cached is not None:
        wakatime_cache_hits_total.labels(kind="project_data").inc()
        return ApiResponse.success(data={**cached, "cached": True}, request_id=req_id)

    try:
        result, daily = await _client(x_wakatime_key).get_project_data(
            req.projectName, req.startDate, req.endDate
        )
    except Exception as e:
        return _api_failure(e, req_id)

    wakatime_requests_total.labels(outcome="ok").inc()
    data = {
        "result": result.model_dump(by_alias=True, exclude={"daily"}),
        "dailyData": daily,
        "completedMinutes": result.total_hours * 60 + result.total_minutes,
    }
    cache.set(cache_key, data, settings.SUMMARY_CACHE_TTL_MINUTES)
    logger.info(
        f"Fetched WakaTime data for {req.projectName}: {result.digital_time} over {len(daily)} days"
    )
    return ApiResponse.success(data={**data, "cached": False}, request_id=req_id)
