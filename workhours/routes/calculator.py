from fastapi import APIRouter, Depends
from workhours.charts import build_charts
from workhours.config import settings
from workhours.core.allocation import compute_allocation_from_strings
from workhours.core.timecodec import (
    format_currency,
    format_minutes,
    parse_lenient,
    parse_strict,
    sum_time_strings,
)
from workhours.core.types import AllocationResult
from workhours.dependencies import current_request_id, failure
from workhours.errors import FormatError, ValidationError
from workhours.models import (
    AllocationRequest,
    ApiResponse,
    ChartsRequest,
    FormatMinutesRequest,
    ParseTimeRequest,
    TimeText,
)
from workhours.observability.metrics import time_parse_failures_total

router = APIRouter(tags=["calculator"])


def _allocate(req: AllocationRequest) -> AllocationResult:
    return compute_allocation_from_strings(
        req.total,
        req.completed,
        req.billingStart,
        req.billingEnd,
        skip_sunday=req.skipSunday,
        skip_saturday=req.skipSaturday,
        exclude_today=req.excludeToday,
        hourly_rate=req.hourlyRate,
        today=req.today,
    )


def _formatted(result: AllocationResult) -> dict:
    def money(amount: float) -> str:
        return format_currency(amount, settings.CURRENCY_SYMBOL)

    out = {
        "total": format_minutes(result.total_minutes),
        "completed": format_minutes(result.completed_minutes),
        "remaining": format_minutes(result.remaining_minutes),
        "perWorkday": format_minutes(result.per_workday_minutes),
    }
    if result.hourly_rate > 0:
        out.update(
            totalEarnings=money(result.total_earnings),
            completedEarnings=money(result.completed_earnings),
            remainingEarnings=money(result.remaining_earnings),
            perWorkdayEarnings=money(result.per_workday_earnings),
        )
    return out


@router.post("/time/parse")
async def parse_time(req: ParseTimeRequest, req_id: str = Depends(current_request_id)):
    """Parse "H hrs M mins" into minutes (strict by default)."""
    parser = parse_strict if req.strict else parse_lenient
    try:
        minutes = parser(req.text)
    except FormatError as e:
        time_parse_failures_total.labels(variant="strict" if req.strict else "lenient").inc()
        return failure(e, req_id)
    return ApiResponse.success(
        data={"minutes": minutes, "formatted": format_minutes(minutes)},
        request_id=req_id,
    )


@router.post("/time/format")
async def format_time(req: FormatMinutesRequest, req_id: str = Depends(current_request_id)):
    try:
        text = format_minutes(req.minutes)
    except ValidationError as e:
        return failure(e, req_id)
    return ApiResponse.success(data={"text": text}, request_id=req_id)


@router.post("/time/sum")
async def sum_times(req: TimeText, req_id: str = Depends(current_request_id)):
    """Sum one time string per line; unparseable lines are ignored."""
    minutes = sum_time_strings(req.text)
    return ApiResponse.success(
        data={"minutes": minutes, "formatted": format_minutes(minutes)},
        request_id=req_id,
    )


@router.post("/allocation")
async def allocation(req: AllocationRequest, req_id: str = Depends(current_request_id)):
    """Spread the remaining hours over the remaining workdays of the period."""
    try:
        result = _allocate(req)
    except Exception as e:
        return failure(e, req_id)
    return ApiResponse.success(
        data={**result.model_dump(mode="json", by_alias=True), "formatted": _formatted(result)},
        request_id=req_id,
    )


@router.post("/charts")
async def charts(req: ChartsRequest, req_id: str = Depends(current_request_id)):
    """Chart series for an allocation, optionally against imported actuals."""
    try:
        result = _allocate(req)
    except Exception as e:
        return failure(e, req_id)
    return ApiResponse.success(
        data=build_charts(result, req.actualsByDate, req.rows),
        request_id=req_id,
    )
