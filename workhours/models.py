from datetime import date
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional


class TimeText(BaseModel):
    text: str = ""


class ParseTimeRequest(TimeText):
    strict: bool = True


class CSVImportRequest(TimeText):
    """Timesheet CSV text; with `required` an allocation over its dates is added."""
    required: Optional[str] = None
    today: Optional[date] = None


class FormatMinutesRequest(BaseModel):
    minutes: float


class AllocationRequest(BaseModel):
    total: str
    completed: str = "0 hrs 0 mins"
    billingStart: str
    billingEnd: str
    skipSunday: bool = False
    skipSaturday: bool = False
    excludeToday: bool = False
    hourlyRate: float = 0
    today: Optional[date] = None


class ChartsRequest(AllocationRequest):
    actualsByDate: Dict[str, float] = Field(default_factory=dict)
    rows: List[Dict[str, Any]] = Field(default_factory=list)


class CSVExportRequest(BaseModel):
    dailyHours: Dict[str, float] = Field(default_factory=dict)
    projectName: str = "project"


class AggregateRequest(BaseModel):
    """Either canonical records or a raw WakaTime summaries payload."""
    records: Optional[List[Dict[str, Any]]] = None
    summary: Optional[Dict[str, Any]] = None
    projectName: Optional[str] = None


class MergeRequest(BaseModel):
    externalHoursByDate: Dict[str, float] = Field(default_factory=dict)
    manualMinutesByDate: Dict[str, float] = Field(default_factory=dict)


# API Response Envelopes
class ApiError(BaseModel):
    """Structured error response."""
    code: str
    message: str
    details: Optional[Dict[str, Any]] = None


class ApiResponse(BaseModel):
    """Standard API response envelope."""
    ok: bool
    data: Optional[Any] = None
    error: Optional[ApiError] = None
    requestId: str = ""

    @classmethod
    def success(cls, data: Any = None, request_id: str = "") -> "ApiResponse":
        """Create a success response."""
        return cls(ok=True, data=data, requestId=request_id)

    @classmethod
    def failure(
        cls,
        code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        request_id: str = "",
    ) -> "ApiResponse":
        """Create an error response."""
        return cls(
            ok=False,
            error=ApiError(code=code, message=message, details=details),
            requestId=request_id,
        )
