"""
Error taxonomy for the work hours core.
"""
from typing import Any, Dict, Optional


class WorkHoursError(Exception):
    """Base exception carrying a machine code and a human-readable message."""
    code = "internal_error"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details
        super().__init__(message)


class FormatError(WorkHoursError):
    """Malformed "H hrs M mins" time string."""
    code = "format_error"


class ValidationError(WorkHoursError):
    """Semantically invalid input, e.g. a non-finite number or a bad date."""
    code = "validation_error"
