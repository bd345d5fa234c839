from pydantic import BaseModel, Field
from typing import Generic, TypeVar, Optional, Any, Dict

from assessment_engine.core.constants import ErrorCode

DataType = TypeVar("DataType")

class APIResponse(BaseModel, Generic[DataType]):
    """Generic API response model for consistent output."""
    message: str = Field(..., description="A human-readable message about the response.")
    data: Optional[DataType] = Field(None, description="The actual data returned by the API, if any.")

class ErrorDetail(BaseModel):
    """Standardized error detail model."""
    code: str = Field(..., description="Error code for client handling")
    message: str = Field(..., description="Human-readable error message")
    details: Optional[Dict[str, Any]] = Field(None, description="Additional error context")

class ErrorResponse(BaseModel):
    """Standardized error response model."""
    error: ErrorDetail = Field(..., description="Error details")
    timestamp: str = Field(..., description="ISO 8601 timestamp of error")
    path: str = Field(..., description="Request path that caused the error")
    request_id: Optional[str] = Field(None, description="Unique request identifier for debugging")

class ActionResult(BaseModel, Generic[DataType]):
    """
    Tagged outcome of a service operation.

    Expected failures (eligibility, stale session state, permissions) are
    returned with ``ok=False`` and a machine-readable ``code`` instead of being
    raised. Only infrastructure faults escape as exceptions.
    """
    ok: bool
    data: Optional[DataType] = None
    error: Optional[str] = None
    code: Optional[ErrorCode] = None
    details: Optional[Dict[str, Any]] = None

    @classmethod
    def success(cls, data: Any = None) -> "ActionResult":
        return cls(ok=True, data=data)

    @classmethod
    def failure(cls, code: ErrorCode, error: str, details: Optional[Dict[str, Any]] = None) -> "ActionResult":
        return cls(ok=False, code=code, error=error, details=details)
