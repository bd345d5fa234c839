from fastapi import HTTPException, status

from assessment_engine.core.constants import ErrorCode
from assessment_engine.schemas.response import ActionResult

_STATUS_BY_CODE = {
    ErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.ALREADY_COMPLETED: status.HTTP_409_CONFLICT,
    ErrorCode.MAX_ATTEMPTS_REACHED: status.HTTP_409_CONFLICT,
    ErrorCode.INVALID_STATE: status.HTTP_409_CONFLICT,
    ErrorCode.NOT_SCORED: status.HTTP_409_CONFLICT,
    ErrorCode.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorCode.NOT_PUBLISHED: status.HTTP_403_FORBIDDEN,
    ErrorCode.INVALID_ACCESS_CODE: status.HTTP_403_FORBIDDEN,
    ErrorCode.NOT_YET_OPEN: status.HTTP_403_FORBIDDEN,
    ErrorCode.CLOSED: status.HTTP_403_FORBIDDEN,
    ErrorCode.QUESTION_NOT_IN_SESSION: status.HTTP_400_BAD_REQUEST,
    ErrorCode.NO_QUESTIONS_AVAILABLE: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorCode.VALIDATION_ERROR: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorCode.COOLDOWN_ACTIVE: status.HTTP_423_LOCKED,
}


def http_status_for(code: ErrorCode) -> int:
    return _STATUS_BY_CODE.get(code, status.HTTP_400_BAD_REQUEST)


def unwrap(result: ActionResult):
    """Return the payload of a successful result, or raise it as an HTTP error."""
    if result.ok:
        return result.data
    raise HTTPException(
        status_code=http_status_for(result.code),
        detail={
            "code": result.code.value,
            "message": result.error,
            "details": result.details,
        },
    )
