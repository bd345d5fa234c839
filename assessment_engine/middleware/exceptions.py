from fastapi import Request
from starlette.exceptions import HTTPException
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from assessment_engine.schemas.response import ErrorResponse, ErrorDetail
from assessment_engine.utils.clock import utcnow
import logging
import uuid

logger = logging.getLogger(__name__)

def _get_error_code(status_code: int) -> str:
    code_map = {
        400: "BAD_REQUEST",
        401: "UNAUTHORIZED",
        403: "FORBIDDEN",
        404: "NOT_FOUND",
        409: "CONFLICT",
        422: "VALIDATION_ERROR",
        423: "LOCKED",
        500: "INTERNAL_SERVER_ERROR",
        501: "NOT_IMPLEMENTED",
    }
    return code_map.get(status_code, f"HTTP_{status_code}")

def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", None) or str(uuid.uuid4())

def _error_response(request: Request, request_id: str, detail: ErrorDetail) -> dict:
    return ErrorResponse(
        error=detail,
        timestamp=utcnow().isoformat(),
        path=str(request.url),
        request_id=request_id
    ).model_dump()

async def validation_exception_handler(request: Request, exc: RequestValidationError):
    request_id = _request_id(request)
    content = _error_response(request, request_id, ErrorDetail(
        code="VALIDATION_ERROR",
        message="Request validation failed",
        details={"validation_errors": jsonable_encoder(exc.errors())}
    ))
    logger.warning(f"[{request_id}] Validation error: {exc.errors()}", extra={"request_id": request_id})
    return JSONResponse(status_code=422, content=content)

async def http_exception_handler(request: Request, exc: HTTPException):
    request_id = _request_id(request)
    # service failures carry their own code, plain HTTP errors get one from the status
    if isinstance(exc.detail, dict) and "code" in exc.detail:
        detail = ErrorDetail(
            code=exc.detail["code"],
            message=exc.detail.get("message") or "",
            details=exc.detail.get("details")
        )
    else:
        detail = ErrorDetail(
            code=_get_error_code(exc.status_code),
            message=exc.detail if isinstance(exc.detail, str) else str(exc.detail)
        )
    logger.warning(f"[{request_id}] HTTP {exc.status_code}: {detail.code} {detail.message}", extra={"request_id": request_id})
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_response(request, request_id, detail),
        headers=getattr(exc, "headers", None)
    )

async def global_exception_handler(request: Request, exc: Exception):
    if isinstance(exc, HTTPException):
        return await http_exception_handler(request, exc)

    request_id = _request_id(request)
    content = _error_response(request, request_id, ErrorDetail(
        code="INTERNAL_SERVER_ERROR",
        message="An unexpected error occurred",
        details={"error_type": type(exc).__name__}
    ))
    logger.error(f"[{request_id}] Unhandled exception: {exc}", exc_info=True, extra={"request_id": request_id})
    return JSONResponse(status_code=500, content=content)
