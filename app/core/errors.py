"""
Central error handling for the Leave Ledger backend

Domain exceptions raised by the engine live here next to the FastAPI handlers
that turn them into the common JSON error body.
"""
import logging
import traceback

from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi import HTTPException

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "*",
    "Access-Control-Allow-Headers": "*",
}

# Reason surfaced when the store cannot be read in time (fail closed)
BALANCE_NOT_VERIFIED = "balance could not be verified"


class LeaveEngineError(Exception):
    """Base class for leave engine errors"""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class LeaveValidationError(LeaveEngineError):
    """A request failed a policy check. The reason is shown to the submitter verbatim."""

    status_code = status.HTTP_400_BAD_REQUEST


class ConfigurationError(LeaveEngineError):
    """
    Employee has no usable policy group, or the group has no record for the
    requested leave type. Callers log it and continue without balance enforcement.
    """

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class DataAccessError(LeaveEngineError):
    """The policy or application store could not be read or written."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    def __init__(self, reason: str = BALANCE_NOT_VERIFIED):
        super().__init__(reason)


class ConcurrentSubmissionError(DataAccessError):
    """Another write for the same employee and leave type won the ledger counter."""

    status_code = status.HTTP_409_CONFLICT

    def __init__(self, reason: str = "concurrent update on the same leave balance, please retry"):
        super().__init__(reason)


class InvalidTransitionError(LeaveEngineError):
    """Workflow decision attempted on an application that is no longer Pending."""

    status_code = status.HTTP_409_CONFLICT


def _error_body(status_code: int, detail, request: Request) -> dict:
    return {
        "error": True,
        "status_code": status_code,
        "detail": detail,
        "path": str(request.url.path)
    }


async def leave_engine_exception_handler(request: Request, exc: LeaveEngineError) -> JSONResponse:
    """
    Handle leave engine errors

    Validation reasons are returned verbatim so the submitter can correct the request.
    """
    if isinstance(exc, DataAccessError):
        logger.warning("Leave store unavailable on %s: %s", request.url.path, exc.reason)
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(exc.status_code, exc.reason, request),
        headers=CORS_HEADERS,
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """
    Handle HTTPException with consistent JSON response format

    Args:
        request: FastAPI request object
        exc: HTTPException instance

    Returns:
        JSONResponse with error details
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(exc.status_code, exc.detail, request),
        headers=CORS_HEADERS,
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Handle RequestValidationError with consistent JSON response format

    Does not leak internal validation details in production.
    """
    from app.core.config import settings

    if settings.APP_ENV == "prod":
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=_error_body(422, "Validation error: Invalid request data", request)
        )

    # Sanitize for JSON: e.g. ctx.error ValueError -> str
    errors = []
    for e in exc.errors():
        err = dict(e)
        if "ctx" in err and isinstance(err["ctx"], dict):
            err["ctx"] = {
                k: (str(v) if not isinstance(v, (str, int, float, bool, type(None))) else v)
                for k, v in err["ctx"].items()
            }
        errors.append(err)
    content = _error_body(422, "Validation error", request)
    content["errors"] = errors
    return JSONResponse(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, content=content)


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle unexpected exceptions with consistent JSON response format

    Does not leak internal error details in production.
    """
    from app.core.config import settings

    logger.error("Unhandled exception: %s", exc, exc_info=True)

    if settings.APP_ENV == "prod":
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error_body(500, "Internal server error", request),
            headers=CORS_HEADERS,
        )

    content = _error_body(500, str(exc), request)
    content["traceback"] = traceback.format_exc() if settings.APP_ENV == "local" else None
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=content,
        headers=CORS_HEADERS,
    )
