import logging
from enum import Enum

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ErrorKind(str, Enum):
    VALIDATION = "VALIDATION"
    STATE = "STATE"
    NOT_FOUND = "NOT_FOUND"
    FORBIDDEN = "FORBIDDEN"
    CONFLICT = "CONFLICT"
    UPSTREAM = "UPSTREAM"


class BookingError(Exception):
    """Base class for booking domain errors. `kind` tags the failure."""

    kind: ErrorKind | None = None

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(BookingError):
    kind = ErrorKind.VALIDATION


class StateError(BookingError):
    kind = ErrorKind.STATE


class NotFoundError(BookingError):
    kind = ErrorKind.NOT_FOUND


class ForbiddenError(NotFoundError):
    # reported to callers as not-found so existence is not disclosed
    kind = ErrorKind.FORBIDDEN


class ConflictError(NotFoundError):
    kind = ErrorKind.CONFLICT


class UpstreamError(BookingError):
    kind = ErrorKind.UPSTREAM

    def __init__(self, message: str, status_code: int = status.HTTP_502_BAD_GATEWAY):
        super().__init__(message)
        self.status_code = status_code


_STATUS_BY_KIND = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.STATE: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.FORBIDDEN: status.HTTP_404_NOT_FOUND,
    ErrorKind.CONFLICT: status.HTTP_404_NOT_FOUND,
}


def http_status_for(exc: BookingError) -> int:
    if isinstance(exc, UpstreamError):
        return exc.status_code
    return _STATUS_BY_KIND.get(exc.kind, status.HTTP_500_INTERNAL_SERVER_ERROR)


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(BookingError)
    async def booking_error_handler(request: Request, exc: BookingError) -> JSONResponse:
        status_code = http_status_for(exc)
        # masked kinds keep a not-found code on the wire
        code = ErrorKind.NOT_FOUND if status_code == status.HTTP_404_NOT_FOUND else exc.kind
        logger.warning(
            "%s %s failed: %s (%s)",
            request.method,
            request.url.path,
            exc.message,
            exc.kind.value if exc.kind else "UNKNOWN",
        )
        return JSONResponse(
            status_code=status_code,
            content={"detail": exc.message, "code": code.value if code else "ERROR"},
        )
