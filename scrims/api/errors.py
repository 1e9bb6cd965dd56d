"""
Mapping from service outcomes to HTTP responses.

This is the only place that knows which status code an ErrorKind becomes.
"""

from typing import TypeVar

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from scrims.kernel.errors import Err, ErrorKind, Ok, Outcome
from scrims.logging_config import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

INTERNAL_MESSAGE = "An internal error occurred."

STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.INVALID_ARGUMENT: status.HTTP_400_BAD_REQUEST,
    ErrorKind.ALREADY_EXISTS: status.HTTP_409_CONFLICT,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.INVALID_CREDENTIALS: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

_unmapped = set(ErrorKind) - set(STATUS_BY_KIND)
if _unmapped:
    raise RuntimeError(f"ErrorKind without HTTP status: {sorted(k.value for k in _unmapped)}")


def http_error(err: Err) -> HTTPException:
    """Translate an Err into the HTTPException the client will see."""
    status_code = STATUS_BY_KIND[err.kind]
    if err.kind is ErrorKind.INTERNAL:
        logger.error("Internal error: %s", err.message)
        return HTTPException(status_code=status_code, detail=INTERNAL_MESSAGE)
    return HTTPException(status_code=status_code, detail=err.message)


def unwrap(outcome: Outcome[T]) -> T:
    """Return the value of an Ok, or raise the HTTP error for an Err."""
    if isinstance(outcome, Ok):
        return outcome.value
    raise http_error(outcome)


def _error_body(request: Request, status_code: int, message: str, **extra) -> dict:
    body = {"statusCode": status_code, "message": message, **extra}
    req_id = getattr(request.state, "request_id", None)
    if req_id:
        body["requestId"] = req_id
    return body


def install_exception_handlers(app: FastAPI) -> None:
    """Register the JSON error handlers on an application."""

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(request, exc.status_code, str(exc.detail)),
            headers=exc.headers,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = []
        for error in exc.errors():
            field = ".".join(str(loc) for loc in error["loc"])
            errors.append({
                "field": field,
                "message": error["msg"],
                "type": error["type"],
            })
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_error_body(
                request, status.HTTP_400_BAD_REQUEST, "Validation error", errors=errors
            ),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error_body(request, status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_MESSAGE),
        )
