"""
Error taxonomy and the result type returned by the domain services.

Services never raise for expected outcomes (forbidden, not found, state
conflicts): they return ``Ok(value)`` or ``Failure(code, message)``. Routes
call ``unwrap`` which turns a Failure into an ``ApiError`` at the HTTP edge.
"""
import enum
import logging
from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ErrorCode(str, enum.Enum):
    AUTH_INVALID_CREDENTIALS = "AUTH_INVALID_CREDENTIALS"
    AUTH_UNAUTHORIZED = "AUTH_UNAUTHORIZED"
    TRIP_FORBIDDEN = "TRIP_FORBIDDEN"
    TRIP_NOT_FOUND = "TRIP_NOT_FOUND"
    INVITE_NOT_FOUND = "INVITE_NOT_FOUND"
    INVITE_FORBIDDEN = "INVITE_FORBIDDEN"
    INVITE_ALREADY_ACCEPTED = "INVITE_ALREADY_ACCEPTED"
    MEMBER_NOT_FOUND = "MEMBER_NOT_FOUND"
    ITEM_NOT_FOUND = "ITEM_NOT_FOUND"
    ITEM_FORBIDDEN = "ITEM_FORBIDDEN"
    VOTE_CONFLICT = "VOTE_CONFLICT"
    VOTE_NOT_FOUND = "VOTE_NOT_FOUND"
    SHARE_INVALID = "SHARE_INVALID"
    SHARE_MAXED = "SHARE_MAXED"
    SHARE_EXPIRED = "SHARE_EXPIRED"
    NOT_FOUND = "NOT_FOUND"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    RATE_LIMITED = "RATE_LIMITED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


DEFAULT_STATUS = {
    ErrorCode.AUTH_INVALID_CREDENTIALS: 401,
    ErrorCode.AUTH_UNAUTHORIZED: 401,
    ErrorCode.TRIP_FORBIDDEN: 403,
    ErrorCode.TRIP_NOT_FOUND: 404,
    ErrorCode.INVITE_NOT_FOUND: 404,
    ErrorCode.INVITE_FORBIDDEN: 403,
    ErrorCode.INVITE_ALREADY_ACCEPTED: 409,
    ErrorCode.MEMBER_NOT_FOUND: 404,
    ErrorCode.ITEM_NOT_FOUND: 404,
    ErrorCode.ITEM_FORBIDDEN: 403,
    ErrorCode.VOTE_CONFLICT: 409,
    ErrorCode.VOTE_NOT_FOUND: 404,
    ErrorCode.SHARE_INVALID: 404,
    ErrorCode.SHARE_MAXED: 403,
    ErrorCode.SHARE_EXPIRED: 403,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.VALIDATION_ERROR: 400,
    ErrorCode.RATE_LIMITED: 429,
    ErrorCode.INTERNAL_ERROR: 500,
}


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Failure:
    code: ErrorCode
    message: str
    details: dict[str, Any] | None = None
    # 409 para conflictos de estado con VALIDATION_ERROR (invite pendiente, email tomado)
    status: int | None = None

    @property
    def status_code(self) -> int:
        return self.status or DEFAULT_STATUS[self.code]


Result = Union[Ok[T], Failure]


def conflict(message: str, **details) -> Failure:
    return Failure(ErrorCode.VALIDATION_ERROR, message, details or None, status=409)


def invalid(message: str, **details) -> Failure:
    return Failure(ErrorCode.VALIDATION_ERROR, message, details or None)


class ApiError(HTTPException):
    def __init__(self, failure: Failure, headers: dict[str, str] | None = None):
        super().__init__(status_code=failure.status_code, detail=failure.message, headers=headers)
        self.failure = failure


def unwrap(result: Result[T]) -> T:
    if isinstance(result, Failure):
        raise ApiError(result)
    return result.value


def error_body(code: ErrorCode | str, message: str, details: Any = None) -> dict:
    err: dict[str, Any] = {"code": getattr(code, "value", code), "message": message}
    if details:
        err["details"] = details
    return {"error": err}


async def _api_error_handler(request: Request, exc: ApiError):
    f = exc.failure
    logger.warning("%s %s -> %s %s: %s", request.method, request.url.path, f.status_code, f.code.value, f.message)
    return JSONResponse(
        status_code=f.status_code,
        content=error_body(f.code, f.message, f.details),
        headers=exc.headers,
    )


async def _http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 401:
        code = ErrorCode.AUTH_UNAUTHORIZED
    elif exc.status_code == 404:
        code = ErrorCode.NOT_FOUND
    elif exc.status_code >= 500:
        code = ErrorCode.INTERNAL_ERROR
    else:
        code = ErrorCode.VALIDATION_ERROR
    logger.warning("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(code, str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


_REQUEST_PARTS = ("body", "query", "path", "header", "cookie")


def _field_name(loc) -> str:
    # ("body", "items", 0, "title") -> "items.0.title"
    if loc and loc[0] in _REQUEST_PARTS:
        loc = loc[1:]
    return ".".join(str(p) for p in loc)


async def _validation_error_handler(request: Request, exc: RequestValidationError):
    details = [
        {"field": _field_name(e.get("loc", ())), "message": e.get("msg")}
        for e in exc.errors()
    ]
    logger.warning("%s %s -> 400 VALIDATION_ERROR", request.method, request.url.path)
    return JSONResponse(
        status_code=400,
        content=error_body(ErrorCode.VALIDATION_ERROR, "Validation failed", details),
    )


async def _unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content=error_body(ErrorCode.INTERNAL_ERROR, "Unexpected error"))


def install_error_handlers(app) -> None:
    app.add_exception_handler(ApiError, _api_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)
