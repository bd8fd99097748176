"""
Postboard API error responses.

Validation failures use an ``{"errors": [{"msg", "param", "location"}]}`` body,
single-message failures a ``{"msg": ...}`` body, and server faults a plain
``Server Error`` text so that nothing internal leaks to the caller.
"""
import re
from contextlib import contextmanager
from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
from typing import Dict, List, Optional

from .logging_config import api_logger

SERVER_ERROR_TEXT = "Server Error"


# ============================================================
# ERROR RESPONSES
# ============================================================

class ApiException(HTTPException):
    """HTTP error carrying either a message or a list of field errors"""

    def __init__(
        self,
        status_code: int,
        message: str,
        errors: Optional[List[Dict]] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.errors = errors
        super().__init__(status_code=status_code, detail=message, headers=headers)


def field_error(msg: str, param: str = None, location: str = None) -> Dict:
    """Build one item of an ``errors`` list."""
    error = {"msg": msg}
    if param is not None:
        error["param"] = param
    if location is not None:
        error["location"] = location
    return error


def validation_errors(errors: List[Dict]):
    raise ApiException(400, errors[0]["msg"], errors)

def bad_request(message: str):
    raise ApiException(400, message, [field_error(message)])

def invalid_id():
    raise ApiException(400, "Invalid ID")

def unauthorized(message: str = "User not authorized"):
    raise ApiException(401, message)

def duplicate(message: str):
    raise ApiException(401, message, [field_error(message)])

def not_found(message: str):
    raise ApiException(404, message)

def server_error():
    raise ApiException(500, SERVER_ERROR_TEXT)


# ============================================================
# VALIDATION HELPERS
# ============================================================

def require(values: Dict[str, Optional[str]], messages: Dict[str, str], location: str = "body"):
    """Collect an error for every missing or empty field and raise them together."""
    errors = [
        field_error(messages[name], name, location)
        for name, value in values.items()
        if value is None or value == ""
    ]
    if errors:
        validation_errors(errors)


OBJECT_ID = re.compile(r"^[0-9a-f]{32}$")


def require_valid_id(id: str) -> str:
    """Reject identifiers that could never name a stored record"""
    if not id or not OBJECT_ID.match(id):
        invalid_id()
    return id


# ============================================================
# EXCEPTION HANDLERS
# ============================================================

def _error_body(status_code: int, message: str, errors: Optional[List[Dict]]):
    if status_code >= 500:
        return PlainTextResponse(SERVER_ERROR_TEXT, status_code=status_code)
    if errors is not None:
        return JSONResponse(status_code=status_code, content={"errors": errors})
    return JSONResponse(status_code=status_code, content={"msg": message})


async def api_exception_handler(request: Request, exc: StarletteHTTPException):
    """Render ApiException and plain HTTPException errors"""
    errors = getattr(exc, "errors", None)
    api_logger.warning(
        f"API Error: {exc.detail}",
        status_code=exc.status_code,
        path=request.url.path,
    )
    response = _error_body(exc.status_code, str(exc.detail), errors)
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Turn FastAPI's 422 parsing errors into a 400 ``errors`` list"""
    errors = []
    for err in exc.errors():
        loc = list(err.get("loc", ()))
        location = loc[0] if loc else None
        param = ".".join(str(part) for part in loc[1:]) or None
        errors.append(field_error(err.get("msg", "Invalid value"), param, location))
    api_logger.warning(
        "Request validation failed",
        path=request.url.path,
        errors=errors,
    )
    return JSONResponse(status_code=400, content={"errors": errors})


async def unhandled_exception_handler(request: Request, exc: Exception) -> PlainTextResponse:
    """Log unexpected faults and answer with a generic 500"""
    api_logger.error(
        f"Unexpected error: {exc}",
        error=exc,
        path=request.url.path,
    )
    return PlainTextResponse(SERVER_ERROR_TEXT, status_code=500)


async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Answer throttled requests with the usual ``msg`` body"""
    api_logger.warning(
        "Rate limit exceeded",
        path=request.url.path,
        limit=str(exc.detail),
    )
    return JSONResponse(
        status_code=429,
        content={"msg": f"Too many requests, limit is {exc.detail}. Please try again later"},
    )


@contextmanager
def guard(action: str, **context):
    """Convert store and filesystem faults into a logged 500."""
    try:
        yield
    except (SQLAlchemyError, OSError) as e:
        api_logger.error(f"{action} failed", error=e, **context)
        server_error()
