import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


# ===========================
# ERROR KINDS
# ===========================

class JobBoardError(StarletteHTTPException):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str, headers=None):
        super().__init__(status_code=self.status_code, detail=detail, headers=headers)


class ValidationError(JobBoardError):
    """Malformed or missing input"""
    status_code = status.HTTP_400_BAD_REQUEST


class NotFound(JobBoardError):
    status_code = status.HTTP_404_NOT_FOUND


class InvalidState(JobBoardError):
    """Operation not permitted given the record's current state"""
    status_code = status.HTTP_400_BAD_REQUEST


class Conflict(JobBoardError):
    status_code = status.HTTP_400_BAD_REQUEST


class RateLimited(JobBoardError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS


# ===========================
# HANDLERS
# ===========================

def _field_name(loc) -> str:
    # drop the leading "body"/"query"/"path" marker
    parts = [str(p) for p in loc[1:]] if len(loc) > 1 else [str(p) for p in loc]
    return ".".join(parts)


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.detail)
    else:
        logger.warning("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {"field": _field_name(err.get("loc", ())), "message": err.get("msg", "Invalid value")}
        for err in exc.errors()
    ]
    logger.warning("%s %s rejected: %d validation error(s)", request.method, request.url.path, len(errors))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=jsonable_encoder({"errors": errors}),
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
