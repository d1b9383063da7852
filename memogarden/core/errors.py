"""Exception handlers rendering the uniform error envelope."""

import logging
import uuid
from typing import Any

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from memogarden.core.app_exceptions import AppError
from memogarden.core.config import settings
from memogarden.learning_engine.exceptions import MemoryModelError

logger = logging.getLogger(__name__)


class ErrorResponse(BaseModel):
    """Error response envelope: {error_code, message, details, request_id}."""

    error_code: str
    message: str
    details: Any | None = None
    request_id: str | None = None


def get_request_id(request: Request) -> str:
    """Request ID from the X-Request-ID header, or a new one."""
    return request.headers.get("X-Request-ID") or str(uuid.uuid4())


def error_response(
    request: Request, status_code: int, code: str, message: str, details: Any = None
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(
            error_code=code,
            message=message,
            details=details,
            request_id=get_request_id(request),
        ).model_dump(),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    details = [
        {
            "field": ".".join(str(loc) for loc in error.get("loc", [])),
            "issue": error.get("msg", "Validation error"),
            "type": error.get("type", "validation_error"),
        }
        for error in exc.errors()
    ]
    return error_response(
        request,
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "VALIDATION_ERROR",
        "Invalid request data",
        details,
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """AppError keeps its code. Plain HTTPExceptions are reported as HTTP_ERROR."""
    if isinstance(exc, AppError):
        return error_response(request, exc.status_code, exc.code, exc.message, exc.details)
    return error_response(request, exc.status_code, "HTTP_ERROR", str(exc.detail))


async def memory_model_exception_handler(
    request: Request, exc: MemoryModelError
) -> JSONResponse:
    """
    The memory model refused a review or a preview.

    Nothing was written when this is raised, so there is nothing to undo.
    """
    details = {"reason": exc.message}
    if exc.card_id is not None:
        details["card_id"] = str(exc.card_id)
    return error_response(
        request,
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "REVIEW_REJECTED",
        "The review could not be processed",
        details,
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    request_id = get_request_id(request)
    logger.error(
        "Unhandled exception",
        extra={"request_id": request_id, "path": request.url.path},
        exc_info=exc,
    )

    # Internal details stay hidden in production
    if settings.ENV == "prod":
        message, details = "An internal server error occurred", None
    else:
        message, details = str(exc), {"type": type(exc).__name__}

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(
            error_code="INTERNAL_ERROR",
            message=message,
            details=details,
            request_id=request_id,
        ).model_dump(),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(MemoryModelError, memory_model_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
