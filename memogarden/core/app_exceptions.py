"""Application-specific exceptions for consistent error handling."""

from typing import Any

from fastapi import HTTPException, status


class AppError(HTTPException):
    """Application error with standardized error code."""

    def __init__(
        self,
        status_code: int,
        code: str,
        message: str,
        details: dict[str, Any] | list[Any] | None = None,
    ):
        super().__init__(
            status_code=status_code,
            detail={
                "code": code,
                "message": message,
                "details": details,
            },
        )
        self.code = code
        self.message = message
        self.details = details


def not_found(resource: str, resource_id: Any) -> AppError:
    """Build the error returned for entities that are missing or not owned by the caller."""
    return AppError(
        status_code=status.HTTP_404_NOT_FOUND,
        code="NOT_FOUND",
        message=f"{resource} not found",
        details={"id": str(resource_id)},
    )
