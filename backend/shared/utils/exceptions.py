"""
Centralized HTTP exceptions for consistent error handling.

The four rejection kinds the presentation layer must tell apart map to
distinct status codes and ``error`` codes:

    ValidationError     400  validation_error   (field-level detail)
    AuthorizationError  403  authorization_error (generic denial)
    NotFoundError       404  not_found
    ConflictError       409  conflict

Usage:
    from shared.utils.exceptions import NotFoundError, AuthorizationError, ValidationError

    raise NotFoundError("Vendor", vendor_id)
    raise AuthorizationError(action="update", table="complaints")
    raise ValidationError("Rating must be between 1 and 5", field="rating")
"""

from typing import Any

from fastapi import HTTPException, status

from shared.config.constants import ErrorMessages
from shared.config.logging import get_logger

logger = get_logger(__name__)


class AppException(HTTPException):
    """
    Base exception with automatic logging.

    All custom exceptions should inherit from this class
    to ensure consistent logging and response format.
    """

    error_code: str = "error"

    def __init__(
        self,
        status_code: int,
        detail: str,
        log_level: str = "warning",
        headers: dict[str, str] | None = None,
        field: str | None = None,
        **log_context: Any,
    ):
        self.field = field

        log_fn = getattr(logger, log_level, logger.warning)
        log_fn(detail, status_code=status_code, error=self.error_code, field=field, **log_context)

        super().__init__(status_code=status_code, detail=detail, headers=headers)

    def to_dict(self) -> dict[str, Any]:
        """Response body for this error."""
        body: dict[str, Any] = {"detail": self.detail, "error": self.error_code}
        if self.field:
            body["field"] = self.field
        return body


# =============================================================================
# 400 Bad Request Errors
# =============================================================================


class ValidationError(AppException):
    """
    Input validation error (400).

    Usage:
        raise ValidationError("Rating must be between 1 and 5", field="rating", value=6)
    """

    error_code = "validation_error"

    def __init__(self, detail: str, field: str | None = None, **log_context: Any):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            log_level="warning",
            field=field,
            **log_context,
        )


class RatingOutOfRangeError(ValidationError):
    """A rating or sub-rating outside the 1-5 scale."""

    def __init__(self, field: str, value: Any, **log_context: Any):
        super().__init__(
            f"{field} must be between 1 and 5",
            field=field,
            value=value,
            **log_context,
        )


class InvalidTransitionError(ValidationError):
    """Invalid status transition."""

    def __init__(self, entity: str, from_status: str, to_status: str, **log_context: Any):
        detail = f"Invalid transition from '{from_status}' to '{to_status}' for {entity}"
        super().__init__(
            detail,
            field="status",
            entity=entity,
            from_status=from_status,
            to_status=to_status,
            **log_context,
        )


class ReadOnlyFieldError(ValidationError):
    """Attempt to write a field that is derived or immutable."""

    def __init__(self, field: str, **log_context: Any):
        super().__init__(f"{field} is read-only", field=field, **log_context)


# =============================================================================
# 401 Unauthorized Errors
# =============================================================================


class AuthenticationError(AppException):
    """Missing or invalid caller identity (401)."""

    error_code = "authentication_error"

    def __init__(self, detail: str = ErrorMessages.NOT_AUTHENTICATED, **log_context: Any):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            log_level="warning",
            headers={"WWW-Authenticate": "Bearer"},
            **log_context,
        )


# =============================================================================
# 403 Forbidden Errors
# =============================================================================


class AuthorizationError(AppException):
    """
    Ownership or role check failed (403).

    The response detail is always the generic denial; which check failed is
    only written to the log.

    Usage:
        raise AuthorizationError(action="update", table="ratings", row_id=rating.id)
    """

    error_code = "authorization_error"

    def __init__(self, **log_context: Any):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=ErrorMessages.ACCESS_DENIED,
            log_level="warning",
            **log_context,
        )


# =============================================================================
# 404 Not Found Errors
# =============================================================================


class NotFoundError(AppException):
    """
    Entity not found error (404).

    Usage:
        raise NotFoundError("Vendor", vendor_id)
        raise NotFoundError("Area", area_id, field="area_id")
    """

    error_code = "not_found"

    def __init__(
        self,
        entity: str,
        entity_id: Any = None,
        field: str | None = None,
        **log_context: Any,
    ):
        if entity_id is not None:
            detail = f"{entity} with ID {entity_id} not found"
        else:
            detail = f"{entity} not found"

        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            log_level="warning",
            field=field,
            entity=entity,
            entity_id=entity_id,
            **log_context,
        )


class ProfileNotFoundError(NotFoundError):
    """Profile not found."""

    def __init__(self, profile_id: Any = None, **log_context: Any):
        super().__init__("Profile", profile_id, **log_context)


# =============================================================================
# 409 Conflict Errors
# =============================================================================


class ConflictError(AppException):
    """
    Resource conflict error (409).

    Usage:
        raise ConflictError("Area is referenced and can no longer be changed")
    """

    error_code = "conflict"

    def __init__(self, detail: str, **log_context: Any):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
            log_level="warning",
            **log_context,
        )


class DuplicateRatingError(ConflictError):
    """
    The reviewer already rated this vendor.

    Carries the existing rating ID so clients can offer to edit it.
    """

    error_code = "duplicate_rating"

    def __init__(self, vendor_id: Any, reviewer_id: Any, existing_rating_id: Any = None, **log_context: Any):
        self.existing_rating_id = existing_rating_id
        super().__init__(
            ErrorMessages.DUPLICATE_RATING,
            vendor_id=vendor_id,
            reviewer_id=reviewer_id,
            existing_rating_id=existing_rating_id,
            **log_context,
        )

    def to_dict(self) -> dict[str, Any]:
        body = super().to_dict()
        if self.existing_rating_id is not None:
            body["existing_rating_id"] = str(self.existing_rating_id)
        return body

