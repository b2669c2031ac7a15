"""
Utilities module: Exceptions, validators, schemas.
"""

from shared.utils.exceptions import (
    AppException,
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DuplicateRatingError,
    NotFoundError,
    ValidationError,
)
from shared.utils.validators import (
    escape_like_pattern,
    like_pattern,
    sanitize_search_term,
    validate_rating_value,
)
from shared.utils.schemas import ErrorResponse

__all__ = [
    # exceptions
    "AppException",
    "AuthenticationError",
    "AuthorizationError",
    "ConflictError",
    "DuplicateRatingError",
    "NotFoundError",
    "ValidationError",
    # validators
    "escape_like_pattern",
    "like_pattern",
    "sanitize_search_term",
    "validate_rating_value",
    # schemas
    "ErrorResponse",
]
