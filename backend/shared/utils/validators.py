"""
Shared validators for input sanitization.

Domain-level checks that must surface as field-level ValidationErrors (400)
rather than request schema errors (422) live here.
"""

import re
from typing import Any

from shared.config.constants import Limits, RatingScale
from shared.utils.exceptions import RatingOutOfRangeError, ValidationError


def escape_like_pattern(value: str) -> str:
    """
    Escape special characters in LIKE patterns.

    SQL LIKE uses % and _ as wildcards. This function escapes them
    so a search term is always matched literally.

    Args:
        value: The search string to escape

    Returns:
        The escaped string safe for use in LIKE patterns
    """
    if not value:
        return value

    # Escape the escape character first, then the wildcards
    value = value.replace("\\", "\\\\")
    value = value.replace("%", "\\%")
    value = value.replace("_", "\\_")
    return value


def sanitize_search_term(term: str | None, max_length: int = Limits.MAX_SEARCH_TERM_LENGTH) -> str:
    """
    Sanitize search term for safe use in queries.

    Args:
        term: The search term to sanitize
        max_length: Maximum allowed length

    Returns:
        Sanitized search term ("" when nothing is left)
    """
    if not term:
        return ""

    term = term.strip()

    if len(term) > max_length:
        term = term[:max_length]

    # Remove null bytes and other control characters
    term = re.sub(r"[\x00-\x1f\x7f-\x9f]", "", term)

    return term


def like_pattern(term: str | None) -> str | None:
    """Build a case-insensitive ``%term%`` pattern, or None for an empty search."""
    term = sanitize_search_term(term)
    if not term:
        return None
    return f"%{escape_like_pattern(term)}%"


def validate_rating_value(field: str, value: Any, required: bool = True) -> int | None:
    """
    Check a rating or sub-rating against the 1-5 scale.

    Raises:
        ValidationError: If a required rating is missing.
        RatingOutOfRangeError: If the value is not an integer in [1, 5].
    """
    if value is None:
        if required:
            raise ValidationError(f"{field} is required", field=field)
        return None
    # bool is an int subclass; a JSON true must not pass as a rating of 1
    if isinstance(value, bool) or not isinstance(value, int):
        raise RatingOutOfRangeError(field, value)
    if value < RatingScale.MIN or value > RatingScale.MAX:
        raise RatingOutOfRangeError(field, value)
    return value


def require_text(field: str, value: Any, max_length: int | None = None) -> str:
    """
    Require a non-blank string, returning it stripped.

    Raises:
        ValidationError: If the value is missing, blank or too long.
    """
    if value is None or not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field} is required", field=field)
    value = value.strip()
    if max_length is not None and len(value) > max_length:
        raise ValidationError(f"{field} must be at most {max_length} characters", field=field)
    return value


def optional_text(field: str, value: Any, max_length: int | None = None) -> str | None:
    """Normalize an optional string: blank becomes None."""
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be text", field=field)
    value = value.strip()
    if not value:
        return None
    if max_length is not None and len(value) > max_length:
        raise ValidationError(f"{field} must be at most {max_length} characters", field=field)
    return value


def validate_choice(field: str, value: Any, choices: list) -> Any:
    """Reject values outside a fixed enumeration."""
    if value not in choices:
        raise ValidationError(
            f"{field} must be one of: {', '.join(str(c) for c in choices)}",
            field=field,
            value=value,
        )
    return value


def validate_flag(field: str, value: Any) -> bool:
    """Accept only real booleans; 1, "yes" and the like are rejected."""
    if not isinstance(value, bool):
        raise ValidationError(f"{field} must be true or false", field=field, value=value)
    return value
