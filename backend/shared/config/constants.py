"""
Centralized constants for the backend application.

Canonical enumeration set for roles, complaint categories and complaint
statuses. These labels are persisted as text columns guarded by CHECK
constraints, so changing a value here is a schema change.

Usage:
    from shared.config.constants import Roles, ELEVATED_ROLES, ComplaintStatus

    if profile.role in ELEVATED_ROLES:
        ...

    if complaint.status in ComplaintStatus.TERMINAL:
        ...
"""

from typing import Final


# =============================================================================
# Profile Roles
# =============================================================================


class Roles:
    """Profile role constants."""

    CONSUMER: Final[str] = "consumer"
    VENDOR: Final[str] = "vendor"
    AUTHORITY: Final[str] = "authority"
    ADMIN: Final[str] = "admin"

    ALL: Final[list[str]] = [CONSUMER, VENDOR, AUTHORITY, ADMIN]


# Roles that see and manage every complaint
ELEVATED_ROLES: Final[frozenset[str]] = frozenset({Roles.AUTHORITY, Roles.ADMIN})

# Profile fields only an admin may change
PROFILE_ADMIN_FIELDS: Final[frozenset[str]] = frozenset({"role", "is_verified"})

# Roles that registering a vendor must not downgrade
NON_DEMOTABLE_ROLES: Final[frozenset[str]] = frozenset({Roles.AUTHORITY, Roles.ADMIN})


# =============================================================================
# Complaint Constants
# =============================================================================


class ComplaintCategory:
    """Complaint category constants."""

    FOOD_QUALITY: Final[str] = "food_quality"
    PRICING: Final[str] = "pricing"
    HYGIENE: Final[str] = "hygiene"
    LOCATION_ISSUE: Final[str] = "location_issue"
    LICENSING: Final[str] = "licensing"
    OTHER: Final[str] = "other"

    ALL: Final[list[str]] = [FOOD_QUALITY, PRICING, HYGIENE, LOCATION_ISSUE, LICENSING, OTHER]


class ComplaintStatus:
    """Complaint status constants."""

    PENDING: Final[str] = "pending"
    INVESTIGATING: Final[str] = "investigating"
    RESOLVED: Final[str] = "resolved"
    DISMISSED: Final[str] = "dismissed"

    ALL: Final[list[str]] = [PENDING, INVESTIGATING, RESOLVED, DISMISSED]
    OPEN: Final[list[str]] = [PENDING, INVESTIGATING]
    TERMINAL: Final[list[str]] = [RESOLVED, DISMISSED]


class ComplaintPriority:
    """Complaint priority levels (stored as integers)."""

    LOW: Final[int] = 1
    MEDIUM: Final[int] = 2
    HIGH: Final[int] = 3
    URGENT: Final[int] = 4

    ALL: Final[list[int]] = [LOW, MEDIUM, HIGH, URGENT]


# Valid complaint status transitions (from -> [allowed to states])
# Terminal complaints can only be reopened for investigation.
COMPLAINT_TRANSITIONS: Final[dict[str, list[str]]] = {
    ComplaintStatus.PENDING: [
        ComplaintStatus.INVESTIGATING,
        ComplaintStatus.RESOLVED,
        ComplaintStatus.DISMISSED,
    ],
    ComplaintStatus.INVESTIGATING: [
        ComplaintStatus.PENDING,
        ComplaintStatus.RESOLVED,
        ComplaintStatus.DISMISSED,
    ],
    ComplaintStatus.RESOLVED: [ComplaintStatus.INVESTIGATING],
    ComplaintStatus.DISMISSED: [ComplaintStatus.INVESTIGATING],
}

# Fields on a complaint that only the workflow owners may change
COMPLAINT_WORKFLOW_FIELDS: Final[frozenset[str]] = frozenset({
    "status", "assigned_to", "resolution_notes",
})


# =============================================================================
# Rating Constants
# =============================================================================


class RatingScale:
    """Bounds shared by the overall rating and every sub-rating."""

    MIN: Final[int] = 1
    MAX: Final[int] = 5

    SUB_RATING_FIELDS: Final[tuple[str, ...]] = (
        "food_quality_rating",
        "price_rating",
        "hygiene_rating",
    )


# Vendor columns maintained only by the aggregate routine
VENDOR_DERIVED_FIELDS: Final[frozenset[str]] = frozenset({"average_rating", "total_ratings"})


# =============================================================================
# Validation Constants
# =============================================================================


class Limits:
    """Validation limits."""

    # String lengths
    MAX_NAME_LENGTH: Final[int] = 200
    MAX_TITLE_LENGTH: Final[int] = 200
    MAX_DESCRIPTION_LENGTH: Final[int] = 2000
    MAX_REVIEW_LENGTH: Final[int] = 2000
    MAX_PHONE_LENGTH: Final[int] = 20
    MAX_SEARCH_TERM_LENGTH: Final[int] = 100
    MAX_FOOD_TYPES: Final[int] = 20

    # Pagination defaults
    DEFAULT_PAGE_SIZE: Final[int] = 50
    MAX_PAGE_SIZE: Final[int] = 200
    DEFAULT_OFFSET: Final[int] = 0


# =============================================================================
# Identity Provider Events
# =============================================================================


class IdentityEventType:
    """Webhook event types emitted by the identity provider."""

    USER_CREATED: Final[str] = "user.created"
    USER_DELETED: Final[str] = "user.deleted"

    ALL: Final[list[str]] = [USER_CREATED, USER_DELETED]


# =============================================================================
# Defaults
# =============================================================================

DEFAULT_PROFILE_NAME: Final[str] = "User"
DEFAULT_AREA_STATE: Final[str] = "Andhra Pradesh"


# =============================================================================
# Error Messages
# =============================================================================


class ErrorMessages:
    """Standardized error messages."""

    # Auth errors
    NOT_AUTHENTICATED: Final[str] = "Not authenticated"
    INVALID_TOKEN: Final[str] = "Invalid token"
    TOKEN_EXPIRED: Final[str] = "Token has expired"
    INVALID_SIGNATURE: Final[str] = "Invalid webhook signature"
    ACCESS_DENIED: Final[str] = "Access denied"

    # Conflict errors
    DUPLICATE_RATING: Final[str] = "You have already rated this vendor; edit your existing rating instead"
    AREA_IN_USE: Final[str] = "Area is referenced and can no longer be changed"
    PROFILE_EXISTS: Final[str] = "A profile already exists for this identity"
