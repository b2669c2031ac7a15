"""
Shared Pydantic schemas used across the application.
"""

from typing import Literal

from pydantic import BaseModel


# =============================================================================
# Common Types
# =============================================================================

Role = Literal["consumer", "vendor", "authority", "admin"]
ComplaintCategoryType = Literal[
    "food_quality", "pricing", "hygiene", "location_issue", "licensing", "other"
]
ComplaintStatusType = Literal["pending", "investigating", "resolved", "dismissed"]


# =============================================================================
# Error Schemas
# =============================================================================


class ErrorResponse(BaseModel):
    """Standard error response."""

    detail: str
    error: str
    field: str | None = None


class DuplicateRatingResponse(ErrorResponse):
    """409 body for a second rating of the same vendor."""

    existing_rating_id: str | None = None
