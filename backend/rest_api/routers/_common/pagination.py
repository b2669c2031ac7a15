"""
Standardized Pagination for list routers.

Usage:
    from rest_api.routers._common.pagination import Pagination, get_pagination

    @router.get("/vendors")
    def list_vendors(
        pagination: Pagination = Depends(get_pagination),
        db: Session = Depends(get_db),
    ):
        return service.list_vendors(limit=pagination.limit, offset=pagination.offset)
"""

from dataclasses import dataclass

from fastapi import Query

from shared.config.constants import Limits


@dataclass
class Pagination:
    """
    Pagination parameters with validation.

    Attributes:
        limit: Maximum items per page (1 to max_limit)
        offset: Number of items to skip
        max_limit: Maximum allowed limit
    """

    limit: int
    offset: int
    max_limit: int = Limits.MAX_PAGE_SIZE

    def __post_init__(self):
        self.limit = min(max(1, self.limit), self.max_limit)
        self.offset = max(0, self.offset)

    @property
    def page(self) -> int:
        """Current page number (1-indexed)."""
        return (self.offset // self.limit) + 1


def get_pagination(
    limit: int = Query(
        default=Limits.DEFAULT_PAGE_SIZE,
        ge=1,
        le=Limits.MAX_PAGE_SIZE,
        description="Maximum number of items to return",
    ),
    offset: int = Query(
        default=Limits.DEFAULT_OFFSET,
        ge=0,
        description="Number of items to skip",
    ),
) -> Pagination:
    """FastAPI dependency for pagination parameters."""
    return Pagination(limit=limit, offset=offset)
