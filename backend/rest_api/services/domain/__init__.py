"""
Domain Services - application layer.

Services contain business logic, call the permission layer before every
write and own the transaction boundary (flush, recompute, commit).

Structure:
    Router (thin controller)
        ↓
    Service (business logic, authorization)  ← YOU ARE HERE
        ↓
    Model (entity)

Usage:
    from rest_api.services.domain import RatingService

    # In router
    service = RatingService(db)
    rating = service.submit_rating(caller, body.model_dump())
"""

from .aggregates import (
    compute_aggregate,
    recompute_all_vendor_aggregates,
    recompute_vendor_aggregate,
    recompute_vendor_aggregates,
    round_average,
)
from .area_service import AreaService
from .profile_service import ProfileService
from .vendor_service import VendorService
from .complaint_service import ComplaintService
from .rating_service import RatingService
from .stats_service import StatsService

__all__ = [
    # Aggregates
    "compute_aggregate",
    "recompute_all_vendor_aggregates",
    "recompute_vendor_aggregate",
    "recompute_vendor_aggregates",
    "round_average",
    # Services
    "AreaService",
    "ProfileService",
    "VendorService",
    "ComplaintService",
    "RatingService",
    "StatsService",
]
