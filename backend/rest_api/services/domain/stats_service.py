"""
Dashboard Statistics Service.

Read-only counters for the public dashboard.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from shared.config.constants import ComplaintStatus
from shared.config.logging import get_logger
from rest_api.models import Complaint, Rating, Vendor
from rest_api.services.domain.aggregates import round_average

logger = get_logger(__name__)


class StatsService:
    """Aggregated counters across complaints, vendors and ratings."""

    def __init__(self, db: Session):
        self._db = db

    def dashboard_stats(self) -> dict[str, Any]:
        """
        Complaint counts by status, vendor and rating totals, and the overall
        average rating (mean of every rating, one decimal).
        """
        by_status = dict(
            self._db.execute(
                select(Complaint.status, func.count(Complaint.id)).group_by(Complaint.status)
            ).all()
        )
        rating_count, rating_sum = self._db.execute(
            select(func.count(Rating.id), func.coalesce(func.sum(Rating.rating), 0))
        ).one()

        return {
            "total_complaints": sum(by_status.values()),
            "pending_complaints": by_status.get(ComplaintStatus.PENDING, 0),
            "investigating_complaints": by_status.get(ComplaintStatus.INVESTIGATING, 0),
            "resolved_complaints": by_status.get(ComplaintStatus.RESOLVED, 0),
            "dismissed_complaints": by_status.get(ComplaintStatus.DISMISSED, 0),
            "total_vendors": self._db.scalar(select(func.count(Vendor.id))) or 0,
            "total_ratings": int(rating_count),
            "average_rating": round_average(int(rating_sum), int(rating_count)),
        }
