"""
Vendor rating aggregates.

A vendor's average_rating and total_ratings are a pure function of its
current ratings. Every rating write calls recompute_vendor_aggregate in the
same transaction, so the two never disagree after a commit.
"""

from __future__ import annotations

import uuid
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from shared.config.logging import get_logger
from rest_api.models import Rating, Vendor

logger = get_logger(__name__)

ONE_DECIMAL = Decimal("0.1")
ZERO_RATING = Decimal("0.0")


def round_average(total: int, count: int) -> Decimal:
    """
    Mean of ``count`` ratings summing to ``total``, rounded half-up to one
    decimal. Zero ratings give 0.0.
    """
    if count <= 0:
        return ZERO_RATING
    return (Decimal(total) / Decimal(count)).quantize(ONE_DECIMAL, rounding=ROUND_HALF_UP)


def compute_aggregate(ratings: Iterable[int]) -> tuple[Decimal, int]:
    """(average_rating, total_ratings) for a set of rating values."""
    values = list(ratings)
    return round_average(sum(values), len(values)), len(values)


def recompute_vendor_aggregate(db: Session, vendor_id: uuid.UUID | None) -> Vendor | None:
    """
    Rebuild one vendor's aggregate from its full rating set.

    Flushes pending writes, locks the vendor row, then requeries COUNT and
    SUM. Returns None when the vendor no longer exists (deleted in the same
    transaction).
    """
    if vendor_id is None:
        return None

    db.flush()

    vendor = db.scalar(select(Vendor).where(Vendor.id == vendor_id).with_for_update())
    if vendor is None:
        return None

    count, total = db.execute(
        select(func.count(Rating.id), func.coalesce(func.sum(Rating.rating), 0)).where(
            Rating.vendor_id == vendor_id
        )
    ).one()

    vendor.average_rating = round_average(int(total), int(count))
    vendor.total_ratings = int(count)
    db.flush()

    logger.debug(
        "Vendor aggregate recomputed",
        vendor_id=str(vendor_id),
        average_rating=str(vendor.average_rating),
        total_ratings=vendor.total_ratings,
    )
    return vendor


def recompute_vendor_aggregates(db: Session, vendor_ids: Iterable[uuid.UUID | None]) -> None:
    """Recompute several vendors, each once."""
    for vendor_id in sorted({v for v in vendor_ids if v is not None}, key=str):
        recompute_vendor_aggregate(db, vendor_id)


def recompute_all_vendor_aggregates(db: Session) -> int:
    """Rebuild every vendor's aggregate. Returns the number of vendors processed."""
    vendor_ids = list(db.scalars(select(Vendor.id)))
    recompute_vendor_aggregates(db, vendor_ids)
    logger.info("All vendor aggregates recomputed", vendor_count=len(vendor_ids))
    return len(vendor_ids)
