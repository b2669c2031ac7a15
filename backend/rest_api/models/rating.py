"""
Rating Model: one review per (vendor, reviewer) pair.
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, Optional

from sqlalchemy import CheckConstraint, ForeignKey, Integer, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shared.config.constants import RatingScale

from .base import Base, TimestampMixin, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from .profile import Profile
    from .vendor import Vendor


def _scale_check(column: str, nullable: bool = False) -> CheckConstraint:
    expr = f"{column} >= {RatingScale.MIN} AND {column} <= {RatingScale.MAX}"
    if nullable:
        expr = f"{column} IS NULL OR ({expr})"
    return CheckConstraint(expr, name=f"ck_ratings_{column}")


class Rating(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """
    A reviewer's score for a vendor, with optional sub-ratings.

    Every insert, update and delete must be followed by a recompute of the
    vendor aggregate in the same transaction.
    """

    __tablename__ = "ratings"

    vendor_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("vendors.id", ondelete="CASCADE"), nullable=False, index=True
    )
    reviewer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    review: Mapped[Optional[str]] = mapped_column(Text)
    food_quality_rating: Mapped[Optional[int]] = mapped_column(Integer)
    price_rating: Mapped[Optional[int]] = mapped_column(Integer)
    hygiene_rating: Mapped[Optional[int]] = mapped_column(Integer)

    __table_args__ = (
        UniqueConstraint("vendor_id", "reviewer_id", name="uq_ratings_vendor_reviewer"),
        _scale_check("rating"),
        *(_scale_check(field, nullable=True) for field in RatingScale.SUB_RATING_FIELDS),
    )

    # Relationships
    vendor: Mapped["Vendor"] = relationship(back_populates="ratings")
    reviewer: Mapped["Profile"] = relationship(back_populates="ratings")

    def __repr__(self) -> str:
        return f"<Rating(id={self.id}, vendor_id={self.vendor_id}, rating={self.rating})>"
