"""
Vendor Model: a street-food business owned by a profile.
"""

from __future__ import annotations

import uuid
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from sqlalchemy import JSON, Boolean, CheckConstraint, ForeignKey, Integer, Numeric, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from .area import Area
    from .complaint import Complaint
    from .profile import Profile
    from .rating import Rating


class Vendor(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """
    A registered vendor.

    average_rating and total_ratings are derived from the vendor's ratings
    and are only written by recompute_vendor_aggregate.
    """

    __tablename__ = "vendors"

    profile_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    business_name: Mapped[str] = mapped_column(Text, nullable=False)
    food_types: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    location_description: Mapped[str] = mapped_column(Text, nullable=False)
    area_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("areas.id"), nullable=False, index=True
    )
    license_number: Mapped[Optional[str]] = mapped_column(Text)
    is_licensed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    average_rating: Mapped[Decimal] = mapped_column(
        Numeric(2, 1), nullable=False, default=Decimal("0.0")
    )
    total_ratings: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (
        CheckConstraint(
            "average_rating >= 0 AND average_rating <= 5", name="ck_vendors_average_rating"
        ),
        CheckConstraint("total_ratings >= 0", name="ck_vendors_total_ratings"),
    )

    # Relationships
    owner: Mapped["Profile"] = relationship(back_populates="vendors")
    area: Mapped["Area"] = relationship()
    ratings: Mapped[list["Rating"]] = relationship(
        back_populates="vendor", cascade="all, delete-orphan"
    )
    # No cascade: complaints outlive the vendor with vendor_id nulled
    complaints: Mapped[list["Complaint"]] = relationship(back_populates="vendor")

    def __repr__(self) -> str:
        return (
            f"<Vendor(id={self.id}, business_name='{self.business_name}', "
            f"average_rating={self.average_rating}, total_ratings={self.total_ratings})>"
        )
