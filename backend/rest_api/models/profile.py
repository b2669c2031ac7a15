"""
Profile Model: one per external identity.
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shared.config.constants import Roles

from .base import Base, TimestampMixin, UUIDPrimaryKeyMixin, in_list

if TYPE_CHECKING:
    from .area import Area
    from .complaint import Complaint
    from .rating import Rating
    from .vendor import Vendor


class Profile(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """
    Application-side record for an identity issued by the identity provider.

    The role stored here is the only role the permission layer trusts.
    Deleting a profile removes its vendors, filed complaints and ratings;
    complaints assigned to it become unassigned.
    """

    __tablename__ = "profiles"

    user_id: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    full_name: Mapped[str] = mapped_column(Text, nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(Text)
    area_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("areas.id"), index=True
    )
    role: Mapped[str] = mapped_column(Text, nullable=False, default=Roles.CONSUMER)
    is_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    __table_args__ = (
        CheckConstraint(in_list("role", Roles.ALL), name="ck_profiles_role"),
    )

    # Relationships
    area: Mapped[Optional["Area"]] = relationship()
    vendors: Mapped[list["Vendor"]] = relationship(
        back_populates="owner", cascade="all, delete-orphan"
    )
    complaints_filed: Mapped[list["Complaint"]] = relationship(
        back_populates="complainant",
        cascade="all, delete-orphan",
        foreign_keys="Complaint.complainant_id",
    )
    # No cascade: the ORM nulls assigned_to, matching ON DELETE SET NULL
    complaints_assigned: Mapped[list["Complaint"]] = relationship(
        back_populates="assignee",
        foreign_keys="Complaint.assigned_to",
    )
    ratings: Mapped[list["Rating"]] = relationship(
        back_populates="reviewer", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Profile(id={self.id}, user_id='{self.user_id}', role='{self.role}')>"
