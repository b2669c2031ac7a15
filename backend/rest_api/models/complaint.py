"""
Complaint Model: a consumer complaint and its resolution workflow.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, Text, Uuid, event
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shared.config.constants import ComplaintCategory, ComplaintPriority, ComplaintStatus

from .base import Base, TimestampMixin, UUIDPrimaryKeyMixin, in_list, utcnow

if TYPE_CHECKING:
    from .area import Area
    from .profile import Profile
    from .vendor import Vendor


_TERMINAL = in_list("status", ComplaintStatus.TERMINAL)


class Complaint(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """
    A complaint filed by a profile about an area and, optionally, a vendor.

    resolved_at is set exactly when the status is resolved or dismissed.
    """

    __tablename__ = "complaints"

    complainant_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    vendor_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("vendors.id", ondelete="SET NULL"), index=True
    )
    area_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("areas.id"), nullable=False, index=True
    )
    category: Mapped[str] = mapped_column(Text, nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(Text, nullable=False, default=ComplaintStatus.PENDING)
    priority: Mapped[int] = mapped_column(
        Integer, nullable=False, default=ComplaintPriority.LOW
    )
    assigned_to: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("profiles.id", ondelete="SET NULL"), index=True
    )
    resolution_notes: Mapped[Optional[str]] = mapped_column(Text)
    resolved_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    __table_args__ = (
        CheckConstraint(in_list("category", ComplaintCategory.ALL), name="ck_complaints_category"),
        CheckConstraint(in_list("status", ComplaintStatus.ALL), name="ck_complaints_status"),
        CheckConstraint(
            f"priority >= {ComplaintPriority.LOW} AND priority <= {ComplaintPriority.URGENT}",
            name="ck_complaints_priority",
        ),
        CheckConstraint(
            f"({_TERMINAL} AND resolved_at IS NOT NULL) "
            f"OR (NOT ({_TERMINAL}) AND resolved_at IS NULL)",
            name="ck_complaints_resolved_at",
        ),
        Index("ix_complaints_status_created", "status", "created_at"),
    )

    # Relationships
    complainant: Mapped["Profile"] = relationship(
        back_populates="complaints_filed", foreign_keys=[complainant_id]
    )
    assignee: Mapped[Optional["Profile"]] = relationship(
        back_populates="complaints_assigned", foreign_keys=[assigned_to]
    )
    vendor: Mapped[Optional["Vendor"]] = relationship(back_populates="complaints")
    area: Mapped["Area"] = relationship()

    @property
    def is_terminal(self) -> bool:
        return self.status in ComplaintStatus.TERMINAL

    def __repr__(self) -> str:
        return f"<Complaint(id={self.id}, status='{self.status}', category='{self.category}')>"


@event.listens_for(Complaint, "before_insert")
@event.listens_for(Complaint, "before_update")
def _sync_resolved_at(mapper, connection, target: Complaint) -> None:
    if target.status in ComplaintStatus.TERMINAL:
        if target.resolved_at is None:
            target.resolved_at = utcnow()
    else:
        target.resolved_at = None
