"""
Area Model: named geographic zones.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Index, Text
from sqlalchemy.orm import Mapped, mapped_column

from shared.config.constants import DEFAULT_AREA_STATE

from .base import Base, UUIDPrimaryKeyMixin, utcnow


class Area(UUIDPrimaryKeyMixin, Base):
    """
    A district-level zone that profiles, vendors and complaints point at.

    Areas are reference data: once anything references one it can no longer
    be renamed or removed.
    """

    __tablename__ = "areas"

    name: Mapped[str] = mapped_column(Text, nullable=False)
    district: Mapped[str] = mapped_column(Text, nullable=False)
    state: Mapped[str] = mapped_column(Text, nullable=False, default=DEFAULT_AREA_STATE)
    pincode: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    __table_args__ = (
        Index("ix_areas_name", "name"),
    )

    def __repr__(self) -> str:
        return f"<Area(id={self.id}, name='{self.name}', district='{self.district}')>"
