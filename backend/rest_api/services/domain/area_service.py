"""
Area Domain Service.

Areas are reference data: public to read, admin-only to change, and frozen
once any profile, vendor or complaint points at them.
"""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import exists, or_, select
from sqlalchemy.orm import Session

from shared.config.constants import DEFAULT_AREA_STATE, ErrorMessages, Limits
from shared.config.logging import get_logger
from shared.utils.exceptions import ConflictError, ValidationError
from shared.utils.validators import like_pattern, optional_text, require_text
from rest_api.models import Area, Complaint, Profile, Vendor
from rest_api.services.base_service import BaseService
from rest_api.services.permissions import Action, PermissionContext, authorize

logger = get_logger(__name__)


class AreaService(BaseService[Area]):
    """Domain service for Area operations."""

    def __init__(self, db: Session):
        super().__init__(db, Area, entity_name="Area")

    def list_areas(self, search: str | None = None) -> list[Area]:
        """All areas ordered by name, optionally matching name or district."""
        query = select(Area)
        pattern = like_pattern(search)
        if pattern:
            query = query.where(
                or_(
                    Area.name.ilike(pattern, escape="\\"),
                    Area.district.ilike(pattern, escape="\\"),
                )
            )
        return list(self._db.scalars(query.order_by(Area.name, Area.district)))

    def get_area(self, area_id: uuid.UUID) -> Area:
        return self.get_or_404(area_id)

    def ensure_exists(self, area_id: uuid.UUID | None, field: str = "area_id") -> Area:
        """Resolve a foreign key to an existing area, 404 otherwise."""
        if area_id is None:
            raise ValidationError(f"{field} is required", field=field)
        return self.get_or_404(area_id, field=field)

    def is_referenced(self, area_id: uuid.UUID) -> bool:
        """True if any profile, vendor or complaint references the area."""
        return bool(
            self._db.scalar(
                select(
                    or_(
                        exists().where(Profile.area_id == area_id),
                        exists().where(Vendor.area_id == area_id),
                        exists().where(Complaint.area_id == area_id),
                    )
                )
            )
        )

    def create_area(self, caller: PermissionContext, data: dict[str, Any]) -> Area:
        area = Area(
            name=require_text("name", data.get("name"), Limits.MAX_NAME_LENGTH),
            district=require_text("district", data.get("district"), Limits.MAX_NAME_LENGTH),
            state=optional_text("state", data.get("state"), Limits.MAX_NAME_LENGTH) or DEFAULT_AREA_STATE,
            pincode=optional_text("pincode", data.get("pincode"), Limits.MAX_PHONE_LENGTH),
        )
        authorize(caller, Action.CREATE, area)

        self._db.add(area)
        self.commit()
        logger.info("Area created", area_id=str(area.id), name=area.name)
        return area

    def update_area(self, caller: PermissionContext, area_id: uuid.UUID, data: dict[str, Any]) -> Area:
        area = self.get_or_404(area_id)
        authorize(caller, Action.UPDATE, area)

        changes: dict[str, Any] = {}
        for field in ("name", "district", "state"):
            if field in data:
                changes[field] = require_text(field, data[field], Limits.MAX_NAME_LENGTH)
        if "pincode" in data:
            changes["pincode"] = optional_text("pincode", data["pincode"], Limits.MAX_PHONE_LENGTH)

        if not self.changed_fields(area, changes):
            return area
        if self.is_referenced(area.id):
            raise ConflictError(ErrorMessages.AREA_IN_USE, area_id=str(area.id))

        self.apply(area, changes)
        self.commit()
        logger.info("Area updated", area_id=str(area.id), fields=sorted(changes))
        return area

    def delete_area(self, caller: PermissionContext, area_id: uuid.UUID) -> None:
        area = self.get_or_404(area_id)
        authorize(caller, Action.DELETE, area)

        if self.is_referenced(area.id):
            raise ConflictError(ErrorMessages.AREA_IN_USE, area_id=str(area.id))

        self._db.delete(area)
        self.commit()
        logger.info("Area deleted", area_id=str(area_id))
