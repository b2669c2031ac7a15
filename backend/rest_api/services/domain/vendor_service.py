"""
Vendor Domain Service.

Vendors are public listings owned by a profile. Registering one promotes a
consumer owner to the vendor role; the rating aggregate columns are never
writable here.
"""

from __future__ import annotations

import uuid
from decimal import Decimal
from typing import Any

from sqlalchemy import String, cast, or_, select
from sqlalchemy.orm import Session, joinedload

from shared.config.constants import NON_DEMOTABLE_ROLES, VENDOR_DERIVED_FIELDS, Limits, RatingScale, Roles
from shared.config.logging import get_logger
from shared.utils.exceptions import ValidationError
from shared.utils.validators import like_pattern, optional_text, require_text, validate_flag
from rest_api.models import Area, Vendor
from rest_api.services.base_service import BaseService
from rest_api.services.domain.area_service import AreaService
from rest_api.services.domain.profile_service import ProfileService
from rest_api.services.permissions import Action, PermissionContext, authorize

logger = get_logger(__name__)

IMMUTABLE_FIELDS = VENDOR_DERIVED_FIELDS | {"id", "profile_id", "created_at", "updated_at"}


def normalize_food_types(value: Any) -> list[str]:
    """Strip, drop blanks and de-duplicate (case-insensitively) a food type list."""
    if value is None:
        return []
    if isinstance(value, str) or not isinstance(value, (list, tuple)):
        raise ValidationError("food_types must be a list of strings", field="food_types")
    seen: set[str] = set()
    result: list[str] = []
    for item in value:
        if not isinstance(item, str):
            raise ValidationError("food_types must be a list of strings", field="food_types")
        item = item.strip()
        if item and item.lower() not in seen:
            seen.add(item.lower())
            result.append(item)
    if len(result) > Limits.MAX_FOOD_TYPES:
        raise ValidationError(
            f"At most {Limits.MAX_FOOD_TYPES} food types are allowed", field="food_types"
        )
    return result


class VendorService(BaseService[Vendor]):
    """Domain service for Vendor operations."""

    def __init__(self, db: Session):
        super().__init__(db, Vendor, entity_name="Vendor")

    def get_vendor(self, vendor_id: uuid.UUID, field: str | None = None) -> Vendor:
        return self.get_or_404(vendor_id, field=field)

    def list_vendors(
        self,
        area_id: uuid.UUID | None = None,
        search: str | None = None,
        min_rating: float | Decimal | None = None,
        limit: int = Limits.DEFAULT_PAGE_SIZE,
        offset: int = 0,
    ) -> list[Vendor]:
        """
        Vendors newest first.

        ``search`` matches business name, food types and area name
        case-insensitively.
        """
        query = select(Vendor).join(Area, Vendor.area_id == Area.id).options(joinedload(Vendor.area))
        if area_id is not None:
            query = query.where(Vendor.area_id == area_id)
        if min_rating is not None:
            if not RatingScale.MIN - 1 <= float(min_rating) <= RatingScale.MAX:
                raise ValidationError("min_rating must be between 0 and 5", field="min_rating")
            query = query.where(Vendor.average_rating >= Decimal(str(min_rating)))
        pattern = like_pattern(search)
        if pattern:
            query = query.where(
                or_(
                    Vendor.business_name.ilike(pattern, escape="\\"),
                    cast(Vendor.food_types, String).ilike(pattern, escape="\\"),
                    Area.name.ilike(pattern, escape="\\"),
                )
            )
        query = query.order_by(Vendor.created_at.desc(), Vendor.id).limit(limit).offset(offset)
        return list(self._db.scalars(query).unique())

    def register_vendor(self, caller: PermissionContext, data: dict[str, Any]) -> Vendor:
        """
        Register a vendor for the caller's profile (or ``profile_id`` if given).

        A consumer owner is promoted to the vendor role in the same
        transaction; authority and admin owners keep their role.
        """
        self.reject_read_only(data, VENDOR_DERIVED_FIELDS)

        vendor = Vendor(
            profile_id=data.get("profile_id") or caller.profile_id,
            business_name=require_text("business_name", data.get("business_name"), Limits.MAX_NAME_LENGTH),
            food_types=normalize_food_types(data.get("food_types")),
            location_description=require_text(
                "location_description", data.get("location_description"), Limits.MAX_DESCRIPTION_LENGTH
            ),
            license_number=optional_text("license_number", data.get("license_number"), Limits.MAX_NAME_LENGTH),
            is_licensed=validate_flag("is_licensed", data.get("is_licensed", False)),
        )
        authorize(caller, Action.CREATE, vendor)

        owner = ProfileService(self._db).get_profile(vendor.profile_id)
        vendor.area_id = AreaService(self._db).ensure_exists(data.get("area_id")).id

        if owner.role not in NON_DEMOTABLE_ROLES and owner.role != Roles.VENDOR:
            owner.role = Roles.VENDOR
            logger.info("Profile promoted to vendor", profile_id=str(owner.id))

        self._db.add(vendor)
        self.commit()
        logger.info("Vendor registered", vendor_id=str(vendor.id), profile_id=str(owner.id))
        return vendor

    def update_vendor(self, caller: PermissionContext, vendor_id: uuid.UUID, data: dict[str, Any]) -> Vendor:
        vendor = self.get_vendor(vendor_id)
        authorize(caller, Action.UPDATE, vendor)
        self.reject_read_only(data, IMMUTABLE_FIELDS)

        changes: dict[str, Any] = {}
        if "business_name" in data:
            changes["business_name"] = require_text("business_name", data["business_name"], Limits.MAX_NAME_LENGTH)
        if "location_description" in data:
            changes["location_description"] = require_text(
                "location_description", data["location_description"], Limits.MAX_DESCRIPTION_LENGTH
            )
        if "food_types" in data:
            changes["food_types"] = normalize_food_types(data["food_types"])
        if "license_number" in data:
            changes["license_number"] = optional_text("license_number", data["license_number"], Limits.MAX_NAME_LENGTH)
        if "is_licensed" in data:
            changes["is_licensed"] = validate_flag("is_licensed", data["is_licensed"])
        if "area_id" in data:
            changes["area_id"] = AreaService(self._db).ensure_exists(data["area_id"]).id

        changed = self.changed_fields(vendor, changes)
        if not changed:
            return vendor

        self.apply(vendor, {k: changes[k] for k in changed})
        self.commit()
        logger.info("Vendor updated", vendor_id=str(vendor.id), fields=sorted(changed))
        return vendor

    def delete_vendor(self, caller: PermissionContext, vendor_id: uuid.UUID) -> None:
        """Delete a vendor with its ratings; complaints about it keep a null vendor."""
        vendor = self.get_vendor(vendor_id)
        authorize(caller, Action.DELETE, vendor)

        self._db.delete(vendor)
        self.commit()
        logger.info("Vendor deleted", vendor_id=str(vendor_id))
