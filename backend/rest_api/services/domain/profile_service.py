"""
Profile Domain Service.

Owns profile provisioning (one profile per identity, created after
registration) and profile deletion with its cascades.
"""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from shared.config.constants import DEFAULT_PROFILE_NAME, ErrorMessages, Limits, Roles
from shared.config.logging import get_logger, mask_user_id
from shared.security.auth import CallerIdentity
from shared.utils.exceptions import ConflictError, ProfileNotFoundError, ReadOnlyFieldError, ValidationError
from shared.utils.validators import optional_text, require_text, validate_choice
from rest_api.models import Complaint, Profile, Rating, Vendor
from rest_api.services.base_service import BaseService
from rest_api.services.domain.aggregates import recompute_vendor_aggregates
from rest_api.services.domain.area_service import AreaService
from rest_api.services.permissions import Action, PermissionContext, authorize

logger = get_logger(__name__)

EDITABLE_FIELDS = ("full_name", "phone", "area_id", "role", "is_verified")


def display_name(identity: CallerIdentity) -> str:
    """Full name from identity metadata, or the fallback name."""
    name = (identity.full_name or "").strip()
    return name[: Limits.MAX_NAME_LENGTH] if name else DEFAULT_PROFILE_NAME


class ProfileService(BaseService[Profile]):
    """Domain service for Profile operations."""

    def __init__(self, db: Session):
        super().__init__(db, Profile, entity_name="Profile")

    # =========================================================================
    # Lookups
    # =========================================================================

    def get_by_user_id(self, user_id: str) -> Profile | None:
        return self._db.scalar(select(Profile).where(Profile.user_id == user_id))

    def get_profile(self, profile_id: uuid.UUID) -> Profile:
        profile = self.find(profile_id)
        if profile is None:
            raise ProfileNotFoundError(profile_id)
        return profile

    def list_profiles(
        self,
        role: str | None = None,
        limit: int = Limits.DEFAULT_PAGE_SIZE,
        offset: int = 0,
    ) -> list[Profile]:
        query = select(Profile)
        if role is not None:
            validate_choice("role", role, Roles.ALL)
            query = query.where(Profile.role == role)
        query = query.order_by(Profile.created_at.desc(), Profile.id).limit(limit).offset(offset)
        return list(self._db.scalars(query))

    def activity_counts(self, profile_id: uuid.UUID) -> dict[str, int]:
        """Complaints filed, ratings given and vendors owned by a profile."""
        return {
            "complaints_filed": self._db.scalar(
                select(func.count(Complaint.id)).where(Complaint.complainant_id == profile_id)
            ) or 0,
            "ratings_given": self._db.scalar(
                select(func.count(Rating.id)).where(Rating.reviewer_id == profile_id)
            ) or 0,
            "vendors_owned": self._db.scalar(
                select(func.count(Vendor.id)).where(Vendor.profile_id == profile_id)
            ) or 0,
        }

    def get_me(self, caller: PermissionContext) -> tuple[Profile, dict[str, int]]:
        """The caller's own profile with activity counters."""
        if caller.profile is None:
            raise ProfileNotFoundError()
        return caller.profile, self.activity_counts(caller.profile.id)

    # =========================================================================
    # Provisioning
    # =========================================================================

    def provision(self, identity: CallerIdentity) -> tuple[Profile, bool]:
        """
        Ensure exactly one profile exists for an identity.

        Returns (profile, created). Repeat calls return the existing profile
        unchanged; a concurrent provision that wins the unique constraint is
        treated the same way.
        """
        existing = self.get_by_user_id(identity.id)
        if existing is not None:
            return existing, False

        profile = Profile(
            user_id=identity.id,
            full_name=display_name(identity),
            phone=identity.phone,
            role=Roles.CONSUMER,
            area_id=None,
            is_verified=False,
        )
        authorize(PermissionContext(identity, None), Action.CREATE, profile)

        self._db.add(profile)
        try:
            self._db.flush()
        except IntegrityError:
            self._db.rollback()
            existing = self.get_by_user_id(identity.id)
            if existing is None:
                raise
            return existing, False

        self.commit()
        logger.info("Profile provisioned", profile_id=str(profile.id), user_id=mask_user_id(identity.id))
        return profile, True

    def create_profile(self, caller: PermissionContext, data: dict[str, Any]) -> Profile:
        """
        Explicitly insert the caller's own profile.

        Raises:
            ConflictError: The identity already has a profile.
        """
        user_id = data.get("user_id") or caller.identity_id
        profile = Profile(
            user_id=user_id,
            full_name=require_text("full_name", data.get("full_name"), Limits.MAX_NAME_LENGTH),
            phone=optional_text("phone", data.get("phone"), Limits.MAX_PHONE_LENGTH),
            role=Roles.CONSUMER,
            is_verified=False,
        )
        authorize(caller, Action.CREATE, profile)
        if data.get("area_id") is not None:
            profile.area_id = AreaService(self._db).ensure_exists(data["area_id"]).id

        if self.get_by_user_id(user_id) is not None:
            raise ConflictError(ErrorMessages.PROFILE_EXISTS, user_id=mask_user_id(user_id))

        self._db.add(profile)
        try:
            self._db.flush()
        except IntegrityError:
            self._db.rollback()
            raise ConflictError(ErrorMessages.PROFILE_EXISTS, user_id=mask_user_id(user_id))

        self.commit()
        logger.info("Profile created", profile_id=str(profile.id))
        return profile

    # =========================================================================
    # Updates
    # =========================================================================

    def _clean(self, data: dict[str, Any]) -> dict[str, Any]:
        self.reject_read_only(data, {"id", "user_id", "created_at", "updated_at"})
        changes: dict[str, Any] = {}
        if "full_name" in data:
            changes["full_name"] = require_text("full_name", data["full_name"], Limits.MAX_NAME_LENGTH)
        if "phone" in data:
            changes["phone"] = optional_text("phone", data["phone"], Limits.MAX_PHONE_LENGTH)
        if "area_id" in data:
            area_id = data["area_id"]
            changes["area_id"] = None if area_id is None else AreaService(self._db).ensure_exists(area_id).id
        if "role" in data:
            changes["role"] = validate_choice("role", data["role"], Roles.ALL)
        if "is_verified" in data:
            if not isinstance(data["is_verified"], bool):
                raise ValidationError("is_verified must be true or false", field="is_verified")
            changes["is_verified"] = data["is_verified"]
        unknown = set(data) - set(EDITABLE_FIELDS)
        if unknown:
            raise ReadOnlyFieldError(sorted(unknown)[0], entity=self._entity_name)
        return changes

    def update_profile(self, caller: PermissionContext, profile_id: uuid.UUID, data: dict[str, Any]) -> Profile:
        """
        Update a profile. Owner or admin; role and verification are admin-only.
        """
        profile = self.get_profile(profile_id)
        authorize(caller, Action.UPDATE, profile)

        changes = self._clean(data)
        changed = self.changed_fields(profile, changes)
        caller.authorize_fields(profile, profile, changed)
        if not changed:
            return profile

        self.apply(profile, {k: changes[k] for k in changed})
        self.commit()
        logger.info("Profile updated", profile_id=str(profile.id), fields=sorted(changed))
        return profile

    def set_role(self, caller: PermissionContext, profile_id: uuid.UUID, role: str) -> Profile:
        """Change a profile's role (admin only)."""
        return self.update_profile(caller, profile_id, {"role": role})

    # =========================================================================
    # Deletion
    # =========================================================================

    def _delete(self, profile: Profile) -> None:
        """
        Delete a profile and everything it owns, then rebuild the aggregate
        of every surviving vendor that lost one of its ratings.
        """
        owned_vendor_ids = set(
            self._db.scalars(select(Vendor.id).where(Vendor.profile_id == profile.id))
        )
        rated_vendor_ids = set(
            self._db.scalars(select(Rating.vendor_id).where(Rating.reviewer_id == profile.id))
        )

        self._db.delete(profile)
        self._db.flush()

        recompute_vendor_aggregates(self._db, rated_vendor_ids - owned_vendor_ids)

    def delete_profile(self, caller: PermissionContext, profile_id: uuid.UUID) -> None:
        profile = self.get_profile(profile_id)
        authorize(caller, Action.DELETE, profile)

        self._delete(profile)
        self.commit()
        logger.info("Profile deleted", profile_id=str(profile_id))

    def delete_for_identity(self, user_id: str) -> bool:
        """
        Remove the profile of an identity deleted at the identity provider.

        Returns False when the identity never had a profile.
        """
        profile = self.get_by_user_id(user_id)
        if profile is None:
            return False

        profile_id = profile.id
        self._delete(profile)
        self.commit()
        logger.info("Profile deleted for identity", profile_id=str(profile_id), user_id=mask_user_id(user_id))
        return True
