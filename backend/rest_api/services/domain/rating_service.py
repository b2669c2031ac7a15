"""
Rating Domain Service.

Every rating write ends with a synchronous recompute of the affected vendor
aggregates inside the same transaction. A reviewer rates a vendor at most
once; a second attempt is a conflict that points at the existing rating.
"""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import String, cast, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from shared.config.constants import Limits, RatingScale
from shared.config.logging import get_logger
from shared.utils.exceptions import DuplicateRatingError, ValidationError
from shared.utils.validators import like_pattern, optional_text, validate_rating_value
from rest_api.models import Profile, Rating, Vendor
from rest_api.services.base_service import BaseService
from rest_api.services.domain.aggregates import recompute_vendor_aggregate, recompute_vendor_aggregates
from rest_api.services.domain.vendor_service import VendorService
from rest_api.services.permissions import Action, PermissionContext, authorize

logger = get_logger(__name__)

IMMUTABLE_FIELDS = {"id", "reviewer_id", "created_at", "updated_at"}


class RatingService(BaseService[Rating]):
    """Domain service for Rating operations."""

    def __init__(self, db: Session):
        super().__init__(db, Rating, entity_name="Rating")

    def find_existing(self, vendor_id: uuid.UUID, reviewer_id: uuid.UUID) -> Rating | None:
        return self._db.scalar(
            select(Rating).where(Rating.vendor_id == vendor_id, Rating.reviewer_id == reviewer_id)
        )

    def _check_duplicate(self, vendor_id: uuid.UUID, reviewer_id: uuid.UUID, exclude_id: uuid.UUID | None = None) -> None:
        existing = self.find_existing(vendor_id, reviewer_id)
        if existing is not None and existing.id != exclude_id:
            raise DuplicateRatingError(vendor_id, reviewer_id, existing_rating_id=existing.id)

    def _flush_unique(self, vendor_id: uuid.UUID, reviewer_id: uuid.UUID) -> None:
        """Flush, turning a lost uniqueness race into DuplicateRatingError."""
        try:
            self._db.flush()
        except IntegrityError:
            self._db.rollback()
            existing = self.find_existing(vendor_id, reviewer_id)
            raise DuplicateRatingError(
                vendor_id,
                reviewer_id,
                existing_rating_id=existing.id if existing else None,
                race=True,
            )

    @staticmethod
    def _clean_scores(data: dict[str, Any], partial: bool) -> dict[str, Any]:
        changes: dict[str, Any] = {}
        if not partial or "rating" in data:
            changes["rating"] = validate_rating_value("rating", data.get("rating"))
        for field in RatingScale.SUB_RATING_FIELDS:
            if not partial or field in data:
                changes[field] = validate_rating_value(field, data.get(field), required=False)
        if not partial or "review" in data:
            changes["review"] = optional_text("review", data.get("review"), Limits.MAX_REVIEW_LENGTH)
        return changes

    # =========================================================================
    # Reads
    # =========================================================================

    def get_rating(self, rating_id: uuid.UUID) -> Rating:
        return self.get_or_404(rating_id)

    def list_ratings(
        self,
        vendor_id: uuid.UUID | None = None,
        reviewer_id: uuid.UUID | None = None,
        search: str | None = None,
        limit: int = Limits.DEFAULT_PAGE_SIZE,
        offset: int = 0,
    ) -> list[Rating]:
        """
        Ratings newest first.

        ``search`` matches vendor business name, food types and reviewer name.
        """
        query = (
            select(Rating)
            .join(Vendor, Rating.vendor_id == Vendor.id)
            .join(Profile, Rating.reviewer_id == Profile.id)
        )
        if vendor_id is not None:
            query = query.where(Rating.vendor_id == vendor_id)
        if reviewer_id is not None:
            query = query.where(Rating.reviewer_id == reviewer_id)
        pattern = like_pattern(search)
        if pattern:
            query = query.where(
                or_(
                    Vendor.business_name.ilike(pattern, escape="\\"),
                    cast(Vendor.food_types, String).ilike(pattern, escape="\\"),
                    Profile.full_name.ilike(pattern, escape="\\"),
                )
            )
        query = query.order_by(Rating.created_at.desc(), Rating.id).limit(limit).offset(offset)
        return list(self._db.scalars(query))

    # =========================================================================
    # Writes
    # =========================================================================

    def submit_rating(self, caller: PermissionContext, data: dict[str, Any]) -> Rating:
        """
        Rate a vendor.

        Raises:
            ValidationError: rating or a sub-rating outside 1..5.
            NotFoundError: the vendor does not exist.
            DuplicateRatingError: the reviewer already rated this vendor.
        """
        self.reject_read_only(data, IMMUTABLE_FIELDS - {"reviewer_id"})
        scores = self._clean_scores(data, partial=False)

        rating = Rating(reviewer_id=data.get("reviewer_id") or caller.profile_id, **scores)
        authorize(caller, Action.CREATE, rating)

        if data.get("vendor_id") is None:
            raise ValidationError("vendor_id is required", field="vendor_id")
        rating.vendor_id = VendorService(self._db).get_vendor(data["vendor_id"], field="vendor_id").id
        self._check_duplicate(rating.vendor_id, rating.reviewer_id)

        self._db.add(rating)
        self._flush_unique(rating.vendor_id, rating.reviewer_id)
        recompute_vendor_aggregate(self._db, rating.vendor_id)
        self.commit()

        logger.info(
            "Rating submitted",
            rating_id=str(rating.id),
            vendor_id=str(rating.vendor_id),
            rating=rating.rating,
        )
        return rating

    def update_rating(self, caller: PermissionContext, rating_id: uuid.UUID, data: dict[str, Any]) -> Rating:
        """
        Edit a rating. Moving it to another vendor recomputes both vendors.
        """
        rating = self.get_rating(rating_id)
        authorize(caller, Action.UPDATE, rating)
        self.reject_read_only(data, IMMUTABLE_FIELDS)

        changes = self._clean_scores(data, partial=True)
        if "vendor_id" in data:
            if data["vendor_id"] is None:
                raise ValidationError("vendor_id is required", field="vendor_id")
            changes["vendor_id"] = VendorService(self._db).get_vendor(data["vendor_id"], field="vendor_id").id

        changed = self.changed_fields(rating, changes)
        if not changed:
            return rating

        old_vendor_id = rating.vendor_id
        if "vendor_id" in changed:
            self._check_duplicate(changes["vendor_id"], rating.reviewer_id, exclude_id=rating.id)

        self.apply(rating, {k: changes[k] for k in changed})
        self._flush_unique(rating.vendor_id, rating.reviewer_id)
        recompute_vendor_aggregates(self._db, {old_vendor_id, rating.vendor_id})
        self.commit()

        logger.info("Rating updated", rating_id=str(rating.id), fields=sorted(changed))
        return rating

    def delete_rating(self, caller: PermissionContext, rating_id: uuid.UUID) -> None:
        rating = self.get_rating(rating_id)
        authorize(caller, Action.DELETE, rating)

        vendor_id = rating.vendor_id
        self._db.delete(rating)
        recompute_vendor_aggregate(self._db, vendor_id)
        self.commit()

        logger.info("Rating deleted", rating_id=str(rating_id), vendor_id=str(vendor_id))
