"""
Complaint Domain Service.

Complaints are private to the complainant, the assignee and the
authority/admin roles. Content edits and the resolution workflow share one
update path; workflow fields carry their own field-level rule.
"""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import or_, select
from sqlalchemy.orm import Session, joinedload

from shared.config.constants import (
    COMPLAINT_TRANSITIONS,
    COMPLAINT_WORKFLOW_FIELDS,
    ELEVATED_ROLES,
    ComplaintCategory,
    ComplaintPriority,
    ComplaintStatus,
    Limits,
)
from shared.config.logging import get_logger
from shared.utils.exceptions import InvalidTransitionError, NotFoundError, ValidationError
from shared.utils.validators import like_pattern, optional_text, require_text, validate_choice
from rest_api.models import Area, Complaint, Profile
from rest_api.services.base_service import BaseService
from rest_api.services.domain.area_service import AreaService
from rest_api.services.domain.vendor_service import VendorService
from rest_api.services.permissions import Action, PermissionContext, authorize

logger = get_logger(__name__)

IMMUTABLE_FIELDS = {"id", "complainant_id", "resolved_at", "created_at", "updated_at"}


def validate_priority(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value not in ComplaintPriority.ALL:
        raise ValidationError(
            f"priority must be between {ComplaintPriority.LOW} and {ComplaintPriority.URGENT}",
            field="priority",
            value=value,
        )
    return value


def validate_transition(from_status: str, to_status: str) -> None:
    """
    Raise InvalidTransitionError unless ``from_status -> to_status`` is allowed.

    Writing the current status again is always allowed.
    """
    validate_choice("status", to_status, ComplaintStatus.ALL)
    if from_status == to_status:
        return
    if to_status not in COMPLAINT_TRANSITIONS.get(from_status, []):
        raise InvalidTransitionError("Complaint", from_status, to_status)


class ComplaintService(BaseService[Complaint]):
    """Domain service for Complaint operations."""

    def __init__(self, db: Session):
        super().__init__(db, Complaint, entity_name="Complaint")

    # =========================================================================
    # Reads
    # =========================================================================

    def get_complaint(self, caller: PermissionContext, complaint_id: uuid.UUID) -> Complaint:
        complaint = self.get_or_404(complaint_id)
        authorize(caller, Action.READ, complaint)
        return complaint

    def list_complaints(
        self,
        caller: PermissionContext,
        area_id: uuid.UUID | None = None,
        status: str | None = None,
        category: str | None = None,
        vendor_id: uuid.UUID | None = None,
        search: str | None = None,
        limit: int = Limits.DEFAULT_PAGE_SIZE,
        offset: int = 0,
    ) -> list[Complaint]:
        """
        Complaints the caller may read, newest first.

        ``search`` matches title, description and area name.
        """
        query = select(Complaint).join(Area, Complaint.area_id == Area.id).options(
            joinedload(Complaint.area)
        )
        query = caller.filter_query(query, Complaint)

        if area_id is not None:
            query = query.where(Complaint.area_id == area_id)
        if status is not None:
            validate_choice("status", status, ComplaintStatus.ALL)
            query = query.where(Complaint.status == status)
        if category is not None:
            validate_choice("category", category, ComplaintCategory.ALL)
            query = query.where(Complaint.category == category)
        if vendor_id is not None:
            query = query.where(Complaint.vendor_id == vendor_id)
        pattern = like_pattern(search)
        if pattern:
            query = query.where(
                or_(
                    Complaint.title.ilike(pattern, escape="\\"),
                    Complaint.description.ilike(pattern, escape="\\"),
                    Area.name.ilike(pattern, escape="\\"),
                )
            )

        query = query.order_by(Complaint.created_at.desc(), Complaint.id).limit(limit).offset(offset)
        return list(self._db.scalars(query).unique())

    # =========================================================================
    # Writes
    # =========================================================================

    def file_complaint(self, caller: PermissionContext, data: dict[str, Any]) -> Complaint:
        """
        File a complaint. It always starts pending and unassigned.
        """
        self.reject_read_only(data, COMPLAINT_WORKFLOW_FIELDS | (IMMUTABLE_FIELDS - {"complainant_id"}))

        complaint = Complaint(
            complainant_id=data.get("complainant_id") or caller.profile_id,
            category=validate_choice("category", data.get("category"), ComplaintCategory.ALL),
            title=require_text("title", data.get("title"), Limits.MAX_TITLE_LENGTH),
            description=require_text("description", data.get("description"), Limits.MAX_DESCRIPTION_LENGTH),
            priority=validate_priority(data.get("priority", ComplaintPriority.LOW)),
            status=ComplaintStatus.PENDING,
        )
        authorize(caller, Action.CREATE, complaint)

        complaint.area_id = AreaService(self._db).ensure_exists(data.get("area_id")).id
        if data.get("vendor_id") is not None:
            complaint.vendor_id = VendorService(self._db).get_vendor(data["vendor_id"], field="vendor_id").id

        self._db.add(complaint)
        self.commit()
        logger.info(
            "Complaint filed",
            complaint_id=str(complaint.id),
            category=complaint.category,
            vendor_id=str(complaint.vendor_id) if complaint.vendor_id else None,
        )
        return complaint

    def _clean(self, complaint: Complaint, data: dict[str, Any]) -> dict[str, Any]:
        self.reject_read_only(data, IMMUTABLE_FIELDS)
        changes: dict[str, Any] = {}

        if "title" in data:
            changes["title"] = require_text("title", data["title"], Limits.MAX_TITLE_LENGTH)
        if "description" in data:
            changes["description"] = require_text("description", data["description"], Limits.MAX_DESCRIPTION_LENGTH)
        if "category" in data:
            changes["category"] = validate_choice("category", data["category"], ComplaintCategory.ALL)
        if "priority" in data:
            changes["priority"] = validate_priority(data["priority"])
        if "area_id" in data:
            changes["area_id"] = AreaService(self._db).ensure_exists(data["area_id"]).id
        if "vendor_id" in data:
            vendor_id = data["vendor_id"]
            changes["vendor_id"] = (
                None if vendor_id is None
                else VendorService(self._db).get_vendor(vendor_id, field="vendor_id").id
            )

        if "status" in data:
            validate_transition(complaint.status, data["status"])
            changes["status"] = data["status"]
        if "assigned_to" in data:
            changes["assigned_to"] = self._resolve_assignee(data["assigned_to"])
        if "resolution_notes" in data:
            changes["resolution_notes"] = optional_text(
                "resolution_notes", data["resolution_notes"], Limits.MAX_DESCRIPTION_LENGTH
            )
        return changes

    def _resolve_assignee(self, assignee_id: uuid.UUID | None) -> uuid.UUID | None:
        """An assignee must be an existing authority or admin profile."""
        if assignee_id is None:
            return None
        assignee = self._db.get(Profile, assignee_id)
        if assignee is None:
            raise NotFoundError("Profile", assignee_id, field="assigned_to")
        if assignee.role not in ELEVATED_ROLES:
            raise ValidationError(
                "Complaints can only be assigned to an authority or admin",
                field="assigned_to",
                assignee_role=assignee.role,
            )
        return assignee.id

    def update_complaint(
        self,
        caller: PermissionContext,
        complaint_id: uuid.UUID,
        data: dict[str, Any],
    ) -> Complaint:
        """
        Edit content and/or workflow fields.

        The complainant may edit content; only authority and admin roles
        touch workflow fields. Being the assignee grants nothing by itself.
        resolved_at follows the status.
        """
        complaint = self.get_or_404(complaint_id)
        authorize(caller, Action.UPDATE, complaint)

        changes = self._clean(complaint, data)
        changed = self.changed_fields(complaint, changes)
        caller.authorize_fields(complaint, complaint, changed)
        if not changed:
            return complaint

        previous_status = complaint.status
        self.apply(complaint, {k: changes[k] for k in changed})
        self.commit()

        logger.info(
            "Complaint updated",
            complaint_id=str(complaint.id),
            fields=sorted(changed),
            from_status=previous_status,
            to_status=complaint.status,
        )
        return complaint

    def assign_complaint(
        self,
        caller: PermissionContext,
        complaint_id: uuid.UUID,
        assignee_id: uuid.UUID | None,
    ) -> Complaint:
        """Assign (or unassign with None) an authority/admin to a complaint."""
        return self.update_complaint(caller, complaint_id, {"assigned_to": assignee_id})

    def delete_complaint(self, caller: PermissionContext, complaint_id: uuid.UUID) -> None:
        complaint = self.get_or_404(complaint_id)
        authorize(caller, Action.DELETE, complaint)

        self._db.delete(complaint)
        self.commit()
        logger.info("Complaint deleted", complaint_id=str(complaint_id))
