"""
Row-level policy implementations.
Strategy Pattern for per-table access control.

Each table has one TablePolicy deciding, for a caller and a row, whether
an action is allowed. The registry at the bottom of this module is the
single place the access matrix is defined:

    table       read                    insert          update                  delete
    areas       anyone                  admin           admin                   admin
    profiles    anyone                  own row         owner or admin          owner or admin
    vendors     anyone                  owns profile    owner                   owner or admin
    complaints  complainant, assignee,  complainant     complainant,            complainant or admin
                authority or admin                      authority or admin
    ratings     anyone                  reviewer        owner                   owner or admin

Field-level rules (role changes, complaint workflow) are layered on top via
can_write_fields.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Iterable

from sqlalchemy import Select, false, or_

from shared.config.constants import COMPLAINT_WORKFLOW_FIELDS, PROFILE_ADMIN_FIELDS

if TYPE_CHECKING:
    from .context import PermissionContext


# =============================================================================
# Default Mixins for Common Patterns
# =============================================================================


class PublicReadMixin:
    """Mixin for tables anyone may read, including anonymous callers."""

    def can_read(self, caller: "PermissionContext", row: Any) -> bool:
        return True

    def filter_query(self, query: Select, caller: "PermissionContext", model: Any) -> Select:
        return query


class AdminWriteMixin:
    """Mixin for reference tables only admins may change."""

    def can_create(self, caller: "PermissionContext", row: Any) -> bool:
        return caller.is_admin

    def can_update(self, caller: "PermissionContext", row: Any) -> bool:
        return caller.is_admin

    def can_delete(self, caller: "PermissionContext", row: Any) -> bool:
        return caller.is_admin


class OwnerOrAdminMixin:
    """Mixin for rows the owner or an admin may update and delete."""

    def can_update(self, caller: "PermissionContext", row: Any) -> bool:
        return self.is_owner(caller, row) or caller.is_admin

    def can_delete(self, caller: "PermissionContext", row: Any) -> bool:
        return self.is_owner(caller, row) or caller.is_admin


class UnrestrictedFieldsMixin:
    """Mixin for tables without field-level rules."""

    def can_write_fields(self, caller: "PermissionContext", row: Any, fields: Iterable[str]) -> bool:
        return True


# =============================================================================
# Base Table Policy
# =============================================================================


class TablePolicy(ABC):
    """
    Abstract base for table policies.

    Each implementation defines access rules for one table. Policies never
    raise; they answer yes or no and the context turns a no into an error.
    """

    @property
    @abstractmethod
    def table_name(self) -> str:
        """Return the table this policy guards."""
        ...

    def is_owner(self, caller: "PermissionContext", row: Any) -> bool:
        """Check if the caller owns the row."""
        return False

    @abstractmethod
    def can_read(self, caller: "PermissionContext", row: Any) -> bool:
        ...

    @abstractmethod
    def can_create(self, caller: "PermissionContext", row: Any) -> bool:
        ...

    @abstractmethod
    def can_update(self, caller: "PermissionContext", row: Any) -> bool:
        ...

    @abstractmethod
    def can_delete(self, caller: "PermissionContext", row: Any) -> bool:
        ...

    @abstractmethod
    def can_write_fields(self, caller: "PermissionContext", row: Any, fields: Iterable[str]) -> bool:
        """Check field-level rules for an insert or update touching ``fields``."""
        ...

    @abstractmethod
    def filter_query(self, query: Select, caller: "PermissionContext", model: Any) -> Select:
        """Restrict a listing to rows the caller may read."""
        ...


class AreaPolicy(PublicReadMixin, AdminWriteMixin, UnrestrictedFieldsMixin, TablePolicy):
    """Areas are public reference data maintained by admins."""

    table_name = "areas"


class ProfilePolicy(PublicReadMixin, OwnerOrAdminMixin, TablePolicy):
    """
    Anyone may read a profile; an identity may only create its own.
    Only admins change roles and verification.
    """

    table_name = "profiles"

    def is_owner(self, caller: "PermissionContext", row: Any) -> bool:
        return caller.identity_id is not None and row.user_id == caller.identity_id

    def can_create(self, caller: "PermissionContext", row: Any) -> bool:
        return self.is_owner(caller, row)

    def can_write_fields(self, caller: "PermissionContext", row: Any, fields: Iterable[str]) -> bool:
        if PROFILE_ADMIN_FIELDS.intersection(fields):
            return caller.is_admin
        return True


class VendorPolicy(PublicReadMixin, OwnerOrAdminMixin, UnrestrictedFieldsMixin, TablePolicy):
    """Vendors are public; only the owner edits a listing, the owner or an admin removes it."""

    table_name = "vendors"

    def is_owner(self, caller: "PermissionContext", row: Any) -> bool:
        return caller.profile_id is not None and row.profile_id == caller.profile_id

    def can_create(self, caller: "PermissionContext", row: Any) -> bool:
        return self.is_owner(caller, row)

    def can_update(self, caller: "PermissionContext", row: Any) -> bool:
        return self.is_owner(caller, row)


class ComplaintPolicy(TablePolicy):
    """
    Complaints are private to the complainant, the assignee and the
    authority/admin roles.
    """

    table_name = "complaints"

    def is_owner(self, caller: "PermissionContext", row: Any) -> bool:
        return caller.profile_id is not None and row.complainant_id == caller.profile_id

    def is_assignee(self, caller: "PermissionContext", row: Any) -> bool:
        return caller.profile_id is not None and row.assigned_to == caller.profile_id

    def can_read(self, caller: "PermissionContext", row: Any) -> bool:
        return self.is_owner(caller, row) or self.is_assignee(caller, row) or caller.is_elevated

    def can_create(self, caller: "PermissionContext", row: Any) -> bool:
        return self.is_owner(caller, row)

    def can_update(self, caller: "PermissionContext", row: Any) -> bool:
        # The assignment alone grants no write access; the role does.
        return self.is_owner(caller, row) or caller.is_elevated

    def can_delete(self, caller: "PermissionContext", row: Any) -> bool:
        return self.is_owner(caller, row) or caller.is_admin

    def can_write_fields(self, caller: "PermissionContext", row: Any, fields: Iterable[str]) -> bool:
        if COMPLAINT_WORKFLOW_FIELDS.intersection(fields):
            return caller.is_elevated
        return True

    def filter_query(self, query: Select, caller: "PermissionContext", model: Any) -> Select:
        if caller.is_elevated:
            return query
        if caller.profile_id is None:
            return query.where(false())
        return query.where(
            or_(
                model.complainant_id == caller.profile_id,
                model.assigned_to == caller.profile_id,
            )
        )


class RatingPolicy(PublicReadMixin, UnrestrictedFieldsMixin, TablePolicy):
    """Ratings are public; only the reviewer edits, the reviewer or an admin deletes."""

    table_name = "ratings"

    def is_owner(self, caller: "PermissionContext", row: Any) -> bool:
        return caller.profile_id is not None and row.reviewer_id == caller.profile_id

    def can_create(self, caller: "PermissionContext", row: Any) -> bool:
        return self.is_owner(caller, row)

    def can_update(self, caller: "PermissionContext", row: Any) -> bool:
        return self.is_owner(caller, row)

    def can_delete(self, caller: "PermissionContext", row: Any) -> bool:
        return self.is_owner(caller, row) or caller.is_admin


# Policy registry
POLICY_REGISTRY: dict[str, TablePolicy] = {
    policy.table_name: policy
    for policy in (AreaPolicy(), ProfilePolicy(), VendorPolicy(), ComplaintPolicy(), RatingPolicy())
}


def get_policy(table: Any) -> TablePolicy:
    """
    Get the policy for a table name, model class or model instance.

    Raises:
        KeyError: If no policy is registered. Every table must have one.
    """
    if not isinstance(table, str):
        table = table.__tablename__
    return POLICY_REGISTRY[table]
