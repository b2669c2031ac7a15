"""
Permission Context - Main entry point for permission checks.
"""

from __future__ import annotations

import uuid
from enum import Enum, auto
from typing import TYPE_CHECKING, Any, Iterable

from sqlalchemy import Select

from shared.config.constants import ELEVATED_ROLES, Roles
from shared.config.logging import audit_authorization_denied
from shared.utils.exceptions import AuthenticationError, AuthorizationError

from .strategies import TablePolicy, get_policy

if TYPE_CHECKING:
    from rest_api.models import Profile
    from shared.security.auth import CallerIdentity


class Action(Enum):
    """Available actions for permission checks."""
    CREATE = auto()
    READ = auto()
    UPDATE = auto()
    DELETE = auto()
    LIST = auto()  # Alias for READ with filtering


class PermissionContext:
    """
    The caller as seen by the permission layer.

    Built from the verified identity and that identity's Profile. The role
    comes from the profile; an identity without a profile has no role.

    Usage:
        ctx = PermissionContext(identity, profile)

        # Check a row
        if ctx.can(Action.UPDATE, complaint):
            ...

        # Enforce, raising AuthorizationError
        ctx.authorize(Action.DELETE, rating)

        # Filter a listing
        query = ctx.filter_query(select(Complaint), Complaint)
    """

    def __init__(self, identity: "CallerIdentity | None" = None, profile: "Profile | None" = None):
        self._identity = identity
        self._profile = profile

    @classmethod
    def anonymous(cls) -> "PermissionContext":
        return cls(None, None)

    @property
    def identity(self) -> "CallerIdentity | None":
        return self._identity

    @property
    def profile(self) -> "Profile | None":
        return self._profile

    @property
    def identity_id(self) -> str | None:
        """External identity ID, None when anonymous."""
        return self._identity.id if self._identity else None

    @property
    def profile_id(self) -> uuid.UUID | None:
        return self._profile.id if self._profile else None

    @property
    def role(self) -> str | None:
        return self._profile.role if self._profile else None

    @property
    def is_authenticated(self) -> bool:
        return self._identity is not None

    @property
    def is_admin(self) -> bool:
        return self.role == Roles.ADMIN

    @property
    def is_elevated(self) -> bool:
        """Authority or admin."""
        return self.role in ELEVATED_ROLES

    def can(self, action: Action, table: Any, row: Any = None) -> bool:
        """
        Check if the caller may perform action on row.

        Args:
            action: The action to check
            table: Table name, model class or model instance
            row: The row; defaults to ``table`` when an instance is passed

        Returns:
            True if action is allowed
        """
        if row is None and not isinstance(table, (str, type)):
            row = table
        policy: TablePolicy = get_policy(table)

        if action in (Action.READ, Action.LIST):
            return policy.can_read(self, row)

        # Every write needs an authenticated identity
        if not self.is_authenticated:
            return False

        if action == Action.CREATE:
            return policy.can_create(self, row)
        elif action == Action.UPDATE:
            return policy.can_update(self, row)
        elif action == Action.DELETE:
            return policy.can_delete(self, row)

        return False

    def authorize(self, action: Action, table: Any, row: Any = None) -> None:
        """
        Raise unless the caller may perform action on row.

        Raises:
            AuthenticationError: A write attempted without an identity.
            AuthorizationError: The policy denied the action.
        """
        if action not in (Action.READ, Action.LIST) and not self.is_authenticated:
            raise AuthenticationError()
        if not self.can(action, table, row):
            self._deny(action, table, row)

    def authorize_fields(self, table: Any, row: Any, fields: Iterable[str]) -> None:
        """
        Enforce field-level rules for a write touching ``fields``.

        Raises:
            AuthorizationError: A restricted field is being written.
        """
        fields = set(fields)
        if not fields:
            return
        policy = get_policy(table)
        if not policy.can_write_fields(self, row, fields):
            self._deny(Action.UPDATE, table, row, fields=sorted(fields))

    def filter_query(self, query: Select, model: Any) -> Select:
        """
        Apply the read policy to a listing query.

        Args:
            query: SQLAlchemy Select query
            model: SQLAlchemy model class

        Returns:
            Filtered query
        """
        return get_policy(model).filter_query(query, self, model)

    def _deny(self, action: Action, table: Any, row: Any, **extra: Any) -> None:
        table_name = get_policy(table).table_name
        row_id = getattr(row, "id", None)
        audit_authorization_denied(
            action.name.lower(),
            table_name,
            profile_id=self.profile_id,
            row_id=row_id,
            role=self.role,
            **extra,
        )
        raise AuthorizationError(action=action.name.lower(), table=table_name, row_id=row_id)


def authorize(caller: PermissionContext, action: Action, table: Any, row: Any = None) -> None:
    """
    Single authorization gate.

    Every domain write (and every private read) goes through here before
    touching the database.
    """
    caller.authorize(action, table, row)
