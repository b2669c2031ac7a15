"""
Row-level authorization.

One TablePolicy per table, selected by table name, evaluated against a
PermissionContext built from the caller's identity and profile.

Usage:
    from rest_api.services.permissions import PermissionContext, Action, authorize

    ctx = PermissionContext(identity, profile)
    authorize(ctx, Action.UPDATE, "complaints", complaint)
    ctx.authorize_fields("complaints", complaint, {"status"})

    query = ctx.filter_query(select(Complaint), Complaint)
"""

from .strategies import (
    TablePolicy,
    AreaPolicy,
    ProfilePolicy,
    VendorPolicy,
    ComplaintPolicy,
    RatingPolicy,
    POLICY_REGISTRY,
    get_policy,
)
from .context import PermissionContext, Action, authorize

__all__ = [
    # Policies
    "TablePolicy",
    "AreaPolicy",
    "ProfilePolicy",
    "VendorPolicy",
    "ComplaintPolicy",
    "RatingPolicy",
    "POLICY_REGISTRY",
    "get_policy",
    # Context
    "PermissionContext",
    "Action",
    "authorize",
]
