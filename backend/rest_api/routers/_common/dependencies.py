"""
Caller dependencies shared by every router.

The authenticated caller always has a profile: if the identity provider's
user.created webhook was missed, the profile is provisioned here on first use.
"""

from fastapi import Depends
from sqlalchemy.orm import Session

from shared.config.logging import get_logger
from shared.infrastructure.db import get_db
from shared.security.auth import CallerIdentity, current_identity, optional_identity
from rest_api.services.domain import ProfileService
from rest_api.services.permissions import PermissionContext

logger = get_logger(__name__)


def _context_for(identity: CallerIdentity, db: Session) -> PermissionContext:
    profile, created = ProfileService(db).provision(identity)
    if created:
        logger.info("Profile provisioned on first request", profile_id=str(profile.id))
    return PermissionContext(identity, profile)


def get_caller(
    identity: CallerIdentity = Depends(current_identity),
    db: Session = Depends(get_db),
) -> PermissionContext:
    """
    Authenticated caller (401 without a valid token).

    Usage:
        @router.post("/ratings")
        def submit(caller: PermissionContext = Depends(get_caller)):
            ...
    """
    return _context_for(identity, db)


def get_optional_caller(
    identity: CallerIdentity | None = Depends(optional_identity),
    db: Session = Depends(get_db),
) -> PermissionContext:
    """Caller for public reads; anonymous when no token is sent."""
    if identity is None:
        return PermissionContext.anonymous()
    return _context_for(identity, db)
