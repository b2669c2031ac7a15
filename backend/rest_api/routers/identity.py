"""
Identity provider webhook - /api/identity/events

The identity provider calls this after account lifecycle events. Requests
are HMAC-signed (X-Signature / X-Timestamp).

    user.created  provision the profile (best-effort: failures are logged and
                  acknowledged with provisioned=false; the caller dependency
                  provisions on first request instead)
    user.deleted  delete the profile with its cascades
"""

from fastapi import APIRouter, Depends, Header, Request
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from shared.config.constants import ErrorMessages, IdentityEventType
from shared.config.logging import audit_auth_event, identity_logger as logger, mask_user_id
from shared.infrastructure.db import get_db
from shared.security.auth import CallerIdentity
from shared.security.request_signing import verify_webhook_signature
from shared.utils.exceptions import AppException, AuthenticationError, ValidationError
from rest_api.routers.schemas import IdentityEvent, IdentityEventResult
from rest_api.services.domain import ProfileService

router = APIRouter(prefix="/api/identity", tags=["identity"])


@router.post("/events", response_model=IdentityEventResult)
async def identity_event(
    request: Request,
    x_signature: str | None = Header(default=None, alias="X-Signature"),
    x_timestamp: str | None = Header(default=None, alias="X-Timestamp"),
    db: Session = Depends(get_db),
) -> IdentityEventResult:
    body = await request.body()
    if not verify_webhook_signature(body, x_signature, x_timestamp):
        audit_auth_event("WEBHOOK_REJECTED", success=False, reason="invalid signature")
        raise AuthenticationError(ErrorMessages.INVALID_SIGNATURE)

    try:
        event = IdentityEvent.model_validate_json(body)
    except PydanticValidationError as e:
        raise ValidationError("Malformed identity event", field="body", errors=e.error_count())

    user_id = event.user.id
    result = IdentityEventResult(type=event.type)

    if event.type == IdentityEventType.USER_CREATED:
        full_name = event.user.user_metadata.get("full_name")
        identity = CallerIdentity(
            id=user_id,
            email=event.user.email,
            phone=event.user.phone,
            full_name=full_name if isinstance(full_name, str) else None,
        )
        try:
            profile, _ = ProfileService(db).provision(identity)
        except (AppException, SQLAlchemyError) as e:
            db.rollback()
            logger.error(
                "Profile provisioning failed; registration still succeeds",
                user_id=mask_user_id(user_id),
                error=str(e),
            )
            return result
        result.provisioned = True
        result.profile_id = profile.id

    elif event.type == IdentityEventType.USER_DELETED:
        result.deleted = ProfileService(db).delete_for_identity(user_id)

    else:
        logger.info("Ignoring identity event", event_type=event.type)

    return result
