"""
Caller identity verification.

The identity provider issues HS256 JWTs. Claims used here:

    sub            opaque identity ID (required)
    email, phone   contact details (optional)
    user_metadata  {"full_name": ...} (optional)

Roles are never read from the token; they live on the caller's Profile and are
resolved by the permission layer.
"""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass
from typing import Any

import jwt
from fastapi import Header

from shared.config.constants import ErrorMessages
from shared.config.logging import audit_auth_event, get_logger
from shared.config.settings import settings
from shared.utils.exceptions import AuthenticationError

logger = get_logger(__name__)


@dataclass(frozen=True)
class CallerIdentity:
    """An authenticated identity as supplied by the identity provider."""

    id: str
    email: str | None = None
    phone: str | None = None
    full_name: str | None = None

    @classmethod
    def from_claims(cls, claims: dict[str, Any]) -> "CallerIdentity":
        metadata = claims.get("user_metadata") or {}
        return cls(
            id=str(claims["sub"]),
            email=claims.get("email"),
            phone=claims.get("phone"),
            full_name=metadata.get("full_name") if isinstance(metadata, dict) else None,
        )


# =============================================================================
# JWT Functions
# =============================================================================


def sign_identity_token(
    identity_id: str,
    email: str | None = None,
    phone: str | None = None,
    full_name: str | None = None,
    ttl_seconds: int = 3600,
) -> str:
    """
    Sign an identity token the way the identity provider does.

    Used by the CLI for local development and by the test-suite.
    """
    now = int(time.time())
    data: dict[str, Any] = {
        "sub": identity_id,
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
        "iat": now,
        "exp": now + ttl_seconds,
        "jti": str(uuid.uuid4()),
    }
    if email:
        data["email"] = email
    if phone:
        data["phone"] = phone
    if full_name:
        data["user_metadata"] = {"full_name": full_name}
    return jwt.encode(data, settings.jwt_secret, algorithm="HS256")


def verify_identity_token(token: str) -> CallerIdentity:
    """
    Verify and decode an identity token.

    Raises:
        AuthenticationError: If the token is invalid, expired or has no subject.
    """
    try:
        claims = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=["HS256"],
            audience=settings.jwt_audience,
            issuer=settings.jwt_issuer,
            leeway=settings.jwt_leeway_seconds,
            options={"require": ["sub", "exp"]},
        )
    except jwt.ExpiredSignatureError:
        audit_auth_event("TOKEN_REJECTED", success=False, reason="expired")
        raise AuthenticationError(ErrorMessages.TOKEN_EXPIRED)
    except jwt.InvalidTokenError as e:
        # Log the actual error, return a generic message to the client
        audit_auth_event("TOKEN_REJECTED", success=False, reason=str(e))
        raise AuthenticationError(ErrorMessages.INVALID_TOKEN)

    sub = claims.get("sub")
    if not isinstance(sub, str) or not sub.strip():
        audit_auth_event("TOKEN_REJECTED", success=False, reason="malformed subject")
        raise AuthenticationError(ErrorMessages.INVALID_TOKEN)

    return CallerIdentity.from_claims(claims)


def get_bearer_token(authorization: str | None) -> str:
    """
    Extract bearer token from Authorization header.

    Raises:
        AuthenticationError: If header is missing or malformed.
    """
    if not authorization:
        raise AuthenticationError("Missing Authorization header")
    if not authorization.startswith("Bearer "):
        raise AuthenticationError("Invalid Authorization header format. Expected: Bearer <token>")
    return authorization.split(" ", 1)[1].strip()


def current_identity(
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> CallerIdentity:
    """
    FastAPI dependency returning the verified caller identity.

    Usage:
        @router.post("/ratings")
        def submit(identity: CallerIdentity = Depends(current_identity)):
            ...
    """
    token = get_bearer_token(authorization)
    return verify_identity_token(token)


def optional_identity(
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> CallerIdentity | None:
    """
    FastAPI dependency for public reads: anonymous callers get ``None``.

    A header that is present but invalid is still rejected.
    """
    if not authorization:
        return None
    return verify_identity_token(get_bearer_token(authorization))
