"""
Security module: identity token verification and webhook signatures.
"""

from shared.security.auth import (
    CallerIdentity,
    sign_identity_token,
    verify_identity_token,
    get_bearer_token,
    current_identity,
    optional_identity,
)
from shared.security.request_signing import (
    RequestSigner,
    create_webhook_signer,
    verify_webhook_signature,
)

__all__ = [
    # auth
    "CallerIdentity",
    "sign_identity_token",
    "verify_identity_token",
    "get_bearer_token",
    "current_identity",
    "optional_identity",
    # request_signing
    "RequestSigner",
    "create_webhook_signer",
    "verify_webhook_signature",
]
