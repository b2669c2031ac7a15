"""
Request Signing Utilities.

HMAC-SHA256 signing for identity provider webhooks.
"""

import hashlib
import hmac
import time
from typing import Optional

from shared.config.logging import get_logger

logger = get_logger(__name__)


class RequestSigner:
    """
    HMAC-SHA256 request signing with replay protection.

    Usage (signing):
        signer = RequestSigner(secret="your-secret")
        headers = signer.get_headers(body)

    Usage (verification):
        signer = RequestSigner(secret="your-secret")
        if signer.verify(body, timestamp, signature):
            # Request is authentic
    """

    HEADER_SIGNATURE = "X-Signature"
    HEADER_TIMESTAMP = "X-Timestamp"
    HEADER_VERSION = "X-Signature-Version"

    # Signature version for future algorithm upgrades
    VERSION = "v1"

    DEFAULT_MAX_AGE = 300

    def __init__(self, secret: str, max_age: int = DEFAULT_MAX_AGE):
        self._secret = secret.encode()
        self._max_age = max_age

    def sign(
        self,
        body: bytes | str,
        timestamp: Optional[int] = None,
    ) -> tuple[str, int]:
        """
        Sign a request body.

        Returns (signature, timestamp) tuple.
        """
        if timestamp is None:
            timestamp = int(time.time())

        if isinstance(body, str):
            body = body.encode()

        # Signed payload: version.timestamp.body
        message = f"{self.VERSION}.{timestamp}.".encode() + body

        signature = hmac.new(
            self._secret,
            message,
            hashlib.sha256,
        ).hexdigest()

        return signature, timestamp

    def verify(
        self,
        body: bytes | str,
        timestamp: int | str | None,
        signature: str | None,
        max_age: Optional[int] = None,
    ) -> bool:
        """
        Verify a request signature.

        Returns True if signature is valid and not expired.
        """
        if not signature or timestamp is None:
            return False

        if max_age is None:
            max_age = self._max_age

        try:
            ts = int(timestamp)
        except (ValueError, TypeError):
            logger.warning("Invalid timestamp format", timestamp=timestamp)
            return False

        age = abs(int(time.time()) - ts)
        if age > max_age:
            logger.warning("Request signature expired", age=age, max_age=max_age)
            return False

        expected, _ = self.sign(body, ts)

        # Constant-time comparison
        is_valid = hmac.compare_digest(expected, signature)

        if not is_valid:
            logger.warning("Invalid request signature")

        return is_valid

    def get_headers(self, body: bytes | str) -> dict[str, str]:
        """
        Generate signing headers for a request.

        Returns dict with X-Signature, X-Timestamp, X-Signature-Version.
        """
        signature, timestamp = self.sign(body)

        return {
            self.HEADER_SIGNATURE: signature,
            self.HEADER_TIMESTAMP: str(timestamp),
            self.HEADER_VERSION: self.VERSION,
        }


def create_webhook_signer() -> RequestSigner:
    """Create a signer for identity provider webhooks."""
    from shared.config.settings import settings

    return RequestSigner(
        settings.identity_webhook_secret,
        max_age=settings.identity_webhook_max_age,
    )


def verify_webhook_signature(
    body: bytes,
    signature: str | None,
    timestamp: str | None,
) -> bool:
    """
    Convenience function to verify webhook signatures.

    Usage in FastAPI:
        body = await request.body()
        if not verify_webhook_signature(body, x_signature, x_timestamp):
            raise AuthenticationError(ErrorMessages.INVALID_SIGNATURE)
    """
    return create_webhook_signer().verify(body, timestamp, signature)
