"""Bitbucket webhook authentication utilities."""

import hashlib
import hmac

from ..config import settings


def verify_webhook_signature(payload: bytes, signature: str | None) -> bool:
    """Verify a Bitbucket Server webhook signature.

    Always passes when no webhook secret is configured.
    """
    if not settings.bitbucket_webhook_secret:
        return True
    if not signature:
        return False

    expected = hmac.new(
        settings.bitbucket_webhook_secret.encode(),
        payload,
        hashlib.sha256,
    ).hexdigest()

    return hmac.compare_digest(f"sha256={expected}", signature)
