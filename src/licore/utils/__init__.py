"""Utility modules."""

from .bitbucket_auth import verify_webhook_signature
from .logging import setup_logging

__all__ = [
    "setup_logging",
    "verify_webhook_signature",
]
