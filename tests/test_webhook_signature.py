"""Tests for webhook signature verification."""

import hashlib
import hmac

from licore.config import settings
from licore.utils.bitbucket_auth import verify_webhook_signature

PAYLOAD = b'{"eventKey": "pr:opened"}'


def sign(secret: str, payload: bytes) -> str:
    return "sha256=" + hmac.new(secret.encode(), payload, hashlib.sha256).hexdigest()


def test_no_secret_accepts_everything(monkeypatch):
    monkeypatch.setattr(settings, "bitbucket_webhook_secret", None)

    assert verify_webhook_signature(PAYLOAD, None)


def test_valid_signature(monkeypatch):
    monkeypatch.setattr(settings, "bitbucket_webhook_secret", "s3cret")

    assert verify_webhook_signature(PAYLOAD, sign("s3cret", PAYLOAD))


def test_invalid_or_missing_signature(monkeypatch):
    monkeypatch.setattr(settings, "bitbucket_webhook_secret", "s3cret")

    assert not verify_webhook_signature(PAYLOAD, sign("other", PAYLOAD))
    assert not verify_webhook_signature(PAYLOAD + b" ", sign("s3cret", PAYLOAD))
    assert not verify_webhook_signature(PAYLOAD, None)
