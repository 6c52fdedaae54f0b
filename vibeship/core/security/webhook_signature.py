"""GitHub webhook signature verification.

GitHub signs each delivery with HMAC-SHA256 over the raw request body and
sends the hex digest as ``X-Hub-Signature-256: sha256=<hex>``.
"""

import hashlib
import hmac

SIGNATURE_PREFIX = "sha256="


def sign_payload(payload: bytes, secret: str) -> str:
    """Compute the ``sha256=<hex>`` signature GitHub would send for payload."""
    digest = hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).hexdigest()
    return f"{SIGNATURE_PREFIX}{digest}"


def verify_webhook_signature(payload: bytes, signature: str | None, secret: str) -> bool:
    """
    Check a webhook signature in constant time.

    Args:
        payload: Raw request body, exactly as received
        signature: Value of the X-Hub-Signature-256 header, if any
        secret: Shared webhook secret

    Returns:
        True only if the signature matches. Never raises.
    """
    if not signature or not secret:
        return False

    try:
        expected = sign_payload(payload, secret)
        return hmac.compare_digest(signature.encode("utf-8"), expected.encode("utf-8"))
    except (TypeError, ValueError, UnicodeError):
        return False
