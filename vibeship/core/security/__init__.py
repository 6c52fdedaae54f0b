"""Security module."""

from vibeship.core.security.api_keys import extract_bearer_token, generate_api_key, mask_api_key
from vibeship.core.security.encryption import (
    TokenEncryptionService,
    get_encryption_service,
    get_optional_encryption_service,
)
from vibeship.core.security.webhook_signature import sign_payload, verify_webhook_signature

__all__ = [
    "TokenEncryptionService",
    "get_encryption_service",
    "get_optional_encryption_service",
    "extract_bearer_token",
    "generate_api_key",
    "mask_api_key",
    "sign_payload",
    "verify_webhook_signature",
]
