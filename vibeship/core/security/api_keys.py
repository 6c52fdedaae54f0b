"""Project API key generation and display helpers."""

import secrets

API_KEY_PREFIX = "vs_"
BEARER_PREFIX = "Bearer "
MASK_CHAR = "•"


def generate_api_key() -> str:
    """New project key: ``vs_`` followed by 32 random hex characters."""
    return f"{API_KEY_PREFIX}{secrets.token_hex(16)}"


def mask_api_key(api_key: str) -> str:
    """Show only the first six characters of a key."""
    if len(api_key) <= 8:
        return api_key
    return f"{api_key[:6]}{MASK_CHAR * 6}"


def extract_bearer_token(authorization: str | None) -> str | None:
    """Return the token from an ``Authorization: Bearer <token>`` header."""
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        return None
    return authorization[len(BEARER_PREFIX):]
