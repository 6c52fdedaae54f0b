"""GitHub token encryption service using Fernet (AES-128)."""

from typing import Optional
from cryptography.fernet import Fernet, InvalidToken

from vibeship.core.config import settings
from vibeship.core.errors import ConfigurationFailure


class TokenEncryptionService:
    """Encrypts and decrypts users' GitHub OAuth tokens at rest."""

    def __init__(self, master_key: Optional[str] = None):
        """
        Initialize encryption service with master key.

        Args:
            master_key: Base64-encoded 32-byte Fernet key. Falls back to the
                        TOKEN_ENCRYPTION_KEY setting.
        """
        key = master_key or settings.token_encryption_key

        if not key:
            raise ConfigurationFailure(
                "TOKEN_ENCRYPTION_KEY is not set. Generate one with "
                "TokenEncryptionService.generate_master_key() and add it to .env",
                public_message="GitHub token storage is not configured",
            )

        try:
            self.cipher = Fernet(key.encode() if isinstance(key, str) else key)
        except (ValueError, TypeError) as e:
            raise ConfigurationFailure(
                f"Invalid TOKEN_ENCRYPTION_KEY: {e}",
                public_message="GitHub token storage is not configured",
            )

    def encrypt(self, plaintext: str) -> bytes:
        """
        Encrypt a plaintext token.

        Args:
            plaintext: The token to encrypt

        Returns:
            Encrypted bytes
        """
        if not plaintext:
            raise ValueError("Cannot encrypt empty string")

        return self.cipher.encrypt(plaintext.encode())

    def decrypt(self, encrypted: bytes) -> str:
        """
        Decrypt an encrypted token.

        Args:
            encrypted: The encrypted token bytes

        Returns:
            Decrypted plaintext token
        """
        if not encrypted:
            raise ValueError("Cannot decrypt empty bytes")

        try:
            return self.cipher.decrypt(encrypted).decode()
        except InvalidToken as e:
            raise ValueError(f"Failed to decrypt token: {e}")

    @staticmethod
    def generate_master_key() -> str:
        """
        Generate a new master encryption key.

        Returns:
            Base64-encoded 32-byte key suitable for Fernet
        """
        return Fernet.generate_key().decode()


# Global encryption service instance
_encryption_service: Optional[TokenEncryptionService] = None


def get_encryption_service() -> TokenEncryptionService:
    """
    Get or create the global encryption service instance.

    Returns:
        TokenEncryptionService instance
    """
    global _encryption_service
    if _encryption_service is None:
        _encryption_service = TokenEncryptionService()
    return _encryption_service


def get_optional_encryption_service() -> Optional[TokenEncryptionService]:
    """Encryption service, or None when no key is configured."""
    if not settings.token_encryption_key:
        return None
    return get_encryption_service()
