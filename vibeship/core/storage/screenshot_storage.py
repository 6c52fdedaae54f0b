"""Screenshot object storage on the local filesystem."""

import base64
import binascii
import logging
import re
import time
from dataclasses import dataclass
from pathlib import Path

from vibeship.core.config import settings
from vibeship.core.errors import ValidationFailure

logger = logging.getLogger(__name__)

# data:image/<type>;base64,<data>
DATA_URL_PATTERN = re.compile(r"^data:image/(png|jpeg|jpg|gif|webp);base64,(.+)$", re.DOTALL)

PUBLIC_PREFIX = "/screenshots/"


@dataclass(frozen=True)
class DecodedImage:
    image_type: str
    data: bytes

    @property
    def extension(self) -> str:
        return "jpg" if self.image_type == "jpeg" else self.image_type

    @property
    def content_type(self) -> str:
        return f"image/{self.image_type}"


def decode_data_url(image: object, max_bytes: int) -> DecodedImage:
    """
    Decode a base64 image data URL.

    Args:
        image: The ``image`` field from the request body
        max_bytes: Upper bound on the decoded size

    Returns:
        Decoded image

    Raises:
        ValidationFailure: Missing field, wrong format, bad base64, or too large
    """
    if not image or not isinstance(image, str):
        raise ValidationFailure("Missing 'image' field with base64 data")

    match = DATA_URL_PATTERN.match(image)
    if not match:
        raise ValidationFailure("Invalid image format. Expected data:image/<type>;base64,<data>")

    image_type, encoded = match.groups()
    try:
        data = base64.b64decode(encoded, validate=False)
    except (binascii.Error, ValueError):
        raise ValidationFailure("Invalid base64 encoding")

    if len(data) > max_bytes:
        raise ValidationFailure(
            f"File too large. Maximum size is {max_bytes // (1024 * 1024)}MB"
        )

    return DecodedImage(image_type=image_type, data=data)


class ScreenshotStorage:
    """Store project screenshots keyed by owner, project and upload time."""

    def __init__(self, base_path: str = "./data/screenshots", public_base_url: str = ""):
        """
        Initialize screenshot storage.

        Args:
            base_path: Base directory for stored screenshots
            public_base_url: Base URL the app is served from
        """
        self.base_path = Path(base_path)
        self.base_path.mkdir(parents=True, exist_ok=True)
        self.public_base_url = public_base_url.rstrip("/")

    def save(self, owner_id: str, project_id: str, image: DecodedImage) -> str:
        """
        Write a screenshot and return its storage key.

        Args:
            owner_id: Owning user ID
            project_id: Project ID
            image: Decoded image

        Returns:
            Key relative to the storage root
        """
        timestamp_ms = int(time.time() * 1000)
        key = f"{owner_id}/{project_id}/screenshot-{timestamp_ms}.{image.extension}"
        file_path = self._resolve(key)
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_bytes(image.data)
        return key

    def public_url(self, key: str) -> str:
        return f"{self.public_base_url}{PUBLIC_PREFIX}{key}"

    def key_from_url(self, url: str | None) -> str | None:
        """Recover the storage key from a URL produced by public_url."""
        if not url or PUBLIC_PREFIX not in url:
            return None
        key = url.split(PUBLIC_PREFIX, 1)[1].split("?", 1)[0]
        return key or None

    def delete(self, key: str) -> bool:
        """
        Delete a stored screenshot.

        Args:
            key: Key relative to the storage root

        Returns:
            True if a file was removed
        """
        try:
            file_path = self._resolve(key)
            if file_path.is_file():
                file_path.unlink()
                return True
            return False
        except (OSError, ValueError) as e:
            logger.warning("Could not delete screenshot %s: %s", key, e)
            return False

    def _resolve(self, key: str) -> Path:
        """Map a key to a path inside the storage root."""
        root = self.base_path.resolve()
        file_path = (root / key).resolve()
        if root not in file_path.parents:
            raise ValueError(f"Key escapes storage root: {key}")
        return file_path


# Global screenshot storage instance
_screenshot_storage: ScreenshotStorage | None = None


def get_screenshot_storage() -> ScreenshotStorage:
    """Get global screenshot storage instance."""
    global _screenshot_storage
    if _screenshot_storage is None:
        _screenshot_storage = ScreenshotStorage(settings.screenshot_dir, settings.base_url)
    return _screenshot_storage
