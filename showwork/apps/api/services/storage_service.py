"""Media storage for cover images and avatars."""

import io
import uuid
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Optional
from uuid import UUID

from PIL import Image, UnidentifiedImageError

from config import get_settings
from core.exceptions import ValidationError
from core.logging import get_logger

settings = get_settings()
logger = get_logger(__name__)

# Pillow format name -> stored extension
IMAGE_FORMATS = {
    "JPEG": "jpg",
    "PNG": "png",
    "GIF": "gif",
    "WEBP": "webp",
}
ALLOWED_CONTENT_TYPES = {"image/jpeg", "image/png", "image/gif", "image/webp"}
MAX_IMAGE_PIXELS = 50_000_000


class StorageProvider(ABC):
    """Abstract base class for storage providers."""

    @abstractmethod
    async def save(self, content: bytes, path: str) -> str:
        """Store bytes at a relative path and return that path."""
        pass

    @abstractmethod
    def public_url(self, path: str) -> str:
        """Stable public URL for a stored path."""
        pass

    @abstractmethod
    async def get_file_path(self, path: str) -> Optional[Path]:
        """Filesystem path for a stored object, if the provider has one."""
        pass


class LocalStorageProvider(StorageProvider):
    """Local filesystem storage provider."""

    def __init__(self, base_path: str, public_base_url: str):
        self.base_path = Path(base_path)
        self.base_path.mkdir(parents=True, exist_ok=True)
        self.public_base_url = public_base_url.rstrip("/")
        logger.info("local_storage_ready", base_path=str(self.base_path.absolute()))

    async def save(self, content: bytes, path: str) -> str:
        if not self._is_safe_path(path):
            raise ValidationError("path", "Invalid storage path")
        full_path = self.base_path / path
        full_path.parent.mkdir(parents=True, exist_ok=True)
        full_path.write_bytes(content)
        logger.info("media_stored", path=path, size=len(content))
        return path

    def public_url(self, path: str) -> str:
        return f"{self.public_base_url}/{path}"

    async def get_file_path(self, path: str) -> Optional[Path]:
        if not self._is_safe_path(path):
            logger.warning("unsafe_media_path", path=path)
            return None

        resolved_path = (self.base_path / path).resolve()
        base_resolved = self.base_path.resolve()
        if not resolved_path.is_relative_to(base_resolved):
            logger.warning("media_path_traversal", path=path)
            return None
        if resolved_path.is_file():
            return resolved_path
        return None

    @staticmethod
    def _is_safe_path(path: str) -> bool:
        if not path or Path(path).is_absolute():
            return False
        if path.startswith(("~", "/", "\\")):
            return False
        return ".." not in Path(path).parts


def detect_image_extension(content: bytes, content_type: Optional[str]) -> str:
    """Check the upload really is one of the accepted image types.

    The declared content type is only a first filter; the bytes are opened
    with Pillow and the detected format decides the extension.
    """
    if content_type and content_type.lower() not in ALLOWED_CONTENT_TYPES:
        raise ValidationError("file", "Only JPEG, PNG, GIF and WebP images are allowed")
    if not content:
        raise ValidationError("file", "File is empty")
    if len(content) > settings.max_image_bytes:
        max_mb = settings.max_image_bytes // (1024 * 1024)
        raise ValidationError("file", f"Image must be at most {max_mb} MB")

    try:
        with Image.open(io.BytesIO(content)) as img:
            image_format = img.format
            width, height = img.size
            img.verify()
    except (UnidentifiedImageError, OSError, SyntaxError) as e:
        logger.warning("image_validation_failed", error=str(e))
        raise ValidationError("file", "File is not a valid image")

    extension = IMAGE_FORMATS.get(image_format or "")
    if extension is None:
        raise ValidationError("file", "Only JPEG, PNG, GIF and WebP images are allowed")
    if width * height > MAX_IMAGE_PIXELS:
        raise ValidationError("file", "Image dimensions are too large")
    return extension


def media_path(profile_id: UUID, extension: str) -> str:
    """`{profile_id}/{timestamp}-{uuid}.{ext}`"""
    timestamp = int(datetime.utcnow().timestamp() * 1000)
    return f"{profile_id}/{timestamp}-{uuid.uuid4().hex}.{extension}"


async def upload_image(
    storage: StorageProvider,
    profile_id: UUID,
    content: bytes,
    content_type: Optional[str],
) -> str:
    """Validate and store an image, returning its public URL."""
    extension = detect_image_extension(content, content_type)
    path = await storage.save(content, media_path(profile_id, extension))
    return storage.public_url(path)


# Singleton instance
_storage_provider: Optional[StorageProvider] = None


def get_storage_provider() -> StorageProvider:
    """Get the storage provider singleton."""
    global _storage_provider
    if _storage_provider is None:
        _storage_provider = LocalStorageProvider(
            settings.storage_base_path, settings.storage_public_url
        )
    return _storage_provider


def set_storage_provider(provider: StorageProvider) -> None:
    """Set a custom storage provider (for testing or alternative storage)."""
    global _storage_provider
    _storage_provider = provider
