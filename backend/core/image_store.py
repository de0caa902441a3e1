"""
In-memory store backing display URLs for uploaded images.

Each stored image gets an opaque id served at ``/api/images/{id}``.
Releasing an id revokes its URL. Entries nobody releases or touches
expire after the TTL. A full store refuses new images instead of evicting
live ones.
"""

import time
import uuid
from dataclasses import dataclass
from threading import Lock
from typing import Any, Dict, Optional

from cachetools import TTLCache

from config.settings import settings
from core.errors import ImageStoreFullError

IMAGE_URL_PREFIX = "/api/images"


@dataclass(frozen=True)
class StoredImage:
    image_id: str
    data: bytes
    mime_type: str
    filename: Optional[str] = None


class ImageStore:
    """Thread-safe TTL store of uploaded image bytes."""

    def __init__(self, maxsize: int, ttl: int, timer=time.monotonic):
        self.maxsize = maxsize
        self.ttl = ttl
        self._images: TTLCache = TTLCache(maxsize=maxsize, ttl=ttl, timer=timer)
        self._lock = Lock()

    def put(
        self,
        data: bytes,
        mime_type: str,
        filename: Optional[str] = None,
        replaces: Optional[str] = None
    ) -> str:
        """
        Store image bytes and return the new image id.

        Args:
            data: Raw file bytes
            mime_type: Declared MIME type of the file
            filename: Original filename, if known
            replaces: Id of an image this one supersedes; it is released first

        Returns:
            The id under which the image is served

        Raises:
            ImageStoreFullError: the store holds maxsize live images
        """
        image_id = uuid.uuid4().hex
        with self._lock:
            self._images.expire()
            if replaces is not None:
                self._images.pop(replaces, None)
            if len(self._images) >= self.maxsize:
                raise ImageStoreFullError()
            self._images[image_id] = StoredImage(image_id, data, mime_type, filename)
        return image_id

    def get(self, image_id: str) -> Optional[StoredImage]:
        with self._lock:
            return self._images.get(image_id)

    def touch(self, image_id: str) -> bool:
        """Restart the TTL of an image still in use"""
        with self._lock:
            image = self._images.get(image_id)
            if image is None:
                return False
            self._images[image_id] = image
            return True

    def release(self, image_id: str) -> bool:
        """
        Revoke an image URL.

        Returns:
            True if the image was found and removed, False otherwise
        """
        with self._lock:
            if image_id in self._images:
                del self._images[image_id]
                return True
            return False

    def get_stats(self) -> Dict[str, Any]:
        with self._lock:
            self._images.expire()
            return {
                "current_size": len(self._images),
                "max_size": self.maxsize,
                "ttl_seconds": self.ttl
            }


def image_url(image_id: str) -> str:
    return f"{IMAGE_URL_PREFIX}/{image_id}"


# Process-wide store instance
image_store = ImageStore(maxsize=settings.IMAGE_STORE_MAX_SIZE, ttl=settings.IMAGE_STORE_TTL_SECONDS)


def get_image_store() -> ImageStore:
    return image_store
