import logging
import threading
import uuid
from typing import Dict, Optional

from mazegen_lib.errors import ImageNotFound

log = logging.getLogger("mazegen.store")


class ImageStore:
    """
    In-memory store for uploaded image bytes, keyed by an opaque handle.

    Entries are inserted once and never modified, so lookups need no lock;
    the lock only serializes inserts.
    """

    def __init__(self):
        self._images: Dict[str, bytes] = {}
        self._filenames: Dict[str, str] = {}
        self._lock = threading.Lock()

    def store(self, data: bytes, filename: Optional[str] = None) -> str:
        """Stores image data and returns a unique identifier for it."""
        if not data:
            raise ValueError("Cannot store an empty image")
        image_id = str(uuid.uuid4())
        with self._lock:
            self._filenames[image_id] = filename or image_id
            self._images[image_id] = bytes(data)
        log.info("Stored image '%s' as %s (%d bytes).", filename, image_id, len(data))
        return image_id

    def exists(self, image_id: str) -> bool:
        return image_id in self._images

    def fetch(self, image_id: str) -> bytes:
        try:
            return self._images[image_id]
        except KeyError:
            raise ImageNotFound(image_id) from None

    def filename(self, image_id: str) -> Optional[str]:
        return self._filenames.get(image_id)

    def __len__(self) -> int:
        return len(self._images)
