# trimmer/object_urls.py
# Ephemeral blob: handles for media bytes held by the client.

import logging
import uuid
from threading import Lock
from typing import Dict, List, Tuple

logger = logging.getLogger(__name__)


class ObjectUrlRegistry:
    """
    In-memory stand-in for the browser's URL.createObjectURL/revokeObjectURL.

    Every created URL keeps its bytes alive until revoked. Creations and
    revocations are recorded so leaks and double revokes are observable.
    """

    def __init__(self) -> None:
        self._blobs: Dict[str, Tuple[bytes, str]] = {}
        self._lock: Lock = Lock()
        self.created: List[str] = []
        self.revoked: List[str] = []

    def create(self, data: bytes, mime_type: str) -> str:
        url: str = f"blob:{uuid.uuid4()}"
        with self._lock:
            self._blobs[url] = (bytes(data), mime_type)
            self.created.append(url)
        return url

    def read(self, url: str) -> bytes:
        """Return the bytes behind *url*; ValueError if it was revoked."""
        with self._lock:
            entry = self._blobs.get(url)
        if entry is None:
            raise ValueError(f"Object URL is not live: {url}")
        return entry[0]

    def mimetype(self, url: str) -> str:
        with self._lock:
            entry = self._blobs.get(url)
        if entry is None:
            raise ValueError(f"Object URL is not live: {url}")
        return entry[1]

    def save(self, url: str, path: str) -> int:
        """Write the bytes behind *url* to *path*; returns the byte count."""
        data: bytes = self.read(url)
        with open(path, "wb") as f:
            f.write(data)
        return len(data)

    def revoke(self, url: str) -> None:
        """Release *url*. Unknown or already revoked URLs are a logged no-op."""
        with self._lock:
            if url not in self._blobs:
                logger.warning("revoke of unknown or already revoked object URL %s", url)
                return
            del self._blobs[url]
            self.revoked.append(url)

    def is_live(self, url: str) -> bool:
        with self._lock:
            return url in self._blobs

    @property
    def live(self) -> List[str]:
        with self._lock:
            return list(self._blobs)
