# application/ports/trim_backend_port.py
# Port interface used by the client trim session to reach the service.

from abc import ABC, abstractmethod


class TrimBackendError(RuntimeError):
    """A download or trim call failed; message is safe to show the user."""


class ITrimBackend(ABC):
    """Abstract base class for the two calls the trim form makes."""

    @abstractmethod
    def download(self, url: str, audio_only: bool = False) -> bytes:
        """Fetch remote media and return its bytes."""
        ...

    @abstractmethod
    def trim(
        self,
        media: bytes,
        filename: str,
        start_time: str,
        duration: str,
        media_kind: str,
    ) -> bytes:
        """
        Trim *media* and return the trimmed bytes.

        Args:
            media:      Source bytes.
            filename:   Name to upload the source under.
            start_time: HH:MM:SS seek position.
            duration:   Seconds to keep, as a string.
            media_kind: 'video' or 'audio'.
        """
        ...
