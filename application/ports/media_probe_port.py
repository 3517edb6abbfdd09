from abc import ABC, abstractmethod


class IMediaProbe(ABC):
    @abstractmethod
    def duration(self, media: bytes, filename: str) -> float:
        """Return the media duration in seconds (0.0 when unknown)."""
        pass
