# application/dto/trim_dto.py
# Data Transfer Objects for trim, download and HLS transcoder calls.

from dataclasses import dataclass
from typing import Callable, Optional


@dataclass
class TrimOptions:
    """Single trim: seek to *start_time*, keep *duration* seconds."""
    start_time: str              # HH:MM:SS
    duration: str                # seconds, already validated
    media_kind: str = "video"    # video | audio


@dataclass
class HlsOptions:
    """Segmented HLS output for one input file."""
    segment_pattern: str         # e.g. out/clip/clip_%03d.ts
    segment_seconds: int = 10
    video_bitrate: str = "1000k"
    audio_bitrate: str = "128k"


@dataclass
class FetchOptions:
    """Downloader request options."""
    audio_only: bool = False


@dataclass
class FetchedStream:
    """Open downloader stream: chunks plus the content type they carry."""
    chunks: object               # iterator of bytes
    mimetype: str = "video/mp4"
    on_close: Optional[Callable[[], None]] = None

    def close(self) -> None:
        """Release the producer even if *chunks* was never iterated. Safe to call twice."""
        if self.on_close is not None:
            self.on_close()
