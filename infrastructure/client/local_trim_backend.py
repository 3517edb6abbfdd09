# infrastructure/client/local_trim_backend.py
# ITrimBackend that runs the fetcher and transcoder in-process, no server needed.

import logging
from typing import Optional

from application.dto.trim_dto import FetchOptions
from application.ports.media_fetcher_port import IMediaFetcher, FetchError
from application.ports.transcoder_port import ITranscoder, TranscodeError
from application.ports.trim_backend_port import ITrimBackend, TrimBackendError
from trimmer.core import trim_media

logger = logging.getLogger(__name__)


class LocalTrimBackend(ITrimBackend):

    def __init__(
        self,
        transcoder: ITranscoder,
        fetcher: IMediaFetcher,
        scratch_dir: Optional[str] = None,
    ) -> None:
        self.transcoder = transcoder
        self.fetcher = fetcher
        self.scratch_dir = scratch_dir

    def download(self, url: str, audio_only: bool = False) -> bytes:
        try:
            stream = self.fetcher.fetch_stream(url, FetchOptions(audio_only=audio_only))
        except FetchError as e:
            logger.error("download failed: %s", e)
            raise TrimBackendError("Failed to fetch video") from e
        data: bytes = b"".join(stream.chunks)
        if not data:
            # Downloader started but produced nothing (bad URL, geo block, ...)
            raise TrimBackendError("Failed to fetch video")
        return data

    def trim(
        self,
        media: bytes,
        filename: str,
        start_time: str,
        duration: str,
        media_kind: str,
    ) -> bytes:
        try:
            result = trim_media(
                source=media,
                start_time=start_time,
                duration=duration,
                media_kind=media_kind,
                transcoder=self.transcoder,
                scratch_dir=self.scratch_dir,
            )
        except ValueError as e:
            raise TrimBackendError(str(e).splitlines()[0]) from e
        except (TranscodeError, OSError) as e:
            logger.error("trim failed for %s: %s", filename, e)
            raise TrimBackendError("Failed to trim media") from e
        return result.data
