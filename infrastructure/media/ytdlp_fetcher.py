# infrastructure/media/ytdlp_fetcher.py
# Implementation of IMediaFetcher that streams yt-dlp's stdout.

import logging
import subprocess
import threading
from typing import Iterator, List, Optional

from application.dto.trim_dto import FetchOptions, FetchedStream
from application.ports.media_fetcher_port import IMediaFetcher, FetchError
from trimmer.utils import (
    YT_DLP_BINARY,
    DOWNLOAD_FORMAT_AUDIO,
    DOWNLOAD_FORMAT_VIDEO,
    DOWNLOAD_MIMETYPE_AUDIO,
    DOWNLOAD_MIMETYPE_VIDEO,
)

logger = logging.getLogger(__name__)

CHUNK_SIZE: int = 64 * 1024


def build_download_args(url: str, options: FetchOptions) -> List[str]:
    """Downloader argument list writing the muxed file to stdout."""
    fmt: str = DOWNLOAD_FORMAT_AUDIO if options.audio_only else DOWNLOAD_FORMAT_VIDEO
    return ["-f", fmt, "-o", "-", url]


class YtDlpFetcher(IMediaFetcher):
    """Spawn yt-dlp and relay its stdout chunk by chunk, never buffering the file."""

    def __init__(self, binary: Optional[str] = None) -> None:
        self.binary: str = binary or YT_DLP_BINARY

    def fetch_stream(self, url: str, options: FetchOptions) -> FetchedStream:
        cmd: List[str] = [self.binary, *build_download_args(url, options)]
        logger.info("Executing yt-dlp: %s", " ".join(cmd))

        # Spawn errors surface here, before any response is committed
        try:
            proc = subprocess.Popen(
                cmd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
        except OSError as e:
            logger.error("yt-dlp process error: %s", e)
            raise FetchError(f"yt-dlp could not be started: {e}") from e

        # Drain stderr so a chatty downloader never blocks on a full pipe
        threading.Thread(target=self._log_stderr, args=(proc,), daemon=True).start()

        mimetype: str = DOWNLOAD_MIMETYPE_AUDIO if options.audio_only else DOWNLOAD_MIMETYPE_VIDEO
        return FetchedStream(
            chunks=self._relay(proc, url),
            mimetype=mimetype,
            on_close=lambda: self._stop(proc, url),
        )

    @staticmethod
    def _log_stderr(proc) -> None:
        if proc.stderr is None:
            return
        for raw in iter(proc.stderr.readline, b""):
            line: str = raw.decode("utf-8", errors="replace").rstrip()
            if line:
                logger.debug("yt-dlp: %s", line)

    @staticmethod
    def _relay(proc, url: str) -> Iterator[bytes]:
        sent: int = 0
        try:
            while True:
                chunk: bytes = proc.stdout.read1(CHUNK_SIZE)
                if not chunk:
                    break
                sent += len(chunk)
                yield chunk

            returncode: int = proc.wait()
            if returncode != 0:
                # Headers are already sent, the client just gets a short body
                logger.error("yt-dlp exited with code %s for %s after %d bytes", returncode, url, sent)
            else:
                logger.info("yt-dlp finished url=%s bytes=%d", url, sent)
        finally:
            # Client went away mid-stream, or we are done: never leave a child behind
            YtDlpFetcher._stop(proc, url, sent)

    @staticmethod
    def _stop(proc, url: str, sent: int = 0) -> None:
        """Kill the child if it is still running and close its stdout."""
        if proc.poll() is None:
            logger.warning("terminating yt-dlp for %s after %d bytes", url, sent)
            proc.kill()
            proc.wait()
        if not proc.stdout.closed:
            proc.stdout.close()
