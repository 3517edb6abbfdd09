# infrastructure/media/ffmpeg_transcoder.py
# Implementation of ITranscoder that shells out to the ffmpeg binary.

import logging
import subprocess
from typing import List, Optional

from application.dto.trim_dto import TrimOptions, HlsOptions
from application.ports.transcoder_port import ITranscoder, TranscodeError
from trimmer.utils import (
    FFMPEG_BINARY,
    FFMPEG_TIMEOUT_SECONDS,
    TRIM_AUDIO_BITRATE,
    TRIM_AUDIO_CHANNELS,
    TRIM_AUDIO_CODEC,
    TRIM_AUDIO_SAMPLE_RATE,
    TRIM_PIXEL_FORMAT,
    TRIM_VIDEO_CODEC,
)

logger = logging.getLogger(__name__)


def build_trim_args(input_path: str, output_path: str, options: TrimOptions) -> List[str]:
    """
    Fixed trim argument list (binary not included).

    The video codec flags are present for every media kind, audio included.
    """
    return [
        "-ss", options.start_time,
        "-i", input_path,
        "-t", options.duration,
        "-map", "0",
        "-c:v", TRIM_VIDEO_CODEC,
        "-c:a", TRIM_AUDIO_CODEC,
        "-b:a", TRIM_AUDIO_BITRATE,
        "-ac", str(TRIM_AUDIO_CHANNELS),
        "-ar", str(TRIM_AUDIO_SAMPLE_RATE),
        "-pix_fmt", TRIM_PIXEL_FORMAT,
        "-movflags", "+faststart",
        "-y",
        output_path,
    ]


def build_hls_args(input_path: str, manifest_path: str, options: HlsOptions) -> List[str]:
    """Segmented HLS argument list (binary not included)."""
    return [
        "-i", input_path,
        "-c:v", "libx264",
        "-c:a", "aac",
        "-b:v", options.video_bitrate,
        "-b:a", options.audio_bitrate,
        "-hls_time", str(options.segment_seconds),
        "-hls_list_size", "0",
        "-hls_segment_filename", options.segment_pattern,
        "-y",
        manifest_path,
    ]


class FFmpegTranscoder(ITranscoder):
    """Run ffmpeg synchronously; a nonzero exit code is a failure."""

    def __init__(self, binary: Optional[str] = None, timeout: Optional[float] = None) -> None:
        self.binary: str = binary or FFMPEG_BINARY
        if timeout is None:
            timeout = FFMPEG_TIMEOUT_SECONDS
        # 0 means wait forever
        self.timeout: Optional[float] = timeout or None

    def transcode(self, input_path: str, output_path: str, options: TrimOptions) -> str:
        self._run(build_trim_args(input_path, output_path, options))
        return output_path

    def segment(self, input_path: str, manifest_path: str, options: HlsOptions) -> str:
        self._run(build_hls_args(input_path, manifest_path, options))
        return manifest_path

    def _run(self, args: List[str]) -> None:
        cmd: List[str] = [self.binary, *args]
        logger.info("Executing ffmpeg: %s", " ".join(cmd))

        try:
            result = subprocess.run(
                cmd,
                stdin=subprocess.DEVNULL,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as e:
            logger.error("ffmpeg timed out after %ss", self.timeout)
            raise TranscodeError(f"ffmpeg timed out after {self.timeout}s") from e
        except OSError as e:
            logger.error("ffmpeg could not be started: %s", e)
            raise TranscodeError(f"ffmpeg could not be started: {e}") from e

        if result.returncode != 0:
            stderr: str = result.stderr or ""
            logger.error("ffmpeg exited with code %s. STDERR: %s", result.returncode, stderr)
            raise TranscodeError(
                f"ffmpeg process exited with code {result.returncode}",
                returncode=result.returncode,
                stderr=stderr,
            )
