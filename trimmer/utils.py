import os
import shutil
from typing import Optional

# Media kinds accepted by the trim endpoint
MEDIA_KIND_VIDEO: str = "video"
MEDIA_KIND_AUDIO: str = "audio"

# Scratch/output extension per media kind
KIND_EXTENSION_MAP: dict[str, str] = {
    MEDIA_KIND_VIDEO: "mp4",
    MEDIA_KIND_AUDIO: "mp3",
}

KIND_MIMETYPE_MAP: dict[str, str] = {
    MEDIA_KIND_VIDEO: "video/mp4",
    MEDIA_KIND_AUDIO: "audio/mpeg",
}

# Downloader format selectors and the content type each one streams
DOWNLOAD_FORMAT_VIDEO: str = "best[ext=mp4]"
DOWNLOAD_FORMAT_AUDIO: str = "bestaudio[ext=m4a]/bestaudio"
DOWNLOAD_MIMETYPE_VIDEO: str = "video/mp4"
DOWNLOAD_MIMETYPE_AUDIO: str = "audio/mp4"

# Fixed audio re-encode settings for trims
TRIM_AUDIO_CODEC: str = "aac"
TRIM_AUDIO_BITRATE: str = "128k"
TRIM_AUDIO_CHANNELS: int = 2
TRIM_AUDIO_SAMPLE_RATE: int = 44100
TRIM_VIDEO_CODEC: str = "libx264"
TRIM_PIXEL_FORMAT: str = "yuv420p"

# HLS batch defaults
HLS_DEFAULT_INPUT_DIR: str = "./input-videos"
HLS_DEFAULT_OUTPUT_DIR: str = "./output-hls"
HLS_DEFAULT_SEGMENT_SECONDS: int = 10
HLS_DEFAULT_WORKERS: int = 4
HLS_INPUT_EXTENSION: str = ".mp4"

DEFAULT_HLS_DEMO_SOURCES: tuple[str, str] = (
    "https://pub-e668f82c3ede4548869ac0a3acad4e7f.r2.dev/meghalaya-1/output.m3u8",
    "https://pub-e668f82c3ede4548869ac0a3acad4e7f.r2.dev/meghalaya-1-dub/output.m3u8",
)


def _env_int(name: str, default: int) -> int:
    """Read an integer env var, falling back to *default* on junk."""
    try:
        return int(os.environ.get(name, default))
    except (TypeError, ValueError):
        return default


# External binaries: env var wins, then PATH lookup
FFMPEG_BINARY: str = os.environ.get("FFMPEG_BINARY_PATH") or shutil.which("ffmpeg") or "ffmpeg"
YT_DLP_BINARY: str = os.environ.get("YT_DLP_PATH") or shutil.which("yt-dlp") or "yt-dlp"

SCRATCH_DIR: str = os.environ.get("SCRATCH_DIR") or os.path.join(os.getcwd(), "temp")
FFMPEG_TIMEOUT_SECONDS: int = _env_int("FFMPEG_TIMEOUT_SECONDS", 0)
MAX_UPLOAD_MB: int = _env_int("MAX_UPLOAD_MB", 500)

HLS_DEMO_SOURCES: tuple[str, str] = (
    os.environ.get("HLS_DEMO_PRIMARY_URL") or DEFAULT_HLS_DEMO_SOURCES[0],
    os.environ.get("HLS_DEMO_SECONDARY_URL") or DEFAULT_HLS_DEMO_SOURCES[1],
)


# Lookup helpers

def normalize_media_kind(value) -> str:
    """Anything other than an explicit 'video' is treated as audio."""
    if isinstance(value, str) and value.strip().lower() == MEDIA_KIND_VIDEO:
        return MEDIA_KIND_VIDEO
    return MEDIA_KIND_AUDIO


def extension_for_kind(kind: str) -> str:
    return KIND_EXTENSION_MAP[normalize_media_kind(kind)]


def mimetype_for_kind(kind: str) -> str:
    return KIND_MIMETYPE_MAP[normalize_media_kind(kind)]


def kind_from_mimetype(mime_type) -> Optional[str]:
    """Return 'video' / 'audio' for a MIME type, or None if it is neither."""
    if not mime_type:
        return None
    if mime_type.startswith("video/"):
        return MEDIA_KIND_VIDEO
    if mime_type.startswith("audio/"):
        return MEDIA_KIND_AUDIO
    return None


def trimmed_filename(kind: str) -> str:
    """Attachment name for a trim response, e.g. 'trimmed.mp4'."""
    return f"trimmed.{extension_for_kind(kind)}"
