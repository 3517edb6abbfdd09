# infrastructure/media/pydub_media_probe.py
# Implementation of IMediaProbe using pydub's ffprobe wrapper.

import logging
import os
import tempfile
from pathlib import Path

from pydub.utils import mediainfo

from application.ports.media_probe_port import IMediaProbe

logger = logging.getLogger(__name__)


class PydubMediaProbe(IMediaProbe):
    """Read the container duration with ffprobe via pydub.utils.mediainfo."""

    def duration(self, media: bytes, filename: str) -> float:
        suffix: str = Path(filename).suffix or ".bin"

        # ffprobe needs a real path, so spill the bytes to a temp file
        tmp_fd, tmp_path = tempfile.mkstemp(suffix=suffix)
        try:
            with os.fdopen(tmp_fd, "wb") as f:
                f.write(media)
            info: dict = mediainfo(tmp_path)
        finally:
            os.unlink(tmp_path)

        try:
            return float(info.get("duration", 0.0))
        except (TypeError, ValueError):
            logger.warning("no usable duration for %s: %r", filename, info.get("duration"))
            return 0.0
