# trimmer/session.py
# Client-side trim session: one explicit state value per step of the form.
#
#   Idle → Selected → Loaded → Trimming → Done
#
# Failed wraps the last stable state together with the message to show.
# Every object URL the session creates is revoked exactly once, when it is
# superseded or when the session is reset/closed.

import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Callable, List, Optional, Union

from application.ports.media_probe_port import IMediaProbe
from application.ports.trim_backend_port import ITrimBackend, TrimBackendError
from trimmer.object_urls import ObjectUrlRegistry
from trimmer.timecode import is_valid_time_format, seconds_to_time, time_to_seconds
from trimmer.utils import (
    MEDIA_KIND_AUDIO,
    MEDIA_KIND_VIDEO,
    DOWNLOAD_MIMETYPE_AUDIO,
    DOWNLOAD_MIMETYPE_VIDEO,
    extension_for_kind,
    kind_from_mimetype,
    mimetype_for_kind,
)

logger = logging.getLogger(__name__)

# User-facing messages
MSG_INVALID_FILE = "Please select a valid audio or video file"
MSG_NO_SOURCE = "Please provide either a file or video URL"
MSG_FETCH_FAILED = "Failed to fetch video"
MSG_NO_MEDIA = "Please select a media file first"
MSG_TIMES_MISSING = "Start and end times must be set"
MSG_TIMES_INVALID = "Please ensure time inputs are valid"
MSG_START_AFTER_END = "Start time must be before end time"
MSG_END_PAST_DURATION = "End time cannot exceed media duration"
MSG_TRIM_FAILED = "Failed to trim media"

DOWNLOADED_VIDEO_NAME = "downloaded-video.mp4"
DOWNLOADED_AUDIO_NAME = "downloaded-audio.m4a"


@dataclass(frozen=True)
class LocalMedia:
    """Media bytes held locally, independent of where they came from."""
    name: str
    data: bytes
    mime_type: str
    kind: str

    @property
    def size_mb(self) -> float:
        return len(self.data) / (1024 * 1024)


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Selected:
    file: Optional[LocalMedia] = None
    url: Optional[str] = None
    audio_only: bool = False


@dataclass(frozen=True)
class Loaded:
    media: LocalMedia
    media_url: str
    duration: float
    start_time: str = "00:00:00"
    end_time: str = "00:00:00"


@dataclass(frozen=True)
class Trimming:
    loaded: Loaded
    previous_result_url: Optional[str] = None


@dataclass(frozen=True)
class Done:
    loaded: Loaded
    result_url: str


@dataclass(frozen=True)
class Failed:
    message: str
    previous: "StableState"


StableState = Union[Idle, Selected, Loaded, Done]
SessionState = Union[Idle, Selected, Loaded, Trimming, Done, Failed]


class TrimSession:
    """Drives the trim form against an ITrimBackend."""

    def __init__(
        self,
        backend: ITrimBackend,
        probe: IMediaProbe,
        urls: Optional[ObjectUrlRegistry] = None,
    ) -> None:
        self.backend = backend
        self.probe = probe
        self.urls: ObjectUrlRegistry = urls or ObjectUrlRegistry()
        self._state: SessionState = Idle()
        self._listeners: List[Callable[[SessionState], None]] = []

    # ── State plumbing ───────────────────────────────────────────

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def error(self) -> Optional[str]:
        return self._state.message if isinstance(self._state, Failed) else None

    @property
    def is_processing(self) -> bool:
        return isinstance(self._state, Trimming)

    def subscribe(self, listener: Callable[[SessionState], None]) -> None:
        self._listeners.append(listener)

    def _set(self, state: SessionState) -> None:
        self._state = state
        for listener in self._listeners:
            listener(state)

    def _stable(self) -> SessionState:
        if isinstance(self._state, Failed):
            return self._state.previous
        return self._state

    def _fail(self, message: str, previous: Optional[StableState] = None) -> None:
        if previous is None:
            previous = self._stable()
        logger.info("session error: %s", message)
        self._set(Failed(message=message, previous=previous))

    def _keep_error(self, state: StableState) -> None:
        """Move to *state* while leaving any visible error in place."""
        if isinstance(self._state, Failed):
            self._set(Failed(message=self._state.message, previous=state))
        else:
            self._set(state)

    def _loaded(self) -> Optional[Loaded]:
        stable = self._stable()
        if isinstance(stable, Loaded):
            return stable
        if isinstance(stable, (Done, Trimming)):
            return stable.loaded
        return None

    def _release(self, state: SessionState) -> None:
        """Revoke every object URL owned by *state*."""
        if isinstance(state, Failed):
            state = state.previous
        if isinstance(state, Loaded):
            self.urls.revoke(state.media_url)
        elif isinstance(state, Done):
            self.urls.revoke(state.result_url)
            self.urls.revoke(state.loaded.media_url)
        elif isinstance(state, Trimming):
            if state.previous_result_url is not None:
                self.urls.revoke(state.previous_result_url)
            self.urls.revoke(state.loaded.media_url)

    # ── Source selection ─────────────────────────────────────────

    def select_file(self, name: str, data: bytes, mime_type: str) -> None:
        """Pick a local file; replaces any entered URL or loaded media."""
        if self.is_processing:
            return
        kind = kind_from_mimetype(mime_type)
        if kind is None:
            self._fail(MSG_INVALID_FILE)
            return
        self._release(self._state)
        self._set(Selected(file=LocalMedia(name=name, data=data, mime_type=mime_type, kind=kind)))

    def enter_url(self, url: str, audio_only: bool = False) -> None:
        """Type a remote URL; replaces any selected file or loaded media."""
        if self.is_processing:
            return
        url = (url or "").strip()
        self._release(self._state)
        if not url:
            self._set(Idle())
            return
        self._set(Selected(url=url, audio_only=audio_only))

    def submit(self) -> None:
        """Turn the selected file or URL into local media ready to trim."""
        stable = self._stable()
        if isinstance(stable, (Loaded, Done)) or self.is_processing:
            return
        if not isinstance(stable, Selected) or (stable.file is None and not stable.url):
            self._fail(MSG_NO_SOURCE)
            return

        media: LocalMedia
        if stable.file is not None:
            media = stable.file
        else:
            try:
                data: bytes = self.backend.download(stable.url, audio_only=stable.audio_only)
            except TrimBackendError as e:
                self._fail(str(e) or MSG_FETCH_FAILED, previous=stable)
                return
            # Keep only the bytes: trimming never goes back to the remote URL
            if stable.audio_only:
                media = LocalMedia(DOWNLOADED_AUDIO_NAME, data, DOWNLOAD_MIMETYPE_AUDIO, MEDIA_KIND_AUDIO)
            else:
                media = LocalMedia(DOWNLOADED_VIDEO_NAME, data, DOWNLOAD_MIMETYPE_VIDEO, MEDIA_KIND_VIDEO)

        # Read the duration before creating the URL so a failure leaves no handle behind
        duration: float = self.probe.duration(media.data, media.name)
        media_url: str = self.urls.create(media.data, media.mime_type)
        self._set(Loaded(
            media=media,
            media_url=media_url,
            duration=duration,
            start_time="00:00:00",
            end_time=seconds_to_time(duration),
        ))

    # ── Time range ───────────────────────────────────────────────

    def set_start_time(self, value: str) -> None:
        self._edit_times(start_time=value)

    def set_end_time(self, value: str) -> None:
        self._edit_times(end_time=value)

    def _edit_times(self, **changes) -> None:
        stable = self._stable()
        if isinstance(stable, Loaded):
            self._keep_error(replace(stable, **changes))
        elif isinstance(stable, Done):
            self._keep_error(replace(stable, loaded=replace(stable.loaded, **changes)))

    @property
    def can_trim(self) -> bool:
        loaded = self._loaded()
        if loaded is None or self.is_processing:
            return False
        return is_valid_time_format(loaded.start_time) and is_valid_time_format(loaded.end_time)

    @property
    def segment_duration(self) -> Optional[str]:
        loaded = self._loaded()
        if loaded is None:
            return None
        if not (is_valid_time_format(loaded.start_time) and is_valid_time_format(loaded.end_time)):
            return None
        span = time_to_seconds(loaded.end_time) - time_to_seconds(loaded.start_time)
        return seconds_to_time(max(0, span))

    # ── Trimming ─────────────────────────────────────────────────

    def trim(self) -> None:
        """Validate locally, then ask the backend for the trimmed bytes."""
        if self.is_processing:
            return
        stable = self._stable()
        loaded = self._loaded()
        if loaded is None:
            self._fail(MSG_NO_MEDIA)
            return
        if not loaded.start_time or not loaded.end_time:
            self._fail(MSG_TIMES_MISSING)
            return
        if not (is_valid_time_format(loaded.start_time) and is_valid_time_format(loaded.end_time)):
            self._fail(MSG_TIMES_INVALID)
            return

        start_s: int = time_to_seconds(loaded.start_time)
        end_s: int = time_to_seconds(loaded.end_time)
        if start_s >= end_s:
            self._fail(MSG_START_AFTER_END)
            return
        if end_s > loaded.duration:
            self._fail(MSG_END_PAST_DURATION)
            return

        previous_result: Optional[str] = stable.result_url if isinstance(stable, Done) else None
        self._set(Trimming(loaded=loaded, previous_result_url=previous_result))

        try:
            data: bytes = self.backend.trim(
                media=loaded.media.data,
                filename=loaded.media.name,
                start_time=loaded.start_time,
                duration=str(end_s - start_s),
                media_kind=loaded.media.kind,
            )
        except TrimBackendError as e:
            self._fail(str(e) or MSG_TRIM_FAILED, previous=stable)
            return

        result_url: str = self.urls.create(data, mimetype_for_kind(loaded.media.kind))
        if previous_result is not None:
            self.urls.revoke(previous_result)
        self._set(Done(loaded=loaded, result_url=result_url))

    def clear_result(self) -> None:
        """Drop the trimmed result and reset the range to the whole media."""
        stable = self._stable()
        if not isinstance(stable, Done):
            return
        self.urls.revoke(stable.result_url)
        loaded = stable.loaded
        self._set(replace(loaded, start_time="00:00:00", end_time=seconds_to_time(loaded.duration)))

    def result_bytes(self) -> bytes:
        stable = self._stable()
        if not isinstance(stable, Done):
            raise ValueError("No trimmed result available.")
        return self.urls.read(stable.result_url)

    def source_bytes(self) -> bytes:
        """Bytes of the loaded media, the downloaded copy for URL sources."""
        loaded = self._loaded()
        if loaded is None:
            raise ValueError("No media loaded.")
        return self.urls.read(loaded.media_url)

    def source_name(self) -> Optional[str]:
        """File name offered for the original media, e.g. clip.mp4 or original.mp4."""
        loaded = self._loaded()
        if loaded is None:
            return None
        return loaded.media.name or f"original.{extension_for_kind(loaded.media.kind)}"

    def download_name(self) -> Optional[str]:
        """File name offered for the trimmed result, e.g. trimmed-clip.mp4."""
        loaded = self._loaded()
        if loaded is None:
            return None
        name: str = loaded.media.name
        stem: str = name.split(".")[0] or "media"
        ext: str = Path(name).suffix.lstrip(".") or extension_for_kind(loaded.media.kind)
        return f"trimmed-{stem}.{ext}"

    # ── Teardown ─────────────────────────────────────────────────

    def reset(self) -> None:
        """Clear everything and go back to Idle."""
        stable = self._stable()
        if isinstance(stable, Trimming):
            return
        self._release(stable)
        self._set(Idle())

    def close(self) -> None:
        """Release every object URL still owned by the session."""
        self._release(self._stable())
        self._state = Idle()

    def __enter__(self) -> "TrimSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
