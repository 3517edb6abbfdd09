import os
import threading
import time
from pathlib import Path

import pytest

from application.dto.trim_dto import FetchedStream, FetchOptions, HlsOptions, TrimOptions
from application.ports.media_fetcher_port import IMediaFetcher, FetchError
from application.ports.media_probe_port import IMediaProbe
from application.ports.transcoder_port import ITranscoder, TranscodeError
from application.ports.trim_backend_port import ITrimBackend, TrimBackendError


# Fakes for the external tools


class FakeTranscoder(ITranscoder):
    """Writes canned output instead of running ffmpeg."""

    def __init__(self, output: bytes = b"trimmed-bytes", fail: bool = False,
                 fail_names: tuple = (), delay: float = 0.0) -> None:
        self.output: bytes = output
        self.fail: bool = fail
        self.fail_names: tuple = fail_names
        self.delay: float = delay
        self.calls: list = []
        self.segment_calls: list = []
        self.seen_inputs: list = []
        self._lock = threading.Lock()
        self.running: int = 0
        self.max_running: int = 0

    def transcode(self, input_path: str, output_path: str, options: TrimOptions) -> str:
        self.calls.append((input_path, output_path, options))
        with open(input_path, "rb") as f:
            self.seen_inputs.append(f.read())
        with open(output_path, "wb") as f:
            f.write(self.output)
        if self.fail:
            # ffmpeg may leave a partial output behind before dying
            raise TranscodeError("ffmpeg process exited with code 1", returncode=1, stderr="boom")
        return output_path

    def segment(self, input_path: str, manifest_path: str, options: HlsOptions) -> str:
        with self._lock:
            self.segment_calls.append((input_path, manifest_path, options))
            self.running += 1
            self.max_running = max(self.max_running, self.running)
        try:
            if self.delay:
                time.sleep(self.delay)
            if Path(input_path).stem in self.fail_names:
                raise TranscodeError("ffmpeg process exited with code 1", returncode=1)
            with open(manifest_path, "w") as f:
                f.write("#EXTM3U\n")
            return manifest_path
        finally:
            with self._lock:
                self.running -= 1


class FakeFetcher(IMediaFetcher):

    def __init__(self, chunks=(b"chunk-1", b"chunk-2"), fail: bool = False) -> None:
        self.chunks = list(chunks)
        self.fail: bool = fail
        self.calls: list = []
        self.closed: int = 0

    def _close(self) -> None:
        self.closed += 1

    def fetch_stream(self, url: str, options: FetchOptions) -> FetchedStream:
        self.calls.append((url, options))
        if self.fail:
            raise FetchError("yt-dlp could not be started: [Errno 2] No such file or directory")
        mimetype = "audio/mp4" if options.audio_only else "video/mp4"
        return FetchedStream(chunks=iter(self.chunks), mimetype=mimetype, on_close=self._close)


class FakeProbe(IMediaProbe):

    def __init__(self, duration: float = 60.0) -> None:
        self.value: float = duration
        self.calls: list = []

    def duration(self, media: bytes, filename: str) -> float:
        self.calls.append((media, filename))
        return self.value


class FakeBackend(ITrimBackend):

    def __init__(self, download_data: bytes = b"remote-video", trim_data: bytes = b"trimmed",
                 download_error=None, trim_error=None) -> None:
        self.download_data = download_data
        self.trim_data = trim_data
        self.download_error = download_error
        self.trim_error = trim_error
        self.download_calls: list = []
        self.trim_calls: list = []

    def download(self, url: str, audio_only: bool = False) -> bytes:
        self.download_calls.append((url, audio_only))
        if self.download_error:
            raise TrimBackendError(self.download_error)
        return self.download_data

    def trim(self, media, filename, start_time, duration, media_kind) -> bytes:
        self.trim_calls.append({
            "media": media,
            "filename": filename,
            "start_time": start_time,
            "duration": duration,
            "media_kind": media_kind,
        })
        if self.trim_error:
            raise TrimBackendError(self.trim_error)
        return self.trim_data


# Fixtures


@pytest.fixture
def scratch_dir(tmp_path) -> str:
    return os.path.join(str(tmp_path), "temp")


@pytest.fixture
def fake_transcoder() -> FakeTranscoder:
    return FakeTranscoder()


@pytest.fixture
def fake_fetcher() -> FakeFetcher:
    return FakeFetcher()


@pytest.fixture
def client(fake_transcoder, fake_fetcher, scratch_dir, monkeypatch):
    """Flask test client with the external tools swapped for fakes."""
    import server

    monkeypatch.delenv("API_KEY", raising=False)
    monkeypatch.setitem(server.app.config, "TRANSCODER", fake_transcoder)
    monkeypatch.setitem(server.app.config, "MEDIA_FETCHER", fake_fetcher)
    monkeypatch.setitem(server.app.config, "SCRATCH_DIR", scratch_dir)
    return server.app.test_client()
