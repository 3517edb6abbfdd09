# infrastructure/client/http_trim_backend.py
# ITrimBackend that talks to a running media trimmer server over HTTP.

import logging
from typing import Optional

import requests

from application.ports.trim_backend_port import ITrimBackend, TrimBackendError
from trimmer.utils import mimetype_for_kind

logger = logging.getLogger(__name__)


class HttpTrimBackend(ITrimBackend):
    """Calls GET /api/download and POST /api/trim-video."""

    def __init__(
        self,
        base_url: str = "http://127.0.0.1:5000",
        api_key: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url: str = base_url.rstrip("/")
        self.http: requests.Session = session or requests.Session()
        if api_key:
            self.http.headers["Authorization"] = f"Bearer {api_key}"

    def download(self, url: str, audio_only: bool = False) -> bytes:
        params = {"url": url}
        if audio_only:
            params["audioOnly"] = "true"
        try:
            response = self.http.get(f"{self.base_url}/api/download", params=params)
        except requests.RequestException as e:
            logger.error("download request failed: %s", e)
            raise TrimBackendError("Failed to fetch video") from e

        if not response.ok:
            logger.error("download failed status=%s body=%s", response.status_code, response.text[:200])
            raise TrimBackendError("Failed to fetch video")
        if not response.content:
            raise TrimBackendError("Failed to fetch video")
        return response.content

    def trim(
        self,
        media: bytes,
        filename: str,
        start_time: str,
        duration: str,
        media_kind: str,
    ) -> bytes:
        files = {"media": (filename, media, mimetype_for_kind(media_kind))}
        data = {
            "startTime": start_time,
            "duration": duration,
            "mediaType": media_kind,
        }
        try:
            response = self.http.post(f"{self.base_url}/api/trim-video", files=files, data=data)
        except requests.RequestException as e:
            logger.error("trim request failed: %s", e)
            raise TrimBackendError("Failed to trim media") from e

        if not response.ok:
            raise TrimBackendError(_error_message(response, "Failed to trim media"))
        return response.content


def _error_message(response: requests.Response, default: str) -> str:
    """Pull {error} out of a JSON error body, falling back to *default*."""
    try:
        payload = response.json()
    except ValueError:
        return default
    if isinstance(payload, dict) and payload.get("error"):
        return str(payload["error"])
    return default
