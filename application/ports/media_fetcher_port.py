# application/ports/media_fetcher_port.py
# Port interface for remote media acquisition.

from abc import ABC, abstractmethod

from application.dto.trim_dto import FetchOptions, FetchedStream


class FetchError(RuntimeError):
    """The downloader could not be started."""


class IMediaFetcher(ABC):
    """Abstract base class for URL → byte stream fetchers."""

    @abstractmethod
    def fetch_stream(self, url: str, options: FetchOptions) -> FetchedStream:
        """
        Start fetching *url* and return a lazily consumed byte stream.

        Raises:
            FetchError: if the download could not be started at all.
        """
        ...
