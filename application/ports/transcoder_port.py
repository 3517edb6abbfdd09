# application/ports/transcoder_port.py
# Port interface for the external media transcoder.
# Domain layer: must not import infrastructure or adapter code.

from abc import ABC, abstractmethod

from application.dto.trim_dto import TrimOptions, HlsOptions


class TranscodeError(RuntimeError):
    """The transcoder could not be started, timed out, or exited nonzero."""

    def __init__(self, message: str, returncode=None, stderr: str = "") -> None:
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


class ITranscoder(ABC):
    """Abstract base class for transcoding backends."""

    @abstractmethod
    def transcode(self, input_path: str, output_path: str, options: TrimOptions) -> str:
        """
        Trim *input_path* into *output_path*.

        Returns:
            The output path once the process has exited successfully.

        Raises:
            TranscodeError: on spawn failure, timeout or nonzero exit.
        """
        ...

    @abstractmethod
    def segment(self, input_path: str, manifest_path: str, options: HlsOptions) -> str:
        """
        Convert *input_path* into an HLS manifest plus segments.

        Returns:
            The manifest path.

        Raises:
            TranscodeError: on spawn failure, timeout or nonzero exit.
        """
        ...
