import time
from dataclasses import dataclass
from typing import Optional, Callable, Union

from application.dto.trim_dto import TrimOptions
from application.ports.transcoder_port import ITranscoder
from infrastructure.web.scratch_files import scratch_pair
from trimmer.timecode import is_valid_time_format, parse_duration, format_duration_arg
from trimmer.utils import (
    SCRATCH_DIR,
    normalize_media_kind,
    extension_for_kind,
    mimetype_for_kind,
    trimmed_filename,
)


@dataclass
class TrimResult:
    data: bytes
    mimetype: str
    filename: str
    elapsed: float = 0.0


def validate_trim_params(start_time, duration) -> TrimOptions:
    """
    Check the raw form values that become transcoder arguments.

    Raises:
        ValueError: naming the bad field.
    """
    if not is_valid_time_format(start_time):
        raise ValueError(
            f"Invalid start time: '{start_time}'.\n"
            f"    → Use HH:MM:SS, for example 00:01:30."
        )
    seconds: float = parse_duration(duration)
    return TrimOptions(start_time=start_time, duration=format_duration_arg(seconds))


def trim_media(
    source      : Union[bytes, object],
    start_time  : str,
    duration    : str,
    media_kind  : str,
    transcoder  : ITranscoder,
    scratch_dir : Optional[str] = None,
    progress_callback: Optional[Callable[[int, int, str], None]] = None,
) -> TrimResult:
    """
    Full pipeline: persist source → transcode → read output → release scratch.

    Args:
        source:      Raw bytes, or an upload object exposing save(path).
        start_time:  Seek position, HH:MM:SS.
        duration:    Seconds to keep.
        media_kind:  'video' or 'audio'; picks the scratch extension and
                     the returned content type.
        transcoder:  ITranscoder implementation.
        scratch_dir: Directory for the scratch pair (created if absent).
        progress_callback: Optional callback (step_idx, total_steps, step_name).

    Raises:
        ValueError:     malformed start time or duration.
        TranscodeError: the transcoder failed.
    """
    options: TrimOptions = validate_trim_params(start_time, duration)
    kind: str = normalize_media_kind(media_kind)
    options.media_kind = kind

    steps = ["Saving upload", "Trimming media", "Reading output"]

    def _report(step_idx: int) -> None:
        if progress_callback:
            progress_callback(step_idx, len(steps), steps[step_idx])

    started: float = time.time()

    with scratch_pair(scratch_dir or SCRATCH_DIR, extension_for_kind(kind)) as pair:
        # [1] Persist the source
        _report(0)
        if isinstance(source, (bytes, bytearray)):
            with open(pair.input_path, "wb") as f:
                f.write(source)
        else:
            source.save(pair.input_path)

        # [2] Transcode
        _report(1)
        transcoder.transcode(pair.input_path, pair.output_path, options)

        # [3] Read the result fully before the scratch pair is released
        _report(2)
        with open(pair.output_path, "rb") as f:
            data: bytes = f.read()

    return TrimResult(
        data=data,
        mimetype=mimetype_for_kind(kind),
        filename=trimmed_filename(kind),
        elapsed=time.time() - started,
    )
