import logging
import os
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Callable, List, Optional

from application.dto.batch_dto import (
    BatchConversionResultDTO,
    HlsConversionRequestDTO,
    HlsConversionResultDTO,
)
from application.dto.trim_dto import HlsOptions
from application.ports.transcoder_port import ITranscoder, TranscodeError
from trimmer.utils import HLS_DEFAULT_SEGMENT_SECONDS, HLS_DEFAULT_WORKERS, HLS_INPUT_EXTENSION

logger = logging.getLogger(__name__)


def find_inputs(input_dir: str, extension: str = HLS_INPUT_EXTENSION) -> List[str]:
    """
    Return the files in *input_dir* ending in *extension*, sorted by name.

    Raises:
        FileNotFoundError: if *input_dir* does not exist.
    """
    if not os.path.isdir(input_dir):
        raise FileNotFoundError(
            f"Input directory not found: '{input_dir}'.\n"
            f"    → Create it and put the {extension} files to convert inside."
        )
    return sorted(
        os.path.join(input_dir, name)
        for name in os.listdir(input_dir)
        if name.endswith(extension) and os.path.isfile(os.path.join(input_dir, name))
    )


def plan_conversion(
    input_path: str,
    output_dir: str,
    segment_seconds: int = HLS_DEFAULT_SEGMENT_SECONDS,
) -> HlsConversionRequestDTO:
    """
    Lay out one file's HLS output.

    Example: input-videos/clip.mp4 → output-hls/clip/clip.m3u8
                                      output-hls/clip/clip_000.ts ...
    """
    stem: str = Path(input_path).stem
    target_dir: str = os.path.join(output_dir, stem)
    return HlsConversionRequestDTO(
        input_path=input_path,
        output_dir=target_dir,
        manifest_path=os.path.join(target_dir, f"{stem}.m3u8"),
        segment_pattern=os.path.join(target_dir, f"{stem}_%03d.ts"),
        segment_seconds=segment_seconds,
    )


def convert_one(request: HlsConversionRequestDTO, transcoder: ITranscoder) -> HlsConversionResultDTO:
    """Convert a single file. Failures are captured in the result, not raised."""
    filename: str = os.path.basename(request.input_path)
    started: float = time.time()
    try:
        os.makedirs(request.output_dir, exist_ok=True)
        transcoder.segment(
            request.input_path,
            request.manifest_path,
            HlsOptions(
                segment_pattern=request.segment_pattern,
                segment_seconds=request.segment_seconds,
            ),
        )
    except (TranscodeError, OSError) as e:
        logger.error("Error converting %s: %s", filename, e)
        return HlsConversionResultDTO(
            filename=filename,
            status="error",
            error=str(e),
            elapsed=time.time() - started,
        )

    logger.info("Converted %s → %s", filename, request.manifest_path)
    return HlsConversionResultDTO(
        filename=filename,
        status="done",
        manifest_path=request.manifest_path,
        elapsed=time.time() - started,
    )


def convert_directory(
    input_dir       : str,
    output_dir      : str,
    transcoder      : ITranscoder,
    segment_seconds : int = HLS_DEFAULT_SEGMENT_SECONDS,
    workers         : int = HLS_DEFAULT_WORKERS,
    on_result       : Optional[Callable[[HlsConversionResultDTO], None]] = None,
) -> BatchConversionResultDTO:
    """
    Convert every input file to HLS with at most *workers* transcoders running.

    Args:
        input_dir:       Directory scanned for input files.
        output_dir:      Root for the per-file output directories.
        transcoder:      ITranscoder implementation.
        segment_seconds: Target segment length.
        workers:         Concurrency cap (>= 1).
        on_result:       Optional callback fired as each file finishes.

    Returns:
        Summary with one result per input file, in input order.
    """
    if workers < 1:
        raise ValueError(f"workers must be at least 1. Got: {workers}.")

    inputs: List[str] = find_inputs(input_dir)
    os.makedirs(output_dir, exist_ok=True)
    requests = [plan_conversion(path, output_dir, segment_seconds) for path in inputs]
    logger.info("Found %d files to convert with %d workers", len(requests), workers)

    results: List[Optional[HlsConversionResultDTO]] = [None] * len(requests)
    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = {
            pool.submit(convert_one, request, transcoder): idx
            for idx, request in enumerate(requests)
        }
        for future in as_completed(futures):
            result: HlsConversionResultDTO = future.result()
            results[futures[future]] = result
            if on_result:
                on_result(result)

    summary = BatchConversionResultDTO(results=list(results), total=len(results))
    summary.done = sum(1 for r in summary.results if r.status == "done")
    summary.failed = sum(1 for r in summary.results if r.status == "error")
    return summary
