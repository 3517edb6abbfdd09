#!/usr/bin/env python3
"""
Batch HLS converter.
Turn every MP4 in a directory into an HLS playlist plus segments.

Usage:
    python convert_to_hls.py
    python convert_to_hls.py --input-dir ./input-videos --output-dir ./output-hls
    python convert_to_hls.py --segment-duration 6 --workers 2
"""

import argparse
import sys
import time

from tqdm import tqdm

from application.dto.batch_dto import HlsConversionResultDTO
from infrastructure.media.ffmpeg_transcoder import FFmpegTranscoder
from trimmer.hls import convert_directory, find_inputs
from trimmer.printer import OutputPrinter
from trimmer.utils import (
    HLS_DEFAULT_INPUT_DIR,
    HLS_DEFAULT_OUTPUT_DIR,
    HLS_DEFAULT_SEGMENT_SECONDS,
    HLS_DEFAULT_WORKERS,
)


def build_parser() -> argparse.ArgumentParser:
    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="convert-to-hls",
        description="Convert a directory of MP4 files to HLS (m3u8 + ts segments).",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python convert_to_hls.py
  python convert_to_hls.py --input-dir videos --output-dir public/hls --workers 2

Output layout:
  <output-dir>/<name>/<name>.m3u8
  <output-dir>/<name>/<name>_000.ts, <name>_001.ts, ...
        """,
    )
    parser.add_argument(
        "--input-dir",
        "-i",
        default=HLS_DEFAULT_INPUT_DIR,
        metavar="DIR",
        help=f"Directory containing .mp4 files (default: {HLS_DEFAULT_INPUT_DIR}).",
    )
    parser.add_argument(
        "--output-dir",
        "-o",
        default=HLS_DEFAULT_OUTPUT_DIR,
        metavar="DIR",
        help=f"Directory for HLS output (default: {HLS_DEFAULT_OUTPUT_DIR}).",
    )
    parser.add_argument(
        "--segment-duration",
        "-s",
        type=int,
        default=HLS_DEFAULT_SEGMENT_SECONDS,
        metavar="SECONDS",
        help=f"Seconds per segment (default: {HLS_DEFAULT_SEGMENT_SECONDS}).",
    )
    parser.add_argument(
        "--workers",
        "-w",
        type=int,
        default=HLS_DEFAULT_WORKERS,
        metavar="N",
        help=f"Maximum ffmpeg processes running at once (default: {HLS_DEFAULT_WORKERS}).",
    )
    parser.add_argument(
        "--quiet",
        "-q",
        action="store_true",
        help="Suppress all output except errors.",
    )
    parser.add_argument(
        "--no-color",
        "-n",
        action="store_true",
        help="Disable colored output (also auto-disabled when NO_COLOR env var is set).",
    )
    return parser


def main(argv=None) -> int:
    parser: argparse.ArgumentParser = build_parser()
    args: argparse.Namespace = parser.parse_args(argv)

    if args.workers < 1:
        parser.error("--workers must be at least 1.")
    if args.segment_duration < 1:
        parser.error("--segment-duration must be at least 1 second.")

    printer: OutputPrinter = OutputPrinter(quiet=args.quiet, no_color=args.no_color)
    start_time: float = time.time()

    try:
        inputs = find_inputs(args.input_dir)
        printer.info(f"Found {len(inputs)} MP4 files to convert...")

        with tqdm(total=len(inputs), desc="Converting", unit="file", disable=args.quiet) as pbar:

            def on_result(result: HlsConversionResultDTO) -> None:
                pbar.update(1)
                if args.quiet:
                    return
                if result.status == "done":
                    pbar.write(f"Converted {result.filename} → {result.manifest_path}")
                else:
                    pbar.write(f"Failed {result.filename}: {result.error}")

            summary = convert_directory(
                input_dir=args.input_dir,
                output_dir=args.output_dir,
                transcoder=FFmpegTranscoder(),
                segment_seconds=args.segment_duration,
                workers=args.workers,
                on_result=on_result,
            )
    except (FileNotFoundError, ValueError) as exc:
        printer.error(str(exc))
        return 1
    except KeyboardInterrupt:
        printer.warning("Conversion cancelled.", hint="Partially written output may remain.")
        return 130

    printer.batch_summary(summary, args.output_dir, time.time() - start_time)
    return 0 if summary.ok else 1


if __name__ == "__main__":
    sys.exit(main())
