#!/usr/bin/env python3
"""
Media Trimmer CLI
Cut a time range out of a local audio/video file or a remote video URL.

Usage:
    python main.py clip.mp4 --start 00:00:05 --end 00:00:15
    python main.py song.mp3 --start 00:01:00 --output chorus.mp3
    python main.py --url https://example.com/watch?v=abc --end 00:00:30
    python main.py clip.mp4 --start 00:00:05 --end 00:00:15 --server http://127.0.0.1:5000
"""

import argparse
import mimetypes
import os
import sys
import time

from tqdm import tqdm

from infrastructure.client.http_trim_backend import HttpTrimBackend
from infrastructure.client.local_trim_backend import LocalTrimBackend
from infrastructure.media.ffmpeg_transcoder import FFmpegTranscoder
from infrastructure.media.pydub_media_probe import PydubMediaProbe
from infrastructure.media.ytdlp_fetcher import YtDlpFetcher
from trimmer.printer import OutputPrinter
from trimmer.session import Done, Loaded, TrimSession


def build_parser() -> argparse.ArgumentParser:
    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="media-trim",
        description="Trim audio and video files to a time range.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py clip.mp4 --start 00:00:05 --end 00:00:15
  python main.py --url https://youtu.be/abc --audio-only --end 00:01:00
  python main.py clip.mp4 --end 00:00:10 --server http://127.0.0.1:5000

Times are HH:MM:SS. --start defaults to the beginning, --end to the full length.
        """,
    )

    parser.add_argument(
        "input",
        metavar="INPUT",
        nargs="?",
        default=None,
        help="Path to a local audio or video file. Omit when using --url.",
    )

    src_group = parser.add_argument_group("Source")
    src_group.add_argument(
        "--url",
        "-u",
        default=None,
        help="Remote video URL to fetch with yt-dlp instead of a local file.",
    )
    src_group.add_argument(
        "--audio-only",
        action="store_true",
        help="With --url, fetch the best audio-only track.",
    )

    range_group = parser.add_argument_group("Time Range")
    range_group.add_argument(
        "--start",
        "-s",
        default=None,
        metavar="HH:MM:SS",
        help="Start of the segment to keep (default: 00:00:00).",
    )
    range_group.add_argument(
        "--end",
        "-e",
        default=None,
        metavar="HH:MM:SS",
        help="End of the segment to keep (default: end of media).",
    )

    out_group = parser.add_argument_group("Output Options")
    out_group.add_argument(
        "--output",
        "-o",
        default=None,
        metavar="PATH",
        help="Where to write the trimmed file (default: trimmed-<name>.<ext>).",
    )
    out_group.add_argument(
        "--save-original",
        nargs="?",
        const="",
        default=None,
        metavar="PATH",
        help="Also save the loaded media (the downloaded copy for --url). "
             "Without PATH it keeps its own name.",
    )
    out_group.add_argument(
        "--server",
        default=None,
        metavar="URL",
        help="Trim through a running media trimmer server instead of locally.",
    )
    out_group.add_argument(
        "--api-key",
        default=os.environ.get("API_KEY"),
        help="Bearer token for --server (default: $API_KEY).",
    )
    out_group.add_argument(
        "--quiet",
        "-q",
        action="store_true",
        help="Suppress all output except errors.",
    )
    out_group.add_argument(
        "--no-color",
        "-n",
        action="store_true",
        help="Disable colored output (also auto-disabled when NO_COLOR env var is set).",
    )

    return parser


def build_session(args: argparse.Namespace) -> TrimSession:
    if args.server:
        backend = HttpTrimBackend(base_url=args.server, api_key=args.api_key)
    else:
        backend = LocalTrimBackend(transcoder=FFmpegTranscoder(), fetcher=YtDlpFetcher())
    return TrimSession(backend=backend, probe=PydubMediaProbe())


def load_source(session: TrimSession, args: argparse.Namespace) -> None:
    """Select the file or URL on the session, then submit it."""
    if args.url:
        session.enter_url(args.url, audio_only=args.audio_only)
    else:
        if not os.path.isfile(args.input):
            raise FileNotFoundError(
                f"Input file not found: '{args.input}'.\n"
                f"    → Check the path and try again."
            )
        mime_type, _ = mimetypes.guess_type(args.input)
        with open(args.input, "rb") as f:
            data: bytes = f.read()
        session.select_file(os.path.basename(args.input), data, mime_type or "")
        if session.error:
            return
    session.submit()


def main(argv=None) -> int:
    parser: argparse.ArgumentParser = build_parser()
    args: argparse.Namespace = parser.parse_args(argv)

    if bool(args.input) == bool(args.url):
        parser.error("Provide either an INPUT file or --url, not both.")

    printer: OutputPrinter = OutputPrinter(quiet=args.quiet, no_color=args.no_color)
    start_time: float = time.time()

    try:
        with build_session(args) as session, \
                tqdm(total=3, desc="Loading media", unit="step", disable=args.quiet) as pbar:

            load_source(session, args)
            if session.error:
                printer.error(session.error)
                return 1
            if args.save_original is not None:
                original_path: str = args.save_original or session.source_name()
                with open(original_path, "wb") as f:
                    f.write(session.source_bytes())
                if not args.quiet:
                    pbar.write(f"Saved original to {original_path}")
            pbar.update(1)

            if isinstance(session.state, Loaded):
                if args.start:
                    session.set_start_time(args.start)
                if args.end:
                    session.set_end_time(args.end)

            pbar.set_description("Trimming media")
            session.trim()
            if session.error or not isinstance(session.state, Done):
                printer.error(session.error or "Failed to trim media")
                return 1
            pbar.update(1)

            pbar.set_description("Saving output")
            output_path: str = args.output or session.download_name()
            data: bytes = session.result_bytes()
            with open(output_path, "wb") as f:
                f.write(data)
            pbar.update(1)

            segment: str = session.segment_duration or ""
            duration: float = session.state.loaded.duration

    except (FileNotFoundError, ValueError) as exc:
        printer.error(str(exc))
        return 1
    except KeyboardInterrupt:
        printer.warning("Trim cancelled.", hint="Output file was not saved.")
        return 130

    printer.trim_summary(output_path, segment, duration, len(data), time.time() - start_time)
    return 0


if __name__ == "__main__":
    sys.exit(main())
