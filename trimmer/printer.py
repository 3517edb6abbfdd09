# trimmer/printer.py
# Console output shared by media-trim and convert-to-hls.

import os
import sys
from typing import Optional, TextIO

from application.dto.batch_dto import BatchConversionResultDTO


class OutputPrinter:
    """
    One line per event, an optional hint below it, an optional key/value block.

    Errors always reach stderr. Everything else is dropped in quiet mode.
    ANSI color is skipped with no_color=True or when NO_COLOR is set.
    """

    # level: (symbol, ANSI code, gap after symbol)
    LEVELS : dict[str, tuple[str, str, str]] = {
        "success" : ("✅", "32", "  "),
        "error"   : ("❌", "31", "  "),
        "warning" : ("⚠️ ", "33", " "),
        "info"    : ("ℹ️ ", "36", " "),
    }

    HINT_ARROW : str = "→"
    HINT_CODE  : str = "36"
    KEY_CODE   : str = "90"
    KEY_WIDTH  : int = 10

    def __init__(self, quiet : bool = False, no_color : bool = False) -> None:
        self.quiet    : bool = quiet
        self.no_color : bool = no_color or bool(os.environ.get("NO_COLOR", ""))

    def _paint(self, text : str, code : str) -> str:
        return text if self.no_color else f"\033[{code}m{text}\033[0m"

    def _emit(
        self,
        level   : str,
        message : str,
        hint    : Optional[str] = None,
        stream  : Optional[TextIO] = None,
        lead    : str = "\n",
        tint    : bool = True,
    ) -> None:
        symbol, code, gap = self.LEVELS[level]
        out : TextIO = stream or sys.stdout
        text : str = self._paint(message, code) if tint else message
        print(f"{lead}{self._paint(symbol, code)}{gap}{text}", file=out)
        if hint:
            print(f"    {self._paint(f'{self.HINT_ARROW} {hint}', self.HINT_CODE)}", file=out)

    # ── Single events ────────────────────────────────────────────

    def success(self, title : str, details : Optional[dict[str, str]] = None) -> None:
        if self.quiet:
            return
        self._emit("success", title)
        for key, value in (details or {}).items():
            print(f"    {self._paint(f'{key:<{self.KEY_WIDTH}}', self.KEY_CODE)}: {value}")

    def error(self, message : str, hint : Optional[str] = None) -> None:
        self._emit("error", message, hint, stream=sys.stderr)

    def warning(self, message : str, hint : Optional[str] = None) -> None:
        if not self.quiet:
            self._emit("warning", message, hint)

    def info(self, message : str) -> None:
        if not self.quiet:
            self._emit("info", message, lead="", tint=False)

    # ── Command summaries ────────────────────────────────────────

    def trim_summary(self, output_path : str, segment : str, source_seconds : float,
                     size_bytes : int, elapsed : float) -> None:
        """Result block for media-trim."""
        self.success(
            title=output_path,
            details={
                "Segment" : segment,
                "Source"  : f"{source_seconds:.1f}s",
                "Size"    : f"{size_bytes / (1024 * 1024):.2f} MB",
                "Time"    : f"{elapsed:.1f}s",
            },
        )

    def batch_summary(self, summary : BatchConversionResultDTO, output_dir : str,
                      elapsed : float) -> None:
        """Result block for convert-to-hls; failures are listed on stderr."""
        if summary.ok:
            self.success(
                title=output_dir,
                details={
                    "Files"     : str(summary.total),
                    "Converted" : str(summary.done),
                    "Time"      : f"{elapsed:.1f}s",
                },
            )
            return
        self.error(
            f"{summary.failed} of {summary.total} files failed: {', '.join(summary.failed_files)}",
            hint="Run ffmpeg by hand on a failing file to see its full error output.",
        )
