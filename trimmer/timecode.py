# trimmer/timecode.py
# HH:MM:SS helpers shared by the trim route, the client session and the CLI.

import re

# Hours 0-23 (one or two digits), minutes and seconds 00-59
TIME_PATTERN: re.Pattern = re.compile(r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]:[0-5][0-9]$")


def is_valid_time_format(value) -> bool:
    """Return True only for strings shaped like HH:MM:SS."""
    if not isinstance(value, str):
        return False
    return TIME_PATTERN.match(value) is not None


def time_to_seconds(value: str) -> int:
    """
    Convert an HH:MM:SS string to whole seconds.

    Raises:
        ValueError: if *value* does not match TIME_PATTERN.
    """
    if not is_valid_time_format(value):
        raise ValueError(f"Invalid time '{value}'. Expected HH:MM:SS.")
    hours, minutes, seconds = (int(part) for part in value.split(":"))
    return hours * 3600 + minutes * 60 + seconds


def seconds_to_time(seconds: float) -> str:
    """Format seconds as zero-padded HH:MM:SS, truncating fractions."""
    total: int = max(0, int(seconds))
    hours: int = total // 3600
    minutes: int = (total % 3600) // 60
    secs: int = total % 60
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def parse_duration(value) -> float:
    """
    Parse a positive duration in seconds from form input.

    Raises:
        ValueError: if the value is missing, not numeric, or not > 0.
    """
    try:
        duration: float = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid duration '{value}'. Expected seconds.") from None
    if not duration > 0 or duration == float("inf"):
        raise ValueError(f"Duration must be a positive number of seconds. Got: {value}.")
    return duration


def format_duration_arg(duration: float) -> str:
    """Render seconds for a transcoder argument without a trailing '.0'."""
    if float(duration).is_integer():
        return str(int(duration))
    return f"{duration:g}"
