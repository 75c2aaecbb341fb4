"""
Argument and time parsing utilities.

Cross-cutting helpers for turning CLI strings and playlist fields into values.
"""

from datetime import datetime
from typing import List, Optional, Union

from mp3player.domain.exceptions import ParseError

TIME_FORMAT = "%H:%M:%S"


def parse_time_string(time_string: str) -> int:
    """
    Convert an ``HH:MM:SS`` string to a number of seconds.

    Fields must stay in their natural range (hours 0-23, minutes and
    seconds 0-59). An empty string is not a valid time and fails.

    Args:
        time_string: Time string in ``HH:MM:SS`` form

    Returns:
        Number of seconds since 00:00:00

    Raises:
        ParseError: If the string does not match or a field is out of range

    Example:
        "01:23:45" -> 5025
    """
    if not isinstance(time_string, str):
        raise ParseError(repr(time_string), "expected a string")

    try:
        parsed = datetime.strptime(time_string, TIME_FORMAT)
    except ValueError as e:
        raise ParseError(time_string, str(e)) from e

    return parsed.hour * 3600 + parsed.minute * 60 + parsed.second


def parse_optional_time(value: Optional[Union[str, int, float]]) -> float:
    """
    Parse a time value where empty means zero.

    Accepts ``None``/``""`` (zero), numeric seconds, or an ``HH:MM:SS`` string.

    Args:
        value: Raw time value from a playlist or CLI argument

    Returns:
        Duration in seconds
    """
    if value is None:
        return 0.0
    # bool is an int subclass but never a duration
    if isinstance(value, bool):
        raise ParseError(repr(value), "expected a time string or seconds")
    if isinstance(value, (int, float)):
        if value < 0:
            raise ParseError(repr(value), "negative duration")
        return float(value)

    value = value.strip()
    if not value:
        return 0.0
    return float(parse_time_string(value))


def parse_seconds(value: str) -> float:
    """
    Parse a plain seconds value such as a ``--skip`` entry.

    Args:
        value: Seconds as text; empty means zero

    Returns:
        Seconds as float

    Raises:
        ParseError: If the value is not a non-negative integer
    """
    value = value.strip()
    if not value:
        return 0.0
    try:
        seconds = int(value)
    except ValueError as e:
        raise ParseError(value, str(e)) from e
    if seconds < 0:
        raise ParseError(value, "negative duration")
    return float(seconds)


def format_time(seconds: Optional[float]) -> str:
    """Format seconds as ``HH:MM:SS`` for log lines and diagnostics."""
    if seconds is None:
        return "--:--:--"
    total = int(seconds)
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def parse_csv_list(value: Optional[str]) -> List[str]:
    """
    Split a comma-delimited CLI value into stripped entries.

    Empty entries are kept so that positions stay aligned with files.

    Args:
        value: Raw option value, e.g. ``"00:01:00,,00:02:00"``

    Returns:
        List of entries, empty list when no value was given

    Example:
        "00:01:00,,00:02:00" -> ['00:01:00', '', '00:02:00']
    """
    if value is None or value == "":
        return []
    return [part.strip() for part in value.split(",")]


__all__ = [
    'parse_time_string',
    'parse_optional_time',
    'parse_seconds',
    'format_time',
    'parse_csv_list',
]
