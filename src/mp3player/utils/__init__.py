"""
Cross-cutting utilities for mp3player.

Contains:
- parsers: time strings and comma-delimited CLI values
"""

from .parsers import *

__all__ = [
    'parse_time_string',
    'parse_optional_time',
    'parse_seconds',
    'format_time',
    'parse_csv_list',
]
