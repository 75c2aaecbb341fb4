"""Exceptions raised while resolving playlists and scheduling playback."""

from typing import Optional


class PlayerError(Exception):
    """Base exception for mp3player operations."""

    pass


class PlaylistIOError(PlayerError):
    """Raised when a playlist or track file is missing or unreadable."""

    def __init__(self, path: str, cause: Optional[BaseException] = None):
        self.path = path
        self.cause = cause
        message = f"Cannot read file: path -> {path!r}"
        if cause is not None:
            message += f", cause -> {cause}"
        super().__init__(message)


class FormatError(PlayerError):
    """Raised when a playlist document is malformed or has the wrong shape."""

    pass


class ParseError(PlayerError):
    """Raised when a time string is not a valid HH:MM:SS value."""

    def __init__(self, value: str, cause: str):
        self.value = value
        self.cause = cause
        super().__init__(
            f"Failed to parse time-formatted string: time_string -> {value!r}, cause -> {cause}"
        )


class ContractError(PlayerError):
    """Raised when CLI inputs violate their contract.

    Covers positional arrays that are shorter than the file list and
    mutually exclusive inputs supplied together.
    """

    pass


class DecodeError(PlayerError):
    """Raised when an audio file cannot be decoded."""

    pass


class SeekError(PlayerError):
    """Raised when a seek target is outside the stream."""

    pass


class BackendError(PlayerError):
    """Raised when the audio output backend is unavailable or fails to start a sink."""

    pass
