"""
Audio backend interface.

Defines the contract between the playback scheduler and whatever decodes and
outputs audio. The scheduler only says *what* each sink must play; a backend
decides *how*.

A backend owns the shared output configuration. Sinks created from it must
not reconfigure or close that shared state.
"""

from typing import TYPE_CHECKING, Optional, Protocol

if TYPE_CHECKING:
    from .scheduler import PlaybackCommand


class Decoder(Protocol):
    """An opened audio stream."""

    path: str

    def seek(self, seconds: float) -> None:
        """Move the read position.

        Raises:
            SeekError: If the target is beyond the stream or refused
        """
        ...

    def total_duration(self) -> Optional[float]:
        """Total stream length in seconds, or None when unknown."""
        ...


class Sink(Protocol):
    """An independent playback queue for a single track."""

    def set_volume(self, volume: float) -> None:
        """Set linear gain (1.0 = 100%). Fixed once playback has started."""
        ...

    def enqueue(self, command: "PlaybackCommand") -> None:
        """Start playing the command's window (looping if requested).

        Raises:
            BackendError: If the sink cannot start
        """
        ...

    def await_completion(self, timeout: Optional[float] = None) -> bool:
        """Block until playback ends or the timeout passes.

        Returns:
            True if playback has ended, False on timeout
        """
        ...

    def is_finished(self) -> bool:
        """Non-blocking completion check."""
        ...

    def stop(self, grace: float = 2.0) -> None:
        """Stop playback and release output resources."""
        ...


class AudioBackend(Protocol):
    """Factory for decoders and sinks sharing one output configuration."""

    def open(self, path: str) -> Decoder:
        """Open an audio file.

        Raises:
            PlaylistIOError: If the file is missing or unreadable
            DecodeError: If the file is not decodable audio
        """
        ...

    def create_sink(self) -> Sink:
        """Create a new, empty sink on the shared output."""
        ...
