"""
Playback session scheduling.

Turns a resolved Playlist into per-track playback commands, starts one sink
per playable track and waits for the session to complete.

Completion rule: the sink with the longest resolved take window is the
primary sink; ties go to the earliest track. The session is complete when
the primary sink finishes. A repeating primary never finishes on its own and
is ended by a stop request.

A track that cannot be opened, decoded, seeked or started is recorded as a
failure and never aborts its siblings.
"""

import threading
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Tuple

from loguru import logger

from mp3player.domain.exceptions import PlayerError, SeekError
from mp3player.domain.playlists.models import Playlist, Track
from mp3player.utils.parsers import format_time

from .backend import AudioBackend, Sink

# How often a blocking wait wakes up to check for a stop request (seconds)
DEFAULT_POLL_INTERVAL = 0.2


@dataclass(frozen=True)
class PlaybackCommand:
    """What a single sink must play."""

    index: int  # Position of the track in the playlist
    path: str
    seek: float
    skip: float
    take: Optional[float]  # None when the stream length is unknown: play to the end
    loop: bool
    volume: float

    @property
    def start(self) -> float:
        """Stream position where audible playback begins."""
        return self.seek + self.skip

    @property
    def window(self) -> float:
        """Take window used to rank sinks; unknown lengths rank as zero."""
        return self.take or 0.0


@dataclass(frozen=True)
class TrackFailure:
    """A track that could not be scheduled."""

    index: int
    path: str
    error: PlayerError


def resolve_command(index: int, track: Track, playlist: Playlist, backend: AudioBackend) -> PlaybackCommand:
    """
    Derive the playback command for one track.

    Seek is applied first, then skip trims further, then the take window is
    resolved. A zero/absent take means the rest of the stream as reported
    by the decoder; a take longer than the rest of the stream is cut to it.

    Raises:
        PlaylistIOError, DecodeError: If the file cannot be opened
        SeekError: If the seek or skip target lies beyond the stream
    """
    path = playlist.track_path(track)
    decoder = backend.open(path)
    decoder.seek(track.start_position)

    total = decoder.total_duration()
    start = track.start_position + track.skip
    if total is not None and track.skip and start > total:
        raise SeekError(
            f"Skip goes past end of stream: path -> {path!r}, start -> {start}, duration -> {total}"
        )

    remaining = max(total - start, 0.0) if total is not None else None
    take = track.take
    if not take:
        take = remaining
    elif remaining is not None and take > remaining:
        # The sink stops at end of stream, so rank it by what it can actually play
        logger.debug(f"Take clamped to end of stream: path -> {path!r}, take -> {take}, remaining -> {remaining}")
        take = remaining

    return PlaybackCommand(
        index=index,
        path=path,
        seek=track.start_position,
        skip=track.skip,
        take=take,
        loop=playlist.repeat,
        volume=playlist.volume,
    )


def build_commands(
    playlist: Playlist, backend: AudioBackend
) -> Tuple[List[PlaybackCommand], List[TrackFailure]]:
    """
    Resolve commands for every track, in playlist order.

    Returns:
        (commands, failures) - failures are per track and do not stop the loop
    """
    commands: List[PlaybackCommand] = []
    failures: List[TrackFailure] = []

    for i, track in enumerate(playlist.tracks):
        try:
            commands.append(resolve_command(i, track, playlist, backend))
        except PlayerError as e:
            path = playlist.track_path(track)
            logger.warning(f"Failed to prepare track: index -> {i}, track_file -> {path!r}, e -> {e}")
            failures.append(TrackFailure(index=i, path=path, error=e))

    return commands, failures


def select_primary(commands: Sequence[PlaybackCommand]) -> Optional[int]:
    """
    Pick the command whose completion ends the session.

    Args:
        commands: Playable commands in playlist order

    Returns:
        Position in ``commands`` of the longest take window (earliest wins a
        tie), or None when there is nothing to play

    Example:
        windows [10, 30, 20] -> 1
        windows [30, 10, 30] -> 0
    """
    if not commands:
        return None

    best = 0
    for i, command in enumerate(commands):
        if command.window > commands[best].window:
            best = i
    return best


class PlaybackSession:
    """Live sinks of one playback run.

    Every sink handle is held until ``stop()`` so that non-primary sinks keep
    playing for the whole primary wait.
    """

    def __init__(
        self,
        commands: List[PlaybackCommand],
        sinks: List[Sink],
        failures: List[TrackFailure],
    ):
        self.commands = commands
        self.sinks = sinks
        self.failures = sorted(failures, key=lambda f: f.index)
        self.primary = select_primary(commands)
        self._stopped = False

    @property
    def playable(self) -> int:
        return len(self.sinks)

    @property
    def primary_command(self) -> Optional[PlaybackCommand]:
        if self.primary is None:
            return None
        return self.commands[self.primary]

    @property
    def never_completes(self) -> bool:
        """True when the primary sink repeats forever."""
        command = self.primary_command
        return command is not None and command.loop

    def wait(
        self,
        stop_event: Optional[threading.Event] = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> bool:
        """
        Block until the primary sink finishes or a stop is requested.

        Args:
            stop_event: Set by a stop request to end the wait early
            poll_interval: How often to check the stop event (seconds)

        Returns:
            True if the primary sink completed, False if cancelled
        """
        if self.primary is None:
            return True

        sink = self.sinks[self.primary]
        command = self.commands[self.primary]
        logger.info(
            f"Waiting for primary track: index -> {command.index}, "
            f"window -> {format_time(command.take)}, loop -> {command.loop}"
        )

        if stop_event is None:
            sink.await_completion()
            return True

        while not stop_event.is_set():
            if sink.await_completion(timeout=poll_interval):
                logger.info(f"Primary track finished: index -> {command.index}")
                return True

        logger.info("Stop requested, ending playback session")
        return False

    def stop(self, grace: float = 2.0) -> None:
        """Best-effort stop of every sink. Safe to call more than once."""
        if self._stopped:
            return
        self._stopped = True

        for command, sink in zip(self.commands, self.sinks):
            try:
                sink.stop(grace)
            except PlayerError as e:
                logger.warning(f"Failed to stop sink: index -> {command.index}, e -> {e}")

        logger.debug(f"Stopped {len(self.sinks)} sinks")

    def status(self) -> dict[str, Any]:
        """Snapshot of the session for the ``status`` control command."""
        return {
            "playable": self.playable,
            "failed": [f.index for f in self.failures],
            "primary": self.primary_command.index if self.primary_command else None,
            "finished": [c.index for c, s in zip(self.commands, self.sinks) if s.is_finished()],
        }


def start_session(playlist: Playlist, backend: AudioBackend) -> PlaybackSession:
    """
    Create and fill one sink per playable track, in playlist order.

    Args:
        playlist: Resolved playlist
        backend: Audio backend providing decoders and sinks

    Returns:
        Session holding all started sinks and the recorded failures
    """
    commands, failures = build_commands(playlist, backend)

    started: List[PlaybackCommand] = []
    sinks: List[Sink] = []

    for command in commands:
        try:
            sink = backend.create_sink()
            sink.set_volume(command.volume)
            sink.enqueue(command)
        except PlayerError as e:
            logger.warning(f"Failed to start sink: index -> {command.index}, track_file -> {command.path!r}, e -> {e}")
            failures.append(TrackFailure(index=command.index, path=command.path, error=e))
            continue

        logger.info(
            f"Started track: index -> {command.index}, track_file -> {command.path!r}, "
            f"start -> {format_time(command.start)}, take -> {format_time(command.take)}, "
            f"loop -> {command.loop}"
        )
        started.append(command)
        sinks.append(sink)

    return PlaybackSession(started, sinks, failures)
