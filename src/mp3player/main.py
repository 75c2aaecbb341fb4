"""
mp3player - playback session runner

Resolves the playlist, starts one sink per track, waits for the primary sink
and tears everything down. A ``stop`` control command, SIGINT or SIGTERM ends
the wait early.
"""

import signal
import threading
from contextlib import contextmanager
from typing import Iterator, List, Optional, Tuple

from loguru import logger

from mp3player.core.config import Config
from mp3player.core.console import print_error, safe_print
from mp3player.core.output import log
from mp3player.domain.exceptions import PlayerError
from mp3player.domain.playback import AudioBackend, MpvBackend, PlaybackSession, start_session
from mp3player.domain.playlists import PlayRequest, resolve_playlist
from mp3player.ipc import IPCServer, send_command
from mp3player.utils.parsers import format_time


@contextmanager
def stop_on_signals(stop_event: threading.Event) -> Iterator[None]:
    """Set ``stop_event`` on SIGINT/SIGTERM while the block runs (main thread only)."""
    if threading.current_thread() is not threading.main_thread():
        yield
        return

    def _handle(signum, frame):
        logger.info(f"Received signal {signum}, stopping")
        stop_event.set()

    previous = {sig: signal.signal(sig, _handle) for sig in (signal.SIGINT, signal.SIGTERM)}
    try:
        yield
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)


def make_command_handler(session: PlaybackSession, stop_event: threading.Event):
    """Build the IPC handler for a running session."""

    def handle(command: str, args: List[str]) -> Tuple[bool, str]:
        if command == "stop":
            stop_event.set()
            return True, "Stopping playback"
        if command == "status":
            status = session.status()
            return True, (
                f"playing {status['playable']} tracks, primary {status['primary']}, "
                f"finished {status['finished']}, failed {status['failed']}"
            )
        return False, f"Unknown command: {command}"

    return handle


def start_control_server(session: PlaybackSession, stop_event: threading.Event) -> Optional[IPCServer]:
    """Start the control socket, or return None if it cannot be set up."""
    try:
        server = IPCServer(make_command_handler(session, stop_event))
        server.start()
    except OSError as e:
        logger.warning(f"Control socket unavailable, `mp3player stop` will not work: {e}")
        safe_print(f"Warning: control socket unavailable ({e}); use Ctrl+C to stop", style="yellow")
        return None
    return server


def run_play(
    request: PlayRequest,
    config: Config,
    backend: Optional[AudioBackend] = None,
    stop_event: Optional[threading.Event] = None,
) -> int:
    """
    Play a request to completion.

    Args:
        request: Inputs collected from the command line
        config: Loaded configuration
        backend: Audio backend (defaults to mpv)
        stop_event: External cancellation; created if not given

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    if request.volume is None and not request.playlist_file:
        request.volume = config.player.default_volume

    try:
        playlist = resolve_playlist(request)
    except PlayerError as e:
        logger.error(f"Failed to resolve playlist: {e}")
        print_error(f"Error: {e}")
        return 1

    logger.info(
        f"Playlist: tracks -> {len(playlist.tracks)}, base_path -> {playlist.base_path!r}, "
        f"repeat -> {playlist.repeat}, volume -> {playlist.volume}"
    )

    try:
        backend = backend or MpvBackend(config.player)
    except PlayerError as e:
        logger.error(f"Audio backend unavailable: {e}")
        print_error(f"Error: {e}")
        return 1

    stop_event = stop_event or threading.Event()
    session = start_session(playlist, backend)

    for failure in session.failures:
        log(f"Skipping track {failure.index + 1} ({failure.path}): {failure.error}", "warning", style="yellow")

    if session.playable == 0:
        print_error("Error: none of the tracks could be played")
        return 1

    primary = session.primary_command
    log(
        f"Playing {session.playable} of {len(playlist.tracks)} tracks "
        f"(waiting on track {primary.index + 1}, {format_time(primary.take)})"
    )
    if session.never_completes:
        log("Repeat is on: playback continues until `mp3player stop` or Ctrl+C", style="cyan")

    server = None
    try:
        if config.ipc.enabled:
            server = start_control_server(session, stop_event)
        with stop_on_signals(stop_event):
            completed = session.wait(stop_event, config.player.poll_interval)
    finally:
        session.stop(config.player.stop_grace_seconds)
        if server is not None:
            server.stop()

    logger.info(f"Session ended: completed -> {completed}")
    return 0


def run_stop() -> int:
    """
    Ask the running session to stop.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    success, message = send_command("stop")
    if success:
        log(message)
        return 0
    logger.warning(f"Stop failed: {message}")
    print_error(message)
    return 1
