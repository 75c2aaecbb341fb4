"""Playback domain - scheduling tracks onto output sinks.

This domain handles:
- Per-track playback commands (seek, skip, take window, loop)
- Primary sink selection and the cancellable completion wait
- MPV integration, with files probed through mutagen
"""

# Backend contract
from .backend import AudioBackend, Decoder, Sink

# Scheduling
from .scheduler import (
    DEFAULT_POLL_INTERVAL,
    PlaybackCommand,
    PlaybackSession,
    TrackFailure,
    build_commands,
    resolve_command,
    select_primary,
    start_session,
)

# MPV backend
from .player import (
    MpvBackend,
    MpvSink,
    MutagenDecoder,
    build_mpv_command,
    check_mpv_available,
)

__all__ = [
    # Backend
    "AudioBackend",
    "Decoder",
    "Sink",
    # Scheduler
    "DEFAULT_POLL_INTERVAL",
    "PlaybackCommand",
    "PlaybackSession",
    "TrackFailure",
    "build_commands",
    "resolve_command",
    "select_primary",
    "start_session",
    # Player
    "MpvBackend",
    "MpvSink",
    "MutagenDecoder",
    "build_mpv_command",
    "check_mpv_available",
]
