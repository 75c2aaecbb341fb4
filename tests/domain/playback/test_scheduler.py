"""Tests for playback session scheduling."""

import threading
import time

import pytest

from mp3player.domain.exceptions import DecodeError, PlaylistIOError, SeekError
from mp3player.domain.playback.scheduler import (
    PlaybackCommand,
    PlaybackSession,
    TrackFailure,
    build_commands,
    resolve_command,
    select_primary,
    start_session,
)
from mp3player.domain.playlists.models import Playlist, Track


def command(index: int, take, loop: bool = False) -> PlaybackCommand:
    return PlaybackCommand(
        index=index, path=f"{index}.mp3", seek=0.0, skip=0.0, take=take, loop=loop, volume=1.0
    )


def playlist_of(*tracks: Track, repeat: bool = False, volume: float = 1.0, base_path: str = "") -> Playlist:
    return Playlist(tracks=tuple(tracks), base_path=base_path, repeat=repeat, volume=volume)


class TestSelectPrimary:
    """Tests for the longest-window completion rule."""

    def test_longest_window_wins(self):
        commands = [command(0, 10.0), command(1, 30.0), command(2, 20.0)]
        assert select_primary(commands) == 1

    def test_tie_goes_to_earliest(self):
        commands = [command(0, 30.0), command(1, 10.0), command(2, 30.0)]
        assert select_primary(commands) == 0

    def test_all_equal_picks_first(self):
        commands = [command(0, 5.0), command(1, 5.0)]
        assert select_primary(commands) == 0

    def test_unknown_window_ranks_as_zero(self):
        commands = [command(0, None), command(1, 1.0)]
        assert select_primary(commands) == 1

    def test_empty(self):
        assert select_primary([]) is None


class TestResolveCommand:
    """Tests for per-track command derivation."""

    def test_seek_and_explicit_take(self, fake_backend_factory):
        backend = fake_backend_factory({"/m/a.mp3": 300.0})
        playlist = playlist_of(Track("a.mp3", start_position=140, take=60), base_path="/m", volume=0.1)

        cmd = resolve_command(0, playlist.tracks[0], playlist, backend)

        assert cmd.path == "/m/a.mp3"
        assert cmd.seek == 140
        assert cmd.take == 60
        assert cmd.volume == 0.1
        assert cmd.loop is False

    def test_missing_take_uses_remaining_duration(self, fake_backend_factory):
        backend = fake_backend_factory({"a.mp3": 300.0})
        playlist = playlist_of(Track("a.mp3", start_position=100, skip=20))

        cmd = resolve_command(0, playlist.tracks[0], playlist, backend)

        assert cmd.start == 120
        assert cmd.take == 180

    def test_unknown_duration_plays_to_end(self, fake_backend_factory):
        backend = fake_backend_factory({"a.mp3": None})
        playlist = playlist_of(Track("a.mp3"))

        cmd = resolve_command(0, playlist.tracks[0], playlist, backend)

        assert cmd.take is None
        assert cmd.window == 0.0

    def test_take_longer_than_stream_is_clamped(self, fake_backend_factory):
        backend = fake_backend_factory({"a.mp3": 10.0})
        playlist = playlist_of(Track("a.mp3", start_position=4, take=60))

        cmd = resolve_command(0, playlist.tracks[0], playlist, backend)

        assert cmd.take == 6

    def test_take_kept_when_length_unknown(self, fake_backend_factory):
        backend = fake_backend_factory({"a.mp3": None})
        playlist = playlist_of(Track("a.mp3", take=60))
        assert resolve_command(0, playlist.tracks[0], playlist, backend).take == 60

    def test_skip_landing_on_end_has_empty_window(self, fake_backend_factory):
        backend = fake_backend_factory({"a.mp3": 10.0})
        playlist = playlist_of(Track("a.mp3", start_position=4, skip=6))

        cmd = resolve_command(0, playlist.tracks[0], playlist, backend)

        assert cmd.start == 10
        assert cmd.take == 0
        assert cmd.window == 0.0

    def test_repeat_sets_loop(self, fake_backend_factory):
        backend = fake_backend_factory({"a.mp3": 10.0})
        playlist = playlist_of(Track("a.mp3"), repeat=True)
        assert resolve_command(0, playlist.tracks[0], playlist, backend).loop is True

    def test_seek_past_end(self, fake_backend_factory):
        backend = fake_backend_factory({"a.mp3": 10.0})
        playlist = playlist_of(Track("a.mp3", start_position=20))
        with pytest.raises(SeekError):
            resolve_command(0, playlist.tracks[0], playlist, backend)

    def test_skip_past_end(self, fake_backend_factory):
        backend = fake_backend_factory({"a.mp3": 10.0})
        playlist = playlist_of(Track("a.mp3", start_position=5, skip=10))
        with pytest.raises(SeekError):
            resolve_command(0, playlist.tracks[0], playlist, backend)


class TestBuildCommands:
    def test_failures_are_scoped_per_track(self, fake_backend_factory):
        backend = fake_backend_factory(
            {"a.mp3": 10.0, "c.mp3": 30.0, "d.mp3": 5.0}, undecodable=("d.mp3",)
        )
        playlist = playlist_of(Track("a.mp3"), Track("missing.mp3"), Track("c.mp3"), Track("d.mp3"))

        commands, failures = build_commands(playlist, backend)

        assert [c.index for c in commands] == [0, 2]
        assert [f.index for f in failures] == [1, 3]
        assert isinstance(failures[0].error, PlaylistIOError)
        assert isinstance(failures[1].error, DecodeError)
        # Every track was attempted, in order
        assert backend.opened == ["a.mp3", "missing.mp3", "c.mp3", "d.mp3"]


class TestStartSession:
    """Tests for sink creation and the completion wait."""

    def test_sinks_created_in_order_with_volume(self, fake_backend_factory):
        backend = fake_backend_factory({"a.mp3": 10.0, "b.mp3": 20.0})
        playlist = playlist_of(Track("a.mp3"), Track("b.mp3"), volume=0.5)

        session = start_session(playlist, backend)

        assert session.playable == 2
        assert [s.command.path for s in backend.sinks] == ["a.mp3", "b.mp3"]
        assert all(s.volume == 0.5 for s in backend.sinks)
        assert session.primary_command.index == 1

    def test_missing_track_among_three(self, fake_backend_factory):
        """Two playable tracks still get sinks; primary is chosen among them."""
        backend = fake_backend_factory({"a.mp3": 10.0, "c.mp3": 20.0})
        playlist = playlist_of(
            Track("a.mp3"), Track("missing.mp3", take=999), Track("c.mp3")
        )

        session = start_session(playlist, backend)

        assert session.playable == 2
        assert [f.index for f in session.failures] == [1]
        assert session.primary_command.index == 2

        backend.sinks[1].finish()
        assert session.wait(threading.Event(), poll_interval=0.01) is True

    def test_primary_ranks_by_playable_window(self, fake_backend_factory):
        """An oversized take on a short file does not outrank a longer track."""
        backend = fake_backend_factory({"a.mp3": 10.0, "b.mp3": 30.0})
        playlist = playlist_of(Track("a.mp3", take=60), Track("b.mp3"))

        session = start_session(playlist, backend)

        assert [c.take for c in session.commands] == [10.0, 30.0]
        assert session.primary_command.index == 1

    def test_empty_window_never_primary_over_playing_track(self, fake_backend_factory):
        backend = fake_backend_factory({"a.mp3": 10.0, "b.mp3": 5.0})
        playlist = playlist_of(Track("a.mp3", skip=10), Track("b.mp3"))

        session = start_session(playlist, backend)

        assert session.commands[0].window == 0.0
        assert session.primary_command.index == 1

    def test_sink_start_failure_recorded(self, fake_backend_factory):
        backend = fake_backend_factory({"a.mp3": 10.0, "b.mp3": 50.0}, broken_sinks=("b.mp3",))
        playlist = playlist_of(Track("a.mp3"), Track("b.mp3"))

        session = start_session(playlist, backend)

        assert session.playable == 1
        assert [f.index for f in session.failures] == [1]
        assert session.primary_command.index == 0

    def test_nothing_playable(self, fake_backend_factory):
        backend = fake_backend_factory({})
        session = start_session(playlist_of(Track("a.mp3")), backend)
        assert session.playable == 0
        assert session.primary is None
        assert session.wait(threading.Event()) is True

    def test_wait_ignores_non_primary_completion(self, fake_backend_factory):
        backend = fake_backend_factory({"a.mp3": 10.0, "b.mp3": 30.0})
        session = start_session(playlist_of(Track("a.mp3"), Track("b.mp3")), backend)
        stop_event = threading.Event()

        backend.sinks[0].finish()
        threading.Timer(0.1, backend.sinks[1].finish).start()

        assert session.wait(stop_event, poll_interval=0.01) is True
        assert backend.sinks[1].is_finished()

    def test_repeat_waits_until_stop(self, fake_backend_factory):
        backend = fake_backend_factory({"a.mp3": 10.0})
        session = start_session(playlist_of(Track("a.mp3"), repeat=True), backend)
        stop_event = threading.Event()

        assert session.never_completes
        threading.Timer(0.1, stop_event.set).start()

        started = time.monotonic()
        assert session.wait(stop_event, poll_interval=0.01) is False
        assert time.monotonic() - started < 2.0

    def test_stop_reaches_every_sink_once(self, fake_backend_factory):
        backend = fake_backend_factory({"a.mp3": 10.0, "b.mp3": 20.0})
        session = start_session(playlist_of(Track("a.mp3"), Track("b.mp3")), backend)

        session.stop()
        session.stop()

        assert all(s.stopped for s in backend.sinks)

    def test_status(self, fake_backend_factory):
        backend = fake_backend_factory({"a.mp3": 10.0, "b.mp3": 20.0})
        session = start_session(playlist_of(Track("a.mp3"), Track("x.mp3"), Track("b.mp3")), backend)
        backend.sinks[0].finish()

        assert session.status() == {"playable": 2, "failed": [1], "primary": 2, "finished": [0]}


class TestPlaybackSession:
    def test_wait_without_stop_event_blocks_on_primary(self, fake_backend_factory):
        backend = fake_backend_factory({"a.mp3": 10.0})
        session = start_session(playlist_of(Track("a.mp3")), backend)
        threading.Timer(0.05, backend.sinks[0].finish).start()
        assert session.wait() is True

    def test_failures_sorted_by_index(self):
        failures = [
            TrackFailure(3, "d", DecodeError("d")),
            TrackFailure(1, "b", DecodeError("b")),
        ]
        session = PlaybackSession([], [], failures)
        assert [f.index for f in session.failures] == [1, 3]
