"""Tests for the control socket server and client."""

import tempfile
from pathlib import Path

import pytest

from mp3player.ipc import IPCServer, get_socket_path, send_command


@pytest.fixture
def runtime_dir(monkeypatch):
    # Unix socket paths are length-limited, so avoid pytest's deep tmp_path
    with tempfile.TemporaryDirectory(prefix="mp3p") as directory:
        monkeypatch.setenv("XDG_RUNTIME_DIR", directory)
        yield Path(directory)


class TestSocketPath:
    def test_uses_runtime_dir(self, runtime_dir):
        assert get_socket_path() == runtime_dir / "mp3player" / "control.sock"
        assert (runtime_dir / "mp3player").is_dir()

    def test_no_create(self, runtime_dir):
        get_socket_path(create=False)
        assert not (runtime_dir / "mp3player").exists()


class TestRoundTrip:
    """Client and server talking over a real socket."""

    @pytest.fixture
    def server(self, runtime_dir):
        calls = []

        def handler(command, args):
            calls.append((command, args))
            if command == "stop":
                return True, "Stopping playback"
            return False, f"Unknown command: {command}"

        server = IPCServer(handler)
        server.start()
        server.calls = calls
        yield server
        server.stop()

    def test_command_reaches_handler(self, server):
        success, message = send_command("stop")

        assert success is True
        assert message == "Stopping playback"
        assert server.calls == [("stop", [])]

    def test_handler_failure_is_returned(self, server):
        success, message = send_command("dance", ["fast"])

        assert success is False
        assert "dance" in message
        assert server.calls == [("dance", ["fast"])]

    def test_stop_removes_socket(self, server):
        assert server.socket_path.exists()
        server.stop()
        assert not server.socket_path.exists()


class TestSocketOwnership:
    def test_second_session_does_not_take_over(self, runtime_dir):
        first = IPCServer(lambda command, args: (True, "first"))
        first.start()
        try:
            second = IPCServer(lambda command, args: (True, "second"))
            with pytest.raises(FileExistsError):
                second.start()
            second.stop()

            assert send_command("status") == (True, "first")
        finally:
            first.stop()

    def test_stale_socket_file_is_replaced(self, runtime_dir):
        socket_path = get_socket_path()
        socket_path.write_text("", encoding="utf-8")

        server = IPCServer(lambda command, args: (True, "fresh"))
        server.start()
        try:
            assert send_command("status") == (True, "fresh")
        finally:
            server.stop()


class TestClientWithoutServer:
    def test_no_session_running(self, runtime_dir):
        success, message = send_command("stop")
        assert success is False
        assert "No playback session" in message
