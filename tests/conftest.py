"""Shared fixtures: an in-memory audio backend so tests never touch a sound device."""

import threading
from typing import Dict, List, Optional

import pytest
from loguru import logger

from mp3player.domain.exceptions import BackendError, DecodeError, PlaylistIOError, SeekError


class FakeDecoder:
    def __init__(self, path: str, duration: Optional[float]):
        self.path = path
        self.duration = duration
        self.position = 0.0

    def seek(self, seconds: float) -> None:
        if self.duration is not None and seconds > self.duration:
            raise SeekError(f"beyond end: {seconds}")
        self.position = seconds

    def total_duration(self) -> Optional[float]:
        return self.duration


class FakeSink:
    """Sink that finishes only when ``finish()`` is called (never, if looping)."""

    def __init__(self, broken_paths: frozenset = frozenset()):
        self.broken_paths = broken_paths
        self.volume = None
        self.command = None
        self.stopped = False
        self._done = threading.Event()

    def set_volume(self, volume: float) -> None:
        self.volume = volume

    def enqueue(self, command) -> None:
        if command.path in self.broken_paths:
            raise BackendError(f"cannot start {command.path}")
        self.command = command

    def finish(self) -> None:
        self._done.set()

    def await_completion(self, timeout: Optional[float] = None) -> bool:
        return self._done.wait(timeout)

    def is_finished(self) -> bool:
        return self._done.is_set()

    def stop(self, grace: float = 2.0) -> None:
        self.stopped = True
        self._done.set()


class FakeBackend:
    """Backend whose files are a {path: duration} map.

    Paths missing from the map raise PlaylistIOError; paths listed in
    ``undecodable`` raise DecodeError; paths in ``broken_sinks`` fail to start.
    """

    def __init__(
        self,
        durations: Dict[str, Optional[float]],
        undecodable: tuple = (),
        broken_sinks: tuple = (),
    ):
        self.durations = durations
        self.undecodable = set(undecodable)
        self.broken_sinks = set(broken_sinks)
        self.sinks: List[FakeSink] = []
        self.opened: List[str] = []

    def open(self, path: str) -> FakeDecoder:
        self.opened.append(path)
        if path not in self.durations:
            raise PlaylistIOError(path, FileNotFoundError("no such file"))
        if path in self.undecodable:
            raise DecodeError(f"cannot decode {path}")
        return FakeDecoder(path, self.durations[path])

    def create_sink(self) -> FakeSink:
        sink = FakeSink(frozenset(self.broken_sinks))
        self.sinks.append(sink)
        return sink

    def started_sinks(self) -> List[FakeSink]:
        """Sinks that accepted a command."""
        return [s for s in self.sinks if s.command is not None]


@pytest.fixture
def fake_backend_factory():
    """Build FakeBackend instances."""
    return FakeBackend


@pytest.fixture
def log_messages():
    """Capture loguru output for assertions."""
    messages: List[str] = []
    handler_id = logger.add(lambda m: messages.append(m.record["message"]), level="DEBUG")
    yield messages
    logger.remove(handler_id)
