"""
MPV audio backend for mp3player.

Files are probed with mutagen; each sink is its own mpv process started with
the track's start position, take window, loop mode and volume. All sinks
share the backend's mpv executable, audio device and extra options.
"""

import os
import shutil
import subprocess
from typing import List, Optional

from loguru import logger
from mutagen import File as MutagenFile
from mutagen import MutagenError

from mp3player.core.config import PlayerConfig
from mp3player.domain.exceptions import BackendError, DecodeError, PlaylistIOError, SeekError

from .scheduler import PlaybackCommand


def check_mpv_available(mpv_path: str = "mpv") -> bool:
    """Check if MPV is available on the system."""
    if shutil.which(mpv_path) is None:
        return False
    try:
        result = subprocess.run(
            [mpv_path, "--version"], capture_output=True, text=True, timeout=5
        )
        return result.returncode == 0
    except (subprocess.SubprocessError, FileNotFoundError, OSError):
        return False


def _format_seconds(seconds: float) -> str:
    return f"{seconds:.3f}"


def build_mpv_command(
    command: PlaybackCommand,
    volume: float,
    mpv_path: str = "mpv",
    audio_device: Optional[str] = None,
    extra_args: Optional[List[str]] = None,
) -> List[str]:
    """
    Build the mpv argument list for one sink.

    Window handling:
    - no loop: ``--start`` + ``--length``
    - loop with a known window: A-B loop between start and start + take
    - loop with an unknown window: loop the file from the start position

    Args:
        command: What the sink must play
        volume: Linear gain (1.0 = 100%)
        mpv_path: mpv executable
        audio_device: Optional mpv audio device name
        extra_args: Extra options appended before the file path

    Returns:
        Argument list for subprocess
    """
    mpv_volume = volume * 100
    cmd = [
        mpv_path,
        "--no-video",
        "--no-terminal",
        "--load-scripts=no",
        "--idle=no",
        f"--volume={mpv_volume:g}",
    ]
    if mpv_volume > 100:
        cmd.append(f"--volume-max={mpv_volume:g}")
    if audio_device:
        cmd.append(f"--audio-device={audio_device}")

    start = command.start
    cmd.append(f"--start={_format_seconds(start)}")

    if command.loop:
        if command.take:
            cmd.append(f"--ab-loop-a={_format_seconds(start)}")
            cmd.append(f"--ab-loop-b={_format_seconds(start + command.take)}")
        else:
            cmd.append("--loop-file=inf")
    elif command.take:
        cmd.append(f"--length={_format_seconds(command.take)}")

    if extra_args:
        cmd.extend(extra_args)

    # End of options, so paths starting with '-' are not read as flags
    cmd.extend(["--", command.path])
    return cmd


class MutagenDecoder:
    """Audio stream probed with mutagen; tracks the requested seek position."""

    def __init__(self, path: str):
        self.path = path
        self.position = 0.0

        if not os.path.isfile(path):
            raise PlaylistIOError(path, FileNotFoundError("no such file"))

        try:
            audio_file = MutagenFile(path)
        except MutagenError as e:
            # mutagen wraps IO errors in MutagenError
            if isinstance(e.__cause__ or e.__context__, OSError):
                raise PlaylistIOError(path, e) from e
            raise DecodeError(f"Failed to decode audio file: path -> {path!r}, e -> {e}") from e
        except OSError as e:
            raise PlaylistIOError(path, e) from e

        if audio_file is None:
            raise DecodeError(f"Unsupported or unrecognised audio file: path -> {path!r}")

        self._duration: Optional[float] = None
        info = getattr(audio_file, "info", None)
        length = getattr(info, "length", None)
        if length:
            self._duration = float(length)

    def seek(self, seconds: float) -> None:
        if seconds < 0:
            raise SeekError(f"Negative seek target: path -> {self.path!r}, target -> {seconds}")
        if self._duration is not None and seconds > self._duration:
            raise SeekError(
                f"Seek target beyond end of stream: path -> {self.path!r}, "
                f"target -> {seconds}, duration -> {self._duration}"
            )
        self.position = seconds

    def total_duration(self) -> Optional[float]:
        return self._duration


class MpvSink:
    """One mpv process playing a single track window."""

    def __init__(self, backend: "MpvBackend"):
        self._backend = backend
        self.volume = 1.0
        self.process: Optional[subprocess.Popen] = None

    def set_volume(self, volume: float) -> None:
        if self.process is not None:
            logger.warning("Volume is fixed once a sink has started; ignoring change")
            return
        self.volume = volume

    def enqueue(self, command: PlaybackCommand) -> None:
        if self.process is not None:
            raise BackendError("Sink already playing")

        cmd = build_mpv_command(
            command,
            self.volume,
            mpv_path=self._backend.config.mpv_path,
            audio_device=self._backend.config.audio_device,
            extra_args=self._backend.config.extra_args,
        )
        logger.debug(f"Starting mpv: {cmd}")

        try:
            self.process = subprocess.Popen(
                cmd,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                stdin=subprocess.DEVNULL,
            )
        except (subprocess.SubprocessError, OSError) as e:
            raise BackendError(f"Failed to start mpv: path -> {command.path!r}, e -> {e}") from e

    def await_completion(self, timeout: Optional[float] = None) -> bool:
        if self.process is None:
            return True
        try:
            returncode = self.process.wait(timeout=timeout)
        except subprocess.TimeoutExpired:
            return False
        if returncode != 0:
            logger.warning(f"mpv exited with code {returncode}")
        return True

    def is_finished(self) -> bool:
        return self.process is None or self.process.poll() is not None

    def stop(self, grace: float = 2.0) -> None:
        """Terminate mpv, escalating to kill after the grace period."""
        if self.is_finished():
            return
        try:
            self.process.terminate()
            self.process.wait(timeout=grace)
        except subprocess.TimeoutExpired:
            logger.debug("mpv did not exit after terminate, killing")
            self.process.kill()
            try:
                self.process.wait(timeout=grace)
            except subprocess.TimeoutExpired:
                logger.warning(f"mpv process {self.process.pid} did not exit after kill")
        except OSError:
            pass  # Process already terminated


class MpvBackend:
    """Shared output configuration; hands out mutagen decoders and mpv sinks."""

    def __init__(self, config: PlayerConfig, check_available: bool = True):
        self.config = config
        if check_available and not check_mpv_available(config.mpv_path):
            raise BackendError(f"mpv not found or not runnable: mpv_path -> {config.mpv_path!r}")

    def open(self, path: str) -> MutagenDecoder:
        return MutagenDecoder(path)

    def create_sink(self) -> MpvSink:
        return MpvSink(self)
