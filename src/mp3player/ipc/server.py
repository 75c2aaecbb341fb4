"""Control socket for a running playback session.

Requests and responses are single lines of JSON:
    -> {"command": "stop", "args": []}
    <- {"success": true, "message": "Stopping playback"}
"""

import json
import os
import socket
import threading
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from loguru import logger

CommandHandler = Callable[[str, List[str]], Tuple[bool, str]]

ACCEPT_TIMEOUT = 0.5  # Seconds; bounds how long stop() waits for the accept loop
MAX_REQUEST_BYTES = 64 * 1024


def get_socket_path(create: bool = True) -> Path:
    """
    Locate the control socket.

    Args:
        create: Ensure the socket directory exists

    Returns:
        ``$XDG_RUNTIME_DIR/mp3player/control.sock``, or the same name under
        ``~/.local/share/mp3player`` without a runtime dir
    """
    runtime_dir = os.environ.get('XDG_RUNTIME_DIR')
    base = Path(runtime_dir) if runtime_dir else Path.home() / '.local' / 'share'
    socket_dir = base / 'mp3player'

    if create:
        socket_dir.mkdir(parents=True, exist_ok=True)
    return socket_dir / 'control.sock'


def _session_listening(socket_path: Path) -> bool:
    """True if another process accepts connections on ``socket_path``."""
    if not socket_path.exists():
        return False
    with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as sock:
        sock.settimeout(1.0)
        try:
            sock.connect(str(socket_path))
        except OSError:
            return False
    return True


def _read_request(conn: socket.socket) -> bytes:
    """Read up to the first newline (or EOF)."""
    data = b''
    while b'\n' not in data and len(data) < MAX_REQUEST_BYTES:
        chunk = conn.recv(4096)
        if not chunk:
            break
        data += chunk
    return data


class IPCServer:
    """Serves control commands for one playback session on a daemon thread.

    The handler runs on the server thread and gets ``(command, args)``; it
    must only touch thread-safe state such as a ``threading.Event``.
    """

    def __init__(self, handler: CommandHandler, socket_path: Optional[Path] = None):
        self.handler = handler
        self.socket_path = socket_path or get_socket_path()
        self.server_socket: Optional[socket.socket] = None
        self.running = False
        self.thread: Optional[threading.Thread] = None
        self._ready = threading.Event()

    def start(self) -> None:
        """Bind the socket and serve in the background; returns once listening.

        Raises:
            FileExistsError: If another session is serving on the same socket
        """
        if self.running:
            return

        if _session_listening(self.socket_path):
            raise FileExistsError(f"Another playback session owns the control socket: {self.socket_path}")

        # Left behind by a session that died without cleaning up
        self._remove_socket_file()

        self.running = True
        self.thread = threading.Thread(target=self._serve, daemon=True, name="mp3player-ipc")
        self.thread.start()
        self._ready.wait(timeout=2.0)

    def stop(self) -> None:
        """Stop serving and remove the socket file."""
        self.running = False

        if self.server_socket is not None:
            try:
                self.server_socket.close()
            except OSError as e:
                logger.debug(f"Closing control socket failed: {e}")

        if self.thread is None:
            # Never started; the socket file belongs to someone else
            return
        if self.thread.is_alive():
            self.thread.join(timeout=ACCEPT_TIMEOUT * 4)

        self._remove_socket_file()

    def _remove_socket_file(self) -> None:
        try:
            self.socket_path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Could not remove control socket: path -> {self.socket_path}, e -> {e}")

    def _serve(self) -> None:
        try:
            self.server_socket = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
            self.server_socket.bind(str(self.socket_path))
            self.server_socket.listen(5)
            self.server_socket.settimeout(ACCEPT_TIMEOUT)
            logger.debug(f"Control socket listening: path -> {self.socket_path}")
        except OSError:
            logger.exception("Control socket failed to start")
            self.running = False
            return
        finally:
            self._ready.set()

        with self.server_socket:
            while self.running:
                try:
                    conn, _ = self.server_socket.accept()
                except socket.timeout:
                    continue
                except OSError as e:
                    # Closed by stop()
                    if self.running:
                        logger.error(f"Control socket accept failed: {e}")
                    continue
                # One request at a time
                with conn:
                    self._respond(conn)

    def _respond(self, conn: socket.socket) -> None:
        try:
            data = _read_request(conn)
            if not data:
                return

            payload = json.loads(data.decode('utf-8').strip())
            command = payload.get('command', '')
            args = payload.get('args', [])
            logger.info(f"Control command: command -> {command}, args -> {args}")

            success, message = self.handler(command, args)
            response = {'success': success, 'message': message}
        except json.JSONDecodeError as e:
            response = {'success': False, 'message': f'Invalid JSON: {e}'}
        except (AttributeError, TypeError, ValueError) as e:
            response = {'success': False, 'message': f'Bad request: {e}'}
        except OSError as e:
            logger.warning(f"Control request read failed: {e}")
            return

        try:
            conn.sendall((json.dumps(response) + '\n').encode('utf-8'))
        except OSError as e:
            logger.warning(f"Control response send failed: {e}")
