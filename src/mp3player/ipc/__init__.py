"""IPC (Inter-Process Communication) for mp3player.

Lets ``mp3player stop`` reach a running playback session.
"""

from .client import send_command
from .server import IPCServer, get_socket_path

__all__ = ['send_command', 'IPCServer', 'get_socket_path']
