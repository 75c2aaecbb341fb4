"""IPC client for sending commands to a running playback session."""

import json
import socket
from typing import List, Optional, Tuple

from .server import get_socket_path


def send_command(command: str, args: Optional[List[str]] = None) -> Tuple[bool, str]:
    """
    Send a command to the running playback session.

    Args:
        command: Command name (e.g., 'stop', 'status')
        args: Command arguments (optional)

    Returns:
        (success, message) tuple
            success: True if command executed successfully
            message: Response message or error description
    """
    socket_path = get_socket_path(create=False)

    if not socket_path.exists():
        return False, "No playback session is running"

    payload = {
        'command': command,
        'args': args or []
    }

    try:
        with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as sock:
            sock.settimeout(5.0)
            sock.connect(str(socket_path))

            message = json.dumps(payload) + '\n'
            sock.sendall(message.encode('utf-8'))

            response_data = b''
            while True:
                chunk = sock.recv(4096)
                if not chunk:
                    break
                response_data += chunk
                # Responses are newline-terminated JSON
                if b'\n' in response_data:
                    break

        if not response_data:
            return False, "No response from playback session"

        response = json.loads(response_data.decode('utf-8').strip())
        return response.get('success', False), response.get('message', 'No message')

    except socket.timeout:
        return False, "Playback session not responding (timeout)"
    except (ConnectionRefusedError, FileNotFoundError):
        return False, "No playback session is running"
    except json.JSONDecodeError as e:
        return False, f"Invalid response from playback session: {e}"
    except OSError as e:
        return False, f"Failed to send command: {e}"
