"""Network utilities for server management."""

import socket


def is_port_available(host: str, port: int) -> bool:
    """Check if a port is available for binding.

    Args:
        host: The host address to check.
        port: The port number to check. Port 0 always counts as available.

    Returns:
        True if the port is available, False otherwise.
    """
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
            sock.bind((host, port))
        return True
    except OSError:
        return False
