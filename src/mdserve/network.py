"""
Port binding with fallback, and the threaded WSGI server built on it.
"""

import errno
import logging
import os
import socket
from typing import Tuple

from werkzeug.serving import BaseWSGIServer, WSGIRequestHandler, make_server

from .config import REQUEST_TIMEOUT
from .errors import BindError

logger = logging.getLogger(__name__)

ADDRESS_IN_USE_ERRORS = {errno.EADDRINUSE}
if hasattr(errno, 'WSAEADDRINUSE'):
    ADDRESS_IN_USE_ERRORS.add(errno.WSAEADDRINUSE)


def _listen(host: str, port: int) -> socket.socket:
    family = socket.AF_INET6 if ':' in host else socket.AF_INET
    sock = socket.socket(family, socket.SOCK_STREAM)
    try:
        # on Windows SO_REUSEADDR lets a second listener steal the port
        if os.name != 'nt':
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((host, port))
        sock.listen(socket.SOMAXCONN)
    except BaseException:
        sock.close()
        raise
    return sock


def bind_listener(host: str, port: int) -> Tuple[socket.socket, int]:
    """
    Bind a listening TCP socket, preferring the requested port.

    If the port is already in use, an OS-assigned port is used instead.

    Returns:
        Tuple of (listening socket, actual port)

    Raises:
        BindError: If binding fails for any reason other than the port
            being in use, or the fallback bind fails too.
    """
    try:
        listener = _listen(host, port)
        return listener, listener.getsockname()[1]
    except OSError as e:
        if e.errno not in ADDRESS_IN_USE_ERRORS:
            raise BindError(f"Could not bind {host}:{port}: {e}") from e

    print(f"⚠️  Port {port} is already in use, finding an available port...")
    try:
        listener = _listen(host, 0)
    except OSError as e:
        raise BindError(f"Could not bind any port on {host}: {e}") from e

    return listener, listener.getsockname()[1]


class TimeoutRequestHandler(WSGIRequestHandler):
    """Request handler that gives up on clients stalled for too long."""

    timeout = REQUEST_TIMEOUT


def create_server(app, listener: socket.socket) -> BaseWSGIServer:
    """
    Build a threaded WSGI server that accepts on an already bound socket.

    The server works on a duplicate of the descriptor; the caller may close
    `listener` once this returns.
    """
    host, port = listener.getsockname()[:2]
    return make_server(
        host,
        port,
        app,
        threaded=True,
        request_handler=TimeoutRequestHandler,
        fd=listener.fileno(),
    )
