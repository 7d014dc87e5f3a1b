"""Listening socket creation."""

import socket

from tinyhttp.bootstrap.config import ServerConfig
from tinyhttp.domain.connection_id import get_logger

SOCKET_LOGGER = get_logger("socket")

# Lets the accept loop notice a stop request; client sockets stay blocking.
ACCEPT_POLL_SECONDS = 0.5


def create_server_socket(config: ServerConfig) -> socket.socket:
    """Bind and listen on the configured address.

    A bind failure is logged and re-raised; the server cannot start without it.
    """
    try:
        server_socket = socket.create_server((config.host, config.port))
    except OSError as error:
        SOCKET_LOGGER.critical(
            "Failed to bind listening socket",
            extra={
                "event": "bind_failed",
                "host": config.host,
                "port": config.port,
                "error_type": type(error).__name__,
            },
        )
        raise
    server_socket.settimeout(ACCEPT_POLL_SECONDS)
    return server_socket
