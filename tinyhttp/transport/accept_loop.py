"""Main connection acceptance loop."""

import logging
import socket
import threading

from tinyhttp.bootstrap.config import ServerConfig
from tinyhttp.bootstrap.socket_factory import create_server_socket
from tinyhttp.domain.connection_id import get_logger
from tinyhttp.lifecycle.state import ServerLifecycle
from tinyhttp.pipeline.router import Router
from tinyhttp.transport.context import WorkerContext
from tinyhttp.transport.worker import handle_client

ACCEPT_LOGGER = get_logger("transport.accept")


def _spawn_worker(
    client_socket: socket.socket,
    client_address: tuple[str, int],
    context: WorkerContext,
) -> threading.Thread:
    """Start a dedicated thread for one accepted connection."""
    if ACCEPT_LOGGER.logger.isEnabledFor(logging.DEBUG):
        ACCEPT_LOGGER.debug(
            "Client connection accepted",
            extra={
                "event": "client_accepted",
                "client": f"{client_address[0]}:{client_address[1]}",
            },
        )
    thread = threading.Thread(
        target=handle_client,
        args=(client_socket, client_address, context),
        daemon=False,
    )
    thread.start()
    return thread


def run_server(
    config: ServerConfig, router: Router, lifecycle: ServerLifecycle
) -> None:
    """Accept connections one at a time until a stop is requested.

    Each connection is handed to its own thread; there is no limit on how
    many run at once. A failing ``accept`` is escalated to the caller.
    """
    server_socket = create_server_socket(config)

    ACCEPT_LOGGER.info(
        "Server listening for connections",
        extra={"event": "server_listening", "host": config.host, "port": config.port},
    )

    context = WorkerContext(router=router, lifecycle=lifecycle)

    try:
        while not lifecycle.should_stop():
            try:
                client_socket, client_address = server_socket.accept()
            except socket.timeout:
                continue
            except OSError as error:
                if lifecycle.should_stop():
                    break
                ACCEPT_LOGGER.error(
                    "Socket accept failed",
                    extra={"event": "accept_error", "error_type": type(error).__name__},
                )
                raise

            _spawn_worker(client_socket, client_address, context)
    finally:
        server_socket.close()
        ACCEPT_LOGGER.info(
            "Waiting for active connections to complete",
            extra={
                "event": "shutdown_waiting",
                "grace_seconds": config.shutdown_grace_seconds,
            },
        )
        lifecycle.wait_for_workers(config.shutdown_grace_seconds)
        ACCEPT_LOGGER.info(
            "Server shutdown complete", extra={"event": "server_stopped"}
        )
