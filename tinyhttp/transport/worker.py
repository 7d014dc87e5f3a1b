"""Worker thread logic for handling individual client connections."""

import logging
import socket
import threading
import time
from typing import Optional

from tinyhttp.bootstrap.config import READ_CHUNK_SIZE
from tinyhttp.domain.connection_id import (
    clear_connection_id,
    generate_connection_id,
    get_logger,
    set_connection_id,
)
from tinyhttp.domain.http_types import HttpRequest, HttpResponse
from tinyhttp.pipeline.parser import ParseError, parse_request
from tinyhttp.transport.context import WorkerContext

WORKER_LOGGER = get_logger("transport.worker")

DISCARD_POLL_SECONDS = 0.2
DISCARD_DEADLINE_SECONDS = 1.0


def _format_client(client_address: tuple[str, int]) -> str:
    return f"{client_address[0]}:{client_address[1]}"


def read_request(
    client_socket: socket.socket, client_addr_str: str
) -> Optional[HttpRequest]:
    """Peek the first chunk, parse it, then consume exactly those bytes.

    Returns ``None`` when the peer closed before sending anything or when the
    chunk is not a valid request. A rejected chunk is left for
    ``close_connection`` to discard.
    """
    chunk = client_socket.recv(READ_CHUNK_SIZE, socket.MSG_PEEK)
    if not chunk:
        if WORKER_LOGGER.logger.isEnabledFor(logging.DEBUG):
            WORKER_LOGGER.debug(
                "Client closed before sending data",
                extra={"event": "client_disconnected", "client": client_addr_str},
            )
        return None

    try:
        request = parse_request(chunk)
    except ParseError as error:
        WORKER_LOGGER.warning(
            "Malformed request received",
            extra={
                "event": "parse_failed",
                "client": client_addr_str,
                "reason": str(error),
                "bytes_in": len(chunk),
            },
        )
        return None

    client_socket.recv(len(chunk))
    return request


def send_response(client_socket: socket.socket, response: HttpResponse) -> None:
    """Serialize and send the HTTP response over the socket."""
    payload = response.to_bytes()
    client_socket.sendall(payload)
    if WORKER_LOGGER.logger.isEnabledFor(logging.DEBUG):
        WORKER_LOGGER.debug(
            "Response sent",
            extra={
                "event": "response_sent",
                "status_code": int(response.status),
                "bytes_out": len(payload),
            },
        )


def _discard_unread(client_socket: socket.socket) -> int:
    """Drop bytes the peer is still sending until it closes or goes quiet."""
    discarded = 0
    deadline = time.monotonic() + DISCARD_DEADLINE_SECONDS
    client_socket.settimeout(DISCARD_POLL_SECONDS)
    while time.monotonic() < deadline:
        try:
            chunk = client_socket.recv(READ_CHUNK_SIZE)
        except OSError:
            break
        if not chunk:
            break
        discarded += len(chunk)
    return discarded


def close_connection(client_socket: socket.socket, client_addr_str: str) -> None:
    """Half-close, discard unread request bytes, then close the socket.

    Closing with unread data in the receive buffer makes the kernel reset the
    connection, which can destroy a response that is still in flight.
    """
    discarded = 0
    try:
        client_socket.shutdown(socket.SHUT_WR)
        discarded = _discard_unread(client_socket)
    except OSError:
        pass
    client_socket.close()

    if WORKER_LOGGER.logger.isEnabledFor(logging.DEBUG):
        WORKER_LOGGER.debug(
            "Socket closed",
            extra={
                "event": "socket_closed",
                "client": client_addr_str,
                "bytes_discarded": discarded,
            },
        )


def handle_client(
    client_socket: socket.socket,
    client_address: tuple[str, int],
    context: WorkerContext,
) -> None:
    """Serve exactly one request on the connection, then close it."""
    current_thread = threading.current_thread()
    lifecycle = context.lifecycle
    if lifecycle is not None:
        lifecycle.register_worker(current_thread)
    client_addr_str = _format_client(client_address)
    set_connection_id(generate_connection_id())

    try:
        client_socket.setblocking(True)
        request = read_request(client_socket, client_addr_str)
        if request is not None:
            response = context.router.route(request)
            send_response(client_socket, response)
            WORKER_LOGGER.info(
                "Request handled",
                extra={
                    "event": "request_complete",
                    "client": client_addr_str,
                    "method": request.method,
                    "route": request.path,
                    "status_code": int(response.status),
                },
            )
    except OSError as error:
        WORKER_LOGGER.error(
            "Error handling client connection",
            extra={
                "event": "connection_error",
                "client": client_addr_str,
                "error_type": type(error).__name__,
            },
        )
    except Exception as error:  # pylint: disable=broad-except
        WORKER_LOGGER.error(
            "Unexpected error in worker",
            extra={
                "event": "worker_error",
                "client": client_addr_str,
                "error_type": type(error).__name__,
            },
            exc_info=True,
        )
    finally:
        close_connection(client_socket, client_addr_str)
        if lifecycle is not None:
            lifecycle.cleanup_worker(current_thread)
        clear_connection_id()
