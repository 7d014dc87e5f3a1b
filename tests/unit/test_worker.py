"""Unit tests for the per-connection worker."""

import logging
import socket
import threading
from pathlib import Path

import pytest

from tinyhttp.domain.connection_id import get_connection_id
from tinyhttp.lifecycle.state import ServerLifecycle
from tinyhttp.pipeline.router import Router
from tinyhttp.transport.context import WorkerContext
from tinyhttp.transport.worker import handle_client, read_request

CLIENT = ("127.0.0.1", 50000)


class FakeSocket:
    """Socket stub holding pending bytes that supports MSG_PEEK reads."""

    def __init__(
        self, data: bytes = b"", fail_on_send: bool = False, silent: bool = False
    ):
        self.pending = data
        self.sent = b""
        self.closed = False
        self.shut_down = None
        self.recv_calls: list[tuple[int, int]] = []
        self._fail_on_send = fail_on_send
        self._silent = silent

    def setblocking(self, _flag):
        """Accept blocking-mode changes without effect."""

    def settimeout(self, _value):
        """Accept timeout changes without effect."""

    def shutdown(self, how):
        self.shut_down = how

    def recv(self, size, flags=0):
        """Return up to ``size`` pending bytes, consuming them unless peeking.

        A silent peer with nothing pending times out instead of closing.
        """

        self.recv_calls.append((size, flags))
        if self._silent and not self.pending:
            raise socket.timeout("timed out")
        chunk = self.pending[:size]
        if not flags & socket.MSG_PEEK:
            self.pending = self.pending[size:]
        return chunk

    def sendall(self, data):
        """Record outgoing bytes or fail like a reset connection."""

        if self._fail_on_send:
            raise ConnectionResetError("peer reset")
        self.sent += data

    def close(self):
        self.closed = True


@pytest.fixture(name="context")
def fixture_context(router: Router) -> WorkerContext:
    return WorkerContext(router=router, lifecycle=ServerLifecycle())


def test_echo_request_is_answered_and_closed(context: WorkerContext) -> None:
    """A valid request gets exactly one serialized response."""

    client = FakeSocket(b"GET /echo/hello HTTP/1.1\r\nHost: x\r\n\r\n")
    handle_client(client, CLIENT, context)
    assert client.sent == (
        b"HTTP/1.1 200 OK\r\n"
        b"Content-Type: text/plain\r\n"
        b"Content-Length: 5\r\n"
        b"\r\n"
        b"hello"
    )
    assert client.closed


def test_peeked_chunk_is_consumed_after_parsing(context: WorkerContext) -> None:
    """The worker peeks first and then reads the same number of bytes."""

    raw = b"GET / HTTP/1.1\r\n\r\n"
    client = FakeSocket(raw)
    handle_client(client, CLIENT, context)
    assert client.recv_calls[0][1] == socket.MSG_PEEK
    assert client.recv_calls[1] == (len(raw), 0)
    assert client.pending == b""


def test_post_body_is_stored(context: WorkerContext, tmp_path: Path) -> None:
    """A POST in one chunk is written through the router's store."""

    client = FakeSocket(
        b"POST /files/up.txt HTTP/1.1\r\nContent-Length: 4\r\n\r\ndata"
    )
    handle_client(client, CLIENT, context)
    assert client.sent == b"HTTP/1.1 201 Created\r\n\r\n"
    assert (tmp_path / "up.txt").read_bytes() == b"data"


def test_only_first_chunk_is_read(context: WorkerContext, tmp_path: Path) -> None:
    """Bytes beyond the first chunk are discarded, never parsed or stored."""

    head = b"POST /files/big HTTP/1.1\r\n\r\n"
    client = FakeSocket(head + b"x" * 5000 + b"tail")
    handle_client(client, CLIENT, context)
    assert client.sent == b"HTTP/1.1 201 Created\r\n\r\n"
    assert (tmp_path / "big").read_bytes() == b"x" * (4096 - len(head))
    assert client.pending == b""


def test_connection_is_half_closed_before_close(context: WorkerContext) -> None:
    """The write side is shut down once the response is out."""

    client = FakeSocket(b"GET / HTTP/1.1\r\n\r\n")
    handle_client(client, CLIENT, context)
    assert client.shut_down == socket.SHUT_WR
    assert client.closed


def test_quiet_peer_does_not_hold_the_worker(context: WorkerContext) -> None:
    """Discarding leftovers stops when the peer neither sends nor closes."""

    client = FakeSocket(b"GET /echo/hi HTTP/1.1\r\n\r\n", silent=True)
    handle_client(client, CLIENT, context)
    assert client.sent.endswith(b"hi")
    assert client.closed


def test_discarded_bytes_are_logged(context: WorkerContext, caplog) -> None:
    caplog.set_level(logging.DEBUG)
    head = b"POST /files/logged HTTP/1.1\r\n\r\n"
    handle_client(FakeSocket(head + b"y" * 5000), CLIENT, context)
    record = next(
        r for r in caplog.records if getattr(r, "event", None) == "socket_closed"
    )
    assert record.bytes_discarded == len(head) + 5000 - 4096


def test_peer_closing_early_gets_no_response(context: WorkerContext, caplog) -> None:
    """Zero bytes on the first read ends the connection silently."""

    caplog.set_level(logging.WARNING)
    client = FakeSocket(b"")
    handle_client(client, CLIENT, context)
    assert client.sent == b""
    assert client.closed
    assert not caplog.records


def test_malformed_request_is_dropped_without_response(
    context: WorkerContext, caplog
) -> None:
    """Parse failures close the connection and write nothing."""

    caplog.set_level(logging.WARNING)
    client = FakeSocket(b"GET / HTTP/1.0\r\n\r\n")
    handle_client(client, CLIENT, context)
    assert client.sent == b""
    assert client.closed
    assert client.pending == b""
    record = next(
        r for r in caplog.records if getattr(r, "event", None) == "parse_failed"
    )
    assert record.client == "127.0.0.1:50000"


def test_transport_error_is_contained(context: WorkerContext, caplog) -> None:
    """A failing write is logged and does not propagate."""

    caplog.set_level(logging.ERROR)
    client = FakeSocket(b"GET / HTTP/1.1\r\n\r\n", fail_on_send=True)
    handle_client(client, CLIENT, context)
    assert client.closed
    record = next(
        r for r in caplog.records if getattr(r, "event", None) == "connection_error"
    )
    assert record.error_type == "ConnectionResetError"


def test_worker_is_tracked_and_released(router: Router) -> None:
    """The lifecycle forgets the worker once the connection is closed."""

    lifecycle = ServerLifecycle()
    context = WorkerContext(router=router, lifecycle=lifecycle)
    thread = threading.Thread(
        target=handle_client,
        args=(FakeSocket(b"GET / HTTP/1.1\r\n\r\n"), CLIENT, context),
    )
    thread.start()
    thread.join(timeout=5)
    assert lifecycle.active_worker_count() == 0


def test_connection_id_is_cleared_afterwards(context: WorkerContext) -> None:
    """No connection id leaks past the worker."""

    handle_client(FakeSocket(b"GET / HTTP/1.1\r\n\r\n"), CLIENT, context)
    assert get_connection_id() is None


def test_log_records_carry_connection_id(context: WorkerContext, caplog) -> None:
    """Records emitted while serving share one connection id."""

    caplog.set_level(logging.INFO)
    handle_client(FakeSocket(b"GET /echo/x HTTP/1.1\r\n\r\n"), CLIENT, context)
    record = next(
        r for r in caplog.records if getattr(r, "event", None) == "request_complete"
    )
    assert record.connection_id != "-"
    assert record.status_code == 200
    assert record.component == "transport.worker"


def test_read_request_returns_none_for_empty_peek() -> None:
    assert read_request(FakeSocket(b""), "client") is None
