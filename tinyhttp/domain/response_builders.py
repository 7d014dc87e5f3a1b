"""HTTP response builder and canned responses."""

from typing import Union

from tinyhttp.domain.http_types import HttpResponse, StatusCode

TEXT_CONTENT_TYPE = "text/plain"
FILE_CONTENT_TYPE = "application/octet-stream"


class ResponseBuilder:
    """Accumulates status, headers and body, then freezes them into a response.

    ``with_body`` appends its ``Content-Type`` and ``Content-Length`` headers on
    every call, so callers must set the body at most once.
    """

    def __init__(self) -> None:
        self._status = StatusCode.OK
        self._headers: list[str] = []
        self._body = b""

    def with_status(self, status: StatusCode) -> "ResponseBuilder":
        self._status = status
        return self

    def with_raw_header(self, line: str) -> "ResponseBuilder":
        """Append a pre-formatted ``Name: Value`` header line."""
        self._headers.append(line)
        return self

    def with_body(self, content: Union[str, bytes]) -> "ResponseBuilder":
        """Set a text/plain body and the matching length header."""
        payload = content.encode() if isinstance(content, str) else content
        return self._set_payload(payload, TEXT_CONTENT_TYPE)

    def with_file_content(self, data: bytes) -> "ResponseBuilder":
        """Set a raw file body served as application/octet-stream."""
        return self._set_payload(data, FILE_CONTENT_TYPE)

    def _set_payload(self, payload: bytes, content_type: str) -> "ResponseBuilder":
        self._body = payload
        self._headers.append(f"Content-Type: {content_type}")
        self._headers.append(f"Content-Length: {len(payload)}")
        return self

    def build(self) -> HttpResponse:
        return HttpResponse(self._status, tuple(self._headers), self._body)


def empty_response() -> HttpResponse:
    """Return a 200 OK response with no headers and no body."""
    return ResponseBuilder().build()


def text_response(message: str) -> HttpResponse:
    """Return a 200 OK text/plain response."""
    return ResponseBuilder().with_body(message).build()


def file_content_response(data: bytes) -> HttpResponse:
    """Return a 200 OK response carrying raw file bytes."""
    return ResponseBuilder().with_file_content(data).build()


def created_response() -> HttpResponse:
    return ResponseBuilder().with_status(StatusCode.CREATED).build()


def not_found_response() -> HttpResponse:
    return ResponseBuilder().with_status(StatusCode.NOT_FOUND).build()
