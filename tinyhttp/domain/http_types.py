"""Shared HTTP type definitions to avoid circular imports."""

from dataclasses import dataclass
from enum import IntEnum

HTTP_VERSION = "HTTP/1.1"
CRLF = "\r\n"


@dataclass(frozen=True)
class Header:
    """A single request header exactly as it appeared on the wire."""

    name: str
    value: str


@dataclass(frozen=True)
class HttpRequest:
    """Represents a parsed HTTP request."""

    method: str
    path: str
    version: str
    headers: tuple[Header, ...]
    body: bytes

    def get_header(self, name: str) -> str:
        """Return the value of the first header called ``name``, or ``""``.

        Header names are compared case-sensitively.
        """
        for header in self.headers:
            if header.name == name:
                return header.value
        return ""


class StatusCode(IntEnum):
    """The closed set of statuses this server can answer with."""

    OK = 200
    CREATED = 201
    NOT_FOUND = 404

    @property
    def status_text(self) -> str:
        return _STATUS_TEXT[self]


_STATUS_TEXT = {
    StatusCode.OK: "200 OK",
    StatusCode.CREATED: "201 Created",
    StatusCode.NOT_FOUND: "404 Not Found",
}


@dataclass(frozen=True)
class HttpResponse:
    """Represents an HTTP response to be sent to a client.

    ``headers`` holds pre-formatted ``Name: Value`` lines in the order they
    were added.
    """

    status: StatusCode
    headers: tuple[str, ...]
    body: bytes

    @property
    def status_line(self) -> str:
        return f"{HTTP_VERSION} {self.status.status_text}"

    def to_bytes(self) -> bytes:
        """Serialize the response into its exact wire form."""
        head = self.status_line + CRLF
        head += "".join(line + CRLF for line in self.headers)
        head += CRLF
        return head.encode() + self.body
