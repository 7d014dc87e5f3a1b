"""HTTP/1.1 request parsing."""

import logging
import re

from tinyhttp.domain.connection_id import get_logger
from tinyhttp.domain.http_types import HTTP_VERSION, Header, HttpRequest

PARSER_LOGGER = get_logger("pipeline.parser")

CRLF = b"\r\n"
# Methods may be "/"-joined alpha segments, e.g. "VENDOR/PURGE".
METHOD_PATTERN = re.compile(rb"[A-Za-z]+(?:/[A-Za-z]+)*")
PATH_PATTERN = re.compile(rb"[^ \t\n]+")
HEADER_LINE_PATTERN = re.compile(rb"([A-Za-z0-9_-]+): ([^\r\n]*)\r\n")


class ParseError(ValueError):
    """Raised when raw bytes do not form a valid request."""


def _decode(segment: bytes, what: str) -> str:
    try:
        return segment.decode()
    except UnicodeDecodeError as exc:
        raise ParseError(f"{what} is not valid UTF-8") from exc


def parse_request_line(line: bytes) -> tuple[str, str, str]:
    """Split a request line (without its CRLF) into method, path and version."""
    parts = line.split(b" ")
    if len(parts) != 3:
        raise ParseError("Invalid request line")
    method, path, version = parts

    if not METHOD_PATTERN.fullmatch(method):
        raise ParseError("Invalid method")
    if not PATH_PATTERN.fullmatch(path) or not path.startswith(b"/"):
        raise ParseError("Invalid path")
    if version != HTTP_VERSION.encode():
        raise ParseError("Unsupported HTTP version")

    return _decode(method, "method"), _decode(path, "path"), HTTP_VERSION


def parse_headers(raw: bytes, position: int) -> tuple[tuple[Header, ...], int]:
    """Parse consecutive header lines starting at ``position``.

    Returns the headers in wire order and the offset just past the last
    header line.
    """
    headers = []
    while True:
        match = HEADER_LINE_PATTERN.match(raw, position)
        if match is None:
            break
        name, value = match.groups()
        headers.append(Header(_decode(name, "header name"), _decode(value, "header")))
        position = match.end()
    return tuple(headers), position


def _skip_blank_lines(raw: bytes, position: int) -> int:
    """Consume up to two blank lines terminating the header section."""
    for _ in range(2):
        if not raw.startswith(CRLF, position):
            break
        position += len(CRLF)
    return position


def parse_request(raw: bytes) -> HttpRequest:
    """Parse a complete request from ``raw``.

    Everything after the header section is taken as the body; it is not
    checked against ``Content-Length``.
    """
    line_end = raw.find(CRLF)
    if line_end < 0:
        raise ParseError("Request line is not terminated")
    method, path, version = parse_request_line(raw[:line_end])

    headers, position = parse_headers(raw, line_end + len(CRLF))

    body_start = _skip_blank_lines(raw, position)
    if body_start == position and position < len(raw):
        raise ParseError("Malformed header line")

    request = HttpRequest(method, path, version, headers, raw[body_start:])
    if PARSER_LOGGER.logger.isEnabledFor(logging.DEBUG):
        PARSER_LOGGER.debug(
            "Request parsed",
            extra={
                "event": "request_parsed",
                "method": method,
                "route": path,
                "header_count": len(headers),
                "bytes_in": len(raw),
            },
        )
    return request
