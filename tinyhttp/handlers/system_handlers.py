"""Handlers for the index, echo and user-agent endpoints."""

import logging

from tinyhttp.domain.connection_id import get_logger
from tinyhttp.domain.http_types import HttpRequest, HttpResponse
from tinyhttp.domain.response_builders import (
    empty_response,
    not_found_response,
    text_response,
)

SYSTEM_LOGGER = get_logger("handlers.system")

ECHO_PREFIX = "/echo/"


def handle_index(_request: HttpRequest) -> HttpResponse:
    """Handle ``/`` with an empty 200 response."""
    return empty_response()


def handle_echo(request: HttpRequest) -> HttpResponse:
    """Handle /echo/ requests by returning the path suffix."""
    if not request.path.startswith(ECHO_PREFIX):
        SYSTEM_LOGGER.warning(
            "Echo path without prefix",
            extra={"event": "route_invalid", "route": request.path},
        )
        return not_found_response()
    content = request.path[len(ECHO_PREFIX) :]
    if SYSTEM_LOGGER.logger.isEnabledFor(logging.DEBUG):
        SYSTEM_LOGGER.debug(
            "Echo request processed",
            extra={"event": "echo_request", "content_length": len(content)},
        )
    return text_response(content)


def handle_user_agent(request: HttpRequest) -> HttpResponse:
    """Handle /user-agent requests by returning the User-Agent header."""
    agent = request.get_header("User-Agent")
    if SYSTEM_LOGGER.logger.isEnabledFor(logging.DEBUG):
        SYSTEM_LOGGER.debug(
            "User-agent request processed", extra={"event": "user_agent_request"}
        )
    return text_response(agent)
