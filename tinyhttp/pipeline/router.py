"""Request routing logic."""

import logging

from tinyhttp.domain.connection_id import get_logger
from tinyhttp.domain.file_store import FileStore
from tinyhttp.domain.http_types import HttpRequest, HttpResponse
from tinyhttp.domain.response_builders import not_found_response
from tinyhttp.handlers.file_handler import handle_file_get, handle_file_post
from tinyhttp.handlers.system_handlers import (
    handle_echo,
    handle_index,
    handle_user_agent,
)

ROUTER_LOGGER = get_logger("pipeline.router")


class Router:
    """Maps requests to handlers in a fixed priority order.

    The store is set once at construction and only read afterwards, so a
    single router is shared by every worker thread without locking.
    """

    def __init__(self, store: FileStore) -> None:
        self._store = store

    @property
    def store(self) -> FileStore:
        return self._store

    def route(self, request: HttpRequest) -> HttpResponse:
        """Route the request to the appropriate handler and return a response.

        Never raises: anything that goes wrong becomes a 404.
        """
        try:
            return self._dispatch(request)
        except Exception as error:  # pylint: disable=broad-except
            ROUTER_LOGGER.error(
                "Handler failed",
                extra={
                    "event": "handler_error",
                    "route": request.path,
                    "method": request.method,
                    "error_type": type(error).__name__,
                },
                exc_info=True,
            )
            return not_found_response()

    def _dispatch(self, request: HttpRequest) -> HttpResponse:
        path = request.path

        if path == "/":
            _log_match("/")
            return handle_index(request)

        if path.startswith("/echo"):
            _log_match("/echo/*")
            return handle_echo(request)

        if path == "/user-agent":
            _log_match("/user-agent")
            return handle_user_agent(request)

        if path.startswith("/files"):
            _log_match("/files/*")
            if request.method == "GET":
                return handle_file_get(request, self._store)
            if request.method == "POST":
                return handle_file_post(request, self._store)
            ROUTER_LOGGER.info(
                "Unsupported method for files route",
                extra={
                    "event": "route_not_found",
                    "route": path,
                    "method": request.method,
                },
            )
            return not_found_response()

        ROUTER_LOGGER.info(
            "No matching route found",
            extra={"event": "route_not_found", "route": path, "method": request.method},
        )
        return not_found_response()


def _log_match(route: str) -> None:
    if ROUTER_LOGGER.logger.isEnabledFor(logging.DEBUG):
        ROUTER_LOGGER.debug(
            "Route matched", extra={"event": "route_matched", "route": route}
        )
