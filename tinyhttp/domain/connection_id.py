"""Per-connection identifier management using contextvars."""

import contextvars
import logging
import uuid
from typing import Any, MutableMapping, Optional

ROOT_LOGGER_NAME = "tinyhttp"

_connection_id_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "connection_id", default=None
)


def generate_connection_id() -> str:
    """Generate a new connection ID using UUID4."""
    return str(uuid.uuid4())


def get_connection_id() -> Optional[str]:
    """Retrieve the connection ID bound to the current worker."""
    return _connection_id_var.get()


def set_connection_id(connection_id: str) -> None:
    """Bind a connection ID to the current worker."""
    _connection_id_var.set(connection_id)


def clear_connection_id() -> None:
    _connection_id_var.set(None)


class ConnectionLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that injects the connection ID and component into records."""

    def process(
        self, msg: str, kwargs: MutableMapping[str, Any]
    ) -> tuple[str, MutableMapping[str, Any]]:
        if "extra" not in kwargs:
            kwargs["extra"] = {}
        else:
            kwargs["extra"] = dict(kwargs["extra"])

        connection_id = get_connection_id()
        kwargs["extra"]["connection_id"] = (
            connection_id if connection_id is not None else "-"
        )

        prefix = f"{ROOT_LOGGER_NAME}."
        logger_name = self.logger.name
        if logger_name.startswith(prefix):
            component = logger_name[len(prefix) :]
        else:
            component = logger_name
        kwargs["extra"]["component"] = component

        return msg, kwargs


def get_logger(component: str) -> ConnectionLoggerAdapter:
    """Return an adapter for ``tinyhttp.<component>``."""
    return ConnectionLoggerAdapter(
        logging.getLogger(f"{ROOT_LOGGER_NAME}.{component}"), {}
    )
