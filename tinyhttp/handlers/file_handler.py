"""File read and write handlers."""

import logging

from tinyhttp.domain.connection_id import get_logger
from tinyhttp.domain.file_store import BlobNotFound, FileStore, StoreError
from tinyhttp.domain.http_types import HttpRequest, HttpResponse
from tinyhttp.domain.response_builders import (
    created_response,
    file_content_response,
    not_found_response,
)

FILE_LOGGER = get_logger("handlers.file")

FILES_PREFIX = "/files/"


def _filename(request: HttpRequest) -> str | None:
    if not request.path.startswith(FILES_PREFIX):
        return None
    return request.path[len(FILES_PREFIX) :]


def handle_file_get(request: HttpRequest, store: FileStore) -> HttpResponse:
    """Serve the stored blob, or 404 when it cannot be read."""
    filename = _filename(request)
    if filename is None:
        return not_found_response()

    try:
        data = store.read(filename)
    except BlobNotFound:
        FILE_LOGGER.info(
            "File not found",
            extra={"event": "file_not_found", "path": filename},
        )
        return not_found_response()
    except StoreError as error:
        FILE_LOGGER.warning(
            "File read failed",
            extra={
                "event": "file_read_failed",
                "path": filename,
                "error_type": type(error).__name__,
            },
        )
        return not_found_response()

    FILE_LOGGER.info(
        "File read operation complete",
        extra={"event": "file_read_complete", "path": filename, "bytes_out": len(data)},
    )
    return file_content_response(data)


def handle_file_post(request: HttpRequest, store: FileStore) -> HttpResponse:
    """Store the request body and answer 201.

    A failed write is logged but still answered with 201 Created; clients
    are not told about storage failures.
    """
    filename = _filename(request)
    if filename is None:
        return not_found_response()

    if FILE_LOGGER.logger.isEnabledFor(logging.DEBUG):
        FILE_LOGGER.debug(
            "File write started",
            extra={
                "event": "file_write_started",
                "path": filename,
                "bytes_in": len(request.body),
            },
        )
    try:
        store.write(filename, request.body)
    except StoreError as error:
        FILE_LOGGER.warning(
            "File write failed, reporting success",
            extra={
                "event": "file_write_failed",
                "path": filename,
                "error_type": type(error).__name__,
            },
        )
    else:
        FILE_LOGGER.info(
            "File write complete",
            extra={
                "event": "file_write_complete",
                "path": filename,
                "bytes_in": len(request.body),
            },
        )
    return created_response()
