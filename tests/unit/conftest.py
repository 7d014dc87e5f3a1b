"""Shared fixtures for unit tests."""

import logging
from pathlib import Path

import pytest

from tinyhttp.domain.file_store import FileStore
from tinyhttp.pipeline.router import Router


@pytest.fixture(autouse=True)
def enable_log_propagation():
    """Ensure logs propagate to root so caplog can catch them."""
    logger = logging.getLogger("tinyhttp")
    old_propagate = logger.propagate
    old_level = logger.level
    old_handlers = list(logger.handlers)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
    yield
    for handler in logger.handlers:
        if handler not in old_handlers:
            handler.close()
    logger.handlers[:] = old_handlers
    logger.setLevel(old_level)
    logger.propagate = old_propagate


@pytest.fixture()
def store(tmp_path: Path) -> FileStore:
    """Provide a file store rooted in a temporary directory."""
    return FileStore(str(tmp_path))


@pytest.fixture()
def router(store: FileStore) -> Router:
    return Router(store)
