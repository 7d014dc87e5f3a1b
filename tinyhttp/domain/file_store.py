"""Blob storage backed by a sandboxed directory."""

from pathlib import Path


class StoreError(Exception):
    """Raised when the store cannot complete a read or write."""


class BlobNotFound(StoreError):
    """Raised when no blob is stored under the requested name."""


class ForbiddenPath(StoreError):
    """Raised when a blob name escapes the configured root directory."""


class FileStore:
    """Stores opaque byte blobs as files under a single root directory.

    The root is fixed at construction and never changes, so one instance can
    be shared by every worker thread. No locking is done around individual
    files: a concurrent read and write of the same name may observe a
    partially written blob.
    """

    def __init__(self, root: str) -> None:
        self._root = Path(root).resolve()

    @property
    def root(self) -> Path:
        return self._root

    def resolve(self, name: str) -> Path:
        """Resolve a blob name to a path inside the root directory."""
        if not name or "\x00" in name:
            raise ForbiddenPath(name)

        relative_part = name.lstrip("/")
        if not relative_part or ".." in Path(relative_part).parts:
            raise ForbiddenPath(name)

        target = (self._root / relative_part).resolve()
        if self._root not in target.parents:
            raise ForbiddenPath(name)
        return target

    def read(self, name: str) -> bytes:
        target = self.resolve(name)
        try:
            return target.read_bytes()
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError) as exc:
            raise BlobNotFound(name) from exc
        except OSError as exc:
            raise StoreError(name) from exc

    def write(self, name: str, data: bytes) -> None:
        target = self.resolve(name)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with open(target, "wb") as file_handle:
                file_handle.write(data)
        except OSError as exc:
            raise StoreError(name) from exc
