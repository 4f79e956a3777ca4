import os
import re
import threading
import time
from abc import ABC, abstractmethod
from typing import Dict

from ..utils.errors import DocumentNotFoundError, StorageError

HANDLE_PATTERN = re.compile(r"^[A-Za-z0-9_-][A-Za-z0-9_.-]*$")


class DocumentStore(ABC):
    """Timestamp-addressed storage for rendered documents."""

    def __init__(self, prefix: str = "optimized", suffix: str = ".pdf", clock=time.time):
        self.prefix = prefix
        self.suffix = suffix
        self.clock = clock
        self._lock = threading.Lock()
        self._last_stamp = 0

    def new_handle(self) -> str:
        """Return a fresh handle derived from the current time in milliseconds."""
        with self._lock:
            stamp = int(self.clock() * 1000)
            if stamp <= self._last_stamp:
                stamp = self._last_stamp + 1
            while self._contains(self._format(stamp)):
                stamp += 1
            self._last_stamp = stamp
        return self._format(stamp)

    def _format(self, stamp: int) -> str:
        return f"{self.prefix}_{stamp}{self.suffix}"

    @staticmethod
    def is_valid_handle(handle: str) -> bool:
        return (
            bool(handle)
            and HANDLE_PATTERN.match(handle) is not None
            and not handle.endswith(".part")
        )

    def exists(self, handle: str) -> bool:
        return self.is_valid_handle(handle) and self._contains(handle)

    @abstractmethod
    def save(self, handle: str, data: bytes) -> None:
        ...

    @abstractmethod
    def load(self, handle: str) -> bytes:
        ...

    @abstractmethod
    def _contains(self, handle: str) -> bool:
        ...


class LocalDocumentStore(DocumentStore):
    """Stores documents as flat files in a single output directory."""

    def __init__(self, output_dir: os.PathLike, **kwargs):
        super().__init__(**kwargs)
        self.output_dir = os.fspath(output_dir)
        os.makedirs(self.output_dir, exist_ok=True)

    def path_for(self, handle: str) -> str:
        if not self.is_valid_handle(handle):
            raise DocumentNotFoundError(handle)
        return os.path.join(self.output_dir, handle)

    def _contains(self, handle: str) -> bool:
        return os.path.isfile(os.path.join(self.output_dir, handle))

    def save(self, handle: str, data: bytes) -> None:
        """Write to a temporary file and rename it, so a handle is never half-written."""
        if not self.is_valid_handle(handle):
            raise StorageError(f"Invalid document handle: {handle!r}")

        filepath = os.path.join(self.output_dir, handle)
        partial = filepath + ".part"
        try:
            with open(partial, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(partial, filepath)
        except OSError as e:
            if os.path.exists(partial):
                os.remove(partial)
            raise StorageError(f"Failed to write {filepath}: {e}") from e

    def load(self, handle: str) -> bytes:
        filepath = self.path_for(handle)
        try:
            with open(filepath, "rb") as f:
                return f.read()
        except FileNotFoundError as e:
            raise DocumentNotFoundError(handle) from e
        except OSError as e:
            raise StorageError(f"Failed to read {filepath}: {e}") from e


class InMemoryDocumentStore(DocumentStore):
    """Dict-backed store for tests and one-off runs."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.documents: Dict[str, bytes] = {}

    def _contains(self, handle: str) -> bool:
        return handle in self.documents

    def save(self, handle: str, data: bytes) -> None:
        if not self.is_valid_handle(handle):
            raise StorageError(f"Invalid document handle: {handle!r}")
        self.documents[handle] = bytes(data)

    def load(self, handle: str) -> bytes:
        if not self.exists(handle):
            raise DocumentNotFoundError(handle)
        return self.documents[handle]
