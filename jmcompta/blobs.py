"""
jmcompta.blobs
==============

Storage for the binary content of uploaded documents.

Documents only carry an opaque *handle*; the bytes live in a blob store
exposing ``store(bytes) -> handle`` and ``fetch(handle) -> bytes``.  Both
stores shipped here are content-addressed: the handle is the SHA-256 hex
digest of the content, so storing the same file twice is a no-op.
"""

from __future__ import annotations

import hashlib
import logging
from pathlib import Path
from typing import Dict, Protocol, Union

from .errors import PersistenceError

logger = logging.getLogger(__name__)


def content_handle(content: bytes) -> str:
    """SHA-256 hex digest used as the handle of *content*."""
    return hashlib.sha256(content).hexdigest()


class BlobStore(Protocol):
    """Interface expected by :class:`jmcompta.service.DossierService`."""

    def store(self, content: bytes) -> str: ...

    def fetch(self, handle: str) -> bytes: ...


class MemoryBlobStore:
    """Dictionary-backed blob store, handy for tests and throw-away sessions."""

    def __init__(self) -> None:
        self._blobs: Dict[str, bytes] = {}

    def store(self, content: bytes) -> str:
        handle = content_handle(content)
        self._blobs[handle] = bytes(content)
        return handle

    def fetch(self, handle: str) -> bytes:
        """Return the bytes for *handle* (raise KeyError if unknown)."""
        return self._blobs[handle]

    def __len__(self) -> int:
        return len(self._blobs)


class FileBlobStore:
    """
    Blob store on the local filesystem.

    Layout::

        <root>/<first two hex chars>/<full sha256 hex>
    """

    def __init__(self, root: Union[str, Path]) -> None:
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)

    def _path(self, handle: str) -> Path:
        if len(handle) != 64 or any(c not in "0123456789abcdef" for c in handle):
            raise KeyError(handle)
        return self.root / handle[:2] / handle

    def store(self, content: bytes) -> str:
        handle = content_handle(content)
        path = self._path(handle)
        if path.exists():
            return handle
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp = path.with_suffix(".tmp")
            tmp.write_bytes(content)
            tmp.replace(path)
        except OSError as e:
            raise PersistenceError(f"could not store blob {handle}: {e}") from e
        logger.debug("Stored blob %s (%d bytes)", handle, len(content))
        return handle

    def fetch(self, handle: str) -> bytes:
        """Return the bytes for *handle* (raise KeyError if unknown)."""
        path = self._path(handle)
        if not path.exists():
            raise KeyError(handle)
        try:
            return path.read_bytes()
        except OSError as e:
            raise PersistenceError(f"could not read blob {handle}: {e}") from e
