# SPDX-License-Identifier: MIT
"""Storage backend protocols and shared types.

Defines the interface for local artifact storage and for the optional remote
mirror that republishes artifacts under a public URL.
"""

from __future__ import annotations

import pathlib
from collections.abc import AsyncIterator
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from ..config import PathType


@dataclass(frozen=True)
class StoredFile:
    """A file written to the local output tree."""

    name: str
    path: pathlib.Path
    size_bytes: int


@runtime_checkable
class StorageBackend(Protocol):
    """Protocol for artifact file operations.

    All filenames are relative to the backend's directory for the given
    *path_type*. Implementations handle path-traversal prevention internally.
    """

    async def read(self, path_type: PathType, filename: str) -> bytes:
        """Read entire file contents.

        Raises:
            FileNotFoundError: If file does not exist.
            ValueError: If path traversal detected.
        """
        ...

    async def write(self, path_type: PathType, filename: str, data: bytes) -> StoredFile:
        """Write entire file contents."""
        ...

    async def write_stream(self, path_type: PathType, filename: str, chunks: AsyncIterator[bytes]) -> StoredFile:
        """Write file from an async byte-chunk stream (e.g. a media download)."""
        ...

    async def delete(self, path_type: PathType, filename: str) -> None:
        """Remove a file. Missing files are ignored."""
        ...


@runtime_checkable
class RemoteMirror(Protocol):
    """A remote store that republishes artifact bytes under a durable URL."""

    async def upload(self, data: bytes, filename: str) -> str | None:
        """Upload *data*; return the public URL, or ``None`` on any failure."""
        ...
