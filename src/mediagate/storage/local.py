# SPDX-License-Identifier: MIT
"""Local filesystem storage backend.

Artifacts live under ``<DEFAULT_OUTPUT_PATH>/{images,audio,video,temp}``.
Nothing here deletes generated artifacts; only temp copies of input files are
removed by the tools that created them.
"""

from __future__ import annotations

import logging
import pathlib
from collections.abc import AsyncIterator

import aiofiles
import aiofiles.os

from ..config import PathType, Settings, get_path
from .protocol import StoredFile

logger = logging.getLogger("mediagate")


class LocalStorageBackend:
    """Local-disk storage rooted at the configured output directory.

    Args:
        settings: Process settings (provides the output root)
        path_overrides: Optional mapping of path_type -> Path used in tests to
            redirect I/O into ``tmp_path`` fixtures.
    """

    def __init__(self, settings: Settings | None = None, path_overrides: dict[str, pathlib.Path] | None = None) -> None:
        self._settings = settings
        self._overrides = path_overrides or {}

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _base(self, path_type: PathType) -> pathlib.Path:
        if path_type in self._overrides:
            return self._overrides[path_type]
        if self._settings is None:
            raise RuntimeError(f"No directory configured for {path_type!r}")
        return get_path(self._settings, path_type)

    def _safe(self, path_type: PathType, filename: str) -> pathlib.Path:
        base = self._base(path_type).resolve()
        if not filename or filename in (".", ".."):
            raise ValueError(f"Invalid filename: {filename!r}")
        file_path = (base / filename).resolve()
        try:
            file_path.relative_to(base)
        except ValueError as e:
            raise ValueError(f"Path traversal detected: {filename}") from e
        return file_path

    # ------------------------------------------------------------------
    # Byte-level I/O
    # ------------------------------------------------------------------

    async def read(self, path_type: PathType, filename: str) -> bytes:
        file_path = self._safe(path_type, filename)
        async with aiofiles.open(file_path, "rb") as f:
            return await f.read()

    async def write(self, path_type: PathType, filename: str, data: bytes) -> StoredFile:
        file_path = self._safe(path_type, filename)
        async with aiofiles.open(file_path, "wb") as f:
            await f.write(data)
        logger.info("Saved %s (%d bytes)", file_path, len(data))
        return StoredFile(name=file_path.name, path=file_path, size_bytes=len(data))

    async def write_stream(self, path_type: PathType, filename: str, chunks: AsyncIterator[bytes]) -> StoredFile:
        file_path = self._safe(path_type, filename)
        size = 0
        async with aiofiles.open(file_path, "wb") as f:
            async for chunk in chunks:
                size += len(chunk)
                await f.write(chunk)
        logger.info("Saved %s (%d bytes)", file_path, size)
        return StoredFile(name=file_path.name, path=file_path, size_bytes=size)

    async def delete(self, path_type: PathType, filename: str) -> None:
        file_path = self._safe(path_type, filename)
        try:
            await aiofiles.os.remove(file_path)
        except FileNotFoundError:
            return
        logger.debug("Removed %s", file_path)
