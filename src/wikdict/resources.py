"""Locate the dictionary store, materialising it from a packaged archive."""

from __future__ import annotations

import logging
import lzma
import os
import tempfile
from collections.abc import Iterable
from pathlib import Path

from wikdict.exceptions import (
    DecompressFailedError,
    ResourceNotFoundError,
    WriteFailedError,
)

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_NAME = "dictionary.db"
DEFAULT_ARCHIVE_NAME = "dictionary.db.xz"
DEFAULT_BUFFER_MULTIPLIER = 10


def decompress_bounded(data: bytes, multiplier: int = DEFAULT_BUFFER_MULTIPLIER) -> bytes:
    """Decompress an xz payload into a buffer of ``multiplier * len(data)`` bytes.

    The buffer never grows. A payload that does not fit is an error, not a
    truncated success.

    Raises:
        DecompressFailedError: if the archive is corrupt, truncated, or
            larger than the buffer once decompressed.
    """
    limit = max(len(data) * multiplier, 1)
    decompressor = lzma.LZMADecompressor()
    try:
        out = decompressor.decompress(data, max_length=limit)
    except lzma.LZMAError as e:
        raise DecompressFailedError(f"Corrupt archive: {e}") from e
    if decompressor.eof:
        return out
    if not decompressor.needs_input:
        raise DecompressFailedError(
            f"Decompressed size exceeds the {limit}-byte buffer "
            f"({multiplier}x the {len(data)}-byte archive)"
        )
    raise DecompressFailedError("Archive is truncated")


def compress(data: bytes) -> bytes:
    """Compress a store payload into the packaged archive format."""
    return lzma.compress(data, format=lzma.FORMAT_XZ)


class ResourceResolver:
    """Find the writable store, or create it from the packaged archive."""

    def __init__(
        self,
        data_dir: str | Path,
        resource_dirs: Iterable[str | Path] = (),
        *,
        database_name: str = DEFAULT_DATABASE_NAME,
        archive_name: str = DEFAULT_ARCHIVE_NAME,
        buffer_multiplier: int = DEFAULT_BUFFER_MULTIPLIER,
    ) -> None:
        self.data_dir = Path(data_dir)
        self.resource_dirs = [Path(d) for d in resource_dirs]
        self.database_name = database_name
        self.archive_name = archive_name
        self.buffer_multiplier = buffer_multiplier

    @property
    def database_path(self) -> Path:
        return self.data_dir / self.database_name

    def resolve(self) -> Path:
        """Return the path of a usable store.

        An existing writable copy wins unconditionally; it is not compared
        against the packaged archive.

        Raises:
            ResourceNotFoundError: if there is no store and no archive.
            DecompressFailedError: if the archive cannot be decompressed.
            WriteFailedError: if the store cannot be written.
        """
        target = self.database_path
        if target.is_file():
            return target

        archive = self.find_archive()
        if archive is None:
            searched = ", ".join(str(d) for d in self.resource_dirs) or "(none)"
            raise ResourceNotFoundError(
                f"No store at {target} and no {self.archive_name} in {searched}"
            )

        try:
            compressed = archive.read_bytes()
        except OSError as e:
            raise DecompressFailedError(f"Cannot read archive {archive}: {e}") from e
        payload = decompress_bounded(compressed, self.buffer_multiplier)
        self._write(target, payload)
        logger.info(
            f"Materialised {target} ({len(payload)} bytes) from {archive}"
        )
        return target

    def find_archive(self) -> Path | None:
        """First archive found in the resource dirs or their asset-pack subdirs."""
        for directory in self.resource_dirs:
            try:
                found = self._search_dir(directory)
            except OSError as e:
                logger.warning(f"Skipping unreadable resource dir {directory}: {e}")
                continue
            if found is not None:
                return found
        return None

    def _search_dir(self, directory: Path) -> Path | None:
        candidate = directory / self.archive_name
        if candidate.is_file():
            return candidate
        if not directory.is_dir():
            return None
        for pack in sorted(p for p in directory.iterdir() if p.is_dir()):
            candidate = pack / self.archive_name
            if candidate.is_file():
                return candidate
        return None

    def _write(self, target: Path, payload: bytes) -> None:
        tmp_name = None
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{target.name}.", dir=target.parent,
            )
            with os.fdopen(fd, "wb") as f:
                f.write(payload)
            os.replace(tmp_name, target)
        except OSError as e:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise WriteFailedError(f"Cannot write {target}: {e}") from e


def pack(database: str | Path, archive: str | Path) -> int:
    """Compress ``database`` into ``archive``; returns the archive size."""
    payload = compress(Path(database).read_bytes())
    archive = Path(archive)
    archive.parent.mkdir(parents=True, exist_ok=True)
    archive.write_bytes(payload)
    logger.info(f"Packed {database} into {archive} ({len(payload)} bytes)")
    return len(payload)
