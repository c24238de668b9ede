"""Manages the shared folder on disk: list, store, delete and archive files."""

import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, List
from urllib.parse import quote

from common.exceptions import (
    EmptyManifestError,
    InvalidFileNameError,
    NotFoundError,
    StorageIOError,
)
from common.logging_config import get_logger
from common.types import FileRecord
from server.archive import stream_archive

logger = get_logger(__name__)


class FileManifestStore:
    """
    Wraps the shared-storage root as a collection of named files.

    Records are never cached: every listing is derived from the current
    directory contents and their stat metadata.
    """

    def __init__(self, root: Path):
        """
        Initialize the store, creating the root directory if needed.

        Args:
            root: Directory holding the shared files
        """
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)

    def _record_for(self, path: Path) -> FileRecord:
        stats = path.stat()
        return FileRecord(
            name=path.name,
            size=stats.st_size,
            modified_at=datetime.fromtimestamp(stats.st_mtime, tz=timezone.utc),
            url=f"/files/{quote(path.name)}",
        )

    def _entries(self) -> List[Path]:
        try:
            return list(self.root.iterdir())
        except OSError as e:
            raise StorageIOError(f"Unable to read files: {e}") from e

    def _entry_path(self, name: str) -> Path:
        # Names are single components of the root; links are not followed here.
        path = self.root / name
        if name in ("", ".", "..") or path.name != name or path.parent != self.root:
            raise NotFoundError(f"File not found: {name}")
        return path

    def _is_shared(self, path: Path) -> bool:
        """
        True for regular files, and for links to regular files inside the root.
        """
        if path.is_symlink():
            try:
                target = path.resolve()
            except (OSError, RuntimeError):
                # Link loop.
                return False
            return target.parent == self.root.resolve() and target.is_file()
        return path.is_file()

    def list(self) -> List[FileRecord]:
        """
        List every shared file under the root.

        Links pointing outside the root are never listed.

        Returns:
            FileRecord per file, in directory enumeration order

        Raises:
            StorageIOError: If the root cannot be read
        """
        records = []
        for path in self._entries():
            try:
                if self._is_shared(path):
                    records.append(self._record_for(path))
            except FileNotFoundError:
                # Deleted between enumeration and stat.
                continue
        return records

    def path_for(self, name: str) -> Path:
        """
        Resolve a file name to its path inside the root.

        Args:
            name: Name of a shared file

        Returns:
            Path to the existing file

        Raises:
            NotFoundError: If the name escapes the root or no such file is shared
        """
        path = self._entry_path(name)
        if not self._is_shared(path):
            raise NotFoundError(f"File not found: {name}")
        return path


    def _taken(self, name: str) -> bool:
        path = self.root / name
        return path.exists() or path.is_symlink()

    def _available_name(self, name: str) -> str:
        if not self._taken(name):
            return name
        stamp = int(time.time() * 1000)
        while self._taken(f"{stamp}-{name}"):
            stamp += 1
        return f"{stamp}-{name}"

    def put(self, name: str, data: bytes) -> FileRecord:
        """
        Store a new file, never overwriting an existing one.

        Args:
            name: Original file name (directory components are dropped)
            data: File contents

        Returns:
            FileRecord of the stored file, whose name may carry a timestamp prefix

        Raises:
            InvalidFileNameError: If no usable name remains
            StorageIOError: If the write fails
        """
        base_name = Path(name.replace("\\", "/")).name if name else ""
        if base_name in ("", ".", ".."):
            raise InvalidFileNameError(f"Invalid file name: {name!r}")

        stored_name = self._available_name(base_name)
        path = self.root / stored_name
        try:
            path.write_bytes(data)
        except OSError as e:
            raise StorageIOError(f"Unable to store {stored_name}: {e}") from e

        if stored_name != base_name:
            logger.info(f"Stored {base_name} as {stored_name} to avoid overwriting")
        return self._record_for(path)

    def delete(self, name: str) -> None:
        """
        Delete one file from the root.

        A link is removed itself, never its target.

        Raises:
            NotFoundError: If the file does not exist
            StorageIOError: If the file cannot be removed
        """
        path = self._entry_path(name)
        if not (path.is_symlink() or path.is_file()):
            raise NotFoundError(f"File not found: {name}")
        try:
            path.unlink()
        except FileNotFoundError as e:
            raise NotFoundError(f"File not found: {name}") from e
        except OSError as e:
            raise StorageIOError(f"Unable to delete {name}: {e}") from e

    def purge(self) -> List[str]:
        """
        Delete every file and link in the root, continuing past individual failures.

        Returns:
            Names of the files actually deleted
        """
        deleted = []
        for path in self._entries():
            if not (path.is_symlink() or path.is_file()):
                continue
            try:
                self.delete(path.name)
                deleted.append(path.name)
            except (NotFoundError, StorageIOError) as e:
                logger.error(f"Error deleting file {path.name}: {e}")
        return deleted

    def export_archive(self) -> Iterator[bytes]:
        """
        Stream a zip archive of every shared file.

        Raises:
            EmptyManifestError: If there are no files to archive
        """
        records = self.list()
        if not records:
            raise EmptyManifestError("No files to download")
        return stream_archive([self.root / record.name for record in records])
