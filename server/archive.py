"""Streams zip archives of shared files without buffering them whole."""

import os
import zipfile
from datetime import date
from pathlib import Path
from typing import Iterator, List, Optional

from common.constants import ARCHIVE_NAME_PREFIX, STREAM_PIECE_SIZE_BYTES
from common.logging_config import get_logger

logger = get_logger(__name__)


class _PieceBuffer:
    """Write-only sink that hands written bytes back to the generator."""

    def __init__(self):
        self._pieces: List[bytes] = []

    def write(self, data) -> int:
        self._pieces.append(bytes(data))
        return len(data)

    def flush(self) -> None:
        pass

    def drain(self) -> bytes:
        data = b"".join(self._pieces)
        self._pieces.clear()
        return data


def archive_filename(day: Optional[date] = None) -> str:
    """
    Build the download name for an archive, e.g. "PyShare-2024-01-31.zip".
    """
    day = day or date.today()
    return f"{ARCHIVE_NAME_PREFIX}-{day.isoformat()}.zip"


def stream_archive(paths: List[Path], piece_size: int = STREAM_PIECE_SIZE_BYTES) -> Iterator[bytes]:
    """
    Stream a deflated zip of the given files.

    Each file is stored under its base name. Files removed before their
    turn are skipped. The zip is written in streaming mode, so entries
    carry data descriptors instead of back-patched headers.

    Args:
        paths: Files to include
        piece_size: Size of each read from disk

    Yields:
        Zip archive bytes
    """
    buffer = _PieceBuffer()
    with zipfile.ZipFile(buffer, mode="w", compression=zipfile.ZIP_DEFLATED, compresslevel=9) as archive:
        for path in paths:
            try:
                source = open(path, "rb")
            except FileNotFoundError:
                logger.warning(f"Skipping {path.name}: removed before it could be archived")
                continue
            force_zip64 = os.fstat(source.fileno()).st_size > zipfile.ZIP64_LIMIT
            with source, archive.open(path.name, mode="w", force_zip64=force_zip64) as entry:
                while True:
                    piece = source.read(piece_size)
                    if not piece:
                        break
                    entry.write(piece)
                    data = buffer.drain()
                    if data:
                        yield data
            data = buffer.drain()
            if data:
                yield data
    data = buffer.drain()
    if data:
        yield data
