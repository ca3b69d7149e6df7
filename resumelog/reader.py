"""Resumable, bounded batch reads over newline-delimited files."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import BinaryIO, Dict, List, Optional, Union

from .codec import Codec, Record
from .config import DEFAULT_MAX_READ, DEFAULT_READ_LENGTH, ReadMode
from .offsets import FileId, OffsetStore

logger = logging.getLogger(__name__)


class RecordReader:
    """Read batches of records from a file, resuming at its stored offset.

    Every file touched gets one cached read handle, one cursor in the
    ``OffsetStore`` and, in length mode, one pending fragment holding the
    bytes of a record split by the read boundary. Handles stay open until
    :meth:`close` is called.
    """

    def __init__(
        self,
        codec: Codec,
        offsets: OffsetStore,
        max_read: int = DEFAULT_MAX_READ,
        read_length: int = DEFAULT_READ_LENGTH,
        base_path: Optional[Union[str, Path]] = None,
    ) -> None:
        self.codec = codec
        self.offsets = offsets
        self.max_read = max_read
        self.read_length = read_length
        self.base_path = Path(base_path) if base_path is not None else None
        self.delimiter = codec.delimiter.encode("utf-8")
        self._handles: Dict[str, BinaryIO] = {}
        self._pending: Dict[str, bytes] = {}

    def read(
        self,
        file_id: FileId,
        mode: Union[ReadMode, str] = ReadMode.BY_LINE,
        offset: Optional[int] = None,
    ) -> List[Record]:
        path = self._resolve(file_id)
        if path is None:
            logger.debug("No readable file at %s", file_id)
            return []

        key = str(path.resolve())
        handle = self._handle(key, path)
        if handle is None:
            return []

        stored = self.offsets.get(key)
        if offset is None:
            offset = stored
        else:
            offset = min(max(offset, 0), os.fstat(handle.fileno()).st_size)
        handle.seek(offset)

        # The pending fragment ends exactly at the stored cursor; it only
        # belongs in front of reads that continue from there.
        fragment = self._pending.get(key, b"") if offset == stored else b""

        mode = ReadMode(mode)
        batch: List[Record] = []
        consumed = 0
        while len(batch) < self.max_read:
            if mode is ReadMode.BY_LINE:
                chunk = self._read_line(handle)
                if not chunk:
                    break
                consumed += len(chunk)
                self._collect(batch, [chunk])
            else:
                chunk = handle.read(self.read_length)
                if not chunk:
                    break
                consumed += len(chunk)
                segments = (fragment + chunk).split(self.delimiter)
                fragment = b"" if chunk.endswith(self.delimiter) else segments.pop()
                self._collect(batch, segments)

        end = offset + consumed
        if end >= stored:
            self.offsets.move_to(key, end)
            if fragment:
                self._pending[key] = fragment
            else:
                self._pending.pop(key, None)
        # Otherwise this was a re-read of bytes behind the cursor; cursor and
        # pending fragment stay as they were.
        logger.debug("Read %s records (%s bytes) from %s at %s", len(batch), consumed, key, offset)
        return batch

    def offset(self, file_id: FileId) -> int:
        return self.offsets.get(self._key(file_id))

    def pending(self, file_id: FileId) -> bytes:
        return self._pending.get(self._key(file_id), b"")

    def flush(self, file_id: FileId) -> List[Record]:
        """Decode and drop the trailing fragment of a file that never got a delimiter."""

        fragment = self._pending.pop(self._key(file_id), b"")
        batch: List[Record] = []
        if fragment:
            self._collect(batch, [fragment])
        return batch

    def close(self, file_id: Optional[FileId] = None) -> None:
        if file_id is None:
            keys = list(self._handles)
        else:
            keys = [self._key(file_id)]
        for key in keys:
            handle = self._handles.pop(key, None)
            if handle is not None:
                handle.close()

    def is_open(self, file_id: FileId) -> bool:
        return self._key(file_id) in self._handles

    def __enter__(self) -> "RecordReader":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _collect(self, batch: List[Record], segments: List[bytes]) -> None:
        for segment in segments:
            record = self.codec.decode(segment)
            if not self.codec.is_empty(record):
                batch.append(record)

    def _read_line(self, handle: BinaryIO) -> bytes:
        # Lines longer than read_length arrive in pieces; stitch them back together.
        parts = []
        while True:
            piece = handle.readline(self.read_length)
            if not piece:
                break
            parts.append(piece)
            if piece.endswith(self.delimiter) or len(piece) < self.read_length:
                break
        return b"".join(parts)

    def _resolve(self, file_id: FileId) -> Optional[Path]:
        path = Path(file_id)
        if not path.exists() and self.base_path is not None:
            path = self.base_path / path
        if not path.is_file() or not os.access(path, os.R_OK):
            return None
        return path

    def _key(self, file_id: FileId) -> str:
        path = self._resolve(file_id)
        return str(path.resolve()) if path is not None else str(file_id)

    def _handle(self, key: str, path: Path) -> Optional[BinaryIO]:
        handle = self._handles.get(key)
        if handle is None:
            try:
                handle = path.open("rb")
            except OSError as exc:
                logger.debug("Cannot open %s: %s", path, exc)
                return None
            self._handles[key] = handle
        return handle


__all__ = ["RecordReader"]
