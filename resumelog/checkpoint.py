"""Success, failure and exit checkpoint logs for incremental resume."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .codec import Codec, Record, to_int
from .config import LoggerSettings, ReadMode
from .reader import RecordReader

logger = logging.getLogger(__name__)


class CheckpointLog:
    """Append-only success/failure logs plus a single-entry exit log.

    The success and failure logs hold one encoded record per line. The exit
    log is rewritten on every checkpoint and only ever holds the most recent
    marker, either a truncated integer id or a fully encoded record.
    """

    def __init__(self, settings: LoggerSettings, codec: Codec, reader: RecordReader) -> None:
        self.settings = settings
        self.codec = codec
        self.reader = reader
        self.count = 0
        self.success_count = 0
        self.failure_count = 0
        self.last_success: Any = None
        self.last_failure: Any = None
        self.last_exit: Any = None

    @property
    def success_log(self) -> Path:
        return self.settings.success_log

    @property
    def failure_log(self) -> Path:
        return self.settings.failure_log

    @property
    def exit_log(self) -> Path:
        return self.settings.exit_log

    def record_success(self, record: Any) -> bool:
        if self.codec.is_empty(record):
            return False
        self.last_success = record
        if not self._append(self.success_log, record):
            return False
        self.success_count += 1
        self.count += 1
        return True

    def record_failure(self, record: Any) -> bool:
        if self.codec.is_empty(record):
            return False
        self.last_failure = record
        if not self._append(self.failure_log, record):
            return False
        self.failure_count += 1
        self.count += 1
        return True

    def record_exit(self, record: Any, current: bool = False) -> bool:
        """Replace the exit checkpoint with ``record``.

        With ``current`` false only the truncated integer id is stored, which
        is enough to skip already processed ids on restart. With ``current``
        true the whole record is encoded so the job can resume from it.
        """

        self.last_exit = record
        if current:
            payload = self.codec.encode(record)
        else:
            payload = str(to_int(record)).encode("utf-8")
        return self._overwrite(self.exit_log, payload)

    def get_last_exit_data(self, decode: bool = False) -> Optional[Union[int, str, Record]]:
        """Return the stored exit checkpoint, or ``None`` when there is none.

        Pass ``decode=True`` when the checkpoint was written with
        ``current=True``.
        """

        try:
            content = self.exit_log.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as exc:
            logger.debug("Cannot read exit log %s: %s", self.exit_log, exc)
            return None

        line = content.split(self.reader.delimiter, 1)[0].rstrip(b"\r")
        if not line.strip():
            return None
        if decode:
            return self.codec.decode(line)

        text = line.decode("utf-8", errors="replace")
        try:
            return int(text)
        except ValueError:
            return text

    def read_failure_file(self, mode: Optional[Union[ReadMode, str]] = None) -> List[Record]:
        """Read the next batch of failed records for reprocessing."""

        return self.reader.read(self.failure_log, mode or self.settings.read_mode)

    def snapshot(self) -> Dict[str, Any]:
        return {
            "last_success": self.last_success,
            "last_failure": self.last_failure,
            "last_exit": self.last_exit,
        }

    def _append(self, path: Path, record: Any) -> bool:
        try:
            with path.open("ab") as handle:
                handle.write(self.codec.encode(record) + self.reader.delimiter)
        except OSError:
            logger.exception("Failed to append checkpoint to %s", path)
            return False
        return True

    def _overwrite(self, path: Path, payload: bytes) -> bool:
        tmp = path.with_suffix(".tmp")
        try:
            tmp.write_bytes(payload)
            tmp.replace(path)
        except OSError:
            logger.exception("Failed to write exit checkpoint to %s", path)
            return False
        return True


__all__ = ["CheckpointLog"]
