"""Checkpoint logger facade used by batch jobs."""

from __future__ import annotations

import logging
import pprint
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, TextIO, Union

from .checkpoint import CheckpointLog
from .codec import Codec, Record
from .config import DataKind, LoggerSettings, ReadMode, build_settings
from .logging_utils import redirect_std
from .offsets import FileId, OffsetStore
from .reader import RecordReader
from .shutdown import ShutdownNotifier
from .summary import Elapsed, RunSummary

logger = logging.getLogger(__name__)


def _positive_int(value: Any) -> Optional[int]:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return None
    return number if number > 0 else None


class ResumeLogger:
    """Resumable reader plus success/failure/exit checkpoint logs for one job.

    Typical loop::

        log = ResumeLogger.create("logs", "demo")
        start = log.get_last_exit_data() or 0
        while batch := log.read_data_file("data.dat"):
            for item in batch:
                if item <= start:
                    continue
                (log.log_success if ok(item) else log.log_failure)(item)
                log.log_exit(item)
        log.display()
    """

    def __init__(
        self,
        settings: LoggerSettings,
        handle_signals: bool = True,
        notifier: Optional[ShutdownNotifier] = None,
        stream: Optional[TextIO] = None,
    ) -> None:
        self.settings = settings
        self.stream = stream
        self.codec = Codec(settings.data_kind)
        self.offsets = OffsetStore()
        self.reader = RecordReader(
            self.codec,
            self.offsets,
            max_read=settings.max_read,
            read_length=settings.read_length,
            base_path=settings.base_path,
        )
        self.log = CheckpointLog(settings, self.codec, self.reader)
        self.summary = RunSummary(self.log, label=f"{settings.prefix} job")
        self.read_mode = settings.read_mode
        self.stdout_file = settings.resolved_stdout_file
        self.last_error: Optional[BaseException] = None
        self._closed = False

        self.notifier = notifier or ShutdownNotifier(stream=stream)
        self.notifier.register_callback(self.display)
        if handle_signals:
            self.notifier.install()
        logger.debug("Checkpoint logger ready for %s (%s)", settings.prefix, settings.data_kind.value)

    @classmethod
    def create(
        cls,
        log_dir: Union[str, Path],
        prefix: str,
        data_kind: Union[DataKind, str] = DataKind.INTEGER,
        handle_signals: bool = True,
        **options: Any,
    ) -> "ResumeLogger":
        settings = build_settings(log_dir=log_dir, prefix=prefix, data_kind=data_kind, **options)
        return cls(settings, handle_signals=handle_signals)

    # Tunables

    def set_read_mode(self, mode: Union[ReadMode, str, int]) -> None:
        if mode in (ReadMode.BY_LINE, 1):
            self.read_mode = ReadMode.BY_LINE
        else:
            self.read_mode = ReadMode.BY_LENGTH

    def set_max_read(self, count: Any) -> None:
        value = _positive_int(count)
        if value is None:
            logger.warning("Ignoring invalid max read %r", count)
            return
        self.reader.max_read = value

    def set_read_length(self, length: Any) -> None:
        value = _positive_int(length)
        if value is None:
            logger.warning("Ignoring invalid read length %r", length)
            return
        self.reader.read_length = value

    @property
    def max_read(self) -> int:
        return self.reader.max_read

    @property
    def read_length(self) -> int:
        return self.reader.read_length

    # Reads

    def read_data_file(self, file_id: FileId, mode: Optional[Union[ReadMode, str]] = None) -> List[Record]:
        return self.reader.read(file_id, mode or self.read_mode)

    def read_failure_file(self) -> List[Record]:
        return self.log.read_failure_file(self.read_mode)

    def flush_pending(self, file_id: FileId) -> List[Record]:
        return self.reader.flush(file_id)

    # Checkpoints

    def log_success(self, record: Any) -> bool:
        return self.log.record_success(record)

    def log_failure(self, record: Any) -> bool:
        return self.log.record_failure(record)

    def log_exit(self, record: Any, current: bool = False) -> bool:
        return self.log.record_exit(record, current=current)

    def get_last_exit_data(self, decode: bool = False) -> Any:
        return self.log.get_last_exit_data(decode=decode)

    # Reporting

    @property
    def prefix(self) -> str:
        return self.settings.prefix

    @property
    def count(self) -> int:
        return self.log.count

    @property
    def success_count(self) -> int:
        return self.log.success_count

    @property
    def failure_count(self) -> int:
        return self.log.failure_count

    @property
    def end_time(self) -> int:
        return self.summary.end_time

    def set_end_time(self, when: Optional[float] = None) -> int:
        return self.summary.record_end(when)

    def elapsed(self, when: Optional[float] = None) -> Elapsed:
        return self.summary.elapsed(when)

    def display(self, label: Optional[str] = None) -> bool:
        return self.summary.display(label, stream=self.stream)

    def diagnostics(self) -> Dict[str, Any]:
        record = self.log.snapshot()
        record["last_error"] = repr(self.last_error) if self.last_error is not None else None
        return record

    def dump_diagnostics(self) -> None:
        stream = self.stream or sys.stdout
        if self.last_error is not None:
            print(f"\n\nLast error:\n\n{self.last_error!r}", file=stream)
        print(f"\n\nRun record:\n{pprint.pformat(self.diagnostics())}\n\n", file=stream)
        stream.flush()

    def redirect_output(self) -> bool:
        """Send stdout/stderr to the configured file and report at process exit."""

        redirected = redirect_std(self.stdout_file)
        if redirected:
            self.notifier.register_exit_hook(self.dump_diagnostics)
            self.notifier.register_exit_hook(self.display)
        return redirected

    # Lifecycle

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.reader.close()
        self.notifier.uninstall()
        if self.settings.summary_json:
            self.summary.write_json(self.settings.summary_json)
            logger.info("Summary saved to %s", self.settings.summary_json)

    def __enter__(self) -> "ResumeLogger":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc is not None and not isinstance(exc, SystemExit):
            self.last_error = exc
        self.close()
        return False


__all__ = ["ResumeLogger"]
