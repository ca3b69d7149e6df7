"""Run summary reporting."""

from __future__ import annotations

import json
import logging
import sys
import time
from dataclasses import asdict, dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, Optional, TextIO

from .checkpoint import CheckpointLog

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


@dataclass
class Elapsed:
    hours: int
    minutes: int
    seconds: int

    def __str__(self) -> str:
        return f"{self.hours:<2} h {self.minutes:<2} m {self.seconds:<2} s"


class RunSummary:
    """Counts and elapsed time for one run, printed at most once."""

    def __init__(
        self,
        log: CheckpointLog,
        label: str,
        start_time: Optional[float] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.log = log
        self.label = label
        self.clock = clock
        self.start_time = int(start_time if start_time is not None else clock())
        self._end_time: Optional[int] = None
        self.displayed = False

    def record_end(self, when: Optional[float] = None) -> int:
        """Set the end time unless it was already set; return the stored value."""

        if self._end_time is None:
            self._end_time = int(when if when is not None else self.clock())
        return self._end_time

    @property
    def end_time(self) -> int:
        return self.record_end()

    def elapsed(self, when: Optional[float] = None) -> Elapsed:
        if when is None:
            when = self.end_time
        delta = max(0, int(when) - self.start_time)
        hours, remainder = divmod(delta, 3600)
        minutes, seconds = divmod(remainder, 60)
        return Elapsed(hours=hours, minutes=minutes, seconds=seconds)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "label": self.label,
            "count": self.log.count,
            "success_count": self.log.success_count,
            "failure_count": self.log.failure_count,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "elapsed": asdict(self.elapsed()),
        }

    def render(self, label: Optional[str] = None) -> str:
        label = label or self.label
        lines = [
            "",
            f"{'-' * 27} {label} results {'-' * 27}",
            "",
            f" all     num : [ {self.log.count:<10}]",
            f" success num : [ {self.log.success_count:<10}]",
            f" failure num : [ {self.log.failure_count:<10}]",
            "",
            f" started     : {_format_time(self.start_time)}",
            f" finished    : {_format_time(self.end_time)}",
            f" elapsed     : {self.elapsed()}",
            "",
        ]
        return "\n".join(lines)

    def display(self, label: Optional[str] = None, stream: Optional[TextIO] = None) -> bool:
        """Print the report once; later calls return ``False`` without output."""

        if self.displayed:
            return False
        self.displayed = True
        stream = stream or sys.stdout
        print(self.render(label), file=stream)
        stream.flush()
        logger.info(
            "Run finished: %s records, %s succeeded, %s failed",
            self.log.count,
            self.log.success_count,
            self.log.failure_count,
        )
        return True

    def write_json(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(self.as_dict(), indent=2, sort_keys=True))


def _format_time(timestamp: int) -> str:
    return datetime.fromtimestamp(timestamp).strftime(TIMESTAMP_FORMAT)


__all__ = ["Elapsed", "RunSummary"]
