"""In-memory byte cursors for data files."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Union

FileId = Union[str, Path]


class OffsetStore:
    """Per-file byte offsets, kept for the lifetime of the process.

    Offsets are not persisted. A job that needs to resume after a restart
    derives its starting point from the exit log instead.
    """

    def __init__(self) -> None:
        self._offsets: Dict[str, int] = {}

    def get(self, file_id: FileId) -> int:
        return self._offsets.get(str(file_id), 0)

    def advance(self, file_id: FileId, delta: int) -> int:
        if delta < 0:
            raise ValueError(f"cannot move offset for {file_id} backwards by {delta}")
        key = str(file_id)
        self._offsets[key] = self._offsets.get(key, 0) + delta
        return self._offsets[key]

    def move_to(self, file_id: FileId, position: int) -> int:
        """Set the offset to ``position``; moving backwards raises ``ValueError``."""

        return self.advance(file_id, position - self.get(file_id))

    def snapshot(self) -> Dict[str, int]:
        return dict(self._offsets)

    def __contains__(self, file_id: object) -> bool:
        return str(file_id) in self._offsets


__all__ = ["OffsetStore", "FileId"]
