"""Logging setup and standard stream redirection."""

from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class RedirectError(OSError):
    """Raised when stdout/stderr cannot be redirected to the requested file."""


def configure_logging(log_file: Optional[Path] = None, level: int = logging.INFO) -> None:
    """Configure console and optional rotating file logging."""

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Avoid duplicate handlers
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(log_file, maxBytes=5_000_000, backupCount=3)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)


def redirect_std(path: Path) -> bool:
    """Point the process's stdout and stderr at ``path`` (append mode).

    Returns ``False`` without doing anything on platforms other than POSIX.
    """

    if os.name != "posix":
        return False

    try:
        path.touch(exist_ok=True)
        fd = os.open(str(path), os.O_WRONLY | os.O_APPEND)
    except OSError as exc:
        raise RedirectError(f"can not open stdout file {path}: {exc}") from exc

    sys.stdout.flush()
    sys.stderr.flush()
    try:
        os.dup2(fd, sys.stdout.fileno())
        os.dup2(fd, sys.stderr.fileno())
    finally:
        os.close(fd)
    logging.getLogger(__name__).debug("Redirected stdout and stderr to %s", path)
    return True


__all__ = ["RedirectError", "configure_logging", "redirect_std"]
