"""Resumable checkpoint logging for long running batch jobs."""

from .checkpoint import CheckpointLog
from .codec import Codec, to_int
from .config import ConfigurationError, DataKind, LoggerSettings, ReadMode, build_settings, load_settings
from .logging_utils import RedirectError
from .offsets import OffsetStore
from .reader import RecordReader
from .resume_logger import ResumeLogger
from .shutdown import ShutdownNotifier
from .summary import Elapsed, RunSummary

__all__ = [
    "CheckpointLog",
    "Codec",
    "ConfigurationError",
    "DataKind",
    "Elapsed",
    "LoggerSettings",
    "OffsetStore",
    "ReadMode",
    "RecordReader",
    "RedirectError",
    "ResumeLogger",
    "RunSummary",
    "ShutdownNotifier",
    "build_settings",
    "load_settings",
    "to_int",
]

__version__ = "0.1.0"
