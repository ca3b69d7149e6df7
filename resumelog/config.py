"""Configuration for checkpoint loggers."""

from __future__ import annotations

import os
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

DELIMITER = "\n"
DEFAULT_MAX_READ = 1000
DEFAULT_READ_LENGTH = 2048
ENV_PREFIX = "RESUMELOG_"

# Names used by older job scripts.
KIND_ALIASES = {"int": "integer", "json": "structured", "csv": "flat"}
READ_MODE_ALIASES = {1: "line", 2: "length", "1": "line", "2": "length"}


class ConfigurationError(ValueError):
    """Raised when a logger cannot be initialised from the given settings."""


class DataKind(str, Enum):
    INTEGER = "integer"
    STRUCTURED = "structured"
    FLAT = "flat"


class ReadMode(str, Enum):
    BY_LINE = "line"
    BY_LENGTH = "length"


class LoggerSettings(BaseModel):
    """Validated settings for one checkpoint log set."""

    log_dir: Path = Field(..., description="Existing, writable directory holding the checkpoint logs")
    prefix: str = Field(..., description="File name prefix shared by the three checkpoint logs")
    data_kind: DataKind = Field(DataKind.INTEGER, description="Record encoding used by every log")
    stdout_file: Optional[Path] = Field(None, description="Redirect target for stdout/stderr")
    base_path: Optional[Path] = Field(None, description="Fallback directory for relative data files")
    read_mode: ReadMode = Field(ReadMode.BY_LINE, description="Chunking strategy for reads")
    max_read: int = Field(DEFAULT_MAX_READ, ge=1, description="Maximum records per batch")
    read_length: int = Field(DEFAULT_READ_LENGTH, ge=1, description="Bytes per physical read")
    summary_json: Optional[Path] = Field(None, description="Optional JSON run summary output")

    @field_validator("log_dir")
    @classmethod
    def _check_log_dir(cls, value: Path) -> Path:
        if not value.is_dir():
            raise ValueError(f"log dir {value} does not exist")
        if not os.access(value, os.W_OK):
            raise ValueError(f"log dir {value} is not writable")
        return value

    @field_validator("prefix")
    @classmethod
    def _check_prefix(cls, value: str) -> str:
        if value == "" or value == "/":
            raise ValueError(f"invalid prefix {value!r}")
        return value

    @field_validator("data_kind", mode="before")
    @classmethod
    def _alias_kind(cls, value: Any) -> Any:
        if isinstance(value, str):
            return KIND_ALIASES.get(value.lower(), value.lower())
        return value

    @field_validator("read_mode", mode="before")
    @classmethod
    def _alias_read_mode(cls, value: Any) -> Any:
        if isinstance(value, (int, str)) and not isinstance(value, bool):
            return READ_MODE_ALIASES.get(value, value)
        return value

    @property
    def success_log(self) -> Path:
        return self.log_dir / f"{self.prefix}_success.log"

    @property
    def failure_log(self) -> Path:
        return self.log_dir / f"{self.prefix}_failure.log"

    @property
    def exit_log(self) -> Path:
        return self.log_dir / f"{self.prefix}_exit.log"

    @property
    def default_stdout_file(self) -> Path:
        return self.log_dir / f"{self.prefix}_std.log"

    @property
    def resolved_stdout_file(self) -> Path:
        return self.stdout_file or self.default_stdout_file


def _describe(exc: ValidationError) -> str:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"]) or "settings"
        message = error["msg"]
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        messages.append(f"{location}: {message}")
    return "; ".join(messages)


def build_settings(**values: Any) -> LoggerSettings:
    """Validate ``values`` into settings, raising ``ConfigurationError`` on failure."""

    try:
        return LoggerSettings(**values)
    except ValidationError as exc:
        raise ConfigurationError(_describe(exc)) from exc


def load_settings(env_file: Optional[str] = ".env", **overrides: Any) -> LoggerSettings:
    """Load settings from ``RESUMELOG_*`` variables, an optional .env file and overrides."""

    if env_file:
        load_dotenv(env_file, override=False)

    values: Dict[str, Any] = {}
    for name in LoggerSettings.model_fields:
        raw = os.getenv(f"{ENV_PREFIX}{name.upper()}")
        if raw not in (None, ""):
            values[name] = raw

    values.update({key: value for key, value in overrides.items() if value is not None})
    return build_settings(**values)


__all__ = [
    "ConfigurationError",
    "DataKind",
    "ReadMode",
    "LoggerSettings",
    "build_settings",
    "load_settings",
    "DELIMITER",
    "DEFAULT_MAX_READ",
    "DEFAULT_READ_LENGTH",
]
