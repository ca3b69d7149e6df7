"""Command line interface for resumelog."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

import typer

from .codec import to_int
from .config import ConfigurationError, DataKind, LoggerSettings, ReadMode, load_settings
from .logging_utils import RedirectError, configure_logging
from .resume_logger import ResumeLogger

logger = logging.getLogger(__name__)

app = typer.Typer(help="Checkpoint logs for resumable batch jobs")

LOG_DIR = typer.Option(None, "--log-dir", help="Directory holding the checkpoint logs")
PREFIX = typer.Option(None, "--prefix", help="Checkpoint log file prefix")
KIND = typer.Option(None, "--kind", help="Record kind: integer, structured or flat")
MODE = typer.Option(None, "--mode", help="Read mode: line or length")
MAX_READ = typer.Option(None, "--max-read", help="Maximum records per batch")
READ_LENGTH = typer.Option(None, "--read-length", help="Bytes per physical read")
ENV_FILE = typer.Option(".env", "--env-file", help="Optional .env file with RESUMELOG_* settings")


def _settings(
    log_dir: Optional[Path],
    prefix: Optional[str],
    kind: Optional[str],
    mode: Optional[str],
    max_read: Optional[int],
    read_length: Optional[int],
    env_file: Optional[str],
    summary_json: Optional[Path] = None,
) -> LoggerSettings:
    try:
        return load_settings(
            env_file=env_file,
            log_dir=log_dir,
            prefix=prefix,
            data_kind=kind,
            read_mode=mode,
            max_read=max_read,
            read_length=read_length,
            summary_json=summary_json,
        )
    except ConfigurationError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=2)


def _count_entries(path: Path) -> int:
    if not path.exists():
        return 0
    with path.open("rb") as handle:
        return sum(1 for line in handle if line.strip())


@app.command()
def show_config(
    log_dir: Optional[Path] = LOG_DIR,
    prefix: Optional[str] = PREFIX,
    kind: Optional[str] = KIND,
    mode: Optional[str] = MODE,
    max_read: Optional[int] = MAX_READ,
    read_length: Optional[int] = READ_LENGTH,
    env_file: str = ENV_FILE,
) -> None:
    """Print the effective settings."""

    settings = _settings(log_dir, prefix, kind, mode, max_read, read_length, env_file)
    typer.echo(settings.model_dump_json(indent=2))


@app.command()
def run(
    data_file: Path = typer.Argument(..., help="Newline delimited file of integer ids"),
    log_dir: Optional[Path] = LOG_DIR,
    prefix: Optional[str] = PREFIX,
    mode: Optional[str] = MODE,
    max_read: Optional[int] = MAX_READ,
    read_length: Optional[int] = READ_LENGTH,
    env_file: str = ENV_FILE,
    label: Optional[str] = typer.Option(None, help="Label shown in the run summary"),
    redirect: bool = typer.Option(False, help="Redirect stdout/stderr to the configured file"),
    summary_json: Optional[Path] = typer.Option(None, help="Write a JSON run summary here"),
    log_file: Optional[Path] = typer.Option(None, help="Optional log file path"),
) -> None:
    """Sort ids into the success (even) and failure (odd) logs, resuming after the last exit."""

    configure_logging(log_file)
    settings = _settings(log_dir, prefix, DataKind.INTEGER.value, mode, max_read, read_length, env_file, summary_json)

    with ResumeLogger(settings) as log:
        if redirect:
            try:
                log.redirect_output()
            except RedirectError as exc:
                typer.echo(str(exc), err=True)
                raise typer.Exit(code=1)

        start = to_int(log.get_last_exit_data())
        if start:
            logger.info("Resuming after id %s", start)

        while True:
            batch = log.read_data_file(data_file)
            if not batch:
                break
            for item in batch:
                if item <= start:
                    continue
                if item % 2 == 0:
                    log.log_success(item)
                else:
                    log.log_failure(item)
                log.log_exit(item)

        log.display(label)


@app.command()
def status(
    log_dir: Optional[Path] = LOG_DIR,
    prefix: Optional[str] = PREFIX,
    kind: Optional[str] = KIND,
    env_file: str = ENV_FILE,
    decode: bool = typer.Option(False, help="Decode the exit checkpoint with the record kind"),
) -> None:
    """Show the last exit checkpoint and the size of the success and failure logs."""

    settings = _settings(log_dir, prefix, kind, None, None, None, env_file)
    with ResumeLogger(settings, handle_signals=False) as log:
        marker = log.get_last_exit_data(decode=decode)

    typer.echo(f"last exit : {json.dumps(marker) if marker is not None else '-'}")
    typer.echo(f"successes : {_count_entries(settings.success_log)}")
    typer.echo(f"failures  : {_count_entries(settings.failure_log)}")


@app.command()
def replay_failures(
    log_dir: Optional[Path] = LOG_DIR,
    prefix: Optional[str] = PREFIX,
    kind: Optional[str] = KIND,
    mode: Optional[str] = MODE,
    max_read: Optional[int] = MAX_READ,
    read_length: Optional[int] = READ_LENGTH,
    env_file: str = ENV_FILE,
) -> None:
    """Print every record of the failure log as JSON, one per line."""

    settings = _settings(log_dir, prefix, kind, mode, max_read, read_length, env_file)
    replayed = 0
    with ResumeLogger(settings, handle_signals=False) as log:
        while True:
            batch = log.read_failure_file()
            if not batch:
                break
            for record in batch:
                typer.echo(json.dumps(record))
                replayed += 1
        if log.read_mode is ReadMode.BY_LENGTH:
            for record in log.flush_pending(settings.failure_log):
                typer.echo(json.dumps(record))
                replayed += 1
    logger.info("Replayed %s failed records", replayed)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
