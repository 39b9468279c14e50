from __future__ import annotations

import csv
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import IntEnum
from io import StringIO
from pathlib import Path
from typing import Callable, TextIO

from .utils import atomic_write


class LogLevel(IntEnum):
    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40
    CRITICAL = 50

    @classmethod
    def parse(cls, name: str | None) -> LogLevel:
        """Map a level name to its rank, falling back to INFO."""

        if not name:
            return cls.INFO
        try:
            return cls[name.strip().upper()]
        except KeyError:
            return cls.INFO


class LoggerSetupError(RuntimeError):
    """Raised when the run log file cannot be opened."""


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(moment: datetime) -> str:
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S") + f".{moment.microsecond // 1000:03d}Z"


@dataclass(frozen=True, slots=True)
class LogEntry:
    timestamp: str
    severity: LogLevel
    message: str

    def render(self) -> str:
        return f"{self.timestamp} {self.severity.name}: {self.message}"


class RunLogger:
    """Append-only, severity-filtered log file for a single run.

    The file handle is opened once by :meth:`open` and released exactly once
    by :meth:`close`. Writing never raises: failures are kept in
    ``write_errors`` so the caller can report them when the run is over.
    """

    def __init__(
        self,
        log_file: Path,
        threshold: LogLevel = LogLevel.INFO,
        *,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._log_file = log_file
        self._threshold = threshold
        self._clock = clock
        self._handle: TextIO | None = None
        self._closed = False
        self.write_errors: list[str] = []

    @property
    def path(self) -> Path:
        return self._log_file

    @property
    def threshold(self) -> LogLevel:
        return self._threshold

    @property
    def is_open(self) -> bool:
        return self._handle is not None

    @property
    def closed(self) -> bool:
        return self._closed

    def open(self) -> RunLogger:
        if self._handle is not None:
            return self
        try:
            self._log_file.parent.mkdir(parents=True, exist_ok=True)
            self._handle = self._log_file.open("a", encoding="utf-8")
        except OSError as exc:
            raise LoggerSetupError(f"Cannot open log file {self._log_file}: {exc}") from exc
        self._closed = False
        return self

    def close(self) -> None:
        if self._handle is None:
            return
        handle, self._handle = self._handle, None
        self._closed = True
        try:
            handle.close()
        except OSError as exc:
            self.write_errors.append(f"close():: {exc}")

    def __enter__(self) -> RunLogger:
        return self.open()

    def __exit__(self, *_exc: object) -> None:
        self.close()

    def enabled_for(self, severity: LogLevel) -> bool:
        return severity >= self._threshold

    def write(self, severity: LogLevel, message: str) -> LogEntry | None:
        if not self.enabled_for(severity):
            return None
        entry = LogEntry(timestamp=format_timestamp(self._clock()), severity=severity, message=message)
        if self._handle is None:
            self.write_errors.append(f"log():: log file not open, dropped: {entry.render()}")
            return None
        try:
            self._handle.write(entry.render() + "\n")
            self._handle.flush()
        except (OSError, ValueError) as exc:
            self.write_errors.append(f"log():: {exc}")
            return None
        return entry

    def debug(self, message: str) -> LogEntry | None:
        return self.write(LogLevel.DEBUG, message)

    def info(self, message: str) -> LogEntry | None:
        return self.write(LogLevel.INFO, message)

    def warning(self, message: str) -> LogEntry | None:
        return self.write(LogLevel.WARNING, message)

    def error(self, message: str) -> LogEntry | None:
        return self.write(LogLevel.ERROR, message)

    def critical(self, message: str) -> LogEntry | None:
        return self.write(LogLevel.CRITICAL, message)


@dataclass(slots=True)
class BatchSummary:
    timestamp: float = field(default_factory=time.time)
    total: int = 0
    converted: int = 0
    with_warnings: int = 0
    failed: int = 0

    def as_row(self, run_id: str) -> list[str]:
        return [
            run_id,
            time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime(self.timestamp)),
            str(self.total),
            str(self.converted),
            str(self.with_warnings),
            str(self.failed),
        ]


SUMMARY_HEADER = ["run_id", "timestamp", "total", "converted", "with_warnings", "failed"]


def write_summary_csv(path: Path, header: list[str], rows: list[list[str]]) -> None:
    buffer = StringIO()
    writer = csv.writer(buffer)
    writer.writerow(header)
    writer.writerows(rows)
    atomic_write(path, buffer.getvalue())


def append_summary_row(path: Path, summary: BatchSummary, run_id: str) -> None:
    header = SUMMARY_HEADER
    rows: list[list[str]] = []
    if path.exists():
        with path.open("r", encoding="utf-8", newline="") as handle:
            reader = list(csv.reader(handle))
        if reader:
            header = reader[0]
            rows = reader[1:]
    rows.append(summary.as_row(run_id))
    write_summary_csv(path, header, rows)
