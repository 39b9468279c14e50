from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import pytest

from indd2idml.adapters.base import ExportFormat, ReferenceState, ServiceError
from indd2idml.config import RunConfig, RunMode
from indd2idml.logging import LogLevel, RunLogger


class FakeReference:
    def __init__(self, path: str, state: ReferenceState, *, fail_refresh: bool = False) -> None:
        self.path = path
        self.state = state
        self.fail_refresh = fail_refresh
        self.refreshed = 0

    def refresh(self) -> None:
        if self.fail_refresh:
            raise ServiceError(f"cannot update {self.path}")
        self.refreshed += 1
        self.state = ReferenceState.CURRENT


class FakeDocument:
    def __init__(self, service: FakeService, path: Path) -> None:
        self._service = service
        self._path = path

    @property
    def name(self) -> str:
        return self._path.name

    @property
    def references(self) -> list[FakeReference]:
        if self._path.name in self._service.fail_references:
            raise ServiceError("links unavailable")
        return self._service.references.get(self._path.name, [])

    def export(self, format: ExportFormat, output_path: Path) -> None:
        if format in self._service.fail_exports.get(self._path.name, set()):
            raise ServiceError(f"{format.value} export refused")
        output_path.write_text(f"{format.value}:{self._path.name}", encoding="utf-8")
        self._service.exports.append((format, output_path))

    def close(self, discard_changes: bool = True) -> None:
        self._service.closed.append(self._path)
        if self._path.name in self._service.fail_close:
            raise ServiceError("close refused")


@dataclass
class FakeService:
    fail_open: set[str] = field(default_factory=set)
    fail_exports: dict[str, set[ExportFormat]] = field(default_factory=dict)
    fail_close: set[str] = field(default_factory=set)
    fail_references: set[str] = field(default_factory=set)
    references: dict[str, list[FakeReference]] = field(default_factory=dict)
    opened: list[Path] = field(default_factory=list)
    closed: list[Path] = field(default_factory=list)
    exports: list[tuple[ExportFormat, Path]] = field(default_factory=list)
    started: bool = False
    shut_down: bool = False

    def start(self) -> None:
        self.started = True

    def describe(self) -> str:
        return "Fake InDesign 19.0"

    def open(self, path: Path) -> FakeDocument:
        if path.name in self.fail_open:
            raise ServiceError(f"cannot open {path.name}")
        self.opened.append(path)
        return FakeDocument(self, path)

    def shutdown(self) -> None:
        self.shut_down = True


class FakeOperator:
    def __init__(self, file: Path | None = None, folder: Path | None = None) -> None:
        self.file = file
        self.folder = folder
        self.alerts: list[str] = []

    def select_file(self, pattern: str) -> Path | None:
        return self.file

    def select_folder(self) -> Path | None:
        return self.folder

    def alert(self, message: str) -> None:
        self.alerts.append(message)


def make_source(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"INDD")
    return path


def read_lines(path: Path) -> list[str]:
    return path.read_text(encoding="utf-8").splitlines()


@pytest.fixture
def service() -> FakeService:
    return FakeService()


@pytest.fixture
def log_path(tmp_path: Path) -> Path:
    return tmp_path / "logs" / "indd-to-idml.log"


@pytest.fixture
def logger(log_path: Path):
    run_logger = RunLogger(log_path, LogLevel.DEBUG).open()
    yield run_logger
    run_logger.close()


def build_run_config(log_path: Path, **overrides: object) -> RunConfig:
    values: dict[str, object] = {
        "mode": RunMode.SINGLE,
        "export_preview": False,
        "resolve_missing_references": True,
        "log_level": LogLevel.DEBUG,
        "log_file": log_path,
    }
    values.update(overrides)
    return RunConfig(**values)  # type: ignore[arg-type]
