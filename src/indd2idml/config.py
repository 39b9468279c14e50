from __future__ import annotations

import json
import tomllib
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Mapping

from .constraint import DEFAULT_CONFIG_PATH, DEFAULT_LOG_FILE, SOURCE_PATTERN
from .logging import LogLevel
from .settings import Settings


@dataclass(slots=True)
class RuntimeConfig:
    log_file: Path = DEFAULT_LOG_FILE
    log_level: str = "INFO"
    pattern: str = SOURCE_PATTERN
    export_preview: bool = False
    resolve_missing_references: bool = True
    summary_csv: Path | None = None


@dataclass(slots=True)
class InDesignConfig:
    prog_id: str = "InDesign.Application"
    show_window: bool = False


@dataclass(slots=True)
class AppConfig:
    runtime: RuntimeConfig = field(default_factory=RuntimeConfig)
    indesign: InDesignConfig = field(default_factory=InDesignConfig)


class RunMode(str, Enum):
    SINGLE = "single"
    RECURSIVE = "recursive"


@dataclass(frozen=True, slots=True)
class RunConfig:
    """Options for one run, fixed once the operator has answered."""

    mode: RunMode
    target: Path | None = None
    export_preview: bool = False
    resolve_missing_references: bool = True
    log_level: LogLevel = LogLevel.INFO
    log_file: Path = DEFAULT_LOG_FILE
    pattern: str = SOURCE_PATTERN

    @property
    def recursive(self) -> bool:
        return self.mode is RunMode.RECURSIVE


def _read_toml(path: Path) -> Mapping[str, object]:
    if not path.exists():
        return {}
    with path.open("rb") as handle:
        return tomllib.load(handle)


def _optional_path(value: object | None) -> Path | None:
    if value is None or value == "":
        return None
    return Path(str(value))


def _build_runtime(data: Mapping[str, object] | None) -> RuntimeConfig:
    if not data:
        return RuntimeConfig()
    return RuntimeConfig(
        log_file=Path(str(data.get("log_file", DEFAULT_LOG_FILE))),
        log_level=str(data.get("log_level", "INFO")),
        pattern=str(data.get("pattern", SOURCE_PATTERN)),
        export_preview=bool(data.get("export_preview", False)),
        resolve_missing_references=bool(data.get("resolve_missing_references", True)),
        summary_csv=_optional_path(data.get("summary_csv")),
    )


def _build_indesign(data: Mapping[str, object] | None) -> InDesignConfig:
    if not data:
        return InDesignConfig()
    return InDesignConfig(
        prog_id=str(data.get("prog_id", "InDesign.Application")),
        show_window=bool(data.get("show_window", False)),
    )


def load_config(path: Path | None = None) -> AppConfig:
    path = path or DEFAULT_CONFIG_PATH
    raw = _read_toml(path)
    runtime_data = raw.get("runtime") if isinstance(raw, Mapping) else None
    indesign_data = raw.get("indesign") if isinstance(raw, Mapping) else None
    runtime = _build_runtime(runtime_data if isinstance(runtime_data, Mapping) else None)
    indesign = _build_indesign(indesign_data if isinstance(indesign_data, Mapping) else None)
    return AppConfig(runtime=runtime, indesign=indesign)


def apply_settings(config: AppConfig, settings: Settings) -> AppConfig:
    if settings.log_file is not None:
        config.runtime.log_file = settings.log_file
    if settings.log_level:
        config.runtime.log_level = settings.log_level
    return config


def build_run_config(
    config: AppConfig,
    *,
    recursive: bool,
    export_preview: bool | None = None,
    target: Path | None = None,
    resolve_missing_references: bool | None = None,
    log_level: str | None = None,
    log_file: Path | None = None,
) -> RunConfig:
    runtime = config.runtime
    return RunConfig(
        mode=RunMode.RECURSIVE if recursive else RunMode.SINGLE,
        target=target,
        export_preview=runtime.export_preview if export_preview is None else export_preview,
        resolve_missing_references=(
            runtime.resolve_missing_references
            if resolve_missing_references is None
            else resolve_missing_references
        ),
        log_level=LogLevel.parse(log_level or runtime.log_level),
        log_file=log_file or runtime.log_file,
        pattern=runtime.pattern,
    )


def dump_config(config: AppConfig) -> str:
    payload = {
        "runtime": {
            "log_file": str(config.runtime.log_file),
            "log_level": config.runtime.log_level,
            "pattern": config.runtime.pattern,
            "export_preview": config.runtime.export_preview,
            "resolve_missing_references": config.runtime.resolve_missing_references,
            "summary_csv": str(config.runtime.summary_csv) if config.runtime.summary_csv else None,
        },
        "indesign": {
            "prog_id": config.indesign.prog_id,
            "show_window": config.indesign.show_window,
        },
    }
    return json.dumps(payload, indent=2)


__all__ = [
    "AppConfig",
    "InDesignConfig",
    "RunConfig",
    "RunMode",
    "RuntimeConfig",
    "apply_settings",
    "build_run_config",
    "dump_config",
    "load_config",
]
