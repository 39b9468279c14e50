"""Domain models for INDD conversion runs."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from .constraint import IDML_SUFFIX, PREVIEW_SUFFIX
from .logging import BatchSummary
from .utils import replace_source_suffix


@dataclass(frozen=True, slots=True)
class FileRef:
    """A source document found on disk."""

    path: Path

    @classmethod
    def from_path(cls, path: Path | str) -> FileRef:
        return cls(path=Path(path))

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def parent(self) -> Path:
        return self.path.parent

    @property
    def idml_path(self) -> Path:
        return self.parent / replace_source_suffix(self.name, IDML_SUFFIX)

    @property
    def preview_path(self) -> Path:
        return self.parent / replace_source_suffix(self.name, PREVIEW_SUFFIX)


class ConversionStatus(str, Enum):
    CONVERTED = "converted"
    CONVERTED_WITH_WARNINGS = "converted_with_warnings"
    FAILED = "failed"


@dataclass(slots=True)
class ConversionResult:
    """Outcome of converting one source document."""

    source: FileRef
    status: ConversionStatus
    artifact: Path | None = None
    preview: Path | None = None
    warnings: list[str] = field(default_factory=list)
    reason: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status is not ConversionStatus.FAILED

    @classmethod
    def converted(
        cls,
        source: FileRef,
        artifact: Path,
        *,
        preview: Path | None = None,
        warnings: list[str] | None = None,
    ) -> ConversionResult:
        warnings = list(warnings or [])
        status = ConversionStatus.CONVERTED_WITH_WARNINGS if warnings else ConversionStatus.CONVERTED
        return cls(source=source, status=status, artifact=artifact, preview=preview, warnings=warnings)

    @classmethod
    def failed(cls, source: FileRef, reason: str, *, warnings: list[str] | None = None) -> ConversionResult:
        return cls(
            source=source,
            status=ConversionStatus.FAILED,
            warnings=list(warnings or []),
            reason=reason,
        )


@dataclass(slots=True)
class RunReport:
    """Aggregate results for one orchestrated run."""

    run_id: str
    results: list[ConversionResult] = field(default_factory=list)
    summary: BatchSummary = field(default_factory=BatchSummary)

    def record(self, result: ConversionResult) -> None:
        self.results.append(result)
        self.summary.total += 1
        if result.status is ConversionStatus.FAILED:
            self.summary.failed += 1
        elif result.status is ConversionStatus.CONVERTED_WITH_WARNINGS:
            self.summary.with_warnings += 1
        else:
            self.summary.converted += 1


__all__ = [
    "ConversionResult",
    "ConversionStatus",
    "FileRef",
    "RunReport",
]
