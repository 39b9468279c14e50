from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Protocol, Sequence


class ServiceError(RuntimeError):
    """A call into the document application failed."""


class ServiceUnavailableError(ServiceError):
    """The document application could not be reached."""


class ReferenceState(str, Enum):
    CURRENT = "current"
    STALE = "stale"
    MISSING = "missing"


class ExportFormat(str, Enum):
    PRIMARY_INTERCHANGE = "idml"
    PREVIEW_DOCUMENT = "pdf"


class Reference(Protocol):
    @property
    def path(self) -> str:  # pragma: no cover - interface
        ...

    @property
    def state(self) -> ReferenceState:  # pragma: no cover - interface
        ...

    def refresh(self) -> None:  # pragma: no cover - interface
        ...


class DocumentHandle(Protocol):
    @property
    def name(self) -> str:  # pragma: no cover - interface
        ...

    @property
    def references(self) -> Sequence[Reference]:  # pragma: no cover - interface
        ...

    def export(self, format: ExportFormat, output_path: Path) -> None:  # pragma: no cover - interface
        ...

    def close(self, discard_changes: bool = True) -> None:  # pragma: no cover - interface
        ...


class DocumentService(Protocol):
    """The application that opens and exports documents."""

    def start(self) -> None:  # pragma: no cover - interface
        ...

    def describe(self) -> str:  # pragma: no cover - interface
        ...

    def open(self, path: Path) -> DocumentHandle:  # pragma: no cover - interface
        ...

    def shutdown(self) -> None:  # pragma: no cover - interface
        ...
