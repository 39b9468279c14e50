"""Adobe InDesign driven over COM (Windows only)."""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator

from ..config import InDesignConfig
from .base import ExportFormat, ReferenceState, ServiceError, ServiceUnavailableError


@contextmanager
def _com_call(action: str, com_error: type[BaseException]) -> Iterator[None]:
    try:
        yield
    except com_error as exc:
        raise ServiceError(f"{action} failed: {exc}") from exc


class InDesignReference:
    def __init__(self, link: Any, constants: Any, com_error: type[BaseException]) -> None:
        self._link = link
        self._constants = constants
        self._com_error = com_error

    @property
    def path(self) -> str:
        with _com_call("Link.FilePath", self._com_error):
            return str(self._link.FilePath)

    @property
    def state(self) -> ReferenceState:
        with _com_call("Link.Status", self._com_error):
            status = self._link.Status
        if status == self._constants.idLinkOutOfDate:
            return ReferenceState.STALE
        if status == self._constants.idLinkMissing:
            return ReferenceState.MISSING
        return ReferenceState.CURRENT

    def refresh(self) -> None:
        with _com_call("Link.Update", self._com_error):
            self._link.Update()


class InDesignDocument:
    def __init__(self, document: Any, constants: Any, com_error: type[BaseException]) -> None:
        self._document = document
        self._constants = constants
        self._com_error = com_error

    @property
    def name(self) -> str:
        with _com_call("Document.Name", self._com_error):
            return str(self._document.Name)

    @property
    def references(self) -> list[InDesignReference]:
        with _com_call("Document.Links", self._com_error):
            links = self._document.Links
            # COM collections are 1-based
            return [
                InDesignReference(links.Item(i), self._constants, self._com_error)
                for i in range(1, links.Count + 1)
            ]

    def export(self, format: ExportFormat, output_path: Path) -> None:
        if format is ExportFormat.PRIMARY_INTERCHANGE:
            export_format = self._constants.idInDesignMarkup
        else:
            export_format = self._constants.idPDFType
        with _com_call(f"Document.Export({format.value})", self._com_error):
            self._document.Export(export_format, str(output_path), False)

    def close(self, discard_changes: bool = True) -> None:
        saving = self._constants.idNo if discard_changes else self._constants.idYes
        with _com_call("Document.Close", self._com_error):
            self._document.Close(saving)


class InDesignService:
    def __init__(self, config: InDesignConfig) -> None:
        self._config = config
        self._app: Any = None
        self._constants: Any = None
        self._com_error: type[BaseException] | None = None

    def start(self) -> None:
        if self._app is not None:
            return
        try:
            from pywintypes import com_error
            from win32com.client import constants, gencache
        except ModuleNotFoundError as exc:  # pragma: no cover - import guard
            raise ServiceUnavailableError(
                "pywin32 is required to drive InDesign (pip install 'indd2idml[indesign]')"
            ) from exc

        try:
            app = gencache.EnsureDispatch(self._config.prog_id)
            app.ScriptPreferences.UserInteractionLevel = constants.idNeverInteract
        except com_error as exc:
            raise ServiceUnavailableError(f"Cannot reach {self._config.prog_id}: {exc}") from exc
        self._app = app
        self._constants = constants
        self._com_error = com_error

    def describe(self) -> str:
        if self._app is None or self._com_error is None:
            return f"{self._config.prog_id} (not connected)"
        with _com_call("Application.Version", self._com_error):
            return f"{self._app.Name} {self._app.Version}"

    def open(self, path: Path) -> InDesignDocument:
        if self._app is None or self._com_error is None:
            raise ServiceUnavailableError("InDesign service not started")
        with _com_call(f"Application.Open({path.name})", self._com_error):
            document = self._app.Open(str(path), self._config.show_window)
        return InDesignDocument(document, self._constants, self._com_error)

    def shutdown(self) -> None:
        self._app = None
        self._constants = None
        self._com_error = None
