from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from .adapters.base import DocumentHandle, DocumentService, ExportFormat, ReferenceState
from .config import RunConfig
from .logging import RunLogger
from .models import ConversionResult, FileRef


class ConversionError(RuntimeError):
    def __init__(self, code: str, step: str, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.step = step


@dataclass(slots=True)
class _ConversionContext:
    source: FileRef
    warnings: list[str] = field(default_factory=list)
    preview: Path | None = None


class ConversionPipeline:
    """Converts one source document: open, reconcile links, export, close.

    Every document that was opened is closed again, whatever happened in
    between. Failures are logged and turned into a ``FAILED`` result rather
    than raised, so a batch always moves on to the next file.
    """

    def __init__(self, service: DocumentService, config: RunConfig, logger: RunLogger) -> None:
        self._service = service
        self._config = config
        self._logger = logger

    def convert(self, source: FileRef) -> ConversionResult:
        self._logger.info(f"Convert InDesign file to IDML: {source.path}")
        context = _ConversionContext(source=source)
        handle: DocumentHandle | None = None
        try:
            handle = self._open(source)
            if self._config.resolve_missing_references:
                self._reconcile_references(handle, context)
            if self._config.export_preview:
                self._export_preview(handle, context)
            artifact = self._export_primary(handle, context)
        except ConversionError as exc:
            self._logger.error(f"{exc.step}():: {exc}")
            result = ConversionResult.failed(source, f"{exc.code}: {exc}", warnings=context.warnings)
        except Exception as exc:  # host errors outside the service contract
            self._logger.error(f"convert():: {exc}")
            result = ConversionResult.failed(source, f"UNKNOWN: {exc}", warnings=context.warnings)
        else:
            result = ConversionResult.converted(
                source, artifact, preview=context.preview, warnings=context.warnings
            )
        finally:
            if handle is not None:
                self._close(handle, source)
        return result

    def _open(self, source: FileRef) -> DocumentHandle:
        try:
            return self._service.open(source.path)
        except Exception as exc:
            raise ConversionError("OPEN_FAILED", "open", str(exc)) from exc

    def _reconcile_references(self, handle: DocumentHandle, context: _ConversionContext) -> None:
        try:
            references = list(handle.references)
        except Exception as exc:
            self._logger.error(f"reconcile_references():: {exc}")
            context.warnings.append(f"Links not checked: {exc}")
            return
        for reference in references:
            path = "<unknown>"
            try:
                path = reference.path
                state = reference.state
                if state is ReferenceState.STALE:
                    reference.refresh()
                    self._logger.debug(f"Link updated: {path}")
                elif state is ReferenceState.MISSING:
                    message = f"Link missing: {path}"
                    self._logger.warning(message)
                    context.warnings.append(message)
            except Exception as exc:
                self._logger.error(f"reconcile_references()::refresh:: {path}:: {exc}")
                context.warnings.append(f"Link not resolved: {path}: {exc}")

    def _export_preview(self, handle: DocumentHandle, context: _ConversionContext) -> None:
        preview_path = context.source.preview_path
        self._logger.info(f"Exporting '{context.source.name}' as PDF file.")
        try:
            handle.export(ExportFormat.PREVIEW_DOCUMENT, preview_path)
        except Exception as exc:
            self._logger.error(f"export_preview():: {exc}")
            context.warnings.append(f"Preview export failed: {exc}")
            return
        context.preview = preview_path
        self._logger.info(f"PDF file exported: {preview_path}")

    def _export_primary(self, handle: DocumentHandle, context: _ConversionContext) -> Path:
        idml_path = context.source.idml_path
        try:
            handle.export(ExportFormat.PRIMARY_INTERCHANGE, idml_path)
        except Exception as exc:
            raise ConversionError("EXPORT_FAILED", "export_primary", str(exc)) from exc
        self._logger.info(f"IDML file saved: {idml_path}")
        return idml_path

    def _close(self, handle: DocumentHandle, source: FileRef) -> None:
        try:
            handle.close(discard_changes=True)
        except Exception as exc:
            self._logger.error(f"close():: {exc}")
            return
        self._logger.debug(f"Document closed: {source.path}")


__all__ = ["ConversionError", "ConversionPipeline"]
