from __future__ import annotations

from pathlib import Path
from typing import Callable, Protocol

from . import __version__
from .adapters.base import DocumentService
from .config import RunConfig, RunMode
from .constraint import BANNER
from .core import ConversionPipeline
from .logging import LoggerSetupError, LogLevel, RunLogger, append_summary_row
from .models import ConversionResult, FileRef, RunReport
from .utils import generate_run_id
from .walker import walk

ResultCallback = Callable[[ConversionResult], None]
LoggerFactory = Callable[[Path, LogLevel], RunLogger]


class Operator(Protocol):
    """The person running the batch: picks inputs and receives alerts."""

    def select_file(self, pattern: str) -> Path | None:  # pragma: no cover - interface
        ...

    def select_folder(self) -> Path | None:  # pragma: no cover - interface
        ...

    def alert(self, message: str) -> None:  # pragma: no cover - interface
        ...


class BatchOrchestrator:
    def __init__(
        self,
        service: DocumentService,
        operator: Operator,
        *,
        logger_factory: LoggerFactory = RunLogger,
        summary_csv: Path | None = None,
        on_result: ResultCallback | None = None,
    ) -> None:
        self._service = service
        self._operator = operator
        self._logger_factory = logger_factory
        self._summary_csv = summary_csv
        self._on_result = on_result or (lambda _: None)

    def run(self, config: RunConfig) -> RunReport:
        report = RunReport(run_id=generate_run_id())
        logger = self._logger_factory(config.log_file, config.log_level)
        try:
            logger.open()
        except LoggerSetupError as exc:
            self._operator.alert(str(exc))
            raise

        started = False
        try:
            logger.info(BANNER)
            logger.info(f"Start run {report.run_id}: indd2idml {__version__}")
            self._service.start()
            started = True
            logger.info(f"Environment {self._service.describe()}")
            logger.info(BANNER)
            self._log_options(logger, config)
            self._run_body(config, logger, report)
            logger.info(BANNER)
            logger.info(
                "Finished without serious errors. "
                "Check the log file for warnings and errors to get more details."
            )
            logger.info(
                f"Converted {report.summary.converted}, with warnings {report.summary.with_warnings}, "
                f"failed {report.summary.failed} of {report.summary.total} file(s)"
            )
            logger.info(f"Logfile: {logger.path.resolve()}")
            logger.info(BANNER)
            self._write_summary(logger, report)
        except Exception as exc:
            logger.error(f"run():: {exc}")
            self._operator.alert(f"Run aborted: {exc}")
            raise
        finally:
            if started:
                self._shutdown_service(logger)
            logger.info(BANNER)
            logger.info("Exit script")
            logger.info(BANNER)
            logger.close()
            self._report_write_errors(logger)

        return report

    def _log_options(self, logger: RunLogger, config: RunConfig) -> None:
        logger.info(f"Recursive scan and convert files from folders and subfolders: {config.recursive}")
        logger.info(f"Export all files also as PDF: {config.export_preview}")
        logger.info(f"Update links: {config.resolve_missing_references}")

    def _run_body(self, config: RunConfig, logger: RunLogger, report: RunReport) -> None:
        pipeline = ConversionPipeline(self._service, config, logger)
        if config.mode is RunMode.SINGLE:
            self._run_single(config, logger, pipeline, report)
        else:
            self._run_recursive(config, logger, pipeline, report)

    def _run_single(
        self,
        config: RunConfig,
        logger: RunLogger,
        pipeline: ConversionPipeline,
        report: RunReport,
    ) -> None:
        target = config.target or self._operator.select_file(config.pattern)
        if target is None:
            logger.info("No file selected. Nothing to convert.")
            return
        source = FileRef.from_path(target)
        if not source.path.is_file():
            reason = f"Source file does not exist: {source.path}"
            logger.error(f"run():: {reason}")
            self._record(report, ConversionResult.failed(source, f"NOT_FOUND: {reason}"))
            return
        self._record(report, pipeline.convert(source))

    def _run_recursive(
        self,
        config: RunConfig,
        logger: RunLogger,
        pipeline: ConversionPipeline,
        report: RunReport,
    ) -> None:
        root = config.target or self._operator.select_folder()
        if root is None:
            logger.info("No folder selected. Nothing to convert.")
            return
        if not root.is_dir():
            logger.error(f"run():: Folder does not exist: {root}")
            return

        def _on_walk_error(folder: Path, exc: OSError) -> None:
            logger.error(f"walk():: {folder}:: {exc}")

        logger.debug(f"Scan folder: {root}")
        for source in walk(root, config.pattern, on_error=_on_walk_error):
            self._record(report, pipeline.convert(source))

    def _record(self, report: RunReport, result: ConversionResult) -> None:
        report.record(result)
        self._on_result(result)

    def _write_summary(self, logger: RunLogger, report: RunReport) -> None:
        if self._summary_csv is None:
            return
        try:
            append_summary_row(self._summary_csv, report.summary, report.run_id)
        except OSError as exc:
            message = f"summary():: {self._summary_csv}:: {exc}"
            logger.error(message)
            self._operator.alert(message)
            return
        logger.debug(f"Summary row written: {self._summary_csv}")

    def _shutdown_service(self, logger: RunLogger) -> None:
        try:
            self._service.shutdown()
        except Exception as exc:
            logger.error(f"shutdown():: {exc}")

    def _report_write_errors(self, logger: RunLogger) -> None:
        if not logger.write_errors:
            return
        self._operator.alert(
            f"{len(logger.write_errors)} log line(s) could not be written to {logger.path}: "
            f"{logger.write_errors[0]}"
        )


__all__ = ["BatchOrchestrator", "Operator"]
