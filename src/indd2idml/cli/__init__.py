from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from ..adapters import create_service
from ..config import AppConfig, apply_settings, build_run_config, dump_config, load_config
from ..logging import LoggerSetupError
from ..models import ConversionResult, ConversionStatus, RunReport
from ..orchestrator import BatchOrchestrator
from ..settings import get_settings
from .prompts import ConsoleOperator

console = Console()

app = typer.Typer(help="Batch-convert InDesign documents to IDML")

_STATUS_STYLE = {
    ConversionStatus.CONVERTED: "[green]converted[/green]",
    ConversionStatus.CONVERTED_WITH_WARNINGS: "[yellow]warnings[/yellow]",
    ConversionStatus.FAILED: "[red]failed[/red]",
}


def _load_config(path: Path | None) -> AppConfig:
    settings = get_settings()
    return apply_settings(load_config(path or settings.config_path), settings)


def _print_result(result: ConversionResult) -> None:
    console.print(f"{_STATUS_STYLE[result.status]} {result.source.path}")


def _print_report(report: RunReport) -> None:
    if not report.results:
        console.print("Nothing converted.")
        return
    table = Table(title=f"Run {report.run_id}")
    table.add_column("Source")
    table.add_column("Status")
    table.add_column("Output")
    table.add_column("Notes")
    for result in report.results:
        outputs = [str(p) for p in (result.artifact, result.preview) if p is not None]
        notes = result.reason or "; ".join(result.warnings) or "-"
        table.add_row(str(result.source.path), _STATUS_STYLE[result.status], "\n".join(outputs) or "-", notes)
    console.print(table)
    summary = report.summary
    console.print(
        f"Processed {summary.total} files: {summary.converted} converted, "
        f"{summary.with_warnings} with warnings, {summary.failed} failed."
    )


@app.command()
def convert(
    target: Path | None = typer.Argument(
        None, help="INDD file (single mode) or folder to scan (recursive mode)"
    ),
    recursive: bool | None = typer.Option(
        None, "--recursive/--single", help="Scan a folder and its subfolders, or convert one file"
    ),
    preview: bool | None = typer.Option(
        None, "--preview/--no-preview", help="Also export <name>_preview.pdf"
    ),
    update_links: bool | None = typer.Option(
        None, "--update-links/--no-update-links", help="Refresh stale links and report missing ones"
    ),
    log_file: Path | None = typer.Option(None, "--log-file", help="Log file to append to"),
    log_level: str | None = typer.Option(
        None, "--log-level", help="DEBUG, INFO, WARNING, ERROR or CRITICAL"
    ),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip prompts and use defaults"),
    config: Path | None = typer.Option(None, "--config", help="Path to config.toml"),
) -> None:
    cfg = _load_config(config)
    operator = ConsoleOperator(console, interactive=not yes)
    if recursive is None:
        recursive = operator.confirm(
            "Convert all InDesign files from a folder and its subfolders to IDML? "
            "Otherwise, convert just a single file.",
            default=False,
        )
    if preview is None:
        preview = operator.confirm("Export also a PDF file?", default=cfg.runtime.export_preview)
    run_config = build_run_config(
        cfg,
        recursive=recursive,
        export_preview=preview,
        target=target,
        resolve_missing_references=update_links,
        log_level=log_level,
        log_file=log_file,
    )

    orchestrator = BatchOrchestrator(
        create_service(cfg),
        operator,
        summary_csv=cfg.runtime.summary_csv,
        on_result=_print_result,
    )
    try:
        report = orchestrator.run(run_config)
    except LoggerSetupError as exc:
        raise typer.Exit(2) from exc
    except Exception as exc:
        raise typer.Exit(1) from exc

    _print_report(report)
    console.print(f"Log file: {run_config.log_file}")
    if report.summary.failed:
        raise typer.Exit(1)


@app.command()
def show_config(
    config: Path | None = typer.Option(None, "--config", help="Path to config.toml"),
) -> None:
    """Print the effective configuration as JSON."""
    console.print_json(dump_config(_load_config(config)))


if __name__ == "__main__":
    app()
