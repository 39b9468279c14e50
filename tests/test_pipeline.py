from pathlib import Path

from indd2idml.adapters.base import ExportFormat, ReferenceState
from indd2idml.core import ConversionPipeline
from indd2idml.models import ConversionStatus, FileRef

from conftest import FakeReference, FakeService, build_run_config, make_source, read_lines


def convert(service: FakeService, logger, source: Path, **options):
    config = build_run_config(logger.path, **options)
    return ConversionPipeline(service, config, logger).convert(FileRef(source))


def test_report_with_preview_creates_both_artifacts(tmp_path, service, logger):
    source = make_source(tmp_path / "Report.indd")
    result = convert(service, logger, source, export_preview=True)
    logger.close()

    assert result.status is ConversionStatus.CONVERTED
    assert result.artifact == tmp_path / "Report.idml"
    assert result.preview == tmp_path / "Report_preview.pdf"
    assert (tmp_path / "Report.idml").exists()
    assert (tmp_path / "Report_preview.pdf").exists()
    lines = read_lines(logger.path)
    assert "DEBUG: Document closed:" in lines[-1]
    assert service.closed == [source]


def test_open_failure_is_terminal_for_the_file(tmp_path, logger):
    service = FakeService(fail_open={"Broken.indd"})
    source = make_source(tmp_path / "Broken.indd")
    result = convert(service, logger, source)
    logger.close()

    assert result.status is ConversionStatus.FAILED
    assert result.reason.startswith("OPEN_FAILED")
    assert service.closed == []
    assert service.exports == []
    assert any("ERROR: open():: cannot open Broken.indd" in line for line in read_lines(logger.path))


def test_primary_export_failure_still_closes(tmp_path, logger):
    service = FakeService(fail_exports={"Book.indd": {ExportFormat.PRIMARY_INTERCHANGE}})
    source = make_source(tmp_path / "Book.indd")
    result = convert(service, logger, source)
    logger.close()

    assert result.status is ConversionStatus.FAILED
    assert result.reason.startswith("EXPORT_FAILED")
    assert service.closed == [source]
    lines = read_lines(logger.path)
    assert any("ERROR: export_primary():: idml export refused" in line for line in lines)
    assert "DEBUG: Document closed:" in lines[-1]


def test_preview_failure_does_not_block_primary_export(tmp_path, logger):
    service = FakeService(fail_exports={"Flyer.indd": {ExportFormat.PREVIEW_DOCUMENT}})
    source = make_source(tmp_path / "Flyer.indd")
    result = convert(service, logger, source, export_preview=True)
    logger.close()

    assert result.status is ConversionStatus.CONVERTED_WITH_WARNINGS
    assert result.preview is None
    assert (tmp_path / "Flyer.idml").exists()
    assert not (tmp_path / "Flyer_preview.pdf").exists()
    assert any("ERROR: export_preview():: pdf export refused" in line for line in read_lines(logger.path))


def test_stale_links_refreshed_and_missing_links_warned(tmp_path, logger):
    stale = FakeReference("/assets/logo.ai", ReferenceState.STALE)
    missing = FakeReference("/assets/photo.tif", ReferenceState.MISSING)
    current = FakeReference("/assets/font.otf", ReferenceState.CURRENT)
    service = FakeService(references={"Poster.indd": [stale, missing, current]})
    source = make_source(tmp_path / "Poster.indd")
    result = convert(service, logger, source)
    logger.close()

    assert stale.refreshed == 1
    assert current.refreshed == 0
    assert result.status is ConversionStatus.CONVERTED_WITH_WARNINGS
    assert result.warnings == ["Link missing: /assets/photo.tif"]
    assert any("WARNING: Link missing: /assets/photo.tif" in line for line in read_lines(logger.path))


def test_links_untouched_when_resolution_disabled(tmp_path, logger):
    stale = FakeReference("/assets/logo.ai", ReferenceState.STALE)
    service = FakeService(references={"Poster.indd": [stale]})
    source = make_source(tmp_path / "Poster.indd")
    result = convert(service, logger, source, resolve_missing_references=False)

    assert stale.refreshed == 0
    assert result.status is ConversionStatus.CONVERTED


def test_failed_refresh_is_not_fatal(tmp_path, logger):
    broken = FakeReference("/assets/logo.ai", ReferenceState.STALE, fail_refresh=True)
    service = FakeService(references={"Poster.indd": [broken]})
    source = make_source(tmp_path / "Poster.indd")
    result = convert(service, logger, source)
    logger.close()

    assert result.succeeded
    assert (tmp_path / "Poster.idml").exists()
    assert result.status is ConversionStatus.CONVERTED_WITH_WARNINGS
    assert result.warnings == ["Link not resolved: /assets/logo.ai: cannot update /assets/logo.ai"]
    assert any("reconcile_references()::refresh::" in line for line in read_lines(logger.path))


def test_unreadable_links_are_reported_as_warning(tmp_path, logger):
    service = FakeService(fail_references={"Poster.indd"})
    source = make_source(tmp_path / "Poster.indd")
    result = convert(service, logger, source)
    logger.close()

    assert result.status is ConversionStatus.CONVERTED_WITH_WARNINGS
    assert result.warnings == ["Links not checked: links unavailable"]
    assert (tmp_path / "Poster.idml").exists()
    assert any(
        "ERROR: reconcile_references():: links unavailable" in line for line in read_lines(logger.path)
    )


def test_close_failure_keeps_successful_result(tmp_path, logger):
    service = FakeService(fail_close={"Menu.indd"})
    source = make_source(tmp_path / "Menu.indd")
    result = convert(service, logger, source)
    logger.close()

    assert result.status is ConversionStatus.CONVERTED
    assert any("ERROR: close():: close refused" in line for line in read_lines(logger.path))


def test_every_input_yields_one_result(tmp_path, logger):
    service = FakeService(fail_open={"b.indd"})
    sources = [make_source(tmp_path / name) for name in ("a.indd", "b.indd", "c.indd")]
    config = build_run_config(logger.path)
    pipeline = ConversionPipeline(service, config, logger)
    results = [pipeline.convert(FileRef(source)) for source in sources]

    assert [result.source.path for result in results] == sources
    assert [result.succeeded for result in results] == [True, False, True]
    assert len(service.closed) == len(service.opened) == 2


def test_reconversion_overwrites_artifacts(tmp_path, service, logger):
    source = make_source(tmp_path / "Report.indd")
    convert(service, logger, source, export_preview=True)
    first = sorted(p.name for p in tmp_path.iterdir())
    convert(service, logger, source, export_preview=True)
    second = sorted(p.name for p in tmp_path.iterdir())

    assert first == second
    assert (tmp_path / "Report.idml").read_text(encoding="utf-8") == "idml:Report.indd"
