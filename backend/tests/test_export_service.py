"""Tests for request parsing, dispatch, filenames and failure handling."""

from datetime import datetime, timezone, timedelta
from io import BytesIO

import pytest
from openpyxl import load_workbook

from flow.services.export_service import (
    EXPORT_FAILED_MESSAGE, DirectoryDelivery, ExportError, ExportFormat, ExportRequest, ExportService,
    create_export_service, export_filename,
)


class TestExportRequest:
    def test_from_payload_normalizes(self):
        request = ExportRequest.from_payload("PDF", {
            "selected_countries": ["Indonesia", "singapore", "INDONESIA", " vietnam "],
            "selected_cities": ["Bangkok"],
        })
        assert request.format is ExportFormat.PDF
        assert request.selected_countries == ("Indonesia", "singapore", "vietnam")
        assert request.selected_cities == ("Bangkok",)

    def test_missing_payload_means_empty_selection(self):
        request = ExportRequest.from_payload("excel")
        assert request.selected_countries == ()
        assert request.selected_cities == ()

    @pytest.mark.parametrize("fmt", ["docx", "", "pptx"])
    def test_bad_format(self, fmt):
        with pytest.raises(ValueError):
            ExportRequest.from_payload(fmt, {})

    def test_bad_ids(self):
        with pytest.raises(ValueError):
            ExportRequest.from_payload("pdf", {"selected_countries": "indonesia"})
        with pytest.raises(ValueError):
            ExportRequest.from_payload("pdf", {"selected_countries": [1, 2]})

    def test_payload_must_be_mapping(self):
        with pytest.raises(ValueError):
            ExportRequest.from_payload("pdf", ["indonesia"])

    def test_mixed_case_ids_keep_first_spelling(self):
        request = ExportRequest.from_payload("excel", {"selected_countries": ["newZealand", "NEWZEALAND"]})
        assert request.selected_countries == ("newZealand",)

    def test_request_is_immutable(self):
        request = ExportRequest.from_payload("pdf", {})
        with pytest.raises(Exception):
            request.format = ExportFormat.EXCEL


class TestFilenames:
    @pytest.mark.parametrize("fmt, expected", [
        (ExportFormat.PDF, "Flow-Market-Intelligence-Report-2025-01-15.pdf"),
        (ExportFormat.PPT, "Flow-Professional-Deck-2025-01-15.pdf"),
        (ExportFormat.EXCEL, "Flow-Market-Data-2025-01-15.xlsx"),
    ])
    def test_deterministic_for_fixed_date(self, fixed_now, fmt, expected):
        assert export_filename(fmt, fixed_now) == expected

    def test_date_is_utc(self):
        late_evening_west = datetime(2025, 1, 15, 22, 0, tzinfo=timezone(timedelta(hours=-5)))
        assert export_filename(ExportFormat.EXCEL, late_evening_west) == "Flow-Market-Data-2025-01-16.xlsx"


class TestBuild:
    def test_pdf_report(self, export_service, make_request):
        artifact = export_service.build(make_request("pdf", ["indonesia"]))
        assert artifact.filename == "Flow-Market-Intelligence-Report-2025-01-15.pdf"
        assert artifact.media_type == "application/pdf"
        assert artifact.content.startswith(b"%PDF")

    def test_ppt_deck_is_pdf(self, export_service, make_request):
        artifact = export_service.build(make_request("ppt", ["indonesia"]))
        assert artifact.filename == "Flow-Professional-Deck-2025-01-15.pdf"
        assert artifact.content.startswith(b"%PDF")

    def test_excel_workbook(self, export_service, make_request):
        artifact = export_service.build(make_request("excel", ["indonesia", "singapore"]))
        assert artifact.filename == "Flow-Market-Data-2025-01-15.xlsx"
        wb = load_workbook(BytesIO(artifact.content))
        assert len(wb.sheetnames) == 5
        overview = list(wb["Market Overview"].iter_rows(min_row=2, values_only=True))
        assert len(overview) == 2
        assert overview[0][0] == "Indonesia"

    def test_zero_countries_pdf(self, export_service, make_request):
        artifact = export_service.build(make_request("pdf", []))
        assert artifact.content.startswith(b"%PDF")

    def test_identical_requests_give_identical_workbook_cells(self, export_service, make_request):
        request = make_request("excel", ["indonesia", "singapore"])

        def cells(artifact):
            wb = load_workbook(BytesIO(artifact.content))
            return {ws.title: list(ws.iter_rows(values_only=True)) for ws in wb.worksheets}

        assert cells(export_service.build(request)) == cells(export_service.build(request))


class FailingComposer:
    def build_report(self, request, generated_at):
        raise RuntimeError("layout exploded")

    build_deck = build_report

    def build_workbook(self, request):
        raise KeyError("missing column")


class TestFailures:
    @pytest.fixture
    def failing_service(self, reference, delivered, fixed_now):
        return ExportService(
            reference=reference,
            layout_composer=FailingComposer(),
            workbook_composer=FailingComposer(),
            deliver=delivered.append,
            clock=lambda: fixed_now,
        )

    @pytest.mark.parametrize("fmt", ["pdf", "ppt", "excel"])
    def test_composer_failure_becomes_export_error(self, failing_service, make_request, fmt, caplog):
        with pytest.raises(ExportError) as excinfo:
            failing_service.export(make_request(fmt, ["indonesia"]))
        assert str(excinfo.value) == EXPORT_FAILED_MESSAGE
        assert excinfo.value.__cause__ is not None
        assert any(record.exc_info for record in caplog.records)

    def test_nothing_delivered_on_failure(self, failing_service, make_request, delivered):
        with pytest.raises(ExportError):
            failing_service.export(make_request("pdf", ["indonesia"]))
        assert delivered == []

    def test_delivery_failure_becomes_export_error(self, reference, layout_composer, workbook_composer,
                                                   fixed_now, make_request):
        def broken_sink(artifact):
            raise OSError("disk full")

        service = ExportService(reference, layout_composer, workbook_composer, broken_sink, lambda: fixed_now)
        with pytest.raises(ExportError):
            service.export(make_request("excel", ["indonesia"]))


class TestDelivery:
    def test_export_hands_artifact_to_sink(self, export_service, make_request, delivered):
        assert export_service.export(make_request("excel", ["vietnam"])) is None
        assert [a.filename for a in delivered] == ["Flow-Market-Data-2025-01-15.xlsx"]

    def test_directory_delivery_writes_file(self, tmp_path, fixed_now, make_request):
        service = create_export_service(export_dir=tmp_path / "out", clock=lambda: fixed_now)
        service.export(make_request("pdf", ["indonesia"]))
        written = tmp_path / "out" / "Flow-Market-Intelligence-Report-2025-01-15.pdf"
        assert written.read_bytes().startswith(b"%PDF")

    def test_directory_delivery_callable(self, tmp_path):
        from flow.services.canvas import ExportArtifact
        DirectoryDelivery(tmp_path)(ExportArtifact("a.txt", "text/plain", b"abc"))
        assert (tmp_path / "a.txt").read_bytes() == b"abc"
