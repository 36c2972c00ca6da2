# Tests configuration for the Flow export backend
import pytest
from datetime import datetime, timezone

from flow.services.export_service import ExportRequest, ExportService
from flow.services.layout_composer import LayoutComposer
from flow.services.reference_data import ReferenceData
from flow.services.workbook_composer import WorkbookComposer

FIXED_NOW = datetime(2025, 1, 15, 10, 30, tzinfo=timezone.utc)


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def reference():
    return ReferenceData()


@pytest.fixture
def layout_composer(reference):
    return LayoutComposer(reference)


@pytest.fixture
def workbook_composer(reference):
    return WorkbookComposer(reference)


@pytest.fixture
def delivered():
    """Collects artifacts handed to the delivery sink."""
    return []


@pytest.fixture
def export_service(reference, layout_composer, workbook_composer, delivered):
    return ExportService(
        reference=reference,
        layout_composer=layout_composer,
        workbook_composer=workbook_composer,
        deliver=delivered.append,
        clock=lambda: FIXED_NOW,
    )


@pytest.fixture
def make_request():
    def _make(export_format="pdf", countries=(), cities=()):
        return ExportRequest.from_payload(export_format, {
            "selected_countries": list(countries),
            "selected_cities": list(cities),
        })
    return _make
