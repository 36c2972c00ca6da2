"""
Export Orchestrator - turns an export request into a finished PDF or workbook
and hands it to a delivery sink.
"""
from __future__ import annotations

import io
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Callable, Iterable, Mapping, Tuple

from .canvas import ExportArtifact
from .layout_composer import LayoutComposer
from .reference_data import ReferenceData
from .workbook_composer import WorkbookComposer

logger = logging.getLogger(__name__)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

EXPORT_FAILED_MESSAGE = "Failed to generate export. Please try again or contact support."

Clock = Callable[[], datetime]
DeliverySink = Callable[[ExportArtifact], None]


class ExportError(Exception):
    """Raised when an export cannot be produced; carries a user-facing message"""


class ExportFormat(str, Enum):
    PDF = "pdf"
    EXCEL = "excel"
    PPT = "ppt"


FILENAME_PREFIXES = {
    ExportFormat.PDF: ("Flow-Market-Intelligence-Report", "pdf"),
    ExportFormat.PPT: ("Flow-Professional-Deck", "pdf"),
    ExportFormat.EXCEL: ("Flow-Market-Data", "xlsx"),
}


def _normalize_ids(values: Iterable) -> Tuple[str, ...]:
    if isinstance(values, str):
        raise ValueError("Expected a list of identifiers, got a string")
    seen = set()
    ids = []
    for value in values or ():
        if not isinstance(value, str):
            raise ValueError(f"Identifiers must be strings, got {type(value).__name__}")
        # dedupe case-insensitively, keep the first spelling for display
        key = value.strip().lower()
        if key and key not in seen:
            seen.add(key)
            ids.append(value.strip())
    return tuple(ids)


@dataclass(frozen=True)
class ExportRequest:
    """One export action: which markets, which cities, which format"""
    format: ExportFormat
    selected_countries: Tuple[str, ...] = field(default_factory=tuple)
    selected_cities: Tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_payload(cls, export_format, payload: Mapping = None) -> "ExportRequest":
        """Build a request from loose input. Raises ValueError on a bad format or ids."""
        if payload is None:
            payload = {}
        if not isinstance(payload, Mapping):
            raise ValueError(f"Export payload must be a JSON object, got {type(payload).__name__}")
        try:
            fmt = ExportFormat(str(export_format).strip().lower())
        except ValueError:
            allowed = ", ".join(f.value for f in ExportFormat)
            raise ValueError(f"Unsupported export format '{export_format}'. Use one of: {allowed}")
        return cls(
            format=fmt,
            selected_countries=_normalize_ids(payload.get("selected_countries")),
            selected_cities=_normalize_ids(payload.get("selected_cities")),
        )


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def export_filename(export_format: ExportFormat, generated_at: datetime) -> str:
    prefix, extension = FILENAME_PREFIXES[export_format]
    if generated_at.tzinfo is not None:
        generated_at = generated_at.astimezone(timezone.utc)
    return f"{prefix}-{generated_at.date().isoformat()}.{extension}"


class DirectoryDelivery:
    """Delivery sink that writes artifacts into an export directory"""

    def __init__(self, export_dir):
        self.export_dir = Path(export_dir)

    def __call__(self, artifact: ExportArtifact) -> None:
        self.export_dir.mkdir(parents=True, exist_ok=True)
        target = self.export_dir / artifact.filename
        target.write_bytes(artifact.content)
        logger.info("Wrote %s (%d bytes)", target, len(artifact.content))


class ExportService:
    """Service for exporting market intelligence as PDF report, PDF deck or workbook"""

    def __init__(
        self,
        reference: ReferenceData,
        layout_composer: LayoutComposer,
        workbook_composer: WorkbookComposer,
        deliver: DeliverySink,
        clock: Clock = utc_now,
    ):
        self.reference = reference
        self.layout_composer = layout_composer
        self.workbook_composer = workbook_composer
        self.deliver = deliver
        self.clock = clock

    def build(self, request: ExportRequest) -> ExportArtifact:
        """Compose the requested document. Any failure surfaces as ExportError."""
        generated_at = self.clock()
        filename = export_filename(request.format, generated_at)
        try:
            if request.format is ExportFormat.EXCEL:
                wb = self.workbook_composer.build_workbook(request)
                buffer = io.BytesIO()
                wb.save(buffer)
                artifact = ExportArtifact(filename=filename, media_type=XLSX_MEDIA_TYPE, content=buffer.getvalue())
            elif request.format is ExportFormat.PPT:
                artifact = self.layout_composer.build_deck(request, generated_at).save(filename)
            else:
                artifact = self.layout_composer.build_report(request, generated_at).save(filename)
        except Exception as e:
            logger.exception("Export %s failed for countries=%s: %s",
                             request.format.value, list(request.selected_countries), e)
            raise ExportError(EXPORT_FAILED_MESSAGE) from e

        logger.info("Built %s (%d bytes)", artifact.filename, len(artifact.content))
        return artifact

    def export(self, request: ExportRequest) -> None:
        """Build and hand the artifact to the delivery sink"""
        artifact = self.build(request)
        try:
            self.deliver(artifact)
        except Exception as e:
            logger.exception("Delivery of %s failed: %s", artifact.filename, e)
            raise ExportError(EXPORT_FAILED_MESSAGE) from e


def create_export_service(reference: ReferenceData = None, export_dir="exports", brand: str = "FLOW",
                          clock: Clock = utc_now, deliver: DeliverySink = None) -> ExportService:
    """Wire an ExportService with its default collaborators"""
    reference = reference or ReferenceData()
    return ExportService(
        reference=reference,
        layout_composer=LayoutComposer(reference, brand=brand),
        workbook_composer=WorkbookComposer(reference),
        deliver=deliver or DirectoryDelivery(export_dir),
        clock=clock,
    )
