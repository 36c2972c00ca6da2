from .reference_data import ReferenceData
from .canvas import DocumentCanvas, ExportArtifact, CanvasClosedError
from .layout_composer import LayoutComposer
from .workbook_composer import WorkbookComposer
from .export_service import ExportService, ExportRequest, ExportFormat, ExportError, create_export_service
from .schedule_service import ScheduleService, HostedBackendClient, BackendError

__all__ = [
    "ReferenceData",
    "DocumentCanvas",
    "ExportArtifact",
    "CanvasClosedError",
    "LayoutComposer",
    "WorkbookComposer",
    "ExportService",
    "ExportRequest",
    "ExportFormat",
    "ExportError",
    "create_export_service",
    "ScheduleService",
    "HostedBackendClient",
    "BackendError",
]
