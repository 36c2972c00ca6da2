"""
Export API Routes: download the market intelligence report, deck or workbook.
Endpoints:
  POST /api/export/{format}           (pdf | ppt | excel) streamed as attachment
  POST /api/export/{format}/deliver   build in the background into EXPORT_DIR
"""
import logging
from typing import Any
from urllib.parse import quote

from fastapi import APIRouter, BackgroundTasks, Body, HTTPException, Request, Path as URLPath
from fastapi.responses import StreamingResponse

from flow.services.export_service import ExportError, ExportRequest, ExportService

logger = logging.getLogger(__name__)

router = APIRouter()


def _parse_request(export_format: str, payload: Any) -> ExportRequest:
    try:
        return ExportRequest.from_payload(export_format, payload)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


def _deliver(service: ExportService, export_request: ExportRequest):
    try:
        service.export(export_request)
    except ExportError as e:
        # already logged with traceback by the service
        logger.warning("Background export %s not delivered: %s", export_request.format.value, e)


@router.post("/{export_format}")
def export_document(
    request: Request,
    export_format: str = URLPath(..., description="pdf, ppt or excel"),
    payload: Any = Body(None),
):
    """Build the export and stream it back as a file download."""
    export_request = _parse_request(export_format, payload)
    service: ExportService = request.app.state.export_service

    try:
        artifact = service.build(export_request)
    except ExportError as e:
        raise HTTPException(status_code=500, detail=str(e))

    return StreamingResponse(
        artifact.as_stream(),
        media_type=artifact.media_type,
        headers={"Content-Disposition": f"attachment; filename*=utf-8''{quote(artifact.filename)}"}
    )


@router.post("/{export_format}/deliver", status_code=202)
def deliver_document(
    request: Request,
    background_tasks: BackgroundTasks,
    export_format: str = URLPath(..., description="pdf, ppt or excel"),
    payload: Any = Body(None),
):
    """Queue the export for the configured delivery sink."""
    export_request = _parse_request(export_format, payload)
    service: ExportService = request.app.state.export_service
    background_tasks.add_task(_deliver, service, export_request)
    return {
        "status": "queued",
        "format": export_request.format.value,
        "selected_countries": list(export_request.selected_countries),
    }
