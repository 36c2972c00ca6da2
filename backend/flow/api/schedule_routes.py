"""
Schedule API Routes: manage scheduled export metadata on the hosted backend.
Endpoints:
  GET    /api/schedules?user_id=...
  POST   /api/schedules
  PATCH  /api/schedules/{export_id}/toggle
  DELETE /api/schedules/{export_id}
  GET    /api/schedules/presets
"""
from typing import Any, Dict

from fastapi import APIRouter, Body, HTTPException, Query, Request

from flow.services.schedule_service import SCHEDULE_PRESETS, BackendError, ScheduleService

router = APIRouter()


def _service(request: Request) -> ScheduleService:
    service = getattr(request.app.state, "schedule_service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="Scheduled exports are not configured")
    return service


@router.get("/presets")
def list_presets():
    return SCHEDULE_PRESETS


@router.get("")
def list_schedules(request: Request, user_id: str = Query(...)):
    service = _service(request)
    try:
        return [s.to_dict() for s in service.list_for_user(user_id)]
    except BackendError as e:
        raise HTTPException(status_code=502, detail=str(e))


@router.post("", status_code=201)
def create_schedule(request: Request, payload: Dict[str, Any] = Body(...)):
    service = _service(request)
    user_id = payload.get("user_id")
    if not user_id:
        raise HTTPException(status_code=400, detail="Missing user_id in payload")
    try:
        created = service.create(
            user_id=user_id,
            name=payload.get("name", ""),
            export_type=payload.get("export_type", "pdf"),
            schedule=payload.get("schedule", "daily"),
            config=payload.get("config") or {},
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except BackendError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return created.to_dict()


@router.patch("/{export_id}/toggle")
def toggle_schedule(export_id: str, request: Request, payload: Dict[str, Any] = Body(...)):
    service = _service(request)
    if "is_active" not in payload:
        raise HTTPException(status_code=400, detail="Missing is_active in payload")
    try:
        updated = service.toggle(export_id, bool(payload["is_active"]))
    except BackendError as e:
        raise HTTPException(status_code=502, detail=str(e))
    if updated is None:
        raise HTTPException(status_code=404, detail=f"Unknown scheduled export '{export_id}'")
    return updated.to_dict()


@router.delete("/{export_id}", status_code=204)
def delete_schedule(export_id: str, request: Request):
    service = _service(request)
    try:
        service.delete(export_id)
    except BackendError as e:
        raise HTTPException(status_code=502, detail=str(e))
