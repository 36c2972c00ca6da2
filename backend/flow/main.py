"""
FastAPI Backend Entry Point
Flow Market Intelligence export backend
"""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from flow.api import export_routes, reference_routes, schedule_routes
from flow.core.config import Settings, settings as default_settings
from flow.services.export_service import ExportService, create_export_service
from flow.services.reference_data import ReferenceData
from flow.services.schedule_service import HostedBackendClient, ScheduleService

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings = None,
    export_service: ExportService = None,
    schedule_service: ScheduleService = None,
) -> FastAPI:
    """Build one application instance with its own services on app.state"""
    settings = settings or default_settings
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title="Flow Export API",
        description="Report, deck and workbook exports for the Flow Market Intelligence Platform",
        version="1.0.0",
    )

    # Allow React dev server
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if export_service is None:
        export_service = create_export_service(
            reference=ReferenceData(),
            export_dir=settings.EXPORT_DIR,
            brand=settings.FLOW_BRAND,
        )
    if schedule_service is None and settings.use_hosted_backend:
        schedule_service = ScheduleService(HostedBackendClient(
            settings.SUPABASE_URL, settings.SUPABASE_ANON_KEY, timeout=settings.SUPABASE_TIMEOUT,
        ))
    if schedule_service is None:
        logger.info("Hosted backend not configured; scheduled export routes will return 503")

    app.state.settings = settings
    app.state.export_service = export_service
    app.state.reference = export_service.reference
    app.state.schedule_service = schedule_service

    # Include routers
    app.include_router(export_routes.router, prefix="/api/export", tags=["Export"])
    app.include_router(reference_routes.router, prefix="/api/reference", tags=["Reference"])
    app.include_router(schedule_routes.router, prefix="/api/schedules", tags=["Schedules"])

    @app.get("/api/health")
    def health_check():
        return {
            "status": "ok",
            "service": "Flow Export Backend",
            "snapshot": app.state.reference.version,
            "scheduled_exports": app.state.schedule_service is not None,
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("flow.main:app", host="0.0.0.0", port=8000, reload=True)
