"""Read-only HTTP API over the RCA engine."""

import asyncio
from contextlib import asynccontextmanager
from typing import Annotated, Literal, Optional

from fastapi import APIRouter, FastAPI, HTTPException, Query, Request
from fastapi.responses import PlainTextResponse

from .bootstrap import RCAService, build_rca_service
from .logging import build_logger
from .report import DEFAULT_HOURS_BACK, render_report_text

router = APIRouter(prefix="/api/rca", tags=["rca"])
logger = build_logger("support_rca.api")

HoursQuery = Annotated[int, Query(ge=1, description="Number of hours to look back.")]


def _service(request: Request) -> RCAService:
    return request.app.state.rca


@router.get("/report")
def get_report(
    request: Request,
    hours: HoursQuery = DEFAULT_HOURS_BACK,
    format: Literal["json", "text"] = Query("json", description="Output format: json or text."),
):
    """Run an on-demand analysis over the last ``hours`` hours."""
    logger.info("rca_report_requested", hours=hours, format=format)
    report = _service(request).builder.analyze(hours_back=hours, include_summary=True)
    if format == "text":
        return PlainTextResponse(render_report_text(report))
    return {"success": True, "report": report.to_json()}


@router.get("/stats")
def get_stats(request: Request, hours: HoursQuery = DEFAULT_HOURS_BACK):
    """Headline numbers without a summary, for polling dashboards."""
    service = _service(request)
    stats = service.builder.quick_stats(hours_back=hours)
    return {
        "success": True,
        "time_window_hours": hours,
        "stats": {
            **stats.model_dump(mode="json", exclude_none=True),
            "store": service.store.stats().model_dump(mode="json", exclude_none=True),
        },
    }


@router.get("/reports/latest")
def get_latest_report(request: Request):
    repository = _service(request).repository
    pointer = repository.latest()
    if pointer is None:
        raise HTTPException(status_code=404, detail="No RCA report has been generated yet")
    return {"success": True, "report_id": pointer.report_id, "report": repository.get(pointer.report_id)}


@router.get("/reports/{report_id}")
def get_stored_report(request: Request, report_id: str):
    document = _service(request).repository.get(report_id)
    if document is None:
        raise HTTPException(status_code=404, detail=f"Unknown report {report_id!r}")
    return {"success": True, "report_id": report_id, "report": document}


def create_app(service: Optional[RCAService] = None) -> FastAPI:
    """Build the API; the scheduler runs alongside it when enabled in settings."""

    rca = service or build_rca_service(configure_logs=True)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        task = None
        if rca.settings.scheduler.enabled:
            task = asyncio.create_task(rca.scheduler.run())
        try:
            yield
        finally:
            if task is not None:
                rca.scheduler.shutdown()
                await task

    app = FastAPI(
        title="Support RCA API",
        description="Failure aggregation and root cause analysis reports",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.rca = rca
    app.include_router(router)
    return app
