import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import HTMLResponse, JSONResponse

from wakeping.api_schemas import DebugResponse, HealthResponse, PingResponse
from wakeping.config import describe_environment, load_check_config, settings
from wakeping.formatting import render_status_page
from wakeping.runner import ConfigurationError, run, validate_config
from wakeping.scheduling import build_scheduler, window_from_settings
from wakeping.timestamps import utcnow_iso

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)
schedule_window = window_from_settings()


@asynccontextmanager
async def lifespan(_: FastAPI):
    scheduler = None
    if settings.SCHEDULER_ENABLED:
        scheduler = build_scheduler(schedule_window)
        scheduler.start()
    else:
        logger.info("Scheduler disabled; checks run only via /ping")
    yield
    if scheduler is not None:
        scheduler.shutdown(wait=False)


app = FastAPI(
    title="wake-ping",
    version="1.0.0",
    description=(
        "Scheduled health-check agent that pings a configured endpoint, "
        "retries with backoff and exposes a manual trigger."
    ),
    lifespan=lifespan,
)


def _is_configured(config) -> bool:
    try:
        validate_config(config)
    except ConfigurationError:
        return False
    return True


@app.get("/", response_class=HTMLResponse, include_in_schema=False)
@app.get(
    "/status",
    response_class=HTMLResponse,
    tags=["system"],
    summary="Status Page",
    description="Human-readable configuration and schedule overview.",
)
def status_page():
    config = load_check_config()
    return render_status_page(
        config,
        schedule=schedule_window.describe(),
        configured=_is_configured(config),
    )


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["system"],
    summary="Health Check",
    description="Liveness endpoint used by probes and orchestration.",
)
def health():
    return {"status": "ok"}


@app.api_route(
    "/ping",
    methods=["GET", "POST"],
    response_model=PingResponse,
    responses={500: {"model": PingResponse, "description": "Health check failed"}},
    tags=["checks"],
    summary="Run Health Check Now",
    description="Runs the full check with retries and reports the outcome.",
)
async def ping():
    outcome = await run(load_check_config())
    if outcome.succeeded:
        attempts = len(outcome.attempts)
        body = PingResponse(
            success=True,
            message=f"Health check succeeded on attempt {attempts} for {outcome.target_url}",
            timestamp=utcnow_iso(),
        )
        return JSONResponse(status_code=200, content=body.model_dump(exclude_none=True))

    body = PingResponse(
        success=False,
        error=outcome.final_error or "Health check failed",
        timestamp=utcnow_iso(),
    )
    return JSONResponse(status_code=500, content=body.model_dump(exclude_none=True))


@app.get(
    "/debug",
    response_model=DebugResponse,
    tags=["system"],
    summary="Resolved Configuration",
    description="Raw and resolved check settings. Contains no credentials.",
)
def debug():
    config = load_check_config()
    return {
        "environment_variables": describe_environment(),
        "resolved": {
            **config.model_dump(),
            "target_url": config.target_url,
            "configured": _is_configured(config),
        },
        "schedule": schedule_window.describe(),
        "scheduler_enabled": settings.SCHEDULER_ENABLED,
        "timestamp": utcnow_iso(),
    }
