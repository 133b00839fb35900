import logging
import traceback
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from fleetwatch.api.routes import router
from fleetwatch.config import VERSION, settings
from fleetwatch.modules.dashboard_view import load_map_config
from fleetwatch.modules.runtime import DashboardRuntime
from fleetwatch.schemas.error import ErrorResponse

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start the live dashboard activities for the lifetime of the server."""
    load_map_config()
    runtime = DashboardRuntime()
    await runtime.start()
    app.state.runtime = runtime
    try:
        yield
    finally:
        await runtime.stop()
        app.state.runtime = None


app = FastAPI(
    title="FleetWatch",
    description=(
        "Live fleet monitoring dashboard: current boat positions, distress "
        "alerts, historical tracks and local weather."
    ),
    version=VERSION,
    lifespan=lifespan,
)

# CORS - origins from settings (supports comma-separated env var)
cors_origins = [o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router, prefix="/api/v1")


# ── Structured error handlers ─────────────────────────────────────────────────

@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    return JSONResponse(status_code=422, content=ErrorResponse(error="Validation error", detail=str(exc)).model_dump())


@app.exception_handler(Exception)
async def general_error_handler(request: Request, exc: Exception):
    logger.error("Unhandled exception on %s %s:\n%s", request.method, request.url.path, traceback.format_exc())
    return JSONResponse(status_code=500, content=ErrorResponse(error="Internal server error", detail="An unexpected error occurred.").model_dump())


@app.get("/health")
def health() -> dict:
    return {"status": "ok", "version": VERSION}
