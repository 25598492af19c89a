"""
FastAPI Application Entry Point

Integrates:
  - Woop relay route (/)
  - Health checks
  - Middleware for logging & error handling

Run: uvicorn main:app --host 0.0.0.0 --port 8080
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from config import get_config
from webhook.dispatcher import get_dispatcher
from webhook.routes import router as woop_router

# Setup logging
logging.basicConfig(
    level=get_config().log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan: startup and shutdown handlers.
    """
    # Startup: configuration is loaded once here and never re-read
    config = get_dispatcher().config
    logger.info("=" * 60)
    logger.info("Woop webhook starting up...")
    logger.info(f"Device backend: {config.device_backend}")
    logger.info(f"Alert machine: {config.alert_machine_uri}")
    logger.info(f"Environment: {config.environment}")
    missing = config.missing_keys()
    if missing:
        logger.warning(f"Missing required environment variables: {', '.join(missing)}")
    logger.info("=" * 60)

    yield

    # Shutdown
    logger.info("Woop webhook shutting down...")


# Create FastAPI app
app = FastAPI(
    title="Woop Webhook",
    description="Relays strobe, buzzer and lighting commands to woop machines",
    version="1.0.0",
    lifespan=lifespan,
)


# Middleware for logging
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all requests."""
    logger.debug(f"{request.method} {request.url.path}")
    try:
        response = await call_next(request)
        return response
    except Exception as e:
        logger.error(f"Request error: {str(e)}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )


# Include routers
app.include_router(woop_router)


# Health check endpoints
@app.get("/health/live")
async def health_live():
    """Live health check (Kubernetes liveness probe)."""
    return {"status": "alive"}


@app.get("/health/ready")
async def health_ready():
    """Readiness health check (Kubernetes readiness probe)."""
    missing = get_dispatcher().config.missing_keys()
    if missing:
        return JSONResponse(
            status_code=503,
            content={"status": "not_ready", "missing": missing},
        )
    return {"status": "ready"}


@app.get("/config/info")
async def config_info():
    """Get non-sensitive configuration info."""
    config = get_dispatcher().config
    return {
        "environment": config.environment,
        "device_backend": config.device_backend,
        "uri_suffix": config.uri_suffix,
        "alert_machine_uri": config.alert_machine_uri,
        "connect_retries": config.connect_retries,
    }


if __name__ == "__main__":
    import uvicorn

    config = get_config()
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=config.port,
        reload=False,
    )
