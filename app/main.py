"""
FastAPI application for vaultgate.

Exposes the authorization orchestration engine over HTTP.

Usage:
    uvicorn app.main:app --reload --port 8081
"""

from fastapi import FastAPI
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from app.authz.routes import orchestration_router
from app.authz.routes import router as authz_router
from vaultgate_core.config import settings
from vaultgate_core.infrastructure.rate_limiter import limiter
from vaultgate_core.infrastructure.telemetry import TelemetryService, setup_telemetry
from vaultgate_core.logging import setup_logging

# Initialize logging
setup_logging()

# Initialize Telemetry (Tracing/Metrics)
setup_telemetry()

app = FastAPI(
    title="Vaultgate",
    description="Authorization orchestration for sensitive banking operations",
    version="1.0.0",
)

TelemetryService().instrument_app(app)

# Rate limiter setup
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

# Mount the authorization router under /authz prefix
app.include_router(authz_router, prefix="/authz", tags=["Authorization"])

# Mount the protected orchestration routes under /orchestration prefix
app.include_router(orchestration_router, prefix="/orchestration", tags=["Orchestration"])


@app.get("/health")
def health():
    """
    Health check endpoint.

    Returns:
        dict: Status and service information.
    """
    return {"status": "ok", "service": settings.SERVICE_NAME, "version": "1.0.0"}
