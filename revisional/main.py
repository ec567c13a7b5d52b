"""FastAPI application entry point: wires the engine to HTTP.

Usage:
    python -m revisional.main
"""

from __future__ import annotations

import logging
import sys

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from revisional.api.routes import router
from revisional.calculators.validation import CalculationValidationError
from revisional.config import settings

# ── Logging setup ────────────────────────────────────────────────────

logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
    stream=sys.stdout,
)
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
)

logger = logging.getLogger(__name__)

# ── FastAPI app ──────────────────────────────────────────────────────

app = FastAPI(
    title="Revisional Engine API",
    description="Revisional calculations for contested loan, credit-card and mortgage contracts",
    version="0.1.0",
)
app.include_router(router)


@app.exception_handler(CalculationValidationError)
async def validation_error_handler(request: Request, exc: CalculationValidationError) -> JSONResponse:
    """Reject invalid contract terms with 422 and the machine-readable code."""
    logger.warning("Validation failed on %s: %s (%s)", request.url.path, exc.code, exc)
    return JSONResponse(
        status_code=422,
        content={"error": str(exc), "code": exc.code, "details": exc.details},
    )


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {
        "status": "ok",
        "environment": settings.environment,
    }


# ── Entry point ──────────────────────────────────────────────────────

if __name__ == "__main__":
    uvicorn.run(
        "revisional.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.environment == "development",
        log_level=settings.log_level.lower(),
    )
