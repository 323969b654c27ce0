"""
Main FastAPI application for the gapscope backend.
Handles CORS, request logging middleware, lifespan events, and router registration.
"""
import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from gapscope.config import settings
from gapscope.routers import gaps, health
from gapscope.services.aggregator import InvalidCorpusError
from gapscope.services.narrative import get_narrative_service

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Startup helpers
# ---------------------------------------------------------------------------

async def _check_narrative_service() -> bool:
    """
    Verify the narrative backend is reachable.
    Never raises: analyses still work without it, using the fallback summary.
    """
    service = get_narrative_service()
    try:
        ok = await service.check_health()
    except Exception as exc:
        logger.error("✗ Narrative service check failed (%s)", exc)
        return False
    if ok:
        logger.info("✓ Narrative service reachable (%s)", type(service).__name__)
    else:
        logger.warning(
            "⚠ Narrative service unavailable (%s), summaries will use the fallback text",
            type(service).__name__,
        )
    return ok


def _check_corpus() -> None:
    if not settings.CORPUS_PATH:
        logger.info("  No CORPUS_PATH configured, GET /api/gaps is disabled")
    elif Path(settings.CORPUS_PATH).is_file():
        logger.info("✓ Corpus file: %s", Path(settings.CORPUS_PATH).resolve())
    else:
        logger.warning("⚠ Corpus file not found: %s", settings.CORPUS_PATH)


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown event handler."""
    logger.info("=" * 60)
    logger.info("  Starting gapscope backend …")
    logger.info("=" * 60)

    await _check_narrative_service()
    _check_corpus()

    logger.info("=" * 60)
    logger.info("  gapscope ready on http://%s:%d", settings.HOST, settings.PORT)
    logger.info("  Swagger UI : http://%s:%d/docs", settings.HOST, settings.PORT)
    logger.info("  Health     : http://%s:%d/api/health", settings.HOST, settings.PORT)
    logger.info("=" * 60)

    yield  # ← server is running

    logger.info("✓ Shutdown complete.")


# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------

app = FastAPI(
    title="gapscope API",
    description=(
        "**gapscope** — research gap analysis for space-biology publication corpora.\n\n"
        "Finds under-studied organisms, research areas, methodologies, mission "
        "durations and environments, rates their severity and scores overall "
        "coverage.\n\n"
        "Key endpoints:\n"
        "- `POST /api/gaps/analyze` — analyse a posted corpus\n"
        "- `GET  /api/gaps/` — analyse the configured corpus file\n"
        "- `POST /api/gaps/research-areas/{area}` — gaps for one research area\n"
        "- `POST /api/gaps/organisms/{organism}` — gaps for one organism\n"
    ),
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)


# ---------------------------------------------------------------------------
# CORS
# ---------------------------------------------------------------------------

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_allowed_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Request / response logging middleware
# ---------------------------------------------------------------------------

@app.middleware("http")
async def log_requests(request: Request, call_next):
    """
    Log every request with method, path, status code, and elapsed time.
    Attaches an ``X-Process-Time`` header (milliseconds) to every response.
    """
    t0 = time.monotonic()
    response = await call_next(request)
    elapsed_ms = round((time.monotonic() - t0) * 1000, 2)

    # Skip noisy health-check polling from the frontend
    if request.url.path not in ("/api/health/", "/api/health", "/"):
        logger.info(
            "%s %s → %d  (%.2f ms)",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )

    response.headers["X-Process-Time"] = f"{elapsed_ms}ms"
    return response


# ---------------------------------------------------------------------------
# Exception handlers
# ---------------------------------------------------------------------------

@app.exception_handler(InvalidCorpusError)
async def invalid_corpus_handler(request: Request, exc: InvalidCorpusError):
    """Surface a malformed corpus that escaped a router as a client error."""
    logger.warning("Invalid corpus on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": f"Invalid corpus: {exc}", "path": str(request.url.path)},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Return a structured JSON error for any unhandled exception."""
    logger.error(
        "Unhandled exception on %s %s: %s",
        request.method,
        request.url.path,
        exc,
        exc_info=True,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "detail": "Internal server error",
            "error": str(exc),
            "path": str(request.url.path),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    )


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------

app.include_router(health.router, prefix="/api/health", tags=["Health"])
app.include_router(gaps.router,   prefix="/api/gaps",   tags=["Gaps"])


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------

@app.get("/", tags=["Root"], include_in_schema=False)
async def root():
    """API root: basic service info."""
    return {
        "name": "gapscope API",
        "version": "0.1.0",
        "description": "Research Gap Analysis Backend",
        "docs": "/docs",
        "health": "/api/health",
        "endpoints": {
            "analyze": "/api/gaps/analyze",
            "corpus": "/api/gaps",
            "research_areas": "/api/gaps/research-areas/{area}",
            "organisms": "/api/gaps/organisms/{organism}",
            "categories": "/api/gaps/categories/{name}",
        },
    }


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "gapscope.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=True,
        log_level="info",
    )
