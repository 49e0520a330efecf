"""Cashflow API — Main entry point."""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from cashflow.config import settings
from cashflow.core.database import async_session_factory, engine
from cashflow.core.middleware import RequestLoggingMiddleware

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown events."""
    logger.info("Starting Cashflow API", env=settings.app_env)
    yield
    logger.info("Shutting down Cashflow API")
    await engine.dispose()


app = FastAPI(
    title="Cashflow API",
    description="Expense thresholds, alerts and monthly statistics",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    redirect_slashes=False,
)

# ── Middleware ─────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)


# ── Health Check ──────────────────────────────────
@app.get("/health", tags=["system"])
async def health_check():
    """Liveness probe — always returns healthy if the process is running."""
    return {"status": "healthy", "version": "0.1.0"}


@app.get("/ready", tags=["system"])
async def readiness_check():
    """Readiness probe — checks DB connectivity."""
    checks = {"database": "unknown", "api": "ok"}
    try:
        async with async_session_factory() as session:
            await session.execute(text("SELECT 1"))
            checks["database"] = "ok"
    except Exception as e:
        checks["database"] = f"error: {e}"
        return {"status": "degraded", "checks": checks}

    return {"status": "ready", "checks": checks}


# ── API Routes ────────────────────────────────────
from cashflow.api.v1 import expenses, stats, thresholds  # noqa: E402

app.include_router(stats.router, prefix="/api/v1/stats", tags=["stats"])
app.include_router(thresholds.router, prefix="/api/v1/thresholds", tags=["thresholds"])
app.include_router(expenses.router, prefix="/api/v1/expenses", tags=["expenses"])
