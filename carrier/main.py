"""
Carrier Challenges - Main FastAPI Application

Progress reporting and leaderboards for ham radio challenges.
"""

import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from .db import init_db, SessionLocal
from .api import progress_router, leaderboard_router
from .config import LOG_LEVEL
from .errors import CarrierError
from . import __version__

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("carrier")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize database on startup."""
    init_db()
    logger.info("Carrier Challenges v%s started", __version__)
    yield


# Create app
app = FastAPI(
    title="Carrier Challenges",
    description="Progress scoring and leaderboards for ham radio challenges.",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# CORS - allow all for API access
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Request timing middleware
@app.middleware("http")
async def add_timing_header(request: Request, call_next):
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = f"{process_time:.3f}s"
    return response


# Exception handlers
@app.exception_handler(CarrierError)
async def carrier_error_handler(request: Request, exc: CarrierError):
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "status": "error",
            "error_code": exc.error_code,
            "message": exc.message,
        }
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={
            "status": "error",
            "error_code": "INTERNAL_ERROR",
            "message": "An unexpected error occurred",
        }
    )


# Include routers
app.include_router(progress_router)
app.include_router(leaderboard_router)


# Root endpoint
@app.get("/")
async def root():
    return {
        "name": "Carrier Challenges",
        "version": __version__,
        "docs": "/docs",
        "endpoints": {
            "progress": "/challenges/{id}/progress",
            "leaderboard": "/challenges/{id}/leaderboard",
            "snapshot": "/challenges/{id}/snapshot",
        },
    }


# Health check
@app.get("/health")
def health():
    """Health check endpoint for monitoring."""
    health_status = {
        "status": "healthy",
        "version": __version__,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }

    # Check database connectivity
    db = SessionLocal()
    try:
        db.execute(text("SELECT 1"))
        health_status["database"] = "connected"
    except Exception as e:
        health_status["status"] = "degraded"
        health_status["database"] = f"error: {str(e)}"
    finally:
        db.close()

    return health_status


# For direct running
if __name__ == "__main__":
    import uvicorn
    from .config import API_HOST, API_PORT

    uvicorn.run(app, host=API_HOST, port=API_PORT)
