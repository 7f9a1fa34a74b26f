"""
Main FastAPI application entry point.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import settings
from .database import init_db
from .logging_config import configure_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.
    """
    configure_logging(settings.log_level)
    logger.info("Starting Job Board API (database: %s)", settings.database_url)

    init_db()
    logger.info("Database initialized")

    yield

    logger.info("Shutting down Job Board API")


# Create FastAPI application
app = FastAPI(
    title="Job Board API",
    description="Scoped, filtered and paginated job and application listings",
    version="0.1.0",
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "name": "Job Board API",
        "version": "0.1.0",
        "docs": "/docs",
        "status": "running",
    }


@app.get("/livez")
async def liveness():
    """Liveness probe - zero dependencies, confirms process is responsive."""
    return {"status": "ok"}


# Include API routers
from .api.v1.router import router as api_router  # noqa: E402
app.include_router(api_router, prefix=settings.api_prefix)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app.main:app", host="0.0.0.0", port=8000, reload=True)
