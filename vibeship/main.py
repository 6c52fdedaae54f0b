"""Main FastAPI application."""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from vibeship import __version__
from vibeship.core.config import settings
from vibeship.core.errors import VibeshipError, vibeship_error_handler
from vibeship.core.logging import configure_logging
from vibeship.core.storage.database import init_db, close_db
from vibeship.core.storage.screenshot_storage import get_screenshot_storage
from vibeship.api.routes import ai_instructions, github, owner, project_api, public, webhooks

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    configure_logging(settings.log_level)
    logger.info("Initializing database...")
    await init_db()
    logger.info("Database initialized successfully")

    yield

    # Shutdown
    logger.info("Closing database connections...")
    await close_db()
    logger.info("Application shutdown complete")


# Create FastAPI app
app = FastAPI(
    title="VibeShip Backend",
    description="Project tracking API for AI coding assistants",
    version=__version__,
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

app.add_exception_handler(VibeshipError, vibeship_error_handler)

# Include routers
app.include_router(webhooks.router, prefix="/api")
app.include_router(project_api.router, prefix="/api")
app.include_router(ai_instructions.router, prefix="/api")
app.include_router(owner.router, prefix="/api")
app.include_router(github.router, prefix="/api")
app.include_router(public.router, prefix="/api")

# Uploaded screenshots
app.mount(
    "/screenshots",
    StaticFiles(directory=get_screenshot_storage().base_path),
    name="screenshots",
)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "VibeShip Backend",
        "version": __version__,
        "status": "running",
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "vibeship.main:app",
        host=settings.host,
        port=settings.port,
        reload=True,
    )
