"""
Main FastAPI application.

This is the entry point for the API server.
"""

import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from contextlib import asynccontextmanager

from taskboard import __version__
from taskboard.core.config import settings
from taskboard.db.session import create_tables
from taskboard.errors import AppError, app_error_handler, validation_error_handler
from taskboard.routers import health, task

# UI routes
from taskboard.ui.routes import board as ui_board

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for the FastAPI app.
    
    - On startup: configure logging, create tables when enabled.
    - On shutdown: log and exit.
    """
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Starting %s...", settings.APP_NAME)
    if settings.CREATE_TABLES_ON_STARTUP:
        await create_tables()
    if not settings.ANTHROPIC_API_KEY:
        logger.warning("ANTHROPIC_API_KEY is not set; task extraction will fail until it is")
    
    yield  # The server runs while we're "yielded" here
    
    logger.info("Shutting down %s...", settings.APP_NAME)


# Create the FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    description="Extract tasks from free text with an LLM and manage them on a Kanban board",
    version=__version__,
    lifespan=lifespan,
)

app.add_exception_handler(AppError, app_error_handler)
app.add_exception_handler(RequestValidationError, validation_error_handler)

# Include routers (API endpoints)
app.include_router(health.router, tags=["Health"])
app.include_router(task.router)

# UI routes
app.include_router(ui_board.router)
