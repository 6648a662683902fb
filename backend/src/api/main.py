"""FastAPI application main entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv

load_dotenv()

from .middleware import register_error_handlers
from .routes import directory, graph, profiles, system
from ..services.config import get_config

logger = logging.getLogger(__name__)

system.install_log_capture()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan handler to report configuration on startup."""
    config = get_config()
    if config.sheets_configured:
        logger.info("Profile sheet configured (tab %s)", config.sheet_name)
    else:
        logger.warning("Google Sheets credentials missing; directory will be empty")
    yield
    logger.info("Shutting down")


app = FastAPI(
    title="du.network API",
    description="Directory of student builders backed by a Google Sheet",
    version="0.1.0",
    lifespan=lifespan,
)

config = get_config()

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(config.cors_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

app.include_router(profiles.router, tags=["profiles"])
app.include_router(directory.router, tags=["directory"])
app.include_router(graph.router, tags=["graph"])
app.include_router(system.router, tags=["system"])


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


__all__ = ["app"]
