"""
EduNexus FastAPI Application Entry Point.

Run with: uvicorn edunexus.main:app --reload
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from edunexus.access import open_store
from edunexus.api.routes import (
    accounts,
    admin,
    auth,
    groups,
    messages,
    settings as settings_routes,
    sync,
    tickets,
)
from edunexus.config import get_settings, sanitize_error
from edunexus.errors import EduNexusError, StoreConnectionError

settings = get_settings()

logging.getLogger("edunexus").setLevel(settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager for startup/shutdown."""
    # Startup
    app.state.store = await open_store(settings.database_url)
    logger.info("Store open at %s", app.state.store.engine.url)
    yield
    # Shutdown
    await app.state.store.close()


app = FastAPI(
    title=settings.app_name,
    description="Educational chat platform with an AI tutor",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(EduNexusError)
async def edunexus_error_handler(request: Request, exc: EduNexusError) -> JSONResponse:
    """Map domain errors to their status code."""
    if isinstance(exc, StoreConnectionError):
        detail = sanitize_error(exc.__cause__ or exc, generic_message=exc.message)
    else:
        detail = exc.message
    return JSONResponse(status_code=exc.status_code, content={"detail": detail})


# Include routers
app.include_router(auth.router)
app.include_router(accounts.router)
app.include_router(settings_routes.router)
app.include_router(admin.router)
app.include_router(groups.router)
app.include_router(messages.router)
app.include_router(tickets.router)
app.include_router(sync.router)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}
