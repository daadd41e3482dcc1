"""
FastAPI Application Entry Point.

This is the main application file for the Zap Shift Backend.
"""

import logging
from contextlib import asynccontextmanager

import httpx
import uvicorn
from fastapi import FastAPI, Depends
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from zapshift.app.api.router import router as api_router
from zapshift.app.core.config import settings
from zapshift.app.core.dependencies import get_store
from zapshift.app.core.exceptions import (
    AppException,
    app_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    generic_exception_handler
)
from zapshift.app.core.identity import build_identity_verifier
from zapshift.app.core.observability import ObservabilityMiddleware, configure_logging
from zapshift.app.db.mongo import DocumentStore
from zapshift.app.services.checkout import StripeCheckoutClient

configure_logging(settings.log_level)
logger = logging.getLogger("zapshift")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for application startup/shutdown.

    1. Connects the document store and ensures unique indexes.
    2. Builds the shared HTTP client, checkout client and identity verifier.
    3. Closes both connections on shutdown.
    """
    store = DocumentStore.from_settings(settings)
    await store.ensure_indexes()
    http_client = httpx.AsyncClient(timeout=settings.http_timeout_seconds)

    app.state.store = store
    app.state.checkout = StripeCheckoutClient.from_settings(settings, http_client)
    app.state.identity_verifier = build_identity_verifier(settings, http_client)
    logger.info("%s connected to database %s", settings.app_name, settings.database_name)
    yield
    await http_client.aclose()
    await store.close()


# Initialize FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.api_version,
    debug=settings.debug,
    description="Parcel delivery coordination backend",
    lifespan=lifespan,
)

app.add_middleware(ObservabilityMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register global exception handlers
app.add_exception_handler(AppException, app_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)


@app.get("/", tags=["Root"], response_class=PlainTextResponse)
async def root():
    """Liveness string."""
    return "Zap Shift Backend is Running"


@app.get("/health", tags=["Health"])
async def health_check(store: DocumentStore = Depends(get_store)):
    """
    Health check endpoint.

    Returns:
        dict: Status, application information and database reachability
    """
    database_ok = await store.ping()
    return {
        "status": "healthy" if database_ok else "degraded",
        "app_name": settings.app_name,
        "version": settings.api_version,
        "database": "connected" if database_ok else "unreachable",
    }


app.include_router(api_router, prefix=settings.api_prefix)


def run():
    """Console entry point: serve the app with uvicorn."""
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
