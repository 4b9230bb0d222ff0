"""FastAPI application for SurfSight batch device operations.

This is the main entry point for the device operations API server.
"""

import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..api.error_sanitizer import sanitize_error_message
from ..api.exceptions import (
    APIError,
    AuthenticationError,
    InvalidInputError,
    NetworkError,
    SurfsightError,
)
from ..api.session import SessionStore
from .api.auth_router import router as auth_router
from .api.dependencies import close_surfsight, get_session_store, init_surfsight
from .api.router import router

load_dotenv()

# Configure logging
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager.

    Handles startup and shutdown events:
    - Startup: Initialize the SurfSight client and session store
    - Shutdown: Drop sessions and release the client
    """
    logger.info("Starting SurfSight Device Ops API...")

    try:
        await init_surfsight()
    except SurfsightError as e:
        logger.error(f"Failed to initialize SurfSight client: {e}")
        raise

    yield

    logger.info("Shutting down SurfSight Device Ops API...")
    await close_surfsight()


# Create FastAPI application
app = FastAPI(
    title="SurfSight Device Ops API",
    description="""
    Batch operations on SurfSight dashcam devices, keyed by IMEI.

    ## Features

    - **Login**: Authenticate once with a SurfSight account; the token stays server-side
    - **Validate**: Look up the billing status of each device
    - **Billing**: Set one billing status on a list of devices in a single call
    - **Quality**: Set the data-quality profile of each device

    ## Errors

    Every error response has the shape `{"error": "<message>"}`.
    """,
    version="1.0.0",
    lifespan=lifespan,
)

# Configure CORS
cors_origins = os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in cors_origins if origin.strip()],
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Accept"],
)

# Include routers
app.include_router(auth_router)
app.include_router(router)


# ========== Error Handlers ==========


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Render HTTPException as {"error": ...}."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Request bodies that do not parse are a 400, not a 422."""
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
    else:
        message = "Invalid request body."
    logger.warning(f"Rejected {request.method} {request.url.path}: {message}")
    return _error(400, message)


@app.exception_handler(SurfsightError)
async def surfsight_exception_handler(request: Request, exc: SurfsightError):
    """Fallback for domain errors that escape a route."""
    if isinstance(exc, InvalidInputError):
        status_code = 400
    elif isinstance(exc, AuthenticationError):
        status_code = 401
    elif isinstance(exc, APIError):
        status_code = exc.status_code
    elif isinstance(exc, NetworkError):
        status_code = 502
    else:
        status_code = 500
    logger.error(f"{exc.code} on {request.method} {request.url.path}: {exc}")
    return _error(status_code, sanitize_error_message(exc.message))


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return _error(500, sanitize_error_message(str(exc)) or "Internal server error")


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "SurfSight Device Ops API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
    }


@app.get("/health")
async def health(store: SessionStore = Depends(get_session_store)):
    """Global health check with the number of live sessions."""
    return {"status": "healthy", "sessions": store.active_count}


# Entry point for running with uvicorn
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.surfsight.batch.app:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "3000")),
        reload=True,
    )
