"""
Message Board - attachment-aware message API
============================================

Builds the shared FastAPI application: logging, middleware, the generic
error handler and the message/attachment routers.
"""

import logging
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import config
from logging_utils import setup_logging
from messages_router import get_message_store, router as messages_router, uploads_router

# Setup logging
setup_logging(config.LOG_LEVEL)

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Message Board",
    description="Message board backend with validated file attachments",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log method, path, status and duration of every request."""
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info("%s %s -> %d (%.1f ms)", request.method, request.url.path, response.status_code, elapsed_ms)
    return response


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Map anything unanticipated to a generic 500."""
    logger.exception("Unhandled error in request %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": "Internal server error"},
    )


# Routers
app.include_router(messages_router)
app.include_router(uploads_router)


@app.on_event("startup")
async def startup_event():
    """Create the data directory, uploads directory and message document."""
    get_message_store().ensure_layout()
    logger.info("Storage ready at %s", config.STORAGE.data_path.resolve())
