"""
Entrypoint for the Message Board backend.
This file wires the FastAPI application together by importing the core package,
which initializes shared state and registers all routes.
"""

from __future__ import annotations

import argparse

import core  # noqa: F401  # Ensure route modules are imported for side effects
from core.app_state import app, config, logger  # noqa: F401


if __name__ == "__main__":
    import uvicorn

    parser = argparse.ArgumentParser(description="Message Board backend")
    parser.add_argument("--host", default=config.APP_HOST, help="Interface to bind")
    parser.add_argument("--port", type=int, default=config.APP_PORT, help="Port to listen on")
    parser.add_argument(
        "--reload",
        action="store_true",
        default=config.APP_RELOAD,
        help="Restart the server when source files change",
    )
    args = parser.parse_args()

    logger.info("Server is listening on %s:%d", args.host, args.port)
    uvicorn.run(
        "main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
    )
