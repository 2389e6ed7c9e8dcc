#!/usr/bin/env python
"""
Run the Lumen API server.

Usage:
    python run_api.py
    python run_api.py --reload  # Development mode
"""

import argparse
import logging

import uvicorn
from rich.logging import RichHandler

from shared.config import get_settings


def configure_logging(level: str) -> None:
    """Route all application logging through rich."""
    logging.basicConfig(
        level=level.upper(),
        format="%(name)s: %(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True)],
    )


def main():
    parser = argparse.ArgumentParser(description="Run Lumen API server")
    parser.add_argument("--reload", action="store_true", help="Enable auto-reload")
    parser.add_argument("--host", type=str, help="Host to bind to")
    parser.add_argument("--port", type=int, help="Port to bind to")
    args = parser.parse_args()

    settings = get_settings()
    configure_logging(settings.log_level)

    uvicorn.run(
        "api.app:app",
        host=args.host or settings.host,
        port=args.port or settings.port,
        reload=args.reload or settings.reload,
        log_config=None,
    )


if __name__ == "__main__":
    main()
