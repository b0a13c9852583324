"""Entry point for the Book Catalog API.

Serves the FastAPI application with Uvicorn.  Configuration is read
from environment variables; ``DATABASE_URL`` and ``SECRET_KEY`` are
required and the process exits if either is missing.

Usage:
    DATABASE_URL=catalog.db SECRET_KEY=... python run.py
"""
import asyncio
import logging
import os

from uvicorn import Config, Server


async def run_api() -> None:
    """Start the API using Uvicorn.

    Host and port are read from environment variables ``API_HOST`` and
    ``API_PORT``.  Defaults are ``0.0.0.0`` and ``8000``.
    """
    from book_catalog_api.app.main import app

    host = os.getenv("API_HOST", "0.0.0.0")
    port = int(os.getenv("API_PORT", "8000"))
    config = Config(app=app, host=host, port=port, reload=False, log_level="info")
    server = Server(config)
    await server.serve()


def main() -> None:
    try:
        asyncio.run(run_api())
    except (KeyboardInterrupt, SystemExit):
        logging.getLogger(__name__).info("Shutting down")


if __name__ == "__main__":
    main()
