"""Entry point for the User Service API.

Starts the FastAPI application with Uvicorn.  It is intended to be
executed from the project root, for example under Docker, where you
only specify a single Python file to run.

Configuration is read from environment variables (see
``user_service_api.app.core.config``): ``HOST`` and ``PORT`` choose the
listening address, ``DATABASE_URL`` the SQLite file and ``LOG_LEVEL``
the verbosity.

Usage:
    python run.py
"""
import asyncio
import logging

from uvicorn import Config, Server

from user_service_api.app.core.config import settings
from user_service_api.app.main import app


async def main() -> None:
    """Serve the API until interrupted."""
    config = Config(
        app=app,
        host=settings.host,
        port=settings.port,
        reload=False,
        log_level=settings.log_level.lower(),
    )
    server = Server(config)
    logging.getLogger(__name__).info("Starting %s on %s:%d", settings.project_name, settings.host, settings.port)
    await server.serve()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        pass
