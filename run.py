"""Entry point for the StyleDecor API server.

This script serves the FastAPI application with Uvicorn.  It is
intended to be executed from the project root, for example under
Docker or a process manager where you only specify a single Python
file to run.

Configuration such as ACCESS_TOKEN_SECRET, DATABASE_URL,
STRIPE_SECRET_KEY and PORT is read from the environment or from a
`.env` file in the same directory.

Usage:
    python run.py
"""
import asyncio
import logging

from uvicorn import Config, Server

from styledecor_api.app.core.config import settings
from styledecor_api.app.main import app


async def main() -> None:
    """Serve the API until interrupted."""
    config = Config(app=app, host=settings.host, port=settings.port, reload=False, log_level=settings.log_level.lower())
    server = Server(config)
    logging.getLogger(__name__).info("StyleDecor server running on http://%s:%s", settings.host, settings.port)
    await server.serve()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        pass
