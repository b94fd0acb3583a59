"""
Main entrypoint for the StyleDecor API.

This module assembles the FastAPI application, sets up logging and
includes versioned routers.  ``create_app`` builds and configures the
app, which is then instantiated at module import time as ``app``, so
it can be served directly::

    uvicorn styledecor_api.app.main:app --reload

Process-wide resources (the token signer, the database handle and the
payment client) are created in ``lifespan`` when the server starts and
released when it stops.  A missing signing secret aborts startup.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.v1.router import router as v1_router
from .core.config import Settings, settings as default_settings
from .core.db import Database
from .core.errors import register_error_handlers
from .core.logging_config import setup_logging
from .core.security import TokenService
from .services.payment_service import PaymentService


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    config: Settings = app.state.settings
    # Raises ConfigurationError for a missing secret or unsupported algorithm.
    app.state.tokens = TokenService(
        config.secret_key, config.access_token_expire_minutes, config.algorithm
    )
    db = Database.from_settings(config)
    db.init()
    app.state.db = db
    if getattr(app.state, "payments", None) is None:
        app.state.payments = PaymentService.from_settings(config)
    logger.info("%s %s started", config.project_name, config.api_version)
    try:
        yield
    finally:
        db.close()
        logger.info("%s stopped", config.project_name)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Create and configure a FastAPI application.

    Parameters
    ----------
    settings : Optional[Settings]
        Configuration to use.  Defaults to the values read from the
        environment at import time.

    Returns
    -------
    FastAPI
        A configured FastAPI application instance.
    """
    config = settings or default_settings
    setup_logging(config)

    app = FastAPI(
        title=config.project_name,
        version=config.api_version,
        debug=config.debug,
        lifespan=lifespan,
    )
    app.state.settings = config

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(app)

    # The public paths are unversioned; v1 is the only version.
    app.include_router(v1_router)

    return app


# Create the application instance at import time so that tools such as
# uvicorn can discover it without calling create_app manually.
app = create_app()
