"""
Simple configuration management.

The ``Settings`` dataclass is populated from environment variables by
``Settings.from_env``.  A ``.env`` file in the working directory is
loaded first when present, so local development does not require
exporting variables by hand.  All values are read once at process
start; nothing re-reads the environment during a run.
"""

import os
from dataclasses import dataclass, field
from typing import List

from dotenv import load_dotenv


def _as_bool(value: str) -> bool:
    return value.lower() in {"1", "true", "yes"}


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = "StyleDecor API"
    api_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"
    log_file: str = ""

    # Signing secret for session credentials.  An empty value is fatal
    # at startup (see ``TokenService``).
    secret_key: str = ""
    access_token_expire_minutes: int = 60
    # Only HS256 is implemented; anything else fails at startup.
    algorithm: str = "HS256"

    # Path to the SQLite database file.  Relative paths are resolved
    # against the project root by ``core.db``.
    database_url: str = "styledecor.db"
    # Seconds a connection waits on a locked database before giving up.
    db_timeout: float = 5.0

    # The one email that is granted ``admin`` on first registration.
    bootstrap_admin_email: str = "admin@styledecor.com"

    stripe_secret_key: str = ""
    stripe_api_base: str = "https://api.stripe.com"
    payment_currency: str = "usd"
    payment_timeout: float = 10.0

    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    host: str = "0.0.0.0"
    port: int = 5000

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the process environment (and ``.env``)."""
        load_dotenv()
        origins = os.getenv("CORS_ORIGINS", "*")
        return cls(
            project_name=os.getenv("PROJECT_NAME", cls.project_name),
            api_version=os.getenv("API_VERSION", cls.api_version),
            debug=_as_bool(os.getenv("DEBUG", "false")),
            log_level=os.getenv("LOG_LEVEL", cls.log_level),
            log_file=os.getenv("LOG_FILE", ""),
            secret_key=os.getenv("ACCESS_TOKEN_SECRET", ""),
            access_token_expire_minutes=int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60")),
            algorithm=os.getenv("ALGORITHM", cls.algorithm),
            database_url=os.getenv("DATABASE_URL", cls.database_url),
            db_timeout=float(os.getenv("DB_TIMEOUT", "5")),
            bootstrap_admin_email=os.getenv("BOOTSTRAP_ADMIN_EMAIL", cls.bootstrap_admin_email).lower(),
            stripe_secret_key=os.getenv("STRIPE_SECRET_KEY", ""),
            stripe_api_base=os.getenv("STRIPE_API_BASE", cls.stripe_api_base),
            payment_currency=os.getenv("PAYMENT_CURRENCY", cls.payment_currency),
            payment_timeout=float(os.getenv("PAYMENT_TIMEOUT", "10")),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
            host=os.getenv("HOST", cls.host),
            port=int(os.getenv("PORT", "5000")),
        )


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.
settings = Settings.from_env()
