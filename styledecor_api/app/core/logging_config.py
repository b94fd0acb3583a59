"""
Process logging for the StyleDecor API.

``setup_logging`` takes the application ``Settings`` and attaches a
console handler and, when ``LOG_FILE`` is set, a file handler to the
root logger.  ``DEBUG=true`` forces the ``DEBUG`` level regardless of
``LOG_LEVEL``.  Handlers installed here are tagged, so calling it again
(another ``create_app`` in the same process) only adjusts the level.
"""

import logging
from pathlib import Path

from .config import Settings


LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _level_for(settings: Settings) -> int:
    if settings.debug:
        return logging.DEBUG
    level = logging.getLevelName(settings.log_level.upper())
    return level if isinstance(level, int) else logging.INFO


def _tag(handler: logging.Handler) -> logging.Handler:
    handler.set_name("styledecor")
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    return handler


def setup_logging(settings: Settings) -> None:
    """Configure the root logger from ``settings``.

    The log file's directory is created when missing.
    """
    root = logging.getLogger()
    root.setLevel(_level_for(settings))
    if any(handler.get_name() == "styledecor" for handler in root.handlers):
        return

    root.addHandler(_tag(logging.StreamHandler()))
    if settings.log_file:
        log_path = Path(settings.log_file).resolve()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        root.addHandler(_tag(logging.FileHandler(log_path, encoding="utf-8")))
    logging.getLogger(__name__).debug("Logging configured at %s", logging.getLevelName(root.level))
