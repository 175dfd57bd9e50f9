"""File logging for the interactive session.

The TUI owns stdout/stderr, so log records go to a rotating file under the
platform log directory instead of the terminal.
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from platformdirs import user_log_dir

APP_NAME = "whid"
LOG_FILENAME = "whid.log"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
DEFAULT_LOG_PATH = Path(user_log_dir(APP_NAME, appauthor=False)) / LOG_FILENAME


def resolve_level(level_name: str | None) -> int:
    """Map a level name such as ``"debug"`` to a logging level, defaulting to WARNING."""
    if not level_name:
        return logging.WARNING
    level = logging.getLevelName(level_name.strip().upper())
    return level if isinstance(level, int) else logging.WARNING


def configure_logging(level_name: str | None = None, log_path: Path | None = None) -> Path | None:
    """Attach a rotating file handler to the ``whid`` logger.

    Returns the log path, or ``None`` when the file could not be opened; in
    that case logging stays silent rather than breaking startup.
    """
    path = DEFAULT_LOG_PATH if log_path is None else log_path
    logger = logging.getLogger(APP_NAME)
    logger.setLevel(resolve_level(level_name))
    logger.propagate = False
    for handler in list(logger.handlers):
        if isinstance(handler, RotatingFileHandler):
            logger.removeHandler(handler)
            handler.close()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(path, maxBytes=2_000_000, backupCount=2, encoding="utf-8")
    except OSError:
        logger.addHandler(logging.NullHandler())
        return None
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    return path
