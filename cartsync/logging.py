"""
Logging setup for cartsync.

The root handler is installed on import so that every ``get_logger`` caller
logs from the start. ``.env`` is loaded first, so LOG_LEVEL and CARTSYNC_ENV
may live there. The app calls ``configure_logging`` again at startup; a second
call only re-applies the level.

Usage:
    from cartsync.logging import get_logger
    logger = get_logger(__name__)
    logger.info(f"Cart committed: {len(cart)} lines")
"""

import logging
import os
import sys
from functools import cache
from pathlib import Path

from cartsync.config import load_env

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
# Containers add their own timestamps
LOG_FORMAT_PRODUCTION = "[%(levelname)s] %(name)s: %(message)s"

# Third-party loggers that log every request at INFO
QUIET_LOGGERS = ("httpx", "httpcore")

_CONTROL_CHARS = str.maketrans({"\n": "\\n", "\r": "\\r", "\t": "\\t", "\x00": None})


def log_level_from_env(default: int = logging.INFO) -> int:
    """LOG_LEVEL as a logging level; unknown names fall back to ``default``."""
    name = os.environ.get("LOG_LEVEL", "").strip().upper()
    level = logging.getLevelName(name) if name else default
    return level if isinstance(level, int) else default


def configure_logging(env_file: Path | None = None) -> logging.Logger:
    """
    Load ``env_file`` (default: the project .env), then set up the root logger.

    Returns:
        The root logger
    """
    load_env(env_file)

    root = logging.getLogger()
    root.setLevel(log_level_from_env())

    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        production = os.environ.get("CARTSYNC_ENV") == "production"
        handler.setFormatter(logging.Formatter(LOG_FORMAT_PRODUCTION if production else LOG_FORMAT))
        root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    return root


configure_logging()


@cache
def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def _sanitize(value, limit: int, suffix: str = "") -> str:
    # Escaped control chars stop a request value from forging log lines (CWE-117)
    if value is None or value == "":
        return "N/A"
    text = str(value).translate(_CONTROL_CHARS)
    return text if len(text) <= limit else text[:limit] + suffix


def sanitize_id_for_logging(id_value: int | str | None) -> str:
    """Product id from a request: escaped, cut to 12 chars, "N/A" when missing."""
    return _sanitize(id_value, 12)


def sanitize_string_for_logging(value: str | None, max_length: int = 80) -> str:
    """Free text (API error bodies, messages): escaped and cut with "..."."""
    return _sanitize(value, max_length, "...")


__all__ = [
    "LOG_FORMAT",
    "LOG_FORMAT_PRODUCTION",
    "configure_logging",
    "get_logger",
    "log_level_from_env",
    "sanitize_id_for_logging",
    "sanitize_string_for_logging",
]
