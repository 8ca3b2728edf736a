"""
Logging setup.

All modules obtain loggers through setup_logger so handlers and levels are
configured once, from settings.
"""

import logging
import sys

from thirds.core.config import get_settings

_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
_configured = False


def _configure_root() -> None:
    global _configured
    if _configured:
        return
    settings = get_settings()
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(_FORMAT))
    root = logging.getLogger("thirds")
    root.addHandler(handler)
    root.setLevel(settings.LOG_LEVEL.upper())
    root.propagate = False
    _configured = True


def setup_logger(name: str) -> logging.Logger:
    """
    Get a logger under the application namespace.

    Args:
        name: Usually the caller's __name__

    Returns:
        Configured logger
    """
    _configure_root()
    if not name.startswith("thirds"):
        name = f"thirds.{name}"
    return logging.getLogger(name)


logger = setup_logger("thirds")
