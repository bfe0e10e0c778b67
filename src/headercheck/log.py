from __future__ import annotations

import logging

from src.headercheck.config import get as get_config

_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"


def get_logger(name: str) -> logging.Logger:
    """Return a module logger, attaching the shared handler on the package root once."""
    root = logging.getLogger("src.headercheck")
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(fmt=_FORMAT, datefmt=_DATEFMT))
        root.addHandler(handler)
        root.setLevel(str(get_config("logging.level", "INFO")).upper())
    return logging.getLogger(name)
