"""Centralized logging configuration."""
from __future__ import annotations

import logging
import sys

_FORMAT = "%(asctime)s  %(levelname)-8s  %(name)s  %(message)s"
_DATE_FMT = "%Y-%m-%d %H:%M:%S"
_configured = False


def get_logger(name: str) -> logging.Logger:
    """Return a named logger under the jobmarket hierarchy."""
    return logging.getLogger(name)


def configure_logging(level: str = "INFO") -> None:
    """Attach a console handler to the root logger once; later calls only adjust the level."""
    global _configured
    resolved = getattr(logging, level.upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(resolved)

    if _configured or root.handlers:
        _configured = True
        return

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(resolved)
    console.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATE_FMT))
    root.addHandler(console)
    _configured = True
